# app/tasks/notifications.py
from typing import Any, Dict, Optional
from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.db.session import get_session
from app.models.notification import Notification

logger = logging.getLogger(__name__)

@shared_task(name="app.tasks.notifications.create_notification_task", ignore_result=True)
def create_notification_task(notification_data: Dict[str, Any]) -> Optional[str]:
    """
    Persiste una notificación. Sin reintentos: si falla se registra y se pierde.
    """
    db = get_session()
    try:
        notification = Notification(
            user_id=notification_data["user_id"],
            type=notification_data["type"],
            title=notification_data["title"],
            message=notification_data["message"],
            data=notification_data.get("data") or {},
            related_product_id=notification_data.get("related_product_id"),
            related_conversation_id=notification_data.get("related_conversation_id"),
            related_user_id=notification_data.get("related_user_id"),
        )
        db.add(notification)
        db.commit()
        logger.info(
            f"Notificación {notification.type} creada para {notification.user_id}"
        )
        return notification.id
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error al guardar notificación para {notification_data.get('user_id')}: {e}")
        return None
    finally:
        db.close()
