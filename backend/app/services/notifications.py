"""
Emisor y bandeja de notificaciones.

El emisor es best-effort: `emit_notification` nunca lanza excepciones y la
operación que lo dispara (mensaje, favorito, actualización de producto) ya
está confirmada cuando se invoca. La bandeja se consulta por polling.
"""
from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.notification import Notification
from app.schemas.notification import NotificationEvent
from app.tasks.notifications import create_notification_task
from app.worker import celery as celery_app  # noqa: F401  registra la configuración de Celery

logger = logging.getLogger(__name__)


def emit_notification(event: NotificationEvent) -> bool:
    """
    Encola la creación de una notificación para `event.target_user_id`.

    Devuelve True si se despachó, False si se omitió o falló.
    """
    # Nunca se notifica a un usuario de sus propias acciones
    if event.actor_user_id is not None and event.target_user_id == event.actor_user_id:
        logger.debug(f"Notificación {event.type} omitida: el actor es el destinatario")
        return False

    try:
        payload = {
            "user_id": event.target_user_id,
            "type": event.type,
            "title": event.title,
            "message": event.message,
            "data": event.validated_data(),
            "related_product_id": event.related_product_id,
            "related_conversation_id": event.related_conversation_id,
            "related_user_id": event.related_user_id,
        }
        # Sin reintentos de publicación: un broker caído no debe bloquear la petición
        create_notification_task.apply_async(args=[payload], retry=False)
        return True
    except Exception as e:
        logger.error(f"Error al emitir notificación {event.type} para {event.target_user_id}: {e}")
        return False


def _clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.NOTIFICATIONS_DEFAULT_LIMIT
    return max(1, min(limit, settings.NOTIFICATIONS_MAX_LIMIT))


def list_notifications(db: Session, user_id: str, limit: Optional[int] = None) -> List[Notification]:
    """Notificaciones del usuario, más recientes primero."""
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.sequence.desc())
        .limit(_clamp_limit(limit))
        .all()
    )


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .count()
    )


def get_inbox(db: Session, user_id: str, limit: Optional[int] = None) -> Tuple[List[Notification], int]:
    return list_notifications(db, user_id, limit), unread_count(db, user_id)


def _get_owned(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notificación no encontrada")
    return notification


def mark_read(db: Session, notification_id: str, user_id: str, is_read: bool = True) -> Notification:
    notification = _get_owned(db, notification_id, user_id)
    notification.is_read = is_read
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    """Marca como leídas todas las notificaciones pendientes. Idempotente."""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated


def remove(db: Session, notification_id: str, user_id: str) -> None:
    notification = _get_owned(db, notification_id, user_id)
    db.delete(notification)
    db.commit()
