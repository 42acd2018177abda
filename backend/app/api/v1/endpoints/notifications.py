from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Optional

from app.api import deps
from app.schemas.message import UpdatedCount
from app.schemas.notification import NotificationList, NotificationResponse, NotificationUpdate
from app.models.user import User
from app.services import notifications as notification_service

router = APIRouter()

@router.get("/", response_model=NotificationList)
def list_notifications(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    limit: Optional[int] = Query(None, ge=1, description="Número máximo de notificaciones"),
) -> Any:
    """
    Bandeja de notificaciones y contador de no leídas.

    El cliente consulta este endpoint periódicamente; no hay canal push.
    """
    notifications, unread = notification_service.get_inbox(db, current_user.id, limit)
    return {"notifications": notifications, "unread_count": unread}

@router.put("/mark-all-read", response_model=UpdatedCount)
def mark_all_notifications_read(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    return {"updated_count": notification_service.mark_all_read(db, current_user.id)}

@router.put("/{notification_id}", response_model=NotificationResponse)
def update_notification(
    *,
    db: Session = Depends(deps.get_db),
    notification_id: str,
    notification_in: NotificationUpdate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Marcar una notificación propia como leída (o no leída).
    """
    return notification_service.mark_read(
        db, notification_id, current_user.id, is_read=notification_in.is_read
    )

@router.delete("/{notification_id}")
def delete_notification(
    *,
    db: Session = Depends(deps.get_db),
    notification_id: str,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    notification_service.remove(db, notification_id, current_user.id)
    return {"message": "Notificación eliminada correctamente"}
