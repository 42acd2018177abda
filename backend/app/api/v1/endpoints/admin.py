from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Any

from app.api import deps
from app.core.exceptions import NotFoundError
from app.schemas.notification import NotificationEvent, SystemNotificationCreate
from app.models.user import User
from app.services.notifications import emit_notification

router = APIRouter()

@router.post("/notifications", status_code=status.HTTP_202_ACCEPTED)
def send_system_notification(
    *,
    db: Session = Depends(deps.get_db),
    notification_in: SystemNotificationCreate,
    current_admin: User = Depends(deps.get_current_admin),
) -> Any:
    """
    Enviar un aviso del sistema a un usuario (solo administradores).
    """
    target = db.query(User).filter(User.id == notification_in.user_id).first()
    if not target:
        raise NotFoundError("Usuario no encontrado")

    queued = emit_notification(
        NotificationEvent(
            target_user_id=target.id,
            actor_user_id=current_admin.id,
            type="system",
            title=notification_in.title,
            message=notification_in.message,
            data={"reason": notification_in.reason},
            related_user_id=current_admin.id,
        )
    )
    return {"queued": queued}
