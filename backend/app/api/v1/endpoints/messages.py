from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Any, List

from app.api import deps
from app.schemas.message import (
    MarkConversationRead,
    MessageCreate,
    MessageResponse,
    UnreadCount,
    UpdatedCount,
)
from app.models.user import User
from app.services import messages as message_service

router = APIRouter()

@router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    *,
    db: Session = Depends(deps.get_db),
    message_in: MessageCreate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Enviar un mensaje dentro de una conversación.

    La notificación al destinatario se encola aparte; si falla, el mensaje
    sigue enviado.
    """
    return message_service.append_message(
        db,
        conversation_id=message_in.conversation_id,
        sender=current_user,
        receiver_id=message_in.receiver_id,
        content=message_in.content,
    )

@router.get("/", response_model=List[MessageResponse])
def get_messages(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    conversation_id: str = Query(..., description="ID de la conversación"),
) -> Any:
    """
    Mensajes de una conversación en orden cronológico.
    """
    return message_service.list_messages(db, conversation_id, current_user.id)

@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    return {"unread_count": message_service.count_unread(db, current_user.id)}

@router.patch("/read", response_model=UpdatedCount)
def mark_conversation_as_read(
    *,
    db: Session = Depends(deps.get_db),
    read_in: MarkConversationRead,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Marcar como leídos los mensajes recibidos en una conversación.
    """
    updated = message_service.mark_conversation_read(db, read_in.conversation_id, current_user.id)
    return {"updated_count": updated}
