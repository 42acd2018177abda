from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Any, List

from app.api import deps
from app.core.exceptions import InvalidInputError, NotFoundError
from app.schemas.conversation import (
    ConversationCreate,
    ConversationCreateResponse,
    ConversationResponse,
    ConversationSummary,
)
from app.schemas.message import MessageResponse
from app.models.user import User
from app.services import conversations as conversation_service
from app.services.products import get_product

router = APIRouter()

@router.get("/", response_model=List[ConversationSummary])
def list_conversations(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Conversaciones del usuario, las de actividad más reciente primero.
    """
    summaries = []
    for conversation, unread in conversation_service.list_conversations(db, current_user.id):
        data = ConversationResponse.model_validate(conversation).model_dump()
        last_message = (
            MessageResponse.model_validate(conversation.last_message)
            if conversation.last_message
            else None
        )
        summaries.append(ConversationSummary(**data, last_message=last_message, unread_count=unread))
    return summaries

@router.post("/", response_model=ConversationCreateResponse)
def create_conversation(
    *,
    db: Session = Depends(deps.get_db),
    conversation_in: ConversationCreate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Crear (o reutilizar) la conversación con otro usuario sobre un producto.
    """
    if conversation_in.receiver_id == current_user.id:
        raise InvalidInputError("No puedes enviarte mensajes a ti mismo")

    get_product(db, conversation_in.product_id)

    receiver = db.query(User).filter(User.id == conversation_in.receiver_id).first()
    if not receiver or not receiver.is_active:
        raise NotFoundError("Destinatario no encontrado")

    conversation, created = conversation_service.get_or_create_conversation(
        db,
        {current_user.id, receiver.id},
        conversation_in.product_id,
    )
    return ConversationCreateResponse(
        conversation=ConversationResponse.model_validate(conversation),
        created=created,
    )

@router.get("/{conversation_id}", response_model=ConversationResponse)
def get_conversation(
    *,
    db: Session = Depends(deps.get_db),
    conversation_id: str,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    return conversation_service.get_conversation_for_participant(db, conversation_id, current_user.id)
