from typing import List
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidInputError
from app.models.message import Message
from app.models.product import Product
from app.models.user import User
from app.models.utils import utcnow
from app.schemas.notification import NotificationEvent
from app.services.conversations import get_conversation_for_participant
from app.services.notifications import emit_notification

logger = logging.getLogger(__name__)


def append_message(
    db: Session,
    conversation_id: str,
    sender: User,
    receiver_id: str,
    content: str,
) -> Message:
    """
    Guarda el mensaje, actualiza el puntero al último mensaje de la
    conversación y luego notifica al destinatario. Un fallo de la
    notificación no deshace ni el mensaje ni la conversación.
    """
    content = (content or "").strip()
    if not content:
        raise InvalidInputError("El contenido del mensaje no puede estar vacío")

    conversation = get_conversation_for_participant(db, conversation_id, sender.id)
    if not conversation.has_participant(receiver_id):
        raise InvalidInputError("El destinatario no participa en esta conversación")

    message = Message(
        conversation_id=conversation.id,
        sender_id=sender.id,
        receiver_id=receiver_id,
        product_id=conversation.product_id,
        content=content,
        is_read=False,
    )
    db.add(message)
    db.flush()

    conversation.last_message_id = message.id
    conversation.last_message_at = message.created_at or utcnow()
    db.add(conversation)
    db.commit()
    db.refresh(message)

    product = db.query(Product).filter(Product.id == conversation.product_id).first()
    product_title = product.title if product else "un producto"
    emit_notification(
        NotificationEvent(
            target_user_id=receiver_id,
            actor_user_id=sender.id,
            type="message",
            title="Nuevo mensaje",
            message=f'{sender.full_name or "Alguien"} te envió un mensaje sobre "{product_title}"',
            data={"conversation_id": conversation.id, "product_id": conversation.product_id},
            related_conversation_id=conversation.id,
            related_product_id=conversation.product_id,
            related_user_id=sender.id,
        )
    )

    return message


def list_messages(db: Session, conversation_id: str, user_id: str) -> List[Message]:
    """Mensajes en orden ascendente de creación; empate por orden de inserción."""
    conversation = get_conversation_for_participant(db, conversation_id, user_id)
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation.id)
        .order_by(Message.created_at.asc(), Message.sequence.asc())
        .all()
    )


def count_unread(db: Session, user_id: str) -> int:
    return (
        db.query(Message)
        .filter(Message.receiver_id == user_id, Message.is_read == False)  # noqa: E712
        .count()
    )


def mark_conversation_read(db: Session, conversation_id: str, user_id: str) -> int:
    """
    Marca como leídos los mensajes recibidos por el usuario en la
    conversación. Solo el destinatario puede cambiar `is_read`.
    """
    conversation = get_conversation_for_participant(db, conversation_id, user_id)
    updated = (
        db.query(Message)
        .filter(
            Message.conversation_id == conversation.id,
            Message.receiver_id == user_id,
            Message.is_read == False,  # noqa: E712
        )
        .update({Message.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
