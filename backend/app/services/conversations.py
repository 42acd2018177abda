"""
Conversaciones entre dos usuarios sobre un producto.

La clave de conversación es función pura de los participantes (ordenados) y
del producto, y tiene restricción UNIQUE en base de datos: dos usuarios que
escriben a la vez sobre el mismo producto terminan en el mismo registro.
"""
from typing import Iterable, List, Optional, Tuple
import logging

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.models.conversation import Conversation
from app.models.message import Message

logger = logging.getLogger(__name__)


def conversation_key(participants: Iterable[str], product_id: str) -> str:
    """
    Clave determinista e independiente del orden: `a-b-producto` con a < b.
    """
    sorted_participants = sorted(str(p) for p in set(participants))
    if len(sorted_participants) != 2:
        raise InvalidInputError("Una conversación necesita exactamente dos participantes distintos")
    return f"{'-'.join(sorted_participants)}-{product_id}"


def find_conversation_by_key(db: Session, key: str) -> Optional[Conversation]:
    return db.query(Conversation).filter(Conversation.conversation_key == key).first()


def get_or_create_conversation(
    db: Session, participants: Iterable[str], product_id: str
) -> Tuple[Conversation, bool]:
    """
    Devuelve (conversación, creada). Si otra petición crea la misma
    conversación entre la búsqueda y el insert, se relee por clave.
    """
    participants = set(participants)
    key = conversation_key(participants, product_id)

    existing = find_conversation_by_key(db, key)
    if existing:
        return existing, False

    first, second = sorted(participants)
    conversation = Conversation(
        participant_one_id=first,
        participant_two_id=second,
        product_id=product_id,
        conversation_key=key,
        is_active=True,
    )
    try:
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        logger.info(f"Conversación {conversation.id} creada con clave {key}")
        return conversation, True
    except IntegrityError:
        db.rollback()
        logger.info(f"Conversación con clave {key} creada concurrentemente, releyendo")

    existing = find_conversation_by_key(db, key)
    if existing:
        return existing, False
    raise ConflictError()


def get_conversation_for_participant(db: Session, conversation_id: str, user_id: str) -> Conversation:
    """
    Devuelve la conversación solo si el usuario participa en ella.

    "No existe" y "no eres participante" producen el mismo error para no
    revelar la existencia de conversaciones ajenas.
    """
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation or not conversation.has_participant(user_id):
        raise NotFoundError("Conversación no encontrada o acceso denegado")
    return conversation


def list_conversations(db: Session, user_id: str) -> List[Tuple[Conversation, int]]:
    """Conversaciones activas del usuario con su número de mensajes no leídos."""
    conversations = (
        db.query(Conversation)
        .filter(
            or_(
                Conversation.participant_one_id == user_id,
                Conversation.participant_two_id == user_id,
            ),
            Conversation.is_active == True,  # noqa: E712
        )
        .order_by(Conversation.last_message_at.desc())
        .all()
    )
    if not conversations:
        return []

    rows = (
        db.query(Message.conversation_id, func.count(Message.id))
        .filter(
            Message.conversation_id.in_([c.id for c in conversations]),
            Message.receiver_id == user_id,
            Message.is_read == False,  # noqa: E712
        )
        .group_by(Message.conversation_id)
        .all()
    )
    unread = dict(rows)
    return [(c, unread.get(c.id, 0)) for c in conversations]
