from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, BigInteger, event
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow, assign_sequence
import uuid

MESSAGE_TYPES = ("text", "image", "system")

class Message(Base):
    __tablename__ = "messages"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(String, ForeignKey("conversations.id"), nullable=False)
    sender_id = Column(String, ForeignKey("users.id"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id"), nullable=False)
    product_id = Column(String, ForeignKey("products.id"), nullable=False)
    content = Column(String, nullable=False)
    message_type = Column(String, default="text", nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Desempate para registros con el mismo created_at; lo asigna assign_sequence
    sequence = Column(BigInteger, nullable=False, index=True)
    
    # Relaciones
    conversation = relationship(
        "Conversation",
        foreign_keys=[conversation_id],
        back_populates="messages",
    )
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    
    __table_args__ = (
        Index('idx_message_conversation_created', 'conversation_id', 'created_at', 'sequence'),
        Index('idx_message_receiver_read', 'receiver_id', 'is_read'),
    )

event.listen(Message, "before_insert", assign_sequence)
