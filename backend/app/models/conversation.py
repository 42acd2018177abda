from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow
import uuid

class Conversation(Base):
    __tablename__ = "conversations"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    # Participantes en orden lexicográfico
    participant_one_id = Column(String, ForeignKey("users.id"), nullable=False)
    participant_two_id = Column(String, ForeignKey("users.id"), nullable=False)
    product_id = Column(String, ForeignKey("products.id"), nullable=False)
    conversation_key = Column(String, nullable=False)
    last_message_id = Column(String, ForeignKey("messages.id", use_alter=True), nullable=True)
    last_message_at = Column(DateTime(timezone=True), default=utcnow)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    
    # Relaciones
    participant_one = relationship("User", foreign_keys=[participant_one_id])
    participant_two = relationship("User", foreign_keys=[participant_two_id])
    product = relationship("Product")
    last_message = relationship("Message", foreign_keys=[last_message_id], post_update=True)
    messages = relationship(
        "Message",
        foreign_keys="Message.conversation_id",
        back_populates="conversation",
    )
    
    @property
    def participant_ids(self):
        return [self.participant_one_id, self.participant_two_id]
    
    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participant_ids
    
    def other_participant_id(self, user_id: str) -> str:
        return self.participant_two_id if user_id == self.participant_one_id else self.participant_one_id
    
    # La clave única es el mecanismo de deduplicación entre peticiones concurrentes
    __table_args__ = (
        UniqueConstraint('conversation_key', name='uq_conversation_key'),
        Index('idx_conversation_participant_one', 'participant_one_id'),
        Index('idx_conversation_participant_two', 'participant_two_id'),
        Index('idx_conversation_product', 'product_id'),
        Index('idx_conversation_last_message_at', 'last_message_at'),
    )
