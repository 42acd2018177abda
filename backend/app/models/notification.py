from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, BigInteger, JSON, event
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow, assign_sequence
import uuid

NOTIFICATION_TYPES = (
    "message",
    "favorite",
    "view",
    "system",
    "product_sold",
    "product_updated",
)

class Notification(Base):
    __tablename__ = "notifications"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    data = Column(JSON, default=dict, nullable=False)
    # Referencias opcionales a las entidades relacionadas
    related_product_id = Column(String, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    related_conversation_id = Column(String, ForeignKey("conversations.id", ondelete="SET NULL"), nullable=True)
    related_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Desempate para registros con el mismo created_at; lo asigna assign_sequence
    sequence = Column(BigInteger, nullable=False, index=True)
    
    # Relaciones
    user = relationship("User", foreign_keys=[user_id], back_populates="notifications")
    
    __table_args__ = (
        Index('idx_notification_user_created', 'user_id', 'created_at'),
        Index('idx_notification_user_read', 'user_id', 'is_read'),
        Index('idx_notification_type', 'type'),
    )

event.listen(Notification, "before_insert", assign_sequence)
