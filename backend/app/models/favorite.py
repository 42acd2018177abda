from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow
import uuid

class Favorite(Base):
    __tablename__ = "favorites"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Sin FK a products: el favorito sobrevive aunque el producto desaparezca
    product_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    
    # Relaciones
    user = relationship("User", back_populates="favorites")
    
    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_favorite_user_product'),
        Index('idx_favorite_product', 'product_id'),
    )
