from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow
import uuid

class ProductImage(Base):
    __tablename__ = "product_images"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    product_id = Column(String, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    image_url = Column(String, nullable=False)
    is_primary = Column(Boolean, default=False)
    order = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    
    # Relaciones
    product = relationship("Product", back_populates="images")
    
    __table_args__ = (
        Index('idx_product_image_product_id_primary', 'product_id', 'is_primary'),
    )
