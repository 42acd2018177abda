from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Index
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow
import uuid

PRODUCT_STATUSES = ("active", "sold", "unavailable")

class Product(Base):
    __tablename__ = "products"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    currency = Column(String, default="USD")
    category = Column(String, nullable=True)
    condition = Column(String, nullable=True)  # new, used, refurbished
    location = Column(String, nullable=True)
    status = Column(String, default="active")  # active, sold, unavailable
    seller_id = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    
    # Relaciones
    seller = relationship("User", back_populates="products")
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.order",
    )
    
    __table_args__ = (
        Index('idx_product_status', 'status'),
        Index('idx_product_created_at', 'created_at'),
        Index('idx_product_seller_status', 'seller_id', 'status'),
    )
