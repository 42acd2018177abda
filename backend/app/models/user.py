from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.models.utils import utcnow
import uuid

USER_ROLES = ("user", "admin", "super_admin")
ADMIN_ROLES = ("admin", "super_admin")

class User(Base):
    __tablename__ = "users"
    
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(String, default="user", nullable=False)  # user, admin, super_admin
    is_active = Column(Boolean, default=True)
    phone = Column(String, nullable=True)
    profile_image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
    
    # Relaciones
    products = relationship("Product", back_populates="seller")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification",
        foreign_keys="Notification.user_id",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    
    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
    
    __table_args__ = (
        Index('idx_user_role', 'role'),
        Index('idx_user_created_at', 'created_at'),
    )
