from pydantic import BaseModel, validator, Field
from typing import Optional, List
from datetime import datetime

from app.models.product import PRODUCT_STATUSES

class ProductImageResponse(BaseModel):
    id: str
    image_url: str
    is_primary: bool = False
    order: int = 0
    
    class Config:
        from_attributes = True

class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: float = Field(..., gt=0)
    currency: str = "USD"
    category: Optional[str] = None
    condition: Optional[str] = None
    location: Optional[str] = None

class ProductCreate(ProductBase):
    images: Optional[List[str]] = []

class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[float] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    images: Optional[List[str]] = None

    # Se pueden omitir, pero no enviar como null: las columnas son obligatorias
    @validator('title', 'price', 'currency', 'status', 'images')
    def required_fields_not_null(cls, v):
        if v is None:
            raise ValueError('El campo no puede ser null')
        return v

    @validator('price')
    def price_must_be_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError('El precio debe ser mayor que cero')
        return v
    
    @validator('status')
    def status_must_be_valid(cls, v):
        if v is not None and v not in PRODUCT_STATUSES:
            raise ValueError('El estado debe ser "active", "sold" o "unavailable"')
        return v

class ProductResponse(ProductBase):
    id: str
    seller_id: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    images: List[ProductImageResponse] = []
    
    class Config:
        from_attributes = True
