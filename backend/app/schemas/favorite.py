from pydantic import BaseModel
from typing import List

from app.schemas.product import ProductResponse

class FavoriteCreate(BaseModel):
    product_id: str

class FavoriteResult(BaseModel):
    message: str
    created: bool = False

class FavoriteList(BaseModel):
    favorites: List[ProductResponse]
