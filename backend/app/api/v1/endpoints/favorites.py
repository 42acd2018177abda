from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Any

from app.api import deps
from app.schemas.favorite import FavoriteCreate, FavoriteList, FavoriteResult
from app.models.user import User
from app.services import favorites as favorite_service
from app.services.products import resolve_products

router = APIRouter()

@router.get("/", response_model=FavoriteList)
def list_favorites(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Productos marcados como favoritos por el usuario.
    """
    product_ids = favorite_service.list_favorite_product_ids(db, current_user.id)
    return {"favorites": resolve_products(db, product_ids)}

@router.post("/", response_model=FavoriteResult)
def add_favorite(
    *,
    db: Session = Depends(deps.get_db),
    favorite_in: FavoriteCreate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Añadir un producto a favoritos. Repetir la operación no es un error.
    """
    created = favorite_service.add_favorite(db, current_user, favorite_in.product_id)
    if created:
        return {"message": "Producto añadido a favoritos", "created": True}
    return {"message": "El producto ya estaba en favoritos", "created": False}

@router.delete("/", response_model=FavoriteResult)
def remove_favorite(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    product_id: str = Query(..., description="ID del producto"),
) -> Any:
    favorite_service.remove_favorite(db, current_user.id, product_id)
    return {"message": "Producto eliminado de favoritos"}
