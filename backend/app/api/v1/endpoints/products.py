from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Any, List, Optional

from app.api import deps
from app.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from app.models.user import User
from app.services import products as product_service

router = APIRouter()

@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    *,
    db: Session = Depends(deps.get_db),
    product_in: ProductCreate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Publicar un nuevo anuncio.
    """
    return product_service.create_product(db, current_user, product_in)

@router.get("/", response_model=List[ProductResponse])
def get_products(
    *,
    db: Session = Depends(deps.get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    status: Optional[str] = Query(None, description="Estado del producto (active, sold, unavailable)"),
    min_price: Optional[float] = Query(None, description="Precio mínimo"),
    max_price: Optional[float] = Query(None, description="Precio máximo"),
    seller_id: Optional[str] = Query(None, description="ID del vendedor"),
) -> Any:
    """
    Obtener lista de productos con filtros opcionales.
    """
    return product_service.list_products(
        db,
        skip=skip,
        limit=limit,
        status=status,
        min_price=min_price,
        max_price=max_price,
        seller_id=seller_id,
    )

@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    *,
    db: Session = Depends(deps.get_db),
    product_id: str,
) -> Any:
    return product_service.get_product(db, product_id)

@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    *,
    db: Session = Depends(deps.get_db),
    product_id: str,
    product_in: ProductUpdate,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Actualizar un producto. Quienes lo tienen en favoritos reciben una notificación.
    """
    update_data = product_in.model_dump(exclude_unset=True)
    return product_service.update_product(db, current_user, product_id, update_data)

@router.delete("/{product_id}", status_code=status.HTTP_200_OK)
def delete_product(
    *,
    db: Session = Depends(deps.get_db),
    product_id: str,
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Retirar un producto (pasa a "unavailable" en lugar de eliminarse).
    """
    product_service.deactivate_product(db, current_user, product_id)
    return {"message": "Producto eliminado correctamente"}
