from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.product import Product
from app.models.product_image import ProductImage
from app.models.user import User
from app.schemas.notification import NotificationEvent
from app.schemas.product import ProductCreate
from app.services.favorites import list_favorite_user_ids
from app.services.notifications import emit_notification

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def resolve_products(db: Session, product_ids: List[str]) -> List[Product]:
    """Resuelve ids a productos conservando el orden; omite los que ya no existen."""
    if not product_ids:
        return []
    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    by_id = {p.id: p for p in products}
    return [by_id[pid] for pid in product_ids if pid in by_id]


def _replace_images(product: Product, image_urls: List[str]) -> None:
    product.images.clear()
    for i, image_url in enumerate(image_urls):
        # La primera imagen es la principal
        product.images.append(ProductImage(image_url=image_url, is_primary=i == 0, order=i))


def create_product(db: Session, seller: User, product_in: ProductCreate) -> Product:
    product = Product(**product_in.model_dump(exclude={"images"}), seller_id=seller.id)
    _replace_images(product, product_in.images or [])
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"Producto {product.id} creado por {seller.id}")
    return product


def update_product(db: Session, seller: User, product_id: str, update_data: Dict[str, Any]) -> Product:
    """
    Actualiza un producto del vendedor y avisa a quienes lo tienen en
    favoritos (`product_sold` si pasa a vendido, `product_updated` si no).
    """
    product = get_product(db, product_id)
    if product.seller_id != seller.id:
        raise ForbiddenError("No tienes permiso para modificar este producto")

    previous_status = product.status
    images = update_data.pop("images", None)
    for key, value in update_data.items():
        setattr(product, key, value)
    if images is not None:
        _replace_images(product, images)

    db.add(product)
    db.commit()
    db.refresh(product)

    if update_data or images is not None:
        sold = product.status == "sold" and previous_status != "sold"
        _notify_favoriters(db, product, seller.id, sold)
    return product


def _notify_favoriters(db: Session, product: Product, actor_id: str, sold: bool) -> None:
    if sold:
        notification_type = "product_sold"
        title = "Artículo vendido"
        text = f'El anuncio "{product.title}" que tienes en favoritos se ha vendido'
    else:
        notification_type = "product_updated"
        title = "Artículo actualizado"
        text = f'El anuncio "{product.title}" que tienes en favoritos ha cambiado'

    for user_id in list_favorite_user_ids(db, product.id):
        emit_notification(
            NotificationEvent(
                target_user_id=user_id,
                actor_user_id=actor_id,
                type=notification_type,
                title=title,
                message=text,
                data={"product_id": product.id, "status": product.status},
                related_product_id=product.id,
                related_user_id=actor_id,
            )
        )


def deactivate_product(db: Session, seller: User, product_id: str) -> Product:
    """Baja lógica: el producto pasa a `unavailable`."""
    product = get_product(db, product_id)
    if product.seller_id != seller.id:
        raise ForbiddenError("No tienes permiso para eliminar este producto")
    product.status = "unavailable"
    db.add(product)
    db.commit()
    return product


def list_products(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    seller_id: Optional[str] = None,
) -> List[Product]:
    query = db.query(Product)

    # Por defecto, solo mostrar productos activos
    query = query.filter(Product.status == (status or "active"))

    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if seller_id:
        query = query.filter(Product.seller_id == seller_id)

    return query.order_by(Product.created_at.desc()).offset(skip).limit(limit).all()
