from typing import List
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.models.product import Product
from app.models.user import User
from app.schemas.notification import NotificationEvent
from app.services.notifications import emit_notification

logger = logging.getLogger(__name__)


def _exists(db: Session, user_id: str, product_id: str) -> bool:
    return (
        db.query(Favorite.id)
        .filter(Favorite.user_id == user_id, Favorite.product_id == product_id)
        .first()
        is not None
    )


def add_favorite(db: Session, user: User, product_id: str) -> bool:
    """
    Añade un favorito de forma idempotente.

    Devuelve True solo si el favorito es nuevo; en ese caso se notifica al
    vendedor (salvo que sea el propio usuario).
    """
    if _exists(db, user.id, product_id):
        return False

    try:
        db.add(Favorite(user_id=user.id, product_id=product_id))
        db.commit()
    except IntegrityError:
        # Otra petición insertó el mismo par; el resultado final es el mismo
        db.rollback()
        logger.info(f"Favorito {user.id}/{product_id} ya existía (inserción concurrente)")
        return False

    _notify_seller(db, user, product_id)
    return True


def _notify_seller(db: Session, user: User, product_id: str) -> None:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        # El producto pudo eliminarse entre el insert y la notificación
        logger.info(f"Producto {product_id} no encontrado, no se notifica el favorito")
        return

    emit_notification(
        NotificationEvent(
            target_user_id=product.seller_id,
            actor_user_id=user.id,
            type="favorite",
            title="Artículo en favoritos",
            message=f'{user.full_name or "Alguien"} añadió a favoritos tu anuncio "{product.title}"',
            data={"product_id": product.id},
            related_product_id=product.id,
            related_user_id=user.id,
        )
    )


def remove_favorite(db: Session, user_id: str, product_id: str) -> None:
    """Elimina el favorito si existe; la ausencia no es un error."""
    db.query(Favorite).filter(
        Favorite.user_id == user_id, Favorite.product_id == product_id
    ).delete(synchronize_session=False)
    db.commit()


def list_favorite_product_ids(db: Session, user_id: str) -> List[str]:
    rows = (
        db.query(Favorite.product_id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc())
        .all()
    )
    return [row[0] for row in rows]


def list_favorite_user_ids(db: Session, product_id: str) -> List[str]:
    rows = db.query(Favorite.user_id).filter(Favorite.product_id == product_id).all()
    return [row[0] for row in rows]
