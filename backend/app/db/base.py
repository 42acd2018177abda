# Importar todos los modelos para que Base.metadata los conozca antes de create_all
from app.db.base_class import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.product import Product  # noqa: F401
from app.models.product_image import ProductImage  # noqa: F401
from app.models.conversation import Conversation  # noqa: F401
from app.models.message import Message  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.favorite import Favorite  # noqa: F401
