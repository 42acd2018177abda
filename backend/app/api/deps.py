#backend/app/api/deps.py
from typing import Generator
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from app.core.security import decode_jwt_token
from app.core.exceptions import ForbiddenError, InvalidInputError, ServiceUnavailableError, UnauthenticatedError
from app.models.user import User
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Token URL (requerido para OAuth2PasswordBearer)
# auto_error=False para que todas las rutas rechacen igual a los no autenticados
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/users/login", auto_error=False)

def get_db() -> Generator[Session, None, None]:
    """
    Dependency para obtener una sesión de base de datos.
    """
    # Importamos aquí para leer el estado actual del módulo
    from app.db import session as db_session

    if not db_session._is_initialized:
        logger.warning("Conexión a base de datos no inicializada en get_db, inicializando...")
        if not db_session.init_db_connection(max_retries=1):
            raise ServiceUnavailableError("No se pudo conectar a la base de datos")

    db = db_session.SessionLocal()
    try:
        yield db
    except OperationalError as e:
        # Solo convertir a 503 errores genuinos de base de datos
        logger.error(f"Error en sesión de base de datos: {e}")
        db.rollback()
        raise ServiceUnavailableError()
    finally:
        db.close()

def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> User:
    """
    Dependency para obtener el usuario actual autenticado.
    """
    if not token:
        raise UnauthenticatedError()

    payload = decode_jwt_token(token)
    if not payload:
        raise UnauthenticatedError()

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthenticatedError("Usuario no encontrado")

    if not user.is_active:
        raise InvalidInputError("Usuario inactivo")

    return user

def get_current_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency para verificar que el usuario es administrador.
    """
    if not current_user.is_admin:
        raise ForbiddenError("Se requiere acceso de administrador")

    return current_user
