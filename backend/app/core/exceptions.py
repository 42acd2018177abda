from typing import Dict, Optional
from fastapi import status


class MarketplaceError(Exception):
    """Error de dominio con código HTTP asociado."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Error interno del servidor"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)


class UnauthenticatedError(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "No se pudo validar las credenciales"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "No tienes permiso para realizar esta acción"


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Recurso no encontrado"


class InvalidInputError(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Datos de entrada inválidos"


class ConflictError(MarketplaceError):
    """Carrera de unicidad que no pudo resolverse releyendo el registro."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicto de concurrencia, inténtalo de nuevo"


class ServiceUnavailableError(MarketplaceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Error de conexión a la base de datos"
