from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from starlette.status import HTTP_429_TOO_MANY_REQUESTS, HTTP_500_INTERNAL_SERVER_ERROR
import time
import redis.asyncio as redis
import logging
import json
from typing import Dict, List, Optional, Tuple, Callable, Any
from app.core.config import settings

logger = logging.getLogger(__name__)

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json", f"{settings.API_V1_STR}/openapi.json")

class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Middleware de seguridad:
    - Añade encabezados de seguridad
    - Limitación de tasa por IP con ventana fija en Redis
    - Convierte errores no controlados en un 500 JSON
    """

    def __init__(
        self,
        app: FastAPI,
        redis_url: Optional[str] = None,
        exclude_paths: Optional[List[str]] = None,
        enabled: Optional[bool] = None,
    ):
        super().__init__(app)
        self.redis_url = redis_url or settings.REDIS_URL
        self.exclude_paths = exclude_paths or list(DOCS_PATHS)
        self.redis_pool = None
        self.enabled = settings.RATE_LIMIT_ENABLED if enabled is None else enabled

        self.default_limit = settings.RATE_LIMIT_DEFAULT_LIMIT
        self.default_period = settings.RATE_LIMIT_DEFAULT_PERIOD

        # Rutas con límites específicos (peticiones, segundos)
        self.path_limits: Dict[str, Tuple[int, int]] = {
            f"{settings.API_V1_STR}/users/login": (20, 3600),
            f"{settings.API_V1_STR}/users/register": (10, 3600),
            f"{settings.API_V1_STR}/messages": (600, 3600),
            # Margen para varias pestañas consultando la bandeja
            f"{settings.API_V1_STR}/notifications": (4 * 3600 // settings.NOTIFICATIONS_POLL_INTERVAL, 3600),
        }

    async def get_redis(self) -> redis.Redis:
        """Obtiene una conexión a Redis para rate limiting"""
        if self.redis_pool is None:
            self.redis_pool = redis.ConnectionPool.from_url(
                self.redis_url, decode_responses=True
            )
        return redis.Redis(connection_pool=self.redis_pool)

    def is_path_excluded(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    def get_client_identifier(self, request: Request) -> str:
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"

    def get_limit(self, path: str) -> Tuple[int, int]:
        path_key = next((p for p in self.path_limits if path.startswith(p)), None)
        if path_key:
            return self.path_limits[path_key]
        return self.default_limit, self.default_period

    async def is_rate_limited(self, client_id: str, path: str) -> Tuple[bool, int, int, int]:
        """
        Verifica si el cliente ha excedido su límite de tasa.
        Retorna: (limitado, actual, límite, reset)
        """
        limit, period = self.get_limit(path)

        try:
            r = await self.get_redis()
            redis_key = f"ratelimit:{client_id}:{path}"

            pipe = r.pipeline()
            pipe.incr(redis_key)
            pipe.ttl(redis_key)
            count, ttl = await pipe.execute()

            # Primera petición de la ventana
            if ttl is None or ttl < 0:
                await r.expire(redis_key, period)
                ttl = period

            reset_time = int(time.time() + ttl)
            return count > limit, count, limit, reset_time

        except Exception as e:
            # Si Redis no está disponible se permite la petición
            logger.error(f"Error en rate limiting: {str(e)}")
            return False, 0, limit, int(time.time() + period)

    def add_security_headers(self, response: Response, path: str) -> None:
        """Añade cabeceras de seguridad a la respuesta"""
        is_docs = self.is_path_excluded(path)

        # La documentación Swagger necesita scripts externos
        if not is_docs:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self'; "
                "style-src 'self'; "
                "img-src 'self' data:; "
                "font-src 'self'; "
                "connect-src 'self'"
            )

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN" if is_docs else "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), camera=(), microphone=()"

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        start_time = time.time()
        path = request.url.path
        apply_limit = self.enabled and not self.is_path_excluded(path)

        if apply_limit:
            client_id = self.get_client_identifier(request)
            limited, current, limit, reset = await self.is_rate_limited(client_id, path)
            if limited:
                logger.warning(f"Límite de tasa excedido para {client_id} en {path}")
                return Response(
                    content=json.dumps({
                        "detail": "Demasiadas solicitudes. Por favor, inténtalo de nuevo más tarde."
                    }),
                    status_code=HTTP_429_TOO_MANY_REQUESTS,
                    headers={
                        "X-RateLimit-Limit": str(limit),
                        "X-RateLimit-Remaining": "0",
                        "X-RateLimit-Reset": str(reset),
                        "Retry-After": str(max(0, reset - int(time.time())))
                    },
                    media_type="application/json"
                )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Error no manejado en {request.method} {path}: {e}")
            response = Response(
                content=json.dumps({"detail": "Error interno del servidor"}),
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                media_type="application/json"
            )

        self.add_security_headers(response, path)

        if apply_limit:
            response.headers["X-RateLimit-Limit"] = str(limit)
            response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current))
            response.headers["X-RateLimit-Reset"] = str(reset)

        response.headers["X-Process-Time"] = str(time.time() - start_time)

        return response

def setup_security_middleware(app: FastAPI) -> None:
    """Configura los middlewares de seguridad para la aplicación"""
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[
                "X-RateLimit-Limit",
                "X-RateLimit-Remaining",
                "X-RateLimit-Reset",
                "X-Process-Time"
            ],
        )

    app.add_middleware(
        SecurityMiddleware,
        redis_url=settings.REDIS_URL,
        exclude_paths=list(DOCS_PATHS) + ["/static/"],
    )
