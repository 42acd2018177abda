from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.openapi.docs import get_swagger_ui_html
from starlette.concurrency import run_in_threadpool
import logging
from contextlib import asynccontextmanager

from app.api.api import api_router
from app.core.config import settings
from app.core.exceptions import MarketplaceError
from app.middleware.security import setup_security_middleware

# Configurar logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.db import session as db_session

    logger.info(f"Iniciando la aplicación en entorno: {settings.ENVIRONMENT}")

    # La inicialización reintenta con backoff exponencial
    connected = await run_in_threadpool(db_session.init_db_connection, 5, 2)
    if connected:
        await run_in_threadpool(db_session.create_tables)
    else:
        logger.error("No se pudo inicializar la base de datos; las peticiones devolverán 503")

    yield

    logger.info("Deteniendo la aplicación...")
    db_session.dispose_engine()
    logger.info("Conexiones a base de datos cerradas")

# Crear la aplicación FastAPI
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API de anuncios clasificados: favoritos, mensajes y notificaciones",
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if not settings.ENVIRONMENT == "production" else None,
    docs_url=None,  # Desactivamos endpoint de docs por defecto
    redoc_url=None,
    lifespan=lifespan,
)

@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )

# Configurar middlewares de seguridad
setup_security_middleware(app)

# Incluir routers
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}

# Endpoint personalizado para documentación
@app.get("/docs", include_in_schema=False)
async def custom_swagger_ui_html():
    """
    Documentación Swagger servida desde CDN.
    """
    return get_swagger_ui_html(
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        title=f"{settings.PROJECT_NAME} - API Documentation",
        swagger_js_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5.12.0/swagger-ui-bundle.js",
        swagger_css_url="https://cdn.jsdelivr.net/npm/swagger-ui-dist@5.12.0/swagger-ui.css",
        swagger_ui_parameters={"persistAuthorization": True}
    )
