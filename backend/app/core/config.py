import secrets
from typing import Any, Dict, List, Optional, Union
from pydantic import validator, Field
from pydantic_settings import BaseSettings
import logging

logger = logging.getLogger(__name__)

class EnvironmentSettings(BaseSettings):
    """Configuración básica de entorno"""
    # Entorno de ejecución
    ENVIRONMENT: str = "development"

    @validator("ENVIRONMENT")
    def validate_environment(cls, v):
        allowed = ["development", "testing", "staging", "production"]
        if v.lower() not in allowed:
            raise ValueError(f"Entorno debe ser uno de: {', '.join(allowed)}")
        return v.lower()

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

# Cargar el entorno primero
env = EnvironmentSettings().ENVIRONMENT

# Mapeo de archivos de entorno
env_files = {
    "development": [".env", ".env.development"],
    "testing": [".env", ".env.testing"],
    "staging": [".env", ".env.staging"],
    "production": [".env", ".env.production"],
}

class Settings(BaseSettings):
    # API
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Clasificados"
    DEBUG: bool = False

    # Entorno
    ENVIRONMENT: str = env

    # JWT
    SECRET_KEY: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 días

    @validator("SECRET_KEY", pre=True, always=True)
    def validate_secret_key(cls, v):
        if not v or len(v) < 32:
            if env == "production":
                raise ValueError("SECRET_KEY debe tener al menos 32 caracteres en producción")
            # Fuera de producción se genera una clave por proceso
            logger.warning("SECRET_KEY no configurada o insegura, generando automáticamente")
            return secrets.token_urlsafe(32)
        return v

    # CORS
    BACKEND_CORS_ORIGINS: Union[List[str], str] = []

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            import json
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Base de datos
    POSTGRES_SERVER: str = "db"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = Field(..., min_length=8)
    POSTGRES_DB: str = "clasificados"
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    @validator("POSTGRES_PASSWORD", pre=True)
    def validate_db_password(cls, v):
        if env == "production" and (not v or len(v) < 12):
            raise ValueError("POSTGRES_PASSWORD debe tener al menos 12 caracteres en producción")
        return v

    @validator("DATABASE_URL", pre=True, always=True)
    def assemble_db_connection(cls, v: Optional[str], values: Dict[str, Any]) -> Any:
        if isinstance(v, str) and v:
            return v

        # Construir DSN a partir de las partes
        user = values.get("POSTGRES_USER")
        password = values.get("POSTGRES_PASSWORD")
        host = values.get("POSTGRES_SERVER")
        if not (user and password and host):
            if env == "production":
                raise ValueError("Configuración de base de datos incompleta")
            logger.warning("Configuración PostgreSQL incompleta, usando SQLite")
            return "sqlite:///./clasificados.db"
        return f"postgresql://{user}:{password}@{host}/{values.get('POSTGRES_DB') or ''}"

    # Redis
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_URL: Optional[str] = None

    @validator("REDIS_URL", pre=True, always=True)
    def assemble_redis_connection(cls, v: Optional[str], values: Dict[str, Any]) -> Any:
        if isinstance(v, str) and v:
            return v

        # Construir URL de Redis
        password_part = f":{values.get('REDIS_PASSWORD')}@" if values.get('REDIS_PASSWORD') else ""
        return f"redis://{password_part}{values.get('REDIS_HOST')}:{values.get('REDIS_PORT')}/{values.get('REDIS_DB')}"

    # Configuración de seguridad
    SECURITY_BCRYPT_ROUNDS: int = 12  # Mayor número = más seguro pero más lento

    # Celery
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # Notificaciones
    NOTIFICATIONS_DEFAULT_LIMIT: int = 50
    NOTIFICATIONS_MAX_LIMIT: int = 100
    NOTIFICATIONS_POLL_INTERVAL: int = 30  # Segundos entre consultas del cliente

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT_LIMIT: int = 100  # Número de solicitudes
    RATE_LIMIT_DEFAULT_PERIOD: int = 3600  # Período en segundos (1 hora)

    # Configuraciones específicas por entorno
    def get_settings_by_environment(self) -> Dict[str, Any]:
        settings_map = {
            "development": {
                "DEBUG": True,
                "SECURITY_BCRYPT_ROUNDS": 4,
                "RATE_LIMIT_ENABLED": False,
            },
            "testing": {
                "DEBUG": True,
                "SECURITY_BCRYPT_ROUNDS": 4,
                "RATE_LIMIT_ENABLED": False,
                "CELERY_TASK_ALWAYS_EAGER": True,
            },
            "staging": {
                "DEBUG": False,
                "SECURITY_BCRYPT_ROUNDS": 10,
                "RATE_LIMIT_DEFAULT_LIMIT": 200,
            },
            "production": {
                "DEBUG": False,
                "RATE_LIMIT_DEFAULT_LIMIT": 100,
            },
        }

        return settings_map.get(self.ENVIRONMENT, {})

    # Aplicar configuraciones específicas del entorno
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        env_settings = self.get_settings_by_environment()
        for key, value in env_settings.items():
            if hasattr(self, key):
                setattr(self, key, value)

    class Config:
        case_sensitive = True
        env_file = env_files.get(env, [".env"])
        extra = "ignore"

# Crear instancia de configuración
settings = Settings()

# Registrar información de inicio
logger.info(f"Configuración cargada para entorno: {settings.ENVIRONMENT}")
logger.info(f"Depuración: {'activada' if settings.DEBUG else 'desactivada'}")
if settings.DATABASE_URL:
    db_url_safe = str(settings.DATABASE_URL)
    if settings.POSTGRES_PASSWORD:
        db_url_safe = db_url_safe.replace(str(settings.POSTGRES_PASSWORD), '****')
    logger.info(f"Base de datos: {db_url_safe}")
