##backend/app/db/session.py
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
import logging
import threading
import time

logger = logging.getLogger(__name__)

# Inicialización de engine con None
engine = None
SessionLocal = None

# Control de inicialización
_is_initialized = False
_initialization_lock = threading.Lock()

def _engine_options(url: str) -> dict:
    """Opciones del engine según el motor de base de datos."""
    if url.startswith("sqlite"):
        # Los endpoints síncronos se ejecutan en un threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 60,
        "pool_recycle": 1800,  # Reciclar conexiones cada 30 minutos
        "pool_pre_ping": True,
    }

def init_db_connection(max_retries=5, initial_delay=1):
    """Inicializa la conexión a la base de datos con reintentos."""
    global engine, SessionLocal, _is_initialized

    if _is_initialized:
        return True

    # Usar lock para evitar inicializaciones concurrentes
    with _initialization_lock:
        if _is_initialized:
            return True

        url = str(settings.DATABASE_URL)
        retry_count = 0
        last_exception = None

        while retry_count < max_retries:
            try:
                engine = create_engine(url, echo=settings.DB_ECHO, **_engine_options(url))

                # Probar la conexión
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))

                logger.info(f"Conexión a la base de datos establecida (intento {retry_count + 1})")

                SessionLocal = sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    expire_on_commit=False,
                    bind=engine,
                )

                _is_initialized = True
                return True

            except Exception as e:
                retry_count += 1
                last_exception = e
                wait_time = initial_delay * (2 ** (retry_count - 1))  # Exponential backoff

                logger.warning(f"Intento {retry_count}/{max_retries} fallido para conectar a la base de datos: {e}")
                if retry_count < max_retries:
                    logger.warning(f"Reintentando en {wait_time} segundos...")
                    time.sleep(wait_time)

        logger.error(f"No se pudo conectar a la base de datos después de {max_retries} intentos: {last_exception}")
        return False

def get_session() -> Session:
    """Abre una sesión nueva; usada por las tareas de Celery y los scripts."""
    if not _is_initialized and not init_db_connection():
        raise RuntimeError("No se pudo establecer conexión con la base de datos")
    return SessionLocal()

def create_tables():
    """Crea las tablas que falten. Nunca elimina tablas existentes."""
    from app.db.base import Base

    if not _is_initialized and not init_db_connection():
        raise RuntimeError("No se pudo establecer conexión con la base de datos")
    Base.metadata.create_all(bind=engine)
    logger.info("Tablas de base de datos creadas/verificadas")

def dispose_engine():
    global engine, SessionLocal, _is_initialized

    with _initialization_lock:
        if engine is not None:
            engine.dispose()
        engine = None
        SessionLocal = None
        _is_initialized = False
