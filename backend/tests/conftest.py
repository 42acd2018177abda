import os
import tempfile

# La configuración se lee al importar app.core.config: preparar el entorno antes
os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas-con-al-menos-32-caracteres")
os.environ.setdefault("POSTGRES_PASSWORD", "password-de-pruebas")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite:///" + os.path.join(tempfile.gettempdir(), "clasificados_test.db"),
)
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
