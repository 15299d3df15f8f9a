import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings


def _connect_args(database_url: str, timeout: int) -> dict:
    """Timeout acotado por llamada según el motor."""
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if database_url.startswith("postgresql"):
        return {"connect_timeout": timeout, "options": f"-c statement_timeout={timeout * 1000}"}
    return {}


def build_engine(database_url: str, timeout: int = settings.db_timeout_seconds):
    return create_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        connect_args=_connect_args(database_url, timeout),
    )


if settings.database_url.startswith("sqlite:///./data/"):
    os.makedirs("./data", exist_ok=True)

engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def _import_all_models():
    """Importa todos los modelos para que Base.metadata los registre."""
    from .domain import models_inventario  # noqa: F401 - InventarioGeneral, InventarioDetallado, Movimiento
    from .domain import models_negocios  # noqa: F401 - Negocio
    from .domain import models_sistema  # noqa: F401 - Notificacion, Configuracion


def init_db(bind=None):
    """Crear tablas si no existen (arranque normal)."""
    _import_all_models()
    Base.metadata.create_all(bind=bind or engine)
