"""
Configuración global de pytest para los tests del inventario
Cada test corre contra una base SQLite en memoria recién creada.
"""
import os
import sys
import tempfile
import pytest
from pathlib import Path

# Agregar el directorio raíz al path para imports
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Antes de importar inventario.*: la configuración se lee al importar
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "inventario_test_logs"))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventario.db import init_db
from inventario.infrastructure.unit_of_work import UnitOfWork
from inventario.application.dtos import ProductoIn, NegocioIn
from inventario.application.services_inventario import ProductoService
from inventario.application.services_negocios import NegocioService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def uow(db):
    return UnitOfWork(db)


@pytest.fixture
def crear_producto(uow):
    """Fábrica de productos del inventario general."""
    def _crear(nombre="Queso Cheddar", stock=45, stock_minimo=10, precio=120, categoria="Lácteos", unidad="kg", **extra):
        datos = ProductoIn(
            nombre=nombre, stock=stock, stock_minimo=stock_minimo, precio=precio,
            categoria=categoria, unidad=unidad, **extra
        )
        return ProductoService(uow).crear(datos)
    return _crear


@pytest.fixture
def negocio(uow):
    return NegocioService(uow).crear(NegocioIn(nombre="Sucursal Centro", direccion="Av. Principal"))
