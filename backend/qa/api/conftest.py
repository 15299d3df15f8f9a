"""
Fixtures para tests de integración API.
Usa TestClient de FastAPI contra la app real con get_db apuntando a SQLite en memoria.
"""
import pytest
from fastapi.testclient import TestClient

from inventario.main import app
from inventario.dependencies import get_db


@pytest.fixture
def client(session_factory):
    """Cliente HTTP; cada request abre su propia sesión sobre la BD del test."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def producto_id(client):
    r = client.post("/inventario-general", json={
        "nombre": "Queso Cheddar", "categoria": "Lácteos", "unidad": "kg",
        "stock": 45, "stock_minimo": 10, "precio": 120,
    })
    assert r.status_code == 201
    return r.json()["id"]


@pytest.fixture
def negocio_id(client):
    r = client.post("/negocios", json={"nombre": "Sucursal Centro"})
    assert r.status_code == 201
    return r.json()["id"]
