import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from .db import init_db
from .api.routers import (
    health, inventario_general, inventario_detallado, movimientos, transferencias,
    negocios, reportes, notificaciones, configuracion, eventos
)
from .infrastructure.logging_config import setup_logging
from .infrastructure.eventos import feed_inventario
from .config import settings as app_settings

# Configurar logging al iniciar la aplicación
setup_logging()
logger = logging.getLogger(__name__)

# Inicializar BD (no fallar si el backend no está disponible al arrancar)
try:
    init_db()
except Exception as e:
    logger.warning("No se pudo inicializar la base de datos: %s", e)

# Feed de cambios de filas para los dashboards
feed_inventario.instalar()

app = FastAPI(
    title="Inventario Multi-Negocio",
    version="0.1.0",
    debug=app_settings.debug,
    description="Inventario general, inventarios por negocio, movimientos, transferencias y reportes",
    docs_url="/docs" if app_settings.environment == "development" else None,
    redoc_url="/redoc" if app_settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
)

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if app_settings.environment == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response

app.include_router(health.router)
app.include_router(inventario_general.router)
app.include_router(inventario_detallado.router)
app.include_router(movimientos.router)
app.include_router(transferencias.router)
app.include_router(negocios.router)
app.include_router(reportes.router)
app.include_router(notificaciones.router)
app.include_router(configuracion.router)
app.include_router(eventos.router)
