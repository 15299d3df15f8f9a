"""
API de Inventario Detallado
===========================

Inventario de cada negocio. Los productos llegan por transferencia desde el
inventario general o se agregan directamente (con su entrada inicial).
"""
from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import List
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.cache_nombres import CacheNombres
from ...application.dtos import (
    ProductoDetalladoIn, ProductoUpdate, ProductoDetalladoOut, OperacionStockIn, AjusteIn,
    OperacionStockOut, MovimientoOut
)
from ...application.services_inventario import ProductoService, InventarioService
from ...application.services_movimientos import MovimientoService
from ...application.services_negocios import NegocioService
from ...application.services_notificaciones import NotificacionService
from ...domain.enums import TipoInventario
from ..errores import transaccion
from ..serializadores import movimiento_out, operacion_out

router = APIRouter(prefix="/negocios/{negocio_id}/inventario", tags=["inventario-detallado"])


def _servicio(uow: UnitOfWork, negocio_id: str, cache: CacheNombres | None = None) -> ProductoService:
    NegocioService(uow).obtener(negocio_id)
    return ProductoService(uow, TipoInventario.DETALLADO, negocio_id, cache)

# ===== CONSULTAS =====

@router.get("", response_model=List[ProductoDetalladoOut])
def listar_productos(negocio_id: str, solo_activos: bool = Query(True), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar inventario del negocio"):
        resultado = [ProductoDetalladoOut.model_validate(p) for p in _servicio(uow, negocio_id).listar(solo_activos)]
    return resultado

@router.get("/buscar", response_model=List[ProductoDetalladoOut])
def buscar_productos(negocio_id: str, q: str = Query(""), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "buscar en inventario del negocio"):
        resultado = [ProductoDetalladoOut.model_validate(p) for p in _servicio(uow, negocio_id).buscar(q)]
    return resultado

@router.get("/bajo-stock", response_model=List[ProductoDetalladoOut])
def productos_bajo_stock(negocio_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar bajo stock del negocio"):
        resultado = [ProductoDetalladoOut.model_validate(p) for p in _servicio(uow, negocio_id).bajo_stock()]
    return resultado

@router.get("/estadisticas")
def estadisticas(negocio_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "calcular estadísticas del negocio"):
        resultado = _servicio(uow, negocio_id).estadisticas()
    return resultado

@router.get("/{producto_id}", response_model=ProductoDetalladoOut)
def obtener_producto(negocio_id: str, producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "obtener producto del negocio"):
        resultado = ProductoDetalladoOut.model_validate(_servicio(uow, negocio_id).obtener(producto_id))
    return resultado

@router.get("/{producto_id}/movimientos", response_model=List[MovimientoOut])
def movimientos_producto(negocio_id: str, producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos del producto"):
        producto = _servicio(uow, negocio_id).obtener(producto_id)
        cache = CacheNombres(uow)
        cache.precargar([producto], TipoInventario.DETALLADO)
        movimientos = MovimientoService(uow).recientes_por_producto(producto_id, TipoInventario.DETALLADO)
        resultado = [movimiento_out(m, cache) for m in movimientos]
    return resultado

# ===== CRUD =====

@router.post("", response_model=ProductoDetalladoOut, status_code=201)
def agregar_producto(negocio_id: str, payload: ProductoDetalladoIn, db: Session = Depends(get_db)):
    """Agrega un producto al negocio; su stock inicial queda registrado como entrada."""
    uow = UnitOfWork(db)
    with transaccion(uow, "agregar producto al negocio"):
        producto = InventarioService(uow, NotificacionService(uow)).agregar_a_negocio(
            negocio_id, payload, usuario_id=None
        )
        resultado = ProductoDetalladoOut.model_validate(producto)
    return resultado

@router.patch("/{producto_id}", response_model=ProductoDetalladoOut)
def actualizar_producto(negocio_id: str, producto_id: str, payload: ProductoUpdate, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "actualizar producto del negocio"):
        resultado = ProductoDetalladoOut.model_validate(_servicio(uow, negocio_id).actualizar(producto_id, payload))
    return resultado

@router.delete("/{producto_id}", response_model=ProductoDetalladoOut)
def eliminar_producto(negocio_id: str, producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "eliminar producto del negocio"):
        resultado = ProductoDetalladoOut.model_validate(_servicio(uow, negocio_id).eliminar(producto_id))
    return resultado

@router.post("/{producto_id}/restaurar", response_model=ProductoDetalladoOut)
def restaurar_producto(negocio_id: str, producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "restaurar producto del negocio"):
        resultado = ProductoDetalladoOut.model_validate(_servicio(uow, negocio_id).restaurar(producto_id))
    return resultado

# ===== STOCK =====

@router.post("/{producto_id}/entrada", response_model=OperacionStockOut)
def registrar_entrada(negocio_id: str, producto_id: str, payload: OperacionStockIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar entrada en negocio"):
        producto, mov = InventarioService(uow, NotificacionService(uow)).entrada(
            TipoInventario.DETALLADO, producto_id, payload.cantidad, negocio_id=negocio_id,
            **payload.model_dump(exclude={"cantidad"})
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado

@router.post("/{producto_id}/salida", response_model=OperacionStockOut)
def registrar_salida(negocio_id: str, producto_id: str, payload: OperacionStockIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar salida en negocio"):
        producto, mov = InventarioService(uow, NotificacionService(uow)).salida(
            TipoInventario.DETALLADO, producto_id, payload.cantidad, negocio_id=negocio_id,
            **payload.model_dump(exclude={"cantidad"})
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado

@router.post("/{producto_id}/ajuste", response_model=OperacionStockOut)
def registrar_ajuste(negocio_id: str, producto_id: str, payload: AjusteIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar ajuste en negocio"):
        producto, mov = InventarioService(uow, NotificacionService(uow)).ajuste(
            TipoInventario.DETALLADO, producto_id, payload.cantidad, payload.motivo,
            negocio_id=negocio_id, usuario_id=payload.usuario_id, notas=payload.notas
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado
