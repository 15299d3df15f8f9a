"""
API de Inventario General
=========================

Catálogo central y sus operaciones de stock.
Cada operación que mueve stock registra su movimiento en la misma transacción.
"""
from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.cache_nombres import CacheNombres
from ...application.dtos import (
    ProductoIn, ProductoUpdate, ProductoOut, OperacionStockIn, AjusteIn, OperacionStockOut, MovimientoOut
)
from ...application.services_inventario import ProductoService, InventarioService
from ...application.services_movimientos import MovimientoService
from ...application.services_notificaciones import NotificacionService
from ...domain.enums import TipoInventario
from ..errores import transaccion
from ..serializadores import movimiento_out, operacion_out

router = APIRouter(prefix="/inventario-general", tags=["inventario-general"])

# ===== CONSULTAS =====

@router.get("", response_model=List[ProductoOut])
def listar_productos(
    solo_activos: bool = Query(True, description="Solo productos activos"),
    db: Session = Depends(get_db)
):
    """Lista el inventario general ordenado por nombre."""
    uow = UnitOfWork(db)
    with transaccion(uow, "listar productos"):
        resultado = [ProductoOut.model_validate(p) for p in ProductoService(uow).listar(solo_activos)]
    return resultado

@router.get("/buscar", response_model=List[ProductoOut])
def buscar_productos(q: str = Query("", description="Texto a buscar en el nombre"), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "buscar productos"):
        resultado = [ProductoOut.model_validate(p) for p in ProductoService(uow).buscar(q)]
    return resultado

@router.get("/categorias", response_model=List[str])
def listar_categorias(db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar categorías"):
        resultado = ProductoService(uow).categorias()
    return resultado

@router.get("/categorias/{categoria}", response_model=List[ProductoOut])
def productos_por_categoria(categoria: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar productos por categoría"):
        resultado = [ProductoOut.model_validate(p) for p in ProductoService(uow).por_categoria(categoria)]
    return resultado

@router.get("/bajo-stock", response_model=List[ProductoOut])
def productos_bajo_stock(db: Session = Depends(get_db)):
    """Productos activos en estado bajo o agotado."""
    uow = UnitOfWork(db)
    with transaccion(uow, "listar productos con bajo stock"):
        resultado = [ProductoOut.model_validate(p) for p in ProductoService(uow).bajo_stock()]
    return resultado

@router.get("/estadisticas")
def estadisticas(db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "calcular estadísticas"):
        resultado = ProductoService(uow).estadisticas()
    return resultado

@router.get("/{producto_id}", response_model=ProductoOut)
def obtener_producto(producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "obtener producto"):
        resultado = ProductoOut.model_validate(ProductoService(uow).obtener(producto_id))
    return resultado

@router.get("/{producto_id}/movimientos", response_model=List[MovimientoOut])
def movimientos_producto(producto_id: str, db: Session = Depends(get_db)):
    """Historial del producto, más recientes primero."""
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos del producto"):
        producto = ProductoService(uow).obtener(producto_id)
        cache = CacheNombres(uow)
        cache.precargar([producto], TipoInventario.GENERAL)
        movimientos = MovimientoService(uow).recientes_por_producto(producto_id, TipoInventario.GENERAL)
        resultado = [movimiento_out(m, cache) for m in movimientos]
    return resultado

# ===== CRUD =====

@router.post("", response_model=ProductoOut, status_code=201)
def crear_producto(payload: ProductoIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "crear producto"):
        resultado = ProductoOut.model_validate(ProductoService(uow).crear(payload))
    return resultado

@router.patch("/{producto_id}", response_model=ProductoOut)
def actualizar_producto(producto_id: str, payload: ProductoUpdate, db: Session = Depends(get_db)):
    """Edición directa; el stock solo cambia con entradas, salidas, ajustes o transferencias."""
    uow = UnitOfWork(db)
    with transaccion(uow, "actualizar producto"):
        resultado = ProductoOut.model_validate(ProductoService(uow).actualizar(producto_id, payload))
    return resultado

@router.delete("/{producto_id}", response_model=ProductoOut)
def eliminar_producto(producto_id: str, db: Session = Depends(get_db)):
    """Eliminación lógica (activo=false)."""
    uow = UnitOfWork(db)
    with transaccion(uow, "eliminar producto"):
        resultado = ProductoOut.model_validate(ProductoService(uow).eliminar(producto_id))
    return resultado

@router.post("/{producto_id}/restaurar", response_model=ProductoOut)
def restaurar_producto(producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "restaurar producto"):
        resultado = ProductoOut.model_validate(ProductoService(uow).restaurar(producto_id))
    return resultado

@router.delete("/{producto_id}/permanente", status_code=204)
def eliminar_producto_permanente(producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "eliminar producto permanentemente"):
        ProductoService(uow).eliminar_permanente(producto_id)

# ===== STOCK =====

@router.post("/{producto_id}/entrada", response_model=OperacionStockOut)
def registrar_entrada(producto_id: str, payload: OperacionStockIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar entrada"):
        servicio = InventarioService(uow, NotificacionService(uow))
        producto, mov = servicio.entrada(
            TipoInventario.GENERAL, producto_id, payload.cantidad, **payload.model_dump(exclude={"cantidad"})
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado

@router.post("/{producto_id}/salida", response_model=OperacionStockOut)
def registrar_salida(producto_id: str, payload: OperacionStockIn, db: Session = Depends(get_db)):
    """Salida estricta: 409 si la cantidad supera el stock disponible."""
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar salida"):
        servicio = InventarioService(uow, NotificacionService(uow))
        producto, mov = servicio.salida(
            TipoInventario.GENERAL, producto_id, payload.cantidad, **payload.model_dump(exclude={"cantidad"})
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado

@router.post("/{producto_id}/ajuste", response_model=OperacionStockOut)
def registrar_ajuste(producto_id: str, payload: AjusteIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "registrar ajuste"):
        servicio = InventarioService(uow, NotificacionService(uow))
        producto, mov = servicio.ajuste(
            TipoInventario.GENERAL, producto_id, payload.cantidad, payload.motivo,
            usuario_id=payload.usuario_id, notas=payload.notas
        )
        resultado = operacion_out(producto, mov, CacheNombres(uow))
    return resultado
