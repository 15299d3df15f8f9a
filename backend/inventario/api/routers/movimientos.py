"""
API de Movimientos
==================

Consulta del libro de movimientos y corrección por reversión.
Los movimientos no se editan ni se borran: `POST /{id}/revertir` registra
un ajuste compensatorio y aplica su efecto al stock.
"""
from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.cache_nombres import CacheNombres
from ...application.dtos import MovimientoOut, ReversionIn, OperacionStockOut
from ...application.services_inventario import InventarioService
from ...application.services_movimientos import MovimientoService
from ...application.services_notificaciones import NotificacionService
from ...domain.enums import TipoInventario, TipoMovimiento
from ..errores import transaccion
from ..serializadores import movimiento_out, operacion_out

router = APIRouter(prefix="/movimientos", tags=["movimientos"])

@router.get("", response_model=List[MovimientoOut])
def listar_movimientos(limite: int = Query(100, ge=1, le=1000), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos"):
        cache = CacheNombres(uow)
        resultado = [movimiento_out(m, cache) for m in MovimientoService(uow).todos(limite)]
    return resultado

@router.get("/recientes", response_model=List[MovimientoOut])
def movimientos_recientes(
    dias: Optional[int] = Query(None, ge=1, description="Ventana en días (30 por defecto)"),
    db: Session = Depends(get_db)
):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos recientes"):
        cache = CacheNombres(uow)
        resultado = [movimiento_out(m, cache) for m in MovimientoService(uow).recientes(dias)]
    return resultado

@router.get("/estadisticas")
def estadisticas_movimientos(dias: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "calcular estadísticas de movimientos"):
        resultado = MovimientoService(uow).estadisticas(dias)
    return resultado

@router.get("/producto/{tipo_inventario}/{producto_id}", response_model=List[MovimientoOut])
def movimientos_por_producto(tipo_inventario: TipoInventario, producto_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos del producto"):
        cache = CacheNombres(uow)
        movimientos = MovimientoService(uow).recientes_por_producto(producto_id, tipo_inventario)
        resultado = [movimiento_out(m, cache) for m in movimientos]
    return resultado

@router.get("/negocio/{negocio_id}", response_model=List[MovimientoOut])
def movimientos_por_negocio(negocio_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos del negocio"):
        cache = CacheNombres(uow)
        resultado = [movimiento_out(m, cache) for m in MovimientoService(uow).por_negocio(negocio_id)]
    return resultado

@router.get("/tipo/{tipo}", response_model=List[MovimientoOut])
def movimientos_por_tipo(tipo: TipoMovimiento, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar movimientos por tipo"):
        cache = CacheNombres(uow)
        resultado = [movimiento_out(m, cache) for m in MovimientoService(uow).por_tipo(tipo)]
    return resultado

@router.get("/{movimiento_id}", response_model=MovimientoOut)
def obtener_movimiento(movimiento_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "obtener movimiento"):
        resultado = movimiento_out(MovimientoService(uow).obtener(movimiento_id), CacheNombres(uow))
    return resultado

@router.post("/{movimiento_id}/revertir", response_model=OperacionStockOut)
def revertir_movimiento(movimiento_id: str, payload: ReversionIn, db: Session = Depends(get_db)):
    """Registra el ajuste compensatorio; 409 si el stock actual no alcanza para revertir."""
    uow = UnitOfWork(db)
    with transaccion(uow, "revertir movimiento"):
        producto, compensacion = InventarioService(uow, NotificacionService(uow)).revertir_movimiento(
            movimiento_id, motivo=payload.motivo, usuario_id=payload.usuario_id
        )
        resultado = operacion_out(producto, compensacion, CacheNombres(uow))
    return resultado
