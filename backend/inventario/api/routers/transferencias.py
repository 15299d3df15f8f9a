"""
API de Transferencias
Inventario general → inventario detallado de un negocio, en una sola transacción.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.dtos import TransferenciaIn, ProductoDetalladoOut
from ...application.services_notificaciones import NotificacionService
from ...application.services_transferencias import TransferenciaService
from ..errores import transaccion

router = APIRouter(prefix="/transferencias", tags=["transferencias"])

@router.post("", response_model=ProductoDetalladoOut, status_code=201)
def transferir(payload: TransferenciaIn, db: Session = Depends(get_db)):
    """
    Crea el producto en el negocio, descuenta el general y registra salida + entrada.
    - 400: cantidad o stock mínimo <= 0
    - 404: negocio o producto inexistente
    - 409: cantidad mayor al stock disponible (sin efectos)
    """
    uow = UnitOfWork(db)
    with transaccion(uow, "transferir producto"):
        detallado = TransferenciaService(uow, NotificacionService(uow)).transferir(
            negocio_id=payload.negocio_id,
            producto_general_id=payload.producto_general_id,
            cantidad=payload.cantidad,
            stock_minimo=payload.stock_minimo,
            usuario_id=payload.usuario_id,
        )
        resultado = ProductoDetalladoOut.model_validate(detallado)
    return resultado
