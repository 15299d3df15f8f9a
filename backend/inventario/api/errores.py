"""
Traducción de la taxonomía de errores a HTTP:
- RecursoNoEncontradoError → 404
- ArgumentoInvalidoError → 400
- StockInsuficienteError → 409 (incluye `disponible`)
- BackendNoDisponibleError / SQLAlchemyError → 503
- cualquier otra excepción → 500
"""
import logging
from contextlib import contextmanager
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..domain.errores import (
    InventarioError, RecursoNoEncontradoError, ArgumentoInvalidoError,
    StockInsuficienteError, BackendNoDisponibleError
)
from ..infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def a_http(e: InventarioError) -> HTTPException:
    if isinstance(e, RecursoNoEncontradoError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, StockInsuficienteError):
        return HTTPException(status_code=409, detail={
            "mensaje": str(e),
            "disponible": float(e.disponible),
            "solicitado": float(e.solicitado),
        })
    if isinstance(e, BackendNoDisponibleError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, ArgumentoInvalidoError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@contextmanager
def transaccion(uow: UnitOfWork, operacion: str):
    """Confirma al salir; ante error hace rollback y lo traduce a HTTPException."""
    try:
        yield uow
        uow.commit()
    except HTTPException:
        uow.rollback()
        raise
    except InventarioError as e:
        uow.rollback()
        if isinstance(e, BackendNoDisponibleError):
            logger.error(f"Backend no disponible en {operacion}: {e.__cause__}", exc_info=e)
        raise a_http(e) from e
    except SQLAlchemyError as e:
        uow.rollback()
        logger.error(f"Error de base de datos en {operacion}: {e}", exc_info=True)
        raise a_http(BackendNoDisponibleError()) from e
    except Exception as e:
        uow.rollback()
        logger.error(f"Error inesperado en {operacion}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error al {operacion}") from e
