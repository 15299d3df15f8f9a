"""
API de Reportes
Dashboard y reportes por período. Solo lectura.
"""
from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import Optional
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.cache_nombres import CacheNombres
from ...application.services_negocios import NegocioService
from ...application.services_reportes import ReporteService
from ...domain.enums import PeriodoReporte
from ..errores import transaccion
from ..serializadores import movimiento_out

router = APIRouter(prefix="/reportes", tags=["reportes"])

@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    """
    - total_productos, valor_total (Σ stock × precio)
    - productos_bajo_stock: estado bajo o agotado
    - movimientos_recientes: los 5 más recientes
    """
    uow = UnitOfWork(db)
    with transaccion(uow, "generar dashboard"):
        cache = CacheNombres(uow)
        stats = ReporteService(uow, cache).dashboard()
        stats["movimientos_recientes"] = [movimiento_out(m, cache) for m in stats["movimientos_recientes"]]
    return stats

@router.get("")
def reporte(
    periodo: PeriodoReporte = Query(PeriodoReporte.MONTHLY),
    negocio_id: Optional[str] = Query(None, description="Reporte del inventario de un negocio"),
    db: Session = Depends(get_db)
):
    """
    KPIs, tendencia (proyección plana del valor actual), distribución de
    movimientos, top productos y stock crítico del período.
    """
    uow = UnitOfWork(db)
    with transaccion(uow, "generar reporte"):
        if negocio_id:
            NegocioService(uow).obtener(negocio_id)
        resultado = ReporteService(uow, CacheNombres(uow)).reporte(periodo, negocio_id)
    return resultado
