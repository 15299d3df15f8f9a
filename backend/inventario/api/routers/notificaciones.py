from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.dtos import NotificacionIn, NotificacionOut
from ...application.services_notificaciones import NotificacionService
from ..errores import transaccion

router = APIRouter(prefix="/notificaciones", tags=["notificaciones"])

@router.get("", response_model=List[NotificacionOut])
def listar_notificaciones(
    usuario_id: Optional[str] = Query(None),
    solo_no_leidas: bool = Query(False),
    db: Session = Depends(get_db)
):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar notificaciones"):
        servicio = NotificacionService(uow)
        notificaciones = servicio.no_leidas(usuario_id) if solo_no_leidas else servicio.listar(usuario_id)
        resultado = [NotificacionOut.model_validate(n) for n in notificaciones]
    return resultado

@router.post("", response_model=NotificacionOut, status_code=201)
def crear_notificacion(payload: NotificacionIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "crear notificación"):
        resultado = NotificacionOut.model_validate(NotificacionService(uow).crear(payload))
    return resultado

@router.post("/leidas")
def marcar_todas_como_leidas(usuario_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "marcar notificaciones como leídas"):
        total = NotificacionService(uow).marcar_todas_como_leidas(usuario_id)
    return {"marcadas": total}

@router.post("/{notificacion_id}/leida", response_model=NotificacionOut)
def marcar_como_leida(notificacion_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "marcar notificación como leída"):
        resultado = NotificacionOut.model_validate(NotificacionService(uow).marcar_como_leida(notificacion_id))
    return resultado
