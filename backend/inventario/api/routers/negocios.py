from fastapi import APIRouter, Query, Depends
from sqlalchemy.orm import Session
from typing import List, Dict
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.dtos import NegocioIn, NegocioUpdate, NegocioOut
from ...application.services_negocios import NegocioService
from ..errores import transaccion

router = APIRouter(prefix="/negocios", tags=["negocios"])

@router.get("", response_model=List[NegocioOut])
def listar_negocios(solo_activos: bool = Query(True), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar negocios"):
        resultado = [NegocioOut.model_validate(n) for n in NegocioService(uow).listar(solo_activos)]
    return resultado

@router.get("/conteos", response_model=Dict[str, int])
def conteo_productos(db: Session = Depends(get_db)):
    """Productos activos por negocio."""
    uow = UnitOfWork(db)
    with transaccion(uow, "contar productos por negocio"):
        resultado = NegocioService(uow).conteo_productos()
    return resultado

@router.get("/{negocio_id}", response_model=NegocioOut)
def obtener_negocio(negocio_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "obtener negocio"):
        resultado = NegocioOut.model_validate(NegocioService(uow).obtener(negocio_id))
    return resultado

@router.post("", response_model=NegocioOut, status_code=201)
def crear_negocio(payload: NegocioIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "crear negocio"):
        resultado = NegocioOut.model_validate(NegocioService(uow).crear(payload))
    return resultado

@router.patch("/{negocio_id}", response_model=NegocioOut)
def actualizar_negocio(negocio_id: str, payload: NegocioUpdate, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "actualizar negocio"):
        resultado = NegocioOut.model_validate(NegocioService(uow).actualizar(negocio_id, payload))
    return resultado

@router.delete("/{negocio_id}")
def eliminar_negocio(negocio_id: str, db: Session = Depends(get_db)):
    """Eliminación lógica del negocio y de sus productos."""
    uow = UnitOfWork(db)
    with transaccion(uow, "eliminar negocio"):
        desactivados = NegocioService(uow).eliminar(negocio_id)
    return {"id": negocio_id, "activo": False, "productos_desactivados": desactivados}

@router.post("/{negocio_id}/restaurar", response_model=NegocioOut)
def restaurar_negocio(negocio_id: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "restaurar negocio"):
        resultado = NegocioOut.model_validate(NegocioService(uow).restaurar(negocio_id))
    return resultado
