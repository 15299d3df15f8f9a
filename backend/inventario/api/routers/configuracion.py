from fastapi import APIRouter, Query, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import List, Optional
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ...application.dtos import ConfiguracionIn, ConfiguracionUpdate, ConfiguracionOut
from ...application.services_configuracion import ConfiguracionService
from ..errores import transaccion

router = APIRouter(prefix="/configuracion", tags=["configuracion"])

class TasaCambioIn(BaseModel):
    tasa: float

@router.get("", response_model=List[ConfiguracionOut])
def listar_configuracion(categoria: Optional[str] = Query(None), db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "listar configuración"):
        servicio = ConfiguracionService(uow)
        configs = servicio.por_categoria(categoria) if categoria else servicio.listar()
        resultado = [ConfiguracionOut.model_validate(c) for c in configs]
    return resultado

@router.get("/monedas")
def monedas(db: Session = Depends(get_db)):
    """Tasa BCV, IVA y monedas con sus valores por defecto."""
    uow = UnitOfWork(db)
    with transaccion(uow, "leer configuración de monedas"):
        servicio = ConfiguracionService(uow)
        resultado = {
            "tasa_cambio_bcv": servicio.tasa_cambio_bcv(),
            "iva": servicio.iva(),
            "moneda_principal": servicio.moneda_principal(),
            "moneda_secundaria": servicio.moneda_secundaria(),
        }
    return resultado

@router.put("/monedas/tasa-bcv", response_model=ConfiguracionOut)
def actualizar_tasa_bcv(payload: TasaCambioIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "actualizar tasa BCV"):
        resultado = ConfiguracionOut.model_validate(ConfiguracionService(uow).actualizar_tasa_cambio_bcv(payload.tasa))
    return resultado

@router.get("/{clave}", response_model=ConfiguracionOut)
def obtener_configuracion(clave: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "obtener configuración"):
        resultado = ConfiguracionOut.model_validate(ConfiguracionService(uow).obtener(clave))
    return resultado

@router.post("", response_model=ConfiguracionOut, status_code=201)
def crear_configuracion(payload: ConfiguracionIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "crear configuración"):
        resultado = ConfiguracionOut.model_validate(ConfiguracionService(uow).crear(payload))
    return resultado

@router.patch("/{clave}", response_model=ConfiguracionOut)
def actualizar_configuracion(clave: str, payload: ConfiguracionUpdate, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "actualizar configuración"):
        resultado = ConfiguracionOut.model_validate(ConfiguracionService(uow).actualizar(clave, payload))
    return resultado

@router.delete("/{clave}", status_code=204)
def eliminar_configuracion(clave: str, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    with transaccion(uow, "eliminar configuración"):
        ConfiguracionService(uow).eliminar(clave)
