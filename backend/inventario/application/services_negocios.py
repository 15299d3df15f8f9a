"""
Servicio de Negocios (ubicaciones)
Eliminar un negocio es lógico y arrastra a sus productos detallados en la misma transacción.
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict

from ..domain.errores import NegocioNoEncontradoError
from ..domain.models_negocios import Negocio
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import NegocioIn, NegocioUpdate

logger = logging.getLogger(__name__)


class NegocioService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def listar(self, solo_activos: bool = True) -> List[Negocio]:
        return self.uow.negocios.listar(solo_activos)

    def obtener(self, negocio_id: str, solo_activos: bool = False) -> Negocio:
        negocio = self.uow.negocios.obtener(negocio_id)
        if not negocio or (solo_activos and not negocio.activo):
            raise NegocioNoEncontradoError(negocio_id)
        return negocio

    def crear(self, datos: NegocioIn) -> Negocio:
        negocio = self.uow.negocios.agregar(Negocio(**datos.model_dump(), activo=True))
        logger.info(f"Negocio {negocio.id} creado: {negocio.nombre}")
        return negocio

    def actualizar(self, negocio_id: str, cambios: NegocioUpdate) -> Negocio:
        negocio = self.obtener(negocio_id)
        campos = cambios.model_dump(exclude_unset=True)
        if campos.get("nombre", "") is None:
            campos.pop("nombre")
        for campo, valor in campos.items():
            setattr(negocio, campo, valor)
        negocio.fecha_actualizacion = datetime.now()
        self.uow.db.flush()
        return negocio

    def eliminar(self, negocio_id: str) -> int:
        """Desactiva el negocio y sus productos; retorna cuántos productos se desactivaron."""
        negocio = self.obtener(negocio_id)
        negocio.activo = False
        negocio.fecha_actualizacion = datetime.now()
        desactivados = self.uow.detallado.desactivar_de_negocio(negocio_id)
        self.uow.db.flush()
        logger.info(f"Negocio {negocio_id} desactivado junto con {desactivados} productos")
        return desactivados

    def restaurar(self, negocio_id: str) -> Negocio:
        """Reactiva solo el negocio; sus productos se restauran uno a uno."""
        negocio = self.obtener(negocio_id)
        negocio.activo = True
        negocio.fecha_actualizacion = datetime.now()
        self.uow.db.flush()
        return negocio

    def conteo_productos(self) -> Dict[str, int]:
        return self.uow.detallado.conteos_por_negocio()
