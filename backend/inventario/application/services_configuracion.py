"""
Servicio de Configuración
Almacén clave/valor de la aplicación (tasa de cambio, IVA, monedas).
Los valores se guardan como texto y se interpretan según `tipo`.
"""
import json
import logging
from datetime import datetime
from typing import Any, List, Optional

from ..domain.enums import TipoConfiguracion
from ..domain.errores import ArgumentoInvalidoError, ConfiguracionNoEncontradaError
from ..domain.models_sistema import Configuracion
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import ConfiguracionIn, ConfiguracionUpdate

logger = logging.getLogger(__name__)

CLAVE_TASA_BCV = "tasa_cambio_bcv"
CLAVE_IVA = "iva_porcentaje"
CLAVE_MONEDA_PRINCIPAL = "moneda_principal"
CLAVE_MONEDA_SECUNDARIA = "moneda_secundaria"

TASA_BCV_DEFECTO = 50.0
IVA_DEFECTO = 16.0
MONEDA_PRINCIPAL_DEFECTO = "USD"
MONEDA_SECUNDARIA_DEFECTO = "VES"


def interpretar_valor(valor: Optional[str], tipo: str) -> Any:
    if valor is None:
        return None
    try:
        if tipo == TipoConfiguracion.NUMERO:
            return float(valor)
        if tipo == TipoConfiguracion.BOOLEANO:
            return valor.strip().lower() in ("true", "1", "si", "sí")
        if tipo == TipoConfiguracion.JSON:
            return json.loads(valor)
    except (ValueError, TypeError) as e:
        raise ArgumentoInvalidoError(f"Valor '{valor}' no es válido para el tipo {tipo}") from e
    return valor


class ConfiguracionService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def listar(self) -> List[Configuracion]:
        return self.uow.configuracion.listar()

    def obtener(self, clave: str) -> Configuracion:
        config = self.uow.configuracion.por_clave(clave)
        if not config:
            raise ConfiguracionNoEncontradaError(clave)
        return config

    def obtener_valor(self, clave: str) -> Optional[str]:
        config = self.uow.configuracion.por_clave(clave)
        return config.valor if config else None

    def obtener_valor_tipado(self, clave: str) -> Any:
        config = self.obtener(clave)
        return interpretar_valor(config.valor, config.tipo)

    def por_categoria(self, categoria: str) -> List[Configuracion]:
        return self.uow.configuracion.por_categoria(categoria)

    def crear(self, datos: ConfiguracionIn) -> Configuracion:
        if self.uow.configuracion.por_clave(datos.clave):
            raise ArgumentoInvalidoError(f"Ya existe la configuración {datos.clave}")
        interpretar_valor(datos.valor, datos.tipo.value)
        config = Configuracion(
            clave=datos.clave,
            valor=datos.valor,
            tipo=datos.tipo.value,
            descripcion=datos.descripcion,
            categoria=datos.categoria,
            fecha_actualizacion=datetime.now(),
        )
        return self.uow.configuracion.agregar(config)

    def actualizar(self, clave: str, cambios: ConfiguracionUpdate) -> Configuracion:
        config = self.obtener(clave)
        campos = cambios.model_dump(exclude_unset=True)
        if campos.get("tipo") is not None:
            campos["tipo"] = TipoConfiguracion(campos["tipo"]).value
        else:
            campos.pop("tipo", None)
        interpretar_valor(campos.get("valor", config.valor), campos.get("tipo", config.tipo))
        for campo, valor in campos.items():
            setattr(config, campo, valor)
        config.fecha_actualizacion = datetime.now()
        self.uow.db.flush()
        logger.info(f"Configuración {clave} actualizada")
        return config

    def actualizar_valor(self, clave: str, valor: str) -> Configuracion:
        return self.actualizar(clave, ConfiguracionUpdate(valor=valor))

    def eliminar(self, clave: str) -> None:
        self.uow.db.delete(self.obtener(clave))
        self.uow.db.flush()

    # ===== ATAJOS =====

    def _numero(self, clave: str, defecto: float) -> float:
        valor = self.obtener_valor(clave)
        try:
            return float(valor) if valor else defecto
        except ValueError:
            logger.warning(f"Configuración {clave} con valor no numérico '{valor}'; usando {defecto}")
            return defecto

    def tasa_cambio_bcv(self) -> float:
        return self._numero(CLAVE_TASA_BCV, TASA_BCV_DEFECTO)

    def actualizar_tasa_cambio_bcv(self, tasa: float) -> Configuracion:
        if tasa <= 0:
            raise ArgumentoInvalidoError("La tasa de cambio debe ser mayor a 0")
        if self.uow.configuracion.por_clave(CLAVE_TASA_BCV) is None:
            return self.crear(ConfiguracionIn(
                clave=CLAVE_TASA_BCV, valor=str(tasa), tipo=TipoConfiguracion.NUMERO,
                descripcion="Tasa de cambio BCV", categoria="monedas"
            ))
        return self.actualizar_valor(CLAVE_TASA_BCV, str(tasa))

    def iva(self) -> float:
        return self._numero(CLAVE_IVA, IVA_DEFECTO)

    def moneda_principal(self) -> str:
        return self.obtener_valor(CLAVE_MONEDA_PRINCIPAL) or MONEDA_PRINCIPAL_DEFECTO

    def moneda_secundaria(self) -> str:
        return self.obtener_valor(CLAVE_MONEDA_SECUNDARIA) or MONEDA_SECUNDARIA_DEFECTO
