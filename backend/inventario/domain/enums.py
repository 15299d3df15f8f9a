from enum import Enum

class EstadoProducto(str, Enum):
    DISPONIBLE = "disponible"
    BAJO = "bajo"
    MEDIO = "medio"  # Solo por edición explícita
    AGOTADO = "agotado"

class TipoMovimiento(str, Enum):
    ENTRADA = "entrada"
    SALIDA = "salida"
    AJUSTE = "ajuste"
    TRANSFERENCIA = "transferencia"

class TipoInventario(str, Enum):
    GENERAL = "general"
    DETALLADO = "detallado"

class TipoNotificacion(str, Enum):
    INFO = "info"
    ADVERTENCIA = "advertencia"
    ERROR = "error"
    EXITO = "exito"

class TipoConfiguracion(str, Enum):
    TEXTO = "texto"
    NUMERO = "numero"
    BOOLEANO = "booleano"
    JSON = "json"

class PeriodoReporte(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"

    @property
    def dias(self) -> int:
        return _DIAS_PERIODO[self]


_DIAS_PERIODO = {
    PeriodoReporte.DAILY: 1,
    PeriodoReporte.WEEKLY: 7,
    PeriodoReporte.BIWEEKLY: 15,
    PeriodoReporte.MONTHLY: 30,
    PeriodoReporte.QUARTERLY: 90,
    PeriodoReporte.ANNUAL: 365,
}

ESTADOS_ALERTA = (EstadoProducto.BAJO.value, EstadoProducto.AGOTADO.value)
