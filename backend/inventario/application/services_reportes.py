"""
Servicio de Reportes
Motor de agregación: funciones puras sobre productos y movimientos ya cargados.
Nunca consultan la base de datos y nunca fallan con colecciones vacías.
ReporteService solo carga los datos y delega en ellas.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional, Any

from ..config import settings
from ..domain.enums import EstadoProducto, PeriodoReporte, TipoInventario, TipoMovimiento, ESTADOS_ALERTA
from ..infrastructure.unit_of_work import UnitOfWork
from .cache_nombres import CacheNombres
from .services_movimientos import MovimientoService

logger = logging.getLogger(__name__)

DIAS_SEMANA = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]

ETIQUETAS_DISTRIBUCION = [
    (TipoMovimiento.ENTRADA, "Entradas"),
    (TipoMovimiento.SALIDA, "Salidas"),
    (TipoMovimiento.AJUSTE, "Ajustes"),
    (TipoMovimiento.TRANSFERENCIA, "Transferencias"),
]

NombreDe = Callable[[str, str], Optional[str]]


def _d(valor) -> Decimal:
    return Decimal(str(valor if valor is not None else 0))


def valor_inventario(productos: Iterable) -> Decimal:
    """Σ(stock × precio) del snapshot actual."""
    return sum((_d(p.stock) * _d(p.precio) for p in productos), Decimal("0"))


def conteo_alertas(productos: Iterable) -> int:
    return sum(1 for p in productos if p.estado in ESTADOS_ALERTA)


def estadisticas_dashboard(productos: List, movimientos_recientes: List, limite: int = 5) -> Dict[str, Any]:
    return {
        "total_productos": len(productos),
        "valor_total": float(valor_inventario(productos)),
        "productos_bajo_stock": conteo_alertas(productos),
        "movimientos_recientes": list(movimientos_recientes[:limite]),
    }


def inicio_periodo(periodo: PeriodoReporte, ahora: datetime) -> datetime:
    return ahora - timedelta(days=PeriodoReporte(periodo).dias)


def filtrar_periodo(movimientos: Iterable, periodo: PeriodoReporte, ahora: datetime) -> List:
    inicio = inicio_periodo(periodo, ahora)
    return [m for m in movimientos if m.fecha_movimiento >= inicio]


def kpis_reporte(productos: List, movimientos_periodo: List, tipo_inventario=TipoInventario.GENERAL) -> Dict[str, float]:
    """
    - valor_inventario: snapshot actual (no histórico al inicio del período)
    - perdidas_periodo: Σ(cantidad × precio) de salidas y ajustes, unidos por id de producto
    - productos_activos: estado != agotado
    - alertas_stock: estado bajo o agotado
    """
    particion = TipoInventario(tipo_inventario).value
    precios = {p.id: _d(p.precio) for p in productos}
    perdidas = Decimal("0")
    for m in movimientos_periodo:
        if m.tipo not in (TipoMovimiento.SALIDA, TipoMovimiento.AJUSTE):
            continue
        if m.tipo_inventario != particion or m.producto_id not in precios:
            continue
        perdidas += _d(m.cantidad) * precios[m.producto_id]
    return {
        "valor_inventario": float(valor_inventario(productos)),
        "perdidas_periodo": float(perdidas),
        "productos_activos": sum(1 for p in productos if p.estado != EstadoProducto.AGOTADO),
        "alertas_stock": conteo_alertas(productos),
    }


def serie_tendencia(valor_actual, periodo: PeriodoReporte, ahora: datetime) -> List[Dict[str, Any]]:
    """
    Proyección plana: no hay snapshots históricos, cada punto repite el valor actual.
    24 puntos horarios para 'daily', 7 diarios para el resto; del más antiguo al más reciente.
    """
    valor = float(_d(valor_actual))
    if PeriodoReporte(periodo) == PeriodoReporte.DAILY:
        puntos = [ahora - timedelta(hours=i) for i in range(23, -1, -1)]
        return [{"etiqueta": f"{t.hour}:00", "valor": valor} for t in puntos]
    puntos = [ahora - timedelta(days=i) for i in range(6, -1, -1)]
    return [{"etiqueta": DIAS_SEMANA[t.weekday()], "valor": valor} for t in puntos]


def distribucion_movimientos(movimientos: Iterable) -> List[Dict[str, Any]]:
    """Porcentaje por tipo, redondeado al entero (mitad hacia arriba)."""
    conteo = {t.value: 0 for t, _ in ETIQUETAS_DISTRIBUCION}
    for m in movimientos:
        tipo = getattr(m.tipo, "value", m.tipo)
        if tipo in conteo:
            conteo[tipo] += 1
    total = sum(conteo.values()) or 1
    resultado = []
    for tipo, nombre in ETIQUETAS_DISTRIBUCION:
        porcentaje = (Decimal(conteo[tipo.value]) * 100 / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        resultado.append({"nombre": nombre, "tipo": tipo.value, "cantidad": conteo[tipo.value], "valor": int(porcentaje)})
    return resultado


def top_productos(movimientos: Iterable, nombre_de: Optional[NombreDe] = None, limite: int = 5) -> List[Dict[str, Any]]:
    """Suma de cantidades por (partición, producto), de mayor a menor."""
    totales: Dict[tuple, Decimal] = {}
    for m in movimientos:
        clave = (m.tipo_inventario, m.producto_id)
        totales[clave] = totales.get(clave, Decimal("0")) + _d(m.cantidad)
    ordenados = sorted(totales.items(), key=lambda item: item[1], reverse=True)[:limite]
    resultado = []
    for (tipo_inventario, producto_id), total in ordenados:
        nombre = nombre_de(tipo_inventario, producto_id) if nombre_de else None
        resultado.append({
            "producto_id": producto_id,
            "tipo_inventario": tipo_inventario,
            "nombre": nombre or producto_id,
            "cantidad": float(total),
        })
    return resultado


def stock_critico(productos: Iterable) -> List[Dict[str, Any]]:
    return [
        {
            "id": p.id,
            "nombre": p.nombre,
            "stock": float(_d(p.stock)),
            "unidad": p.unidad,
            "estado": EstadoProducto.AGOTADO.value if p.estado == EstadoProducto.AGOTADO else EstadoProducto.BAJO.value,
        }
        for p in productos if p.estado in ESTADOS_ALERTA
    ]


def generar_reporte(
    productos: List,
    movimientos: List,
    periodo: PeriodoReporte,
    ahora: Optional[datetime] = None,
    nombre_de: Optional[NombreDe] = None,
    tipo_inventario=TipoInventario.GENERAL,
    limite_top: int = 5
) -> Dict[str, Any]:
    ahora = ahora or datetime.now()
    periodo = PeriodoReporte(periodo)
    movimientos_periodo = filtrar_periodo(movimientos, periodo, ahora)
    kpis = kpis_reporte(productos, movimientos_periodo, tipo_inventario)
    return {
        "periodo": periodo.value,
        "desde": inicio_periodo(periodo, ahora),
        "hasta": ahora,
        "kpis": kpis,
        "tendencia": serie_tendencia(kpis["valor_inventario"], periodo, ahora),
        "distribucion_movimientos": distribucion_movimientos(movimientos_periodo),
        "top_productos": top_productos(movimientos_periodo, nombre_de, limite_top),
        "stock_critico": stock_critico(productos),
    }


class ReporteService:
    """
    Carga productos y movimientos y delega en las funciones puras.
    Solo lectura.
    """

    def __init__(self, uow: UnitOfWork, cache: Optional[CacheNombres] = None):
        self.uow = uow
        self.cache = cache if cache is not None else CacheNombres(uow)
        self.movimientos = MovimientoService(uow)

    def dashboard(self, ahora: Optional[datetime] = None) -> Dict[str, Any]:
        productos = self.uow.general.listar(True)
        recientes = self.movimientos.recientes(ahora=ahora)
        return estadisticas_dashboard(productos, recientes, settings.limite_movimientos_dashboard)

    def reporte(self, periodo, negocio_id: Optional[str] = None, ahora: Optional[datetime] = None) -> Dict[str, Any]:
        ahora = ahora or datetime.now()
        periodo = PeriodoReporte(periodo)
        inicio = inicio_periodo(periodo, ahora)
        if negocio_id:
            productos = self.uow.detallado.de_negocio(negocio_id).listar(True)
            tipo_inventario = TipoInventario.DETALLADO
            movimientos = [m for m in self.movimientos.desde(inicio) if m.negocio_id == negocio_id
                           and m.tipo_inventario == TipoInventario.DETALLADO.value]
        else:
            productos = self.uow.general.listar(True)
            tipo_inventario = TipoInventario.GENERAL
            movimientos = self.movimientos.desde(inicio)
        self.cache.precargar(productos, tipo_inventario)
        logger.info(f"Reporte {periodo.value} generado: {len(productos)} productos, {len(movimientos)} movimientos")
        return generar_reporte(
            productos, movimientos, periodo, ahora,
            nombre_de=self.cache.nombre,
            tipo_inventario=tipo_inventario,
            limite_top=settings.limite_top_productos,
        )
