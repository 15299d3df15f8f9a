"""
Libro de Movimientos
====================

Historial append-only de eventos que afectan stock, por partición.

Convención de signos:
- entrada: cantidad positiva, efecto +cantidad
- salida: cantidad positiva, efecto -cantidad
- ajuste: cantidad con signo, efecto = cantidad
- transferencia: se registra como salida (general) + entrada (detallado)

Registrar un movimiento NO modifica stock; InventarioService acopla ambas cosas.
Los movimientos no se editan ni se borran: las correcciones son ajustes compensatorios.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, List, Dict, Any

from ..config import settings
from ..domain.enums import TipoMovimiento, TipoInventario
from ..domain.errores import ArgumentoInvalidoError, MovimientoNoEncontradoError
from ..domain.models_inventario import Movimiento
from ..domain.valores import cantidad as a_cantidad, monto
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import MovimientoIn

logger = logging.getLogger(__name__)

# Texto de las dos patas de una transferencia; la pata se identifica por transferencia_id
MOTIVO_TRANSFERENCIA_SALIDA = "Transferencia a ubicación"
MOTIVO_TRANSFERENCIA_ENTRADA = "Transferencia desde inventario general"


def efecto_en_stock(mov) -> Decimal:
    """Delta con signo que el movimiento representa sobre el stock."""
    cantidad = Decimal(str(mov.cantidad))
    if mov.tipo == TipoMovimiento.ENTRADA:
        return cantidad
    if mov.tipo == TipoMovimiento.SALIDA:
        return -cantidad
    if mov.tipo == TipoMovimiento.AJUSTE:
        return cantidad
    return Decimal("0")


class MovimientoService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _validar(self, datos: MovimientoIn) -> Decimal:
        cantidad = a_cantidad(datos.cantidad)
        if datos.tipo == TipoMovimiento.AJUSTE:
            if cantidad == 0:
                raise ArgumentoInvalidoError("La cantidad de un ajuste no puede ser 0")
        elif cantidad <= 0:
            raise ArgumentoInvalidoError(f"La cantidad debe ser mayor a 0 para un movimiento de {datos.tipo.value}")
        if datos.precio_unitario is not None and datos.precio_unitario < 0:
            raise ArgumentoInvalidoError("El precio unitario no puede ser negativo")
        return cantidad

    def registrar(
        self,
        datos: MovimientoIn,
        movimiento_revertido_id: Optional[str] = None,
        transferencia_id: Optional[str] = None
    ) -> Movimiento:
        """
        Persiste el movimiento con fecha del servidor; no toca stock.
        Los enlaces (reversión, transferencia) solo los fijan los servicios, nunca el payload.
        """
        cantidad = self._validar(datos)
        producto = self.uow.inventario(datos.tipo_inventario.value).obtener_o_error(datos.producto_id)

        negocio_id = datos.negocio_id
        if datos.tipo_inventario == TipoInventario.DETALLADO and negocio_id is None:
            negocio_id = producto.negocio_id

        precio_unitario = monto(datos.precio_unitario) if datos.precio_unitario is not None else None
        total = monto(precio_unitario * abs(cantidad)) if precio_unitario is not None else None

        mov = Movimiento(
            tipo=datos.tipo.value,
            producto_id=datos.producto_id,
            tipo_inventario=datos.tipo_inventario.value,
            negocio_id=negocio_id,
            cantidad=cantidad,
            unidad=datos.unidad if datos.unidad is not None else producto.unidad,
            precio_unitario=precio_unitario,
            total=total,
            motivo=datos.motivo,
            usuario_id=datos.usuario_id,
            referencia=datos.referencia,
            notas=datos.notas,
            movimiento_revertido_id=movimiento_revertido_id,
            transferencia_id=transferencia_id,
            fecha_movimiento=datetime.now(),
        )
        self.uow.movimientos.agregar(mov)
        logger.info(
            f"Movimiento {mov.id} registrado: tipo={mov.tipo}, producto_id={mov.producto_id}, "
            f"inventario={mov.tipo_inventario}, cantidad={cantidad}"
        )
        return mov

    def registrar_entrada(self, producto_id: str, tipo_inventario, cantidad, unidad: Optional[str] = None,
                          transferencia_id: Optional[str] = None, **opciones) -> Movimiento:
        return self.registrar(MovimientoIn(
            tipo=TipoMovimiento.ENTRADA, producto_id=producto_id, tipo_inventario=tipo_inventario,
            cantidad=cantidad, unidad=unidad, **opciones
        ), transferencia_id=transferencia_id)

    def registrar_salida(self, producto_id: str, tipo_inventario, cantidad, unidad: Optional[str] = None,
                         transferencia_id: Optional[str] = None, **opciones) -> Movimiento:
        return self.registrar(MovimientoIn(
            tipo=TipoMovimiento.SALIDA, producto_id=producto_id, tipo_inventario=tipo_inventario,
            cantidad=cantidad, unidad=unidad, **opciones
        ), transferencia_id=transferencia_id)

    def registrar_ajuste(self, producto_id: str, tipo_inventario, cantidad, unidad: Optional[str] = None,
                         movimiento_revertido_id: Optional[str] = None, **opciones) -> Movimiento:
        return self.registrar(MovimientoIn(
            tipo=TipoMovimiento.AJUSTE, producto_id=producto_id, tipo_inventario=tipo_inventario,
            cantidad=cantidad, unidad=unidad, **opciones
        ), movimiento_revertido_id=movimiento_revertido_id)

    # ===== CONSULTAS =====

    def obtener(self, movimiento_id: str) -> Movimiento:
        mov = self.uow.movimientos.obtener(movimiento_id)
        if not mov:
            raise MovimientoNoEncontradoError(movimiento_id)
        return mov

    def todos(self, limite: int = 100) -> List[Movimiento]:
        return self.uow.movimientos.listar(limite)

    def recientes_por_producto(self, producto_id: str, tipo_inventario) -> List[Movimiento]:
        return self.uow.movimientos.por_producto(producto_id, TipoInventario(tipo_inventario).value)

    def recientes(self, dias: Optional[int] = None, ahora: Optional[datetime] = None) -> List[Movimiento]:
        """Ventana de trabajo para dashboard (30 días por defecto), más recientes primero."""
        dias = dias if dias is not None else settings.ventana_recientes_dias
        ahora = ahora or datetime.now()
        return self.uow.movimientos.desde(ahora - timedelta(days=dias))

    def desde(self, fecha_inicio: datetime, tipo_inventario: Optional[str] = None) -> List[Movimiento]:
        return self.uow.movimientos.desde(fecha_inicio, tipo_inventario)

    def por_negocio(self, negocio_id: str) -> List[Movimiento]:
        return self.uow.movimientos.por_negocio(negocio_id)

    def por_tipo(self, tipo) -> List[Movimiento]:
        return self.uow.movimientos.por_tipo(TipoMovimiento(tipo).value)

    def estadisticas(self, dias: Optional[int] = None, ahora: Optional[datetime] = None) -> Dict[str, Any]:
        ahora = ahora or datetime.now()
        movimientos = self.recientes(dias, ahora)
        inicio_hoy = ahora.replace(hour=0, minute=0, second=0, microsecond=0)
        conteo = {t.value: 0 for t in TipoMovimiento}
        for m in movimientos:
            conteo[m.tipo] = conteo.get(m.tipo, 0) + 1
        return {
            "total_movimientos": len(movimientos),
            "entradas": conteo[TipoMovimiento.ENTRADA.value],
            "salidas": conteo[TipoMovimiento.SALIDA.value],
            "ajustes": conteo[TipoMovimiento.AJUSTE.value],
            "transferencias": conteo[TipoMovimiento.TRANSFERENCIA.value],
            "movimientos_hoy": sum(1 for m in movimientos if m.fecha_movimiento >= inicio_hoy),
        }
