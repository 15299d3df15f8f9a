"""
Coordinador de Transferencias
=============================

Mueve cantidad del inventario general al inventario detallado de un negocio.

Orden:
1. Obtener el producto general
2. Validar la cantidad contra su stock
3. Crear el producto detallado a partir del general (stock=cantidad, back-reference)
4. Descontar el stock general
5. Registrar salida (general) y entrada (detallado) con el mismo transferencia_id

Los pasos 3-5 corren en la transacción del llamador: si alguno falla,
el rollback deja ambas particiones como estaban.
"""
import logging
from decimal import Decimal
from typing import Optional

from ..domain.enums import TipoInventario, TipoNotificacion
from ..domain.errores import ArgumentoInvalidoError, StockInsuficienteError
from ..domain.models_inventario import nuevo_id
from ..domain.valores import cantidad as a_cantidad
from ..infrastructure.unit_of_work import UnitOfWork
from .services_inventario import negocio_activo
from .services_movimientos import MovimientoService, MOTIVO_TRANSFERENCIA_SALIDA, MOTIVO_TRANSFERENCIA_ENTRADA
from .services_notificaciones import NotificacionService

logger = logging.getLogger(__name__)


class TransferenciaService:
    def __init__(self, uow: UnitOfWork, notificaciones: Optional[NotificacionService] = None):
        self.uow = uow
        self.movimientos = MovimientoService(uow)
        self.notificaciones = notificaciones

    def transferir(
        self,
        negocio_id: str,
        producto_general_id: str,
        cantidad,
        stock_minimo,
        usuario_id: Optional[str] = None
    ):
        cantidad = a_cantidad(cantidad)
        stock_minimo = a_cantidad(stock_minimo)
        if cantidad <= 0:
            raise ArgumentoInvalidoError("La cantidad a transferir debe ser mayor a 0")
        if stock_minimo <= 0:
            raise ArgumentoInvalidoError("El stock mínimo debe ser mayor a 0")

        negocio = negocio_activo(self.uow, negocio_id)

        # 1. Producto general
        general = self.uow.general.obtener_o_error(producto_general_id, solo_activos=True)

        # 2. Validación contra el stock actual
        disponible = Decimal(str(general.stock))
        if cantidad > disponible:
            raise StockInsuficienteError(disponible, cantidad)

        # 3. Producto detallado sembrado desde el general
        detallado = self.uow.detallado.crear({
            "negocio_id": negocio.id,
            "producto_general_id": general.id,
            "nombre": general.nombre,
            "categoria": general.categoria,
            "unidad": general.unidad,
            "precio": general.precio,
            "imagen_url": general.imagen_url,
            "descripcion": general.descripcion,
            "stock": cantidad,
            "stock_minimo": stock_minimo,
        })

        # 4. Descuento condicional: falla si otra sesión consumió el stock entretanto
        general = self.uow.general.ajustar_stock(general.id, -cantidad)

        # 5. Movimientos enlazados
        transferencia_id = nuevo_id()
        salida = self.movimientos.registrar_salida(
            general.id, TipoInventario.GENERAL, cantidad, unidad=general.unidad,
            transferencia_id=transferencia_id,
            negocio_id=negocio.id,
            motivo=MOTIVO_TRANSFERENCIA_SALIDA,
            referencia=detallado.id,
            usuario_id=usuario_id,
        )
        self.movimientos.registrar_entrada(
            detallado.id, TipoInventario.DETALLADO, cantidad, unidad=detallado.unidad,
            transferencia_id=transferencia_id,
            negocio_id=negocio.id,
            precio_unitario=general.precio,
            motivo=MOTIVO_TRANSFERENCIA_ENTRADA,
            referencia=salida.id,
            usuario_id=usuario_id,
        )

        logger.info(
            f"Transferencia de {cantidad} {general.unidad} de '{general.nombre}' a negocio {negocio.id}: "
            f"detallado={detallado.id}, stock general restante={general.stock}"
        )

        if self.notificaciones is not None:
            self.notificaciones.publicar(
                "Transferencia completada",
                f"{general.nombre}: {_num(cantidad)} transferidos a {negocio.nombre}",
                TipoNotificacion.EXITO,
                usuario_id,
            )
            self.notificaciones.alertar_stock(general, usuario_id)
        return detallado


def _num(valor) -> str:
    return format(Decimal(str(valor)).normalize(), "f")
