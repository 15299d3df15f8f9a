"""
Servicio de Notificaciones
Canal lateral de eventos: alertas de stock, operaciones completadas, avisos.
"""
import logging
from datetime import datetime
from typing import Optional, List

from ..domain.enums import TipoNotificacion, EstadoProducto
from ..domain.errores import NotificacionNoEncontradaError
from ..domain.models_sistema import Notificacion
from ..domain.valores import cantidad
from ..infrastructure.unit_of_work import UnitOfWork
from .dtos import NotificacionIn

logger = logging.getLogger(__name__)


class NotificacionService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def listar(self, usuario_id: Optional[str] = None) -> List[Notificacion]:
        return self.uow.notificaciones.listar(usuario_id)

    def no_leidas(self, usuario_id: Optional[str] = None) -> List[Notificacion]:
        return self.uow.notificaciones.listar(usuario_id, solo_no_leidas=True)

    def crear(self, datos: NotificacionIn) -> Notificacion:
        notificacion = Notificacion(
            usuario_id=datos.usuario_id,
            tipo=datos.tipo.value,
            titulo=datos.titulo,
            mensaje=datos.mensaje,
            url_accion=datos.url_accion,
            leida=False,
            fecha_creacion=datetime.now(),
        )
        self.uow.notificaciones.agregar(notificacion)
        logger.info(f"Notificación {notificacion.tipo}: {notificacion.titulo}")
        return notificacion

    def publicar(self, titulo: str, mensaje: str, tipo: TipoNotificacion = TipoNotificacion.INFO,
                 usuario_id: Optional[str] = None, url_accion: Optional[str] = None) -> Notificacion:
        return self.crear(NotificacionIn(
            titulo=titulo, mensaje=mensaje, tipo=tipo, usuario_id=usuario_id, url_accion=url_accion
        ))

    def marcar_como_leida(self, notificacion_id: str) -> Notificacion:
        notificacion = self.uow.notificaciones.obtener(notificacion_id)
        if not notificacion:
            raise NotificacionNoEncontradaError(notificacion_id)
        if not notificacion.leida:
            notificacion.leida = True
            notificacion.fecha_lectura = datetime.now()
            self.uow.db.flush()
        return notificacion

    def marcar_todas_como_leidas(self, usuario_id: Optional[str] = None) -> int:
        return self.uow.notificaciones.marcar_todas(usuario_id, datetime.now())

    def alertar_stock(self, producto, usuario_id: Optional[str] = None) -> Optional[Notificacion]:
        """Publica alerta si el producto quedó bajo o agotado."""
        if producto.estado == EstadoProducto.AGOTADO:
            return self.publicar(
                "Producto agotado",
                f"{producto.nombre} se ha agotado",
                TipoNotificacion.ERROR,
                usuario_id,
            )
        if producto.estado == EstadoProducto.BAJO:
            return self.publicar(
                "Stock bajo",
                f"{producto.nombre} tiene stock bajo: {_num(producto.stock)} (mínimo {_num(producto.stock_minimo)})",
                TipoNotificacion.ADVERTENCIA,
                usuario_id,
            )
        return None


def _num(valor) -> str:
    return format(cantidad(valor).normalize(), "f")
