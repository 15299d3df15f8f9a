"""
Servicios de Inventario
=======================

ProductoService: catálogo de una partición (general o detallado de un negocio).
Las ediciones directas nunca mueven stock.

InventarioService: operaciones que mueven stock, siempre acopladas a un movimiento
dentro de la transacción del llamador:
- entrada / salida / ajuste
- agregar producto al inventario de un negocio
- revertir un movimiento con un ajuste compensatorio
"""
import logging
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple

from ..domain.enums import TipoInventario, TipoMovimiento
from ..domain.errores import ArgumentoInvalidoError, NegocioNoEncontradoError
from ..domain.estado import requiere_alerta
from ..domain.models_inventario import Movimiento
from ..domain.valores import cantidad as a_cantidad, monto
from ..infrastructure.unit_of_work import UnitOfWork
from .cache_nombres import CacheNombres
from .dtos import ProductoIn, ProductoDetalladoIn, ProductoUpdate
from .services_movimientos import MovimientoService, efecto_en_stock
from .services_notificaciones import NotificacionService
from .services_reportes import valor_inventario

logger = logging.getLogger(__name__)

CAMPOS_OBLIGATORIOS = ("nombre", "categoria", "unidad", "stock_minimo", "precio")


def _validar_no_negativos(**valores):
    for campo, valor in valores.items():
        if valor is not None and Decimal(str(valor)) < 0:
            raise ArgumentoInvalidoError(f"{campo} no puede ser negativo")


def negocio_activo(uow: UnitOfWork, negocio_id: str):
    negocio = uow.negocios.obtener(negocio_id)
    if not negocio or not negocio.activo:
        raise NegocioNoEncontradoError(negocio_id)
    return negocio


class ProductoService:
    def __init__(
        self,
        uow: UnitOfWork,
        tipo_inventario=TipoInventario.GENERAL,
        negocio_id: Optional[str] = None,
        cache: Optional[CacheNombres] = None
    ):
        self.uow = uow
        self.tipo_inventario = TipoInventario(tipo_inventario)
        self.negocio_id = negocio_id
        self.cache = cache
        if self.tipo_inventario == TipoInventario.DETALLADO:
            self.repo = uow.detallado.de_negocio(negocio_id) if negocio_id else uow.detallado
        else:
            self.repo = uow.general

    def listar(self, solo_activos: bool = True):
        return self.repo.listar(solo_activos)

    def obtener(self, producto_id: str, solo_activos: bool = False):
        return self.repo.obtener_o_error(producto_id, solo_activos=solo_activos)

    def buscar(self, termino: str):
        if not termino or not termino.strip():
            return self.repo.listar(True)
        return self.repo.buscar_por_nombre(termino)

    def por_categoria(self, categoria: str):
        return self.repo.por_categoria(categoria)

    def categorias(self) -> List[str]:
        return self.repo.categorias()

    def bajo_stock(self):
        return self.repo.bajo_stock()

    def crear(self, datos: ProductoIn):
        _validar_no_negativos(stock=datos.stock, stock_minimo=datos.stock_minimo, precio=datos.precio)
        campos = datos.model_dump()
        campos["precio"] = monto(campos["precio"])
        if self.tipo_inventario == TipoInventario.DETALLADO:
            if not self.negocio_id:
                raise ArgumentoInvalidoError("Se requiere negocio_id para el inventario detallado")
            negocio_activo(self.uow, self.negocio_id)
            campos["negocio_id"] = self.negocio_id
            if campos.get("producto_general_id"):
                self.uow.general.obtener_o_error(campos["producto_general_id"])
        else:
            campos.pop("producto_general_id", None)
        producto = self.repo.crear(campos)
        logger.info(f"Producto {producto.id} creado en inventario {self.tipo_inventario.value}: {producto.nombre}")
        return producto

    def actualizar(self, producto_id: str, cambios: ProductoUpdate):
        campos = cambios.model_dump(exclude_unset=True)
        for campo in CAMPOS_OBLIGATORIOS:
            if campo in campos and campos[campo] is None:
                campos.pop(campo)
        _validar_no_negativos(stock_minimo=campos.get("stock_minimo"), precio=campos.get("precio"))
        if "precio" in campos:
            campos["precio"] = monto(campos["precio"])
        anterior = self.obtener(producto_id)
        renombrado = "nombre" in campos and campos["nombre"] != anterior.nombre
        producto = self.repo.actualizar(producto_id, campos)
        if renombrado and self.cache is not None:
            self.cache.invalidar(self.tipo_inventario, producto_id)
        return producto

    def eliminar(self, producto_id: str):
        self.obtener(producto_id)
        producto = self.repo.eliminar(producto_id)
        logger.info(f"Producto {producto_id} desactivado ({self.tipo_inventario.value})")
        return producto

    def restaurar(self, producto_id: str):
        self.obtener(producto_id)
        return self.repo.restaurar(producto_id)

    def eliminar_permanente(self, producto_id: str) -> None:
        self.obtener(producto_id)
        self.repo.eliminar_permanente(producto_id)
        if self.cache is not None:
            self.cache.invalidar(self.tipo_inventario, producto_id)
        logger.info(f"Producto {producto_id} eliminado permanentemente ({self.tipo_inventario.value})")

    def estadisticas(self) -> Dict[str, Any]:
        productos = self.listar(True)
        por_categoria: Dict[str, int] = {}
        for p in productos:
            por_categoria[p.categoria] = por_categoria.get(p.categoria, 0) + 1
        return {
            "total_productos": len(productos),
            "valor_total": float(valor_inventario(productos)),
            "productos_bajo_stock": sum(1 for p in productos if p.estado == "bajo"),
            "productos_agotados": sum(1 for p in productos if p.estado == "agotado"),
            "productos_por_categoria": por_categoria,
        }


class InventarioService:
    def __init__(self, uow: UnitOfWork, notificaciones: Optional[NotificacionService] = None):
        self.uow = uow
        self.movimientos = MovimientoService(uow)
        self.notificaciones = notificaciones

    def _repo(self, tipo_inventario, negocio_id: Optional[str] = None):
        tipo = TipoInventario(tipo_inventario)
        if tipo == TipoInventario.DETALLADO and negocio_id:
            return self.uow.detallado.de_negocio(negocio_id)
        return self.uow.inventario(tipo.value)

    def _alertar(self, producto, usuario_id: Optional[str] = None):
        if self.notificaciones is not None and requiere_alerta(producto.estado):
            self.notificaciones.alertar_stock(producto, usuario_id)

    @staticmethod
    def _cantidad_positiva(cantidad) -> Decimal:
        cantidad = a_cantidad(cantidad)
        if cantidad <= 0:
            raise ArgumentoInvalidoError("La cantidad debe ser mayor a 0")
        return cantidad

    def entrada(
        self,
        tipo_inventario,
        producto_id: str,
        cantidad,
        negocio_id: Optional[str] = None,
        **opciones
    ) -> Tuple[Any, Movimiento]:
        """Incrementa stock y registra la entrada."""
        cantidad = self._cantidad_positiva(cantidad)
        repo = self._repo(tipo_inventario, negocio_id)
        repo.obtener_o_error(producto_id)
        producto = repo.incrementar_stock(producto_id, cantidad)
        mov = self.movimientos.registrar_entrada(
            producto_id, repo.tipo_inventario, cantidad, unidad=producto.unidad, **opciones
        )
        logger.info(f"Entrada de {cantidad} en {producto.nombre} ({repo.tipo_inventario.value}); stock={producto.stock}")
        return producto, mov

    def salida(
        self,
        tipo_inventario,
        producto_id: str,
        cantidad,
        negocio_id: Optional[str] = None,
        **opciones
    ) -> Tuple[Any, Movimiento]:
        """Resta stock (estricto) y registra la salida."""
        cantidad = self._cantidad_positiva(cantidad)
        repo = self._repo(tipo_inventario, negocio_id)
        repo.obtener_o_error(producto_id)
        producto = repo.ajustar_stock(producto_id, -cantidad)
        mov = self.movimientos.registrar_salida(
            producto_id, repo.tipo_inventario, cantidad, unidad=producto.unidad, **opciones
        )
        logger.info(f"Salida de {cantidad} en {producto.nombre} ({repo.tipo_inventario.value}); stock={producto.stock}")
        self._alertar(producto, opciones.get("usuario_id"))
        return producto, mov

    def ajuste(
        self,
        tipo_inventario,
        producto_id: str,
        cantidad,
        motivo: str,
        negocio_id: Optional[str] = None,
        usuario_id: Optional[str] = None,
        notas: Optional[str] = None
    ) -> Tuple[Any, Movimiento]:
        """Corrección con signo: positiva suma, negativa resta."""
        cantidad = a_cantidad(cantidad)
        if cantidad == 0:
            raise ArgumentoInvalidoError("La cantidad de un ajuste no puede ser 0")
        if not motivo or not motivo.strip():
            raise ArgumentoInvalidoError("El ajuste requiere un motivo")
        repo = self._repo(tipo_inventario, negocio_id)
        repo.obtener_o_error(producto_id)
        producto = repo.ajustar_stock(producto_id, cantidad)
        mov = self.movimientos.registrar_ajuste(
            producto_id, repo.tipo_inventario, cantidad, unidad=producto.unidad,
            motivo=motivo, usuario_id=usuario_id, notas=notas
        )
        logger.info(f"Ajuste de {cantidad} en {producto.nombre} ({repo.tipo_inventario.value}); stock={producto.stock}")
        self._alertar(producto, usuario_id)
        return producto, mov

    def agregar_a_negocio(self, negocio_id: str, datos: ProductoDetalladoIn, usuario_id: Optional[str] = None):
        """Crea el producto en el negocio y registra su stock inicial como entrada."""
        producto = ProductoService(self.uow, TipoInventario.DETALLADO, negocio_id).crear(datos)
        if producto.stock > 0:
            self.movimientos.registrar_entrada(
                producto.id, TipoInventario.DETALLADO, producto.stock, unidad=producto.unidad,
                negocio_id=negocio_id,
                precio_unitario=producto.precio,
                motivo="Producto agregado al inventario detallado",
                usuario_id=usuario_id,
            )
        self._alertar(producto, usuario_id)
        return producto

    def revertir_movimiento(
        self,
        movimiento_id: str,
        motivo: Optional[str] = None,
        usuario_id: Optional[str] = None
    ) -> Tuple[Any, Movimiento]:
        """
        Anula el efecto de un movimiento con un ajuste compensatorio.
        El movimiento original no se modifica.
        """
        original = self.movimientos.obtener(movimiento_id)
        if original.tipo == TipoMovimiento.TRANSFERENCIA or original.transferencia_id is not None:
            raise ArgumentoInvalidoError("Las transferencias no se revierten con un ajuste")
        if original.movimiento_revertido_id is not None:
            raise ArgumentoInvalidoError(f"El movimiento {movimiento_id} ya es una compensación")
        if self.uow.movimientos.compensacion_de(movimiento_id) is not None:
            raise ArgumentoInvalidoError(f"El movimiento {movimiento_id} ya fue revertido")

        delta = -efecto_en_stock(original)
        repo = self.uow.inventario(original.tipo_inventario)
        repo.obtener_o_error(original.producto_id)
        producto = repo.ajustar_stock(original.producto_id, delta)
        compensacion = self.movimientos.registrar_ajuste(
            original.producto_id, original.tipo_inventario, delta, unidad=original.unidad,
            movimiento_revertido_id=original.id,
            negocio_id=original.negocio_id,
            motivo=motivo or f"Reversión de {original.tipo} {original.id}",
            referencia=original.id,
            usuario_id=usuario_id,
        )
        logger.info(f"Movimiento {movimiento_id} revertido con ajuste {compensacion.id} (delta={delta})")
        self._alertar(producto, usuario_id)
        return producto, compensacion
