"""
Tests de InventarioService y del libro de movimientos

Cubre:
- Entrada / salida / ajuste acoplados a su movimiento
- Salida estricta: sin stock suficiente no hay movimiento
- Alta de producto en un negocio con su entrada inicial
- Reversión por ajuste compensatorio
- Alertas de stock como notificaciones
"""
import pytest
from decimal import Decimal
from datetime import datetime, timedelta

from inventario.domain.enums import TipoInventario
from inventario.domain.errores import (
    ArgumentoInvalidoError, StockInsuficienteError, ProductoNoEncontradoError,
    MovimientoNoEncontradoError, NegocioNoEncontradoError
)
from inventario.application.dtos import MovimientoIn, ProductoDetalladoIn, ProductoUpdate
from inventario.application.services_inventario import InventarioService, ProductoService
from inventario.application.services_movimientos import MovimientoService, efecto_en_stock, MOTIVO_TRANSFERENCIA_SALIDA
from inventario.application.services_negocios import NegocioService
from inventario.application.services_notificaciones import NotificacionService
from inventario.application.services_transferencias import TransferenciaService
from inventario.application.cache_nombres import CacheNombres


@pytest.fixture
def servicio(uow):
    return InventarioService(uow, NotificacionService(uow))


class TestEntradaSalida:

    def test_entrada_incrementa_y_registra(self, uow, servicio, crear_producto):
        producto = crear_producto()
        producto, mov = servicio.entrada("general", producto.id, 5, precio_unitario=Decimal("2.50"), usuario_id="u1")
        assert producto.stock == Decimal("50")
        assert mov.tipo == "entrada"
        assert mov.cantidad == Decimal("5")
        assert mov.unidad == "kg"
        assert mov.total == Decimal("12.50")
        assert mov.usuario_id == "u1"
        assert uow.movimientos.por_producto(producto.id, "general") == [mov]

    def test_entrada_cantidad_invalida(self, servicio, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            servicio.entrada("general", producto.id, 0)

    def test_entrada_producto_inexistente(self, servicio):
        with pytest.raises(ProductoNoEncontradoError):
            servicio.entrada("general", "no-existe", 1)

    def test_salida_decrementa(self, servicio, crear_producto):
        producto = crear_producto()
        producto, mov = servicio.salida("general", producto.id, 40)
        assert producto.stock == Decimal("5")
        assert producto.estado == "bajo"
        assert mov.tipo == "salida"
        assert mov.cantidad == Decimal("40")

    def test_salida_insuficiente_sin_movimiento(self, uow, servicio, crear_producto):
        producto = crear_producto()
        with pytest.raises(StockInsuficienteError):
            servicio.salida("general", producto.id, 46)
        assert uow.movimientos.por_producto(producto.id, "general") == []
        assert uow.general.obtener(producto.id).stock == Decimal("45")

    def test_salida_que_deja_stock_bajo_notifica(self, uow, servicio, crear_producto):
        producto = crear_producto()
        servicio.salida("general", producto.id, 40)
        titulos = [n.titulo for n in NotificacionService(uow).listar()]
        assert titulos == ["Stock bajo"]

    def test_salida_que_agota_notifica_error(self, uow, servicio, crear_producto):
        producto = crear_producto()
        servicio.salida("general", producto.id, 45)
        notificaciones = NotificacionService(uow).listar()
        assert [(n.titulo, n.tipo) for n in notificaciones] == [("Producto agotado", "error")]


class TestAjuste:

    def test_ajuste_negativo(self, servicio, crear_producto):
        producto = crear_producto()
        producto, mov = servicio.ajuste("general", producto.id, -5, "Merma por vencimiento")
        assert producto.stock == Decimal("40")
        assert mov.tipo == "ajuste"
        assert mov.cantidad == Decimal("-5")
        assert mov.motivo == "Merma por vencimiento"

    def test_ajuste_requiere_motivo(self, servicio, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            servicio.ajuste("general", producto.id, 1, "  ")

    def test_ajuste_cero_rechazado(self, servicio, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            servicio.ajuste("general", producto.id, 0, "Conteo")

    def test_ajuste_que_dejaria_negativo(self, servicio, crear_producto):
        producto = crear_producto()
        with pytest.raises(StockInsuficienteError):
            servicio.ajuste("general", producto.id, -100, "Conteo físico")


class TestLibroMovimientos:

    def test_registrar_no_toca_stock(self, uow, crear_producto):
        producto = crear_producto()
        MovimientoService(uow).registrar(MovimientoIn(
            tipo="entrada", producto_id=producto.id, tipo_inventario="general", cantidad=10
        ))
        assert uow.general.obtener(producto.id).stock == Decimal("45")

    def test_registrar_salida_cantidad_negativa_rechazada(self, uow, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            MovimientoService(uow).registrar(MovimientoIn(
                tipo="salida", producto_id=producto.id, tipo_inventario="general", cantidad=-1
            ))

    def test_registrar_producto_inexistente(self, uow):
        with pytest.raises(ProductoNoEncontradoError):
            MovimientoService(uow).registrar(MovimientoIn(
                tipo="entrada", producto_id="no-existe", tipo_inventario="general", cantidad=1
            ))

    def test_efecto_en_stock(self, uow, servicio, crear_producto):
        producto = crear_producto()
        _, entrada = servicio.entrada("general", producto.id, 3)
        _, salida = servicio.salida("general", producto.id, 2)
        _, ajuste = servicio.ajuste("general", producto.id, -1, "Conteo")
        assert [efecto_en_stock(m) for m in (entrada, salida, ajuste)] == [Decimal("3"), Decimal("-2"), Decimal("-1")]

    def test_recientes_ventana_de_dias(self, uow, servicio, crear_producto):
        producto = crear_producto()
        servicio.entrada("general", producto.id, 1)
        ahora = datetime.now()
        assert len(MovimientoService(uow).recientes(ahora=ahora + timedelta(days=29))) == 1
        assert MovimientoService(uow).recientes(ahora=ahora + timedelta(days=31)) == []

    def test_estadisticas(self, uow, servicio, crear_producto):
        producto = crear_producto()
        servicio.entrada("general", producto.id, 1)
        servicio.entrada("general", producto.id, 1)
        servicio.salida("general", producto.id, 1)
        stats = MovimientoService(uow).estadisticas()
        assert stats["total_movimientos"] == 3
        assert stats["entradas"] == 2
        assert stats["salidas"] == 1
        assert stats["ajustes"] == 0
        assert stats["movimientos_hoy"] == 3

    def test_obtener_inexistente(self, uow):
        with pytest.raises(MovimientoNoEncontradoError):
            MovimientoService(uow).obtener("no-existe")


class TestAgregarANegocio:

    def test_stock_inicial_queda_como_entrada(self, uow, servicio, negocio):
        producto = servicio.agregar_a_negocio(
            negocio.id, ProductoDetalladoIn(nombre="Pan", stock=20, stock_minimo=5, precio=1, unidad="und")
        )
        assert producto.negocio_id == negocio.id
        movimientos = uow.movimientos.por_negocio(negocio.id)
        assert len(movimientos) == 1
        assert movimientos[0].tipo == "entrada"
        assert movimientos[0].tipo_inventario == "detallado"
        assert movimientos[0].cantidad == Decimal("20")

    def test_sin_stock_no_registra_entrada(self, uow, servicio, negocio):
        servicio.agregar_a_negocio(negocio.id, ProductoDetalladoIn(nombre="Pan"))
        assert uow.movimientos.por_negocio(negocio.id) == []

    def test_negocio_inactivo(self, uow, servicio, negocio):
        NegocioService(uow).eliminar(negocio.id)
        with pytest.raises(NegocioNoEncontradoError):
            servicio.agregar_a_negocio(negocio.id, ProductoDetalladoIn(nombre="Pan"))

    def test_salida_en_negocio(self, servicio, negocio):
        producto = servicio.agregar_a_negocio(negocio.id, ProductoDetalladoIn(nombre="Pan", stock=20))
        producto, mov = servicio.salida("detallado", producto.id, 5, negocio_id=negocio.id)
        assert producto.stock == Decimal("15")
        assert mov.negocio_id == negocio.id


class TestReversion:

    def test_revertir_entrada(self, uow, servicio, crear_producto):
        producto = crear_producto()
        _, entrada = servicio.entrada("general", producto.id, 5)
        producto, compensacion = servicio.revertir_movimiento(entrada.id)
        assert producto.stock == Decimal("45")
        assert compensacion.tipo == "ajuste"
        assert compensacion.cantidad == Decimal("-5")
        assert compensacion.movimiento_revertido_id == entrada.id
        # El original no cambia
        assert uow.movimientos.obtener(entrada.id).cantidad == Decimal("5")

    def test_revertir_salida(self, servicio, crear_producto):
        producto = crear_producto()
        _, salida = servicio.salida("general", producto.id, 10)
        producto, compensacion = servicio.revertir_movimiento(salida.id, motivo="Error de captura")
        assert producto.stock == Decimal("45")
        assert compensacion.cantidad == Decimal("10")
        assert compensacion.motivo == "Error de captura"

    def test_no_se_revierte_dos_veces(self, servicio, crear_producto):
        producto = crear_producto()
        _, entrada = servicio.entrada("general", producto.id, 5)
        servicio.revertir_movimiento(entrada.id)
        with pytest.raises(ArgumentoInvalidoError):
            servicio.revertir_movimiento(entrada.id)

    def test_no_se_revierte_una_compensacion(self, servicio, crear_producto):
        producto = crear_producto()
        _, entrada = servicio.entrada("general", producto.id, 5)
        _, compensacion = servicio.revertir_movimiento(entrada.id)
        with pytest.raises(ArgumentoInvalidoError):
            servicio.revertir_movimiento(compensacion.id)

    def test_revertir_entrada_ya_consumida(self, servicio, crear_producto):
        """Test: si el stock ya salió, revertir la entrada dejaría stock negativo"""
        producto = crear_producto(stock=0)
        _, entrada = servicio.entrada("general", producto.id, 5)
        servicio.salida("general", producto.id, 5)
        with pytest.raises(StockInsuficienteError):
            servicio.revertir_movimiento(entrada.id)

    def test_patas_de_transferencia_no_se_revierten(self, uow, servicio, crear_producto, negocio):
        producto = crear_producto()
        TransferenciaService(uow).transferir(negocio.id, producto.id, 10, 5)
        salida = uow.movimientos.por_producto(producto.id, "general")[0]
        with pytest.raises(ArgumentoInvalidoError):
            servicio.revertir_movimiento(salida.id)

    def test_pata_de_entrada_tampoco_se_revierte(self, uow, servicio, crear_producto, negocio):
        producto = crear_producto()
        detallado = TransferenciaService(uow).transferir(negocio.id, producto.id, 10, 5)
        entrada = uow.movimientos.por_producto(detallado.id, "detallado")[0]
        with pytest.raises(ArgumentoInvalidoError):
            servicio.revertir_movimiento(entrada.id)

    def test_salida_manual_con_texto_de_transferencia_se_revierte(self, servicio, crear_producto):
        """Test: el motivo es texto libre; solo transferencia_id marca una pata de transferencia"""
        producto = crear_producto()
        _, salida = servicio.salida("general", producto.id, 10, motivo=MOTIVO_TRANSFERENCIA_SALIDA)
        assert salida.transferencia_id is None
        producto, compensacion = servicio.revertir_movimiento(salida.id)
        assert producto.stock == Decimal("45")
        assert compensacion.movimiento_revertido_id == salida.id


class TestProductoService:

    def test_renombrar_invalida_cache(self, uow, crear_producto):
        producto = crear_producto()
        cache = CacheNombres(uow)
        assert cache.nombre(TipoInventario.GENERAL, producto.id) == "Queso Cheddar"
        ProductoService(uow, cache=cache).actualizar(producto.id, ProductoUpdate(nombre="Queso Gouda"))
        assert cache.nombre("general", producto.id) == "Queso Gouda"

    def test_actualizar_rechaza_stock_en_payload(self):
        with pytest.raises(ValueError):
            ProductoUpdate(stock=1)

    def test_precio_negativo_rechazado(self, uow, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            ProductoService(uow).actualizar(producto.id, ProductoUpdate(precio=-1))

    def test_estadisticas(self, uow, crear_producto):
        crear_producto(nombre="A", stock=10, precio=2)
        crear_producto(nombre="B", stock=0, precio=5, categoria="Secos")
        stats = ProductoService(uow).estadisticas()
        assert stats["total_productos"] == 2
        assert stats["valor_total"] == 20.0
        assert stats["productos_bajo_stock"] == 1
        assert stats["productos_agotados"] == 1
        assert stats["productos_por_categoria"] == {"Lácteos": 1, "Secos": 1}
