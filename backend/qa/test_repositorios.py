"""
Tests del repositorio de stock

Cubre:
- Derivación de estado al crear y al editar
- set / incrementar / decrementar (saturante) / ajustar (estricto)
- El UPDATE condicional usa el stock de la base, no el de memoria
- Eliminación lógica y permanente
- Partición por negocio del inventario detallado
"""
import pytest
from decimal import Decimal
from datetime import datetime, timedelta
from sqlalchemy import update

from inventario.domain.models_inventario import InventarioGeneral, Movimiento
from inventario.domain.errores import (
    ProductoNoEncontradoError, ArgumentoInvalidoError, StockInsuficienteError
)
from inventario.application.dtos import ProductoDetalladoIn, NegocioIn
from inventario.application.services_inventario import ProductoService
from inventario.application.services_negocios import NegocioService


class TestCrearYEditar:

    def test_crear_deriva_estado(self, crear_producto):
        """Test: Queso Cheddar 45/10 nace disponible"""
        producto = crear_producto()
        assert producto.estado == "disponible"
        assert producto.stock == Decimal("45")
        assert producto.activo is True

    def test_crear_con_medio_explicito(self, crear_producto):
        producto = crear_producto(estado="medio")
        assert producto.estado == "medio"

    def test_crear_agotado(self, crear_producto):
        producto = crear_producto(stock=0)
        assert producto.estado == "agotado"

    def test_actualizar_rechaza_stock(self, uow, crear_producto):
        """Test: la edición directa nunca mueve stock"""
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            uow.general.actualizar(producto.id, {"stock": 0})
        assert uow.general.obtener(producto.id).stock == Decimal("45")

    def test_actualizar_minimo_recalcula_estado(self, uow, crear_producto):
        producto = crear_producto()
        producto = uow.general.actualizar(producto.id, {"stock_minimo": 50})
        assert producto.estado == "bajo"

    def test_actualizar_no_modifica_dict_recibido(self, uow, crear_producto):
        producto = crear_producto()
        campos = {"nombre": "Queso Gouda", "estado": "medio"}
        uow.general.actualizar(producto.id, campos)
        assert campos == {"nombre": "Queso Gouda", "estado": "medio"}

    def test_actualizar_inexistente(self, uow):
        with pytest.raises(ProductoNoEncontradoError):
            uow.general.actualizar("no-existe", {"nombre": "X"})


class TestMutacionesDeStock:

    def test_set_stock(self, uow, crear_producto):
        producto = crear_producto()
        producto = uow.general.set_stock(producto.id, 8)
        assert producto.stock == Decimal("8")
        assert producto.estado == "bajo"

    def test_set_stock_negativo_rechazado(self, uow, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            uow.general.set_stock(producto.id, -1)

    def test_set_stock_producto_inexistente(self, uow):
        with pytest.raises(ProductoNoEncontradoError):
            uow.general.set_stock("no-existe", 5)

    def test_incrementar(self, uow, crear_producto):
        producto = crear_producto(stock=0)
        producto = uow.general.incrementar_stock(producto.id, Decimal("2.5"))
        assert producto.stock == Decimal("2.5")
        assert producto.estado == "bajo"

    def test_incrementar_negativo_rechazado(self, uow, crear_producto):
        producto = crear_producto()
        with pytest.raises(ArgumentoInvalidoError):
            uow.general.incrementar_stock(producto.id, -1)

    def test_decrementar_satura_en_cero(self, uow, crear_producto):
        """Test: 45 - 50 queda en 0 y el estado pasa a agotado"""
        producto = crear_producto()
        producto = uow.general.decrementar_stock(producto.id, 50)
        assert producto.stock == Decimal("0")
        assert producto.estado == "agotado"

    def test_ajustar_estricto(self, uow, crear_producto):
        producto = crear_producto()
        with pytest.raises(StockInsuficienteError) as exc:
            uow.general.ajustar_stock(producto.id, -50)
        assert exc.value.disponible == Decimal("45")
        assert exc.value.solicitado == Decimal("50")
        assert uow.general.obtener(producto.id).stock == Decimal("45")

    def test_ajustar_exacto_hasta_cero(self, uow, crear_producto):
        producto = crear_producto()
        producto = uow.general.ajustar_stock(producto.id, -45)
        assert producto.stock == Decimal("0")
        assert producto.estado == "agotado"

    def test_ajustar_usa_stock_de_la_base(self, uow, db, crear_producto):
        """Test: el UPDATE condicional evalúa el stock persistido, no el objeto en memoria"""
        producto = crear_producto(stock=5)
        db.execute(
            update(InventarioGeneral).where(InventarioGeneral.id == producto.id).values(stock=1)
            .execution_options(synchronize_session=False)
        )
        assert producto.stock == Decimal("5")  # copia en memoria desactualizada
        with pytest.raises(StockInsuficienteError) as exc:
            uow.general.ajustar_stock(producto.id, -3)
        assert exc.value.disponible == Decimal("1")

    def test_incrementos_no_pierden_actualizaciones(self, uow, crear_producto):
        producto = crear_producto(stock=0)
        for _ in range(10):
            uow.general.incrementar_stock(producto.id, 1)
        assert uow.general.obtener(producto.id).stock == Decimal("10")


class TestEliminacion:

    def test_eliminar_es_logico(self, uow, crear_producto):
        producto = crear_producto()
        uow.general.eliminar(producto.id)
        assert uow.general.obtener(producto.id).activo is False
        assert uow.general.listar(solo_activos=True) == []
        assert len(uow.general.listar(solo_activos=False)) == 1

    def test_restaurar(self, uow, crear_producto):
        producto = crear_producto()
        uow.general.eliminar(producto.id)
        assert uow.general.restaurar(producto.id).activo is True

    def test_eliminar_permanente_sin_movimientos(self, uow, crear_producto):
        producto = crear_producto()
        uow.general.eliminar_permanente(producto.id)
        assert uow.general.obtener(producto.id) is None

    def test_eliminar_permanente_con_movimientos_rechazado(self, uow, crear_producto):
        producto = crear_producto()
        uow.movimientos.agregar(Movimiento(
            tipo="entrada", producto_id=producto.id, tipo_inventario="general",
            cantidad=Decimal("1"), unidad="kg", fecha_movimiento=datetime.now()
        ))
        with pytest.raises(ArgumentoInvalidoError):
            uow.general.eliminar_permanente(producto.id)


class TestConsultas:

    def test_buscar_sin_distinguir_mayusculas(self, uow, crear_producto):
        crear_producto(nombre="Queso Cheddar")
        crear_producto(nombre="Harina", categoria="Secos")
        assert [p.nombre for p in uow.general.buscar_por_nombre("queso")] == ["Queso Cheddar"]

    def test_categorias_ordenadas_y_sin_vacias(self, uow, crear_producto):
        crear_producto(nombre="A", categoria="Secos")
        crear_producto(nombre="B", categoria="Lácteos")
        crear_producto(nombre="C", categoria="")
        assert uow.general.categorias() == ["Lácteos", "Secos"]

    def test_bajo_stock_incluye_agotados(self, uow, crear_producto):
        crear_producto(nombre="Bajo", stock=5)
        crear_producto(nombre="Agotado", stock=0)
        crear_producto(nombre="Normal", stock=100)
        assert sorted(p.nombre for p in uow.general.bajo_stock()) == ["Agotado", "Bajo"]


class TestParticionDetallada:

    def test_productos_aislados_por_negocio(self, uow, negocio):
        otro = NegocioService(uow).crear(NegocioIn(nombre="Sucursal Norte"))
        ProductoService(uow, "detallado", negocio.id).crear(ProductoDetalladoIn(nombre="Pan", stock=3))
        ProductoService(uow, "detallado", otro.id).crear(ProductoDetalladoIn(nombre="Leche", stock=3))

        assert [p.nombre for p in uow.detallado.de_negocio(negocio.id).listar()] == ["Pan"]
        assert [p.nombre for p in uow.detallado.de_negocio(otro.id).listar()] == ["Leche"]
        assert len(uow.detallado.listar()) == 2

    def test_producto_de_otro_negocio_no_encontrado(self, uow, negocio):
        otro = NegocioService(uow).crear(NegocioIn(nombre="Sucursal Norte"))
        pan = ProductoService(uow, "detallado", negocio.id).crear(ProductoDetalladoIn(nombre="Pan", stock=3))
        with pytest.raises(ProductoNoEncontradoError):
            uow.detallado.de_negocio(otro.id).obtener_o_error(pan.id)


class TestOrdenMovimientos:

    def test_mas_recientes_primero(self, uow, crear_producto):
        producto = crear_producto()
        ahora = datetime.now()
        for dias in (3, 1, 2):
            uow.movimientos.agregar(Movimiento(
                tipo="entrada", producto_id=producto.id, tipo_inventario="general",
                cantidad=Decimal(dias), unidad="kg", fecha_movimiento=ahora - timedelta(days=dias)
            ))
        movimientos = uow.movimientos.por_producto(producto.id, "general")
        assert [m.cantidad for m in movimientos] == [Decimal("1"), Decimal("2"), Decimal("3")]

    def test_desde_filtra_por_fecha(self, uow, crear_producto):
        producto = crear_producto()
        ahora = datetime.now()
        for dias in (1, 40):
            uow.movimientos.agregar(Movimiento(
                tipo="salida", producto_id=producto.id, tipo_inventario="general",
                cantidad=Decimal("1"), unidad="kg", fecha_movimiento=ahora - timedelta(days=dias)
            ))
        assert len(uow.movimientos.desde(ahora - timedelta(days=30))) == 1
