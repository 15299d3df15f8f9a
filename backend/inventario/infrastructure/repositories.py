from datetime import datetime
from sqlalchemy import update, case, func
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from ..domain.models_inventario import InventarioGeneral, InventarioDetallado, Movimiento
from ..domain.models_negocios import Negocio
from ..domain.models_sistema import Notificacion, Configuracion
from ..domain.enums import TipoInventario, ESTADOS_ALERTA
from ..domain.estado import derivar_estado, resolver_estado
from ..domain.valores import cantidad
from ..domain.errores import ProductoNoEncontradoError, ArgumentoInvalidoError, StockInsuficienteError

CAMPOS_NO_EDITABLES = {"id", "stock", "fecha_creacion", "fecha_actualizacion"}


class ProductoRepository:
    """
    Acceso a una partición de inventario.
    Toda escritura de `stock` pasa por `_aplicar_stock`: un UPDATE condicional
    seguido del recálculo de `estado` dentro de la misma transacción.
    """
    modelo = None
    tipo_inventario: TipoInventario = None

    def __init__(self, db: Session): self.db = db

    def _query(self):
        return self.db.query(self.modelo)

    def listar(self, solo_activos: bool = True):
        q = self._query()
        if solo_activos:
            q = q.filter(self.modelo.activo == True)  # noqa: E712
        return q.order_by(self.modelo.nombre).all()

    def obtener(self, producto_id: str, solo_activos: bool = False):
        q = self._query().filter(self.modelo.id == producto_id)
        if solo_activos:
            q = q.filter(self.modelo.activo == True)  # noqa: E712
        return q.first()

    def obtener_o_error(self, producto_id: str, solo_activos: bool = False):
        producto = self.obtener(producto_id, solo_activos=solo_activos)
        if not producto:
            raise ProductoNoEncontradoError(producto_id, self.tipo_inventario.value)
        return producto

    def buscar_por_nombre(self, termino: str):
        return self._query().filter(
            self.modelo.activo == True,  # noqa: E712
            self.modelo.nombre.ilike(f"%{termino.strip()}%")
        ).order_by(self.modelo.nombre).all()

    def por_categoria(self, categoria: str):
        return self._query().filter(
            self.modelo.activo == True,  # noqa: E712
            self.modelo.categoria == categoria
        ).order_by(self.modelo.nombre).all()

    def bajo_stock(self):
        return self._query().filter(
            self.modelo.activo == True,  # noqa: E712
            self.modelo.estado.in_(ESTADOS_ALERTA)
        ).order_by(self.modelo.stock).all()

    def categorias(self) -> list[str]:
        filas = self._query().with_entities(self.modelo.categoria).filter(
            self.modelo.activo == True,  # noqa: E712
            self.modelo.categoria != ""
        ).distinct().all()
        return sorted(c for (c,) in filas if c)

    def crear(self, campos: dict):
        datos = dict(campos)
        datos["stock"] = cantidad(datos.get("stock"))
        datos["stock_minimo"] = cantidad(datos.get("stock_minimo"))
        datos["estado"] = resolver_estado(datos["stock"], datos["stock_minimo"], datos.get("estado")).value
        datos.setdefault("activo", True)
        producto = self.modelo(**datos)
        self.db.add(producto)
        self.db.flush()
        return producto

    def actualizar(self, producto_id: str, campos: dict):
        """Edición directa; nunca mueve stock."""
        invalidos = CAMPOS_NO_EDITABLES.intersection(campos)
        if invalidos:
            raise ArgumentoInvalidoError(f"Campos no editables directamente: {', '.join(sorted(invalidos))}")
        producto = self.obtener_o_error(producto_id)
        campos = dict(campos)
        estado_solicitado = campos.pop("estado", None)
        for campo, valor in campos.items():
            setattr(producto, campo, cantidad(valor) if campo == "stock_minimo" else valor)
        if "stock_minimo" in campos or estado_solicitado is not None:
            producto.estado = resolver_estado(producto.stock, producto.stock_minimo, estado_solicitado).value
        producto.fecha_actualizacion = datetime.now()
        self.db.flush()
        return producto

    def eliminar(self, producto_id: str):
        """Soft delete: no toca stock ni movimientos."""
        producto = self.obtener_o_error(producto_id)
        producto.activo = False
        producto.fecha_actualizacion = datetime.now()
        self.db.flush()
        return producto

    def restaurar(self, producto_id: str):
        producto = self.obtener_o_error(producto_id)
        producto.activo = True
        producto.fecha_actualizacion = datetime.now()
        self.db.flush()
        return producto

    def eliminar_permanente(self, producto_id: str):
        producto = self.obtener_o_error(producto_id)
        tiene_movimientos = self.db.query(Movimiento.id).filter(
            Movimiento.producto_id == producto_id,
            Movimiento.tipo_inventario == self.tipo_inventario.value
        ).first()
        if tiene_movimientos:
            raise ArgumentoInvalidoError(
                f"El producto {producto_id} tiene movimientos registrados; use la eliminación lógica"
            )
        self.db.delete(producto)
        self.db.flush()

    # ===== STOCK =====

    def _aplicar_stock(self, producto_id: str, nuevo_stock, condicion=None):
        self.db.flush()
        stmt = update(self.modelo).where(self.modelo.id == producto_id)
        if condicion is not None:
            stmt = stmt.where(condicion)
        stmt = stmt.values(
            stock=nuevo_stock,
            fecha_actualizacion=datetime.now()
        ).execution_options(synchronize_session=False)
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        producto = self.db.get(self.modelo, producto_id, populate_existing=True)
        producto.estado = derivar_estado(producto.stock, producto.stock_minimo).value
        # El UPDATE de Core no pasa por la unidad de trabajo: marcar la fila para el feed
        flag_modified(producto, "stock")
        self.db.flush()
        return producto

    def set_stock(self, producto_id: str, nuevo_stock):
        nuevo_stock = cantidad(nuevo_stock)
        if nuevo_stock < 0:
            raise ArgumentoInvalidoError(f"El stock no puede ser negativo: {nuevo_stock}")
        producto = self._aplicar_stock(producto_id, nuevo_stock)
        if producto is None:
            raise ProductoNoEncontradoError(producto_id, self.tipo_inventario.value)
        return producto

    def incrementar_stock(self, producto_id: str, delta):
        delta = cantidad(delta)
        if delta < 0:
            raise ArgumentoInvalidoError("El incremento debe ser mayor o igual a 0")
        producto = self._aplicar_stock(producto_id, self.modelo.stock + delta)
        if producto is None:
            raise ProductoNoEncontradoError(producto_id, self.tipo_inventario.value)
        return producto

    def decrementar_stock(self, producto_id: str, delta):
        """Saturante: el resultado es max(0, stock - delta)."""
        delta = cantidad(delta)
        if delta < 0:
            raise ArgumentoInvalidoError("El decremento debe ser mayor o igual a 0")
        restante = self.modelo.stock - delta
        producto = self._aplicar_stock(producto_id, case((restante < 0, 0), else_=restante))
        if producto is None:
            raise ProductoNoEncontradoError(producto_id, self.tipo_inventario.value)
        return producto

    def ajustar_stock(self, producto_id: str, delta):
        """Estricto: aplica stock + delta solo si el resultado es >= 0."""
        delta = cantidad(delta)
        resultado = self.modelo.stock + delta
        producto = self._aplicar_stock(producto_id, resultado, resultado >= 0)
        if producto is None:
            actual = self.db.get(self.modelo, producto_id, populate_existing=True)
            if actual is None:
                raise ProductoNoEncontradoError(producto_id, self.tipo_inventario.value)
            raise StockInsuficienteError(actual.stock, -delta, contexto=f"inventario {self.tipo_inventario.value}")
        return producto


class InventarioGeneralRepository(ProductoRepository):
    modelo = InventarioGeneral
    tipo_inventario = TipoInventario.GENERAL


class InventarioDetalladoRepository(ProductoRepository):
    """Partición por negocio; sin negocio_id opera sobre todos los negocios."""
    modelo = InventarioDetallado
    tipo_inventario = TipoInventario.DETALLADO

    def __init__(self, db: Session, negocio_id: str | None = None):
        super().__init__(db)
        self.negocio_id = negocio_id

    def _query(self):
        q = self.db.query(self.modelo)
        if self.negocio_id is not None:
            q = q.filter(self.modelo.negocio_id == self.negocio_id)
        return q

    def de_negocio(self, negocio_id: str) -> "InventarioDetalladoRepository":
        return InventarioDetalladoRepository(self.db, negocio_id)

    def conteos_por_negocio(self) -> dict[str, int]:
        filas = self.db.query(self.modelo.negocio_id, func.count(self.modelo.id)).filter(
            self.modelo.activo == True  # noqa: E712
        ).group_by(self.modelo.negocio_id).all()
        return {negocio_id: total for negocio_id, total in filas if negocio_id}

    def desactivar_de_negocio(self, negocio_id: str) -> int:
        return self.db.query(self.modelo).filter(
            self.modelo.negocio_id == negocio_id,
            self.modelo.activo == True  # noqa: E712
        ).update({"activo": False, "fecha_actualizacion": datetime.now()}, synchronize_session="fetch")


class MovimientoRepository:
    def __init__(self, db: Session): self.db = db
    def agregar(self, mov: Movimiento): self.db.add(mov); self.db.flush(); return mov
    def obtener(self, movimiento_id: str): return self.db.get(Movimiento, movimiento_id)

    def _recientes_primero(self, q):
        return q.order_by(Movimiento.fecha_movimiento.desc(), Movimiento.id)

    def listar(self, limite: int = 100):
        return self._recientes_primero(self.db.query(Movimiento)).limit(limite).all()

    def por_producto(self, producto_id: str, tipo_inventario: str):
        return self._recientes_primero(self.db.query(Movimiento).filter(
            Movimiento.producto_id == producto_id,
            Movimiento.tipo_inventario == tipo_inventario
        )).all()

    def por_negocio(self, negocio_id: str):
        return self._recientes_primero(
            self.db.query(Movimiento).filter(Movimiento.negocio_id == negocio_id)
        ).all()

    def por_tipo(self, tipo: str):
        return self._recientes_primero(
            self.db.query(Movimiento).filter(Movimiento.tipo == tipo)
        ).all()

    def desde(self, fecha_inicio: datetime, tipo_inventario: str | None = None):
        q = self.db.query(Movimiento).filter(Movimiento.fecha_movimiento >= fecha_inicio)
        if tipo_inventario:
            q = q.filter(Movimiento.tipo_inventario == tipo_inventario)
        return self._recientes_primero(q).all()

    def compensacion_de(self, movimiento_id: str):
        return self.db.query(Movimiento).filter(Movimiento.movimiento_revertido_id == movimiento_id).first()


class NegocioRepository:
    def __init__(self, db: Session): self.db = db
    def agregar(self, negocio: Negocio): self.db.add(negocio); self.db.flush(); return negocio
    def obtener(self, negocio_id: str): return self.db.get(Negocio, negocio_id)

    def listar(self, solo_activos: bool = True):
        q = self.db.query(Negocio)
        if solo_activos:
            q = q.filter(Negocio.activo == True)  # noqa: E712
        return q.order_by(Negocio.nombre).all()


class NotificacionRepository:
    def __init__(self, db: Session): self.db = db
    def agregar(self, n: Notificacion): self.db.add(n); self.db.flush(); return n
    def obtener(self, notificacion_id: str): return self.db.get(Notificacion, notificacion_id)

    def _de_usuario(self, usuario_id: str | None):
        q = self.db.query(Notificacion)
        if usuario_id:
            q = q.filter(Notificacion.usuario_id == usuario_id)
        return q

    def listar(self, usuario_id: str | None = None, solo_no_leidas: bool = False):
        q = self._de_usuario(usuario_id)
        if solo_no_leidas:
            q = q.filter(Notificacion.leida == False)  # noqa: E712
        return q.order_by(Notificacion.fecha_creacion.desc()).all()

    def marcar_todas(self, usuario_id: str | None, fecha: datetime) -> int:
        return self._de_usuario(usuario_id).filter(
            Notificacion.leida == False  # noqa: E712
        ).update({"leida": True, "fecha_lectura": fecha}, synchronize_session="fetch")


class ConfiguracionRepository:
    def __init__(self, db: Session): self.db = db
    def agregar(self, c: Configuracion): self.db.add(c); self.db.flush(); return c
    def por_clave(self, clave: str):
        return self.db.query(Configuracion).filter(Configuracion.clave == clave).first()
    def listar(self):
        return self.db.query(Configuracion).order_by(Configuracion.categoria, Configuracion.clave).all()
    def por_categoria(self, categoria: str):
        return self.db.query(Configuracion).filter(Configuracion.categoria == categoria).order_by(Configuracion.clave).all()
