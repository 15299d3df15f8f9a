"""
Feed de cambios de filas
========================

Señal push "fila cambiada" para refrescar dashboards:
- after_flush: acumula los cambios de las tablas observadas en session.info
- after_commit: publica un evento por fila (gana el último estado)
- rollback: descarta lo acumulado

Los callbacks corren en el hilo que confirma, dentro del commit del request:
deben volver de inmediato. Los consumidores lentos o asyncio usan CanalAsincrono.
Un suscriptor que falla no hace fallar la escritura.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable
from sqlalchemy import event, inspect as sa_inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class CambioFila:
    tabla: str
    operacion: str
    id: str
    datos: dict = field(default_factory=dict)
    fecha: datetime = field(default_factory=datetime.now)


class FeedCambios:
    def __init__(self, tablas: Iterable[str] = ("inventario_general",)):
        self.tablas = frozenset(tablas)
        self._suscriptores: list[Callable[[CambioFila], None]] = []
        self._lock = threading.Lock()
        self._clave = f"feed_cambios_{id(self)}"
        self._objetivos = []

    # ===== SUSCRIPCIÓN =====

    def suscribir(self, callback: Callable[[CambioFila], None]) -> Callable[[], None]:
        """
        Registra callback(cambio) y devuelve la función que cancela la suscripción.
        El callback no debe bloquear: se ejecuta en el hilo del commit.
        """
        with self._lock:
            self._suscriptores.append(callback)

        def cancelar():
            with self._lock:
                if callback in self._suscriptores:
                    self._suscriptores.remove(callback)
        return cancelar

    @property
    def total_suscriptores(self) -> int:
        return len(self._suscriptores)

    # ===== INSTALACIÓN =====

    def instalar(self, objetivo=Session):
        """Engancha el feed a una clase Session, un sessionmaker o una sesión concreta."""
        if objetivo in self._objetivos:
            return self
        event.listen(objetivo, "after_flush", self._after_flush)
        event.listen(objetivo, "after_commit", self._after_commit)
        event.listen(objetivo, "after_soft_rollback", self._after_soft_rollback)
        self._objetivos.append(objetivo)
        return self

    def desinstalar(self):
        for objetivo in self._objetivos:
            event.remove(objetivo, "after_flush", self._after_flush)
            event.remove(objetivo, "after_commit", self._after_commit)
            event.remove(objetivo, "after_soft_rollback", self._after_soft_rollback)
        self._objetivos.clear()

    # ===== EVENTOS DE SESIÓN =====

    def _after_flush(self, session, flush_context):
        pendientes = session.info.setdefault(self._clave, {})
        for operacion, objetos in ((INSERT, session.new), (UPDATE, session.dirty), (DELETE, session.deleted)):
            for obj in objetos:
                tabla = getattr(obj, "__tablename__", None)
                if tabla not in self.tablas:
                    continue
                estado = sa_inspect(obj)
                datos = {attr.key: estado.dict.get(attr.key) for attr in estado.mapper.column_attrs}
                clave = (tabla, datos.get("id"))
                previo = pendientes.get(clave)
                # Un INSERT seguido de UPDATE en la misma transacción sigue siendo INSERT
                if previo is not None and previo.operacion == INSERT and operacion == UPDATE:
                    operacion_final = INSERT
                else:
                    operacion_final = operacion
                pendientes[clave] = CambioFila(tabla, operacion_final, datos.get("id"), datos)

    def _after_commit(self, session):
        pendientes = session.info.pop(self._clave, None)
        if not pendientes:
            return
        with self._lock:
            suscriptores = list(self._suscriptores)
        for cambio in pendientes.values():
            for callback in suscriptores:
                try:
                    callback(cambio)
                except Exception:
                    logger.error(
                        "Suscriptor del feed falló para %s %s %s", cambio.tabla, cambio.operacion, cambio.id,
                        exc_info=True
                    )

    def _after_soft_rollback(self, session, previous_transaction):
        session.info.pop(self._clave, None)


feed_inventario = FeedCambios(tablas=("inventario_general", "notificaciones"))


class CanalAsincrono:
    """
    Suscriptor que pasa cada cambio a un event loop de asyncio sin bloquear el commit.
    Si la cola está llena el cambio se descarta y se registra.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, maximo: int = 1000):
        self.loop = loop
        self.cola: asyncio.Queue = asyncio.Queue(maxsize=maximo)
        self.descartados = 0

    def __call__(self, cambio: CambioFila) -> None:
        self.loop.call_soon_threadsafe(self._poner, cambio)

    def _poner(self, cambio: CambioFila) -> None:
        try:
            self.cola.put_nowait(cambio)
        except asyncio.QueueFull:
            self.descartados += 1
            logger.warning("Canal de eventos lleno; descartado %s %s %s", cambio.tabla, cambio.operacion, cambio.id)

    async def siguiente(self) -> CambioFila:
        return await self.cola.get()
