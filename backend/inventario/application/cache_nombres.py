"""
Cache de nombres de producto por id, con alcance de request/sesión.
Se inyecta en los servicios que enriquecen movimientos; se invalida al renombrar.
"""
from ..domain.enums import TipoInventario


class CacheNombres:
    def __init__(self, uow):
        self.uow = uow
        self._nombres: dict[tuple[str, str], str | None] = {}

    @staticmethod
    def _clave(tipo_inventario, producto_id: str) -> tuple[str, str]:
        return (TipoInventario(tipo_inventario).value, producto_id)

    def nombre(self, tipo_inventario, producto_id: str) -> str | None:
        clave = self._clave(tipo_inventario, producto_id)
        if clave not in self._nombres:
            producto = self.uow.inventario(clave[0]).obtener(producto_id)
            self._nombres[clave] = producto.nombre if producto else None
        return self._nombres[clave]

    def precargar(self, productos, tipo_inventario):
        for p in productos:
            self._nombres[self._clave(tipo_inventario, p.id)] = p.nombre

    def invalidar(self, tipo_inventario, producto_id: str):
        self._nombres.pop(self._clave(tipo_inventario, producto_id), None)

    def __len__(self):
        return len(self._nombres)
