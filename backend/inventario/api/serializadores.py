from typing import Optional
from ..application.cache_nombres import CacheNombres
from ..application.dtos import MovimientoOut, ProductoOut, ProductoDetalladoOut, OperacionStockOut
from ..domain.enums import TipoInventario


def movimiento_out(mov, cache: Optional[CacheNombres] = None) -> MovimientoOut:
    out = MovimientoOut.model_validate(mov)
    if cache is not None:
        out.producto_nombre = cache.nombre(mov.tipo_inventario, mov.producto_id)
    return out


def producto_out(producto):
    if getattr(producto, "negocio_id", None) is not None:
        return ProductoDetalladoOut.model_validate(producto)
    return ProductoOut.model_validate(producto)


def operacion_out(producto, mov, cache: Optional[CacheNombres] = None) -> OperacionStockOut:
    if cache is not None:
        cache.precargar([producto], TipoInventario(mov.tipo_inventario))
    return OperacionStockOut(producto=producto_out(producto), movimiento=movimiento_out(mov, cache))
