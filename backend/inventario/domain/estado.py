"""
Derivación de estado de producto
================================

El estado es función pura de (stock, stock_minimo):
- agotado: stock == 0
- bajo: 0 < stock <= stock_minimo
- disponible: en otro caso

"medio" no tiene umbral numérico: solo se asigna por edición explícita.
"""
from decimal import Decimal
from .enums import EstadoProducto


def derivar_estado(stock, stock_minimo) -> EstadoProducto:
    stock = Decimal(str(stock or 0))
    stock_minimo = Decimal(str(stock_minimo or 0))
    if stock <= 0:
        return EstadoProducto.AGOTADO
    if stock <= stock_minimo:
        return EstadoProducto.BAJO
    return EstadoProducto.DISPONIBLE


def resolver_estado(stock, stock_minimo, estado_solicitado: str | None = None) -> EstadoProducto:
    """Estado a persistir: 'medio' explícito gana; cualquier otro valor se deriva."""
    if estado_solicitado == EstadoProducto.MEDIO.value:
        return EstadoProducto.MEDIO
    return derivar_estado(stock, stock_minimo)


def requiere_alerta(estado) -> bool:
    return estado in (EstadoProducto.BAJO, EstadoProducto.AGOTADO)
