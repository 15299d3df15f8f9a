"""Normalización de cantidades y montos a Decimal con escala fija."""
from decimal import Decimal, ROUND_HALF_UP

ESCALA_CANTIDAD = Decimal("0.0001")
ESCALA_MONTO = Decimal("0.01")


def cantidad(valor) -> Decimal:
    return Decimal(str(valor if valor is not None else 0)).quantize(ESCALA_CANTIDAD, rounding=ROUND_HALF_UP)


def monto(valor) -> Decimal:
    return Decimal(str(valor if valor is not None else 0)).quantize(ESCALA_MONTO, rounding=ROUND_HALF_UP)
