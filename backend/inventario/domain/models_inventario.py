"""
Modelos del Dominio de Inventario
==================================

Entidades del inventario multi-ubicación:
- InventarioGeneral (catálogo canónico y stock central)
- InventarioDetallado (stock por negocio, opcionalmente enlazado al general)
- Movimiento (registro inmutable de eventos que afectan stock)
"""
import uuid
from decimal import Decimal
from sqlalchemy import String, Boolean, ForeignKey, Numeric, DateTime, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from datetime import datetime
from ..db import Base
from .enums import EstadoProducto


def nuevo_id() -> str:
    return str(uuid.uuid4())


class ProductoMixin:
    """
    Columnas comunes a ambas particiones de inventario.
    `estado` es una vista materializada de (stock, stock_minimo).
    """
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=nuevo_id)
    nombre: Mapped[str] = mapped_column(String(200), index=True)
    categoria: Mapped[str] = mapped_column(String(100), default="")
    unidad: Mapped[str] = mapped_column(String(30), default="")
    stock: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0)
    stock_minimo: Mapped[Decimal] = mapped_column(Numeric(12, 4), default=0)
    precio: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    estado: Mapped[str] = mapped_column(String(20), default=EstadoProducto.DISPONIBLE.value, index=True)
    imagen_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    fecha_actualizacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class InventarioGeneral(ProductoMixin, Base):
    """
    Producto del inventario general (un único catálogo)
    """
    __tablename__ = "inventario_general"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_inventario_general_stock"),
    )

    detallados = relationship("InventarioDetallado", back_populates="producto_general")


class InventarioDetallado(ProductoMixin, Base):
    """
    Producto del inventario de un negocio
    producto_general_id traza el origen de una transferencia
    """
    __tablename__ = "inventario_detallado"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_inventario_detallado_stock"),
    )

    negocio_id: Mapped[str] = mapped_column(ForeignKey("negocios.id"), index=True)
    producto_general_id: Mapped[str | None] = mapped_column(ForeignKey("inventario_general.id"), nullable=True, index=True)

    negocio = relationship("Negocio", back_populates="productos")
    producto_general = relationship("InventarioGeneral", back_populates="detallados")


class Movimiento(Base):
    """
    Movimiento de inventario (append-only)
    - entrada / salida: cantidad positiva, el tipo indica la dirección
    - ajuste: cantidad con signo
    - movimiento_revertido_id: enlaza un ajuste compensatorio con el movimiento que anula
    - transferencia_id: compartido por las dos patas de una transferencia
    """
    __tablename__ = "movimientos"
    __table_args__ = (
        Index("ix_movimientos_producto", "producto_id", "tipo_inventario"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=nuevo_id)
    tipo: Mapped[str] = mapped_column(String(20), index=True)
    producto_id: Mapped[str] = mapped_column(String(36))
    tipo_inventario: Mapped[str] = mapped_column(String(20))
    negocio_id: Mapped[str | None] = mapped_column(ForeignKey("negocios.id"), nullable=True, index=True)
    cantidad: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    unidad: Mapped[str] = mapped_column(String(30), default="")
    precio_unitario: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    motivo: Mapped[str | None] = mapped_column(String(300), nullable=True)
    usuario_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    referencia: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notas: Mapped[str | None] = mapped_column(Text, nullable=True)
    movimiento_revertido_id: Mapped[str | None] = mapped_column(String(36), nullable=True, unique=True)
    transferencia_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    fecha_movimiento: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)


from . import models_negocios  # noqa: E402,F401 - registra Negocio para la relación
