from pydantic import BaseModel, ConfigDict, Field, constr
from typing import Optional, Union
from decimal import Decimal
from datetime import datetime

from ..domain.enums import EstadoProducto, TipoMovimiento, TipoInventario, TipoNotificacion, TipoConfiguracion

# ===== PRODUCTOS =====

class ProductoIn(BaseModel):
    nombre: constr(strip_whitespace=True, min_length=1)
    categoria: str = ""
    unidad: str = ""
    stock: Decimal = Decimal("0")
    stock_minimo: Decimal = Decimal("0")
    precio: Decimal = Decimal("0")
    imagen_url: Optional[str] = None
    descripcion: Optional[str] = None
    estado: Optional[EstadoProducto] = None  # Solo "medio" se respeta; el resto se deriva

class ProductoDetalladoIn(ProductoIn):
    producto_general_id: Optional[str] = None

class ProductoUpdate(BaseModel):
    """Edición directa: `stock` no es un campo editable."""
    model_config = ConfigDict(extra="forbid")

    nombre: Optional[constr(strip_whitespace=True, min_length=1)] = None
    categoria: Optional[str] = None
    unidad: Optional[str] = None
    stock_minimo: Optional[Decimal] = None
    precio: Optional[Decimal] = None
    imagen_url: Optional[str] = None
    descripcion: Optional[str] = None
    estado: Optional[EstadoProducto] = None

class ProductoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    nombre: str
    categoria: str
    unidad: str
    stock: float
    stock_minimo: float
    precio: float
    estado: EstadoProducto
    imagen_url: Optional[str] = None
    descripcion: Optional[str] = None
    activo: bool
    fecha_creacion: datetime
    fecha_actualizacion: datetime

class ProductoDetalladoOut(ProductoOut):
    negocio_id: str
    producto_general_id: Optional[str] = None

# ===== MOVIMIENTOS =====

class MovimientoIn(BaseModel):
    tipo: TipoMovimiento
    producto_id: str
    tipo_inventario: TipoInventario
    negocio_id: Optional[str] = None
    cantidad: Decimal
    unidad: Optional[str] = None  # Por defecto, la unidad del producto
    precio_unitario: Optional[Decimal] = None
    motivo: Optional[str] = None
    usuario_id: Optional[str] = None
    referencia: Optional[str] = None
    notas: Optional[str] = None

class OperacionStockIn(BaseModel):
    """Entrada o salida: cantidad positiva, la dirección la da la operación."""
    cantidad: Decimal
    precio_unitario: Optional[Decimal] = None
    motivo: Optional[str] = None
    usuario_id: Optional[str] = None
    referencia: Optional[str] = None
    notas: Optional[str] = None

class AjusteIn(BaseModel):
    cantidad: Decimal = Field(..., description="Cantidad con signo: positiva suma, negativa resta")
    motivo: constr(strip_whitespace=True, min_length=1)
    usuario_id: Optional[str] = None
    notas: Optional[str] = None

class ReversionIn(BaseModel):
    motivo: Optional[str] = None
    usuario_id: Optional[str] = None

class MovimientoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tipo: TipoMovimiento
    producto_id: str
    producto_nombre: Optional[str] = None
    tipo_inventario: TipoInventario
    negocio_id: Optional[str] = None
    cantidad: float
    unidad: str
    precio_unitario: Optional[float] = None
    total: Optional[float] = None
    motivo: Optional[str] = None
    usuario_id: Optional[str] = None
    referencia: Optional[str] = None
    notas: Optional[str] = None
    movimiento_revertido_id: Optional[str] = None
    transferencia_id: Optional[str] = None
    fecha_movimiento: datetime

class OperacionStockOut(BaseModel):
    producto: Union[ProductoDetalladoOut, ProductoOut]
    movimiento: MovimientoOut

# ===== TRANSFERENCIAS =====

class TransferenciaIn(BaseModel):
    negocio_id: str
    producto_general_id: str
    cantidad: Decimal
    stock_minimo: Decimal
    usuario_id: Optional[str] = None

# ===== NEGOCIOS =====

class NegocioIn(BaseModel):
    nombre: constr(strip_whitespace=True, min_length=1)
    direccion: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None

class NegocioUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    nombre: Optional[constr(strip_whitespace=True, min_length=1)] = None
    direccion: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None

class NegocioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    nombre: str
    direccion: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    activo: bool
    fecha_creacion: datetime
    fecha_actualizacion: datetime

# ===== NOTIFICACIONES =====

class NotificacionIn(BaseModel):
    usuario_id: Optional[str] = None
    tipo: TipoNotificacion = TipoNotificacion.INFO
    titulo: constr(strip_whitespace=True, min_length=1)
    mensaje: str
    url_accion: Optional[str] = None

class NotificacionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    usuario_id: Optional[str] = None
    tipo: TipoNotificacion
    titulo: str
    mensaje: str
    leida: bool
    url_accion: Optional[str] = None
    fecha_creacion: datetime
    fecha_lectura: Optional[datetime] = None

# ===== CONFIGURACIÓN =====

class ConfiguracionIn(BaseModel):
    clave: constr(strip_whitespace=True, min_length=1)
    valor: Optional[str] = None
    tipo: TipoConfiguracion = TipoConfiguracion.TEXTO
    descripcion: Optional[str] = None
    categoria: Optional[str] = None

class ConfiguracionUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    valor: Optional[str] = None
    tipo: Optional[TipoConfiguracion] = None
    descripcion: Optional[str] = None
    categoria: Optional[str] = None

class ConfiguracionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clave: str
    valor: Optional[str] = None
    tipo: TipoConfiguracion
    descripcion: Optional[str] = None
    categoria: Optional[str] = None
    fecha_actualizacion: datetime
