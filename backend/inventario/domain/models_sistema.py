"""
Modelos de soporte: notificaciones y configuración clave/valor
"""
from sqlalchemy import String, Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from ..db import Base
from .enums import TipoNotificacion, TipoConfiguracion
from .models_inventario import nuevo_id


class Notificacion(Base):
    """
    Notificación para un usuario (usuario_id nulo = para todos)
    """
    __tablename__ = "notificaciones"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=nuevo_id)
    usuario_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    tipo: Mapped[str] = mapped_column(String(20), default=TipoNotificacion.INFO.value)
    titulo: Mapped[str] = mapped_column(String(200))
    mensaje: Mapped[str] = mapped_column(Text)
    leida: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    url_accion: Mapped[str | None] = mapped_column(String(300), nullable=True)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    fecha_lectura: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Configuracion(Base):
    __tablename__ = "configuracion"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=nuevo_id)
    clave: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    valor: Mapped[str | None] = mapped_column(Text, nullable=True)
    tipo: Mapped[str] = mapped_column(String(20), default=TipoConfiguracion.TEXTO.value)
    descripcion: Mapped[str | None] = mapped_column(String(300), nullable=True)
    categoria: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    fecha_actualizacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)
