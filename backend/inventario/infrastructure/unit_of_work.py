import logging
from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..db import SessionLocal
from ..domain.errores import BackendNoDisponibleError
from .repositories import (
    InventarioGeneralRepository, InventarioDetalladoRepository, MovimientoRepository,
    NegocioRepository, NotificacionRepository, ConfiguracionRepository
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, db: Session = None):
        self.db: Session = db if db is not None else SessionLocal()
        self.general = InventarioGeneralRepository(self.db)
        self.detallado = InventarioDetalladoRepository(self.db)
        self.movimientos = MovimientoRepository(self.db)
        self.negocios = NegocioRepository(self.db)
        self.notificaciones = NotificacionRepository(self.db)
        self.configuracion = ConfiguracionRepository(self.db)

    def inventario(self, tipo_inventario: str):
        """Repositorio de la partición indicada ('general' | 'detallado')."""
        return self.general if tipo_inventario == self.general.tipo_inventario.value else self.detallado

    def commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error al confirmar la transacción: %s", e, exc_info=True)
            raise BackendNoDisponibleError() from e

    def rollback(self): self.db.rollback()
    def close(self): self.db.close()

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.commit()
        except SQLAlchemyError as e:
            self.rollback()
            logger.error("Error de base de datos en la transacción: %s", e, exc_info=True)
            raise BackendNoDisponibleError() from e
        except Exception:
            self.rollback()
            raise
        finally:
            self.close()
