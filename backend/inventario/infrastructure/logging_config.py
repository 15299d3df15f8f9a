"""
Configuración de logging para la aplicación
Crea archivos de log por día en la carpeta configurada (logs/ por defecto)
"""
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from pathlib import Path

from ..config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_dir: str | None = None, level: str | None = None):
    """Configura el sistema de logging con archivos diarios"""
    
    # Crear carpeta de logs si no existe
    log_path = Path(log_dir or settings.log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    
    # Nombre del archivo de log con fecha actual (YYYY-MM-DD)
    today = datetime.now().strftime("%Y-%m-%d")
    log_file = log_path / f"inventario_{today}.log"
    nivel = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    
    root_logger = logging.getLogger()
    root_logger.setLevel(nivel)
    
    # Eliminar handlers existentes para evitar duplicados
    root_logger.handlers.clear()
    
    # maxBytes=10MB, backupCount=5
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(nivel)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    
    console_handler = logging.StreamHandler()
    console_handler.setLevel(nivel)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    
    logging.getLogger("inventario").setLevel(nivel)
    
    # Movimientos y transferencias: siempre a nivel INFO como mínimo
    logging.getLogger("inventario.application").setLevel(min(nivel, logging.INFO))
    
    # Solo warnings y errores de SQL
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    
    logging.info(f"Sistema de logging configurado. Archivo: {log_file}")
    
    return root_logger

