"""
Configuración de logging para la aplicación
Crea archivos de log por día en la carpeta de logs (LOG_DIR)
"""
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from pathlib import Path

from ..config import settings

def setup_logging():
    """Configura el sistema de logging con archivos diarios"""

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Nombre del archivo de log con fecha actual (YYYY-MM-DD)
    today = datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"inventario_{today}.log"

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    level = logging.DEBUG if settings.debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Eliminar handlers existentes para evitar duplicados
    root_logger.handlers.clear()

    # maxBytes=10MB, backupCount=5
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(log_format, date_format))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format, date_format))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger("inventario").setLevel(level)

    # Movimientos de stock: siempre se registran completos
    logging.getLogger("inventario.application.services_movimientos").setLevel(logging.DEBUG)

    # Solo warnings y errores de SQL
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    logging.getLogger("uvicorn").setLevel(logging.INFO)

    # El SDK de Cloudinary usa urllib3: solo warnings
    logging.getLogger("cloudinary").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.info(f"Sistema de logging configurado. Archivo: {log_file}")

    return root_logger
