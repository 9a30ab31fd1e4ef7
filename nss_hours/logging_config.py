"""Logging-Konfiguration"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from nss_hours.config import Settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Bibliotheken, die auf INFO zu gesprächig sind
QUIET_LOGGERS = ('sqlalchemy.engine', 'sqlalchemy.pool', 'uvicorn.access')


def resolve_level(config: Settings) -> int:
    """Debug-Modus erzwingt DEBUG, sonst gilt LOG_LEVEL"""
    if config.debug:
        return logging.DEBUG
    return logging.getLevelName(config.log_level)


def setup_logging(config: Settings, log_file: Optional[str] = None) -> None:
    """
    Konfiguriert das Logging-System mit Console und File Handler.

    Level, Log-Datei und Rotation kommen aus den Settings.

    Args:
        config: Anwendungs-Einstellungen
        log_file: Überschreibt config.log_file (z.B. in Tests)
    """
    level = resolve_level(config)
    log_file = log_file or config.log_file

    # Format: "2024-01-15 14:30:45 - nss_hours.services.hours_service - INFO - Bulk approval: 12 approved"
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        filename=log_file,
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialisiert (Level: {logging.getLevelName(level)})")
    root_logger.info(f"Log-Datei: {log_path.absolute()}")
