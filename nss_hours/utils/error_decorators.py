"""Decorator für konsistentes Error-Handling in Services"""
import logging
from functools import wraps
from typing import Callable, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nss_hours.exceptions import DuplicateParticipation
from nss_hours.utils.error_handler import handle_db_exception

logger = logging.getLogger(__name__)


def handle_store_errors(operation: str, duplicate_error: type = DuplicateParticipation):
    """
    Decorator für schreibende Service-Methoden.

    Fängt Speicherfehler ab, rollt die Session zurück und wirft stattdessen
    die passende Domänen-Exception:
    - IntegrityError: duplicate_error (Standard: DuplicateParticipation)
    - OperationalError/DBAPIError: StoreUnavailable

    Fachliche Fehler (HoursEngineError) werden nach dem Rollback unverändert
    weitergereicht.

    Args:
        operation: Operation-Beschreibung für Logging (z.B. "Submitting attendance")
        duplicate_error: Fehlerklasse für Unique-Verletzungen

    Usage:
        @staticmethod
        @handle_store_errors("Submitting attendance")
        def submit_attendance(db: Session, event_id: int, ...):
            with transaction(db):
                ...

    Wichtig:
        - Die dekorierte Funktion MUSS 'db' als erstes Argument oder als Keyword bekommen
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            db: Optional[Session] = kwargs.get('db')
            if db is None and len(args) > 0 and isinstance(args[0], Session):
                db = args[0]

            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as e:
                raise handle_db_exception(e, operation, db, duplicate_error) from e

        return wrapper
    return decorator
