"""Error Handler Utility - Zentralisierte Fehlerbehandlung"""
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, OperationalError, DBAPIError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nss_hours.exceptions import (
    HoursEngineError,
    DuplicateParticipation,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


def handle_db_exception(
    e: Exception,
    operation: str,
    db_session: Optional[Session] = None,
    duplicate_error: type = DuplicateParticipation,
) -> HoursEngineError:
    """
    Rollback, Logging und Übersetzung eines Speicherfehlers in die Domänen-Taxonomie.

    Args:
        e: Die aufgetretene Exception
        operation: Beschreibung der Operation (für Logging)
        db_session: Datenbank-Session für Rollback (optional)
        duplicate_error: Fehlerklasse für Unique-Verletzungen

    Returns:
        Die zu werfende Domänen-Exception (bereits fachliche Fehler unverändert)
    """
    if db_session is not None:
        try:
            db_session.rollback()
        except Exception as rollback_error:
            logger.error(f"Rollback failed: {rollback_error}")

    if isinstance(e, HoursEngineError):
        return e

    if isinstance(e, IntegrityError):
        logger.error(f"{operation}: Database integrity error - {e.orig}", exc_info=True)
        return duplicate_error()

    if isinstance(e, (OperationalError, PoolTimeoutError)):
        logger.error(f"{operation}: Database operational error - {e}", exc_info=True)
        return StoreUnavailable(f"{operation} fehlgeschlagen: Datenbank nicht erreichbar")

    if isinstance(e, DBAPIError):
        logger.error(f"{operation}: Database error - {e}", exc_info=True)
        return StoreUnavailable(f"{operation} fehlgeschlagen")

    logger.exception(f"{operation}: Unexpected error - {e}")
    return StoreUnavailable(f"{operation} fehlgeschlagen: unerwarteter Fehler")


async def hours_engine_error_handler(request: Request, exc: HoursEngineError) -> JSONResponse:
    """Wandelt fachliche Fehler in JSON-Antworten um"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.error_code} - {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.error_code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registriert den Handler für alle HoursEngineError-Unterklassen"""
    app.add_exception_handler(HoursEngineError, hours_engine_error_handler)
