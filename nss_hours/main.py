"""Hauptanwendung für die NSS-Stunden-Engine"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging

from nss_hours.config import settings
from nss_hours.logging_config import setup_logging
from nss_hours.database import init_db, SessionLocal
from nss_hours.routers import attendance, hours, reports
from nss_hours.utils.error_handler import register_exception_handlers
from nss_hours.utils.seed_helper import ensure_default_categories

# Logging konfigurieren (strukturiert mit Datei-Rotation)
setup_logging(settings)
logger = logging.getLogger(__name__)


def configure_rate_limiting(app: FastAPI, limit: str) -> Limiter:
    """
    Globales Rate-Limit pro Client-IP.

    SlowAPIMiddleware wendet default_limits auf alle Routen an, ohne dass
    einzelne Endpunkte dekoriert werden müssen. Überschreitung -> 429.
    """
    limiter = Limiter(key_func=get_remote_address, default_limits=[limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan Context Manager für Startup und Shutdown"""
    # ===== STARTUP =====
    logger.info(f"Starte {settings.app_name} v{settings.app_version}")

    if not settings.is_secret_key_from_env():
        logger.warning("SECRET_KEY ist nicht in .env gesetzt, Sessions gehen bei jedem Neustart verloren!")

    logger.info("Initialisiere Datenbank...")
    init_db()

    db = SessionLocal()
    try:
        ensure_default_categories(db)
    finally:
        db.close()

    yield

    # ===== SHUTDOWN =====
    logger.info(f"Beende {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Rate Limiter zur App hinzufügen
limiter = configure_rate_limiting(app, settings.rate_limit)

# Fachliche Fehler -> JSON {"error", "detail"}
register_exception_handlers(app)

# Session Middleware (Identität kommt aus der Session)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key
)

app.include_router(attendance.router)
app.include_router(hours.router)
app.include_router(reports.router)


@app.get("/health")
async def health_check():
    """Health-Check-Endpunkt"""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nss_hours.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
