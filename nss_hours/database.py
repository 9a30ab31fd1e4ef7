"""Datenbank-Setup und Session-Management"""
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from nss_hours.config import settings

# SQLAlchemy Engine erstellen mit Connection Pooling
engine_kwargs = {
    "echo": settings.debug,
    "pool_pre_ping": True,  # Teste Connection vor Verwendung
}

# SQLite-spezifische Konfiguration
if "sqlite" in settings.database_url:
    engine_kwargs["connect_args"] = {
        "check_same_thread": False,  # Erlaube Thread-Sharing (notwendig für FastAPI)
        "timeout": 30,  # Warte bis zu 30 Sekunden auf DB-Lock
    }

# PostgreSQL-spezifische Konfiguration
else:
    engine_kwargs["pool_size"] = 20
    engine_kwargs["max_overflow"] = 40
    engine_kwargs["pool_recycle"] = 3600
    # Statement-Timeout: Abbruch wird als StoreUnavailable gemeldet
    engine_kwargs["connect_args"] = {"options": "-c statement_timeout=30000"}

engine = create_engine(settings.database_url, **engine_kwargs)

# Session-Factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Basis-Klasse für alle Models
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite erzwingt ON DELETE CASCADE nur mit aktivem foreign_keys-Pragma"""
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    """
    Dependency für FastAPI-Routen.
    Stellt eine Datenbank-Session bereit und schließt sie nach der Anfrage.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Context Manager für Datenbank-Transaktionen.

    Verwendung:
        with transaction(db):
            db.add(participation)
            db.flush()
            # Weitere Operationen...
        # Auto-commit bei Erfolg, auto-rollback bei Exception

    Alle Zeilen eines Batches landen in genau einer Transaktion, es gibt
    keine Teil-Commits.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """
    Initialisiert die Datenbank und erstellt alle Tabellen.

    Für Produktion sollte das Schema über Migrationen verwaltet werden,
    create_all ist für Entwicklung und Tests gedacht.
    """
    from nss_hours.models import volunteer, category, event, participation  # noqa: F401
    Base.metadata.create_all(bind=engine)
