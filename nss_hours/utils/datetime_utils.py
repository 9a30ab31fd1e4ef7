"""
Datetime Utilities

- Timestamps (Anwesenheit, Freigabe, created_at): UTC
- Datumsangaben im Export: lokales Kalenderdatum des Events
"""
from datetime import datetime, date, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Gibt die aktuelle UTC-Zeit zurück (timezone-aware).

    Ersetzt datetime.utcnow() (deprecated in Python 3.12).
    """
    return datetime.now(timezone.utc)


def get_utc_timestamp() -> datetime:
    """
    Wrapper für utcnow() zur Verwendung in SQLAlchemy Column defaults.

    Verwendung:
        created_at = Column(DateTime, default=get_utc_timestamp)
    """
    return utcnow()


def today() -> date:
    """Aktuelles lokales Datum"""
    return date.today()


def as_date(value) -> Optional[date]:
    """Normalisiert datetime/date auf ein reines Datum"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def format_report_date(value) -> str:
    """Datum im Format der Legacy-Tabelle: M/D/YYYY ohne führende Nullen"""
    d = as_date(value)
    if d is None:
        return ""
    return f"{d.month}/{d.day}/{d.year}"


def latest(*values: Optional[datetime]) -> Optional[datetime]:
    """Spätester Zeitpunkt aus den übergebenen Werten, None-Werte werden ignoriert"""
    present = [v for v in values if v is not None]
    if not present:
        return None
    # Gemischte naive/aware Werte vergleichbar machen
    normalized = [v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc) for v in present]
    return max(normalized)


def month_start(on: date, months_back: int = 0) -> date:
    """Erster Tag des Monats, der months_back Monate vor `on` liegt"""
    index = on.year * 12 + (on.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)
