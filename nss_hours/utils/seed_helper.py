"""Helper für das Anlegen der Standard-Kategorien beim ersten Start"""
import logging
from sqlalchemy.orm import Session

from nss_hours.database import transaction
from nss_hours.models import EventCategory

logger = logging.getLogger(__name__)

# (code, Anzeigename, Farbe) - Codes entsprechen CATEGORY_TO_SECTION
DEFAULT_CATEGORIES = [
    ("area-based-1", "Area Based - 1", "#2563EB"),
    ("area-based-2", "Area Based - 2", "#0891B2"),
    ("university-based", "University Based", "#7C3AED"),
    ("college-based", "College Based", "#059669"),
]


def ensure_default_categories(db: Session) -> int:
    """
    Legt die vier Standard-Kategorien an, falls die Tabelle leer ist.

    Args:
        db: Datenbank-Session

    Returns:
        Anzahl neu angelegter Kategorien (0 wenn bereits Kategorien existieren)

    Note:
        Aufgerufen in nss_hours/main.py im lifespan startup
    """
    if db.query(EventCategory.id).first():
        return 0

    with transaction(db):
        for code, name, color in DEFAULT_CATEGORIES:
            db.add(EventCategory(code=code, category_name=name, color_hex=color, is_active=True))

    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default event categories")
    return len(DEFAULT_CATEGORIES)
