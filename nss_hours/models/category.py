"""EventCategory (Event-Kategorie) Model"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from nss_hours.database import Base
from nss_hours.utils.datetime_utils import get_utc_timestamp

# Statische Zuordnung Kategorie-Code -> Report-Abschnitt
CATEGORY_TO_SECTION = {
    "area-based-1": "Area Based - 1",
    "area-based-2": "Area Based - 2",
    "university-based": "University Based",
    "college-based": "College Based",
}

SECTION_ORDER = ["Area Based - 1", "Area Based - 2", "University Based", "College Based"]


class EventCategory(Base):
    """
    Kategorie eines Events (z.B. Area Based - 1).
    Jede Kategorie fällt über ihren Code in genau einen Report-Abschnitt.
    """
    __tablename__ = "event_categories"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)  # Stabiler technischer Schlüssel
    category_name = Column(String(100), nullable=False)  # Anzeigename
    color_hex = Column(String(20), default="#6B7280")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=get_utc_timestamp, nullable=False)

    events = relationship("Event", back_populates="category")

    @property
    def section(self):
        """Report-Abschnitt der Kategorie oder None bei unbekanntem Code"""
        return CATEGORY_TO_SECTION.get(self.code)

    def __repr__(self):
        return f"<EventCategory {self.code}>"
