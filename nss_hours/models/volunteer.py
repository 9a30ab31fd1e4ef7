"""Volunteer (Freiwilliger) Model"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from nss_hours.database import Base
from nss_hours.utils.datetime_utils import get_utc_timestamp


class Volunteer(Base):
    """
    Repräsentiert einen NSS-Freiwilligen.

    Profildaten werden außerhalb der Stunden-Engine gepflegt,
    hier wird nur gelesen.
    """
    __tablename__ = "volunteers"

    id = Column(Integer, primary_key=True, index=True)

    # Persönliche Daten
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, index=True)
    gender = Column(String(20), nullable=True)  # "M", "F" oder keine Angabe

    # Studium
    year = Column(String(10), nullable=False)  # FE, SE, TE
    branch = Column(String(50), nullable=False)
    roll_number = Column(String(50), unique=True, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    participations = relationship(
        "EventParticipation",
        back_populates="volunteer",
        foreign_keys="EventParticipation.volunteer_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self):
        """Vollständiger Name des Freiwilligen"""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Volunteer {self.full_name}>"
