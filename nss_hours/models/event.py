"""Event Model"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from nss_hours.database import Base
from nss_hours.utils.datetime_utils import get_utc_timestamp


class Event(Base):
    """
    Repräsentiert ein NSS-Event mit deklarierten Stunden.
    Wird von der Eventverwaltung angelegt, die Stunden-Engine liest nur.
    """
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="events_dates_check"),
        CheckConstraint("declared_hours >= 1 AND declared_hours <= 240", name="events_hours_check"),
        CheckConstraint(
            "max_participants IS NULL OR max_participants >= 1",
            name="events_participants_check"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    declared_hours = Column(Integer, nullable=False)
    max_participants = Column(Integer, nullable=True)

    category_id = Column(Integer, ForeignKey("event_categories.id"), nullable=False, index=True)
    created_by_volunteer_id = Column(
        Integer, ForeignKey("volunteers.id", ondelete="SET NULL"), nullable=True, index=True
    )

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    category = relationship("EventCategory", back_populates="events")
    participations = relationship(
        "EventParticipation",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Event {self.event_name}>"
