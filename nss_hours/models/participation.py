"""EventParticipation (Teilnahme) Model"""
from sqlalchemy import (
    Column, Integer, DateTime, Text, ForeignKey, CheckConstraint, UniqueConstraint, Enum as SAEnum
)
from sqlalchemy.orm import relationship

from nss_hours.database import Base
from nss_hours.models.enums import ParticipationStatus, ApprovalStatus, enum_values
from nss_hours.utils.datetime_utils import get_utc_timestamp


class EventParticipation(Base):
    """
    Teilnahme eines Freiwilligen an einem Event.

    Pro (event_id, volunteer_id) existiert genau ein Eintrag. Anwesenheit
    (participation_status) und Freigabe (approval_status) sind unabhängige
    Achsen; approved_hours ist nach einer Freigabe der maßgebliche Wert.
    """
    __tablename__ = "event_participation"
    __table_args__ = (
        UniqueConstraint("event_id", "volunteer_id", name="uq_event_participation_event_volunteer"),
        CheckConstraint("hours_attended >= 0 AND hours_attended <= 24", name="participation_hours_check"),
        CheckConstraint(
            "approved_hours IS NULL OR (approved_hours >= 0 AND approved_hours <= 24)",
            name="participation_approved_hours_check"
        ),
        CheckConstraint(
            "approval_status <> 'rejected' OR approved_hours = 0",
            name="participation_rejected_zero_check"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    volunteer_id = Column(Integer, ForeignKey("volunteers.id", ondelete="CASCADE"), nullable=False, index=True)

    # Anwesenheit
    participation_status = Column(
        SAEnum(
            ParticipationStatus,
            values_callable=enum_values,
            native_enum=False,
            create_constraint=True,
            length=30,
            name="participation_status",
        ),
        default=ParticipationStatus.REGISTERED,
        nullable=False,
        index=True,
    )
    hours_attended = Column(Integer, default=0, nullable=False)
    declared_hours = Column(Integer, default=0, nullable=True)  # Snapshot bei Anlage/Antrag

    # Freigabe-Workflow
    approval_status = Column(
        SAEnum(
            ApprovalStatus,
            values_callable=enum_values,
            native_enum=False,
            create_constraint=True,
            length=20,
            name="approval_status",
        ),
        default=ApprovalStatus.PENDING,
        nullable=False,
        index=True,
    )
    approved_hours = Column(Integer, nullable=True)
    approved_by = Column(Integer, ForeignKey("volunteers.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approval_notes = Column(Text, nullable=True)

    # Audit-Trail
    recorded_by_volunteer_id = Column(Integer, ForeignKey("volunteers.id", ondelete="SET NULL"), nullable=True)
    registration_date = Column(DateTime(timezone=True), default=get_utc_timestamp, nullable=True)
    attendance_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=get_utc_timestamp, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_timestamp, onupdate=get_utc_timestamp, nullable=False)

    # Beziehungen
    event = relationship("Event", back_populates="participations")
    volunteer = relationship("Volunteer", back_populates="participations", foreign_keys=[volunteer_id])

    @property
    def credited_hours(self) -> int:
        """
        Angerechnete Stunden: approved_hours sobald gesetzt, sonst hours_attended.
        Abgelehnte Einträge haben approved_hours = 0 und zählen damit nie.
        """
        if self.approved_hours is not None:
            return self.approved_hours
        return self.hours_attended or 0

    def __repr__(self):
        return f"<EventParticipation event={self.event_id} volunteer={self.volunteer_id} {self.participation_status}>"
