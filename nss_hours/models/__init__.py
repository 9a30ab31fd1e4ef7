"""SQLAlchemy Models für die Stunden-Engine"""
from nss_hours.models.volunteer import Volunteer
from nss_hours.models.category import EventCategory, CATEGORY_TO_SECTION, SECTION_ORDER
from nss_hours.models.event import Event
from nss_hours.models.participation import EventParticipation
from nss_hours.models.enums import ParticipationStatus, ApprovalStatus, Gender

__all__ = [
    "Volunteer",
    "EventCategory",
    "Event",
    "EventParticipation",
    "ParticipationStatus",
    "ApprovalStatus",
    "Gender",
    "CATEGORY_TO_SECTION",
    "SECTION_ORDER",
]
