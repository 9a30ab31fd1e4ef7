"""Enum-Definitionen für Teilnahme- und Freigabestatus"""
import enum


def enum_values(enum_cls):
    """Persistierte DB-Werte für SAEnum-Mappings"""
    return [member.value for member in enum_cls]


class ParticipationStatus(str, enum.Enum):
    """Anwesenheits-Fakt eines Teilnahme-Eintrags"""
    REGISTERED = "registered"
    PRESENT = "present"
    ABSENT = "absent"
    PARTIALLY_PRESENT = "partially_present"
    EXCUSED = "excused"


class ApprovalStatus(str, enum.Enum):
    """Freigabe-Achse, unabhängig vom Anwesenheitsstatus"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Gender(str, enum.Enum):
    MALE = "M"
    FEMALE = "F"


# Status, deren Stunden im Export als geleistet gelten
ATTENDED_STATUSES = (ParticipationStatus.PRESENT, ParticipationStatus.PARTIALLY_PRESENT)

# Status, die einen Platz im Event belegen (Kapazitätsprüfung)
SEAT_HOLDING_STATUSES = (
    ParticipationStatus.REGISTERED,
    ParticipationStatus.PRESENT,
    ParticipationStatus.PARTIALLY_PRESENT,
)
