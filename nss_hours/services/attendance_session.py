"""Anwesenheits-Set - lokale Auswahl vor dem Speichern"""
from typing import Dict, Iterable, List, Optional

from nss_hours.config import settings
from nss_hours.models.enums import ParticipationStatus
from nss_hours.schemas.participation import AttendanceEntry

# Zyklus beim Umschalten: nicht im Set -> present -> absent -> excused -> nicht im Set.
# None steht für "nicht im Set".
TOGGLE_TRANSITIONS: Dict[Optional[ParticipationStatus], Optional[ParticipationStatus]] = {
    None: ParticipationStatus.PRESENT,
    ParticipationStatus.REGISTERED: ParticipationStatus.PRESENT,
    ParticipationStatus.PRESENT: ParticipationStatus.ABSENT,
    ParticipationStatus.PARTIALLY_PRESENT: ParticipationStatus.ABSENT,
    ParticipationStatus.ABSENT: ParticipationStatus.EXCUSED,
    ParticipationStatus.EXCUSED: None,
}


def next_status(current: Optional[ParticipationStatus]) -> Optional[ParticipationStatus]:
    """Nächster Status im Umschalt-Zyklus (None = aus dem Set entfernt)"""
    return TOGGLE_TRANSITIONS[current]


def hours_for_status(status: ParticipationStatus, default_hours: int) -> int:
    """Nur 'present' bekommt die Standard-Stunden, alles andere 0"""
    return default_hours if status == ParticipationStatus.PRESENT else 0


class AttendanceWorkingSet:
    """
    Nicht gespeicherte Anwesenheits-Auswahl für genau ein Event.

    Alle Operationen sind rein lokal, erst AttendanceService.submit_attendance
    schreibt das Set in die Datenbank.
    """

    def __init__(
        self,
        event_id: int,
        known_volunteer_ids: Iterable[int] = (),
        default_hours: Optional[int] = None
    ):
        self.event_id = event_id
        self.default_hours = settings.default_session_hours if default_hours is None else default_hours
        self._known: List[int] = []
        self._entries: Dict[int, AttendanceEntry] = {}
        for volunteer_id in known_volunteer_ids:
            self._remember(volunteer_id)

    @classmethod
    def from_participations(cls, event_id: int, participations, default_hours: Optional[int] = None):
        """Baut das Set aus den gespeicherten Teilnahmen eines Events auf"""
        working_set = cls(event_id, default_hours=default_hours)
        for participation in participations:
            working_set._remember(participation.volunteer_id)
            working_set._entries[participation.volunteer_id] = AttendanceEntry(
                volunteer_id=participation.volunteer_id,
                status=participation.participation_status,
                hours_attended=participation.hours_attended or 0,
            )
        return working_set

    def _remember(self, volunteer_id: int) -> None:
        if volunteer_id not in self._known:
            self._known.append(volunteer_id)

    def status_of(self, volunteer_id: int) -> Optional[ParticipationStatus]:
        entry = self._entries.get(volunteer_id)
        return entry.status if entry else None

    def toggle(self, volunteer_id: int) -> Optional[ParticipationStatus]:
        """
        Schaltet einen Freiwilligen einen Schritt im Zyklus weiter.

        Returns:
            Neuer Status oder None, wenn der Freiwillige aus dem Set entfernt wurde
        """
        self._remember(volunteer_id)
        new_status = next_status(self.status_of(volunteer_id))

        if new_status is None:
            self._entries.pop(volunteer_id, None)
            return None

        self._entries[volunteer_id] = AttendanceEntry(
            volunteer_id=volunteer_id,
            status=new_status,
            hours_attended=hours_for_status(new_status, self.default_hours),
        )
        return new_status

    def _mark_all(self, status: ParticipationStatus) -> None:
        # Komplettersatz: vorherige Einträge werden verworfen
        self._entries = {
            volunteer_id: AttendanceEntry(
                volunteer_id=volunteer_id,
                status=status,
                hours_attended=hours_for_status(status, self.default_hours),
            )
            for volunteer_id in self._known
        }

    def mark_all_present(self) -> None:
        self._mark_all(ParticipationStatus.PRESENT)

    def mark_all_absent(self) -> None:
        self._mark_all(ParticipationStatus.ABSENT)

    def entries(self) -> List[AttendanceEntry]:
        """Einträge in stabiler Reihenfolge (Reihenfolge des ersten Auftretens)"""
        return [self._entries[v] for v in self._known if v in self._entries]

    def count_by_status(self) -> Dict[ParticipationStatus, int]:
        counts: Dict[ParticipationStatus, int] = {}
        for entry in self._entries.values():
            counts[entry.status] = counts.get(entry.status, 0) + 1
        return counts

    def __contains__(self, volunteer_id: int) -> bool:
        return volunteer_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
