"""Zentrale Validierungs-Funktionen für Stunden und ID-Listen"""
from typing import Hashable, Iterable, List, Optional, TypeVar

from nss_hours.exceptions import ValidationError

T = TypeVar("T", bound=Hashable)


class Validators:
    """Sammlung von wiederverwendbaren Validierungs-Funktionen"""

    MIN_HOURS = 0
    MAX_HOURS = 24

    @staticmethod
    def validate_hours(hours: Optional[int], field_name: str = "Stunden") -> Optional[int]:
        """
        Validiert eine Stundenangabe eines Teilnahme-Eintrags.

        Args:
            hours: Stunden als Integer (oder None)
            field_name: Feldname für Fehlermeldung

        Returns:
            Validierte Stunden oder None

        Raises:
            ValidationError: Wenn Stunden außerhalb von 0-24 liegen
        """
        if hours is None:
            return None
        if isinstance(hours, bool) or not isinstance(hours, int):
            raise ValidationError(f"{field_name} müssen eine ganze Zahl sein")
        if hours < Validators.MIN_HOURS or hours > Validators.MAX_HOURS:
            raise ValidationError(
                f"{field_name} müssen zwischen {Validators.MIN_HOURS} und {Validators.MAX_HOURS} liegen"
            )
        return hours

    @staticmethod
    def validate_requested_hours(hours: int, event_declared_hours: int) -> int:
        """
        Validiert beantragte Stunden gegen die deklarierten Stunden des Events.

        Raises:
            ValidationError: Wenn außerhalb von 0-24 oder über der Event-Obergrenze
        """
        Validators.validate_hours(hours, "Beantragte Stunden")
        if hours > event_declared_hours:
            raise ValidationError(
                f"Beantragte Stunden ({hours}) überschreiten die deklarierten Stunden des Events ({event_declared_hours})"
            )
        return hours

    @staticmethod
    def unique_ids(ids: Iterable[T]) -> List[T]:
        """
        Entfernt Duplikate aus einer ID-Liste, Reihenfolge bleibt erhalten.

        Raises:
            ValidationError: Wenn eine ID None ist
        """
        seen = set()
        result = []
        for item in ids:
            if item is None:
                raise ValidationError("ID-Liste darf keine leeren Einträge enthalten")
            if item not in seen:
                seen.add(item)
                result.append(item)
        return result
