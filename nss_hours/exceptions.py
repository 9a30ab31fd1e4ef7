"""Fachliche Fehler der Stunden-Engine"""


class HoursEngineError(Exception):
    """
    Basisklasse aller fachlichen Fehler.

    error_code ist der stabile Schlüssel für API-Antworten,
    status_code der passende HTTP-Status.
    """
    error_code = "hours_engine_error"
    status_code = 500

    def __init__(self, message: str = ""):
        self.message = message or (self.__doc__ or self.error_code).strip()
        super().__init__(self.message)


class NotFound(HoursEngineError):
    """Referenzierter Datensatz existiert nicht"""
    error_code = "not_found"
    status_code = 404


class EventNotFound(NotFound):
    """Event nicht gefunden oder nicht aktiv"""
    error_code = "event_not_found"


class ParticipationNotFound(NotFound):
    """Teilnahme-Eintrag nicht gefunden"""
    error_code = "participation_not_found"


class DuplicateParticipation(HoursEngineError):
    """Für dieses (Event, Freiwilliger)-Paar existiert bereits ein Eintrag"""
    error_code = "duplicate_participation"
    status_code = 409


class AlreadyRegistered(DuplicateParticipation):
    """Freiwilliger ist für dieses Event bereits registriert"""
    error_code = "already_registered"


class CapacityExceeded(HoursEngineError):
    """Event hat die maximale Teilnehmerzahl erreicht"""
    error_code = "capacity_exceeded"
    status_code = 409


class ValidationError(HoursEngineError, ValueError):
    """Ungültige Eingabe (z.B. Stunden außerhalb von 0-24)"""
    error_code = "validation_error"
    status_code = 422


class StoreUnavailable(HoursEngineError):
    """Datenbank nicht erreichbar oder Transaktion abgebrochen"""
    error_code = "store_unavailable"
    status_code = 503


class PermissionDenied(HoursEngineError):
    """Aktuelle Identität hat nicht die benötigte Rolle"""
    error_code = "permission_denied"
    status_code = 403
