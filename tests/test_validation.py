"""Tests für Validierung (Stunden, ID-Listen, Schemas, Konfiguration, Fehler-Mapping)"""
import logging
import pytest
import pydantic
from datetime import date
from sqlalchemy.exc import IntegrityError, OperationalError

from nss_hours.config import Settings
from nss_hours.logging_config import resolve_level, setup_logging
from nss_hours.exceptions import (
    AlreadyRegistered,
    DuplicateParticipation,
    EventNotFound,
    HoursEngineError,
    StoreUnavailable,
    ValidationError,
)
from nss_hours.schemas import AttendanceEntry, ApproveHoursRequest, HoursRequest
from nss_hours.utils.datetime_utils import month_start
from nss_hours.utils.error_handler import handle_db_exception
from nss_hours.utils.validators import Validators


@pytest.mark.unit
class TestHoursValidation:
    """Tests für Validators.validate_hours"""

    @pytest.mark.parametrize("hours", [0, 1, 12, 24])
    def test_valid_hours(self, hours):
        """Test: 0-24 ist gültig"""
        assert Validators.validate_hours(hours) == hours

    @pytest.mark.parametrize("hours", [-1, 25, 100])
    def test_out_of_range(self, hours):
        """Test: Außerhalb 0-24 -> ValidationError"""
        with pytest.raises(ValidationError) as exc_info:
            Validators.validate_hours(hours, "Anwesenheitsstunden")
        assert "Anwesenheitsstunden" in str(exc_info.value)

    def test_none_passes(self):
        """Test: None = nicht angegeben"""
        assert Validators.validate_hours(None) is None

    @pytest.mark.parametrize("hours", [True, 2.5, "4"])
    def test_non_integer(self, hours):
        """Test: Nur ganze Zahlen"""
        with pytest.raises(ValidationError):
            Validators.validate_hours(hours)

    def test_validation_error_is_value_error(self):
        """Test: ValidationError ist auch ein ValueError"""
        with pytest.raises(ValueError):
            Validators.validate_hours(30)

    def test_requested_hours_cap(self):
        """Test: Beantragte Stunden dürfen die Event-Stunden nicht überschreiten"""
        assert Validators.validate_requested_hours(4, 4) == 4
        with pytest.raises(ValidationError) as exc_info:
            Validators.validate_requested_hours(5, 4)
        assert "überschreiten" in str(exc_info.value)


@pytest.mark.unit
class TestUniqueIds:
    """Tests für Validators.unique_ids"""

    def test_order_preserved(self):
        """Test: Duplikate entfernt, Reihenfolge bleibt"""
        assert Validators.unique_ids([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_empty(self):
        """Test: Leere Liste bleibt leer"""
        assert Validators.unique_ids([]) == []

    def test_none_rejected(self):
        """Test: None in der Liste -> ValidationError"""
        with pytest.raises(ValidationError):
            Validators.unique_ids([1, None])


@pytest.mark.unit
class TestSchemas:
    """Tests für Pydantic-Schemas"""

    def test_attendance_entry_hours_range(self):
        """Test: AttendanceEntry lehnt > 24 Stunden ab"""
        with pytest.raises(pydantic.ValidationError):
            AttendanceEntry(volunteer_id=1, status="present", hours_attended=25)

    def test_attendance_entry_status_enum(self):
        """Test: Unbekannter Status wird abgelehnt"""
        with pytest.raises(pydantic.ValidationError):
            AttendanceEntry(volunteer_id=1, status="sleeping")

    def test_approve_request_optional_hours(self):
        """Test: approved_hours ist optional"""
        assert ApproveHoursRequest().approved_hours is None
        with pytest.raises(pydantic.ValidationError):
            ApproveHoursRequest(approved_hours=-1)

    def test_hours_request_required(self):
        """Test: HoursRequest braucht Stunden"""
        with pytest.raises(pydantic.ValidationError):
            HoursRequest()


@pytest.mark.unit
class TestSettings:
    """Tests für die Konfiguration"""

    def test_defaults(self):
        """Test: Standardwerte"""
        s = Settings()
        assert s.default_session_hours == 4
        assert s.top_events_limit == 10
        assert s.export_report_name == "nss-hours"
        assert len(s.secret_key) >= 32

    def test_invalid_database_url(self):
        """Test: Nur SQLite und PostgreSQL"""
        with pytest.raises(pydantic.ValidationError) as exc_info:
            Settings(database_url="mysql://localhost/db")
        assert "sqlite://" in str(exc_info.value)

    def test_report_name_without_path(self):
        """Test: Export-Name ohne Pfadtrenner"""
        with pytest.raises(pydantic.ValidationError):
            Settings(export_report_name="../etc/passwd")

    def test_session_hours_range(self):
        """Test: default_session_hours 0-24"""
        with pytest.raises(pydantic.ValidationError):
            Settings(default_session_hours=25)


@pytest.mark.unit
class TestErrorMapping:
    """Tests für handle_db_exception"""

    def test_integrity_error_maps_to_duplicate(self):
        """Test: IntegrityError -> DuplicateParticipation"""
        error = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))
        assert isinstance(handle_db_exception(error, "Test"), DuplicateParticipation)

    def test_integrity_error_with_custom_class(self):
        """Test: Eigene Fehlerklasse für Unique-Verletzungen"""
        error = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))
        assert isinstance(handle_db_exception(error, "Test", duplicate_error=AlreadyRegistered), AlreadyRegistered)

    def test_operational_error_maps_to_unavailable(self):
        """Test: OperationalError -> StoreUnavailable"""
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        mapped = handle_db_exception(error, "Test")
        assert isinstance(mapped, StoreUnavailable)
        assert mapped.status_code == 503

    def test_domain_error_passes_through(self):
        """Test: Fachliche Fehler bleiben unverändert"""
        error = EventNotFound("weg")
        assert handle_db_exception(error, "Test") is error

    def test_default_messages(self):
        """Test: Fehler ohne Nachricht nutzen den Docstring"""
        error = DuplicateParticipation()
        assert error.message
        assert isinstance(error, HoursEngineError)
        assert error.error_code == "duplicate_participation"


@pytest.mark.unit
class TestMonthStart:
    """Tests für month_start"""

    def test_same_month(self):
        """Test: Erster Tag des Monats"""
        assert month_start(date(2024, 3, 17)) == date(2024, 3, 1)

    def test_across_year(self):
        """Test: Monate zurück über den Jahreswechsel"""
        assert month_start(date(2024, 3, 17), 11) == date(2023, 4, 1)
        assert month_start(date(2024, 1, 31), 1) == date(2023, 12, 1)


@pytest.mark.unit
class TestLoggingConfig:
    """Tests für die Logging-Konfiguration aus den Settings"""

    def test_level_from_settings(self):
        """Test: LOG_LEVEL wird übernommen, Debug erzwingt DEBUG"""
        assert resolve_level(Settings(log_level="warning")) == logging.WARNING
        assert resolve_level(Settings(log_level="ERROR", debug=True)) == logging.DEBUG

    def test_invalid_level(self):
        """Test: Unbekanntes Level wird abgelehnt"""
        with pytest.raises(pydantic.ValidationError):
            Settings(log_level="LOUD")

    def test_setup_uses_rotation_settings(self, tmp_path):
        """Test: Datei-Handler mit Größe und Anzahl aus den Settings"""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        config = Settings(log_level="WARNING", log_max_bytes=2048, log_backup_count=2)
        try:
            setup_logging(config, log_file=str(tmp_path / "logs" / "test.log"))

            file_handler = [h for h in root.handlers if hasattr(h, "maxBytes")][0]
            assert root.level == logging.WARNING
            assert file_handler.maxBytes == 2048
            assert file_handler.backupCount == 2
            assert (tmp_path / "logs").is_dir()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
