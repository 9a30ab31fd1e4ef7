"""Tests für AttendanceService (Anwesenheit, Roster-Abgleich, Registrierung)"""
import pytest
from sqlalchemy import func

from nss_hours.exceptions import (
    AlreadyRegistered,
    CapacityExceeded,
    EventNotFound,
    NotFound,
    ParticipationNotFound,
    PermissionDenied,
    ValidationError,
)
from nss_hours.models import EventParticipation
from nss_hours.models.enums import ApprovalStatus, ParticipationStatus
from nss_hours.schemas import AttendanceEntry
from nss_hours.services.attendance_service import AttendanceService
from nss_hours.services.attendance_session import AttendanceWorkingSet

from conftest import add_participation, make_event


def _rows(db_session, event_id):
    return db_session.query(EventParticipation).filter(
        EventParticipation.event_id == event_id
    ).order_by(EventParticipation.volunteer_id).all()


def _pair_counts(db_session):
    return db_session.query(
        EventParticipation.event_id, EventParticipation.volunteer_id, func.count(EventParticipation.id)
    ).group_by(EventParticipation.event_id, EventParticipation.volunteer_id).all()


@pytest.mark.integration
class TestSubmitAttendance:
    """Tests für submit_attendance"""

    def test_inserts_new_rows(self, db_session, sample_event, volunteers, admin):
        """Test: Neue Einträge mit declared_hours = hours_attended"""
        entries = [
            AttendanceEntry(volunteer_id=volunteers["alice"].id, status=ParticipationStatus.PRESENT, hours_attended=4),
            AttendanceEntry(volunteer_id=volunteers["bob"].id, status=ParticipationStatus.ABSENT, hours_attended=0),
        ]
        result = AttendanceService.submit_attendance(db_session, sample_event.id, entries, recorded_by=admin.id)

        assert result.added == 2
        assert result.updated == 0

        rows = {r.volunteer_id: r for r in _rows(db_session, sample_event.id)}
        alice = rows[volunteers["alice"].id]
        assert alice.participation_status == ParticipationStatus.PRESENT
        assert alice.hours_attended == 4
        assert alice.declared_hours == 4
        assert alice.recorded_by_volunteer_id == admin.id
        assert alice.attendance_date is not None
        assert alice.approval_status == ApprovalStatus.PENDING

    def test_updates_existing_rows(self, db_session, sample_event, volunteers):
        """Test: Bestehender Eintrag wird aktualisiert, kein zweiter angelegt"""
        alice = volunteers["alice"]
        add_participation(db_session, sample_event, alice, ParticipationStatus.REGISTERED, 0, notes="früh da")

        result = AttendanceService.submit_attendance(
            db_session, sample_event.id,
            [AttendanceEntry(volunteer_id=alice.id, status=ParticipationStatus.PRESENT, hours_attended=3)]
        )

        assert result.added == 0
        assert result.updated == 1
        rows = _rows(db_session, sample_event.id)
        assert len(rows) == 1
        assert rows[0].hours_attended == 3
        assert rows[0].notes == "früh da"

    def test_working_set_round_trip(self, db_session, sample_event, volunteers):
        """Test: Anwesenheits-Set aus dem UI wird gespeichert"""
        ws = AttendanceWorkingSet(sample_event.id, [v.id for v in volunteers.values()], default_hours=4)
        ws.mark_all_present()
        ws.toggle(volunteers["carl"].id)  # absent

        result = AttendanceService.submit_attendance(db_session, sample_event.id, ws.entries())

        assert result.added == 4
        carl = [r for r in _rows(db_session, sample_event.id) if r.volunteer_id == volunteers["carl"].id][0]
        assert carl.participation_status == ParticipationStatus.ABSENT
        assert carl.hours_attended == 0

    def test_last_entry_per_volunteer_wins(self, db_session, sample_event, volunteers):
        """Test: Doppelte Einträge im Batch erzeugen keinen zweiten Datensatz"""
        alice = volunteers["alice"]
        entries = [
            AttendanceEntry(volunteer_id=alice.id, status=ParticipationStatus.PRESENT, hours_attended=4),
            AttendanceEntry(volunteer_id=alice.id, status=ParticipationStatus.PARTIALLY_PRESENT, hours_attended=2),
        ]
        result = AttendanceService.submit_attendance(db_session, sample_event.id, entries)

        assert result.added == 1
        rows = _rows(db_session, sample_event.id)
        assert len(rows) == 1
        assert rows[0].participation_status == ParticipationStatus.PARTIALLY_PRESENT

    def test_empty_batch_is_noop(self, db_session, sample_event):
        """Test: Leere Liste ist gültig und liefert Nullzählungen"""
        result = AttendanceService.submit_attendance(db_session, sample_event.id, [])
        assert (result.added, result.updated, result.removed, result.skipped) == (0, 0, 0, 0)

    def test_unknown_event(self, db_session, volunteers):
        """Test: Unbekanntes Event -> EventNotFound"""
        with pytest.raises(EventNotFound):
            AttendanceService.submit_attendance(
                db_session, 9999,
                [AttendanceEntry(volunteer_id=volunteers["alice"].id, status=ParticipationStatus.PRESENT)]
            )

    def test_unknown_volunteer_rolls_back_whole_batch(self, db_session, sample_event, volunteers):
        """Test: Ein unbekannter Freiwilliger -> nichts wird gespeichert"""
        entries = [
            AttendanceEntry(volunteer_id=volunteers["alice"].id, status=ParticipationStatus.PRESENT, hours_attended=4),
            AttendanceEntry(volunteer_id=4242, status=ParticipationStatus.PRESENT, hours_attended=4),
        ]
        with pytest.raises(NotFound):
            AttendanceService.submit_attendance(db_session, sample_event.id, entries)

        assert _rows(db_session, sample_event.id) == []


@pytest.mark.integration
class TestSyncAttendance:
    """Tests für sync_attendance"""

    def test_adds_and_removes_difference(self, db_session, sample_event, volunteers):
        """Test: Nur die Differenz wird geschrieben"""
        alice, bob, carl = volunteers["alice"], volunteers["bob"], volunteers["carl"]
        kept = add_participation(
            db_session, sample_event, alice, hours=4,
            approval=ApprovalStatus.APPROVED, approved_hours=4, notes="bleibt"
        )
        add_participation(db_session, sample_event, bob, hours=2)

        result = AttendanceService.sync_attendance(db_session, sample_event.id, [alice.id, carl.id])

        assert result.added == 1
        assert result.removed == 1

        rows = {r.volunteer_id: r for r in _rows(db_session, sample_event.id)}
        assert set(rows) == {alice.id, carl.id}
        # Verbleibender Eintrag behält Freigabe und Notizen
        assert rows[alice.id].id == kept.id
        assert rows[alice.id].approval_status == ApprovalStatus.APPROVED
        assert rows[alice.id].notes == "bleibt"
        # Neuer Eintrag: present mit 0 Stunden
        assert rows[carl.id].participation_status == ParticipationStatus.PRESENT
        assert rows[carl.id].hours_attended == 0

    def test_sync_is_idempotent(self, db_session, sample_event, volunteers):
        """Test: Zweiter Abgleich mit derselben Liste ändert nichts"""
        roster = [volunteers["alice"].id, volunteers["bob"].id, volunteers["alice"].id]

        first = AttendanceService.sync_attendance(db_session, sample_event.id, roster)
        second = AttendanceService.sync_attendance(db_session, sample_event.id, roster)

        assert first.added == 2
        assert (second.added, second.removed) == (0, 0)
        assert len(_rows(db_session, sample_event.id)) == 2

    def test_empty_list_clears_roster(self, db_session, sample_event, volunteers):
        """Test: Leere Liste entfernt alle Teilnehmer des Events"""
        AttendanceService.sync_attendance(
            db_session, sample_event.id, [volunteers["alice"].id, volunteers["bob"].id]
        )

        result = AttendanceService.sync_attendance(db_session, sample_event.id, [])

        assert (result.added, result.removed) == (0, 2)
        assert _rows(db_session, sample_event.id) == []

    def test_empty_list_on_empty_roster(self, db_session, sample_event):
        """Test: Leere Liste auf leerem Event -> Nullzählungen"""
        result = AttendanceService.sync_attendance(db_session, sample_event.id, [])
        assert (result.added, result.removed) == (0, 0)


@pytest.mark.integration
class TestBulkMarkAttendance:
    """Tests für bulk_mark_attendance"""

    def test_upserts_with_status(self, db_session, sample_event, volunteers):
        """Test: Bestehende behalten Stunden, neue werden angelegt"""
        alice, bob = volunteers["alice"], volunteers["bob"]
        add_participation(db_session, sample_event, alice, ParticipationStatus.REGISTERED, hours=3, notes="alt")

        result = AttendanceService.bulk_mark_attendance(
            db_session, sample_event.id, [alice.id, bob.id], ParticipationStatus.PRESENT
        )

        assert (result.added, result.updated) == (1, 1)
        rows = {r.volunteer_id: r for r in _rows(db_session, sample_event.id)}
        assert rows[alice.id].participation_status == ParticipationStatus.PRESENT
        assert rows[alice.id].hours_attended == 3
        assert rows[alice.id].notes == "alt"
        assert rows[bob.id].hours_attended == 0

    def test_overrides_hours_and_notes(self, db_session, sample_event, volunteers):
        """Test: Explizite Stunden und Notizen überschreiben"""
        alice = volunteers["alice"]
        add_participation(db_session, sample_event, alice, hours=1)

        AttendanceService.bulk_mark_attendance(
            db_session, sample_event.id, [alice.id], ParticipationStatus.PRESENT, hours_attended=4, notes="neu"
        )

        row = _rows(db_session, sample_event.id)[0]
        assert row.hours_attended == 4
        assert row.notes == "neu"

    def test_invalid_hours_rejected_before_write(self, db_session, sample_event, volunteers):
        """Test: Stunden > 24 -> ValidationError, nichts gespeichert"""
        with pytest.raises(ValidationError):
            AttendanceService.bulk_mark_attendance(
                db_session, sample_event.id, [volunteers["alice"].id], ParticipationStatus.PRESENT, hours_attended=25
            )
        assert _rows(db_session, sample_event.id) == []

    def test_empty_list_is_noop(self, db_session, sample_event):
        """Test: Leere Liste -> Nullzählungen"""
        result = AttendanceService.bulk_mark_attendance(db_session, sample_event.id, [], ParticipationStatus.ABSENT)
        assert (result.added, result.updated) == (0, 0)


@pytest.mark.integration
class TestRegisterForEvent:
    """Tests für register_for_event"""

    def test_register_creates_registered_row(self, db_session, sample_event, volunteers):
        """Test: Registrierung mit deklarierten Stunden des Events"""
        participation = AttendanceService.register_for_event(db_session, sample_event.id, volunteers["alice"].id)

        assert participation.participation_status == ParticipationStatus.REGISTERED
        assert participation.hours_attended == 0
        assert participation.declared_hours == 4
        assert participation.approval_status == ApprovalStatus.PENDING

    def test_register_twice_fails(self, db_session, sample_event, volunteers):
        """Test: Zweite Registrierung -> AlreadyRegistered, kein zweiter Eintrag"""
        alice = volunteers["alice"]
        AttendanceService.register_for_event(db_session, sample_event.id, alice.id)

        with pytest.raises(AlreadyRegistered):
            AttendanceService.register_for_event(db_session, sample_event.id, alice.id)

        assert len(_rows(db_session, sample_event.id)) == 1

    def test_declared_hours_above_event_cap(self, db_session, sample_event, volunteers):
        """Test: Mehr Stunden als das Event deklariert -> ValidationError"""
        with pytest.raises(ValidationError):
            AttendanceService.register_for_event(db_session, sample_event.id, volunteers["alice"].id, declared_hours=5)

    def test_declared_hours_out_of_range(self, db_session, sample_event, volunteers):
        """Test: Negative Stunden -> ValidationError"""
        with pytest.raises(ValidationError):
            AttendanceService.register_for_event(db_session, sample_event.id, volunteers["alice"].id, declared_hours=-1)

    def test_long_event_defaults_to_24h(self, db_session, categories, volunteers):
        """Test: Mehrtägiges Event wird auf 24 Stunden gekappt"""
        camp = make_event(db_session, categories["area-based-2"], "Winter Camp", declared_hours=56, duration_days=7)
        participation = AttendanceService.register_for_event(db_session, camp.id, volunteers["alice"].id)
        assert participation.declared_hours == 24

    def test_capacity_exceeded(self, db_session, categories, volunteers):
        """Test: Volles Event -> CapacityExceeded"""
        event = make_event(db_session, categories["college-based"], "Workshop", max_participants=2)
        AttendanceService.register_for_event(db_session, event.id, volunteers["alice"].id)
        AttendanceService.register_for_event(db_session, event.id, volunteers["bob"].id)

        with pytest.raises(CapacityExceeded):
            AttendanceService.register_for_event(db_session, event.id, volunteers["carl"].id)

        assert len(_rows(db_session, event.id)) == 2

    def test_absent_rows_free_seats(self, db_session, categories, volunteers):
        """Test: Abwesende belegen keinen Platz"""
        event = make_event(db_session, categories["college-based"], "Workshop", max_participants=1)
        add_participation(db_session, event, volunteers["alice"], ParticipationStatus.ABSENT)

        participation = AttendanceService.register_for_event(db_session, event.id, volunteers["bob"].id)
        assert participation.id is not None

    def test_inactive_event(self, db_session, categories, volunteers):
        """Test: Inaktives Event -> EventNotFound"""
        event = make_event(db_session, categories["college-based"], "Abgesagt", is_active=False)
        with pytest.raises(EventNotFound):
            AttendanceService.register_for_event(db_session, event.id, volunteers["alice"].id)

    def test_unknown_volunteer(self, db_session, sample_event):
        """Test: Unbekannter Freiwilliger -> NotFound"""
        with pytest.raises(NotFound):
            AttendanceService.register_for_event(db_session, sample_event.id, 4242)


@pytest.mark.integration
class TestUniqueness:
    """Pro (Event, Freiwilliger) höchstens ein Eintrag nach beliebigen Operationen"""

    def test_mixed_operations_keep_pairs_unique(self, db_session, sample_event, volunteers):
        """Test: Registrierung, Abgleich, Massen-Markierung und Speichern kombiniert"""
        alice, bob = volunteers["alice"], volunteers["bob"]

        AttendanceService.register_for_event(db_session, sample_event.id, alice.id)
        AttendanceService.sync_attendance(db_session, sample_event.id, [alice.id, bob.id])
        AttendanceService.bulk_mark_attendance(
            db_session, sample_event.id, [alice.id, bob.id], ParticipationStatus.PRESENT, hours_attended=4
        )
        AttendanceService.submit_attendance(
            db_session, sample_event.id,
            [AttendanceEntry(volunteer_id=bob.id, status=ParticipationStatus.ABSENT)]
        )

        assert all(count == 1 for _, _, count in _pair_counts(db_session))
        assert len(_rows(db_session, sample_event.id)) == 2


@pytest.mark.integration
class TestParticipationEdits:
    """Tests für update_participation_status und request_hours"""

    def test_update_only_given_fields(self, db_session, sample_event, volunteers):
        """Test: Nur übergebene Felder werden geschrieben"""
        row = add_participation(db_session, sample_event, volunteers["alice"], hours=4, notes="alt")

        updated = AttendanceService.update_participation_status(
            db_session, row.id, status=ParticipationStatus.PARTIALLY_PRESENT
        )

        assert updated.participation_status == ParticipationStatus.PARTIALLY_PRESENT
        assert updated.hours_attended == 4
        assert updated.notes == "alt"

    def test_update_missing_row(self, db_session):
        """Test: Unbekannter Eintrag -> ParticipationNotFound"""
        with pytest.raises(ParticipationNotFound):
            AttendanceService.update_participation_status(db_session, 999, hours_attended=2)

    def test_request_hours_resets_approval(self, db_session, sample_event, volunteers, admin):
        """Test: Antrag setzt Freigabe zurück auf pending"""
        alice = volunteers["alice"]
        row = add_participation(
            db_session, sample_event, alice, hours=2,
            approval=ApprovalStatus.APPROVED, approved_hours=2, approved_by=admin.id
        )

        updated = AttendanceService.request_hours(db_session, row.id, alice.id, 4, notes="vergessen")

        assert updated.hours_attended == 4
        assert updated.declared_hours == 4
        assert updated.approval_status == ApprovalStatus.PENDING
        assert updated.approved_hours is None
        assert updated.approved_by is None
        assert updated.notes == "vergessen"

    def test_request_hours_above_event_cap(self, db_session, sample_event, volunteers):
        """Test: Mehr als die Event-Stunden -> ValidationError"""
        alice = volunteers["alice"]
        row = add_participation(db_session, sample_event, alice, hours=2)

        with pytest.raises(ValidationError):
            AttendanceService.request_hours(db_session, row.id, alice.id, 5)

    def test_request_hours_cap_checked_first(self, db_session, sample_event, volunteers):
        """Test: Obergrenze wird vor dem Laden in der Transaktion geprüft"""
        row = add_participation(db_session, sample_event, volunteers["alice"], hours=2)

        with pytest.raises(ValidationError):
            AttendanceService.request_hours(db_session, row.id, volunteers["bob"].id, 5)

        assert db_session.get(EventParticipation, row.id).hours_attended == 2

    def test_request_hours_unknown_row(self, db_session, volunteers):
        """Test: Unbekannter Eintrag -> ParticipationNotFound"""
        with pytest.raises(ParticipationNotFound):
            AttendanceService.request_hours(db_session, 999, volunteers["alice"].id, 2)

    def test_request_hours_for_foreign_row(self, db_session, sample_event, volunteers):
        """Test: Fremder Eintrag -> PermissionDenied"""
        row = add_participation(db_session, sample_event, volunteers["alice"], hours=2)

        with pytest.raises(PermissionDenied):
            AttendanceService.request_hours(db_session, row.id, volunteers["bob"].id, 3)

    def test_event_participants_with_names(self, db_session, sample_event, volunteers):
        """Test: Teilnehmerliste enthält Namen, sortiert nach Nachname"""
        add_participation(db_session, sample_event, volunteers["alice"], hours=4)
        add_participation(db_session, sample_event, volunteers["carl"], hours=4)

        participants = AttendanceService.get_event_participants(db_session, sample_event.id)

        assert [p.volunteer_name for p in participants] == ["Carl Xavier", "Alice Zeller"]
        assert participants[0].hours_attended == 4
