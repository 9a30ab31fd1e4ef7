"""Pytest Fixtures und Test-Konfiguration"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from datetime import datetime, timedelta, timezone

from nss_hours.database import Base
from nss_hours.models import Event, EventCategory, EventParticipation, Volunteer
from nss_hours.models.enums import ParticipationStatus, ApprovalStatus


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Erstellt eine temporäre In-Memory-SQLite-Datenbank für Tests
    Jeder Test bekommt eine frische, isolierte Datenbank
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def categories(db_session: Session) -> dict[str, EventCategory]:
    """Die vier Standard-Kategorien, Schlüssel = Code"""
    data = [
        ("area-based-1", "Area Based - 1"),
        ("area-based-2", "Area Based - 2"),
        ("university-based", "University Based"),
        ("college-based", "College Based"),
    ]
    result = {}
    for code, name in data:
        category = EventCategory(code=code, category_name=name, is_active=True)
        db_session.add(category)
        result[code] = category
    db_session.commit()
    return result


def make_volunteer(db_session: Session, first_name: str, last_name: str, gender, year: str, **kwargs) -> Volunteer:
    volunteer = Volunteer(
        first_name=first_name,
        last_name=last_name,
        gender=gender,
        year=year,
        branch=kwargs.pop("branch", "CSE"),
        roll_number=kwargs.pop("roll_number", f"{year}-{first_name}-{last_name}"),
        **kwargs
    )
    db_session.add(volunteer)
    db_session.commit()
    db_session.refresh(volunteer)
    return volunteer


@pytest.fixture
def volunteers(db_session: Session) -> dict[str, Volunteer]:
    """
    Freiwillige mit gemischtem Geschlecht und Studienjahr.

    Erwartete Export-Reihenfolge: Bob (SE), Dana (SE), Alice (TE), Carl (FE)
    """
    return {
        "alice": make_volunteer(db_session, "Alice", "Zeller", "F", "TE"),
        "bob": make_volunteer(db_session, "Bob", "Young", "M", "SE"),
        "carl": make_volunteer(db_session, "Carl", "Xavier", "M", "FE"),
        "dana": make_volunteer(db_session, "Dana", "Weber", None, "SE"),
    }


@pytest.fixture
def admin(db_session: Session) -> Volunteer:
    """Programmverantwortliche Person (wird auch als approver/recorded_by genutzt)"""
    return make_volunteer(db_session, "Olga", "Officer", "F", "TE", roll_number="ADMIN-1")


def make_event(
    db_session: Session,
    category: EventCategory,
    name: str,
    declared_hours: int = 4,
    days_from_now: int = -7,
    duration_days: int = 1,
    **kwargs
) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=days_from_now)
    event = Event(
        event_name=name,
        start_date=start,
        end_date=start + timedelta(days=duration_days),
        declared_hours=declared_hours,
        category_id=category.id,
        **kwargs
    )
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event


@pytest.fixture
def sample_event(db_session: Session, categories) -> Event:
    """Vergangenes Area-Based-1-Event mit 4 deklarierten Stunden"""
    return make_event(db_session, categories["area-based-1"], "Tree Plantation", declared_hours=4)


@pytest.fixture
def section_events(db_session: Session, categories) -> dict[str, Event]:
    """Je ein Event pro Abschnitt (area-based-1 bekommt zwei)"""
    return {
        "ab1_early": make_event(db_session, categories["area-based-1"], "Village Survey", 6, days_from_now=-20),
        "ab1_late": make_event(db_session, categories["area-based-1"], "Tree Plantation", 4, days_from_now=-5),
        "ab2": make_event(db_session, categories["area-based-2"], "Health Camp", 8, days_from_now=-10),
        "uni": make_event(db_session, categories["university-based"], "Blood Donation Drive", 5, days_from_now=-15),
        "college": make_event(db_session, categories["college-based"], "Campus Cleanup", 3, days_from_now=-3),
    }


def add_participation(
    db_session: Session,
    event: Event,
    volunteer: Volunteer,
    status: ParticipationStatus = ParticipationStatus.PRESENT,
    hours: int = 0,
    approval: ApprovalStatus = ApprovalStatus.PENDING,
    approved_hours=None,
    **kwargs
) -> EventParticipation:
    participation = EventParticipation(
        event_id=event.id,
        volunteer_id=volunteer.id,
        participation_status=status,
        hours_attended=hours,
        declared_hours=hours,
        approval_status=approval,
        approved_hours=approved_hours,
        **kwargs
    )
    db_session.add(participation)
    db_session.commit()
    db_session.refresh(participation)
    return participation


# Marker für schnelle Unit-Tests
pytest.mark.unit = pytest.mark.unit

# Marker für Integration-Tests mit DB
pytest.mark.integration = pytest.mark.integration
