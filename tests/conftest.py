"""
conftest.py
-----------
Shared pytest fixtures for tracker tests.

Provides fixtures for:
- Database setup and teardown
- Sessions and entity managers
- Entry data factories
"""
from datetime import date

import pytest

from tracker.core.paths import ALEMBIC_DIR

# Reference "today" for entry validation; all test dates fall before it.
TODAY = date(2025, 12, 31)


# ----- Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_path):
    """Path for a fresh SQLite database file."""
    return tmp_path / "test.db"


@pytest.fixture
def test_db(test_db_path):
    """
    Create a test database.

    The file does not exist yet, so TrackerDB builds the schema from the
    ORM models and stamps the Alembic head revision.
    """
    from tracker.database.manager import TrackerDB

    db = TrackerDB(db_path=test_db_path, alembic_dir=ALEMBIC_DIR)
    yield db
    db.close()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def tag_manager(db_session):
    """Create TagManager instance."""
    from tracker.database.managers import TagManager
    return TagManager(db_session)


@pytest.fixture
def day_tag_manager(db_session):
    """Create DayTagManager instance."""
    from tracker.database.managers import DayTagManager
    return DayTagManager(db_session)


@pytest.fixture
def entry_manager(db_session):
    """Create EntryManager instance with a fixed reference date."""
    from tracker.database.managers import EntryManager
    return EntryManager(db_session, today=TODAY)


# ----- Data Factories -----

def bowel_movement_data(day="2025-10-25", time="08:30", consistency=4, urgency=2, notes=None):
    """Valid bowel movement input."""
    return {
        "date": day,
        "time": time,
        "consistency": consistency,
        "urgency": urgency,
        "notes": notes,
    }


def note_data(day="2025-10-25", time="12:00", category="food", content="Pasta", tags=None):
    """Valid note input."""
    return {
        "date": day,
        "time": time,
        "category": category,
        "content": content,
        "tags": tags,
    }


@pytest.fixture
def make_bowel_movement():
    return bowel_movement_data


@pytest.fixture
def make_note():
    return note_data


@pytest.fixture
def tagged_october(db_session, tag_manager, day_tag_manager, entry_manager):
    """
    A small October with two overlapping tags.

    - Vacation: 2025-10-25, 2025-10-26
    - New Medicine: 2025-10-26, 2025-10-27
    - One bowel movement per day from 2025-10-24 to 2025-10-27,
      plus a note on 2025-10-26
    """
    vacation = tag_manager.get_or_create("Vacation", "Beach trip")
    medicine = tag_manager.get_or_create("New Medicine")

    day_tag_manager.add_to_day(vacation.id, "2025-10-25")
    day_tag_manager.add_to_day(vacation.id, "2025-10-26")
    day_tag_manager.add_to_day(medicine.id, "2025-10-26")
    day_tag_manager.add_to_day(medicine.id, "2025-10-27")

    entries = {}
    for day, consistency, urgency in (
        ("2025-10-24", 3, 1),
        ("2025-10-25", 4, 2),
        ("2025-10-26", 6, 3),
        ("2025-10-27", 5, 3),
    ):
        entries[day] = entry_manager.create_bowel_movement(
            bowel_movement_data(day=day, consistency=consistency, urgency=urgency)
        )
    entries["note"] = entry_manager.create_note(
        note_data(day="2025-10-26", time="13:15", content="Seafood dinner")
    )

    return {"vacation": vacation, "medicine": medicine, "entries": entries}
