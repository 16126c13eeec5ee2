#!/usr/bin/env python3
"""
conftest.py
-----------
Shared fixtures for day tag integration tests.

Provides a database with a tagged vacation week that overlaps the start
of a new medicine, with one bowel movement per day around it.

Fixtures:
    vacation_month: TrackerDB with the October 2025 scenario loaded
    vacation_days: Dates tagged Vacation
    medicine_days: Dates tagged New Medicine
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, timedelta

# --- Third-party imports ---
import pytest

VACATION_DAYS = [date(2025, 10, 20) + timedelta(days=i) for i in range(7)]
MEDICINE_DAYS = [date(2025, 10, 24) + timedelta(days=i) for i in range(4)]
RECORDED_DAYS = [date(2025, 10, 18) + timedelta(days=i) for i in range(11)]


@pytest.fixture
def vacation_month(test_db):
    """
    Vacation on 2025-10-20..26, New Medicine on 2025-10-24..27.

    Bowel movements at 08:00 every day from 2025-10-18 to 2025-10-28:
    consistency 5 on vacation days, 3 otherwise, urgency 2 throughout.
    """
    for day in VACATION_DAYS:
        test_db.add_tag_to_day(day, "Vacation")
    for day in MEDICINE_DAYS:
        test_db.add_tag_to_day(day, "New Medicine")

    with test_db.session_scope():
        for day in RECORDED_DAYS:
            test_db.entries.create_bowel_movement({
                "date": day.isoformat(),
                "time": "08:00",
                "consistency": 5 if day in VACATION_DAYS else 3,
                "urgency": 2,
                "notes": None,
            })
    return test_db


@pytest.fixture
def vacation_days():
    return list(VACATION_DAYS)


@pytest.fixture
def medicine_days():
    return list(MEDICINE_DAYS)
