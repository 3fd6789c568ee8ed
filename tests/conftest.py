"""
Pytest configuration for the Application Tracker backend.
"""
import asyncio
from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import text

from app.core.errors import NotFoundError
from app.db.database import build_engine
from app.schemas.schemas import Application, CoverLetter, FilterField, Resume
from app.services.lookup_service import FILTER_COLUMNS, LookupService, coerce_filter_value


# ============================================================
# IN-MEMORY LOOKUP SERVICE
# ============================================================

class FakeLookupService(LookupService):
    """
    LookupService over plain lists. Records calls and how many filter
    lookups were in flight at once; individual lookups can be made to fail.
    """

    def __init__(
        self,
        applications: List[Application],
        resumes: Optional[Dict[int, Resume]] = None,
        cover_letters: Optional[Dict[int, CoverLetter]] = None,
        users: Optional[set] = None,
        delay: float = 0.01,
    ):
        self.applications = list(applications)
        self.resumes = resumes or {}
        self.cover_letters = cover_letters or {}
        self.users = users if users is not None else {a.user_id for a in applications}
        self.delay = delay

        self.calls: List[tuple] = []
        self.completed: List[FilterField] = []
        self.field_errors: Dict[FilterField, BaseException] = {}
        self.field_delays: Dict[FilterField, float] = {}
        self.field_overrides: Dict[FilterField, List[Application]] = {}
        self.find_all_error: Optional[BaseException] = None
        self.resume_error: Optional[BaseException] = None
        self.cover_letter_error: Optional[BaseException] = None

        self.in_flight = 0
        self.max_in_flight = 0

    async def find_by_user_and_field(self, user_id: int, field: FilterField, value: Any) -> List[Application]:
        self.calls.append(("field", user_id, field, value))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.field_delays.get(field, self.delay))
            if field in self.field_errors:
                raise self.field_errors[field]
            if user_id not in self.users:
                raise NotFoundError(f"User {user_id} not found")
            if field in self.field_overrides:
                return list(self.field_overrides[field])
            wanted = coerce_filter_value(field, value)
            column = FILTER_COLUMNS[field]
            result = []
            for app in self.applications:
                actual = getattr(app, column)
                if field == FilterField.status:
                    actual = actual.value
                if app.user_id == user_id and actual == wanted:
                    result.append(app)
            return result
        finally:
            self.in_flight -= 1
            self.completed.append(field)

    async def find_all_by_user(self, user_id: int) -> List[Application]:
        self.calls.append(("all", user_id))
        await asyncio.sleep(0)
        if self.find_all_error is not None:
            raise self.find_all_error
        if user_id not in self.users:
            raise NotFoundError(f"User {user_id} not found")
        return [a for a in self.applications if a.user_id == user_id]

    async def find_resume_by_id(self, resume_id: int) -> Optional[Resume]:
        self.calls.append(("resume", resume_id))
        if self.resume_error is not None:
            raise self.resume_error
        return self.resumes.get(resume_id)

    async def find_cover_letter_by_id(self, cover_letter_id: int) -> Optional[CoverLetter]:
        self.calls.append(("cover_letter", cover_letter_id))
        if self.cover_letter_error is not None:
            raise self.cover_letter_error
        return self.cover_letters.get(cover_letter_id)

    async def user_exists(self, user_id: int) -> bool:
        return user_id in self.users


def make_application(application_id: int, **overrides) -> Application:
    fields = {
        "application_id": application_id,
        "user_id": 42,
        "company_name": "Acme",
        "position_title": "Backend Engineer",
        "status": "waitlist",
        "application_date": date(2024, 1, 1),
        "deadline": None,
        "application_source": "LinkedIn",
        "notes": None,
        "resume_id": None,
        "cover_letter_id": None,
    }
    fields.update(overrides)
    return Application(**fields)


@pytest.fixture
def application_factory():
    return make_application


@pytest.fixture
def user_42_applications():
    """A, B, C for user 42 plus one foreign application for user 7."""
    return [
        make_application(1, status="waitlist", company_name="Acme",
                         application_date=date(2024, 1, 10), resume_id=1),
        make_application(2, status="waitlist", company_name="Globex",
                         application_date=date(2024, 2, 1), cover_letter_id=3),
        make_application(3, status="rejected", company_name="Acme",
                         application_date=date(2024, 3, 1), position_title="Data Engineer",
                         application_source="Referral", deadline=date(2024, 3, 15)),
        make_application(4, user_id=7, status="waitlist", company_name="Acme",
                         application_date=date(2024, 4, 1)),
    ]


@pytest.fixture
def fake_lookup(user_42_applications):
    return FakeLookupService(
        user_42_applications,
        resumes={1: Resume(resume_id=1, user_id=42, resume_file_name="resume_a.pdf")},
        cover_letters={3: CoverLetter(cover_letter_id=3, user_id=42, cover_file_name="cover_globex.pdf")},
        users={42, 7},
    )


# ============================================================
# SQLITE DATABASE
# ============================================================

SCHEMA = [
    """
    CREATE TABLE users (
        user_id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT 1,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE resumes (
        resume_id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        resume_file_name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE cover_letters (
        cover_letter_id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        cover_file_name TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE applications (
        application_id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        company_name TEXT NOT NULL,
        position_title TEXT NOT NULL,
        status TEXT NOT NULL,
        application_date DATE NOT NULL,
        deadline DATE,
        application_source TEXT NOT NULL,
        notes TEXT,
        resume_id INTEGER,
        cover_letter_id INTEGER
    )
    """,
    """
    CREATE TABLE interviews (
        interview_id INTEGER PRIMARY KEY AUTOINCREMENT,
        application_id INTEGER NOT NULL REFERENCES applications (application_id),
        interview_date DATETIME NOT NULL,
        interviewer_name TEXT NOT NULL,
        interviewer_email TEXT NOT NULL,
        location TEXT NOT NULL,
        reminder_sent BOOLEAN NOT NULL DEFAULT 0,
        interview_status TEXT NOT NULL DEFAULT 'scheduled'
    )
    """,
]

SEED = [
    "INSERT INTO users (user_id, email, password_hash) VALUES (42, 'ada@example.com', 'x')",
    "INSERT INTO users (user_id, email, password_hash) VALUES (7, 'bob@example.com', 'x')",
    "INSERT INTO users (user_id, email, password_hash) VALUES (50, 'empty@example.com', 'x')",
    "INSERT INTO resumes (resume_id, user_id, resume_file_name) VALUES (1, 42, 'resume_a.pdf')",
    "INSERT INTO resumes (resume_id, user_id, resume_file_name) VALUES (2, 7, 'bob_resume.pdf')",
    "INSERT INTO cover_letters (cover_letter_id, user_id, cover_file_name) VALUES (3, 42, 'cover_globex.pdf')",
    "INSERT INTO cover_letters (cover_letter_id, user_id, cover_file_name) VALUES (4, 7, 'bob_cover.pdf')",
    """INSERT INTO applications (application_id, user_id, company_name, position_title, status,
        application_date, deadline, application_source, notes, resume_id, cover_letter_id)
       VALUES (1, 42, 'Acme', 'Backend Engineer', 'waitlist', '2024-01-10', NULL, 'LinkedIn', NULL, 1, NULL)""",
    """INSERT INTO applications (application_id, user_id, company_name, position_title, status,
        application_date, deadline, application_source, notes, resume_id, cover_letter_id)
       VALUES (2, 42, 'Globex', 'Backend Engineer', 'waitlist', '2024-02-01', NULL, 'LinkedIn', NULL, NULL, 3)""",
    """INSERT INTO applications (application_id, user_id, company_name, position_title, status,
        application_date, deadline, application_source, notes, resume_id, cover_letter_id)
       VALUES (3, 42, 'Acme', 'Data Engineer', 'rejected', '2024-03-01', '2024-03-15', 'Referral', NULL, NULL, NULL)""",
    """INSERT INTO applications (application_id, user_id, company_name, position_title, status,
        application_date, deadline, application_source, notes, resume_id, cover_letter_id)
       VALUES (4, 7, 'Acme', 'Backend Engineer', 'waitlist', '2024-04-01', NULL, 'LinkedIn', NULL, NULL, NULL)""",
    """INSERT INTO interviews (interview_id, application_id, interview_date, interviewer_name,
        interviewer_email, location, reminder_sent, interview_status)
       VALUES (1, 1, '2024-05-01 10:00:00.000000', 'Jane Roe', 'jane@acme.com', 'Zoom', 0, 'scheduled')""",
    """INSERT INTO interviews (interview_id, application_id, interview_date, interviewer_name,
        interviewer_email, location, reminder_sent, interview_status)
       VALUES (2, 3, '2024-04-20 14:30:00.000000', 'Raj Patel', 'raj@acme.com', 'Acme HQ', 1, 'completed')""",
    """INSERT INTO interviews (interview_id, application_id, interview_date, interviewer_name,
        interviewer_email, location, reminder_sent, interview_status)
       VALUES (3, 1, '2024-05-01 16:00:00.000000', 'Tom Lee', 'tom@acme.com', 'acme hq', 0, 'scheduled')""",
    """INSERT INTO interviews (interview_id, application_id, interview_date, interviewer_name,
        interviewer_email, location, reminder_sent, interview_status)
       VALUES (4, 4, '2024-05-01 09:00:00.000000', 'Eve Stone', 'eve@acme.com', 'Zoom', 0, 'scheduled')""",
]


class SqliteDatabase:
    """Temporary aiosqlite database with the tracker tables and seed rows."""

    def __init__(self, path):
        self.url = f"sqlite+aiosqlite:///{path}"

    async def start(self):
        engine = build_engine(self.url)
        async with engine.begin() as conn:
            for statement in SCHEMA + SEED:
                await conn.execute(text(statement))
        return engine


@pytest.fixture
def sqlite_db(tmp_path):
    return SqliteDatabase(tmp_path / "tracker.db")
