"""
Lookup Service

Read-only, predicate-based queries over a user's applications and the
documents they reference. The filter engine only talks to this interface,
so tests can swap the SQL implementation for an in-memory one.

FILTER_COLUMNS binds every FilterField to exactly one column; values are
always passed as bound parameters.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.errors import LookupFailure, NotFoundError
from app.core.logging_config import get_logger
from app.db.database import get_engine
from app.schemas.schemas import Application, CoverLetter, FilterField, Resume

logger = get_logger(__name__)


FILTER_COLUMNS: Dict[FilterField, str] = {
    FilterField.status: "status",
    FilterField.company: "company_name",
    FilterField.position: "position_title",
    FilterField.source: "application_source",
    FilterField.date: "application_date",
    FilterField.deadline: "deadline",
}

if set(FILTER_COLUMNS) != set(FilterField):
    raise RuntimeError("Every FilterField must be bound to a column")

DATE_FIELDS = frozenset({FilterField.date, FilterField.deadline})

APPLICATION_COLUMNS = """
    application_id, user_id, company_name, position_title, status,
    application_date, deadline, application_source, notes,
    resume_id, cover_letter_id
"""


class LookupService(ABC):
    """Queries the filter engine depends on."""

    @abstractmethod
    async def find_by_user_and_field(self, user_id: int, field: FilterField, value: Any) -> List[Application]:
        ...

    @abstractmethod
    async def find_all_by_user(self, user_id: int) -> List[Application]:
        ...

    @abstractmethod
    async def find_resume_by_id(self, resume_id: int) -> Optional[Resume]:
        ...

    @abstractmethod
    async def find_cover_letter_by_id(self, cover_letter_id: int) -> Optional[CoverLetter]:
        ...

    @abstractmethod
    async def user_exists(self, user_id: int) -> bool:
        ...


def coerce_filter_value(field: FilterField, value: Any) -> Any:
    """Convert a raw query value into the type stored in the column."""
    if field in DATE_FIELDS:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        raw = str(value).strip()
        # YYYY-MM-DD, or a full ISO datetime reduced to its date
        if "T" in raw or " " in raw:
            return datetime.fromisoformat(raw).date()
        return date.fromisoformat(raw)
    if field == FilterField.status:
        # "not answered" is accepted as a spelling of not_answered
        return str(value).strip().replace(" ", "_")
    return str(value)


class SqlLookupService(LookupService):
    """
    LookupService backed by SQLAlchemy asyncio.

    Each lookup checks out its own connection from the pool so that
    concurrent lookups never share one.
    """

    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine or get_engine()

    async def _fetch(self, sql, params: dict) -> list:
        statement = text(sql) if isinstance(sql, str) else sql
        async with self.engine.connect() as conn:
            result = await conn.execute(statement, params)
            return result.mappings().all()

    async def _ensure_user(self, user_id: int) -> None:
        if not await self.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")

    async def find_by_user_and_field(self, user_id: int, field: FilterField, value: Any) -> List[Application]:
        field = FilterField(field)
        column = FILTER_COLUMNS[field]
        params = {"user_id": user_id, "value": coerce_filter_value(field, value)}

        statement = text(
            f"SELECT {APPLICATION_COLUMNS} FROM applications "
            f"WHERE user_id = :user_id AND {column} = :value "
            f"ORDER BY application_id"
        )
        if field in DATE_FIELDS:
            statement = statement.bindparams(bindparam("value", type_=Date))

        try:
            rows = await self._fetch(statement, params)
            if not rows:
                await self._ensure_user(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Lookup by {field.value} failed for user {user_id}: {e}")
            raise LookupFailure(
                f"Unable to load applications with {field.value} {value}. Please try again later.",
                field=field.value
            ) from e

        return [Application(**row) for row in rows]

    async def find_all_by_user(self, user_id: int) -> List[Application]:
        try:
            rows = await self._fetch(
                f"SELECT {APPLICATION_COLUMNS} FROM applications "
                f"WHERE user_id = :user_id ORDER BY application_id",
                {"user_id": user_id}
            )
            if not rows:
                await self._ensure_user(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Lookup of all applications failed for user {user_id}: {e}")
            raise LookupFailure(
                f"Unable to load the applications of user {user_id}. Please try again later."
            ) from e

        return [Application(**row) for row in rows]

    async def find_resume_by_id(self, resume_id: int) -> Optional[Resume]:
        rows = await self._fetch(
            "SELECT resume_id, user_id, resume_file_name FROM resumes WHERE resume_id = :id",
            {"id": resume_id}
        )
        return Resume(**rows[0]) if rows else None

    async def find_cover_letter_by_id(self, cover_letter_id: int) -> Optional[CoverLetter]:
        rows = await self._fetch(
            "SELECT cover_letter_id, user_id, cover_file_name FROM cover_letters WHERE cover_letter_id = :id",
            {"id": cover_letter_id}
        )
        return CoverLetter(**rows[0]) if rows else None

    async def user_exists(self, user_id: int) -> bool:
        rows = await self._fetch(
            "SELECT 1 FROM users WHERE user_id = :id",
            {"id": user_id}
        )
        return bool(rows)


def get_lookup_service() -> LookupService:
    """FastAPI dependency - lookup service bound to the global engine."""
    return SqlLookupService(get_engine())
