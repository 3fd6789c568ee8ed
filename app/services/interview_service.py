"""
Interview Service - interviews attached to a user's applications.

Interviews carry no user_id of their own. Ownership always goes through
applications.user_id, so an interview on someone else's application
behaves exactly like one that does not exist.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Boolean, DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.core.errors import NotFoundError
from app.core.logging_config import get_logger
from app.db.database import get_db_session, get_engine
from app.schemas.schemas import (
    Interview,
    InterviewCreate,
    InterviewStatus,
    InterviewUpdate,
)

logger = get_logger(__name__)

INTERVIEW_SELECT = """
    SELECT i.interview_id, i.application_id, i.interview_date, i.interviewer_name,
           i.interviewer_email, i.location, i.reminder_sent, i.interview_status,
           a.company_name, a.position_title
    FROM interviews i
    JOIN applications a ON a.application_id = i.application_id
    WHERE a.user_id = :user_id
"""

OWNED_INTERVIEW = (
    "interview_id = :id AND application_id IN "
    "(SELECT application_id FROM applications WHERE user_id = :user_id)"
)

UPDATABLE_FIELDS = [
    "application_id", "interview_date", "interviewer_name", "interviewer_email",
    "location", "reminder_sent", "interview_status",
]


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Interview dates are stored without a timezone, in UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _select(sql: str, *date_params: str):
    statement = text(sql)
    if date_params:
        statement = statement.bindparams(*(bindparam(name, type_=DateTime) for name in date_params))
    return statement.columns(interview_date=DateTime, reminder_sent=Boolean)


async def ensure_application_owned(db: AsyncConnection, user_id: int, application_id: int) -> None:
    result = await db.execute(
        text("SELECT 1 FROM applications WHERE application_id = :id AND user_id = :user_id"),
        {"id": application_id, "user_id": user_id}
    )
    if result.fetchone() is None:
        raise NotFoundError(f"Application {application_id} not found")


class InterviewService:
    """
    Handles create / read / update / delete and filtered listing of interviews.
    """

    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine or get_engine()

    async def create_interview(self, user_id: int, data: InterviewCreate) -> Interview:
        """Schedule an interview on one of the user's applications."""
        statement = text("""
            INSERT INTO interviews (application_id, interview_date, interviewer_name,
                interviewer_email, location, reminder_sent, interview_status)
            VALUES (:application_id, :interview_date, :interviewer_name,
                :interviewer_email, :location, :reminder_sent, :interview_status)
            RETURNING interview_id
        """).bindparams(bindparam("interview_date", type_=DateTime))
        params = {
            "application_id": data.application_id,
            "interview_date": to_naive_utc(data.interview_date),
            "interviewer_name": data.interviewer_name,
            "interviewer_email": data.interviewer_email,
            "location": data.location,
            "reminder_sent": data.reminder_sent,
            "interview_status": data.interview_status.value,
        }

        async with get_db_session(self.engine) as db:
            await ensure_application_owned(db, user_id, data.application_id)
            result = await db.execute(statement, params)
            interview_id = result.scalar_one()

        logger.info(f"Created interview {interview_id} for application {data.application_id}")
        return await self.get_interview(user_id, interview_id)

    async def get_interview(self, user_id: int, interview_id: int) -> Interview:
        async with get_db_session(self.engine) as db:
            result = await db.execute(
                _select(INTERVIEW_SELECT + " AND i.interview_id = :id"),
                {"user_id": user_id, "id": interview_id}
            )
            row = result.mappings().first()

        if row is None:
            raise NotFoundError(f"Interview {interview_id} not found")
        return Interview(**row)

    async def list_interviews(
        self,
        user_id: int,
        status: Optional[InterviewStatus] = None,
        location: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        on_date: Optional[date] = None,
        reminder_sent: Optional[bool] = None,
        application_id: Optional[int] = None,
    ) -> List[Interview]:
        """
        The user's interviews, soonest first. Every given filter must hold.

        location is compared case-insensitively. date_from and date_to are
        inclusive bounds; on_date matches any time on that calendar day.
        """
        conditions: List[str] = []
        params: Dict[str, Any] = {"user_id": user_id}
        date_params: List[str] = []

        if status is not None:
            conditions.append("i.interview_status = :status")
            params["status"] = InterviewStatus(status).value
        if location:
            conditions.append("LOWER(i.location) = LOWER(:location)")
            params["location"] = location.strip()
        if date_from is not None:
            conditions.append("i.interview_date >= :date_from")
            params["date_from"] = to_naive_utc(date_from)
            date_params.append("date_from")
        if date_to is not None:
            conditions.append("i.interview_date <= :date_to")
            params["date_to"] = to_naive_utc(date_to)
            date_params.append("date_to")
        if on_date is not None:
            conditions.append("i.interview_date >= :day_start AND i.interview_date < :day_end")
            params["day_start"] = datetime.combine(on_date, time.min)
            params["day_end"] = params["day_start"] + timedelta(days=1)
            date_params.extend(["day_start", "day_end"])
        if reminder_sent is not None:
            conditions.append("i.reminder_sent = :reminder_sent")
            params["reminder_sent"] = reminder_sent
        if application_id is not None:
            conditions.append("i.application_id = :application_id")
            params["application_id"] = application_id

        sql = INTERVIEW_SELECT
        for condition in conditions:
            sql += f" AND {condition}"
        sql += " ORDER BY i.interview_date, i.interview_id"

        async with get_db_session(self.engine) as db:
            result = await db.execute(_select(sql, *date_params), params)
            rows = result.mappings().all()

        return [Interview(**row) for row in rows]

    async def list_for_application(self, user_id: int, application_id: int) -> List[Interview]:
        """Interviews of one application. NotFoundError if the application is not the user's."""
        async with get_db_session(self.engine) as db:
            await ensure_application_owned(db, user_id, application_id)
        return await self.list_interviews(user_id, application_id=application_id)

    async def update_interview(self, user_id: int, interview_id: int, data: InterviewUpdate) -> Interview:
        """Update only the fields that were provided."""
        provided = data.model_dump(exclude_unset=True)
        updates = []
        params: Dict[str, Any] = {"id": interview_id, "user_id": user_id}

        for field in UPDATABLE_FIELDS:
            if field not in provided:
                continue
            value = provided[field]
            # every interview column is NOT NULL
            if value is None:
                raise ValueError(f"{field} cannot be null")
            if isinstance(value, InterviewStatus):
                value = value.value
            elif isinstance(value, datetime):
                value = to_naive_utc(value)
            updates.append(f"{field} = :{field}")
            params[field] = value

        if not updates:
            raise ValueError("No fields to update")

        statement = text(f"UPDATE interviews SET {', '.join(updates)} WHERE {OWNED_INTERVIEW}")
        if "interview_date" in params:
            statement = statement.bindparams(bindparam("interview_date", type_=DateTime))

        async with get_db_session(self.engine) as db:
            if "application_id" in params:
                await ensure_application_owned(db, user_id, params["application_id"])
            result = await db.execute(statement, params)
            if result.rowcount == 0:
                raise NotFoundError(f"Interview {interview_id} not found")

        logger.info(f"Updated interview {interview_id}: {', '.join(sorted(provided))}")
        return await self.get_interview(user_id, interview_id)

    async def delete_interview(self, user_id: int, interview_id: int) -> None:
        async with get_db_session(self.engine) as db:
            result = await db.execute(
                text(f"DELETE FROM interviews WHERE {OWNED_INTERVIEW}"),
                {"id": interview_id, "user_id": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError(f"Interview {interview_id} not found")

        logger.info(f"Deleted interview {interview_id} for user {user_id}")

    async def count_interviews_by_statuses(
        self,
        user_id: int,
        statuses: Optional[Sequence[InterviewStatus]] = None
    ) -> Dict[str, int]:
        """Count interviews per status, 0 for requested statuses with none."""
        wanted = [InterviewStatus(s).value for s in (statuses or list(InterviewStatus))]

        async with get_db_session(self.engine) as db:
            result = await db.execute(
                text("SELECT i.interview_status AS status, COUNT(*) AS total "
                     "FROM interviews i JOIN applications a ON a.application_id = i.application_id "
                     "WHERE a.user_id = :user_id GROUP BY i.interview_status"),
                {"user_id": user_id}
            )
            found = {row["status"]: row["total"] for row in result.mappings().all()}

        return {status: int(found.get(status, 0)) for status in wanted}
