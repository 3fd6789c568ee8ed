"""
Application Service - CRUD operations for a user's applications.

Every operation is scoped to the owning user: an application that
belongs to someone else behaves exactly like one that does not exist.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Date, bindparam, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.core.errors import NotFoundError
from app.core.logging_config import get_logger
from app.db.database import get_db_session, get_engine
from app.schemas.schemas import (
    Application,
    ApplicationCreate,
    ApplicationStatus,
    ApplicationUpdate,
)
from app.services.lookup_service import APPLICATION_COLUMNS

logger = get_logger(__name__)

UPDATABLE_FIELDS = [
    "company_name", "position_title", "status", "deadline",
    "application_source", "notes", "resume_id", "cover_letter_id",
]

# Columns declared NOT NULL
REQUIRED_FIELDS = frozenset({"company_name", "position_title", "status", "application_source"})


async def ensure_documents_owned(
    db: AsyncConnection,
    user_id: int,
    resume_id: Optional[int] = None,
    cover_letter_id: Optional[int] = None
) -> None:
    """Raise NotFoundError unless every referenced document belongs to `user_id`."""
    checks = [
        ("Resume", "SELECT 1 FROM resumes WHERE resume_id = :id AND user_id = :user_id", resume_id),
        ("Cover letter", "SELECT 1 FROM cover_letters WHERE cover_letter_id = :id AND user_id = :user_id", cover_letter_id),
    ]
    for label, sql, entity_id in checks:
        if entity_id is None:
            continue
        result = await db.execute(text(sql), {"id": entity_id, "user_id": user_id})
        if result.fetchone() is None:
            raise NotFoundError(f"{label} {entity_id} not found")


class ApplicationService:
    """
    Handles create / read / update / delete of applications.
    """

    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine or get_engine()

    async def create_application(self, user_id: int, data: ApplicationCreate) -> Application:
        """
        Insert an application for `user_id`.
        Status defaults to not_answered and the date to today.
        """
        statement = text(f"""
            INSERT INTO applications (user_id, company_name, position_title, status,
                application_date, deadline, application_source, notes, resume_id, cover_letter_id)
            VALUES (:user_id, :company_name, :position_title, :status,
                :application_date, :deadline, :application_source, :notes, :resume_id, :cover_letter_id)
            RETURNING {APPLICATION_COLUMNS}
        """).bindparams(
            bindparam("application_date", type_=Date),
            bindparam("deadline", type_=Date),
        )
        params = {
            "user_id": user_id,
            "company_name": data.company_name,
            "position_title": data.position_title,
            "status": data.status.value,
            "application_date": data.application_date or date.today(),
            "deadline": data.deadline,
            "application_source": data.application_source,
            "notes": data.notes,
            "resume_id": data.resume_id,
            "cover_letter_id": data.cover_letter_id,
        }

        async with get_db_session(self.engine) as db:
            await ensure_documents_owned(db, user_id, data.resume_id, data.cover_letter_id)
            result = await db.execute(statement, params)
            row = result.mappings().one()

        logger.info(f"Created application {row['application_id']} for user {user_id}")
        return Application(**row)

    async def get_application(self, user_id: int, application_id: int) -> Application:
        async with get_db_session(self.engine) as db:
            result = await db.execute(
                text(f"SELECT {APPLICATION_COLUMNS} FROM applications "
                     f"WHERE application_id = :id AND user_id = :user_id"),
                {"id": application_id, "user_id": user_id}
            )
            row = result.mappings().first()

        if row is None:
            raise NotFoundError(f"Application {application_id} not found")
        return Application(**row)

    async def update_application(self, user_id: int, application_id: int, data: ApplicationUpdate) -> Application:
        """Update only the fields that were provided."""
        provided = data.model_dump(exclude_unset=True)
        updates = []
        params = {"id": application_id, "user_id": user_id}

        for field in UPDATABLE_FIELDS:
            if field not in provided:
                continue
            value = provided[field]
            if value is None and field in REQUIRED_FIELDS:
                raise ValueError(f"{field} cannot be null")
            if isinstance(value, ApplicationStatus):
                value = value.value
            updates.append(f"{field} = :{field}")
            params[field] = value

        if not updates:
            raise ValueError("No fields to update")

        statement = text(
            f"UPDATE applications SET {', '.join(updates)} "
            f"WHERE application_id = :id AND user_id = :user_id"
        )
        if "deadline" in params:
            statement = statement.bindparams(bindparam("deadline", type_=Date))

        async with get_db_session(self.engine) as db:
            await ensure_documents_owned(
                db, user_id, params.get("resume_id"), params.get("cover_letter_id")
            )
            result = await db.execute(statement, params)
            if result.rowcount == 0:
                raise NotFoundError(f"Application {application_id} not found")

        logger.info(f"Updated application {application_id}: {', '.join(sorted(provided))}")
        return await self.get_application(user_id, application_id)

    async def delete_application(self, user_id: int, application_id: int) -> None:
        """Delete an application together with its interviews."""
        async with get_db_session(self.engine) as db:
            await db.execute(
                text("DELETE FROM interviews WHERE application_id IN "
                     "(SELECT application_id FROM applications WHERE application_id = :id AND user_id = :user_id)"),
                {"id": application_id, "user_id": user_id}
            )
            result = await db.execute(
                text("DELETE FROM applications WHERE application_id = :id AND user_id = :user_id"),
                {"id": application_id, "user_id": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError(f"Application {application_id} not found")

        logger.info(f"Deleted application {application_id} for user {user_id}")

    async def count_applications_by_statuses(
        self,
        user_id: int,
        statuses: Optional[Sequence[ApplicationStatus]] = None
    ) -> Dict[str, int]:
        """
        Count applications per status. Every requested status appears in
        the result, with 0 when the user has none in that status.
        """
        wanted: List[str] = [ApplicationStatus(s).value for s in (statuses or list(ApplicationStatus))]

        async with get_db_session(self.engine) as db:
            result = await db.execute(
                text("SELECT status, COUNT(*) AS total FROM applications "
                     "WHERE user_id = :user_id GROUP BY status"),
                {"user_id": user_id}
            )
            found = {row["status"]: row["total"] for row in result.mappings().all()}

        return {status: int(found.get(status, 0)) for status in wanted}
