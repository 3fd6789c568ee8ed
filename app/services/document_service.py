"""
Document Service - read-only listings of a user's resumes and cover letters.
Uploading and storing the files themselves happens elsewhere.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from app.db.database import execute_raw_sql, get_engine
from app.schemas.schemas import DocumentOption


class DocumentService:

    def __init__(self, engine: Optional[AsyncEngine] = None):
        self.engine = engine or get_engine()

    async def list_resumes(self, user_id: int) -> List[DocumentOption]:
        rows = await execute_raw_sql(
            "SELECT resume_id, resume_file_name FROM resumes "
            "WHERE user_id = :id ORDER BY resume_id",
            {"id": user_id},
            engine=self.engine
        )
        return [DocumentOption(id=r["resume_id"], name=r["resume_file_name"]) for r in rows]

    async def list_cover_letters(self, user_id: int) -> List[DocumentOption]:
        rows = await execute_raw_sql(
            "SELECT cover_letter_id, cover_file_name FROM cover_letters "
            "WHERE user_id = :id ORDER BY cover_letter_id",
            {"id": user_id},
            engine=self.engine
        )
        return [DocumentOption(id=r["cover_letter_id"], name=r["cover_file_name"]) for r in rows]
