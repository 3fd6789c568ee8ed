"""
Document Routes

GET /resumes - My resumes as {id, name}
GET /cover-letters - My cover letters as {id, name}
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_user
from app.schemas.schemas import DocumentOption
from app.services.document_service import DocumentService

router = APIRouter(tags=["Documents"])


def get_document_service() -> DocumentService:
    return DocumentService()


@router.get("/resumes", response_model=List[DocumentOption])
async def list_resumes(
    user: dict = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    """Get all resumes of the current user."""
    return await service.list_resumes(user["user_id"])


@router.get("/cover-letters", response_model=List[DocumentOption])
async def list_cover_letters(
    user: dict = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service)
):
    """Get all cover letters of the current user."""
    return await service.list_cover_letters(user["user_id"])
