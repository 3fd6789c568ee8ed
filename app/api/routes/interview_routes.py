"""
Interview Routes

GET /interviews - List my interviews, with optional filters
GET /interviews/status-counts - Count my interviews per status
GET /interviews/application/{application_id} - Interviews of one application
GET /interviews/{interview_id} - Get one interview
POST /interviews - Schedule an interview
PUT /interviews/{interview_id} - Update interview
DELETE /interviews/{interview_id} - Delete interview
"""

from datetime import date as Date, datetime
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user
from app.schemas.schemas import (
    Interview, InterviewCreate, InterviewStatus, InterviewUpdate,
    MessageResponse, StatusCountResponse
)
from app.services.interview_service import InterviewService

router = APIRouter(prefix="/interviews", tags=["Interviews"])


def get_interview_service() -> InterviewService:
    return InterviewService()


@router.get("", response_model=List[Interview])
async def list_interviews(
    status: Optional[InterviewStatus] = Query(None),
    location: Optional[str] = Query(None, description="Case-insensitive exact match"),
    date_from: Optional[datetime] = Query(None, description="Earliest interview date, inclusive"),
    date_to: Optional[datetime] = Query(None, description="Latest interview date, inclusive"),
    date: Optional[Date] = Query(None, description="Interviews on this day, YYYY-MM-DD"),
    reminder_sent: Optional[bool] = Query(None),
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    """List my interviews, soonest first."""
    return await service.list_interviews(
        user["user_id"],
        status=status,
        location=location,
        date_from=date_from,
        date_to=date_to,
        on_date=date,
        reminder_sent=reminder_sent,
    )


@router.get("/status-counts", response_model=StatusCountResponse)
async def status_counts(
    statuses: Optional[List[InterviewStatus]] = Query(None),
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    """Count my interviews per status (all statuses by default)."""
    counts = await service.count_interviews_by_statuses(user["user_id"], statuses)
    return StatusCountResponse(counts=counts, total=sum(counts.values()))


@router.get("/application/{application_id}", response_model=List[Interview])
async def list_application_interviews(
    application_id: int,
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    return await service.list_for_application(user["user_id"], application_id)


@router.get("/{interview_id}", response_model=Interview)
async def get_interview(
    interview_id: int,
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    return await service.get_interview(user["user_id"], interview_id)


@router.post("", response_model=Interview, status_code=201)
async def create_interview(
    data: InterviewCreate,
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    """Schedule an interview on one of my applications."""
    return await service.create_interview(user["user_id"], data)


@router.put("/{interview_id}", response_model=Interview)
async def update_interview(
    interview_id: int,
    data: InterviewUpdate,
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    """Update an interview. Only provided fields are updated."""
    try:
        return await service.update_interview(user["user_id"], interview_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{interview_id}", response_model=MessageResponse)
async def delete_interview(
    interview_id: int,
    user: dict = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service)
):
    await service.delete_interview(user["user_id"], interview_id)
    return MessageResponse(message="Interview deleted successfully!")
