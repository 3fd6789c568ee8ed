"""
Application Routes

GET /applications - List my applications, with optional filters
GET /applications/status-counts - Count my applications per status
GET /applications/{application_id} - Get one application
POST /applications - Create application
PUT /applications/{application_id} - Update application
DELETE /applications/{application_id} - Delete application

Filters (all optional, combined with AND):
    status, company, position, source, date, deadline
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user
from app.schemas.schemas import (
    Application, ApplicationCreate, ApplicationListing, ApplicationStatus,
    ApplicationUpdate, FilterField, MessageResponse, StatusCountResponse
)
from app.services.application_service import ApplicationService
from app.services.filter_engine import ApplicationFilterEngine
from app.services.lookup_service import LookupService, get_lookup_service

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_filter_engine(lookup: LookupService = Depends(get_lookup_service)) -> ApplicationFilterEngine:
    return ApplicationFilterEngine(lookup)


def get_application_service() -> ApplicationService:
    return ApplicationService()


@router.get("", response_model=ApplicationListing)
async def list_applications(
    status: Optional[str] = Query(None, description="waitlist, rejected, not_answered or accepted"),
    company: Optional[str] = Query(None, description="Exact company name"),
    position: Optional[str] = Query(None, description="Exact position title"),
    source: Optional[str] = Query(None, description="Where the job was found"),
    date: Optional[str] = Query(None, description="Application date, YYYY-MM-DD"),
    deadline: Optional[str] = Query(None, description="Deadline, YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
    engine: ApplicationFilterEngine = Depends(get_filter_engine)
):
    """
    List my applications, newest first.

    Only applications matching every given filter are returned. If filtering
    fails, the unfiltered list is returned together with an error message.
    """
    values = {
        FilterField.status: status,
        FilterField.company: company,
        FilterField.position: position,
        FilterField.source: source,
        FilterField.date: date,
        FilterField.deadline: deadline,
    }
    criteria = {field.value: value for field, value in values.items() if value}

    return await engine.load_listing(user["user_id"], criteria)


@router.get("/status-counts", response_model=StatusCountResponse)
async def status_counts(
    statuses: Optional[List[ApplicationStatus]] = Query(None),
    user: dict = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Count my applications per status (all statuses by default)."""
    counts = await service.count_applications_by_statuses(user["user_id"], statuses)
    return StatusCountResponse(counts=counts, total=sum(counts.values()))


@router.get("/{application_id}", response_model=Application)
async def get_application(
    application_id: int,
    user: dict = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Get one of my applications."""
    return await service.get_application(user["user_id"], application_id)


@router.post("", response_model=Application, status_code=201)
async def create_application(
    data: ApplicationCreate,
    user: dict = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Create an application. Status defaults to not_answered, date to today."""
    return await service.create_application(user["user_id"], data)


@router.put("/{application_id}", response_model=Application)
async def update_application(
    application_id: int,
    data: ApplicationUpdate,
    user: dict = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Update an application. Only provided fields are updated."""
    try:
        return await service.update_application(user["user_id"], application_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: int,
    user: dict = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service)
):
    """Delete an application."""
    await service.delete_application(user["user_id"], application_id)
    return MessageResponse(message="Application deleted successfully!")
