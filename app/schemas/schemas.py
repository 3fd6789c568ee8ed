"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Dict
from datetime import date, datetime
from enum import Enum


# Placeholder shown when a resume / cover letter cannot be resolved
NONE_MARKER = "None"


# ============================================================
# ENUMS
# ============================================================

class ApplicationStatus(str, Enum):
    waitlist = "waitlist"
    rejected = "rejected"
    not_answered = "not_answered"
    accepted = "accepted"


class FilterField(str, Enum):
    status = "status"
    company = "company"
    position = "position"
    source = "source"
    date = "date"
    deadline = "deadline"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int

class UserResponse(BaseModel):
    user_id: int
    email: str
    is_active: bool
    created_at: datetime


# ============================================================
# DOCUMENT SCHEMAS
# ============================================================

class Resume(BaseModel):
    resume_id: int
    user_id: Optional[int] = None
    resume_file_name: str

class CoverLetter(BaseModel):
    cover_letter_id: int
    user_id: Optional[int] = None
    cover_file_name: str

class DocumentOption(BaseModel):
    id: int
    name: str


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class Application(BaseModel):
    """A stored application row."""
    model_config = ConfigDict(frozen=True)

    application_id: int
    user_id: int
    company_name: str
    position_title: str
    status: ApplicationStatus
    application_date: date
    deadline: Optional[date] = None
    application_source: str
    notes: Optional[str] = None
    resume_id: Optional[int] = None
    cover_letter_id: Optional[int] = None


class FilterCriterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: FilterField
    value: str


class EnrichedApplication(BaseModel):
    """Application as shown to the user, with document names resolved."""
    id: int
    company_name: str
    position_title: str
    application_date: date
    status: ApplicationStatus
    deadline: Optional[date] = None
    source: str
    notes: Optional[str] = None
    resume_id: Optional[int] = None
    cover_letter_id: Optional[int] = None
    resume_name: str = NONE_MARKER
    cover_letter_name: str = NONE_MARKER


class ApplicationListing(BaseModel):
    applications: List[EnrichedApplication] = []
    filters: Dict[str, str] = {}
    error: Optional[str] = None
    success: Optional[str] = None


class ApplicationCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    position_title: str = Field(..., min_length=1, max_length=200)
    status: ApplicationStatus = ApplicationStatus.not_answered
    application_date: Optional[date] = None
    deadline: Optional[date] = None
    application_source: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None
    resume_id: Optional[int] = None
    cover_letter_id: Optional[int] = None

class ApplicationUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    position_title: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[ApplicationStatus] = None
    deadline: Optional[date] = None
    application_source: Optional[str] = Field(None, min_length=1, max_length=200)
    notes: Optional[str] = None
    resume_id: Optional[int] = None
    cover_letter_id: Optional[int] = None

class StatusCountResponse(BaseModel):
    counts: Dict[str, int]
    total: int


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class Interview(BaseModel):
    """A stored interview, with the company and position of its application."""
    interview_id: int
    application_id: int
    interview_date: datetime
    interviewer_name: str
    interviewer_email: str
    location: str
    reminder_sent: bool = False
    interview_status: InterviewStatus
    company_name: Optional[str] = None
    position_title: Optional[str] = None

class InterviewCreate(BaseModel):
    application_id: int
    interview_date: datetime
    interviewer_name: str = Field(..., min_length=1, max_length=200)
    interviewer_email: EmailStr
    location: str = Field(..., min_length=1, max_length=200)
    reminder_sent: bool = False
    interview_status: InterviewStatus = InterviewStatus.scheduled

class InterviewUpdate(BaseModel):
    application_id: Optional[int] = None
    interview_date: Optional[datetime] = None
    interviewer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    interviewer_email: Optional[EmailStr] = None
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    reminder_sent: Optional[bool] = None
    interview_status: Optional[InterviewStatus] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
