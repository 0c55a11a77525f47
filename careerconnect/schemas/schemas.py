"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Python attributes are snake_case (matching the stored documents); the JSON
wire format is camelCase via the alias generator on ApiModel.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    model_validator,
)
from pydantic.alias_generators import to_camel


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictApiModel(ApiModel):
    """Rejects keys the endpoint does not accept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    jobseeker = "jobseeker"
    employer = "employer"
    admin = "admin"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    internship = "Internship"


class ExperienceLevel(str, Enum):
    entry = "Entry"
    mid = "Mid"
    senior = "Senior"
    lead = "Lead"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ExperienceEntry(ApiModel):
    title: Optional[str] = None
    company: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None


class EducationEntry(ApiModel):
    school: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    current: bool = False


class Profile(ApiModel):
    title: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = []
    experience: List[ExperienceEntry] = []
    education: List[EducationEntry] = []


class CompanyInfo(ApiModel):
    name: Optional[str] = None
    position: Optional[str] = None
    website: Optional[str] = None


# ============================================================
# USER / AUTH SCHEMAS
# ============================================================

class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    role: UserRole
    profile: Optional[Profile] = None
    company: Optional[CompanyInfo] = None


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class PasswordChangeRequest(ApiModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserUpdate(StrictApiModel):
    """Only these keys may be changed through the profile endpoint."""

    first_name: Optional[NonEmptyStr] = None
    last_name: Optional[NonEmptyStr] = None
    profile: Optional[Profile] = None
    company: Optional[CompanyInfo] = None


class UserResponse(ApiModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    profile: Optional[Profile] = None
    company: Optional[CompanyInfo] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSummary(ApiModel):
    id: str
    email: str
    first_name: str
    last_name: str


class PosterSummary(ApiModel):
    id: str
    first_name: str
    last_name: str
    company: Optional[CompanyInfo] = None


class AuthResponse(ApiModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


# ============================================================
# JOB SCHEMAS
# ============================================================

class SalaryRange(ApiModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = "USD"

    @model_validator(mode="after")
    def check_range(self):
        if self.max < self.min:
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class JobCreate(ApiModel):
    title: NonEmptyStr
    company: NonEmptyStr
    location: NonEmptyStr
    description: NonEmptyStr
    requirements: NonEmptyStr
    salary: SalaryRange
    job_type: JobType
    experience_level: ExperienceLevel
    status: JobStatus = JobStatus.active


class JobUpdate(StrictApiModel):
    title: Optional[NonEmptyStr] = None
    company: Optional[NonEmptyStr] = None
    location: Optional[NonEmptyStr] = None
    description: Optional[NonEmptyStr] = None
    requirements: Optional[NonEmptyStr] = None
    salary: Optional[SalaryRange] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    status: Optional[JobStatus] = None


class JobResponse(ApiModel):
    id: str
    title: str
    company: str
    location: str
    description: str
    requirements: str
    salary: SalaryRange
    job_type: JobType
    experience_level: ExperienceLevel
    status: JobStatus
    posted_by: Optional[PosterSummary] = None
    applicants: List[str] = []
    created_at: datetime
    updated_at: datetime


class JobDetailResponse(JobResponse):
    applicants: List[UserSummary] = []


# ============================================================
# MESSAGE SCHEMAS
# ============================================================

class MessageCreate(ApiModel):
    receiver_id: str
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]


class MessageResponse(ApiModel):
    id: str
    content: str
    sender_id: str
    receiver_id: str
    read: bool = False
    created_at: datetime
    updated_at: datetime
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None


# ============================================================
# MATCHING SCHEMAS
# ============================================================

class MatchRequest(ApiModel):
    skills: Union[str, List[str]] = ""
    years: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    top_n: int = Field(3, ge=1, le=50)


class MatchResult(ApiModel):
    title: str
    skills: List[str]
    experience: str
    location: str
    industry: str
    apply_link: str
    score: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class StatusResponse(ApiModel):
    message: str
    success: bool = True
