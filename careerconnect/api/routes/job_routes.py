"""
Job Routes

GET /jobs - List jobs with search and filters
GET /jobs/mine - Jobs posted by the current employer
GET /jobs/{job_id} - Get job details with applicants
POST /jobs - Create job posting (employer only)
PUT /jobs/{job_id} - Update job (owner only)
DELETE /jobs/{job_id} - Delete job (owner only)
POST /jobs/{job_id}/apply - Apply to job (once per user)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from careerconnect.api.dependencies import get_job_service
from careerconnect.core.auth import Identity, get_current_user, require_roles
from careerconnect.schemas.schemas import (
    ExperienceLevel,
    JobCreate,
    JobDetailResponse,
    JobResponse,
    JobStatus,
    JobType,
    JobUpdate,
    StatusResponse,
    UserRole,
)
from careerconnect.services.mongo_service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=List[JobResponse])
def list_jobs(
    search: Optional[str] = Query(None, description="Search title, company and description"),
    location: Optional[str] = Query(None),
    job_type: Optional[JobType] = Query(None, alias="jobType"),
    experience_level: Optional[ExperienceLevel] = Query(None, alias="experienceLevel"),
    min_salary: Optional[float] = Query(None, alias="minSalary", ge=0),
    status: Optional[JobStatus] = Query(None),
    jobs: JobService = Depends(get_job_service),
):
    """List job postings, newest first. minSalary keeps jobs whose range reaches it."""
    results = jobs.list_jobs(
        search=search,
        location=location,
        job_type=job_type,
        experience_level=experience_level,
        min_salary=min_salary,
        status=status,
    )
    return [JobResponse.model_validate(job) for job in results]


@router.get("/mine", response_model=List[JobResponse])
def list_my_jobs(
    employer: Identity = Depends(require_roles(UserRole.employer)),
    jobs: JobService = Depends(get_job_service),
):
    """Jobs posted by the current employer."""
    return [JobResponse.model_validate(job) for job in jobs.list_jobs(posted_by=employer.id)]


@router.get("/{job_id}", response_model=JobDetailResponse)
def get_job(job_id: str, jobs: JobService = Depends(get_job_service)):
    """Get details of a specific job."""
    return JobDetailResponse.model_validate(jobs.get_job(job_id))


@router.post("", response_model=JobResponse, status_code=201)
def create_job(
    job: JobCreate,
    employer: Identity = Depends(require_roles(UserRole.employer)),
    jobs: JobService = Depends(get_job_service),
):
    """Create a new job posting. Only employers can create jobs; the caller becomes the owner."""
    return JobResponse.model_validate(jobs.create_job(job, employer.id))


@router.put("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: str,
    update: JobUpdate,
    user: Identity = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """Update a job posting. Only the owner can update."""
    return JobResponse.model_validate(jobs.update_job(job_id, update, user.id))


@router.delete("/{job_id}", response_model=StatusResponse)
def delete_job(
    job_id: str,
    user: Identity = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """Delete a job posting. Only the owner can delete."""
    jobs.delete_job(job_id, user.id)
    return StatusResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=StatusResponse)
def apply_to_job(
    job_id: str,
    user: Identity = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """Apply to a job. Cannot apply twice to the same job."""
    jobs.apply(job_id, user.id)
    return StatusResponse(message="Successfully applied to job")
