"""Employer flow: turn a job creation form into a draft or published posting."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .api_client import ApiClient, ApiError
from .logger import get_logger
from .models import JobStatus, RemoteId
from .normalize import company_logo, format_salary, salary_from_annual
from .schema import ValidationError
from .store import JobStore
from .transform import to_backend_payload

DEFAULT_LOCATION = "Remote"
DEFAULT_EXPERIENCE = "1-3 yr Exp"
DEFAULT_JOB_TYPE = "full-time"
DRAFT_DESCRIPTION = "Job description to be updated."


@dataclass
class PostingForm:
    title: str = ""
    company: str = ""
    description: str = ""
    location: str = ""
    job_type: str = ""
    salary_max: Optional[float] = None  # annual, rupees
    experience: str = ""
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    application_deadline: Optional[datetime] = None


def validate_form(form: PostingForm, publish: bool) -> List[str]:
    errors = []
    if not form.title.strip() or not form.company.strip():
        errors.append("Please fill in at least the job title and company name.")
    if publish and not form.description.strip():
        errors.append("Please fill in all required fields before publishing.")
    if form.salary_max is not None and form.salary_max < 0:
        errors.append("Maximum salary must not be negative")
    return errors


def form_to_fields(form: PostingForm, publish: bool) -> Dict[str, Any]:
    salary_value = salary_from_annual(form.salary_max)
    description = form.description.strip()
    if not description and not publish:
        description = DRAFT_DESCRIPTION
    return {
        "title": form.title.strip(),
        "company": form.company.strip(),
        "logo": company_logo(form.company),
        "description": description,
        "location": form.location.strip() or DEFAULT_LOCATION,
        "experience": form.experience.strip() or DEFAULT_EXPERIENCE,
        "job_type": form.job_type or DEFAULT_JOB_TYPE,
        "salary": format_salary(salary_value),
        "salary_value": salary_value,
        "requirements": form.requirements,
        "responsibilities": form.responsibilities,
        "application_deadline": form.application_deadline,
    }


def create_posting(
    store: JobStore,
    form: PostingForm,
    publish: bool,
    client: Optional[ApiClient] = None,
) -> Dict[str, Any]:
    """
    Validate the form and add the posting to the store.

    With a client, the posting is created on the backend first so it carries the
    backend id; if that fails it is still added locally and `sync_error` says why.

    Returns:
        {"status": "created", "job": JobPosting, "synced": bool[, "sync_error": str]}
        or {"status": "validation_error", "errors": [...]}
    """
    logger = get_logger()
    errors = validate_form(form, publish)
    if errors:
        return {"status": "validation_error", "errors": errors}

    status = JobStatus.PUBLISHED.value if publish else JobStatus.DRAFT.value
    fields = form_to_fields(form, publish)
    remote_id = None
    sync_error = None

    if client is not None:
        try:
            created = client.create_job(to_backend_payload(fields, status))
            raw_id = created.get("id") if isinstance(created, dict) else None
            if raw_id is None:
                sync_error = "Backend did not return a job id"
            else:
                remote_id = RemoteId(str(raw_id))
        except ApiError as e:
            sync_error = e.message
        if sync_error:
            logger.warning("Posting kept locally, backend create failed", title=fields["title"], error=sync_error)

    try:
        job = store.add(fields, status=status, job_id=remote_id)
    except ValidationError as e:
        return {"status": "validation_error", "errors": e.errors}

    logger.info("Posting created", job_id=str(job.id), status=status, synced=remote_id is not None)
    outcome = {"status": "created", "job": job, "synced": remote_id is not None}
    if sync_error:
        outcome["sync_error"] = sync_error
    return outcome
