"""
Job seeker flow: validate an application and send it to the backend.

Two routes exist: a quick apply (JSON, the resume is referenced by file name)
and the full application form (multipart, the resume file is uploaded).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api_client import ApiClient, ApiError
from .logger import get_logger
from .models import JobPosting, backend_id
from .schema import EMAIL_RE, PHONE_RE, validate_resume

GENERIC_FAILURE = "There was an error submitting your application. Please try again."

# Required only on the full application form: (attribute, message)
FULL_FORM_REQUIRED = [
    ("phone", "Phone number is required"),
    ("experience", "Experience level is required"),
    ("notice_period", "Notice period is required"),
    ("expected_salary", "Expected salary is required"),
    ("why_interested", "Please tell us why you're interested"),
    ("available_for_interview", "Interview availability is required"),
]


@dataclass
class ApplicationForm:
    full_name: str = ""
    email: str = ""
    resume_path: Optional[Path] = None
    phone: str = ""
    cover_letter: str = ""
    experience: str = ""
    current_company: str = ""
    current_role: str = ""
    notice_period: str = ""
    expected_salary: str = ""
    linkedin_profile: str = ""
    portfolio_website: str = ""
    why_interested: str = ""
    available_for_interview: str = ""


def validate_application(form: ApplicationForm, full: bool = False) -> List[str]:
    errors: List[str] = []
    if not form.full_name.strip():
        errors.append("Full name is required")
    if not form.email.strip():
        errors.append("Email is required")
    elif not EMAIL_RE.search(form.email):
        errors.append("Email is invalid")
    if form.phone.strip() and not PHONE_RE.match(form.phone.strip()):
        errors.append("Phone number is invalid")
    if full:
        for attr, message in FULL_FORM_REQUIRED:
            if not getattr(form, attr).strip():
                errors.append(message)
    errors.extend(validate_resume(form.resume_path))
    return errors


def _failed(job: JobPosting, e: ApiError) -> Dict[str, Any]:
    get_logger().error("Application failed", job_id=str(job.id), status=e.status_code, error=e.message)
    return {"status": "failed", "message": e.message or GENERIC_FAILURE}


def quick_apply(client: ApiClient, job: JobPosting, form: ApplicationForm) -> Dict[str, Any]:
    """Apply with name, email and resume reference. Never raises."""
    errors = validate_application(form)
    if errors:
        return {"status": "validation_error", "errors": errors}

    filename = Path(form.resume_path).name
    body = {
        "full_name": form.full_name.strip(),
        "email": form.email.strip(),
        "phone": form.phone.strip() or None,
        "cover_letter": form.cover_letter.strip() or None,
        "resume_url": f"/uploads/resumes/{filename}",
        "resume_filename": filename,
    }
    try:
        response = client.apply_to_job(backend_id(job.id), body)
    except ApiError as e:
        return _failed(job, e)

    get_logger().info("Application submitted", job_id=str(job.id), route="quick")
    return {
        "status": "submitted",
        "message": f"Your application for {job.title} at {job.company} has been submitted.",
        "response": response,
    }


def submit_application(client: ApiClient, job: JobPosting, form: ApplicationForm) -> Dict[str, Any]:
    """Full application with the resume uploaded as a file. Never raises."""
    errors = validate_application(form, full=True)
    if errors:
        return {"status": "validation_error", "errors": errors}

    fields = {
        "jobId": backend_id(job.id),
        "jobTitle": job.title,
        "company": job.company,
        "fullName": form.full_name.strip(),
        "email": form.email.strip(),
        "phone": form.phone.strip(),
        "experience": form.experience,
        "currentCompany": form.current_company,
        "currentRole": form.current_role,
        "noticePeriod": form.notice_period,
        "expectedSalary": form.expected_salary,
        "coverLetter": form.cover_letter or None,
        "linkedinProfile": form.linkedin_profile or None,
        "portfolioWebsite": form.portfolio_website or None,
        "whyInterested": form.why_interested,
        "availableForInterview": form.available_for_interview,
    }
    try:
        response = client.submit_application(fields, form.resume_path)
    except ApiError as e:
        return _failed(job, e)
    except OSError as e:
        get_logger().error("Resume could not be read", path=str(form.resume_path), error=str(e))
        return {"status": "failed", "message": f"Resume could not be read: {e}"}

    get_logger().info("Application submitted", job_id=str(job.id), route="full")
    return {
        "status": "submitted",
        "message": f"Your application for {job.title} at {job.company} has been submitted.",
        "response": response,
    }
