"""
Turning backend payloads into `JobPosting` records.

The backend has shipped several payload shapes and field spellings over time,
so parsing here is deliberately tolerant: alternate field names are accepted,
missing values get display defaults, and only a payload with no recognisable
job list is an error.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .logger import get_logger
from .models import JobPosting, JobStatus, RemoteId
from .normalize import (
    COMPETITIVE,
    company_logo,
    format_salary,
    format_salary_range,
    parse_salary_value,
    parse_timestamp,
    posted_time,
    salary_from_annual,
)

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_COMPANY = "Unknown Company"
DEFAULT_EXPERIENCE = "2-5 yr Exp"
DEFAULT_JOB_TYPE = "full-time"
DEFAULT_LOCATION = "Not specified"
PUBLISHED_STATUSES = {"open", "published", "active"}


class PayloadShapeError(Exception):
    """The backend response does not contain a job list in any known shape."""


@dataclass
class JobPage:
    records: List[Dict[str, Any]]
    page: int
    total: int
    total_pages: int


def _first(record: Dict[str, Any], *keys: str) -> Any:
    """First present, non-empty value among alternate field names."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _number(value: Any) -> Optional[float]:
    """Finite number from a JSON value; None otherwise (NaN and Infinity included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _int_or(value: Any, default: int) -> int:
    number = _number(value)
    return int(number) if number is not None else default


def extract_job_page(payload: Any, requested_page: int = 1) -> JobPage:
    """
    Locate the job list and pagination metadata in a list-jobs response.

    Accepted shapes: {"jobs": [...]}, {"data": [...]}, {"data": {"jobs": [...]}}
    and a bare list.

    Raises:
        PayloadShapeError: when no job list can be found
    """
    meta: Dict[str, Any] = {}
    records = None
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict):
        meta = payload
        if isinstance(payload.get("jobs"), list):
            records = payload["jobs"]
        elif isinstance(payload.get("data"), list):
            records = payload["data"]
        elif isinstance(payload.get("data"), dict) and isinstance(payload["data"].get("jobs"), list):
            meta = {**payload, **payload["data"]}
            records = payload["data"]["jobs"]
    if records is None:
        raise PayloadShapeError("No jobs found in response")

    return JobPage(
        records=records,
        page=_int_or(meta.get("page"), requested_page),
        total=_int_or(meta.get("total"), len(records)),
        total_pages=_int_or(_first(meta, "totalPages", "total_pages"), 1),
    )


def _salary(record: Dict[str, Any]):
    """(display, value) for a remote record; value is in LPA."""
    value = _number(_first(record, "salary_value", "salaryValue"))
    salary_min = _number(record.get("salary_min"))
    salary_max = _number(record.get("salary_max"))
    display = record.get("salary") if isinstance(record.get("salary"), str) else None

    if value is None and (salary_min or salary_max):
        value = salary_from_annual(salary_min or salary_max)
    if display is None:
        if salary_min or salary_max:
            display = format_salary_range(salary_min, salary_max)
        elif value is not None:
            display = format_salary(value)
        else:
            display = COMPETITIVE
    if value is None:
        # Only place a display string is read back into a number.
        value = parse_salary_value(display)
    return display, value


def transform_remote_job(record: Dict[str, Any], now: Optional[datetime] = None) -> JobPosting:
    """Map one backend job record onto a `JobPosting`."""
    raw_id = _first(record, "id", "_id", "job_id")
    if raw_id is None:
        raise PayloadShapeError("Job record has no id")

    title = _first(record, "title", "job_title") or UNKNOWN_TITLE
    company = _first(record, "company", "company_name") or UNKNOWN_COMPANY
    created_at = parse_timestamp(_first(record, "created_at", "createdAt"))
    salary, salary_value = _salary(record)
    status = str(record.get("status") or "").lower()
    likes = _int_or(_first(record, "likes_count", "likesCount"), 0)

    return JobPosting(
        id=RemoteId(str(raw_id)),
        title=str(title),
        company=str(company),
        description=str(record.get("description") or ""),
        location=str(record.get("location") or DEFAULT_LOCATION),
        experience=str(_first(record, "experience", "experience_level") or DEFAULT_EXPERIENCE),
        job_type=str(_first(record, "job_type", "jobType") or DEFAULT_JOB_TYPE),
        salary=salary,
        salary_value=salary_value,
        status=JobStatus.PUBLISHED.value if status in PUBLISHED_STATUSES else JobStatus.DRAFT.value,
        posted_time=posted_time(created_at, now),
        created_at=created_at or (now or datetime.now()),
        logo=_first(record, "logo", "logo_url") or company_logo(str(company)),
        requirements=record.get("requirements"),
        responsibilities=record.get("responsibilities"),
        application_deadline=parse_timestamp(_first(record, "application_deadline", "applicationDeadline")),
        is_liked=bool(_first(record, "is_liked", "isLiked")),
        likes_count=max(likes, 0),
    )


def transform_remote_jobs(records: List[Any], now: Optional[datetime] = None) -> List[JobPosting]:
    """Transform a record list, skipping entries that are not usable job objects."""
    logger = get_logger()
    jobs = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Skipping non-object job record", index=index, kind=type(record).__name__)
            continue
        try:
            jobs.append(transform_remote_job(record, now))
        except PayloadShapeError as e:
            logger.warning("Skipping malformed job record", index=index, error=str(e))
    return jobs


def to_backend_payload(fields: Dict[str, Any], status: str) -> Dict[str, Any]:
    """Shape posting fields for the create/update endpoints."""
    deadline = fields.get("application_deadline")
    payload = {
        "title": fields.get("title"),
        "company": fields.get("company"),
        "description": fields.get("description"),
        "location": fields.get("location"),
        "job_type": fields.get("job_type"),
        "experience": fields.get("experience"),
        "salary": fields.get("salary"),
        "salary_value": fields.get("salary_value"),
        "status": "open" if status == JobStatus.PUBLISHED.value else "draft",
        "requirements": fields.get("requirements"),
        "responsibilities": fields.get("responsibilities"),
        "application_deadline": deadline.isoformat() if isinstance(deadline, datetime) else deadline,
    }
    return {k: v for k, v in payload.items() if v is not None}
