import math
import re
from pathlib import Path
from typing import Any, Dict, List

from .models import EDITABLE_FIELDS, IMMUTABLE_FIELDS, JobStatus

DRAFT_REQUIRED_FIELDS = ["title", "company"]
PUBLISH_REQUIRED_FIELDS = ["title", "company", "description"]
NUMERIC_FIELDS = ["salary_value", "likes_count"]

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
RESUME_EXTENSIONS = {".pdf", ".doc", ".docx"}
MAX_RESUME_BYTES = 5 * 1024 * 1024


class ValidationError(Exception):
    """Raised when input is rejected before any state change."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _check_types(data: Dict[str, Any], errors: List[str]) -> None:
    for f in NUMERIC_FIELDS:
        if f in data and (isinstance(data[f], bool) or not isinstance(data[f], (int, float))):
            errors.append(f"Field '{f}' must be a number")
        elif f in data and not math.isfinite(data[f]):
            errors.append(f"Field '{f}' must be a finite number")
        elif f in data and data[f] < 0:
            errors.append(f"Field '{f}' must not be negative")
    if "status" in data and data["status"] not in {s.value for s in JobStatus}:
        errors.append("Field 'status' must be 'published' or 'draft'")
    if "is_liked" in data and not isinstance(data["is_liked"], bool):
        errors.append("Field 'is_liked' must be a boolean")


def validate_new_posting(data: Dict[str, Any], status: str = JobStatus.DRAFT.value) -> List[str]:
    """
    Returns a list of validation error messages for a posting about to be added.
    Drafts need a title and company; published postings also need a description.
    """
    errors: List[str] = []
    required = PUBLISH_REQUIRED_FIELDS if status == JobStatus.PUBLISHED.value else DRAFT_REQUIRED_FIELDS
    for f in required:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    if "salary" in data and "salary_value" not in data:
        errors.append("Field 'salary' must be set together with 'salary_value'")

    unknown = sorted(set(data) - EDITABLE_FIELDS)
    for f in unknown:
        errors.append(f"Unknown field: {f}")

    _check_types(data, errors)
    return errors


def validate_patch(patch: Dict[str, Any]) -> List[str]:
    """Validation for a partial update. Identity and lifecycle timestamps are read-only."""
    errors: List[str] = []
    for f in sorted(set(patch) & IMMUTABLE_FIELDS):
        errors.append(f"Field '{f}' cannot be changed")
    for f in sorted(set(patch) - EDITABLE_FIELDS - IMMUTABLE_FIELDS):
        errors.append(f"Unknown field: {f}")
    for f in ("title", "company"):
        if f in patch and not _is_non_empty_str(patch[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    if "salary" in patch and "salary_value" not in patch:
        errors.append("Field 'salary' must be set together with 'salary_value'")
    _check_types(patch, errors)
    return errors


def validate_resume(path) -> List[str]:
    if not path:
        return ["Resume is required"]
    p = Path(path)
    if not p.is_file():
        return [f"Resume file not found: {p}"]
    errors: List[str] = []
    if p.suffix.lower() not in RESUME_EXTENSIONS:
        errors.append("Please upload PDF or DOC file only")
    if p.stat().st_size > MAX_RESUME_BYTES:
        errors.append("File size should be less than 5MB")
    return errors
