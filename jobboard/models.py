"""
Core data types for job postings.

A posting is identified either by a locally assigned integer (postings created
in this session that were never saved to the backend) or by the string id the
backend assigned. The two schemes never mix on the same record.
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True, order=True)
class LocalId:
    value: int

    def __str__(self) -> str:
        return f"local:{self.value}"


@dataclass(frozen=True, order=True)
class RemoteId:
    value: str

    def __str__(self) -> str:
        return f"remote:{self.value}"


JobId = Union[LocalId, RemoteId]


def parse_job_id(text: str) -> JobId:
    """Parse `local:3`, `remote:abc`, a bare integer (local) or a bare string (remote)."""
    raw = (text or "").strip()
    if not raw:
        raise ValueError("Job id must not be empty")
    prefix, sep, rest = raw.partition(":")
    if sep and prefix == "local":
        if not rest.isdigit():
            raise ValueError(f"Invalid local job id: {text}")
        return LocalId(int(rest))
    if sep and prefix == "remote":
        if not rest:
            raise ValueError(f"Invalid remote job id: {text}")
        return RemoteId(rest)
    if raw.isdigit():
        return LocalId(int(raw))
    return RemoteId(raw)


def backend_id(job_id: JobId) -> str:
    """Id as the backend expects it in URLs."""
    return str(job_id.value)


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    REMOTE = "remote"
    INTERNSHIP = "internship"


JOB_TYPES = [t.value for t in JobType]


class JobStatus(str, Enum):
    PUBLISHED = "published"
    DRAFT = "draft"


@dataclass
class JobPosting:
    id: JobId
    title: str
    company: str
    description: str
    location: str
    experience: str
    job_type: str
    salary: str
    salary_value: float
    status: str
    posted_time: str
    created_at: datetime
    logo: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    application_deadline: Optional[datetime] = None
    is_liked: bool = False
    likes_count: int = 0
    revision: int = 0

    @property
    def is_published(self) -> bool:
        return self.status == JobStatus.PUBLISHED.value

    def copy(self, **changes) -> "JobPosting":
        return replace(self, **changes)


# Fields a caller may set through JobStore.add / JobStore.update.
EDITABLE_FIELDS = frozenset(
    f.name for f in fields(JobPosting)
) - {"id", "created_at", "posted_time", "revision"}

# Never touched by a partial update.
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "posted_time", "revision"})
