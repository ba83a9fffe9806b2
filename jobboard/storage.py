from pathlib import Path
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import JobRecord, get_session, init_database
from .logger import get_logger
from .models import JobPosting, parse_job_id

_COLUMNS = (
    "title",
    "company",
    "description",
    "location",
    "experience",
    "job_type",
    "salary",
    "salary_value",
    "status",
    "posted_time",
    "created_at",
    "logo",
    "requirements",
    "responsibilities",
    "application_deadline",
    "is_liked",
    "likes_count",
    "revision",
)


def to_record(job: JobPosting, position: int) -> JobRecord:
    return JobRecord(job_id=str(job.id), position=position, **{c: getattr(job, c) for c in _COLUMNS})


def from_record(record: JobRecord) -> JobPosting:
    values = {c: getattr(record, c) for c in _COLUMNS}
    values["is_liked"] = bool(values["is_liked"])
    values["likes_count"] = values["likes_count"] or 0
    values["revision"] = values["revision"] or 0
    return JobPosting(id=parse_job_id(record.job_id), **values)


def save_snapshot(db_path: Path, jobs: Iterable[JobPosting]) -> int:
    """Replace the cached jobs with `jobs` (order preserved). Returns the number saved."""
    db_path = Path(db_path)
    init_database(db_path)
    session = get_session(db_path)
    try:
        session.query(JobRecord).delete()
        count = 0
        for position, job in enumerate(jobs):
            session.add(to_record(job, position))
            count += 1
        session.commit()
        get_logger().debug("Job cache saved", path=str(db_path), jobs=count)
        return count
    except SQLAlchemyError as e:
        session.rollback()
        get_logger().error("Failed to save job cache", path=str(db_path), error=str(e))
        raise
    finally:
        session.close()


def load_snapshot(db_path: Path) -> Optional[List[JobPosting]]:
    """Cached jobs, newest first. None when nothing was ever saved, [] when everything was deleted."""
    db_path = Path(db_path)
    if not db_path.exists():
        return None
    init_database(db_path)
    session = get_session(db_path)
    try:
        records = session.query(JobRecord).order_by(JobRecord.position).all()
        return [from_record(r) for r in records]
    finally:
        session.close()
