"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import datetime, timedelta
from typing import Any

import pytest
import requests

from jobboard.logger import get_logger, reset_logger
from jobboard.models import JobPosting, LocalId, RemoteId
from jobboard.store import JobStore

NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the process-wide logger to a temp dir for every test."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


def make_job(id=1, **overrides) -> JobPosting:
    job_id = id if isinstance(id, (LocalId, RemoteId)) else LocalId(id)
    values = dict(
        id=job_id,
        title="Backend Engineer",
        company="Acme",
        description="Build APIs",
        location="Bangalore",
        experience="2-4 yr Exp",
        job_type="full-time",
        salary="20 LPA",
        salary_value=20.0,
        status="published",
        posted_time="2h Ago",
        created_at=NOW - timedelta(hours=2),
        likes_count=10,
    )
    values.update(overrides)
    return JobPosting(**values)


@pytest.fixture
def job_factory():
    return make_job


@pytest.fixture
def store() -> JobStore:
    """Store with one published and one draft posting, and an empty seed."""
    jobs = [
        make_job(2, title="Data Scientist", company="Beta", salary_value=30.0, salary="30 LPA"),
        make_job(1, title="Frontend Developer", company="Gamma", status="draft"),
    ]
    return JobStore(jobs=jobs, seed=[])


def make_response(status: int = 200, payload: Any = None, reason: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    return resp


@pytest.fixture
def resume_file(tmp_path):
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 test resume")
    return path
