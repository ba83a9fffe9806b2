"""
In-memory job store.

One `JobStore` owns the postings of a session. Every mutation goes through it,
so there is a single place that orders writes. Each local write stamps the
record with the next value of a store-wide counter (`revision`); responses from
the backend carry the counter value seen when their request started and are
dropped for records that were written locally since then.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .api_client import ApiClient, ApiError
from .logger import get_logger
from .models import JobId, JobPosting, JobStatus, LocalId, backend_id
from .normalize import JUST_NOW, company_logo, format_salary
from .retry import is_transient_error
from .sample_data import sample_jobs
from .schema import ValidationError, validate_new_posting, validate_patch
from .transform import PayloadShapeError, extract_job_page, transform_remote_jobs

FALLBACK_KEPT = "kept"
FALLBACK_SAMPLE = "sample"


@dataclass
class LoadResult:
    ok: bool
    loaded: int = 0
    page: int = 1
    total_pages: int = 1
    total: int = 0
    error: Optional[str] = None
    retryable: bool = False
    fallback: Optional[str] = None


@dataclass
class LikeSyncResult:
    ok: bool
    is_liked: bool = False
    likes_count: int = 0
    synced: bool = False
    error: Optional[str] = None


class JobStore:
    def __init__(
        self,
        jobs: Optional[Iterable[JobPosting]] = None,
        seed: Optional[Iterable[JobPosting]] = None,
    ):
        """
        Args:
            jobs: Initial collection (newest first). Defaults to a copy of `seed`.
            seed: Collection restored by `reset()` and used when a load fails
                with nothing to show. Defaults to the bundled sample postings.
        """
        self._seed = list(seed) if seed is not None else sample_jobs()
        self._jobs: List[JobPosting] = [j.copy() for j in (jobs if jobs is not None else self._seed)]
        self._clock = max((j.revision for j in self._jobs), default=0)
        self.version = 0
        self.last_error: Optional[str] = None

    # Reads

    @property
    def jobs(self) -> List[JobPosting]:
        """Snapshot of the collection, newest first."""
        return [j.copy() for j in self._jobs]

    def get(self, job_id: JobId) -> Optional[JobPosting]:
        index = self._index(job_id)
        return self._jobs[index].copy() if index is not None else None

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id) -> bool:
        return self._index(job_id) is not None

    def _index(self, job_id: JobId) -> Optional[int]:
        for i, job in enumerate(self._jobs):
            if job.id == job_id:
                return i
        return None

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _changed(self) -> None:
        self.version += 1

    def _next_local_id(self) -> LocalId:
        local = [j.id.value for j in self._jobs if isinstance(j.id, LocalId)]
        return LocalId(max(local, default=0) + 1)

    # Mutations

    def add(
        self,
        fields: Dict[str, Any],
        status: Optional[str] = None,
        job_id: Optional[JobId] = None,
        now: Optional[datetime] = None,
    ) -> JobPosting:
        """
        Create a posting and put it at the front of the collection.

        Args:
            fields: Descriptive fields (title and company required)
            status: "draft" or "published"; falls back to fields["status"], then draft
            job_id: Id assigned by the backend; a fresh local id otherwise
            now: Creation time (defaults to the current time)

        Raises:
            ValidationError: when the fields are rejected; the store is unchanged
        """
        fields = dict(fields)
        status = status or fields.pop("status", None) or JobStatus.DRAFT.value
        fields.pop("status", None)
        if isinstance(status, JobStatus):
            status = status.value
        errors = validate_new_posting(fields, status)
        if status not in {s.value for s in JobStatus}:
            errors.append("Field 'status' must be 'published' or 'draft'")
        if job_id is not None and job_id in self:
            errors.append(f"Job id already exists: {job_id}")
        if errors:
            raise ValidationError(errors)

        salary_value = float(fields.pop("salary_value", 0) or 0)
        salary = fields.pop("salary", None) or format_salary(salary_value)
        fields.setdefault("description", "")
        fields.setdefault("location", "")
        fields.setdefault("experience", "")
        fields.setdefault("job_type", "full-time")
        fields.setdefault("logo", company_logo(fields["company"]))

        job = JobPosting(
            id=job_id if job_id is not None else self._next_local_id(),
            salary=salary,
            salary_value=salary_value,
            status=status,
            posted_time=JUST_NOW,
            created_at=now or datetime.now(),
            revision=self._tick(),
            **fields,
        )
        self._jobs.insert(0, job)
        self._changed()
        get_logger().debug("Job added", job_id=str(job.id), status=status)
        return job.copy()

    def update(self, job_id: JobId, patch: Dict[str, Any]) -> bool:
        """
        Merge `patch` into the posting. Returns False (and does nothing) for an unknown id.

        Raises:
            ValidationError: for read-only or unknown fields and malformed values
        """
        errors = validate_patch(patch)
        if errors:
            raise ValidationError(errors)
        index = self._index(job_id)
        if index is None:
            get_logger().debug("Update ignored, job not found", job_id=str(job_id))
            return False

        changes = dict(patch)
        if "salary_value" in changes:
            changes["salary_value"] = float(changes["salary_value"])
            changes.setdefault("salary", format_salary(changes["salary_value"]))
        changes["revision"] = self._tick()
        self._jobs[index] = self._jobs[index].copy(**changes)
        self._changed()
        return True

    def delete(self, job_id: JobId) -> bool:
        index = self._index(job_id)
        if index is None:
            return False
        del self._jobs[index]
        self._changed()
        get_logger().debug("Job deleted", job_id=str(job_id))
        return True

    def toggle_like(self, job_id: JobId) -> bool:
        """Flip `is_liked` and move `likes_count` by one in the same direction."""
        index = self._index(job_id)
        if index is None:
            return False
        job = self._jobs[index]
        liked = not job.is_liked
        count = job.likes_count + 1 if liked else max(job.likes_count - 1, 0)
        self._jobs[index] = job.copy(is_liked=liked, likes_count=count, revision=self._tick())
        self._changed()
        return True

    def apply_remote_like(self, job_id: JobId, is_liked: bool, likes_count: int, since_revision: int) -> bool:
        """Trust the server's like state unless the record was written after `since_revision`."""
        index = self._index(job_id)
        if index is None:
            return False
        job = self._jobs[index]
        if job.revision > since_revision:
            get_logger().debug("Stale like response ignored", job_id=str(job_id), revision=job.revision)
            return False
        self._jobs[index] = job.copy(is_liked=bool(is_liked), likes_count=max(int(likes_count), 0))
        self._changed()
        return True

    def reset(self) -> None:
        """Back to the seed collection. The revision counter keeps counting."""
        self._jobs = [j.copy() for j in self._seed]
        self.last_error = None
        self._changed()

    # Backend

    def sync_like(self, client: ApiClient, job_id: JobId) -> LikeSyncResult:
        """
        Toggle a like optimistically, then tell the backend.

        Local-only postings are toggled without a backend call. If the call fails
        the toggle is undone, unless the record changed again in the meantime.
        """
        if not self.toggle_like(job_id):
            return LikeSyncResult(ok=False, error=f"Job not found: {job_id}")
        job = self._jobs[self._index(job_id)]
        revision, liked = job.revision, job.is_liked
        if isinstance(job_id, LocalId):
            return LikeSyncResult(ok=True, is_liked=job.is_liked, likes_count=job.likes_count)

        try:
            if liked:
                response = client.like_job(backend_id(job_id))
            else:
                response = client.unlike_job(backend_id(job_id))
        except ApiError as e:
            get_logger().warning("Like sync failed", job_id=str(job_id), error=e.message)
            index = self._index(job_id)
            if index is not None and self._jobs[index].revision == revision:
                current = self._jobs[index]
                count = current.likes_count - 1 if liked else current.likes_count + 1
                self._jobs[index] = current.copy(is_liked=not liked, likes_count=max(count, 0))
                self._changed()
            current = self.get(job_id)
            return LikeSyncResult(
                ok=False,
                is_liked=current.is_liked if current else not liked,
                likes_count=current.likes_count if current else 0,
                error=e.message,
            )

        if isinstance(response, dict):
            remote_liked = response.get("isLiked", response.get("is_liked"))
            remote_count = response.get("likesCount", response.get("likes_count"))
            if isinstance(remote_liked, bool) and isinstance(remote_count, int):
                self.apply_remote_like(job_id, remote_liked, remote_count, revision)
        current = self.get(job_id)
        return LikeSyncResult(
            ok=True,
            is_liked=current.is_liked if current else liked,
            likes_count=current.likes_count if current else 0,
            synced=True,
        )

    def load(
        self,
        client: ApiClient,
        page: int = 1,
        limit: Optional[int] = None,
        merge: bool = False,
        now: Optional[datetime] = None,
    ) -> LoadResult:
        """
        Fetch a page of jobs from the backend into the store. Never raises.

        Replace mode swaps in the fetched records but keeps local-only postings.
        Merge mode upserts the fetched records and appends new ones. In both
        modes a record written locally after the request started keeps its
        local state. On failure the current collection is kept (or the seed
        collection restored when empty) and the error is returned.
        """
        logger = get_logger()
        started = self._clock
        try:
            payload = client.list_jobs(page=page, limit=limit)
            job_page = extract_job_page(payload, page)
            remote = transform_remote_jobs(job_page.records, now)
        except ApiError as e:
            return self._load_failed(e.message, is_transient_error(e))
        except PayloadShapeError as e:
            return self._load_failed(str(e), False)

        current = {j.id: j for j in self._jobs}
        fetched: Dict[JobId, JobPosting] = {}
        for job in remote:
            if job.id in fetched:
                continue
            existing = current.get(job.id)
            fetched[job.id] = existing if existing is not None and existing.revision > started else job

        if merge:
            result = [fetched.pop(j.id, j) for j in self._jobs]
            result.extend(fetched.values())
        else:
            local = [j for j in self._jobs if isinstance(j.id, LocalId)]
            edited = [
                j for j in self._jobs
                if not isinstance(j.id, LocalId) and j.id not in fetched and j.revision > started
            ]
            result = local + list(fetched.values()) + edited

        self._jobs = result
        self.last_error = None
        self._changed()
        logger.info("Jobs loaded", loaded=len(remote), page=job_page.page, total=job_page.total, merge=merge)
        return LoadResult(
            ok=True,
            loaded=len(remote),
            page=job_page.page,
            total_pages=job_page.total_pages,
            total=job_page.total,
        )

    def _load_failed(self, message: str, retryable: bool) -> LoadResult:
        logger = get_logger()
        self.last_error = message
        if self._jobs:
            fallback = FALLBACK_KEPT
        else:
            self._jobs = [j.copy() for j in self._seed]
            self._changed()
            fallback = FALLBACK_SAMPLE
        logger.error("Failed to load jobs", error=message, fallback=fallback, retryable=retryable)
        return LoadResult(ok=False, error=message, retryable=retryable, fallback=fallback)
