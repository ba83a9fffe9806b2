"""
Filter engine for the public job listing.

A posting is listed when it is published and matches the free-text search,
location, job type and salary window. The predicates are independent and
side-effect free; the result keeps the collection's order.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import JobPosting
from .schema import ValidationError

ALL = "all"
DEFAULT_SALARY_MIN = 0
DEFAULT_SALARY_MAX = 50
LOCATION_CHOICES = [ALL, "onsite", "remote", "hybrid"]


@dataclass(frozen=True)
class FilterSpec:
    search: str = ""
    location: str = ALL
    job_type: str = ALL
    salary_min: float = DEFAULT_SALARY_MIN
    salary_max: float = DEFAULT_SALARY_MAX

    def __post_init__(self):
        if self.salary_min > self.salary_max:
            raise ValidationError(
                [f"Salary range is empty: min {self.salary_min} is greater than max {self.salary_max}"]
            )


def is_published(job: JobPosting, criteria: FilterSpec) -> bool:
    return job.is_published


def matches_search(job: JobPosting, criteria: FilterSpec) -> bool:
    term = criteria.search.lower()
    if not term:
        return True
    return term in (job.title or "").lower() or term in (job.company or "").lower()


def matches_location(job: JobPosting, criteria: FilterSpec) -> bool:
    if criteria.location == ALL:
        return True
    return criteria.location.lower() in (job.location or "").lower()


def matches_job_type(job: JobPosting, criteria: FilterSpec) -> bool:
    return criteria.job_type == ALL or job.job_type == criteria.job_type


def matches_salary(job: JobPosting, criteria: FilterSpec) -> bool:
    return criteria.salary_min <= job.salary_value <= criteria.salary_max


Predicate = Callable[[JobPosting, FilterSpec], bool]

PREDICATES: Tuple[Tuple[str, Predicate], ...] = (
    ("published", is_published),
    ("search", matches_search),
    ("location", matches_location),
    ("job_type", matches_job_type),
    ("salary", matches_salary),
)


def matches(job: JobPosting, criteria: FilterSpec) -> bool:
    return all(predicate(job, criteria) for _, predicate in PREDICATES)


def failed_predicates(job: JobPosting, criteria: FilterSpec) -> List[str]:
    """Names of the predicates a posting fails; empty when it would be listed."""
    return [name for name, predicate in PREDICATES if not predicate(job, criteria)]


def filter_jobs(jobs: Iterable[JobPosting], criteria: Optional[FilterSpec] = None) -> List[JobPosting]:
    criteria = criteria or FilterSpec()
    return [job for job in jobs if matches(job, criteria)]


def summarize(results: List[JobPosting], criteria: FilterSpec) -> str:
    if not results:
        return "No jobs found matching your criteria."
    noun = "job" if len(results) == 1 else "jobs"
    text = f"Showing {len(results)} {noun}"
    if criteria.search:
        text += f' for "{criteria.search}"'
    return text


class JobListView:
    """
    Filtered view over a store, recomputed only when the store or the criteria change.
    """

    def __init__(self, store):
        self.store = store
        self._cache: Dict[Tuple[int, FilterSpec], List[JobPosting]] = {}

    def results(self, criteria: Optional[FilterSpec] = None) -> List[JobPosting]:
        criteria = criteria or FilterSpec()
        key = (self.store.version, criteria)
        if key not in self._cache:
            # Only the current store version is worth keeping.
            self._cache = {k: v for k, v in self._cache.items() if k[0] == self.store.version}
            self._cache[key] = filter_jobs(self.store.jobs, criteria)
        return list(self._cache[key])

    def summary(self, criteria: Optional[FilterSpec] = None) -> str:
        criteria = criteria or FilterSpec()
        return summarize(self.results(criteria), criteria)
