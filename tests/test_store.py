"""
Tests for the in-memory job store.
"""

from unittest.mock import MagicMock

import pytest

from conftest import NOW, make_job
from jobboard.api_client import ApiError
from jobboard.models import LocalId, RemoteId
from jobboard.normalize import JUST_NOW
from jobboard.schema import ValidationError
from jobboard.store import FALLBACK_KEPT, FALLBACK_SAMPLE, JobStore


class TestAdd:
    """Test adding postings."""

    def test_assigns_next_local_id_and_prepends(self, store):
        job = store.add({"title": "Backend Engineer", "company": "Acme"}, status="published")

        assert job.id == LocalId(3)
        assert store.jobs[0].id == LocalId(3)
        assert job.posted_time == JUST_NOW
        assert job.status == "published"

    def test_local_id_ignores_remote_ids(self):
        store = JobStore(jobs=[make_job(RemoteId("abc"))], seed=[])
        job = store.add({"title": "Engineer", "company": "Acme"})
        assert job.id == LocalId(1)

    def test_defaults_to_draft(self, store):
        job = store.add({"title": "Engineer", "company": "Acme"})
        assert job.status == "draft"

    def test_sets_creation_time(self, store):
        job = store.add({"title": "Engineer", "company": "Acme"}, now=NOW)
        assert job.created_at == NOW

    def test_backend_supplied_id(self, store):
        job = store.add({"title": "Engineer", "company": "Acme"}, job_id=RemoteId("srv-1"))
        assert job.id == RemoteId("srv-1")
        assert RemoteId("srv-1") in store

    def test_duplicate_backend_id_rejected(self, store):
        store.add({"title": "Engineer", "company": "Acme"}, job_id=RemoteId("srv-1"))
        with pytest.raises(ValidationError):
            store.add({"title": "Engineer", "company": "Acme"}, job_id=RemoteId("srv-1"))

    def test_salary_display_follows_value(self, store):
        job = store.add({"title": "Engineer", "company": "Acme", "salary_value": 22})
        assert job.salary == "22 LPA"
        assert job.salary_value == 22.0

    def test_missing_title_rejected_without_mutation(self, store):
        before = store.jobs
        with pytest.raises(ValidationError) as exc:
            store.add({"company": "Acme"})
        assert any("title" in e for e in exc.value.errors)
        assert store.jobs == before

    def test_publish_requires_description(self, store):
        with pytest.raises(ValidationError):
            store.add({"title": "Engineer", "company": "Acme", "description": "  "}, status="published")

    def test_no_uniqueness_on_title(self, store):
        store.add({"title": "Engineer", "company": "Acme"})
        store.add({"title": "Engineer", "company": "Acme"})
        assert len(store) == 4

    def test_add_then_delete_restores_collection(self, store):
        before = store.jobs
        job = store.add({"title": "Engineer", "company": "Acme"})
        assert store.delete(job.id)
        assert store.jobs == before


class TestUpdate:
    """Test partial updates."""

    def test_merges_fields(self, store):
        assert store.update(LocalId(2), {"title": "Senior Data Scientist", "location": "Remote"})
        job = store.get(LocalId(2))
        assert job.title == "Senior Data Scientist"
        assert job.location == "Remote"
        assert job.company == "Beta"

    def test_unknown_id_is_noop(self, store):
        before = store.jobs
        version = store.version
        assert store.update(LocalId(99), {"title": "x"}) is False
        assert store.jobs == before
        assert store.version == version

    def test_keeps_identity_and_timestamps(self, store):
        original = store.get(LocalId(2))
        store.update(LocalId(2), {"description": "New"})
        job = store.get(LocalId(2))
        assert job.id == original.id
        assert job.created_at == original.created_at
        assert job.posted_time == original.posted_time

    def test_rejects_read_only_fields(self, store):
        with pytest.raises(ValidationError):
            store.update(LocalId(2), {"id": LocalId(5)})
        with pytest.raises(ValidationError):
            store.update(LocalId(2), {"posted_time": "Just now"})

    def test_salary_value_regenerates_display(self, store):
        store.update(LocalId(2), {"salary_value": 35})
        job = store.get(LocalId(2))
        assert job.salary == "35 LPA"
        assert job.salary_value == 35.0

    def test_salary_display_alone_rejected(self, store):
        with pytest.raises(ValidationError):
            store.update(LocalId(2), {"salary": "40 LPA"})

    def test_non_finite_salary_rejected_without_mutation(self, store):
        before = store.get(LocalId(2))
        with pytest.raises(ValidationError) as exc_info:
            store.update(LocalId(2), {"salary_value": float("nan")})
        assert "must be a finite number" in str(exc_info.value)
        assert store.get(LocalId(2)) == before


class TestDelete:
    def test_removes_record(self, store):
        assert store.delete(LocalId(1))
        assert LocalId(1) not in store

    def test_unknown_id_is_noop(self, store):
        assert store.delete(LocalId(42)) is False
        assert len(store) == 2


class TestToggleLike:
    """Test like toggling."""

    def test_two_toggles_restore_state(self, store):
        store.toggle_like(LocalId(2))
        job = store.get(LocalId(2))
        assert (job.is_liked, job.likes_count) == (True, 11)

        store.toggle_like(LocalId(2))
        job = store.get(LocalId(2))
        assert (job.is_liked, job.likes_count) == (False, 10)

    def test_never_negative(self):
        store = JobStore(jobs=[make_job(1, is_liked=True, likes_count=0)], seed=[])
        for _ in range(7):
            store.toggle_like(LocalId(1))
            assert store.get(LocalId(1)).likes_count >= 0

    def test_unknown_id_is_noop(self, store):
        assert store.toggle_like(LocalId(77)) is False

    def test_each_toggle_is_one_step(self, store):
        counts = []
        for _ in range(5):
            store.toggle_like(LocalId(2))
            counts.append(store.get(LocalId(2)).likes_count)
        assert counts == [11, 10, 11, 10, 11]


class TestRevisions:
    def test_writes_bump_revision(self, store):
        r0 = store.get(LocalId(2)).revision
        store.update(LocalId(2), {"title": "x"})
        r1 = store.get(LocalId(2)).revision
        store.toggle_like(LocalId(2))
        r2 = store.get(LocalId(2)).revision
        assert r0 < r1 < r2

    def test_remote_like_ignored_when_stale(self, store):
        store.toggle_like(LocalId(2))
        seen = store.get(LocalId(2)).revision
        store.toggle_like(LocalId(2))  # newer local write

        assert store.apply_remote_like(LocalId(2), True, 500, since_revision=seen) is False
        assert store.get(LocalId(2)).likes_count == 10

    def test_remote_like_applied_when_current(self, store):
        store.toggle_like(LocalId(2))
        seen = store.get(LocalId(2)).revision
        assert store.apply_remote_like(LocalId(2), True, 500, since_revision=seen)
        assert store.get(LocalId(2)).likes_count == 500


class TestReadsAndReset:
    def test_snapshot_is_a_copy(self, store):
        jobs = store.jobs
        jobs[0].title = "mutated"
        assert store.jobs[0].title != "mutated"

    def test_reset_restores_seed(self):
        seed = [make_job(1)]
        store = JobStore(seed=seed)
        store.add({"title": "Engineer", "company": "Acme"})
        store.reset()
        assert [j.id for j in store.jobs] == [LocalId(1)]

    def test_default_seed_is_sample_data(self):
        store = JobStore()
        assert len(store) > 0
        assert all(isinstance(j.id, LocalId) for j in store.jobs)

    def test_version_increments_on_mutation(self, store):
        v = store.version
        store.toggle_like(LocalId(2))
        assert store.version == v + 1


def _remote(id, **fields):
    record = {"id": id, "title": "Remote Role", "company": "Acme", "status": "open", "location": "Remote"}
    record.update(fields)
    return record


class TestLoad:
    """Test loading from the backend."""

    def test_replaces_remote_keeps_local(self, store):
        client = MagicMock()
        client.list_jobs.return_value = {"jobs": [_remote("a"), _remote("b")], "total": 2, "page": 1, "totalPages": 1}

        result = store.load(client)

        assert result.ok
        assert result.loaded == 2
        ids = [j.id for j in store.jobs]
        assert ids == [LocalId(2), LocalId(1), RemoteId("a"), RemoteId("b")]

    def test_replace_drops_previous_remote_records(self):
        store = JobStore(jobs=[make_job(RemoteId("old"))], seed=[])
        client = MagicMock()
        client.list_jobs.return_value = {"jobs": [_remote("new")]}
        store.load(client)
        assert [j.id for j in store.jobs] == [RemoteId("new")]

    def test_merge_upserts_and_appends(self):
        store = JobStore(jobs=[make_job(RemoteId("a"), title="Old")], seed=[])
        client = MagicMock()
        client.list_jobs.return_value = {"jobs": [_remote("a", title="New"), _remote("b")]}

        store.load(client, merge=True)

        jobs = store.jobs
        assert [j.id for j in jobs] == [RemoteId("a"), RemoteId("b")]
        assert jobs[0].title == "New"

    def test_field_aliases(self):
        store = JobStore(jobs=[], seed=[])
        client = MagicMock()
        client.list_jobs.return_value = {"jobs": [{"id": 7, "job_title": "SRE", "company_name": "Initech"}]}
        store.load(client)
        job = store.get(RemoteId("7"))
        assert job.title == "SRE"
        assert job.company == "Initech"

    def test_transport_failure_keeps_collection(self, store):
        before = store.jobs
        client = MagicMock()
        client.list_jobs.side_effect = ApiError("Cannot connect to backend")

        result = store.load(client)

        assert not result.ok
        assert result.error == "Cannot connect to backend"
        assert result.fallback == FALLBACK_KEPT
        assert store.jobs == before
        assert store.last_error == "Cannot connect to backend"

    def test_failure_with_empty_store_uses_seed(self):
        store = JobStore(jobs=[], seed=[make_job(1)])
        client = MagicMock()
        client.list_jobs.side_effect = ApiError("API Error: 500", status_code=500)

        result = store.load(client)

        assert result.fallback == FALLBACK_SAMPLE
        assert result.retryable
        assert [j.id for j in store.jobs] == [LocalId(1)]

    def test_unexpected_shape_is_reported_not_raised(self, store):
        client = MagicMock()
        client.list_jobs.return_value = {"unexpected": True}

        result = store.load(client)

        assert not result.ok
        assert "No jobs found" in result.error
        assert len(store) == 2

    def test_non_finite_numbers_do_not_raise(self):
        store = JobStore(jobs=[], seed=[])
        client = MagicMock()
        client.list_jobs.return_value = {
            "jobs": [{"id": "a1", "title": "T", "likes_count": float("nan"), "salary_value": float("nan")}],
            "page": float("inf"),
        }

        result = store.load(client)

        assert result.ok
        assert result.page == 1
        job = store.get(RemoteId("a1"))
        assert job.likes_count == 0
        assert job.salary_value == 0.0

    def test_local_edit_during_request_wins(self):
        store = JobStore(jobs=[make_job(RemoteId("a"), title="Before")], seed=[])

        def list_jobs(**kwargs):
            # User edits the record while the request is in flight.
            store.update(RemoteId("a"), {"title": "Edited locally"})
            return {"jobs": [_remote("a", title="From server")]}

        client = MagicMock()
        client.list_jobs.side_effect = list_jobs

        store.load(client)

        assert store.get(RemoteId("a")).title == "Edited locally"

    def test_edit_before_request_is_overwritten(self):
        store = JobStore(jobs=[make_job(RemoteId("a"), title="Before")], seed=[])
        store.update(RemoteId("a"), {"title": "Edited earlier"})
        client = MagicMock()
        client.list_jobs.return_value = {"jobs": [_remote("a", title="From server")]}

        store.load(client)

        assert store.get(RemoteId("a")).title == "From server"


class TestSyncLike:
    """Test optimistic like with backend reconciliation."""

    def test_trusts_server_counts(self):
        store = JobStore(jobs=[make_job(RemoteId("a"))], seed=[])
        client = MagicMock()
        client.like_job.return_value = {"isLiked": True, "likesCount": 42}

        result = store.sync_like(client, RemoteId("a"))

        client.like_job.assert_called_once_with("a")
        assert result.ok and result.synced
        assert (result.is_liked, result.likes_count) == (True, 42)

    def test_unlike_calls_delete_endpoint(self):
        store = JobStore(jobs=[make_job(RemoteId("a"), is_liked=True)], seed=[])
        client = MagicMock()
        client.unlike_job.return_value = {"isLiked": False, "likesCount": 9}

        store.sync_like(client, RemoteId("a"))

        client.unlike_job.assert_called_once_with("a")
        assert store.get(RemoteId("a")).is_liked is False

    def test_failure_rolls_back(self):
        store = JobStore(jobs=[make_job(RemoteId("a"))], seed=[])
        client = MagicMock()
        client.like_job.side_effect = ApiError("API Error: 503", status_code=503)

        result = store.sync_like(client, RemoteId("a"))

        assert not result.ok
        assert result.error == "API Error: 503"
        job = store.get(RemoteId("a"))
        assert (job.is_liked, job.likes_count) == (False, 10)

    def test_stale_response_does_not_clobber_newer_toggle(self):
        store = JobStore(jobs=[make_job(RemoteId("a"))], seed=[])

        def like_job(job_id):
            store.toggle_like(RemoteId("a"))  # second click before the response
            return {"isLiked": True, "likesCount": 11}

        client = MagicMock()
        client.like_job.side_effect = like_job

        store.sync_like(client, RemoteId("a"))

        job = store.get(RemoteId("a"))
        assert (job.is_liked, job.likes_count) == (False, 10)

    def test_local_posting_not_sent(self, store):
        client = MagicMock()
        result = store.sync_like(client, LocalId(2))
        assert result.ok and not result.synced
        client.like_job.assert_not_called()

    def test_unknown_id(self, store):
        result = store.sync_like(MagicMock(), RemoteId("zzz"))
        assert not result.ok
