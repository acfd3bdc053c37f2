"""Tests for the job store: duplicates, eviction, status updates and cleanup."""

from __future__ import annotations

import threading
import time

import pytest

from conftest import make_ai_payload
from job_hunter.errors import DuplicateError, InputError, StorageError
from job_hunter.models.job import JobAIData, JobRecord, JobStatus, create_job_record
from job_hunter.storage import job_store
from job_hunter.storage.job_store import SAVED_JOBS_KEY, JobStore
from job_hunter.storage.kv_store import KeyValueStore


def _make_record(
    url: str = "https://jobs.test/1",
    title: str = "Senior Data Engineer",
    **overrides,
) -> JobRecord:
    ai_data = JobAIData.model_validate(make_ai_payload(jobTitle=title, **overrides))
    return create_job_record(url, "# Job\n\nDescription", ai_data)


class TestKeyValueStore:
    """Test suite for the SQLite key-value layer."""

    def test_round_trip_and_missing_key(self, kv) -> None:
        kv.set("maxJobs", 25)
        assert kv.get("maxJobs") == 25
        assert kv.get("missing", "default") == "default"

    def test_set_many_and_delete(self, kv) -> None:
        kv.set_many({"a": 1, "b": [1, 2]})
        assert kv.keys() == ["a", "b"]
        assert kv.delete("a") is True
        assert kv.delete("a") is False
        assert kv.keys() == ["b"]

    def test_persists_across_connections(self, tmp_path) -> None:
        db_path = str(tmp_path / "jobs.db")
        first = KeyValueStore(db_path)
        first.set("apiKey", "abc")
        first.close()

        second = KeyValueStore(db_path)
        assert second.get("apiKey") == "abc"
        second.close()

    def test_closed_store_raises_storage_error(self, tmp_path) -> None:
        store = KeyValueStore(str(tmp_path / "jobs.db"))
        store.close()
        with pytest.raises(StorageError):
            store.get("apiKey")

    def test_update_reads_and_writes_one_value(self, kv) -> None:
        assert kv.update("counter", lambda value: value + 1, default=0) == 1
        assert kv.update("counter", lambda value: value + 1, default=0) == 2
        assert kv.get("counter") == 2

    def test_update_returning_none_writes_nothing(self, kv) -> None:
        assert kv.update("counter", lambda value: None) is None
        assert kv.keys() == []

    def test_update_rolls_back_when_callback_raises(self, kv) -> None:
        kv.set("counter", 1)

        def fail(value):
            raise DuplicateError("already there")

        with pytest.raises(DuplicateError):
            kv.update("counter", fail)
        assert kv.get("counter") == 1
        kv.set("counter", 2)
        assert kv.get("counter") == 2

    def test_updates_from_two_connections_do_not_interleave(self, tmp_path) -> None:
        """Each update sees the other's write, even when the reads overlap in time."""
        db_path = str(tmp_path / "jobs.db")
        stores = [KeyValueStore(db_path), KeyValueStore(db_path)]

        def slow_increment(value):
            time.sleep(0.2)
            return value + 1

        threads = [
            threading.Thread(target=store.update, args=("counter", slow_increment, 0))
            for store in stores
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert stores[0].get("counter") == 2
        for store in stores:
            store.close()


class TestSave:
    """Test suite for JobStore.save."""

    def test_save_inserts_at_head(self, kv) -> None:
        store = JobStore(kv)
        first = _make_record(url="https://jobs.test/1")
        second = _make_record(url="https://jobs.test/2")

        store.save(first)
        store.save(second)

        assert [job.id for job in store.get_all()] == [second.id, first.id]

    def test_duplicate_rejected_and_size_unchanged(self, kv) -> None:
        """Saving the same source URL and title twice is not idempotent."""
        store = JobStore(kv)
        store.save(_make_record())

        with pytest.raises(DuplicateError):
            store.save(_make_record())

        assert len(store.get_all()) == 1

    def test_duplicate_match_is_exact(self, kv) -> None:
        """A title differing only in case is a different posting."""
        store = JobStore(kv)
        store.save(_make_record(title="Data Engineer"))
        store.save(_make_record(title="data engineer"))
        assert len(store.get_all()) == 2

    def test_same_title_different_url_allowed(self, kv) -> None:
        store = JobStore(kv)
        store.save(_make_record(url="https://jobs.test/1"))
        store.save(_make_record(url="https://jobs.test/2"))
        assert len(store.get_all()) == 2

    def test_eviction_removes_earliest_inserted(self, kv) -> None:
        """N+1 inserts into a store capped at N evict exactly the first one."""
        store = JobStore(kv, max_jobs=3)
        records = [_make_record(url=f"https://jobs.test/{i}") for i in range(4)]

        evicted: list[JobRecord] = []
        for record in records:
            evicted.extend(store.save(record))

        assert [job.id for job in evicted] == [records[0].id]
        assert [job.id for job in store.get_all()] == [r.id for r in reversed(records[1:])]

    def test_eviction_ignores_saved_date(self, kv) -> None:
        """Insertion order decides eviction even when savedDate disagrees."""
        store = JobStore(kv, max_jobs=2)
        newest_dated = _make_record(url="https://jobs.test/a").model_copy(
            update={"saved_date": "2099-01-01T00:00:00.000Z"}
        )
        store.save(newest_dated)
        store.save(_make_record(url="https://jobs.test/b"))
        evicted = store.save(_make_record(url="https://jobs.test/c"))

        assert [job.id for job in evicted] == [newest_dated.id]

    def test_per_call_cap_overrides_default(self, kv) -> None:
        store = JobStore(kv, max_jobs=100)
        for i in range(3):
            store.save(_make_record(url=f"https://jobs.test/{i}"), max_jobs=2)
        assert len(store.get_all()) == 2

    def test_concurrent_saves_admit_one(self, kv) -> None:
        """Two threads saving the same posting cannot both pass the duplicate check."""
        store = JobStore(kv)
        outcomes: list[str] = []

        def worker() -> None:
            try:
                store.save(_make_record())
                outcomes.append("saved")
            except DuplicateError:
                outcomes.append("duplicate")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["duplicate", "duplicate", "duplicate", "saved"]
        assert len(store.get_all()) == 1

    def test_saves_from_two_connections_admit_one(self, tmp_path, monkeypatch) -> None:
        """Stores on separate connections to one file share the duplicate check."""
        db_path = str(tmp_path / "jobs.db")
        kvs = [KeyValueStore(db_path), KeyValueStore(db_path)]
        stores = [JobStore(kv) for kv in kvs]
        stores[0].save(_make_record(url="https://jobs.test/seed"))

        # Widen the window between reading the list and writing it back
        original = job_store._same_posting

        def slow_same_posting(a, b):
            time.sleep(0.1)
            return original(a, b)

        monkeypatch.setattr(job_store, "_same_posting", slow_same_posting)
        outcomes: list[str] = []

        def worker(store: JobStore) -> None:
            try:
                store.save(_make_record())
                outcomes.append("saved")
            except DuplicateError:
                outcomes.append("duplicate")

        threads = [threading.Thread(target=worker, args=(store,)) for store in stores]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["duplicate", "saved"]
        fresh = KeyValueStore(db_path)
        assert len(JobStore(fresh).get_all()) == 2
        for kv in [*kvs, fresh]:
            kv.close()


class TestMutations:
    """Test suite for delete and update_status."""

    def test_delete(self, kv) -> None:
        store = JobStore(kv)
        record = _make_record()
        store.save(record)

        assert store.delete(record.id) is True
        assert store.get_all() == []

    def test_delete_missing_is_noop(self, kv) -> None:
        store = JobStore(kv)
        store.save(_make_record())
        assert store.delete("no-such-id") is False
        assert len(store.get_all()) == 1

    def test_update_status(self, kv) -> None:
        store = JobStore(kv)
        record = _make_record()
        store.save(record)
        time.sleep(0.005)

        assert store.update_status(record.id, "Applied") is True

        updated = store.get(record.id)
        assert updated.status == JobStatus.APPLIED
        assert updated.updated_date > record.updated_date
        assert updated.saved_date == record.saved_date

    def test_update_status_missing_leaves_store_untouched(self, kv) -> None:
        store = JobStore(kv)
        store.save(_make_record())
        before = kv.get(SAVED_JOBS_KEY)

        assert store.update_status("no-such-id", JobStatus.APPLIED) is False
        assert kv.get(SAVED_JOBS_KEY) == before

    def test_update_status_rejects_unknown_status(self, kv) -> None:
        store = JobStore(kv)
        record = _make_record()
        store.save(record)
        with pytest.raises(InputError, match="Ghosted"):
            store.update_status(record.id, "Ghosted")
        assert store.get(record.id).status == JobStatus.SAVED


class TestDeduplicate:
    """Test suite for the maintenance cleanup."""

    def test_removes_duplicate_ids_keeping_first_seen(self, kv) -> None:
        records = [_make_record(url=f"https://jobs.test/{i}").to_dict() for i in range(4)]
        # Two exact-duplicate pairs: copies of records 0 and 2 appended
        kv.set(SAVED_JOBS_KEY, records + [records[0], records[2]])

        result = JobStore(kv).deduplicate()

        assert result == {"removed": 2, "remaining": 4}
        assert [job["id"] for job in kv.get(SAVED_JOBS_KEY)] == [r["id"] for r in records]

    def test_records_without_id_use_url_and_title(self, kv) -> None:
        legacy = _make_record().to_dict()
        del legacy["id"]
        other = _make_record(url="https://jobs.test/other").to_dict()
        del other["id"]
        kv.set(SAVED_JOBS_KEY, [legacy, dict(legacy), other])

        result = JobStore(kv).deduplicate()

        assert result == {"removed": 1, "remaining": 2}
        survivors = kv.get(SAVED_JOBS_KEY)
        assert [job["sourceURL"] for job in survivors] == [
            "https://jobs.test/1",
            "https://jobs.test/other",
        ]
        assert all(job.get("id") for job in survivors)

    def test_cache_refreshed_after_cleanup(self, kv) -> None:
        store = JobStore(kv)
        record = _make_record()
        store.save(record)
        kv.set(SAVED_JOBS_KEY, [record.to_dict(), record.to_dict()])

        store.deduplicate()

        assert len(store.get_all()) == 1


class TestCache:
    """Test suite for the write-through cache."""

    def test_fresh_store_reads_persisted_state(self, kv) -> None:
        JobStore(kv).save(_make_record())
        assert len(JobStore(kv).get_all()) == 1

    def test_refresh_picks_up_external_writes(self, kv) -> None:
        store = JobStore(kv)
        store.save(_make_record())
        kv.set(SAVED_JOBS_KEY, [])

        assert len(store.get_all()) == 1
        store.refresh()
        assert store.get_all() == []

    def test_corrupt_record_is_storage_error(self, kv) -> None:
        kv.set(SAVED_JOBS_KEY, [{"id": "x", "sourceURL": "https://jobs.test"}])
        with pytest.raises(StorageError):
            JobStore(kv).get_all()

    def test_storage_stats(self, kv) -> None:
        store = JobStore(kv)
        store.save(_make_record())
        stats = store.storage_stats()
        assert stats["total_jobs"] == 1
        assert stats["storage_used"] > 0
