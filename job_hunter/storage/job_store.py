"""Capacity-bounded job record collection with duplicate rejection.

Records live under a single key as a JSON list, most recent first. Saving
inserts at the head and trims the tail, so the oldest insert is always the
first to be evicted.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable

from pydantic import ValidationError

from job_hunter.config import MAX_SAVED_JOBS
from job_hunter.errors import DuplicateError, InputError, StorageError
from job_hunter.models.job import JobRecord, JobStatus, generate_unique_id, utc_now_iso
from job_hunter.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SAVED_JOBS_KEY = "savedJobs"


class JobStore:
    """Job records over a ``KeyValueStore`` with a write-through cache.

    Reads are served from the cache once it is warm. Every mutation reads,
    checks and writes the persisted list inside one write transaction, so
    concurrent saves cannot both pass the duplicate check, even from separate
    connections to the same database file.
    """

    def __init__(self, kv: KeyValueStore, max_jobs: int = MAX_SAVED_JOBS) -> None:
        self._kv = kv
        self.max_jobs = max_jobs
        self._lock = threading.RLock()
        self._cache: list[JobRecord] | None = None

    # -- Reads ------------------------------------------------------------------

    def get_all(self) -> list[JobRecord]:
        """All records, most recently inserted first."""
        with self._lock:
            if self._cache is None:
                self._cache = self._load()
            return list(self._cache)

    def get(self, job_id: str) -> JobRecord | None:
        return next((job for job in self.get_all() if job.id == job_id), None)

    def refresh(self) -> None:
        """Drop the cache so the next read goes to the persisted store."""
        with self._lock:
            self._cache = None

    def storage_stats(self) -> dict:
        """Record count and approximate serialized size in characters."""
        jobs = self.get_all()
        payload = json.dumps([job.to_dict() for job in jobs])
        return {"total_jobs": len(jobs), "storage_used": len(payload)}

    # -- Mutations --------------------------------------------------------------

    def save(self, record: JobRecord, max_jobs: int | None = None) -> list[JobRecord]:
        """Insert ``record`` at the head and evict from the tail beyond the cap.

        Returns the evicted records.

        Raises:
            DuplicateError: if a stored record has the same source URL and job title.
        """
        cap = max_jobs or self.max_jobs
        evicted: list[JobRecord] = []

        def insert(jobs: list[JobRecord]) -> list[JobRecord]:
            if any(_same_posting(existing, record) for existing in jobs):
                logger.info("Duplicate job detected, not saving: %s", record.source_url)
                raise DuplicateError("This job has already been saved")
            jobs.insert(0, record)
            evicted[:] = jobs[cap:]
            return jobs[:cap]

        self._mutate(insert)

        if evicted:
            logger.info("Evicted %d oldest job(s) to stay within %d", len(evicted), cap)
        logger.info("Job saved successfully: %s", record.id)
        return evicted

    def delete(self, job_id: str) -> bool:
        """Remove the record with ``job_id``. Returns False if it was not stored."""

        def remove(jobs: list[JobRecord]) -> list[JobRecord] | None:
            remaining = [job for job in jobs if job.id != job_id]
            return remaining if len(remaining) < len(jobs) else None

        if not self._mutate(remove):
            return False
        logger.info("Job deleted successfully: %s", job_id)
        return True

    def update_status(self, job_id: str, status: JobStatus | str) -> bool:
        """Set the status of one record and refresh its updated date.

        Raises:
            InputError: if ``status`` is not a known job status.
        """
        try:
            new_status = JobStatus(status)
        except ValueError as e:
            raise InputError(f"Unknown job status: {status!r}") from e

        def set_status(jobs: list[JobRecord]) -> list[JobRecord] | None:
            for index, job in enumerate(jobs):
                if job.id == job_id:
                    jobs[index] = job.model_copy(
                        update={"status": new_status, "updated_date": utc_now_iso()}
                    )
                    return jobs
            return None

        if not self._mutate(set_status):
            return False
        logger.info("Job status updated successfully: %s -> %s", job_id, new_status.value)
        return True

    def deduplicate(self) -> dict:
        """Collapse the collection to one record per identity key.

        The key is the record id, or ``sourceURL_jobTitle`` for records stored
        without one. First-seen records win and keep their relative order;
        survivors stored without an id are given one.
        """
        counts = {"removed": 0, "remaining": 0}

        def collapse(raw_jobs: list) -> list[dict]:
            raw_jobs = _as_list(raw_jobs)
            seen: set[str] = set()
            unique: list[dict] = []
            for raw in raw_jobs:
                key = _identity_key(raw)
                if key in seen:
                    continue
                seen.add(key)
                if not raw.get("id"):
                    raw = {**raw, "id": generate_unique_id()}
                unique.append(raw)
            counts.update(removed=len(raw_jobs) - len(unique), remaining=len(unique))
            return unique

        with self._lock:
            try:
                self._kv.update(SAVED_JOBS_KEY, collapse, default=[])
            finally:
                self._cache = None

        logger.info("Cleaned up %d duplicate jobs", counts["removed"])
        return counts

    # -- Internal ---------------------------------------------------------------

    def _load(self) -> list[JobRecord]:
        return _parse_jobs(self._kv.get(SAVED_JOBS_KEY, []))

    def _mutate(self, change: Callable[[list[JobRecord]], list[JobRecord] | None]) -> bool:
        """Apply ``change`` to the persisted list in one write transaction.

        ``change`` returns the new list, or None to leave the store as is.
        The cache is replaced on success and dropped on failure.
        """
        written: list[JobRecord] = []

        def apply(raw_jobs: list) -> list[dict] | None:
            jobs = change(_parse_jobs(raw_jobs))
            if jobs is None:
                return None
            written[:] = jobs
            return [job.to_dict() for job in jobs]

        with self._lock:
            try:
                changed = self._kv.update(SAVED_JOBS_KEY, apply, default=[]) is not None
            except Exception:
                self._cache = None
                raise
            if changed:
                self._cache = list(written)
        return changed


def _as_list(raw: object) -> list:
    if not isinstance(raw, list):
        raise StorageError(f"Stored '{SAVED_JOBS_KEY}' is not a list")
    return raw


def _parse_jobs(raw: object) -> list[JobRecord]:
    try:
        return [JobRecord.model_validate(item) for item in _as_list(raw)]
    except ValidationError as e:
        raise StorageError("Stored job record is corrupt") from e


def _same_posting(a: JobRecord, b: JobRecord) -> bool:
    # Exact, case-sensitive match on both fields
    return a.source_url == b.source_url and a.ai_data.job_title == b.ai_data.job_title


def _identity_key(raw: dict) -> str:
    if raw.get("id"):
        return str(raw["id"])
    ai_data = raw.get("aiData") or {}
    return f"{raw.get('sourceURL', '')}_{ai_data.get('jobTitle', '')}"
