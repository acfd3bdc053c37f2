"""Aggregate statistics over saved job records."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

from job_hunter.models.job import JobRecord, WorkModel


class JobStats(BaseModel):
    total: int = 0
    companies: int = 0
    remote: int = 0
    today: int = 0
    this_week: int = 0
    this_month: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_company: dict[str, int] = Field(default_factory=dict)


def compute_job_stats(jobs: list[JobRecord], now: datetime | None = None) -> JobStats:
    """Count records by period, status and company.

    Companies are grouped case-insensitively. ``this_week`` covers the last
    seven days, ``today`` and ``this_month`` are calendar periods in UTC.
    """
    now = now or datetime.now(timezone.utc)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = now - timedelta(days=7)
    start_of_month = start_of_day.replace(day=1)

    stats = JobStats(total=len(jobs))

    for job in jobs:
        company = job.ai_data.company_name.strip().lower() or "unknown"
        stats.by_company[company] = stats.by_company.get(company, 0) + 1

        status = job.status.value
        stats.by_status[status] = stats.by_status.get(status, 0) + 1

        if job.ai_data.work_model == WorkModel.REMOTE:
            stats.remote += 1

        saved = _parse_iso(job.saved_date)
        if saved is None:
            continue
        if saved >= start_of_day:
            stats.today += 1
        if saved >= week_ago:
            stats.this_week += 1
        if saved >= start_of_month:
            stats.this_month += 1

    stats.companies = len(stats.by_company)
    return stats


def _parse_iso(value: str) -> datetime | None:
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
