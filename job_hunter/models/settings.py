"""Settings and ephemeral scan-state records."""

from __future__ import annotations

from pydantic import Field

from job_hunter.config import DEFAULT_MODEL_NAME, MAX_SAVED_JOBS
from job_hunter.models.job import CamelModel


class Settings(CamelModel):
    """User-facing settings, read before every scan."""

    api_key: str = ""
    model_name: str = DEFAULT_MODEL_NAME
    max_jobs: int = Field(default=MAX_SAVED_JOBS, ge=1)


class UserPreferences(CamelModel):
    onboarding_completed: bool = False


class ScanResult(CamelModel):
    """Outcome of the most recent page scan."""

    success: bool
    content: str | None = None
    word_count: int | None = None
    title: str | None = None
    error: str | None = None
    timestamp: str
