"""Pydantic models for AI-extracted job data and persisted job records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """JSON-safe dict with camelCase keys; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WorkModel(str, Enum):
    ON_SITE = "On-site"
    HYBRID = "Hybrid"
    REMOTE = "Remote"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    TEMPORARY = "Temporary"


class JobStatus(str, Enum):
    SAVED = "Saved"
    APPLIED = "Applied"
    REJECTED = "Rejected"
    INTERVIEW = "Interview"


class JobLocation(CamelModel):
    raw_text: str
    city: str | None = None
    state: str | None = None
    country: str | None = None


class JobCompensation(CamelModel):
    min_salary: float | None = None
    max_salary: float | None = None
    currency: str | None = None
    period: Literal["yearly", "hourly", "monthly"] | None = None
    notes: str | None = None


class JobSkills(CamelModel):
    hard_skills: list[str]
    soft_skills: list[str]
    tools_and_software: list[str]


class JobQualification(CamelModel):
    detail: str
    type: Literal["Must-have", "Preferred"]


class JobExperience(CamelModel):
    raw_text: str
    min_years: float | None = None
    max_years: float | None = None


class JobCulture(CamelModel):
    tone: str | None = None
    key_adjectives: list[str] | None = None


class JobApplication(CamelModel):
    instructions: str | None = None
    closing_date: str | None = None


class JobAIData(CamelModel):
    """Structured job analysis returned by the job-extraction agent.

    ``compensation`` is the only optional top-level field. When the posting has
    no salary information it is absent (``None``), which is different from an
    empty ``JobCompensation()``.
    """

    job_title: str
    company_name: str
    location: JobLocation
    work_model: WorkModel
    job_type: JobType
    compensation: JobCompensation | None = None
    core_objective: str
    key_skills_and_tools: JobSkills
    experience_requirements: JobExperience
    qualifications: list[JobQualification]
    company_culture: JobCulture
    application_logistics: JobApplication


class JobMetadata(CamelModel):
    processed_at: str
    content_length: int
    user_agent: str | None = None
    raw_markdown: str | None = None


class JobRecord(CamelModel):
    """A persisted job. ``id`` and ``saved_date`` never change after creation."""

    id: str = Field(default_factory=lambda: generate_unique_id())
    saved_date: str
    updated_date: str
    source_url: str = Field(alias="sourceURL")
    apply_link: str
    status: JobStatus = JobStatus.SAVED
    ai_data: JobAIData
    metadata: JobMetadata


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_unique_id() -> str:
    return uuid.uuid4().hex


def create_job_record(
    url: str,
    content: str,
    ai_data: JobAIData,
    user_agent: str | None = None,
) -> JobRecord:
    """Build a new record for a freshly extracted job."""
    now = utc_now_iso()
    return JobRecord(
        id=generate_unique_id(),
        saved_date=now,
        updated_date=now,
        source_url=url,
        apply_link=url,
        status=JobStatus.SAVED,
        ai_data=ai_data,
        metadata=JobMetadata(
            processed_at=now,
            content_length=len(content),
            user_agent=user_agent or "Unknown",
            raw_markdown=content,
        ),
    )


class JobExtractionInput(CamelModel):
    content: str
    url: str
