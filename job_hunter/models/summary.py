"""Pydantic models for the content-summary agent."""

from __future__ import annotations

from pydantic import Field

from job_hunter.models.job import CamelModel


class ContentSummaryInput(CamelModel):
    content: str
    max_length: int | None = Field(default=None, ge=1)
    focus: str | None = None


class ContentSummaryOutput(CamelModel):
    summary: str
    key_points: list[str]
    word_count: int
