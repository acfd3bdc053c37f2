"""Uniform result shapes returned across the pipeline boundary."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from job_hunter.models.job import CamelModel


class AgentExecutionResult(BaseModel):
    """Tagged outcome of one agent run, success or failure."""

    success: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None
    retryable: bool = False
    agent_name: str
    execution_time_ms: float


class ProcessJobResponse(CamelModel):
    success: bool
    job_id: str | None = None
    job_title: str | None = None
    company_name: str | None = None
    error: str | None = None
