"""Closed registry of the available agents."""

from __future__ import annotations

from enum import Enum

from job_hunter.agents.base import BaseAgent
from job_hunter.agents.content_summary import ContentSummaryAgent
from job_hunter.agents.job_extraction import JobExtractionAgent
from job_hunter.config import DEFAULT_MODEL_NAME
from job_hunter.errors import AgentNotFoundError


class AgentName(str, Enum):
    JOB_EXTRACTION = "job-extraction"
    CONTENT_SUMMARY = "content-summary"


AGENT_CLASSES: dict[AgentName, type[BaseAgent]] = {
    AgentName.JOB_EXTRACTION: JobExtractionAgent,
    AgentName.CONTENT_SUMMARY: ContentSummaryAgent,
}


def get_agent(name: AgentName | str, model: str = DEFAULT_MODEL_NAME) -> BaseAgent:
    """Instantiate the agent registered under ``name``.

    Raises:
        AgentNotFoundError: if ``name`` is not a known agent.
    """
    try:
        key = AgentName(name)
    except ValueError:
        available = ", ".join(a.value for a in AgentName)
        raise AgentNotFoundError(
            f"Agent '{name}' not found. Available agents: {available}"
        ) from None
    return AGENT_CLASSES[key](model=model)


def list_agents() -> list[dict]:
    """Name and description of every registered agent."""
    return [
        {"name": key.value, "description": cls.description, "model": DEFAULT_MODEL_NAME}
        for key, cls in AGENT_CLASSES.items()
    ]
