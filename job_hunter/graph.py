"""LangGraph workflow — 4-node scan pipeline from page text to a saved job."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypedDict

from langgraph.graph import END, StateGraph

from job_hunter.agents.registry import AgentName
from job_hunter.errors import (
    InputError,
    JobHunterError,
    MissingCredentialError,
    SchemaViolationError,
)
from job_hunter.models.job import JobAIData, JobExtractionInput, create_job_record
from job_hunter.models.settings import Settings
from job_hunter.storage.job_store import JobStore
from job_hunter.storage.settings_store import SettingsStore
from job_hunter.tools.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], GeminiClient]


# =============================================================================
# Pipeline State
# =============================================================================


class ScanState(TypedDict, total=False):
    """State passed between nodes of the scan pipeline."""

    # Input
    url: str
    content: str
    user_agent: str | None

    # Data
    settings: Settings
    ai_data: JobAIData
    job_id: str

    # Outcome
    error: str
    error_type: str
    retryable: bool
    execution_time_ms: float


def _failure(error: JobHunterError) -> dict:
    return {
        "error": error.message,
        "error_type": type(error).__name__,
        "retryable": error.retryable,
    }


class ScanPipeline:
    """Builds the scan graph around an explicit store and client factory.

    Every node catches pipeline errors and records them in the state; a
    conditional edge after each node ends the run on the first error, so the
    persist node only runs after every earlier stage has succeeded.
    """

    def __init__(
        self,
        job_store: JobStore,
        settings_store: SettingsStore,
        client_factory: ClientFactory,
    ) -> None:
        self.job_store = job_store
        self.settings_store = settings_store
        self.client_factory = client_factory

    # -- Node 1: Validate input -------------------------------------------------

    def validate_input_node(self, state: ScanState) -> dict:
        logger.info("=== Scan 1: Validating input ===")
        url = (state.get("url") or "").strip()
        if not (state.get("content") or "").strip() or not url:
            return _failure(InputError("Invalid job data: content and URL are required"))
        return {"url": url}

    # -- Node 2: Load settings --------------------------------------------------

    def load_settings_node(self, state: ScanState) -> dict:
        logger.info("=== Scan 2: Loading settings ===")
        try:
            settings = self.settings_store.get_settings()
        except JobHunterError as e:
            return _failure(e)

        if not settings.api_key:
            return _failure(
                MissingCredentialError(
                    "API Key not set. Please configure it in the settings."
                )
            )
        return {"settings": settings}

    # -- Node 3: Run the job-extraction agent ----------------------------------

    def run_agent_node(self, state: ScanState) -> dict:
        logger.info("=== Scan 3: Running job extraction agent ===")
        settings = state["settings"]
        agent_input = JobExtractionInput(content=state["content"], url=state["url"])

        client = self.client_factory(settings)
        try:
            result = client.execute_agent(
                AgentName.JOB_EXTRACTION, agent_input, model_name=settings.model_name
            )
        finally:
            client.close()

        if not result.success:
            return {
                "error": result.error or "Job processing failed",
                "error_type": result.error_type,
                "retryable": result.retryable,
                "execution_time_ms": result.execution_time_ms,
            }
        if not isinstance(result.data, JobAIData):
            return _failure(SchemaViolationError("Agent returned an unexpected payload"))

        logger.info(
            "Extracted '%s' at %s in %.0f ms",
            result.data.job_title, result.data.company_name, result.execution_time_ms,
        )
        return {"ai_data": result.data, "execution_time_ms": result.execution_time_ms}

    # -- Node 4: Persist --------------------------------------------------------

    def persist_node(self, state: ScanState) -> dict:
        logger.info("=== Scan 4: Persisting job ===")
        record = create_job_record(
            state["url"], state["content"], state["ai_data"], user_agent=state.get("user_agent")
        )
        try:
            self.job_store.save(record, max_jobs=state["settings"].max_jobs)
        except JobHunterError as e:
            return _failure(e)
        return {"job_id": record.id}

    # -- Build the Graph --------------------------------------------------------

    def build(self):
        """Build and compile the LangGraph pipeline."""
        graph = StateGraph(ScanState)

        graph.add_node("validate_input", self.validate_input_node)
        graph.add_node("load_settings", self.load_settings_node)
        graph.add_node("run_agent", self.run_agent_node)
        graph.add_node("persist", self.persist_node)

        graph.set_entry_point("validate_input")
        for node, next_node in (
            ("validate_input", "load_settings"),
            ("load_settings", "run_agent"),
            ("run_agent", "persist"),
        ):
            graph.add_conditional_edges(
                node, _route_on_error, {"continue": next_node, "stop": END}
            )
        graph.add_edge("persist", END)

        return graph.compile()


def _route_on_error(state: ScanState) -> str:
    return "stop" if state.get("error") else "continue"
