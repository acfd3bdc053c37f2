"""Job processor: the single entry point the CLI and callers talk to."""

from __future__ import annotations

import logging

from bs4 import Tag

from job_hunter.agents.registry import AgentName
from job_hunter.config import AppConfig
from job_hunter.errors import JobHunterError
from job_hunter.graph import ClientFactory, ScanPipeline
from job_hunter.models.job import JobRecord, JobStatus, utc_now_iso
from job_hunter.models.results import ProcessJobResponse
from job_hunter.models.settings import ScanResult, Settings
from job_hunter.models.summary import ContentSummaryInput, ContentSummaryOutput
from job_hunter.report.stats import JobStats, compute_job_stats
from job_hunter.storage.job_store import JobStore
from job_hunter.storage.kv_store import KeyValueStore
from job_hunter.storage.settings_store import SettingsStore
from job_hunter.storage.state import ScanStateService
from job_hunter.tools.content_extractor import extract_job_content
from job_hunter.tools.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


class JobProcessor:
    """Wires the stores, the Gemini client and the scan graph together.

    Args:
        config: Process defaults. Loaded settings override them.
        kv: Store to use. Opened at ``config.db_path`` when omitted.
        client_factory: Builds a ``GeminiClient`` for the current settings.
            Tests pass one backed by ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        kv: KeyValueStore | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.kv = kv or KeyValueStore(self.config.db_path)
        self.job_store = JobStore(self.kv, max_jobs=self.config.max_jobs)
        self.settings_store = SettingsStore(self.kv, self.config)
        self.state = ScanStateService(self.kv)
        self.client_factory = client_factory or self._default_client
        self.pipeline = ScanPipeline(
            self.job_store, self.settings_store, self.client_factory
        ).build()

    def _default_client(self, settings: Settings) -> GeminiClient:
        return GeminiClient(
            settings.api_key,
            base_url=self.config.api_base_url,
            timeout=self.config.request_timeout,
        )

    def close(self) -> None:
        self.kv.close()

    # -- Scanning ---------------------------------------------------------------

    def process_job(
        self, url: str, content: str, user_agent: str | None = None
    ) -> ProcessJobResponse:
        """Run the scan pipeline for one page of job text. Never raises."""
        logger.info("Processing job from %s", url)
        try:
            result = self.pipeline.invoke(
                {"url": url, "content": content, "user_agent": user_agent}
            )
        except Exception:
            logger.exception("Unexpected failure while processing %s", url)
            return ProcessJobResponse(success=False, error="Unknown error occurred")

        if result.get("error"):
            logger.warning(
                "Job processing failed (%s): %s", result.get("error_type"), result["error"]
            )
            return ProcessJobResponse(success=False, error=result["error"])

        ai_data = result["ai_data"]
        return ProcessJobResponse(
            success=True,
            job_id=result["job_id"],
            job_title=ai_data.job_title,
            company_name=ai_data.company_name,
        )

    def scan_page(
        self,
        url: str,
        page: str | Tag,
        title: str | None = None,
        user_agent: str | None = None,
    ) -> ProcessJobResponse:
        """Extract text from a page, record the scan result, then process it."""
        try:
            extracted = extract_job_content(page, title=title)
        except JobHunterError as e:
            self.state.save_scan_result(
                ScanResult(success=False, error=e.message, timestamp=utc_now_iso())
            )
            return ProcessJobResponse(success=False, error=e.message)
        except Exception:
            logger.exception("Unexpected failure while extracting %s", url)
            return ProcessJobResponse(success=False, error="Unknown error occurred")

        self.state.save_scan_result(
            ScanResult(
                success=True,
                content=extracted.content,
                word_count=extracted.word_count,
                title=extracted.title,
                timestamp=utc_now_iso(),
            )
        )
        return self.process_job(url, extracted.content, user_agent=user_agent)

    def summarize(
        self,
        content: str,
        max_length: int | None = None,
        focus: str | None = None,
    ) -> ContentSummaryOutput:
        """Run the content-summary agent.

        Raises:
            JobHunterError: with the agent's error message on any failure.
        """
        settings = self.settings_store.get_settings()
        client = self.client_factory(settings)
        try:
            result = client.execute_agent(
                AgentName.CONTENT_SUMMARY,
                ContentSummaryInput(content=content, max_length=max_length, focus=focus),
                model_name=settings.model_name,
            )
        finally:
            client.close()
        if not result.success:
            raise JobHunterError(result.error or "Summary failed")
        return result.data

    # -- Saved jobs -------------------------------------------------------------

    def get_saved_jobs(self) -> list[JobRecord]:
        return self.job_store.get_all()

    def get_job(self, job_id: str) -> JobRecord | None:
        return self.job_store.get(job_id)

    def delete_job(self, job_id: str) -> bool:
        return self.job_store.delete(job_id)

    def update_job_status(self, job_id: str, status: JobStatus | str) -> bool:
        return self.job_store.update_status(job_id, status)

    def cleanup_duplicates(self) -> dict:
        return self.job_store.deduplicate()

    def get_processing_stats(self) -> JobStats:
        return compute_job_stats(self.job_store.get_all())

    def get_storage_stats(self) -> dict:
        return self.job_store.storage_stats()

    # -- Settings ---------------------------------------------------------------

    def get_settings(self) -> Settings:
        return self.settings_store.get_settings()

    def save_settings(self, **changes) -> Settings:
        return self.settings_store.update_settings(**changes)

    def test_api_connection(self) -> bool:
        settings = self.settings_store.get_settings()
        if not settings.api_key:
            logger.warning("API connection test skipped: no API key configured")
            return False
        client = self.client_factory(settings)
        try:
            return client.test_connection(settings.model_name)
        finally:
            client.close()
