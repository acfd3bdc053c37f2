"""Persisted user settings: API key, model name and record cap."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from job_hunter.config import AppConfig
from job_hunter.errors import InputError
from job_hunter.models.settings import Settings
from job_hunter.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class SettingsStore:
    """Reads and writes the settings keys of a ``KeyValueStore``.

    Stored values win; ``config`` supplies defaults for anything unset.
    """

    def __init__(self, kv: KeyValueStore, config: AppConfig | None = None) -> None:
        self._kv = kv
        self._config = config or AppConfig()

    def get_settings(self) -> Settings:
        api_key = self._kv.get("apiKey") or self._config.api_key
        model_name = self._kv.get("modelName") or self._config.model_name
        max_jobs = self._kv.get("maxJobs") or self._config.max_jobs
        return Settings(api_key=api_key, model_name=model_name, max_jobs=max_jobs)

    def save_settings(self, settings: Settings) -> None:
        self._kv.set_many(
            {
                "apiKey": settings.api_key,
                "modelName": settings.model_name,
                "maxJobs": settings.max_jobs,
            }
        )
        logger.info("Settings saved successfully")

    def update_settings(self, **changes) -> Settings:
        """Apply the non-None keyword changes to the current settings and save them."""
        current = self.get_settings().model_dump()
        current.update({key: value for key, value in changes.items() if value is not None})
        try:
            settings = Settings(**current)
        except ValidationError as e:
            raise InputError(f"Invalid settings: {e.errors()[0]['msg']}") from e
        self.save_settings(settings)
        return settings
