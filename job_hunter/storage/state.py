"""Preferences and last-scan state with a write-through cache."""

from __future__ import annotations

import logging

from job_hunter.models.settings import ScanResult, UserPreferences
from job_hunter.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "preferences"
LAST_SCAN_RESULT_KEY = "lastScanResult"


class ScanStateService:
    """Caches state records in memory; every write replaces the cached entry."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._cache: dict[str, object] = {}

    def get_preferences(self) -> UserPreferences:
        if PREFERENCES_KEY not in self._cache:
            raw = self._kv.get(PREFERENCES_KEY)
            self._cache[PREFERENCES_KEY] = (
                UserPreferences.model_validate(raw) if raw else UserPreferences()
            )
        return self._cache[PREFERENCES_KEY]

    def set_preferences(self, **changes) -> UserPreferences:
        current = self.get_preferences().model_dump()
        current.update(changes)
        prefs = UserPreferences(**current)
        self._kv.set(PREFERENCES_KEY, prefs.to_dict())
        self._cache[PREFERENCES_KEY] = prefs
        return prefs

    def save_scan_result(self, result: ScanResult) -> None:
        self._kv.set(LAST_SCAN_RESULT_KEY, result.to_dict())
        self._cache[LAST_SCAN_RESULT_KEY] = result

    def get_last_scan_result(self) -> ScanResult | None:
        if LAST_SCAN_RESULT_KEY not in self._cache:
            raw = self._kv.get(LAST_SCAN_RESULT_KEY)
            if not raw:
                return None
            self._cache[LAST_SCAN_RESULT_KEY] = ScanResult.model_validate(raw)
        return self._cache[LAST_SCAN_RESULT_KEY]

    def clear_cache(self) -> None:
        self._cache.clear()

    def reset_all_state(self) -> None:
        """Wipe every persisted key, not just the state records."""
        self._kv.clear()
        self._cache.clear()
        logger.info("All persisted state cleared")
