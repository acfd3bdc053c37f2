"""Runtime configuration loaded from the environment and an optional YAML file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Storage limits
MAX_SAVED_JOBS = 100

# Gemini API
DEFAULT_MODEL_NAME = "gemini-2.5-flash"
GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT = 60.0

# Extraction
MIN_CONTENT_CHARS = 100
DEFAULT_PAGE_TITLE = "Job Posting"

# Maps YAML keys and environment variables onto AppConfig fields
_ENV_VARS = {
    "db_path": "DB_PATH",
    "api_key": "GEMINI_API_KEY",
    "model_name": "GEMINI_MODEL",
    "api_base_url": "GEMINI_API_BASE_URL",
    "request_timeout": "GEMINI_TIMEOUT",
    "max_jobs": "MAX_SAVED_JOBS",
    "log_level": "LOG_LEVEL",
}


class AppConfig(BaseModel):
    """Process-wide defaults. Persisted settings take precedence at runtime."""

    db_path: str = "jobs.db"
    api_key: str = ""
    model_name: str = DEFAULT_MODEL_NAME
    api_base_url: str = GEMINI_API_BASE_URL
    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_jobs: int = Field(default=MAX_SAVED_JOBS, ge=1)
    log_level: str = "INFO"


def load_config(filepath: str | None = None) -> AppConfig:
    """Build the configuration from an optional YAML file, then the environment.

    Environment variables win over values from the file.
    """
    data: dict = {}

    if filepath:
        path = Path(filepath)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {filepath} must contain a mapping")
            data.update({k: v for k, v in loaded.items() if k in AppConfig.model_fields})
            logger.info("Loaded config from %s", filepath)
        else:
            logger.warning("Config file not found at %s — using defaults", filepath)

    for field, env_var in _ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            data[field] = value

    return AppConfig(**data)
