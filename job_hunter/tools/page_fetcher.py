"""Single-page HTTP fetch used by the CLI scan command."""

from __future__ import annotations

import logging

import httpx

from job_hunter.errors import InputError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "Mozilla/5.0 (compatible; JobHunter/1.0)"


def fetch_page(url: str, timeout: float = DEFAULT_TIMEOUT, client: httpx.Client | None = None) -> str:
    """Download one page and return its HTML."""
    if not url or not url.startswith(("http://", "https://")):
        raise InputError(f"Not an http(s) URL: {url!r}")

    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(url, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
        logger.info("Fetched %s (%d bytes)", url, len(response.content))
        return response.text
    except httpx.TimeoutException as e:
        raise TransportError(f"Timed out fetching {url}") from e
    except httpx.HTTPStatusError as e:
        raise TransportError(
            f"HTTP {e.response.status_code} fetching {url}",
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise TransportError(f"Failed to fetch {url}: {e}") from e
    finally:
        if client is None:
            http.close()
