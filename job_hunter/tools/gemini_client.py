"""Gemini generateContent client and the agent execution wrapper."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from job_hunter.agents.registry import AgentName, get_agent
from job_hunter.config import DEFAULT_MODEL_NAME, DEFAULT_TIMEOUT, GEMINI_API_BASE_URL
from job_hunter.errors import InputError, JobHunterError, ResponseShapeError, TransportError
from job_hunter.models.gemini import (
    Content,
    GeminiRequest,
    GenerationConfig,
    Part,
    SystemInstruction,
)
from job_hunter.models.results import AgentExecutionResult

logger = logging.getLogger(__name__)

_CONNECTION_TEST_REQUEST = GeminiRequest(
    contents=[Content(role="user", parts=[Part(text='Hello, please respond with "API connection successful"')])],
    system_instruction=SystemInstruction(
        parts=[Part(text="You are a helpful assistant. Respond with a simple JSON object containing a message field.")]
    ),
    generation_config=GenerationConfig(
        temperature=0.1,
        response_schema={
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "A simple response message"},
            },
            "required": ["message"],
        },
        max_output_tokens=50,
    ),
)


class GeminiClient:
    """Thin synchronous client for the Gemini REST API.

    Pass ``http_client`` to reuse a connection pool or to stub the endpoint in
    tests; otherwise the client owns its own ``httpx.Client``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = GEMINI_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- Transport --------------------------------------------------------------

    def generate_content(self, model: str, request: GeminiRequest) -> dict[str, Any]:
        """POST a generateContent request and return the decoded response body.

        Raises:
            TransportError: on network failure, timeout or a non-2xx status.
            ResponseShapeError: if the body is not a JSON object.
        """
        if not self.api_key:
            raise InputError("API Key not set. Please configure it in the settings.")

        url = f"{self.base_url}/{model}:generateContent"
        try:
            response = self._http.post(
                url,
                json=request.to_dict(),
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.TimeoutException as e:
            logger.warning("Gemini request timed out (%s)", model)
            raise TransportError("Gemini API request timed out") from e
        except httpx.HTTPError as e:
            logger.error("Gemini API call failed: %s", e)
            raise TransportError(f"Gemini API request failed: {type(e).__name__}") from e

        if not response.is_success:
            logger.error(
                "Gemini API error %d %s: %s",
                response.status_code, response.reason_phrase, response.text[:1000],
            )
            raise TransportError(
                f"Gemini API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ResponseShapeError("Gemini API returned a non-JSON body") from e
        if not isinstance(data, Mapping):
            raise ResponseShapeError("Invalid response structure from Gemini API")
        return dict(data)

    # -- Agents -----------------------------------------------------------------

    def execute_agent(
        self,
        agent_name: AgentName | str,
        input_data: Any,
        model_name: str | None = None,
    ) -> AgentExecutionResult:
        """Run one agent end to end and return a tagged result.

        Resolve, validate, build the request, call the API and parse the
        response. Failures of any stage come back as ``success=False``.
        """
        start = time.perf_counter()
        name = agent_name.value if isinstance(agent_name, AgentName) else str(agent_name)

        try:
            agent = get_agent(name, model=model_name or DEFAULT_MODEL_NAME)

            if not agent.validate_input(input_data):
                raise InputError(f"Invalid input for agent '{name}'")

            request = agent.create_request(input_data)
            response = self.generate_content(agent.model, request)
            data = agent.process_response(response)

            elapsed = _elapsed_ms(start)
            logger.info("Agent '%s' succeeded in %.0f ms", name, elapsed)
            return AgentExecutionResult(
                success=True,
                data=data,
                agent_name=name,
                execution_time_ms=elapsed,
            )
        except JobHunterError as e:
            elapsed = _elapsed_ms(start)
            logger.warning("Agent '%s' failed after %.0f ms: %s", name, elapsed, e)
            return AgentExecutionResult(
                success=False,
                error=e.message,
                error_type=type(e).__name__,
                retryable=e.retryable,
                agent_name=name,
                execution_time_ms=elapsed,
            )

    def test_connection(self, model_name: str = DEFAULT_MODEL_NAME) -> bool:
        """Send a tiny request and report whether a candidate came back."""
        try:
            result = self.generate_content(model_name, _CONNECTION_TEST_REQUEST)
        except JobHunterError as e:
            logger.warning("API connection test failed: %s", e)
            return False
        return bool(result.get("candidates"))


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
