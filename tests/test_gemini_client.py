"""Tests for the Gemini transport and the agent execution wrapper."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import StubGemini, make_ai_payload, make_gemini_response
from job_hunter.agents.job_extraction import JobExtractionAgent
from job_hunter.agents.registry import AgentName
from job_hunter.errors import InputError, ResponseShapeError, TransportError
from job_hunter.models.job import JobAIData, JobExtractionInput
from job_hunter.models.gemini import GeminiRequest
from job_hunter.tools.gemini_client import GeminiClient

JOB_INPUT = JobExtractionInput(content="# Data Engineer\n\nBuild pipelines.", url="https://jobs.test/1")


def _ok(data=None) -> httpx.Response:
    return httpx.Response(200, json=make_gemini_response(data or make_ai_payload()))


def _make_request() -> GeminiRequest:
    return JobExtractionAgent().create_request(JOB_INPUT)


def _client_with(handler) -> GeminiClient:
    return GeminiClient("test-key", http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestGenerateContent:
    """Test suite for the raw generateContent call."""

    def test_posts_to_model_endpoint_with_key_header(self) -> None:
        stub = StubGemini(_ok())
        client = stub.client(api_key="secret")

        request = _make_request()
        client.generate_content("gemini-2.5-flash", request)

        sent = stub.requests[0]
        assert sent.method == "POST"
        assert sent.url.path.endswith("/models/gemini-2.5-flash:generateContent")
        assert sent.headers["x-goog-api-key"] == "secret"
        assert "key=" not in str(sent.url)
        assert json.loads(sent.content) == request.to_dict()

    def test_non_2xx_raises_transport_error(self) -> None:
        stub = StubGemini(httpx.Response(429, text='{"error": "quota exceeded for project 123"}'))
        with pytest.raises(TransportError) as excinfo:
            stub.client().generate_content("gemini-2.5-flash", _make_request())

        error = excinfo.value
        assert error.status_code == 429
        assert error.retryable is True
        assert "quota exceeded" in error.body
        assert "quota exceeded" not in error.message
        assert error.message == "Gemini API error: 429 Too Many Requests"

    def test_network_failure_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client_with(handler)
        with pytest.raises(TransportError):
            client.generate_content("gemini-2.5-flash", _make_request())

    def test_timeout_is_retryable_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client_with(handler)
        with pytest.raises(TransportError, match="timed out") as excinfo:
            client.generate_content("gemini-2.5-flash", _make_request())
        assert excinfo.value.retryable is True

    def test_non_json_body(self) -> None:
        stub = StubGemini(httpx.Response(200, text="<html>proxy error</html>"))
        with pytest.raises(ResponseShapeError):
            stub.client().generate_content("gemini-2.5-flash", _make_request())

    def test_missing_api_key(self) -> None:
        stub = StubGemini(_ok())
        with pytest.raises(InputError, match="API Key not set"):
            stub.client(api_key="").generate_content("gemini-2.5-flash", _make_request())
        assert stub.requests == []


class TestExecuteAgent:
    """Test suite for execute_agent."""

    def test_success(self) -> None:
        stub = StubGemini(_ok())
        result = stub.client().execute_agent(AgentName.JOB_EXTRACTION, JOB_INPUT)

        assert result.success is True
        assert isinstance(result.data, JobAIData)
        assert result.agent_name == "job-extraction"
        assert result.execution_time_ms >= 0

    def test_model_name_selects_endpoint(self) -> None:
        stub = StubGemini(_ok())
        stub.client().execute_agent("job-extraction", JOB_INPUT, model_name="gemini-2.5-pro")
        assert "gemini-2.5-pro:generateContent" in stub.requests[0].url.path

    def test_unknown_agent_is_a_failed_result(self) -> None:
        stub = StubGemini(_ok())
        result = stub.client().execute_agent("resume-writer", JOB_INPUT)

        assert result.success is False
        assert result.error_type == "AgentNotFoundError"
        assert stub.requests == []

    def test_invalid_input_never_reaches_the_network(self) -> None:
        stub = StubGemini(_ok())
        result = stub.client().execute_agent(
            AgentName.JOB_EXTRACTION, {"content": "", "url": "https://jobs.test/1"}
        )

        assert result.success is False
        assert result.error_type == "InputError"
        assert stub.requests == []

    def test_transport_failure_is_a_failed_result(self) -> None:
        stub = StubGemini(httpx.Response(500, text="boom"))
        result = stub.client().execute_agent(AgentName.JOB_EXTRACTION, JOB_INPUT)

        assert result.success is False
        assert result.retryable is True
        assert result.error_type == "TransportError"
        assert "boom" not in result.error

    def test_schema_violation_is_a_failed_result(self) -> None:
        stub = StubGemini(_ok({"jobTitle": "Only a title"}))
        result = stub.client().execute_agent(AgentName.JOB_EXTRACTION, JOB_INPUT)

        assert result.success is False
        assert result.error_type == "SchemaViolationError"
        assert result.retryable is False


class TestConnection:
    """Test suite for test_connection."""

    def test_connection_ok(self) -> None:
        stub = StubGemini(_ok({"message": "API connection successful"}))
        assert stub.client().test_connection() is True
        body = json.loads(stub.requests[0].content)
        assert body["generationConfig"]["maxOutputTokens"] == 50

    def test_connection_failure(self) -> None:
        stub = StubGemini(httpx.Response(403, text="API key not valid"))
        assert stub.client().test_connection() is False
