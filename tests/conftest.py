"""Shared fixtures: a valid job payload and Gemini endpoint stubs."""

from __future__ import annotations

import json

import httpx
import pytest

from job_hunter.storage.kv_store import KeyValueStore
from job_hunter.tools.gemini_client import GeminiClient


def make_ai_payload(**overrides) -> dict:
    """A complete, schema-valid job-extraction payload in camelCase."""
    payload = {
        "jobTitle": "Senior Data Engineer",
        "companyName": "Acme Analytics",
        "location": {"rawText": "Sydney, NSW, Australia", "city": "Sydney", "country": "Australia"},
        "workModel": "Hybrid",
        "jobType": "Full-time",
        "compensation": {
            "minSalary": 150000,
            "maxSalary": 180000,
            "currency": "AUD",
            "period": "yearly",
        },
        "coreObjective": "Build the pipelines that feed Acme's analytics products.",
        "keySkillsAndTools": {
            "hardSkills": ["Python", "SQL"],
            "softSkills": ["Communication"],
            "toolsAndSoftware": ["Airflow", "dbt"],
        },
        "experienceRequirements": {"rawText": "5+ years in data engineering", "minYears": 5},
        "qualifications": [
            {"detail": "Degree in Computer Science", "type": "Preferred"},
            {"detail": "Production Python experience", "type": "Must-have"},
        ],
        "companyCulture": {"tone": "Startup & Casual", "keyAdjectives": ["fast-paced"]},
        "applicationLogistics": {"instructions": "Apply online", "closingDate": "2025-12-31"},
    }
    payload.update(overrides)
    return payload


def make_gemini_response(data, thought: str | None = None) -> dict:
    """Wrap ``data`` (dict or raw text) in a generateContent response envelope."""
    text = data if isinstance(data, str) else json.dumps(data)
    parts = [{"text": text}]
    if thought is not None:
        parts.insert(0, {"text": thought, "thought": True})
    return {"candidates": [{"content": {"role": "model", "parts": parts}}]}


class StubGemini:
    """Records requests and answers each one with the next queued response."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def client(self, api_key: str = "test-key") -> GeminiClient:
        transport = httpx.MockTransport(self.handler)
        return GeminiClient(api_key, http_client=httpx.Client(transport=transport))

    def factory(self):
        return lambda settings: self.client(settings.api_key)


@pytest.fixture
def kv(tmp_path) -> KeyValueStore:
    store = KeyValueStore(str(tmp_path / "jobs.db"))
    yield store
    store.close()
