"""Request types for the Gemini generateContent endpoint."""

from __future__ import annotations

from typing import Any

from job_hunter.models.job import CamelModel


class Part(CamelModel):
    text: str


class Content(CamelModel):
    role: str
    parts: list[Part]


class SystemInstruction(CamelModel):
    parts: list[Part]


class ThinkingConfig(CamelModel):
    thinking_budget: int


class GenerationConfig(CamelModel):
    temperature: float
    response_mime_type: str = "application/json"
    response_schema: dict[str, Any]
    max_output_tokens: int | None = None
    thinking_config: ThinkingConfig | None = None


class GeminiRequest(CamelModel):
    """Body of a generateContent call. Serialize with ``to_dict()``."""

    contents: list[Content]
    system_instruction: SystemInstruction
    generation_config: GenerationConfig
