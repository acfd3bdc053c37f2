"""Agent contract: typed request building and typed response parsing.

An agent wraps one structured-output Gemini task. It turns a typed input into
a ``GeminiRequest`` and turns the raw response JSON back into a typed output,
raising a specific error for every way the response can be unusable.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from job_hunter.config import DEFAULT_MODEL_NAME
from job_hunter.errors import InputError, ParseError, ResponseShapeError, SchemaViolationError
from job_hunter.models.gemini import (
    Content,
    GeminiRequest,
    GenerationConfig,
    Part,
    SystemInstruction,
    ThinkingConfig,
)

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Base class for all agents. Schema and instruction are fixed per subclass."""

    name: ClassVar[str]
    description: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]
    output_model: ClassVar[type[BaseModel]]
    system_instruction: ClassVar[str]
    response_schema: ClassVar[dict[str, Any]]
    temperature: ClassVar[float]
    max_output_tokens: ClassVar[int | None] = None
    thinking_budget: ClassVar[int | None] = None

    def __init__(self, model: str = DEFAULT_MODEL_NAME) -> None:
        self.model = model

    # -- Input ------------------------------------------------------------------

    def coerce_input(self, data: InputT | Mapping[str, Any]) -> InputT:
        """Return ``data`` as the agent's input model."""
        if isinstance(data, self.input_model):
            return data
        try:
            return self.input_model.model_validate(data)
        except ValidationError as e:
            raise InputError(f"Invalid input for agent '{self.name}': {_first_error(e)}") from e

    def validate_input(self, data: InputT | Mapping[str, Any]) -> bool:
        """Cheap structural precondition. Never raises."""
        try:
            return self._is_valid(self.coerce_input(data))
        except InputError:
            return False

    @abstractmethod
    def _is_valid(self, data: InputT) -> bool:
        ...

    @abstractmethod
    def build_user_text(self, data: InputT) -> str:
        """Text of the user turn for this input."""

    # -- Request ----------------------------------------------------------------

    def create_request(self, data: InputT | Mapping[str, Any]) -> GeminiRequest:
        if not self.validate_input(data):
            raise InputError(self.invalid_input_message)

        typed = self.coerce_input(data)
        thinking = (
            ThinkingConfig(thinking_budget=self.thinking_budget)
            if self.thinking_budget is not None
            else None
        )
        return GeminiRequest(
            contents=[Content(role="user", parts=[Part(text=self.build_user_text(typed))])],
            system_instruction=SystemInstruction(parts=[Part(text=self.system_instruction)]),
            generation_config=GenerationConfig(
                temperature=self.temperature,
                response_mime_type="application/json",
                response_schema=self.response_schema,
                max_output_tokens=self.max_output_tokens,
                thinking_config=thinking,
            ),
        )

    @property
    def invalid_input_message(self) -> str:
        return "Invalid input: content is required"

    # -- Response ---------------------------------------------------------------

    def process_response(self, response: Any) -> OutputT:
        """Parse a raw generateContent response into the agent's output model."""
        text = extract_response_text(response)
        data = parse_json_text(text)
        try:
            return self.output_model.model_validate(data)
        except ValidationError as e:
            logger.warning("%s: response failed schema validation: %s", self.name, e)
            raise SchemaViolationError(
                f"AI response is missing or has invalid fields: {_first_error(e)}"
            ) from e


# =============================================================================
# Response helpers
# =============================================================================


def extract_response_text(response: Any) -> str:
    """Pull the generated text out of the candidates/content/parts envelope."""
    if not isinstance(response, Mapping):
        raise ResponseShapeError("Invalid response structure from Gemini API")

    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ResponseShapeError("Invalid response structure from Gemini API")

    first = candidates[0]
    content = first.get("content") if isinstance(first, Mapping) else None
    parts = content.get("parts") if isinstance(content, Mapping) else None
    if not isinstance(parts, list) or not parts:
        raise ResponseShapeError("Invalid response structure from Gemini API")

    texts = [
        part["text"]
        for part in parts
        if isinstance(part, Mapping) and isinstance(part.get("text"), str) and not part.get("thought")
    ]
    if not texts:
        raise ResponseShapeError("Gemini response contained no text")
    return "".join(texts)


def parse_json_text(text: str) -> Any:
    """Decode model text as JSON, tolerating a surrounding Markdown code fence."""
    stripped = text.strip()
    match = _CODE_FENCE.match(stripped)
    if match:
        stripped = match.group(1)
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        logger.warning("JSON parse error: %s (response starts %r)", e, stripped[:200])
        raise ParseError("Failed to parse AI response as JSON") from e


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "input"
    return f"{location}: {first.get('msg', 'invalid')}"
