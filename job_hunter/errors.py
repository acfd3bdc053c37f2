"""Error taxonomy for the scan pipeline.

Every stage converts its own failures into one of these types so the
orchestrator can report a short message and a boolean outcome.
"""

from __future__ import annotations


class JobHunterError(Exception):
    """Base class for all pipeline errors."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(JobHunterError):
    """A required input field is missing or empty."""


class AgentNotFoundError(InputError):
    """No agent is registered under the requested name."""


class MissingCredentialError(InputError):
    """No API key is configured."""


class ContentTooShortError(JobHunterError):
    """Extraction produced less text than the minimum threshold."""


class TransportError(JobHunterError):
    """Network failure or non-2xx response from the model endpoint."""

    retryable = True

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseShapeError(JobHunterError):
    """The model response lacks the candidate/content envelope."""


class ParseError(JobHunterError):
    """The model text is not valid JSON."""


class SchemaViolationError(JobHunterError):
    """The parsed JSON does not satisfy the agent's output schema."""


class DuplicateError(JobHunterError):
    """A record with the same source URL and job title is already stored."""


class StorageError(JobHunterError):
    """The persistent store could not be read or written."""

    retryable = True
