"""
Todo AI Assistant: Error taxonomy.

Every failure of the AI pipelines is one of these types. Each carries the
HTTP status and the user-facing message the transport layer answers with;
``str(exc)`` keeps the diagnostic detail, which is only ever logged.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    INVALID_INPUT = "invalid_input"
    MODEL_AUTH = "model_auth"
    MODEL_QUOTA = "model_quota"
    MODEL_UNAVAILABLE = "model_unavailable"
    MODEL_RESPONSE = "model_response"
    UNEXPECTED = "unexpected"


class TodoAIError(Exception):
    """Base class for every pipeline failure."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    status_code: int = 500
    default_message: str = "AI analysis failed. Please try again."

    def __init__(self, detail: str = "", user_message: str | None = None) -> None:
        super().__init__(detail or self.default_message)
        self.user_message = user_message or self.default_message


# ---------------------------------------------------------------------------
# Input errors: detected before any network call, never retried
# ---------------------------------------------------------------------------


class InvalidInputError(TodoAIError):
    """Malformed or policy-violating input. The message is shown to the user."""

    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "The request is not valid."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message, user_message=message)


class EmptyInputError(InvalidInputError):
    default_message = "No todos to analyze. Add a todo first."


class TooManyItemsError(InvalidInputError):
    default_message = "Too many todos: at most 200 todos can be analyzed at once."


# ---------------------------------------------------------------------------
# Model collaborator errors
# ---------------------------------------------------------------------------


class ModelError(TodoAIError):
    """Raised when the generative model call fails for a non-input reason."""


class ModelAuthError(ModelError):
    kind = ErrorKind.MODEL_AUTH
    default_message = "The AI service could not authenticate. Please contact the administrator."


class ModelQuotaError(ModelError):
    kind = ErrorKind.MODEL_QUOTA
    status_code = 429
    default_message = "The AI service quota has been exceeded. Please try again later."


class ModelUnavailableError(ModelError):
    kind = ErrorKind.MODEL_UNAVAILABLE
    default_message = "Could not connect to the AI model. Please try again later."


class ModelResponseError(ModelError):
    kind = ErrorKind.MODEL_RESPONSE
    default_message = "Could not process the AI response. Please try again."


class AnalysisFailedError(TodoAIError):
    """Wraps any unexpected exception escaping a pipeline stage."""
