"""Model port: abstract interface for the generative model.

Core pipelines depend on this protocol, never on a specific provider SDK.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel

from src.core.errors import (
    ModelAuthError,
    ModelError,
    ModelQuotaError,
    ModelResponseError,
    ModelUnavailableError,
)

if TYPE_CHECKING:
    from src.core.prompts import PromptSpec

__all__ = [
    "ModelPort",
    "ModelError",
    "ModelAuthError",
    "ModelQuotaError",
    "ModelUnavailableError",
    "ModelResponseError",
]


class ModelPort(Protocol):
    """Sends one prompt and returns the validated structured reply.

    Implementations raise a ModelError subclass on any failure.
    """

    async def invoke(self, spec: PromptSpec) -> BaseModel: ...
