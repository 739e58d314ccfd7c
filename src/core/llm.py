"""
Todo AI Assistant: Model invoker.

Sends a PromptSpec to the configured provider in structured-output mode and
returns the reply validated against the PromptSpec's pydantic model.
Supports: gemini (default), anthropic, openai, cohere.

One attempt per call: no retry, no timeout beyond the SDK's own.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import httpx
from pydantic import BaseModel, ValidationError

from src.core.errors import (
    ModelAuthError,
    ModelError,
    ModelQuotaError,
    ModelResponseError,
    ModelUnavailableError,
)

if TYPE_CHECKING:
    from src.config import Settings
    from src.core.prompts import PromptSpec

logger = logging.getLogger(__name__)

_SYSTEM_INSTRUCTION = (
    "You are a task-management assistant. "
    "Reply with a single JSON object and nothing else."
)

# Type alias for provider implementations: (config, spec) -> raw reply text
_ProviderFn = Callable[["ModelConfig", "PromptSpec"], Awaitable[str]]


@dataclass(frozen=True)
class ModelConfig:
    provider: str
    model: str
    api_key: str
    max_tokens: int = 2048

    @classmethod
    def from_settings(cls, settings: Settings) -> ModelConfig:
        provider = settings.LLM_PROVIDER.lower()
        if provider not in _PROVIDERS:
            raise ValueError(
                f"Unknown LLM_PROVIDER={provider!r}. "
                f"Supported: {', '.join(_PROVIDERS)}"
            )
        _, default_model = _PROVIDERS[provider]
        return cls(
            provider=provider,
            model=settings.LLM_MODEL or default_model,
            api_key=settings.LLM_API_KEY,
            max_tokens=settings.LLM_MAX_TOKENS,
        )


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert an OpenAPI-subset schema to Gemini's form (uppercase types)."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type":
            converted[key] = value.upper()
        elif key == "properties":
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


def _schema_instruction(spec: PromptSpec) -> str:
    return (
        f"{_SYSTEM_INSTRUCTION}\n"
        f"The JSON object must follow this schema:\n"
        f"{json.dumps(spec.schema, ensure_ascii=False)}"
    )


# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------


async def _complete_gemini(config: ModelConfig, spec: PromptSpec) -> str:
    import google.generativeai as genai

    genai.configure(api_key=config.api_key)
    gm = genai.GenerativeModel(
        model_name=config.model,
        system_instruction=_SYSTEM_INSTRUCTION,
    )
    response = await gm.generate_content_async(
        spec.prompt,
        generation_config=genai.types.GenerationConfig(
            max_output_tokens=config.max_tokens,
            response_mime_type="application/json",
            response_schema=to_gemini_schema(spec.schema),
        ),
    )
    try:
        return response.text
    except ValueError as exc:
        # No usable Part, e.g. blocked by safety filters
        raise ModelResponseError(f"Gemini returned no content: {exc}") from exc


async def _complete_anthropic(config: ModelConfig, spec: PromptSpec) -> str:
    import anthropic

    client = anthropic.AsyncAnthropic(api_key=config.api_key)
    response = await client.messages.create(
        model=config.model,
        max_tokens=config.max_tokens,
        system=_schema_instruction(spec),
        messages=[{"role": "user", "content": spec.prompt}],
    )
    return response.content[0].text


async def _complete_openai(config: ModelConfig, spec: PromptSpec) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=config.api_key)
    response = await client.chat.completions.create(
        model=config.model,
        max_tokens=config.max_tokens,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": _schema_instruction(spec)},
            {"role": "user", "content": spec.prompt},
        ],
    )
    return response.choices[0].message.content


async def _complete_cohere(config: ModelConfig, spec: PromptSpec) -> str:
    import cohere

    client = cohere.AsyncClientV2(api_key=config.api_key)
    response = await client.chat(
        model=config.model,
        max_tokens=config.max_tokens,
        messages=[
            {"role": "system", "content": _schema_instruction(spec)},
            {"role": "user", "content": spec.prompt},
        ],
    )
    return response.message.content[0].text


_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "gemini":    (_complete_gemini,    "gemini-2.5-flash"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
    "openai":    (_complete_openai,    "gpt-4o-mini"),
    "cohere":    (_complete_cohere,    "command-a-03-2025"),
}


# ---------------------------------------------------------------------------
# Reply decoding
# ---------------------------------------------------------------------------


def _clean_llm_response(raw: str) -> str:
    """Strip markdown code fences that LLMs sometimes wrap around JSON."""
    text = raw.strip()
    text = re.sub(r"^```(?:json)?\s*", "", text)
    text = re.sub(r"\s*```$", "", text)
    return text.strip()


def parse_structured_output(raw_text: str | None, response_model: type[BaseModel]) -> BaseModel:
    """Decode the model's reply and validate it against ``response_model``.

    Raises:
        ModelResponseError: if the reply is empty, not JSON, or off-schema.
    """
    if not raw_text or not raw_text.strip():
        raise ModelResponseError("Model returned an empty reply")

    cleaned = _clean_llm_response(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ModelResponseError(f"Model reply is not JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ModelResponseError(f"Model reply is a JSON {type(data).__name__}, expected an object")

    try:
        return response_model.model_validate(data)
    except ValidationError as exc:
        raise ModelResponseError(f"Model reply does not match {response_model.__name__}: {exc}") from exc


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------

_AUTH_HINTS = ("api key", "api_key", "unauthorized", "unauthenticated", "permission denied")
_QUOTA_HINTS = ("quota", "resource_exhausted", "rate limit", "429")
_UNAVAILABLE_HINTS = ("not found", "unavailable", "connection", "timed out", "timeout")


def _status_of(exc: BaseException) -> int | None:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if callable(value):
            # google.api_core exposes ``code`` as an HTTP status int, grpc as a method
            continue
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def translate_error(exc: BaseException) -> ModelError:
    """Classify a provider exception into the ModelError taxonomy."""
    if isinstance(exc, ModelError):
        return exc

    detail = f"{type(exc).__name__}: {exc}"

    status = _status_of(exc)
    if status in (401, 403):
        return ModelAuthError(detail)
    if status == 429:
        return ModelQuotaError(detail)
    if status == 404 or (status is not None and status >= 500):
        return ModelUnavailableError(detail)

    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError)):
        return ModelUnavailableError(detail)

    message = str(exc).lower()
    if any(hint in message for hint in _AUTH_HINTS):
        return ModelAuthError(detail)
    if any(hint in message for hint in _QUOTA_HINTS):
        return ModelQuotaError(detail)
    if any(hint in message for hint in _UNAVAILABLE_HINTS):
        return ModelUnavailableError(detail)

    return ModelUnavailableError(detail)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class ModelInvoker:
    """Calls the configured provider once and validates the reply."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._provider_fn, _ = _PROVIDERS[config.provider]

    @property
    def config(self) -> ModelConfig:
        return self._config

    async def invoke(self, spec: PromptSpec) -> BaseModel:
        if not self._config.api_key:
            raise ModelAuthError("LLM_API_KEY is not configured")

        logger.info(
            "Invoking %s (%s) for %s", self._config.provider, self._config.model, spec.name,
        )
        try:
            raw_text = await self._provider_fn(self._config, spec)
        except Exception as exc:
            error = translate_error(exc)
            logger.warning("Model call failed for %s: %s", spec.name, error)
            raise error from exc

        logger.debug("Raw reply for %s: %s", spec.name, raw_text)
        return parse_structured_output(raw_text, spec.response_model)
