"""
Todo AI Assistant: Text Sanitizer.

Validates and normalizes free text before it is sent to the model.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.core.errors import InvalidInputError

MIN_LENGTH = 2
MAX_LENGTH = 500

# Emoji blocks, plus the joiner/keycap marks that glue emoji sequences together
EMOJI_RE = re.compile(
    "["
    "\U0001F000-\U0001FFFF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "\uFE00-\uFEFF"
    "\u200D"
    "\u20E3"
    "]"
)

# Characters refused for script/SQL injection reasons
DANGEROUS_CHARS_RE = re.compile(r"[<>'\"`;\\]")

_WHITESPACE_RE = re.compile(r"\s+")
_FULLWIDTH_RE = re.compile("[\uFF01-\uFF5E]")
_FULLWIDTH_OFFSET = 0xFEE0


@dataclass
class ValidationResult:
    """Outcome of a successful validation."""

    text: str          # trimmed input
    length: int        # raw length, before trimming


def strip_emoji(text: str) -> str:
    return EMOJI_RE.sub("", text)


def to_halfwidth(text: str) -> str:
    """Convert fullwidth ASCII variants (e.g. "１２３") to standard width."""
    return _FULLWIDTH_RE.sub(lambda m: chr(ord(m.group()) - _FULLWIDTH_OFFSET), text)


def validate_text(text: object) -> ValidationResult:
    """Check raw user text against the input policy.

    Raises:
        InvalidInputError: with a user-facing message on the first violation.
    """
    if not isinstance(text, str):
        raise InvalidInputError("The text has an invalid format.")

    trimmed = text.strip()

    if not trimmed:
        raise InvalidInputError("Please enter a todo.")
    if len(trimmed) < MIN_LENGTH:
        raise InvalidInputError(f"Please enter at least {MIN_LENGTH} characters.")
    if len(text) > MAX_LENGTH:
        raise InvalidInputError(f"Please keep the input within {MAX_LENGTH} characters.")

    if DANGEROUS_CHARS_RE.search(trimmed):
        raise InvalidInputError("The text contains characters that are not allowed.")

    if not strip_emoji(trimmed).strip():
        raise InvalidInputError(
            "Emoji alone cannot be analyzed. Please add some text."
        )

    return ValidationResult(text=trimmed, length=len(text))


def normalize_text(text: str) -> str:
    """Normalize text for the model.

    Steps run in this order so that normalizing twice changes nothing:
    fullwidth characters become ASCII before dangerous characters are
    removed, and whitespace left behind by removals is collapsed last.
    """
    result = strip_emoji(text)
    result = to_halfwidth(result)
    result = DANGEROUS_CHARS_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result)
    return result.strip()
