"""Small string and arithmetic helpers used by the command handlers."""

from __future__ import annotations

import string
from datetime import datetime, timezone
from typing import Optional

__all__ = [
    "is_dec_string",
    "is_hex_string",
    "has_prefix",
    "rounding_divide",
    "duplicate_quoted_string",
    "create_signature",
]

_DEC_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)


def is_dec_string(text: Optional[str]) -> bool:
    """True if text is non-empty and made only of decimal digits."""
    return bool(text) and all(char in _DEC_DIGITS for char in text)


def is_hex_string(text: Optional[str]) -> bool:
    """True if text is non-empty and made only of hexadecimal digits."""
    return bool(text) and all(char in _HEX_DIGITS for char in text)


def has_prefix(text: str, prefix: str) -> Optional[str]:
    """Return what follows prefix in text, compared case-insensitively.

    None means text does not start with prefix; an empty string means
    text is exactly the prefix.
    """
    head = text[: len(prefix)]
    if len(head) != len(prefix) or head.lower() != prefix.lower():
        return None
    return text[len(prefix):]


def rounding_divide(dividend: int, divisor: int) -> int:
    """Divide, rounding halves up."""
    return (dividend + divisor // 2) // divisor


def duplicate_quoted_string(text: Optional[str]) -> Optional[str]:
    """Return text with a leading double quote and its partner removed.

    Text after the closing quote is dropped; an unclosed quote runs to the
    end. None is returned for empty input or a lone quote.
    """
    if not text:
        return None
    if not text.startswith('"'):
        return text
    body = text[1:]
    if not body:
        return None
    end = body.find('"')
    return body if end < 0 else body[:end]


def create_signature(now: Optional[datetime] = None) -> int:
    """Build a 32-bit MBR disk signature from a point in time (UTC by default)."""
    if now is None:
        now = datetime.now(timezone.utc)
    milliseconds = now.microsecond // 1000
    raw = bytes(
        (
            ((now.year & 0xFF) + (now.hour & 0xFF)) & 0xFF,
            ((now.year >> 8) + (now.minute & 0xFF)) & 0xFF,
            ((now.month & 0xFF) + (now.second & 0xFF)) & 0xFF,
            ((now.day & 0xFF) + (milliseconds & 0xFF)) & 0xFF,
        )
    )
    return int.from_bytes(raw, "little")