"""Globally unique identifiers as used by GPT partition tables."""

from __future__ import annotations

import os
import re
import struct
from dataclasses import dataclass, field

__all__ = ["Guid", "NULL_GUID", "create_guid", "format_guid", "parse_guid"]

_GUID_PATTERN = re.compile(
    r"([0-9A-Fa-f]{8})-([0-9A-Fa-f]{4})-([0-9A-Fa-f]{4})-"
    r"([0-9A-Fa-f]{4})-([0-9A-Fa-f]{12})"
)


@dataclass(frozen=True)
class Guid:
    """A GUID split into its four classic fields."""

    data1: int = 0
    data2: int = 0
    data3: int = 0
    data4: bytes = field(default=bytes(8))

    def __post_init__(self) -> None:
        if not 0 <= self.data1 <= 0xFFFFFFFF:
            raise ValueError("data1 must fit in 32 bits")
        if not 0 <= self.data2 <= 0xFFFF:
            raise ValueError("data2 must fit in 16 bits")
        if not 0 <= self.data3 <= 0xFFFF:
            raise ValueError("data3 must fit in 16 bits")
        data4 = bytes(self.data4)
        if len(data4) != 8:
            raise ValueError("data4 must hold exactly 8 bytes")
        object.__setattr__(self, "data4", data4)

    @property
    def is_null(self) -> bool:
        """True if every field is zero."""
        return self == NULL_GUID

    def __str__(self) -> str:
        return format_guid(self)


NULL_GUID = Guid()


def create_guid() -> Guid:
    """Return a random version 4 GUID."""
    raw = os.urandom(16)
    data1, data2, data3 = struct.unpack_from("<IHH", raw)
    data4 = bytearray(raw[8:])
    data3 = (data3 & 0x0FFF) | (4 << 12)
    data4[0] = (data4[0] & 0x3F) | 0x80
    return Guid(data1, data2, data3, bytes(data4))


def format_guid(guid: Guid) -> str:
    """Render a GUID as lower-case 8-4-4-4-12 hex text."""
    tail = guid.data4.hex()
    return f"{guid.data1:08x}-{guid.data2:04x}-{guid.data3:04x}-{tail[:4]}-{tail[4:]}"


def parse_guid(text: str | None) -> Guid:
    """Parse 8-4-4-4-12 hex text into a GUID; raise ValueError if malformed."""
    if text is None:
        raise ValueError("no GUID given")
    match = _GUID_PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid GUID: {text!r}")
    part1, part2, part3, part4, part5 = match.groups()
    return Guid(
        int(part1, 16),
        int(part2, 16),
        int(part3, 16),
        bytes.fromhex(part4 + part5),
    )