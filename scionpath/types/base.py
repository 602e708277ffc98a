"""Enums and wire-format constants shared across scionpath."""

from __future__ import annotations

from enum import IntEnum

#: Length in bytes of the path meta header.
PATH_META_LEN = 4

#: Length in bytes of one info field.
INFO_FIELD_LEN = 8

#: Length in bytes of one hop field.
HOP_FIELD_LEN = 12

#: Length in bytes of a hop-field MAC.
MAC_LEN = 6

#: Maximum number of segments (info fields) in one path.
MAX_SEGMENTS = 3

#: Maximum number of hop fields in one segment (6-bit length field).
MAX_SEGMENT_HOPS = 63


def hop_expiration(timestamp: int, expiry_delta: int) -> int:
    """Absolute expiration (epoch seconds) of a hop field.

    The relative expiry counts in units of 1/256 day, so this is
    ``timestamp + (1 + expiry_delta) * 86400 // 256``.
    """
    return timestamp + (1 + expiry_delta) * 24 * 60 * 60 // 256


class SegmentType(IntEnum):
    """Role of a path segment, as reported by the control service."""

    UNSPECIFIED = 0
    #: Non-core AS up to a core AS of its ISD.
    UP = 1
    #: Core AS to core AS, possibly across ISDs.
    CORE = 2
    #: Core AS down to a non-core AS.
    DOWN = 3

    @classmethod
    def from_string(cls, value: str) -> "SegmentType":
        """Parse a case-insensitive name such as ``"up"`` or ``"CORE"``.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid segment type '{value}'. Valid values are: {valid}"
            ) from None


class LinkType(IntEnum):
    """Kind of inter-AS link announced in static path metadata."""

    UNSPECIFIED = 0
    DIRECT = 1
    MULTI_HOP = 2
    OPEN_NET = 3

    @classmethod
    def from_string(cls, value: str) -> "LinkType":
        """Parse a case-insensitive name such as ``"direct"`` or ``"open_net"``.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name for e in cls)
            raise ValueError(
                f"Invalid link type '{value}'. Valid values are: {valid}"
            ) from None
