"""ISD-AS identifiers.

An ISD-AS is a 64-bit integer: the top 16 bits hold the isolation domain
(ISD), the low 48 bits the autonomous system (AS). The text form is
``<isd>-<as>`` where the AS is decimal for BGP-style numbers up to 2**32-1
and three colon-separated hex groups otherwise (``1-ff00:0:110``).
"""

from __future__ import annotations

ISD_BITS = 16
AS_BITS = 48
MAX_ISD = (1 << ISD_BITS) - 1
MAX_AS = (1 << AS_BITS) - 1
MAX_BGP_AS = (1 << 32) - 1

_AS_PART_BITS = 16
_AS_PARTS = AS_BITS // _AS_PART_BITS


def _check_limits(isd: int, as_: int) -> None:
    if isd < 0 or isd > MAX_ISD:
        raise ValueError(f"ISD out of range: {isd}")
    if as_ < 0 or as_ > MAX_AS:
        raise ValueError(f"AS out of range: {as_}")


def make_isd_as(isd: int, as_: int) -> int:
    """Combine an ISD and an AS number into one ISD-AS value."""
    _check_limits(isd, as_)
    return (isd << AS_BITS) | as_


def extract_isd(isd_as: int) -> int:
    return isd_as >> AS_BITS


def extract_as(isd_as: int) -> int:
    return isd_as & MAX_AS


def to_wildcard(isd_as: int) -> int:
    """Keep the ISD, zero the AS part."""
    return (isd_as >> AS_BITS) << AS_BITS


def is_wildcard(isd_as: int) -> bool:
    return isd_as == to_wildcard(isd_as)


def parse_as(text: str) -> int:
    """Parse a decimal BGP AS or a ``xxxx:xxxx:xxxx`` SCION AS.

    Raises:
        ValueError: On malformed input or out-of-range numbers.
    """
    parts = text.split(":")
    if len(parts) == 1:
        value = int(text, 10)
        if value < 0 or value > MAX_BGP_AS:
            raise ValueError(f"BGP AS out of range: {text}")
        return value
    if len(parts) != _AS_PARTS:
        raise ValueError(f"Wrong number of ':' separators in AS '{text}'")
    value = 0
    for part in parts:
        group = int(part, 16)
        if group < 0 or group > 0xFFFF:
            raise ValueError(f"AS group out of range in '{text}'")
        value = (value << _AS_PART_BITS) | group
    return value


def parse_isd_as(text: str) -> int:
    """Parse ``'1-ff00:0:110'`` or ``'1-64512'`` into an ISD-AS integer.

    Raises:
        ValueError: If the string is not of the form ``isd-as``.
    """
    parts = text.strip().split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid ISD-AS: '{text}'")
    return make_isd_as(int(parts[0], 10), parse_as(parts[1]))


def format_isd_as(isd_as: int) -> str:
    """Render an ISD-AS integer in its canonical text form."""
    isd = extract_isd(isd_as)
    as_ = extract_as(isd_as)
    _check_limits(isd, as_)
    if as_ <= MAX_BGP_AS:
        return f"{isd}-{as_}"
    groups = (
        (as_ >> 32) & 0xFFFF,
        (as_ >> 16) & 0xFFFF,
        as_ & 0xFFFF,
    )
    return f"{isd}-" + ":".join(f"{g:x}" for g in groups)
