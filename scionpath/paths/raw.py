"""Encoding and decoding of the standard SCION path header.

Layout (all fields big-endian)::

    meta header  4 bytes   CurrINF:2 CurrHF:6 RSV:6 Seg0Len:6 Seg1Len:6 Seg2Len:6
    info field   8 bytes   flags:8 (P at bit 6, C at bit 7) RSV:8 SegID:16 Timestamp:32
    hop field   12 bytes   flags:8 (I at bit 6, E at bit 7) ExpTime:8
                           ConsIngress:16 ConsEgress:16 MAC:48

There is one info field per non-empty segment, followed by all hop fields
of all segments in path order. Every function here is pure; byte offsets
are absolute within ``raw``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from scionpath.types.base import (
    HOP_FIELD_LEN,
    INFO_FIELD_LEN,
    MAC_LEN,
    MAX_SEGMENT_HOPS,
    MAX_SEGMENTS,
    PATH_META_LEN,
)
from scionpath.types.dto import PathInterface
from scionpath.utils.bits import read_bits, read_bool, write_bits, write_bool
from scionpath.utils.isd_as import format_isd_as

_WORD = struct.Struct("!I")
_HOP_TAIL = struct.Struct("!BBHH")


@dataclass(frozen=True)
class InfoField:
    construction_direction: bool
    seg_id: int
    timestamp: int
    peer: bool = False


@dataclass(frozen=True)
class RawHopField:
    ingress: int
    egress: int
    mac: bytes
    expiry: int
    ingress_alert: bool = False
    egress_alert: bool = False


@dataclass(frozen=True)
class RawPath:
    """Decoded content of a raw path.

    Attributes:
        segment_lengths: Hop counts of segment slots 0, 1 and 2.
        info_fields: One entry per non-empty segment.
        hop_fields: All hop fields in path order.
        curr_inf: Index of the current info field.
        curr_hf: Index of the current hop field.
    """

    segment_lengths: Tuple[int, int, int]
    info_fields: Tuple[InfoField, ...]
    hop_fields: Tuple[RawHopField, ...]
    curr_inf: int = 0
    curr_hf: int = 0

    @property
    def segment_count(self) -> int:
        return len(self.info_fields)

    def segment_hops(self, index: int) -> Tuple[RawHopField, ...]:
        """Return the hop fields belonging to segment slot ``index``."""
        begin = sum(self.segment_lengths[:index])
        return self.hop_fields[begin : begin + self.segment_lengths[index]]


def encode_meta_header(
    segment_lengths: Sequence[int], curr_inf: int = 0, curr_hf: int = 0
) -> bytes:
    """Encode the 4-byte path meta header.

    Raises:
        ValueError: If more than three lengths are given or a length exceeds
            the 6-bit field.
    """
    if len(segment_lengths) > MAX_SEGMENTS:
        raise ValueError(
            f"A path holds at most {MAX_SEGMENTS} segments, got {len(segment_lengths)}"
        )
    word = write_bits(0, 0, 2, curr_inf)
    word = write_bits(word, 2, 6, curr_hf)
    for slot, length in enumerate(segment_lengths):
        if length > MAX_SEGMENT_HOPS:
            raise ValueError(
                f"Segment {slot} has {length} hops, at most {MAX_SEGMENT_HOPS} allowed"
            )
        word = write_bits(word, 14 + 6 * slot, 6, length)
    return _WORD.pack(word)


def encode_info_field(
    construction_direction: bool, seg_id: int, timestamp: int, peer: bool = False
) -> bytes:
    """Encode one 8-byte info field."""
    word = write_bool(0, 6, peer)
    word = write_bool(word, 7, construction_direction)
    word = write_bits(word, 16, 16, seg_id)
    return _WORD.pack(word) + _WORD.pack(timestamp)


def encode_hop_field(
    expiry: int,
    ingress: int,
    egress: int,
    mac: bytes,
    ingress_alert: bool = False,
    egress_alert: bool = False,
) -> bytes:
    """Encode one 12-byte hop field."""
    if len(mac) != MAC_LEN:
        raise ValueError(f"MAC must be {MAC_LEN} bytes, got {len(mac)}")
    flags = write_bool(0, 6, ingress_alert, word_bits=8)
    flags = write_bool(flags, 7, egress_alert, word_bits=8)
    return _HOP_TAIL.pack(flags, expiry, ingress, egress) + bytes(mac)


def encode_path(path: RawPath) -> bytes:
    """Encode a :class:`RawPath`; the inverse of :func:`decode_path`.

    Raises:
        ValueError: If the info/hop field counts disagree with the lengths.
    """
    lengths = path.segment_lengths
    if len(path.info_fields) != _segment_count(lengths):
        raise ValueError(
            f"Expected {_segment_count(lengths)} info fields, got {len(path.info_fields)}"
        )
    if len(path.hop_fields) != sum(lengths):
        raise ValueError(
            f"Expected {sum(lengths)} hop fields, got {len(path.hop_fields)}"
        )
    out = bytearray(encode_meta_header(lengths, path.curr_inf, path.curr_hf))
    for info in path.info_fields:
        out += encode_info_field(
            info.construction_direction, info.seg_id, info.timestamp, info.peer
        )
    for hop in path.hop_fields:
        out += encode_hop_field(
            hop.expiry,
            hop.ingress,
            hop.egress,
            hop.mac,
            hop.ingress_alert,
            hop.egress_alert,
        )
    return bytes(out)


def _segment_count(lengths: Sequence[int]) -> int:
    return sum(1 for length in lengths if length > 0)


def segment_lengths(raw: bytes) -> Tuple[int, int, int]:
    """Read the three segment lengths from the meta header."""
    if len(raw) < PATH_META_LEN:
        raise ValueError(f"Raw path too short for meta header: {len(raw)} bytes")
    (word,) = _WORD.unpack_from(raw, 0)
    return (read_bits(word, 14, 6), read_bits(word, 20, 6), read_bits(word, 26, 6))


def _expected_length(lengths: Sequence[int]) -> int:
    return (
        PATH_META_LEN
        + _segment_count(lengths) * INFO_FIELD_LEN
        + sum(lengths) * HOP_FIELD_LEN
    )


def decode_path(raw: bytes) -> RawPath:
    """Decode a raw path header.

    Args:
        raw: Encoded path, starting at the meta header. Trailing bytes beyond
            the last hop field are ignored.

    Returns:
        The decoded :class:`RawPath`.

    Raises:
        ValueError: If ``raw`` is shorter than the lengths announce, or a
            non-empty segment slot follows an empty one.
    """
    lengths = segment_lengths(raw)
    if lengths[0] == 0 and (lengths[1] or lengths[2]) or (
        lengths[1] == 0 and lengths[2]
    ):
        raise ValueError(f"Non-empty segment follows an empty one: {lengths}")
    expected = _expected_length(lengths)
    if len(raw) < expected:
        raise ValueError(
            f"Raw path truncated: {len(raw)} bytes, header announces {expected}"
        )

    (meta,) = _WORD.unpack_from(raw, 0)
    offset = PATH_META_LEN
    infos: List[InfoField] = []
    for _ in range(_segment_count(lengths)):
        word, timestamp = struct.unpack_from("!II", raw, offset)
        infos.append(
            InfoField(
                construction_direction=read_bool(word, 7),
                seg_id=read_bits(word, 16, 16),
                timestamp=timestamp,
                peer=read_bool(word, 6),
            )
        )
        offset += INFO_FIELD_LEN

    hops: List[RawHopField] = []
    for _ in range(sum(lengths)):
        flags, expiry, ingress, egress = _HOP_TAIL.unpack_from(raw, offset)
        hops.append(
            RawHopField(
                ingress=ingress,
                egress=egress,
                mac=bytes(raw[offset + 6 : offset + HOP_FIELD_LEN]),
                expiry=expiry,
                ingress_alert=read_bool(flags, 6, word_bits=8),
                egress_alert=read_bool(flags, 7, word_bits=8),
            )
        )
        offset += HOP_FIELD_LEN

    return RawPath(
        segment_lengths=lengths,
        info_fields=tuple(infos),
        hop_fields=tuple(hops),
        curr_inf=read_bits(meta, 0, 2),
        curr_hf=read_bits(meta, 2, 6),
    )


def hop_field_offset(raw: bytes, index: int) -> int:
    """Absolute byte offset of hop field ``index`` within ``raw``.

    Raises:
        IndexError: If the path has no hop field ``index``.
    """
    lengths = segment_lengths(raw)
    if index < 0 or index >= sum(lengths):
        raise IndexError(f"Hop field {index} out of range for lengths {lengths}")
    return (
        PATH_META_LEN
        + _segment_count(lengths) * INFO_FIELD_LEN
        + index * HOP_FIELD_LEN
    )


def hop_flags_offset(raw: bytes, index: int) -> int:
    """Absolute offset of the flag byte of hop field ``index``."""
    return hop_field_offset(raw, index)


def set_alert_flags(
    raw: bytes, index: int, ingress: bool = False, egress: bool = False
) -> bytes:
    """Return a copy of ``raw`` with the router-alert flags of one hop set.

    Routers hand packets whose alert flag matches their interface to the
    local control plane, e.g. to answer traceroute probes. Flags that are
    already set stay set.
    """
    out = bytearray(raw)
    pos = hop_flags_offset(raw, index)
    flags = out[pos]
    if ingress:
        flags = write_bool(flags, 6, True, word_bits=8)
    if egress:
        flags = write_bool(flags, 7, True, word_bits=8)
    out[pos] = flags
    return bytes(out)


def interface_pairs(raw: bytes) -> Tuple[Tuple[int, int], ...]:
    """Interface ids actually crossed between consecutive hops.

    Within each segment, a hop pair contributes ``(egress_i, ingress_i+1)``
    when the segment is traversed in construction direction and
    ``(ingress_i, egress_i+1)`` otherwise. Interfaces recorded on hop fields
    that are never crossed (the outer side of the first and last hop of a
    segment) do not appear.
    """
    path = decode_path(raw)
    pairs: List[Tuple[int, int]] = []
    for slot, info in enumerate(path.info_fields):
        hops = path.segment_hops(slot)
        for here, there in zip(hops, hops[1:]):
            if info.construction_direction:
                pairs.append((here.egress, there.ingress))
            else:
                pairs.append((here.ingress, there.egress))
    return tuple(pairs)


def format_path(raw: bytes) -> str:
    """Render crossed interface ids, e.g. ``"[2>1 494>103]"``."""
    return "[" + " ".join(f"{a}>{b}" for a, b in interface_pairs(raw)) + "]"


def format_interfaces(interfaces: Iterable[PathInterface]) -> str:
    """Render a path's interface list as ``[ia ifid>ifid ia ... ia]``.

    Interfaces come in pairs (outgoing interface of one AS, incoming
    interface of the next), so the rendering alternates ASes and links.
    """
    items = list(interfaces)
    if not items:
        return "[]"
    parts: List[str] = []
    for i, iface in enumerate(items):
        if i % 2 == 0:
            parts.append(f"{format_isd_as(iface.isd_as)} {iface.interface_id}>")
        else:
            parts.append(f"{iface.interface_id} ")
    parts.append(format_isd_as(items[-1].isd_as))
    return "[" + "".join(parts) + "]"
