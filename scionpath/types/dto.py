"""Value types for segments, candidates and built paths.

Segments arrive already decoded and verified; the dataclasses here only
check that field values fit their wire widths, so that a malformed entry is
rejected where it is created rather than silently corrupting an encoded
path later.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Tuple

from scionpath.types.base import MAC_LEN, LinkType, SegmentType
from scionpath.utils.isd_as import format_isd_as


def _check_uint(name: str, value: int, bits: int) -> None:
    if value < 0 or value >= (1 << bits):
        raise ValueError(f"{name} must fit into {bits} unsigned bits, got {value}")


@dataclass(frozen=True)
class HopField:
    """Authenticated traversal of one AS, in construction direction.

    Attributes:
        ingress: Ingress interface id (0 at the segment origin).
        egress: Egress interface id (0 at the segment end).
        mac: 6-byte message authentication code.
        expiry_delta: Relative expiry in units of 1/256 day.
    """

    ingress: int
    egress: int
    mac: bytes
    expiry_delta: int

    def __post_init__(self) -> None:
        _check_uint("ingress", self.ingress, 16)
        _check_uint("egress", self.egress, 16)
        _check_uint("expiry_delta", self.expiry_delta, 8)
        if len(self.mac) != MAC_LEN:
            raise ValueError(f"MAC must be {MAC_LEN} bytes, got {len(self.mac)}")
        object.__setattr__(self, "mac", bytes(self.mac))


@dataclass(frozen=True)
class GeoCoordinates:
    latitude: float = 0.0
    longitude: float = 0.0
    address: str = ""


@dataclass(frozen=True)
class StaticInfo:
    """Static metadata an AS attaches to its segment entry.

    All maps are keyed by interface id. Inter-AS values describe the link
    behind that interface; intra-AS values describe the way through the AS
    towards that interface.

    Attributes:
        latency_inter: Link latency in microseconds.
        latency_intra: Latency through the AS in microseconds.
        bandwidth_inter: Link bandwidth in Kbit/s.
        bandwidth_intra: Bandwidth through the AS in Kbit/s.
        geo: Location of the border router owning the interface.
        link_type: Kind of link behind the interface.
        internal_hops: Number of internal hops through the AS.
        note: Free-form text published by the AS.
    """

    latency_inter: Mapping[int, int] = field(default_factory=dict)
    latency_intra: Mapping[int, int] = field(default_factory=dict)
    bandwidth_inter: Mapping[int, int] = field(default_factory=dict)
    bandwidth_intra: Mapping[int, int] = field(default_factory=dict)
    geo: Mapping[int, GeoCoordinates] = field(default_factory=dict)
    link_type: Mapping[int, LinkType] = field(default_factory=dict)
    internal_hops: Mapping[int, int] = field(default_factory=dict)
    note: str = ""


@dataclass(frozen=True)
class ASEntry:
    """One AS on a path segment.

    ``static_info`` is optional and does not take part in hashing.
    """

    isd_as: int
    hop_field: HopField
    mtu: int
    ingress_mtu: int = 0
    static_info: Optional[StaticInfo] = field(default=None, hash=False)

    def __post_init__(self) -> None:
        _check_uint("isd_as", self.isd_as, 64)
        _check_uint("mtu", self.mtu, 16)
        _check_uint("ingress_mtu", self.ingress_mtu, 16)


@dataclass(frozen=True)
class SegmentInfo:
    """Segment-level fields copied into the info field.

    ``flag_construction_direction`` is carried as received from the control
    service and is informational only: the direction bit written into an
    encoded path follows the traversal direction chosen when building it.
    """

    seg_id: int
    timestamp: int
    flag_construction_direction: bool = True

    def __post_init__(self) -> None:
        _check_uint("seg_id", self.seg_id, 16)
        _check_uint("timestamp", self.timestamp, 32)


@dataclass(frozen=True)
class PathSegment:
    """A beaconed chain of AS entries in construction order.

    Attributes:
        as_entries: Entries from the originating (core) AS onwards.
        info: Segment ID and creation timestamp.
        segment_type: Role the control service returned the segment for.
    """

    as_entries: Tuple[ASEntry, ...]
    info: SegmentInfo
    segment_type: SegmentType = SegmentType.UNSPECIFIED

    def __post_init__(self) -> None:
        entries = tuple(self.as_entries)
        if not entries:
            raise ValueError("Path segment must contain at least one AS entry")
        object.__setattr__(self, "as_entries", entries)

    def __len__(self) -> int:
        return len(self.as_entries)

    def __iter__(self) -> Iterator[ASEntry]:
        return iter(self.as_entries)

    def __getitem__(self, idx: int) -> ASEntry:
        return self.as_entries[idx]

    @property
    def first_isd_as(self) -> int:
        return self.as_entries[0].isd_as

    @property
    def last_isd_as(self) -> int:
        return self.as_entries[-1].isd_as

    @property
    def is_core(self) -> bool:
        return self.segment_type == SegmentType.CORE

    def other_end(self, isd_as: int) -> Optional[int]:
        """Return the ISD-AS at the opposite end from ``isd_as``.

        Returns:
            The other end, or ``None`` if ``isd_as`` is at neither end.
        """
        if self.first_isd_as == isd_as:
            return self.last_isd_as
        if self.last_isd_as == isd_as:
            return self.first_isd_as
        return None

    def has_end(self, isd_as: int) -> bool:
        return self.first_isd_as == isd_as or self.last_isd_as == isd_as

    def contains(self, isd_as: int) -> bool:
        return any(entry.isd_as == isd_as for entry in self.as_entries)

    def __str__(self) -> str:
        chain = " ".join(format_isd_as(e.isd_as) for e in self.as_entries)
        return f"{self.segment_type.name}[{chain}]"


@dataclass(frozen=True)
class Candidate:
    """An ordered combination of segments proposed as one path.

    An empty ``segments`` tuple stands for the path inside the local AS.
    """

    src_isd_as: int
    dst_isd_as: int
    segments: Tuple[PathSegment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.segments


@dataclass
class SegmentRange:
    """The AS entries of one segment used by a path.

    Positions run ``start, start + increment, ...`` up to, but excluding,
    ``end``; ``increment`` is ``+1`` for construction-direction traversal and
    ``-1`` for reversed traversal.
    """

    segment_index: int
    start: int
    end: int
    increment: int

    @property
    def reversed(self) -> bool:
        return self.increment == -1

    @property
    def last(self) -> int:
        """Position of the last entry included in the range."""
        return self.end - self.increment

    def __len__(self) -> int:
        return abs(self.end - self.start)

    def positions(self) -> range:
        return range(self.start, self.end, self.increment)


@dataclass(frozen=True)
class PathInterface:
    """A border-router interface on a path, named by its owning AS."""

    isd_as: int
    interface_id: int

    def __str__(self) -> str:
        return f"{format_isd_as(self.isd_as)}#{self.interface_id}"


@dataclass(frozen=True)
class PathMetadata:
    """Static metadata collected along a built path, in traversal order.

    Unknown latencies are ``-1`` and unknown bandwidths ``0``, so positions
    stay aligned when some ASes publish no metadata.

    Attributes:
        latency: Latencies in milliseconds, inter-AS and intra-AS interleaved.
        bandwidth: Bandwidths in Kbit/s, in the same order as ``latency``.
        geo: One location per non-zero interface of every included hop.
        link_type: One link type per hop with a non-zero ingress interface.
        internal_hops: Internal hop counts of transit ASes.
        notes: One note per AS, consecutive duplicates removed.
    """

    latency: Tuple[int, ...] = ()
    bandwidth: Tuple[int, ...] = ()
    geo: Tuple[GeoCoordinates, ...] = ()
    link_type: Tuple[LinkType, ...] = ()
    internal_hops: Tuple[int, ...] = ()
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class BuiltPath:
    """An encoded forwarding path with derived metadata.

    Equality and hashing use ``raw`` only.

    Attributes:
        raw: Encoded path header (meta header, info and hop fields).
        mtu: Smallest MTU along the path.
        expiration: Epoch seconds at which the first hop field expires.
        interfaces: Interfaces at every internal hop boundary, in order.
        first_hop: Underlay address of the first border router; empty for
            the path inside the local AS.
        metadata: Static metadata of the traversed AS entries.
    """

    raw: bytes
    mtu: int
    expiration: int
    interfaces: Tuple[PathInterface, ...] = field(default=())
    first_hop: str = ""
    metadata: PathMetadata = field(default_factory=PathMetadata)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BuiltPath):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        hops = " ".join(str(i) for i in self.interfaces)
        return (
            f"BuiltPath([{hops}], mtu={self.mtu}, expiration={self.expiration}, "
            f"first_hop={self.first_hop!r})"
        )
