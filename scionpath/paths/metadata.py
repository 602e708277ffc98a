"""Collect static path metadata while walking the ranges of a built path.

Each AS entry may carry a :class:`StaticInfo` with inter-AS values (per
link) and intra-AS values (through the AS). Inter-AS values are taken for
every non-zero interface of an included hop. Intra-AS values are only
meaningful for ASes the path transits, so they are skipped at the ends of
the path and at the AS where two segments meet, which is visited twice.

Whether an entry counts as transit depends on the number of segments:

- one segment: every entry except the first and last of the range;
- first of several: every entry except the first of the range;
- middle of three: every entry except the first and last of the range;
- last of two: every entry except the first and last of the range;
- last of three: every entry except the last of the range.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, TypeVar

from scionpath.types.base import LinkType
from scionpath.types.dto import (
    ASEntry,
    GeoCoordinates,
    PathMetadata,
    PathSegment,
    SegmentRange,
    StaticInfo,
)

_V = TypeVar("_V")

_NO_GEO = GeoCoordinates()


def accumulate_metadata(
    segments: Sequence[PathSegment], ranges: Sequence[SegmentRange]
) -> PathMetadata:
    """Collect static metadata for the entries covered by ``ranges``.

    Args:
        segments: Segments of the path, in path order.
        ranges: The used range of each segment, already truncated.

    Returns:
        Metadata in traversal order; placeholders where an entry has no
        static info.
    """
    acc = _Accumulator()
    count = len(ranges)
    prev_isd_as: Optional[int] = None
    for slot, (seg, rng) in enumerate(zip(segments, ranges)):
        for pos in rng.positions():
            entry = seg[pos]
            acc.add(
                entry,
                reversed_=rng.reversed,
                transit=_is_transit(slot, count, pos, rng),
                new_as=entry.isd_as != prev_isd_as,
            )
            prev_isd_as = entry.isd_as
    return acc.result()


def _is_transit(slot: int, count: int, pos: int, rng: SegmentRange) -> bool:
    at_first = pos == rng.start
    at_last = pos == rng.last
    if count == 1:
        return not (at_first or at_last)
    if slot == 0:
        return not at_first
    if slot == count - 1 and count == 3:
        return not at_last
    return not (at_first or at_last)


def _to_millis(micros: Optional[int]) -> int:
    return -1 if micros is None else micros // 1000


def _any_value(values: Mapping[int, _V]) -> Optional[_V]:
    # Intra-AS maps are keyed by the interface on the other side of the AS,
    # which is not known per segment; any value describes the AS.
    return next(iter(values.values()), None)


@dataclass
class _Accumulator:
    latency: List[int] = field(default_factory=list)
    bandwidth: List[int] = field(default_factory=list)
    geo: List[GeoCoordinates] = field(default_factory=list)
    link_type: List[LinkType] = field(default_factory=list)
    internal_hops: List[int] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def add(
        self, entry: ASEntry, *, reversed_: bool, transit: bool, new_as: bool
    ) -> None:
        info = entry.static_info
        egress = entry.hop_field.egress
        ingress = entry.hop_field.ingress
        if info is None:
            self._add_placeholders(egress, ingress, transit, new_as)
            return

        if reversed_:
            if egress:
                self._add_link(info, egress)
            if ingress:
                self.geo.append(info.geo.get(ingress, _NO_GEO))

        if transit:
            self.latency.append(_to_millis(_any_value(info.latency_intra)))
            self.bandwidth.append(_any_value(info.bandwidth_intra) or 0)
            self.internal_hops.append(_any_value(info.internal_hops) or 0)

        if ingress:
            link_type = _any_value(info.link_type)
            self.link_type.append(
                LinkType.UNSPECIFIED if link_type is None else link_type
            )

        if not reversed_:
            if ingress:
                self.geo.append(info.geo.get(ingress, _NO_GEO))
            if egress:
                self._add_link(info, egress)

        if new_as:
            self.notes.append(info.note)

    def _add_link(self, info: StaticInfo, interface_id: int) -> None:
        self.latency.append(_to_millis(info.latency_inter.get(interface_id)))
        self.bandwidth.append(info.bandwidth_inter.get(interface_id, 0))
        self.geo.append(info.geo.get(interface_id, _NO_GEO))

    def _add_placeholders(
        self, egress: int, ingress: int, transit: bool, new_as: bool
    ) -> None:
        if egress:
            self.latency.append(-1)
            self.bandwidth.append(0)
            self.geo.append(_NO_GEO)
        if ingress:
            self.link_type.append(LinkType.UNSPECIFIED)
            self.geo.append(_NO_GEO)
        if transit:
            self.latency.append(-1)
            self.bandwidth.append(0)
            self.internal_hops.append(0)
        if new_as:
            self.notes.append("")

    def result(self) -> PathMetadata:
        return PathMetadata(
            latency=tuple(self.latency),
            bandwidth=tuple(self.bandwidth),
            geo=tuple(self.geo),
            link_type=tuple(self.link_type),
            internal_hops=tuple(self.internal_hops),
            notes=tuple(self.notes),
        )
