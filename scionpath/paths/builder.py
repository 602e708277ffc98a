"""Turn a segment combination into an encoded forwarding path.

Building happens in three steps:

1. Orientation. Starting at the local AS, each segment must begin or end
   at the AS where the previous one stopped. A segment entered at its first
   entry is traversed in construction direction, one entered at its last
   entry is traversed in reverse. A candidate whose segments do not attach
   is dropped; this is routine when the combiner proposes joins.
2. Truncation. If the destination already lies on the first (up) segment,
   or the source on the last (down) segment, that segment alone forms the
   path. Otherwise, if the first and last segments cross at a non-core AS,
   both are cut at the crossing and the segments between them are dropped
   (a shortcut).
3. Encoding of meta header, info fields and hop fields, while accumulating
   MTU, expiration and the interface list. Static metadata of the included
   entries is collected over the same ranges.

Segment IDs: routers update the segment ID hop by hop by XOR-ing in the
first two MAC bytes of each hop field. The info field therefore has to
carry the value expected at the first hop actually used. For reversed
segments every hop field after the first one is folded in; for ranges that
skip entries at the segment's origin the skipped MACs are folded in too.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence, Tuple

from scionpath.logging import get_logger
from scionpath.paths.metadata import accumulate_metadata
from scionpath.paths.raw import (
    encode_hop_field,
    encode_info_field,
    encode_meta_header,
)
from scionpath.topology import LocalTopology
from scionpath.types.base import (
    INFO_FIELD_LEN,
    MAX_SEGMENT_HOPS,
    MAX_SEGMENTS,
    PATH_META_LEN,
    hop_expiration,
)
from scionpath.types.dto import (
    BuiltPath,
    Candidate,
    PathInterface,
    PathSegment,
    SegmentRange,
)
from scionpath.utils.isd_as import format_isd_as

logger = get_logger(__name__)

# Offset of the segment ID inside an info field.
_SEG_ID_OFFSET = 2


def build_path(
    candidate: Candidate, topology: LocalTopology, *, now: Optional[int] = None
) -> Optional[BuiltPath]:
    """Build the forwarding path for one candidate.

    Args:
        candidate: Segment combination proposed by the combiner.
        topology: Local AS view (ISD-AS, MTU, border routers).
        now: Epoch seconds used as expiration of the empty same-AS path;
            defaults to the current time.

    Returns:
        The built path, or ``None`` if the segments do not attach to each
        other starting at the local AS.

    Raises:
        ValueError: If the candidate has more than three segments or a used
            segment range has more than 63 hops.
    """
    if candidate.is_empty:
        return BuiltPath(
            raw=encode_meta_header(()),
            mtu=topology.mtu(),
            expiration=int(time.time()) if now is None else now,
        )

    segments = list(candidate.segments)
    if len(segments) > MAX_SEGMENTS:
        raise ValueError(
            f"Candidate has {len(segments)} segments, at most {MAX_SEGMENTS} allowed"
        )

    ranges = resolve_ranges(segments, topology.local_isd_as())
    if ranges is None:
        logger.debug(
            "Dropping candidate %s: segments do not attach at %s",
            " ".join(str(seg) for seg in segments),
            format_isd_as(topology.local_isd_as()),
        )
        return None

    segments, ranges = apply_truncation(
        segments, ranges, candidate.src_isd_as, candidate.dst_isd_as
    )
    for rng in ranges:
        if len(rng) > MAX_SEGMENT_HOPS:
            raise ValueError(
                f"Segment {rng.segment_index} uses {len(rng)} hops, "
                f"at most {MAX_SEGMENT_HOPS} allowed"
            )
    return _encode(segments, ranges, topology)


def resolve_ranges(
    segments: Sequence[PathSegment], start_isd_as: int
) -> Optional[List[SegmentRange]]:
    """Orient each segment so that the chain starts at ``start_isd_as``.

    Returns:
        One full-length range per segment, or ``None`` if some segment does
        not begin or end where the previous one stopped.
    """
    ranges: List[SegmentRange] = []
    expected = start_isd_as
    for index, seg in enumerate(segments):
        if seg.first_isd_as == expected:
            ranges.append(SegmentRange(index, 0, len(seg), 1))
            expected = seg.last_isd_as
        elif seg.last_isd_as == expected:
            ranges.append(SegmentRange(index, len(seg) - 1, -1, -1))
            expected = seg.first_isd_as
        else:
            return None
    return ranges


def apply_truncation(
    segments: List[PathSegment],
    ranges: List[SegmentRange],
    src_isd_as: int,
    dst_isd_as: int,
) -> Tuple[List[PathSegment], List[SegmentRange]]:
    """Apply on-path and shortcut reductions.

    Ranges are modified in place; the returned lists hold the segments and
    ranges that remain part of the path.
    """
    if _on_path_up(segments, ranges, dst_isd_as):
        logger.debug("Destination %s is on the up segment", format_isd_as(dst_isd_as))
        return segments[:1], ranges[:1]
    if _on_path_down(segments, ranges, src_isd_as):
        logger.debug("Source %s is on the down segment", format_isd_as(src_isd_as))
        return segments[-1:], ranges[-1:]
    if _shortcut(segments, ranges):
        return [segments[0], segments[-1]], [ranges[0], ranges[-1]]
    return segments, ranges


def _on_path_up(
    segments: Sequence[PathSegment], ranges: Sequence[SegmentRange], dst: int
) -> bool:
    first, rng = segments[0], ranges[0]
    if first.is_core:
        return False
    for pos in rng.positions():
        if first[pos].isd_as == dst:
            rng.end = pos + rng.increment
            return True
    return False


def _on_path_down(
    segments: Sequence[PathSegment], ranges: Sequence[SegmentRange], src: int
) -> bool:
    if len(segments) < 2:
        return False
    last, rng = segments[-1], ranges[-1]
    if last.is_core:
        return False
    for pos in rng.positions():
        if last[pos].isd_as == src:
            rng.start = pos
            return True
    return False


def _shortcut(segments: Sequence[PathSegment], ranges: Sequence[SegmentRange]) -> bool:
    """Cut first and last segment at the crossing farthest from the core."""
    if len(segments) < 2:
        return False
    up, down = segments[0], segments[-1]
    if up.is_core or down.is_core:
        return False
    range_up, range_down = ranges[0], ranges[-1]

    up_positions: Dict[int, int] = {}
    for pos in range_up.positions():
        up_positions.setdefault(up[pos].isd_as, pos)

    pos_up = pos_down = -1
    for pos in range_down.positions():
        match = up_positions.get(down[pos].isd_as)
        if match is not None:
            # keep scanning: the last crossing gives the shortest path
            pos_up, pos_down = match, pos
    if pos_up < 0:
        return False

    new_end = pos_up + range_up.increment
    if len(segments) > 2 or new_end != range_up.end or pos_down != range_down.start:
        logger.debug("Shortcut at %s", format_isd_as(up[pos_up].isd_as))
    range_up.end = new_end
    range_down.start = pos_down
    return True


def _xor_seg_id(buf: bytearray, pos: int, mac: bytes) -> None:
    buf[pos] ^= mac[0]
    buf[pos + 1] ^= mac[1]


def _encode(
    segments: Sequence[PathSegment],
    ranges: Sequence[SegmentRange],
    topology: LocalTopology,
) -> BuiltPath:
    buf = bytearray(encode_meta_header([len(rng) for rng in ranges]))

    for slot, (seg, rng) in enumerate(zip(segments, ranges)):
        buf += encode_info_field(not rng.reversed, seg.info.seg_id, seg.info.timestamp)
        # fold in MACs of entries skipped at the segment origin
        seg_id_pos = PATH_META_LEN + slot * INFO_FIELD_LEN + _SEG_ID_OFFSET
        origin = rng.last if rng.reversed else rng.start
        for pos in range(origin):
            _xor_seg_id(buf, seg_id_pos, seg[pos].hop_field.mac)

    mtu = topology.mtu()
    expirations: List[int] = []
    interfaces: List[PathInterface] = []
    for slot, (seg, rng) in enumerate(zip(segments, ranges)):
        seg_id_pos = PATH_META_LEN + slot * INFO_FIELD_LEN + _SEG_ID_OFFSET
        hops_used = len(rng)
        for written, pos in enumerate(rng.positions()):
            entry = seg[pos]
            hop = entry.hop_field
            buf += encode_hop_field(hop.expiry_delta, hop.ingress, hop.egress, hop.mac)
            if rng.reversed and written > 0:
                _xor_seg_id(buf, seg_id_pos, hop.mac)

            mtu = min(mtu, entry.mtu)
            if entry.ingress_mtu > 0:
                mtu = min(mtu, entry.ingress_mtu)
            expirations.append(hop_expiration(seg.info.timestamp, hop.expiry_delta))

            if written < hops_used - 1:
                nxt = seg[pos + rng.increment]
                if rng.reversed:
                    out_id, in_id = hop.ingress, nxt.hop_field.egress
                else:
                    out_id, in_id = hop.egress, nxt.hop_field.ingress
                interfaces.append(PathInterface(entry.isd_as, out_id))
                interfaces.append(PathInterface(nxt.isd_as, in_id))

    first_hop = ""
    if interfaces:
        first_hop = topology.border_router_address(interfaces[0].interface_id)
    return BuiltPath(
        raw=bytes(buf),
        mtu=mtu,
        expiration=min(expirations),
        interfaces=tuple(interfaces),
        first_hop=first_hop,
        metadata=accumulate_metadata(segments, ranges),
    )
