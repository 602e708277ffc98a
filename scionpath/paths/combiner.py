"""Segment lookup and combination.

Given a source and destination AS, request up, core and down segments as
needed and enumerate the segment combinations that may connect the two.
A combination is only a proposal: whether the segments actually attach to
each other in order is decided by the path builder, which silently drops
candidates that do not.

Which lookups are performed:

- up (``src -> src ISD wildcard``) unless the local AS is core;
- core (``src wildcard -> dst wildcard``) unless request minimization is on
  and an up segment already contains the destination;
- down (``dst wildcard -> dst``) unless a core segment ends at the
  destination, i.e. the destination is a core AS.

When the local AS is core, only core segments whose last entry is the local
AS are kept.

Joins between segment sets use dictionaries keyed by ISD-AS so that the
cost grows with the number of matches rather than with the product of the
set sizes.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence

from scionpath.logging import get_logger
from scionpath.segments import SegmentFetch, fetch_segments
from scionpath.types.base import SegmentType
from scionpath.types.dto import Candidate, PathSegment
from scionpath.utils.isd_as import extract_isd, format_isd_as, to_wildcard

logger = get_logger(__name__)

_UP = 4
_CORE = 2
_DOWN = 1


def combine_segments(
    src_isd_as: int,
    dst_isd_as: int,
    local_is_core: bool,
    fetch: SegmentFetch,
    *,
    minimize_requests: bool = False,
) -> List[Candidate]:
    """Look up segments and return candidate combinations.

    Args:
        src_isd_as: Source (local) ISD-AS.
        dst_isd_as: Destination ISD-AS.
        local_is_core: Whether the source is a core AS.
        fetch: Segment lookup callable.
        minimize_requests: Stop after the up lookup when an up segment
            already contains the destination.

    Returns:
        Candidates in discovery order; a single empty candidate when source
        and destination are the same AS; an empty list when the lookups
        cannot produce a path.
    """
    if src_isd_as == dst_isd_as:
        return [Candidate(src_isd_as, dst_isd_as)]

    src_wildcard = to_wildcard(src_isd_as)
    dst_wildcard = to_wildcard(dst_isd_as)

    segments_up: List[PathSegment] = []
    if not local_is_core:
        segments_up = _fetch(fetch, src_isd_as, src_wildcard, SegmentType.UP)
        if not segments_up:
            return []
        if minimize_requests:
            direct = [seg for seg in segments_up if seg.contains(dst_isd_as)]
            if direct:
                logger.debug(
                    "Destination %s found on %d up segment(s); skipping core lookup",
                    format_isd_as(dst_isd_as),
                    len(direct),
                )
                return _single(direct, src_isd_as, dst_isd_as)

    segments_core = _fetch(fetch, src_wildcard, dst_wildcard, SegmentType.CORE)
    if extract_isd(src_isd_as) != extract_isd(dst_isd_as) and not segments_core:
        return []
    if local_is_core:
        segments_core = [seg for seg in segments_core if seg.last_isd_as == src_isd_as]

    if any(seg.has_end(dst_isd_as) for seg in segments_core):
        # Destination is a core AS: no down segment needed.
        return combine_segment_sets(
            segments_up, segments_core, [], src_isd_as, dst_isd_as
        )

    segments_down = _fetch(fetch, dst_wildcard, dst_isd_as, SegmentType.DOWN)
    return combine_segment_sets(
        segments_up, segments_core, segments_down, src_isd_as, dst_isd_as
    )


def combine_segment_sets(
    segments_up: Sequence[PathSegment],
    segments_core: Sequence[PathSegment],
    segments_down: Sequence[PathSegment],
    src_isd_as: int,
    dst_isd_as: int,
) -> List[Candidate]:
    """Enumerate candidates from already fetched segment sets.

    The strategy depends on which of the three sets are non-empty.
    """
    code = (
        (_UP if segments_up else 0)
        | (_CORE if segments_core else 0)
        | (_DOWN if segments_down else 0)
    )
    src, dst = src_isd_as, dst_isd_as
    candidates: List[Candidate] = []
    if code == _UP | _CORE | _DOWN:
        candidates += _join_three(segments_up, segments_core, segments_down, src, dst)
        if extract_isd(src) == extract_isd(dst):
            candidates += _join_two(segments_up, segments_down, src, dst)
    elif code == _UP | _CORE:
        candidates += _join_two(segments_up, segments_core, src, dst)
        candidates += _single(_containing(segments_up, dst), src, dst)
    elif code == _UP | _DOWN:
        candidates += _join_two(segments_up, segments_down, src, dst)
    elif code == _CORE | _DOWN:
        candidates += _join_two(segments_core, segments_down, src, dst)
        candidates += _single(_containing(segments_down, src), src, dst)
    elif code in (_UP, _CORE, _DOWN):
        only = segments_up or segments_core or segments_down
        candidates += _single(only, src, dst)
    # code 0: segments were found but none of them can form a path, e.g.
    # when the destination AS does not exist.
    logger.debug(
        "Segment sets up=%d core=%d down=%d gave %d candidate(s)",
        len(segments_up),
        len(segments_core),
        len(segments_down),
        len(candidates),
    )
    return candidates


def _fetch(
    fetch: SegmentFetch, src: int, dst: int, segment_type: SegmentType
) -> List[PathSegment]:
    """Fetch and tag segments with the role of the query that returned them."""
    tagged = []
    for seg in fetch_segments(fetch, src, dst):
        if seg.segment_type != segment_type:
            seg = replace(seg, segment_type=segment_type)
        tagged.append(seg)
    return tagged


def _containing(segments: Iterable[PathSegment], isd_as: int) -> List[PathSegment]:
    return [seg for seg in segments if seg.contains(isd_as)]


def _index_by_other_end(
    segments: Iterable[PathSegment], known_isd_as: int
) -> Dict[int, List[PathSegment]]:
    """Map the far end of every segment that has ``known_isd_as`` at one end."""
    index: Dict[int, List[PathSegment]] = defaultdict(list)
    for seg in segments:
        other = seg.other_end(known_isd_as)
        if other is not None:
            index[other].append(seg)
    return index


def _single(segments: Iterable[PathSegment], src: int, dst: int) -> List[Candidate]:
    return [
        Candidate(src, dst, (seg,))
        for seg in segments
        if seg.contains(src) and seg.contains(dst)
    ]


def _join_two(
    first: Sequence[PathSegment], second: Sequence[PathSegment], src: int, dst: int
) -> List[Candidate]:
    """Join segments leaving ``src`` with segments reaching ``dst``.

    Used for up+core, core+down and up+down combinations.
    """
    by_middle = _index_by_other_end(second, dst)
    candidates = []
    for seg0 in first:
        middle = seg0.other_end(src)
        if middle is None:
            continue
        for seg1 in by_middle.get(middle, ()):
            candidates.append(Candidate(src, dst, (seg0, seg1)))
    return candidates


def _join_three(
    segments_up: Sequence[PathSegment],
    segments_core: Sequence[PathSegment],
    segments_down: Sequence[PathSegment],
    src: int,
    dst: int,
) -> List[Candidate]:
    up_by_core = _index_by_other_end(segments_up, src)
    down_by_core = _index_by_other_end(segments_down, dst)

    candidates = []
    for core in segments_core:
        first, last = core.first_isd_as, core.last_isd_as
        if first in up_by_core and last in down_by_core:
            ups, downs = up_by_core[first], down_by_core[last]
        elif last in up_by_core and first in down_by_core:
            ups, downs = up_by_core[last], down_by_core[first]
        else:
            continue
        for up in ups:
            for down in downs:
                candidates.append(Candidate(src, dst, (up, core, down)))
    return candidates
