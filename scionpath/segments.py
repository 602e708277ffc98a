"""Segment lookup collaborator.

A segment fetch is any callable taking ``(src, dst)`` ISD-AS values (either
may be a wildcard) and returning decoded, verified path segments.
:class:`SegmentStore` answers such queries from memory.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Tuple

from scionpath.logging import get_logger
from scionpath.types.dto import PathSegment
from scionpath.utils.isd_as import format_isd_as

logger = get_logger(__name__)

SegmentFetch = Callable[[int, int], Iterable[PathSegment]]


def fetch_segments(
    fetch: SegmentFetch, src_isd_as: int, dst_isd_as: int
) -> List[PathSegment]:
    """Run one segment query, treating a failing lookup as an empty answer.

    Args:
        fetch: Lookup callable.
        src_isd_as: Query source (ISD-AS or wildcard).
        dst_isd_as: Query destination (ISD-AS or wildcard).

    Returns:
        The returned segments; empty if the lookup raised.
    """
    src_text = format_isd_as(src_isd_as)
    dst_text = format_isd_as(dst_isd_as)
    logger.info("Requesting segments: %s %s", src_text, dst_text)
    start = time.perf_counter()
    try:
        segments = list(fetch(src_isd_as, dst_isd_as))
    except Exception as exc:
        logger.warning(
            "Segment request %s %s failed: %s", src_text, dst_text, exc, exc_info=True
        )
        return []
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.info(
        "Segment request %s %s returned %d segment(s) in %.1f ms",
        src_text,
        dst_text,
        len(segments),
        elapsed_ms,
    )
    return segments


class SegmentStore:
    """In-memory segment service keyed by exact ``(src, dst)`` query.

    Every query is recorded in ``requests`` so callers can check which
    lookups a path computation performed.
    """

    def __init__(self) -> None:
        self._segments: Dict[Tuple[int, int], List[PathSegment]] = defaultdict(list)
        self.requests: List[Tuple[int, int]] = []

    def add(self, src_isd_as: int, dst_isd_as: int, *segments: PathSegment) -> None:
        """Register segments returned for the query ``(src, dst)``."""
        self._segments[(src_isd_as, dst_isd_as)].extend(segments)

    def __call__(self, src_isd_as: int, dst_isd_as: int) -> List[PathSegment]:
        self.requests.append((src_isd_as, dst_isd_as))
        return list(self._segments.get((src_isd_as, dst_isd_as), ()))

    def __len__(self) -> int:
        return sum(len(segs) for segs in self._segments.values())
