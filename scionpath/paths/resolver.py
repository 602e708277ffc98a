"""Library entry point: from source and destination AS to encoded paths."""

from __future__ import annotations

from typing import List, Optional

from scionpath.config import RESOLVER_CONFIG, ResolverConfig
from scionpath.logging import get_logger
from scionpath.paths.builder import build_path
from scionpath.paths.combiner import combine_segments
from scionpath.paths.dedup import PathDeduplicator
from scionpath.segments import SegmentFetch
from scionpath.topology import LocalTopology
from scionpath.types.dto import BuiltPath
from scionpath.utils.isd_as import format_isd_as

logger = get_logger(__name__)


def build_paths(
    src_isd_as: int,
    dst_isd_as: int,
    topology: LocalTopology,
    fetch: SegmentFetch,
    *,
    config: Optional[ResolverConfig] = None,
    now: Optional[int] = None,
) -> List[BuiltPath]:
    """Compute all distinct forwarding paths from ``src`` to ``dst``.

    Args:
        src_isd_as: Source ISD-AS, normally the local AS.
        dst_isd_as: Destination ISD-AS.
        topology: Local AS view.
        fetch: Segment lookup callable.
        config: Resolver settings; defaults to ``RESOLVER_CONFIG``.
        now: Expiration used for the same-AS path; defaults to the current
            time.

    Returns:
        Unique paths ordered by number of interfaces (fewest hops first).
        Empty if no path can be formed.

    Raises:
        ValueError: If the control service returned segments exceeding the
            wire-format limits.
    """
    cfg = config or RESOLVER_CONFIG
    candidates = combine_segments(
        src_isd_as,
        dst_isd_as,
        topology.is_core_as(),
        fetch,
        minimize_requests=cfg.minimize_requests,
    )

    dedup = PathDeduplicator()
    dropped = 0
    for candidate in candidates:
        path = build_path(candidate, topology, now=now)
        if path is None:
            dropped += 1
            continue
        dedup.add(path)

    paths = dedup.paths()
    paths.sort(key=lambda p: len(p.interfaces))
    logger.info(
        "Paths %s -> %s: %d candidate(s), %d dropped, %d unique",
        format_isd_as(src_isd_as),
        format_isd_as(dst_isd_as),
        len(candidates),
        dropped,
        len(paths),
    )
    return paths
