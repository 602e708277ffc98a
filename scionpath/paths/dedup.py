"""Removal of semantically duplicate paths.

Two built paths can differ byte-wise while forwarding identically: segment
IDs and timestamps differ between otherwise equal segments, and truncated
segments leave interface ids on hop fields that are never crossed. Paths are
therefore compared by the sequence of interface ids actually crossed (see
:func:`scionpath.paths.raw.interface_pairs`). Among duplicates the path that
expires last is kept.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from scionpath.logging import get_logger
from scionpath.paths.raw import interface_pairs
from scionpath.types.dto import BuiltPath

logger = get_logger(__name__)

InterfaceKey = Tuple[Tuple[int, int], ...]


@dataclass
class _Entry:
    order: int
    key: InterfaceKey
    path: BuiltPath


class PathDeduplicator:
    """Accumulates paths, keeping one per crossed-interface sequence.

    Example::

        dedup = PathDeduplicator()
        for path in built:
            dedup.add(path)
        unique = dedup.paths()
    """

    def __init__(self) -> None:
        self._buckets: Dict[int, List[_Entry]] = defaultdict(list)
        self._count = 0

    def add(self, path: BuiltPath) -> bool:
        """Add ``path`` unless an equivalent path expires later.

        Returns:
            True if ``path`` is now part of the result, False if it was
            discarded as a duplicate.
        """
        key = interface_pairs(path.raw)
        bucket = self._buckets[hash(key)]
        for entry in bucket:
            if entry.key != key:
                continue
            if path.expiration > entry.path.expiration:
                logger.debug(
                    "Replacing duplicate path %r with later expiring one", entry.path
                )
                entry.path = path
                return True
            logger.debug("Discarding duplicate path %r", path)
            return False
        bucket.append(_Entry(self._count, key, path))
        self._count += 1
        return True

    def paths(self) -> List[BuiltPath]:
        """Return the retained paths in first-insertion order."""
        entries = [entry for bucket in self._buckets.values() for entry in bucket]
        entries.sort(key=lambda entry: entry.order)
        return [entry.path for entry in entries]

    def __len__(self) -> int:
        return self._count


def dedup_paths(paths: Iterable[BuiltPath]) -> List[BuiltPath]:
    """Return ``paths`` without semantic duplicates."""
    dedup = PathDeduplicator()
    for path in paths:
        dedup.add(path)
    return dedup.paths()
