"""scionpath: forwarding-path construction for SCION end hosts.

scionpath combines control-plane path segments into end-to-end forwarding
paths and encodes them in the exact header format border routers expect.

Primary API:
    build_paths() - All distinct paths between two ASes
    combine_segments() - Segment lookup and candidate enumeration
    build_path() - Orient, truncate and encode one candidate
    dedup_paths(), PathDeduplicator - Remove paths crossing the same interfaces
    decode_path(), encode_path() - Raw path header codec

Example:
    from scionpath import SegmentStore, StaticTopology, build_paths, parse_isd_as

    local = parse_isd_as("1-ff00:0:1111")
    topo = StaticTopology(local, border_routers={123: "127.0.0.41:31024"})
    store = SegmentStore()
    store.add(local, parse_isd_as("1-0"), *up_segments)

    for path in build_paths(local, parse_isd_as("1-ff00:0:110"), topo, store):
        print(path.first_hop, path.mtu, path.raw.hex())
"""

from __future__ import annotations

from scionpath import logging
from scionpath._version import __version__
from scionpath.config import RESOLVER_CONFIG, ResolverConfig
from scionpath.paths.builder import build_path
from scionpath.paths.combiner import combine_segments
from scionpath.paths.dedup import PathDeduplicator, dedup_paths
from scionpath.paths.raw import RawPath, decode_path, encode_path, format_path
from scionpath.paths.resolver import build_paths
from scionpath.segments import SegmentFetch, SegmentStore
from scionpath.topology import LocalTopology, StaticTopology
from scionpath.types.base import LinkType, SegmentType
from scionpath.types.dto import (
    ASEntry,
    BuiltPath,
    Candidate,
    GeoCoordinates,
    HopField,
    PathInterface,
    PathMetadata,
    PathSegment,
    SegmentInfo,
    StaticInfo,
)
from scionpath.utils.isd_as import format_isd_as, parse_isd_as

__all__ = [
    # Version
    "__version__",
    # Entry points
    "build_paths",
    "combine_segments",
    "build_path",
    "dedup_paths",
    "PathDeduplicator",
    # Codec
    "RawPath",
    "decode_path",
    "encode_path",
    "format_path",
    # Types
    "SegmentType",
    "ASEntry",
    "HopField",
    "SegmentInfo",
    "PathSegment",
    "Candidate",
    "PathInterface",
    "BuiltPath",
    "LinkType",
    "GeoCoordinates",
    "StaticInfo",
    "PathMetadata",
    # Collaborators
    "LocalTopology",
    "StaticTopology",
    "SegmentFetch",
    "SegmentStore",
    # Configuration
    "ResolverConfig",
    "RESOLVER_CONFIG",
    # Utilities
    "parse_isd_as",
    "format_isd_as",
    "logging",
]
