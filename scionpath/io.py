"""YAML description of a local AS and the segments a control service returns.

Fixtures make path computations reproducible without a control service::

    topology:
      isd_as: 1-ff00:0:1111
      core: false
      mtu: 1472
      border_routers:
        123: 127.0.0.41:31024
    segments:
      - query: ["1-ff00:0:1111", "1-0"]
        type: up
        seg_id: 39085
        timestamp: 1704902125
        entries:                 # construction order, origin first
          - isd_as: 1-ff00:0:110
            ingress: 0
            egress: 2
            mac: "0c5aeda6bd79"
            expiry: 63
            mtu: 1472
            static_info:         # optional, maps keyed by interface id
              latency_inter: {2: 5000}
              bandwidth_inter: {2: 1000000}
              geo: {2: {latitude: 47.37, longitude: 8.54, address: Zurich}}
              link_type: {2: direct}
              note: core AS

``query`` is the ``(src, dst)`` lookup that returns the segment; wildcards
are written ``<isd>-0``. MACs must be quoted hex strings: YAML reads an
unquoted run of digits as a number (octal when it starts with ``0``), which
cannot be mapped back to the intended bytes. A segment may set
``construction_direction: false`` to record the flag it was received with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import yaml

from scionpath.segments import SegmentStore
from scionpath.topology import DEFAULT_MTU, StaticTopology
from scionpath.types.base import MAC_LEN, LinkType, SegmentType
from scionpath.types.dto import (
    ASEntry,
    GeoCoordinates,
    HopField,
    PathSegment,
    SegmentInfo,
    StaticInfo,
)
from scionpath.utils.isd_as import format_isd_as, parse_isd_as

_SEGMENT_KEYS = {
    "query",
    "type",
    "seg_id",
    "timestamp",
    "construction_direction",
    "entries",
}
_ENTRY_KEYS = {
    "isd_as",
    "ingress",
    "egress",
    "mac",
    "expiry",
    "mtu",
    "ingress_mtu",
    "static_info",
}
_INT_MAP_KEYS = (
    "latency_inter",
    "latency_intra",
    "bandwidth_inter",
    "bandwidth_intra",
    "internal_hops",
)
_STATIC_INFO_KEYS = {*_INT_MAP_KEYS, "geo", "link_type", "note"}
_GEO_KEYS = {"latitude", "longitude", "address"}
_TOPOLOGY_KEYS = {"isd_as", "core", "mtu", "border_routers"}


@dataclass
class SegmentFixture:
    """Parsed fixture: optional local topology and a populated store."""

    topology: Optional[StaticTopology]
    store: SegmentStore


def _isd_as(value: Any) -> int:
    if isinstance(value, int):
        return value
    return parse_isd_as(str(value))


def _mac(value: Any) -> bytes:
    if not isinstance(value, str):
        raise ValueError(f"MAC {value!r} must be a quoted hex string")
    try:
        mac = bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"Invalid MAC '{value}'") from None
    if len(mac) != MAC_LEN:
        raise ValueError(f"MAC '{value}' must be {MAC_LEN} bytes")
    return mac


def _check_keys(kind: str, data: Mapping[str, Any], allowed: set) -> None:
    extra = set(data) - allowed
    if extra:
        raise ValueError(
            f"Unrecognized key(s) in {kind}: {', '.join(sorted(map(str, extra)))}"
        )


def _int_map(kind: str, value: Any) -> Dict[int, int]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{kind}' must be a mapping")
    return {int(k): int(v) for k, v in value.items()}


def _geo_from_dict(data: Any) -> GeoCoordinates:
    if not isinstance(data, dict):
        raise ValueError("Each 'geo' value must be a mapping")
    _check_keys("geo", data, _GEO_KEYS)
    return GeoCoordinates(
        latitude=float(data.get("latitude", 0.0)),
        longitude=float(data.get("longitude", 0.0)),
        address=str(data.get("address", "")),
    )


def static_info_from_dict(data: Mapping[str, Any]) -> StaticInfo:
    """Create a :class:`StaticInfo` from its fixture mapping."""
    _check_keys("static_info", data, _STATIC_INFO_KEYS)
    geo = data.get("geo") or {}
    link_type = data.get("link_type") or {}
    if not isinstance(geo, dict) or not isinstance(link_type, dict):
        raise ValueError("'geo' and 'link_type' must be mappings")
    counters = {key: _int_map(key, data.get(key)) for key in _INT_MAP_KEYS}
    return StaticInfo(
        geo={int(k): _geo_from_dict(v) for k, v in geo.items()},
        link_type={int(k): LinkType.from_string(str(v)) for k, v in link_type.items()},
        note=str(data.get("note", "")),
        **counters,
    )


def static_info_to_dict(info: StaticInfo) -> Dict[str, Any]:
    """Render static info in fixture form, leaving out empty maps."""
    data: Dict[str, Any] = {
        "latency_inter": dict(info.latency_inter),
        "latency_intra": dict(info.latency_intra),
        "bandwidth_inter": dict(info.bandwidth_inter),
        "bandwidth_intra": dict(info.bandwidth_intra),
        "geo": {
            k: {"latitude": g.latitude, "longitude": g.longitude, "address": g.address}
            for k, g in info.geo.items()
        },
        "link_type": {k: lt.name.lower() for k, lt in info.link_type.items()},
        "internal_hops": dict(info.internal_hops),
    }
    data = {k: v for k, v in data.items() if v}
    if info.note:
        data["note"] = info.note
    return data


def entry_from_dict(data: Mapping[str, Any]) -> ASEntry:
    """Create an :class:`ASEntry` from its fixture mapping."""
    _check_keys("AS entry", data, _ENTRY_KEYS)
    if "isd_as" not in data or "mac" not in data:
        raise ValueError("AS entry requires 'isd_as' and 'mac'")
    hop = HopField(
        ingress=int(data.get("ingress", 0)),
        egress=int(data.get("egress", 0)),
        mac=_mac(data["mac"]),
        expiry_delta=int(data.get("expiry", 63)),
    )
    static_info = None
    if data.get("static_info") is not None:
        if not isinstance(data["static_info"], dict):
            raise ValueError("'static_info' must be a mapping")
        static_info = static_info_from_dict(data["static_info"])
    return ASEntry(
        isd_as=_isd_as(data["isd_as"]),
        hop_field=hop,
        mtu=int(data.get("mtu", DEFAULT_MTU)),
        ingress_mtu=int(data.get("ingress_mtu", 0)),
        static_info=static_info,
    )


def segment_from_dict(data: Mapping[str, Any]) -> PathSegment:
    """Create a :class:`PathSegment` from its fixture mapping."""
    _check_keys("segment", data, _SEGMENT_KEYS)
    entries = data.get("entries")
    if not isinstance(entries, list) or not entries:
        raise ValueError("Segment requires a non-empty 'entries' list")
    seg_type = data.get("type")
    return PathSegment(
        as_entries=tuple(entry_from_dict(e) for e in entries),
        info=SegmentInfo(
            seg_id=int(data.get("seg_id", 0)),
            timestamp=int(data.get("timestamp", 0)),
            flag_construction_direction=bool(
                data.get("construction_direction", True)
            ),
        ),
        segment_type=(
            SegmentType.from_string(seg_type) if seg_type else SegmentType.UNSPECIFIED
        ),
    )


def segment_to_dict(segment: PathSegment) -> Dict[str, Any]:
    """Render a segment in fixture form (without ``query``)."""
    entries: List[Dict[str, Any]] = []
    for entry in segment.as_entries:
        item: Dict[str, Any] = {
            "isd_as": format_isd_as(entry.isd_as),
            "ingress": entry.hop_field.ingress,
            "egress": entry.hop_field.egress,
            "mac": entry.hop_field.mac.hex(),
            "expiry": entry.hop_field.expiry_delta,
            "mtu": entry.mtu,
        }
        if entry.ingress_mtu:
            item["ingress_mtu"] = entry.ingress_mtu
        if entry.static_info is not None:
            item["static_info"] = static_info_to_dict(entry.static_info)
        entries.append(item)
    data: Dict[str, Any] = {
        "type": segment.segment_type.name.lower(),
        "seg_id": segment.info.seg_id,
        "timestamp": segment.info.timestamp,
    }
    if not segment.info.flag_construction_direction:
        data["construction_direction"] = False
    data["entries"] = entries
    return data


def topology_from_dict(data: Mapping[str, Any]) -> StaticTopology:
    _check_keys("topology", data, _TOPOLOGY_KEYS)
    if "isd_as" not in data:
        raise ValueError("Topology requires 'isd_as'")
    routers = data.get("border_routers") or {}
    if not isinstance(routers, dict):
        raise ValueError("'border_routers' must be a mapping")
    return StaticTopology(
        isd_as=_isd_as(data["isd_as"]),
        core=bool(data.get("core", False)),
        local_mtu=int(data.get("mtu", DEFAULT_MTU)),
        border_routers={int(k): str(v) for k, v in routers.items()},
    )


def load_fixture_yaml(yaml_str: str) -> SegmentFixture:
    """Parse a fixture document.

    Raises:
        ValueError: If the document is not a mapping or contains unknown or
            malformed entries.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")
    _check_keys("fixture", data, {"topology", "segments"})

    topology = None
    if data.get("topology") is not None:
        if not isinstance(data["topology"], dict):
            raise ValueError("'topology' must be a mapping")
        topology = topology_from_dict(data["topology"])

    store = SegmentStore()
    segments = data.get("segments") or []
    if not isinstance(segments, list):
        raise ValueError("'segments' must be a list")
    for item in segments:
        if not isinstance(item, dict):
            raise ValueError("Each segment must be a mapping")
        query = item.get("query")
        if not isinstance(query, list) or len(query) != 2:
            raise ValueError("Each segment requires 'query: [src, dst]'")
        store.add(_isd_as(query[0]), _isd_as(query[1]), segment_from_dict(item))
    return SegmentFixture(topology=topology, store=store)
