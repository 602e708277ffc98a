"""Shared fixtures: segment factories and a small sample network.

Sample network in ISD 1: core ASes 110 and 120 are linked, 111 is a
child of both, 1111 and 1112 are children of 111 and 112 is a child of 120.

Segments are listed in construction order, core AS first. Interface ids
and MACs of ``u_1111`` are those of a packet capture, so the encoded path
for 1-ff00:0:1111 -> 1-ff00:0:110 is known byte for byte.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Sequence

import pytest

from scionpath.types.base import SegmentType
from scionpath.types.dto import ASEntry, HopField, PathSegment, SegmentInfo
from scionpath.utils.isd_as import parse_isd_as

TIMESTAMP = 0x659EBDED


def _segment(
    hops: Sequence[tuple],
    *,
    seg_id: int = 0,
    timestamp: int = TIMESTAMP,
    segment_type: SegmentType = SegmentType.UNSPECIFIED,
    expiry: int = 63,
    mtu: int = 1472,
) -> PathSegment:
    entries = []
    for idx, hop in enumerate(hops):
        isd_as, ingress, egress = hop[0], hop[1], hop[2]
        mac_hex = hop[3] if len(hop) > 3 else None
        mac = bytes.fromhex(mac_hex) if mac_hex else bytes([0xA0 + idx] * 6)
        entries.append(
            ASEntry(
                isd_as=parse_isd_as(isd_as),
                hop_field=HopField(ingress, egress, mac, expiry),
                mtu=mtu,
            )
        )
    return PathSegment(tuple(entries), SegmentInfo(seg_id, timestamp), segment_type)


@pytest.fixture
def make_segment():
    """Factory building a segment from ``(isd_as, ingress, egress[, mac])`` hops."""
    return _segment


@pytest.fixture
def sample_net():
    """Segments and ISD-AS values of the sample network."""
    ia = parse_isd_as
    return SimpleNamespace(
        as110=ia("1-ff00:0:110"),
        as120=ia("1-ff00:0:120"),
        as111=ia("1-ff00:0:111"),
        as112=ia("1-ff00:0:112"),
        as1111=ia("1-ff00:0:1111"),
        as1112=ia("1-ff00:0:1112"),
        as211=ia("2-ff00:0:211"),
        isd1=ia("1-0"),
        isd2=ia("2-0"),
        # 110 -> 111 -> 1111
        u_1111=_segment(
            [
                ("1-ff00:0:110", 0, 2, "0c5aeda6bd79"),
                ("1-ff00:0:111", 111, 1111, "777a11a33fb1"),
                ("1-ff00:0:1111", 123, 0, "e41228801783"),
            ],
            seg_id=0x98AD,
            segment_type=SegmentType.UP,
        ),
        # 120 -> 111 -> 1111
        u3_1111=_segment(
            [
                ("1-ff00:0:120", 0, 7),
                ("1-ff00:0:111", 8, 1111),
                ("1-ff00:0:1111", 123, 0),
            ],
            seg_id=0x1234,
            segment_type=SegmentType.UP,
        ),
        # 110 -> 111 -> 1112
        d_1112=_segment(
            [
                ("1-ff00:0:110", 0, 2, "b0b1b2b3b4b5"),
                ("1-ff00:0:111", 111, 1112),
                ("1-ff00:0:1112", 124, 0),
            ],
            seg_id=0x4321,
            segment_type=SegmentType.DOWN,
        ),
        # 120 -> 110
        core_120_110=_segment(
            [("1-ff00:0:120", 0, 10), ("1-ff00:0:110", 20, 0)],
            seg_id=0x0C0C,
            segment_type=SegmentType.CORE,
        ),
        # 120 -> 112
        d_112=_segment(
            [("1-ff00:0:120", 0, 5), ("1-ff00:0:112", 6, 0)],
            seg_id=0x0D0D,
            segment_type=SegmentType.DOWN,
        ),
    )
