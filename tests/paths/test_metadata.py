"""Tests for static metadata collection along built paths."""

from dataclasses import replace

import pytest

from scionpath.paths.builder import build_path
from scionpath.paths.metadata import accumulate_metadata
from scionpath.topology import StaticTopology
from scionpath.types.base import LinkType
from scionpath.types.dto import (
    Candidate,
    GeoCoordinates,
    PathMetadata,
    SegmentRange,
    StaticInfo,
)
from scionpath.utils.isd_as import format_isd_as


def _annotated(segment):
    """Attach static info to every entry, derived from its interface ids.

    Link latency is ``ifid`` ms, link bandwidth ``10 * ifid``, the way through
    each AS takes 2.5 ms at 1 Kbit/s over 2 internal hops, and geo addresses
    read ``<isd-as>#<ifid>``.
    """
    entries = []
    for entry in segment:
        name = format_isd_as(entry.isd_as)
        hop = entry.hop_field
        ids = [i for i in (hop.ingress, hop.egress) if i]
        info = StaticInfo(
            latency_inter={i: i * 1000 for i in ids},
            latency_intra={i: 2500 for i in ids},
            bandwidth_inter={i: i * 10 for i in ids},
            bandwidth_intra={i: 1 for i in ids},
            geo={i: GeoCoordinates(47.0, 8.0, f"{name}#{i}") for i in ids},
            link_type={i: LinkType.DIRECT for i in ids},
            internal_hops={i: 2 for i in ids},
            note=name,
        )
        entries.append(replace(entry, static_info=info))
    return replace(segment, as_entries=tuple(entries))


def _addresses(metadata):
    return [g.address for g in metadata.geo]


@pytest.fixture
def annotated(sample_net):
    return {
        "u_1111": _annotated(sample_net.u_1111),
        "d_1112": _annotated(sample_net.d_1112),
        "d_112": _annotated(sample_net.d_112),
    }


class TestSingleSegment:
    def test_reversed_up_segment(self, sample_net, annotated):
        topo = StaticTopology(sample_net.as1111, border_routers={123: "br"})
        up = annotated["u_1111"]
        candidate = Candidate(sample_net.as1111, sample_net.as110, (up,))
        metadata = build_path(candidate, topo).metadata

        # link 1111 of AS 111, transit through 111, link 2 of AS 110
        assert metadata.latency == (1111, 2, 2)
        assert metadata.bandwidth == (11110, 1, 20)
        assert metadata.internal_hops == (2,)
        assert _addresses(metadata) == [
            "1-ff00:0:1111#123",
            "1-ff00:0:111#1111",
            "1-ff00:0:111#111",
            "1-ff00:0:110#2",
        ]
        assert metadata.link_type == (LinkType.DIRECT, LinkType.DIRECT)
        assert metadata.notes == ("1-ff00:0:1111", "1-ff00:0:111", "1-ff00:0:110")

    def test_forward_down_segment(self, sample_net, annotated):
        topo = StaticTopology(sample_net.as120, core=True, border_routers={5: "br"})
        candidate = Candidate(sample_net.as120, sample_net.as112, (annotated["d_112"],))
        metadata = build_path(candidate, topo).metadata

        assert metadata.latency == (5,)
        assert metadata.bandwidth == (50,)
        assert metadata.internal_hops == ()
        assert _addresses(metadata) == ["1-ff00:0:120#5", "1-ff00:0:112#6"]
        assert metadata.link_type == (LinkType.DIRECT,)
        assert metadata.notes == ("1-ff00:0:120", "1-ff00:0:112")

    def test_truncated_range_ends_at_destination(self, sample_net, annotated):
        topo = StaticTopology(sample_net.as1111, border_routers={123: "br"})
        up = annotated["u_1111"]
        candidate = Candidate(sample_net.as1111, sample_net.as111, (up,))
        metadata = build_path(candidate, topo).metadata

        # 111 is now the last entry, so it is not transited
        assert metadata.latency == (1111,)
        assert metadata.internal_hops == ()
        assert _addresses(metadata) == [
            "1-ff00:0:1111#123",
            "1-ff00:0:111#1111",
            "1-ff00:0:111#111",
        ]
        assert metadata.notes == ("1-ff00:0:1111", "1-ff00:0:111")


class TestMultiSegment:
    def test_shortcut_notes_crossing_once(self, sample_net, annotated):
        topo = StaticTopology(sample_net.as1111, border_routers={123: "br"})
        candidate = Candidate(
            sample_net.as1111,
            sample_net.as1112,
            (annotated["u_1111"], annotated["d_1112"]),
        )
        metadata = build_path(candidate, topo).metadata

        # the crossing AS 111 is transited in the first segment only
        assert metadata.latency == (1111, 2, 1112)
        assert metadata.bandwidth == (11110, 1, 11120)
        assert metadata.internal_hops == (2,)
        assert _addresses(metadata) == [
            "1-ff00:0:1111#123",
            "1-ff00:0:111#1111",
            "1-ff00:0:111#111",
            "1-ff00:0:111#111",
            "1-ff00:0:111#1112",
            "1-ff00:0:1112#124",
        ]
        assert metadata.notes == ("1-ff00:0:1111", "1-ff00:0:111", "1-ff00:0:1112")

    def test_last_of_three_segments_skips_only_its_end(self, sample_net, annotated):
        core = _annotated(sample_net.core_120_110)
        segments = [annotated["u_1111"], core, annotated["d_112"]]
        ranges = [
            SegmentRange(0, 2, -1, -1),
            SegmentRange(1, 1, -1, -1),
            SegmentRange(2, 0, 2, 1),
        ]
        metadata = accumulate_metadata(segments, ranges)

        # transit: 111 and 110 in the up segment, 120 at the start of the down one
        assert metadata.internal_hops == (2, 2, 2)
        assert metadata.notes == (
            "1-ff00:0:1111",
            "1-ff00:0:111",
            "1-ff00:0:110",
            "1-ff00:0:120",
            "1-ff00:0:112",
        )


def test_entries_without_static_info(sample_net):
    topo = StaticTopology(sample_net.as120, core=True, border_routers={5: "br"})
    candidate = Candidate(sample_net.as120, sample_net.as112, (sample_net.d_112,))

    assert build_path(candidate, topo).metadata == PathMetadata(
        latency=(-1,),
        bandwidth=(0,),
        geo=(GeoCoordinates(), GeoCoordinates()),
        link_type=(LinkType.UNSPECIFIED,),
        notes=("", ""),
    )


def test_unknown_link_latency_is_negative(sample_net):
    d_112 = sample_net.d_112
    sparse = replace(d_112[0], static_info=StaticInfo(note="core"))
    seg = replace(d_112, as_entries=(sparse, d_112[1]))
    metadata = accumulate_metadata([seg], [SegmentRange(0, 0, 2, 1)])

    assert metadata.latency == (-1,)
    assert metadata.bandwidth == (0,)
    assert metadata.geo[0] == GeoCoordinates()
    assert metadata.notes == ("core", "")
