"""Tests for the path header codec in `scionpath.paths.raw`."""

import pytest

from scionpath.paths.raw import (
    InfoField,
    RawHopField,
    RawPath,
    decode_path,
    encode_hop_field,
    encode_info_field,
    encode_meta_header,
    encode_path,
    format_interfaces,
    format_path,
    hop_field_offset,
    hop_flags_offset,
    interface_pairs,
    set_alert_flags,
)
from scionpath.types.dto import PathInterface
from scionpath.utils.isd_as import parse_isd_as

CAPTURED_RAW = bytes.fromhex(
    "00003000"
    "0000e38d659ebded"
    "003f007b0000e41228801783"
    "003f006f0457777a11a33fb1"
    "003f000000020c5aeda6bd79"
)


def _hop(ingress, egress, fill=0xAA):
    return RawHopField(ingress=ingress, egress=egress, mac=bytes([fill] * 6), expiry=63)


class TestEncodeFields:
    def test_meta_header_lengths(self):
        assert encode_meta_header([3]) == bytes.fromhex("00003000")
        assert encode_meta_header([2, 2]) == bytes.fromhex("00002080")
        assert encode_meta_header([1, 1, 1]) == bytes.fromhex("00001041")
        assert encode_meta_header([]) == b"\x00\x00\x00\x00"

    def test_meta_header_current_fields(self):
        # CurrINF=2 in the top two bits, CurrHF=5 in the next six
        assert encode_meta_header([3, 3], curr_inf=2, curr_hf=5) == bytes.fromhex(
            "850030c0"
        )

    def test_meta_header_limits(self):
        with pytest.raises(ValueError, match="at most 3 segments"):
            encode_meta_header([1, 1, 1, 1])
        with pytest.raises(ValueError, match="at most 63"):
            encode_meta_header([64])

    def test_info_field_flags(self):
        assert encode_info_field(True, 0xE38D, 0x659EBDED) == bytes.fromhex(
            "0100e38d659ebded"
        )
        assert encode_info_field(False, 0xE38D, 0x659EBDED)[0] == 0x00
        assert encode_info_field(True, 1, 0, peer=True)[0] == 0x03

    def test_hop_field(self):
        mac = bytes.fromhex("e41228801783")
        assert encode_hop_field(63, 123, 0, mac) == bytes.fromhex(
            "003f007b0000e41228801783"
        )
        assert encode_hop_field(0, 1, 2, mac, ingress_alert=True)[0] == 0x02
        assert encode_hop_field(0, 1, 2, mac, egress_alert=True)[0] == 0x01

    def test_hop_field_rejects_short_mac(self):
        with pytest.raises(ValueError, match="6 bytes"):
            encode_hop_field(63, 1, 2, b"\x00\x01")


class TestDecode:
    def test_captured_path(self):
        path = decode_path(CAPTURED_RAW)

        assert path.segment_lengths == (3, 0, 0)
        assert path.segment_count == 1
        assert path.info_fields == (
            InfoField(
                construction_direction=False, seg_id=0xE38D, timestamp=1704902125
            ),
        )
        assert [(h.ingress, h.egress) for h in path.hop_fields] == [
            (123, 0),
            (111, 1111),
            (0, 2),
        ]
        assert path.hop_fields[2].mac == bytes.fromhex("0c5aeda6bd79")
        assert all(h.expiry == 63 for h in path.hop_fields)
        assert path.curr_inf == 0
        assert path.curr_hf == 0

    def test_encode_inverts_decode(self):
        assert encode_path(decode_path(CAPTURED_RAW)) == CAPTURED_RAW

    def test_multi_segment_slices(self):
        raw = encode_path(
            RawPath(
                segment_lengths=(2, 1, 3),
                info_fields=(
                    InfoField(False, 1, 10),
                    InfoField(True, 2, 20),
                    InfoField(True, 3, 30),
                ),
                hop_fields=tuple(_hop(i, i + 100) for i in range(6)),
            )
        )
        path = decode_path(raw)

        assert len(raw) == 4 + 3 * 8 + 6 * 12
        assert [h.ingress for h in path.segment_hops(0)] == [0, 1]
        assert [h.ingress for h in path.segment_hops(1)] == [2]
        assert [h.ingress for h in path.segment_hops(2)] == [3, 4, 5]

    def test_empty_path(self):
        path = decode_path(b"\x00\x00\x00\x00")

        assert path.segment_lengths == (0, 0, 0)
        assert path.info_fields == ()
        assert path.hop_fields == ()

    def test_trailing_bytes_are_ignored(self):
        assert decode_path(CAPTURED_RAW + b"\xff" * 8) == decode_path(CAPTURED_RAW)

    def test_truncated(self):
        with pytest.raises(ValueError, match="truncated"):
            decode_path(CAPTURED_RAW[:-1])
        with pytest.raises(ValueError, match="too short"):
            decode_path(b"\x00\x00")

    def test_gap_between_segments(self):
        with pytest.raises(ValueError, match="follows an empty one"):
            decode_path(bytes.fromhex("00000040"))

    def test_encode_rejects_inconsistent_counts(self):
        with pytest.raises(ValueError, match="hop fields"):
            encode_path(
                RawPath(
                    segment_lengths=(2, 0, 0),
                    info_fields=(InfoField(True, 0, 0),),
                    hop_fields=(_hop(0, 1),),
                )
            )
        with pytest.raises(ValueError, match="info fields"):
            encode_path(
                RawPath(
                    segment_lengths=(1, 0, 0),
                    info_fields=(),
                    hop_fields=(_hop(0, 1),),
                )
            )


class TestOffsets:
    def test_hop_field_offset(self):
        assert hop_field_offset(CAPTURED_RAW, 0) == 12
        assert hop_field_offset(CAPTURED_RAW, 2) == 36
        assert hop_flags_offset(CAPTURED_RAW, 1) == 24

    def test_hop_field_offset_out_of_range(self):
        with pytest.raises(IndexError):
            hop_field_offset(CAPTURED_RAW, 3)
        with pytest.raises(IndexError):
            hop_field_offset(CAPTURED_RAW, -1)

    def test_set_alert_flags(self):
        raw = set_alert_flags(CAPTURED_RAW, 1, ingress=True)

        assert raw[24] == 0x02
        assert raw[:24] == CAPTURED_RAW[:24]
        assert raw[25:] == CAPTURED_RAW[25:]
        assert CAPTURED_RAW[24] == 0x00

        both = set_alert_flags(raw, 1, egress=True)
        hop = decode_path(both).hop_fields[1]
        assert hop.ingress_alert and hop.egress_alert


class TestInterfaces:
    def test_reversed_segment_pairs(self):
        assert interface_pairs(CAPTURED_RAW) == ((123, 1111), (111, 2))
        assert format_path(CAPTURED_RAW) == "[123>1111 111>2]"

    def test_outer_interfaces_are_ignored(self):
        def raw_with_outer(ingress_first, egress_last):
            return encode_path(
                RawPath(
                    segment_lengths=(2, 0, 0),
                    info_fields=(InfoField(True, 0, 0),),
                    hop_fields=(_hop(ingress_first, 5), _hop(6, egress_last)),
                )
            )

        assert interface_pairs(raw_with_outer(0, 0)) == ((5, 6),)
        assert interface_pairs(raw_with_outer(41, 42)) == ((5, 6),)

    def test_empty_path_has_no_pairs(self):
        assert interface_pairs(b"\x00\x00\x00\x00") == ()
        assert format_path(b"\x00\x00\x00\x00") == "[]"

    def test_format_interfaces(self):
        a, b = parse_isd_as("1-ff00:0:110"), parse_isd_as("1-64512")
        rendered = format_interfaces([PathInterface(a, 2), PathInterface(b, 7)])

        assert rendered == "[1-ff00:0:110 2>7 1-64512]"
        assert format_interfaces([]) == "[]"
