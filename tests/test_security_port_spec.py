"""Tests for sg_toolkit/security/port_spec.py"""

from __future__ import annotations

import pytest

from sg_toolkit.security.exceptions import (
    ErrorKind,
    InvalidPortRangeError,
    MalformedPortSpecError,
    PortOutOfRangeError,
)
from sg_toolkit.security.models import PortRange
from sg_toolkit.security.port_spec import format_port_spec, parse_port_spec
from tests.assertions import assert_equal, assert_error_kind


class TestParseBlank:
    """Blank input means no access."""

    @pytest.mark.parametrize("text", ["", None, "   ", "\t\n", " , ,"])
    def test_blank_yields_empty(self, text):
        """Empty, None, whitespace and bare delimiters parse to nothing."""
        assert_equal(parse_port_spec(text), ())


class TestParseEntries:
    """Tests for single and multiple entries."""

    def test_single_port(self):
        """A bare port uses the default protocol and a one-port range."""
        assert_equal(parse_port_spec("80"), (PortRange("tcp", 80, 80),))

    def test_port_range(self):
        """FROM-TO gives an inclusive range."""
        assert_equal(parse_port_spec("80-443"), (PortRange("tcp", 80, 443),))

    def test_protocol_qualified_port(self):
        """PROTOCOL:PORT sets the protocol."""
        assert_equal(parse_port_spec("tcp:22"), (PortRange("tcp", 22, 22),))

    def test_protocol_is_case_insensitive(self):
        """Protocols are normalized to lowercase."""
        assert_equal(parse_port_spec("UDP:53-54"), (PortRange("udp", 53, 54),))

    def test_mixed_delimiters(self):
        """Commas and whitespace both separate entries."""
        result = parse_port_spec(" 80, 443 7001-7002,udp:53 ")
        assert_equal(
            result,
            (
                PortRange("tcp", 80, 80),
                PortRange("tcp", 443, 443),
                PortRange("tcp", 7001, 7002),
                PortRange("udp", 53, 53),
            ),
        )

    def test_duplicates_collapse(self):
        """Repeated entries appear once, in first-seen order."""
        assert_equal(
            parse_port_spec("443,80,tcp:443"),
            (PortRange("tcp", 443, 443), PortRange("tcp", 80, 80)),
        )

    def test_port_bounds_are_inclusive(self):
        """0 and 65535 are valid ports."""
        assert_equal(parse_port_spec("0-65535"), (PortRange("tcp", 0, 65535),))


class TestParseFailures:
    """A single bad entry rejects the whole text."""

    def test_reversed_range(self):
        """443-80 is an invalid range."""
        with pytest.raises(InvalidPortRangeError) as exc_info:
            parse_port_spec("443-80")
        assert_error_kind(exc_info.value, ErrorKind.INVALID_PORT_RANGE)
        assert_equal(exc_info.value.entry, "443-80")

    def test_port_out_of_range(self):
        """Ports above 65535 are rejected."""
        with pytest.raises(PortOutOfRangeError) as exc_info:
            parse_port_spec("80,70000")
        assert_error_kind(exc_info.value, ErrorKind.PORT_OUT_OF_RANGE)
        assert_equal(exc_info.value.port, 70000)

    @pytest.mark.parametrize("text", ["http", "80-", "-80", "tcp:", "80:tcp", "1-2-3", "icmp:8"])
    def test_malformed_entries(self, text):
        """Unparseable entries and unsupported protocols are malformed."""
        with pytest.raises(MalformedPortSpecError) as exc_info:
            parse_port_spec(text)
        assert_error_kind(exc_info.value, ErrorKind.MALFORMED_PORT_SPEC)

    def test_error_carries_full_text(self):
        """The error names both the bad entry and the whole specification."""
        with pytest.raises(MalformedPortSpecError) as exc_info:
            parse_port_spec("22, bogus, 80")
        assert_equal(exc_info.value.entry, "bogus")
        assert_equal(exc_info.value.text, "22, bogus, 80")

    def test_range_errors_are_malformed_specs(self):
        """Range errors can be caught as malformed specifications."""
        with pytest.raises(MalformedPortSpecError):
            parse_port_spec("9000-8000")


class TestFormatPortSpec:
    """Tests for format_port_spec."""

    def test_formats_sorted_entries(self):
        """Ranges are sorted; the default protocol is implicit."""
        text = format_port_spec(
            [PortRange("udp", 53, 53), PortRange("tcp", 7001, 7002), PortRange("tcp", 80, 80)]
        )
        assert_equal(text, "80,7001-7002,udp:53")

    def test_empty(self):
        """No ranges render as empty text."""
        assert_equal(format_port_spec([]), "")

    def test_output_parses_back(self):
        """Formatted text parses to the same set of ranges."""
        ranges = {PortRange("tcp", 22, 22), PortRange("udp", 5000, 5010)}
        assert_equal(set(parse_port_spec(format_port_spec(ranges))), ranges)
