"""Tests for hookguard.net.addresses: private/reserved address classification.

Covers:
- Every IPv4 and IPv6 rule, including both ends of each range
- Public addresses just outside range boundaries
- Zone IDs, accepted only after IPv6 addresses
- Shorthand, integer, octal and hex IPv4 hosts
- IPv4-mapped IPv6 unwrapping
- Non-address input
"""

from __future__ import annotations

import ipaddress

import pytest

from hookguard.net.addresses import (
    PRIVATE_IPV4_RANGES,
    PRIVATE_RANGES,
    AddressRangeRule,
    ends_in_number,
    is_ip_literal,
    is_private_address,
    match_private_range,
    parse_ip_literal,
    parse_ipv4_host,
    strip_zone_id,
)


class TestAddressRangeRule:
    """Integer prefix arithmetic."""

    def test_from_cidr(self) -> None:
        """CIDR text becomes base integer, prefix length and mask."""
        rule = AddressRangeRule.from_cidr("rfc1918_172", "172.16.0.0/12")
        assert rule.version == 4
        assert rule.network == int(ipaddress.IPv4Address("172.16.0.0"))
        assert rule.prefix_length == 12
        assert rule.mask == 0xFFF00000

    def test_contains_boundaries(self) -> None:
        """First and last addresses are inside; neighbours are outside."""
        rule = AddressRangeRule.from_cidr("rfc1918_172", "172.16.0.0/12")
        assert rule.contains(int(ipaddress.IPv4Address("172.16.0.0")))
        assert rule.contains(int(ipaddress.IPv4Address("172.31.255.255")))
        assert not rule.contains(int(ipaddress.IPv4Address("172.15.255.255")))
        assert not rule.contains(int(ipaddress.IPv4Address("172.32.0.0")))

    def test_host_rule_matches_single_address(self) -> None:
        """A /32 rule matches exactly one address."""
        rule = AddressRangeRule.from_cidr("broadcast", "255.255.255.255/32")
        assert rule.contains(0xFFFFFFFF)
        assert not rule.contains(0xFFFFFFFE)

    def test_ipv6_mask(self) -> None:
        """IPv6 masks are computed over 128 bits."""
        rule = AddressRangeRule.from_cidr("ipv6_link_local", "fe80::/10")
        assert rule.mask == ((1 << 10) - 1) << 118

    def test_str_renders_cidr(self) -> None:
        """str() gives back CIDR notation."""
        assert str(AddressRangeRule.from_cidr("x", "100.64.0.0/10")) == "100.64.0.0/10"
        assert str(AddressRangeRule.from_cidr("y", "fc00::/7")) == "fc00::/7"

    def test_rule_table_is_immutable(self) -> None:
        """Rules are frozen and the table is a tuple."""
        assert isinstance(PRIVATE_RANGES, tuple)
        with pytest.raises(AttributeError):
            PRIVATE_RANGES[0].network = 0  # type: ignore[misc]

    def test_every_ipv4_rule_matches_its_own_first_and_last_address(self) -> None:
        """Boundary check across the whole IPv4 table."""
        for rule in PRIVATE_IPV4_RANGES:
            first = rule.network
            last = rule.network | (~rule.mask & 0xFFFFFFFF)
            assert is_private_address(str(ipaddress.IPv4Address(first))), rule.name
            assert is_private_address(str(ipaddress.IPv4Address(last))), rule.name


class TestIPv4Classification:
    """IPv4 private/reserved ranges."""

    @pytest.mark.parametrize(
        "address",
        [
            "0.0.0.0",
            "0.255.255.255",
            "10.0.0.0",
            "10.255.255.255",
            "127.0.0.1",
            "127.255.255.254",
            "169.254.0.0",
            "169.254.169.254",
            "169.254.255.255",
            "172.16.0.0",
            "172.31.255.255",
            "192.168.0.1",
            "100.64.0.0",
            "100.127.255.255",
            "255.255.255.255",
            "224.0.0.1",
            "239.255.255.255",
            "192.0.2.10",
            "198.51.100.7",
            "203.0.113.255",
            "198.18.0.0",
            "198.19.255.255",
        ],
    )
    def test_private(self, address: str) -> None:
        """Every address inside an IPv4 rule is private."""
        assert is_private_address(address) is True

    @pytest.mark.parametrize(
        "address",
        [
            "1.0.0.0",
            "9.255.255.255",
            "11.0.0.0",
            "126.255.255.255",
            "128.0.0.0",
            "169.253.255.255",
            "169.255.0.0",
            "172.15.255.255",
            "172.32.0.0",
            "192.167.255.255",
            "192.169.0.0",
            "100.63.255.255",
            "100.128.0.0",
            "223.255.255.255",
            "240.0.0.0",
            "255.255.255.254",
            "192.0.3.0",
            "198.51.101.0",
            "203.0.112.255",
            "198.17.255.255",
            "198.20.0.0",
            "8.8.8.8",
            "93.184.215.14",
        ],
    )
    def test_public(self, address: str) -> None:
        """Addresses just outside each IPv4 rule are public."""
        assert is_private_address(address) is False

    def test_match_returns_rule(self) -> None:
        """The matching rule is returned for log context."""
        rule = match_private_range("169.254.169.254")
        assert rule is not None
        assert rule.name == "link_local"

    def test_match_public_returns_none(self) -> None:
        """Public addresses match no rule."""
        assert match_private_range("1.1.1.1") is None


class TestIPv6Classification:
    """IPv6 private/reserved ranges and IPv4-mapped unwrapping."""

    @pytest.mark.parametrize(
        "address",
        [
            "::1",
            "0:0:0:0:0:0:0:1",
            "::",
            "fe80::1",
            "febf:ffff::1",
            "fc00::1",
            "fd12:3456:789a::1",
            "ff02::1",
            "ff05::1:3",
            "2001:db8::1",
        ],
    )
    def test_private(self, address: str) -> None:
        """Every address inside an IPv6 rule is private."""
        assert is_private_address(address) is True

    @pytest.mark.parametrize(
        "address",
        [
            "2606:4700:4700::1111",
            "2001:4860:4860::8888",
            "fec0::1",
            "fe7f:ffff::1",
            "fbff::1",
            "::2",
        ],
    )
    def test_public(self, address: str) -> None:
        """Global unicast IPv6 and deprecated site-local are public."""
        assert is_private_address(address) is False

    @pytest.mark.parametrize(
        "address",
        [
            "::ffff:127.0.0.1",
            "::ffff:10.1.2.3",
            "::ffff:169.254.169.254",
            "::ffff:172.16.0.1",
            "::ffff:192.168.1.1",
            "::ffff:100.64.0.1",
            "::ffff:7f00:1",
            "::FFFF:224.0.0.1",
        ],
    )
    def test_ipv4_mapped_private(self, address: str) -> None:
        """::ffff:a.b.c.d is checked against the IPv4 table."""
        assert is_private_address(address) is True

    def test_ipv4_mapped_public(self) -> None:
        """A mapped public IPv4 address stays public."""
        assert is_private_address("::ffff:8.8.8.8") is False

    def test_ipv4_mapped_reports_ipv4_rule(self) -> None:
        """Mapped addresses report the IPv4 rule they hit."""
        rule = match_private_range("::ffff:127.0.0.1")
        assert rule is not None
        assert rule.name == "loopback"


class TestZoneId:
    """Zone identifiers belong to IPv6 literals only."""

    def test_strip_zone_id(self) -> None:
        """Everything from the first % is dropped."""
        assert strip_zone_id("fe80::1%lo0") == "fe80::1"
        assert strip_zone_id("fe80::1%25eth0") == "fe80::1"
        assert strip_zone_id("10.0.0.1") == "10.0.0.1"

    def test_link_local_with_zone_is_private(self) -> None:
        """fe80::1%lo0 classifies as link-local."""
        assert is_private_address("fe80::1%lo0") is True

    def test_public_with_zone_is_public(self) -> None:
        """A zone ID does not make a public address private."""
        assert is_private_address("2606:4700:4700::1111%eth0") is False

    @pytest.mark.parametrize(
        "value",
        [
            "93.184.215.14%25.rebind.attacker.test",
            "93.184.215.14%eth0",
            "10.0.0.1%eth0",
            "fe80::1%",
        ],
    )
    def test_zone_on_ipv4_or_empty_zone_is_not_a_literal(self, value: str) -> None:
        """A % suffix never turns an IPv4-looking name into a literal."""
        assert parse_ip_literal(value) is None
        assert is_ip_literal(value) is False
        assert is_private_address(value) is False


class TestNonAddresses:
    """Strings that are not IP literals never classify as private."""

    @pytest.mark.parametrize("value", ["example.com", "", "localhost", "999.1.1.1", "fe80::zz"])
    def test_not_private(self, value: str) -> None:
        """Non-addresses are never private."""
        assert is_private_address(value) is False

    def test_is_ip_literal(self) -> None:
        """Only canonical literals count; shorthand IPv4 does not."""
        assert is_ip_literal("127.0.0.1")
        assert is_ip_literal("::1")
        assert is_ip_literal("fe80::1%lo0")
        assert not is_ip_literal("example.com")
        assert not is_ip_literal("127.1")

    def test_parse_ip_literal(self) -> None:
        """IPv6 zone IDs parse; junk returns None."""
        assert parse_ip_literal("fe80::1%lo0") == ipaddress.IPv6Address("fe80::1")
        assert parse_ip_literal("nope") is None


class TestIPv4HostForms:
    """Hosts ending in a number are read as IPv4, like a browser does."""

    @pytest.mark.parametrize(
        "hostname",
        ["127.0.0.1", "127.1", "2130706433", "0x7f.0.0.1", "0177.0.0.1", "1.2.3.4.", "0x7f000001"],
    )
    def test_ends_in_number(self, hostname: str) -> None:
        """Decimal, octal and hex final labels all count."""
        assert ends_in_number(hostname) is True

    @pytest.mark.parametrize("hostname", ["example.com", "hooks.slack.com.", "1.2.3.x", "123.example"])
    def test_names_do_not_end_in_number(self, hostname: str) -> None:
        """Ordinary DNS names are left alone."""
        assert ends_in_number(hostname) is False

    @pytest.mark.parametrize(
        ("hostname", "expected"),
        [
            ("2130706433", "127.0.0.1"),
            ("127.1", "127.0.0.1"),
            ("0x7f.0.0.1", "127.0.0.1"),
            ("0177.0.0.1", "127.0.0.1"),
            ("10.1", "10.0.0.1"),
            ("93.184.215.14.", "93.184.215.14"),
        ],
    )
    def test_parse_ipv4_host_canonicalizes(self, hostname: str, expected: str) -> None:
        """Every accepted form collapses to dotted-quad."""
        assert parse_ipv4_host(hostname) == expected

    @pytest.mark.parametrize("hostname", ["256.1.1.1", "1.2.3.4.5", "example.123", "1.2.3.4 ", "0x1g"])
    def test_parse_ipv4_host_rejects_invalid(self, hostname: str) -> None:
        """Out-of-range parts and stray characters are not addresses."""
        assert parse_ipv4_host(hostname) is None
