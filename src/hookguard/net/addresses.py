"""Private/reserved address classification for SSRF protection.

Each rule is a base address plus prefix length, stored as integers. A
candidate is converted to its 32-bit (IPv4) or 128-bit (IPv6) integer form
and tested by mask comparison, so shorthand and zero-padded notations all
classify the same way.

The rule table is built once at import and never mutated.
"""

from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass

ZONE_ID_DELIMITER = "%"

_IPV4_NUMBER = re.compile(r"^(0[xX][0-9a-fA-F]*|[0-9]+)$")
_IPV4_HOST = re.compile(r"^[0-9a-fA-FxX.]+$")

_BITS = {4: 32, 6: 128}


@dataclass(frozen=True)
class AddressRangeRule:
    """A contiguous CIDR block considered private, reserved, or special-use."""

    name: str
    version: int
    network: int
    prefix_length: int

    @classmethod
    def from_cidr(cls, name: str, cidr: str) -> AddressRangeRule:
        net = ipaddress.ip_network(cidr)
        return cls(
            name=name,
            version=net.version,
            network=int(net.network_address),
            prefix_length=net.prefixlen,
        )

    @property
    def mask(self) -> int:
        bits = _BITS[self.version]
        return ((1 << self.prefix_length) - 1) << (bits - self.prefix_length)

    def contains(self, value: int) -> bool:
        """Return True if the integer address falls inside this block."""
        return (value & self.mask) == self.network

    def __str__(self) -> str:
        address_cls = ipaddress.IPv4Address if self.version == 4 else ipaddress.IPv6Address
        address = address_cls(self.network)
        return f"{address}/{self.prefix_length}"


PRIVATE_IPV4_RANGES: tuple[AddressRangeRule, ...] = (
    AddressRangeRule.from_cidr("current_network", "0.0.0.0/8"),
    AddressRangeRule.from_cidr("rfc1918_10", "10.0.0.0/8"),
    AddressRangeRule.from_cidr("loopback", "127.0.0.0/8"),
    AddressRangeRule.from_cidr("link_local", "169.254.0.0/16"),
    AddressRangeRule.from_cidr("rfc1918_172", "172.16.0.0/12"),
    AddressRangeRule.from_cidr("rfc1918_192", "192.168.0.0/16"),
    AddressRangeRule.from_cidr("carrier_grade_nat", "100.64.0.0/10"),
    AddressRangeRule.from_cidr("broadcast", "255.255.255.255/32"),
    AddressRangeRule.from_cidr("multicast", "224.0.0.0/4"),
    AddressRangeRule.from_cidr("documentation_test_net_1", "192.0.2.0/24"),
    AddressRangeRule.from_cidr("documentation_test_net_2", "198.51.100.0/24"),
    AddressRangeRule.from_cidr("documentation_test_net_3", "203.0.113.0/24"),
    AddressRangeRule.from_cidr("benchmarking", "198.18.0.0/15"),
)

PRIVATE_IPV6_RANGES: tuple[AddressRangeRule, ...] = (
    AddressRangeRule.from_cidr("ipv6_loopback", "::1/128"),
    AddressRangeRule.from_cidr("ipv6_unspecified", "::/128"),
    AddressRangeRule.from_cidr("ipv6_link_local", "fe80::/10"),
    AddressRangeRule.from_cidr("ipv6_unique_local", "fc00::/7"),
    AddressRangeRule.from_cidr("ipv6_multicast", "ff00::/8"),
    AddressRangeRule.from_cidr("ipv6_documentation", "2001:db8::/32"),
)

PRIVATE_RANGES: tuple[AddressRangeRule, ...] = PRIVATE_IPV4_RANGES + PRIVATE_IPV6_RANGES


def strip_zone_id(address: str) -> str:
    """Drop an IPv6 zone identifier suffix, e.g. ``fe80::1%lo0`` -> ``fe80::1``."""
    return address.split(ZONE_ID_DELIMITER, 1)[0]


def parse_ip_literal(address: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse an IP literal, or return None if it is not one.

    A zone ID is accepted only after an IPv6 address; ``1.2.3.4%eth0`` and
    ``1.2.3.4%.example.com`` are not literals.
    """
    bare, delimiter, zone = address.partition(ZONE_ID_DELIMITER)
    try:
        ip = ipaddress.ip_address(bare)
    except ValueError:
        return None
    if delimiter and (ip.version != 6 or not zone):
        return None
    return ip


def is_ip_literal(address: str) -> bool:
    return parse_ip_literal(address) is not None


def ends_in_number(hostname: str) -> bool:
    """True if the last label is numeric, so the host must be read as IPv4.

    ``127.1``, ``2130706433`` and ``0x7f.0.0.1`` all end in a number; a
    single trailing root dot is ignored.
    """
    labels = hostname.split(".")
    if len(labels) > 1 and labels[-1] == "":
        labels.pop()
    return _IPV4_NUMBER.match(labels[-1]) is not None


def parse_ipv4_host(hostname: str) -> str | None:
    """Canonicalize a shorthand, integer, octal or hex IPv4 host.

    ``2130706433``, ``127.1`` and ``0177.0.0.1`` all become ``127.0.0.1``.
    Returns None if the host is not a valid IPv4 address in any of these forms.
    """
    name = hostname[:-1] if hostname.endswith(".") else hostname
    if not _IPV4_HOST.match(name):
        return None
    try:
        packed = socket.inet_aton(name)
    except OSError:
        return None
    return str(ipaddress.IPv4Address(packed))


def match_private_range(address: str) -> AddressRangeRule | None:
    """Return the first rule the address falls in, or None if it is public.

    IPv4-mapped IPv6 addresses (``::ffff:a.b.c.d``) are unwrapped and the
    embedded IPv4 address is checked against the IPv4 rules.
    Strings that are not IP literals match nothing.
    """
    ip = parse_ip_literal(address)
    if ip is None:
        return None

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    rules = PRIVATE_IPV4_RANGES if ip.version == 4 else PRIVATE_IPV6_RANGES
    value = int(ip)
    for rule in rules:
        if rule.contains(value):
            return rule
    return None


def is_private_address(address: str) -> bool:
    """Return True if the address is private, reserved, or special-use."""
    return match_private_range(address) is not None
