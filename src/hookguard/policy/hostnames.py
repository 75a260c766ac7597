"""Static hostname blocklist.

Names here are refused before any DNS lookup, so they stay blocked even if
they happen to resolve to a public address.
"""

from __future__ import annotations

import re

# Hostnames blocked regardless of DNS resolution
BLOCKED_HOSTNAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^localhost$", re.IGNORECASE),
    re.compile(r"\.local$", re.IGNORECASE),
    re.compile(r"\.internal$", re.IGNORECASE),
    re.compile(r"\.lan$", re.IGNORECASE),
    re.compile(r"\.localdomain$", re.IGNORECASE),
)

BLOCKED_HOSTNAME_MESSAGE = 'Webhook hostname "{hostname}" is not allowed'


def normalize_hostname(hostname: str) -> str:
    """Lowercase and drop a single trailing root dot (``localhost.``)."""
    hostname = hostname.lower()
    if hostname.endswith(".") and not hostname.endswith(".."):
        hostname = hostname[:-1]
    return hostname


def is_blocked_hostname(hostname: str) -> bool:
    name = normalize_hostname(hostname)
    return any(pattern.search(name) for pattern in BLOCKED_HOSTNAME_PATTERNS)


def check_hostname(hostname: str) -> str | None:
    """Return a rejection message if the hostname is on the blocklist."""
    if is_blocked_hostname(hostname):
        return BLOCKED_HOSTNAME_MESSAGE.format(hostname=hostname)
    return None
