"""Shared test fixtures for the hookguard test suite.

Provides a static DNS table so no test touches the network.
"""

import pytest

from hookguard.net.resolver import StaticResolver
from hookguard.validator import WebhookEndpointValidator

PUBLIC_IPV4 = "93.184.215.14"
PUBLIC_IPV6 = "2606:2800:21f:cb07:6820:80da:af6b:8b2c"

DNS_RECORDS = {
    "example.com": [PUBLIC_IPV4, PUBLIC_IPV6],
    "hooks.slack.com": ["34.226.36.50"],
    "rebind.attacker.test": [PUBLIC_IPV4, "10.0.0.5"],
    "metadata.attacker.test": ["169.254.169.254"],
    "v6-internal.attacker.test": ["fd12:3456:789a::1"],
    "mapped.attacker.test": ["::ffff:192.168.1.1"],
    # A name on the blocklist that would otherwise resolve publicly
    "printer.local": [PUBLIC_IPV4],
    # Only reachable if "%25..." were mistaken for a zone ID on an IPv4 literal
    "93.184.215.14%25.rebind.attacker.test": ["127.0.0.1"],
}


@pytest.fixture
def static_resolver() -> StaticResolver:
    """Resolver answering from DNS_RECORDS; anything else is NXDOMAIN."""
    return StaticResolver(DNS_RECORDS)


@pytest.fixture
def validator(static_resolver: StaticResolver) -> WebhookEndpointValidator:
    """Validator wired to the static resolver with a short timeout."""
    return WebhookEndpointValidator(resolver=static_resolver, dns_timeout=1.0)
