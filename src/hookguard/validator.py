"""WebhookEndpointValidator: decides whether a user-supplied URL is safe to deliver to.

Checks run cheapest first and stop at the first failure:
1. Parse the URL
2. Protocol (http/https) and port (80/443, matching the scheme)
3. Hostname blocklist (localhost, *.local, *.internal, ...)
4. IP literal in the URL must not be private/reserved
5. Every resolved A/AAAA address must not be private/reserved

Step 5 is the only network I/O and is skipped for IP literals. It is bounded
by a timeout, and any resolution failure rejects the endpoint (fail closed).

SECURITY: The full endpoint URL is never logged, only its hostname.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

import structlog

from hookguard.config import Settings
from hookguard.net.addresses import (
    ends_in_number,
    is_ip_literal,
    match_private_range,
    parse_ip_literal,
    parse_ipv4_host,
)
from hookguard.net.resolver import ResolutionError, Resolver, SystemResolver
from hookguard.policy.hostnames import check_hostname
from hookguard.policy.models import RejectionKind, ValidationOutcome
from hookguard.policy.protocol import check_port, check_protocol

logger = structlog.get_logger()

DEFAULT_DNS_TIMEOUT_SECONDS = 5.0

INVALID_URL_MESSAGE = "Invalid webhook URL"
PRIVATE_IP_LITERAL_MESSAGE = "Webhook URL points to a private/reserved IP address"
PRIVATE_IP_RESOLVED_MESSAGE = "Webhook hostname resolves to a private IP address ({address})"
DNS_RESOLUTION_FAILURE_MESSAGE = 'Cannot resolve webhook hostname "{hostname}"'

# Code points a URL host may not contain outside IPv6 brackets
_FORBIDDEN_HOST_CHARS = re.compile(r"[\x00-\x20%<>\[\]\\^|\x7f]")


@dataclass(frozen=True)
class EndpointCandidate:
    """The parts of a webhook URL that validation looks at."""

    scheme: str
    hostname: str
    port: int | None
    path: str


class UnsafeEndpointError(ValueError):
    """Raised by ensure_safe_endpoint() when an endpoint is rejected."""

    def __init__(self, outcome: ValidationOutcome) -> None:
        self.outcome = outcome
        super().__init__(outcome.reason)


def parse_endpoint(endpoint: str) -> EndpointCandidate | None:
    """Split a raw endpoint string into an EndpointCandidate.

    Returns None if the string has no scheme, has malformed IPv6 brackets,
    has a port that is not a number in 0-65535, has a backslash in the
    authority, or has a host with a character no URL host may contain.
    Hosts ending in a number are read as IPv4 and canonicalized, so
    ``http://127.1/`` yields hostname ``127.0.0.1``.
    """
    try:
        parsed = urlsplit(endpoint.strip())
        port = parsed.port
    except ValueError:
        return None

    if not parsed.scheme:
        return None

    # Browsers treat "\" as "/" for http(s), which moves the host
    if "\\" in parsed.netloc:
        return None

    hostname = parsed.hostname or ""
    bracketed = parsed.netloc.rpartition("@")[2].startswith("[")
    if bracketed:
        ip = parse_ip_literal(hostname)
        if ip is None or ip.version != 6:
            return None
    elif hostname:
        if _FORBIDDEN_HOST_CHARS.search(hostname):
            return None
        if ends_in_number(hostname):
            hostname = parse_ipv4_host(hostname)
            if hostname is None:
                return None

    return EndpointCandidate(
        scheme=parsed.scheme.lower(),
        hostname=hostname,
        port=port,
        path=parsed.path,
    )


class WebhookEndpointValidator:
    """Validates webhook endpoints against SSRF.

    Holds no per-call state, so one instance can serve any number of
    concurrent validations.

    Args:
        resolver: DNS backend. Defaults to the system resolver.
        dns_timeout: Seconds to wait for DNS before rejecting.
    """

    def __init__(
        self,
        resolver: Resolver | None = None,
        dns_timeout: float = DEFAULT_DNS_TIMEOUT_SECONDS,
    ) -> None:
        if dns_timeout <= 0:
            raise ValueError(f"dns_timeout must be positive, got {dns_timeout}")
        self._resolver = resolver if resolver is not None else SystemResolver()
        self._dns_timeout = dns_timeout

    @classmethod
    def from_settings(cls, settings: Settings, resolver: Resolver | None = None) -> WebhookEndpointValidator:
        """Build a validator using the configured DNS timeout."""
        return cls(resolver=resolver, dns_timeout=settings.dns_timeout_seconds)

    @property
    def dns_timeout(self) -> float:
        return self._dns_timeout

    async def validate(self, endpoint: str) -> str | None:
        """Return None if the endpoint is safe, otherwise the rejection reason."""
        outcome = await self.evaluate(endpoint)
        return outcome.reason

    async def evaluate(self, endpoint: str) -> ValidationOutcome:
        """Run every check in order and return the first rejection, if any.

        Never raises for a string input.
        """
        if not isinstance(endpoint, str):
            return await self._reject(str(endpoint), RejectionKind.INVALID_URL, INVALID_URL_MESSAGE)

        candidate = parse_endpoint(endpoint)
        if candidate is None:
            return await self._reject(endpoint, RejectionKind.INVALID_URL, INVALID_URL_MESSAGE)

        reason = check_protocol(candidate.scheme)
        if reason is not None:
            return await self._reject(endpoint, RejectionKind.UNSUPPORTED_PROTOCOL, reason)

        # An http(s) URL without a host is not a usable URL
        if not candidate.hostname:
            return await self._reject(endpoint, RejectionKind.INVALID_URL, INVALID_URL_MESSAGE)

        reason = check_port(candidate.scheme, candidate.port)
        if reason is not None:
            return await self._reject(
                endpoint, RejectionKind.DISALLOWED_PORT, reason, hostname=candidate.hostname
            )

        hostname = candidate.hostname

        reason = check_hostname(hostname)
        if reason is not None:
            return await self._reject(
                endpoint, RejectionKind.BLOCKED_HOSTNAME, reason, hostname=hostname
            )

        if is_ip_literal(hostname):
            rule = match_private_range(hostname)
            if rule is not None:
                return await self._reject(
                    endpoint,
                    RejectionKind.PRIVATE_IP_LITERAL,
                    PRIVATE_IP_LITERAL_MESSAGE,
                    hostname=hostname,
                    rule=rule.name,
                )
            return await self._accept(endpoint, hostname)

        return await self._check_resolved_addresses(endpoint, hostname)

    async def _check_resolved_addresses(self, endpoint: str, hostname: str) -> ValidationOutcome:
        """Resolve the hostname and require every address to be public."""
        failure_reason = DNS_RESOLUTION_FAILURE_MESSAGE.format(hostname=hostname)

        try:
            addresses = await asyncio.wait_for(
                self._resolver.resolve(hostname), timeout=self._dns_timeout
            )
        except asyncio.TimeoutError:
            await logger.awarning(
                "webhook_dns_resolution_failed",
                hostname=hostname,
                error="timeout",
                timeout_seconds=self._dns_timeout,
            )
            return await self._reject(
                endpoint, RejectionKind.DNS_RESOLUTION_FAILURE, failure_reason, hostname=hostname
            )
        except ResolutionError as exc:
            await logger.awarning(
                "webhook_dns_resolution_failed",
                hostname=hostname,
                error=type(exc).__name__,
                detail=exc.detail,
            )
            return await self._reject(
                endpoint, RejectionKind.DNS_RESOLUTION_FAILURE, failure_reason, hostname=hostname
            )
        except Exception:
            # Any resolver fault counts as unresolvable
            await logger.awarning(
                "webhook_dns_resolution_failed",
                hostname=hostname,
                exc_info=True,
            )
            return await self._reject(
                endpoint, RejectionKind.DNS_RESOLUTION_FAILURE, failure_reason, hostname=hostname
            )

        if not addresses:
            return await self._reject(
                endpoint, RejectionKind.DNS_RESOLUTION_FAILURE, failure_reason, hostname=hostname
            )

        for address in addresses:
            if not is_ip_literal(address):
                return await self._reject(
                    endpoint, RejectionKind.DNS_RESOLUTION_FAILURE, failure_reason, hostname=hostname
                )
            rule = match_private_range(address)
            if rule is not None:
                return await self._reject(
                    endpoint,
                    RejectionKind.PRIVATE_IP_RESOLVED,
                    PRIVATE_IP_RESOLVED_MESSAGE.format(address=address),
                    hostname=hostname,
                    address=address,
                    rule=rule.name,
                )

        return await self._accept(endpoint, hostname, address_count=len(addresses))

    async def _accept(self, endpoint: str, hostname: str, **log_context: object) -> ValidationOutcome:
        await logger.adebug("webhook_endpoint_accepted", hostname=hostname, **log_context)
        return ValidationOutcome.accepted(endpoint)

    async def _reject(
        self,
        endpoint: str,
        kind: RejectionKind,
        reason: str,
        **log_context: object,
    ) -> ValidationOutcome:
        await logger.awarning("webhook_endpoint_rejected", kind=kind.value, **log_context)
        return ValidationOutcome.rejected(endpoint, kind, reason)


async def validate_webhook_endpoint(
    endpoint: str,
    resolver: Resolver | None = None,
    timeout: float | None = None,
) -> str | None:
    """Validate a webhook endpoint URL for SSRF safety.

    Args:
        endpoint: The raw URL a user entered for a notification channel.
        resolver: DNS backend. Defaults to the system resolver.
        timeout: Seconds to wait for DNS. Defaults to DEFAULT_DNS_TIMEOUT_SECONDS.

    Returns:
        None if the endpoint is safe to persist and deliver to, otherwise a
        user-facing rejection reason.
    """
    validator = WebhookEndpointValidator(
        resolver=resolver,
        dns_timeout=timeout if timeout is not None else DEFAULT_DNS_TIMEOUT_SECONDS,
    )
    return await validator.validate(endpoint)


async def ensure_safe_endpoint(
    endpoint: str,
    validator: WebhookEndpointValidator | None = None,
) -> None:
    """Validate an endpoint and raise if it is unsafe.

    Intended for delivery code that re-checks the destination right before
    sending, since DNS answers can change after the endpoint was saved.

    Raises:
        UnsafeEndpointError: If the endpoint is rejected. The exception
            carries the full ValidationOutcome.
    """
    validator = validator if validator is not None else WebhookEndpointValidator()
    outcome = await validator.evaluate(endpoint)
    if not outcome.valid:
        raise UnsafeEndpointError(outcome)
