"""hookguard: SSRF protection for user-supplied webhook endpoints."""

from hookguard.net.addresses import is_private_address
from hookguard.net.resolver import ResolutionError, Resolver, StaticResolver, SystemResolver
from hookguard.policy.models import RejectionKind, ValidationOutcome
from hookguard.validator import (
    UnsafeEndpointError,
    WebhookEndpointValidator,
    ensure_safe_endpoint,
    validate_webhook_endpoint,
)

__version__ = "0.1.0"

__all__ = [
    "RejectionKind",
    "ResolutionError",
    "Resolver",
    "StaticResolver",
    "SystemResolver",
    "UnsafeEndpointError",
    "ValidationOutcome",
    "WebhookEndpointValidator",
    "ensure_safe_endpoint",
    "is_private_address",
    "validate_webhook_endpoint",
]
