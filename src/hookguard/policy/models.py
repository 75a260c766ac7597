"""Pydantic models for webhook endpoint validation outcomes.

Defines the result type of the validator:
- Enum: RejectionKind (one member per rejection reason family)
- ValidationOutcome: either accepted, or rejected with a kind and a
  user-facing reason string
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, model_validator


class RejectionKind(str, enum.Enum):
    """Why an endpoint was rejected. The first failing check wins."""

    INVALID_URL = "invalid_url"
    UNSUPPORTED_PROTOCOL = "unsupported_protocol"
    DISALLOWED_PORT = "disallowed_port"
    BLOCKED_HOSTNAME = "blocked_hostname"
    PRIVATE_IP_LITERAL = "private_ip_literal"
    PRIVATE_IP_RESOLVED = "private_ip_resolved"
    DNS_RESOLUTION_FAILURE = "dns_resolution_failure"


class ValidationOutcome(BaseModel):
    """Output of WebhookEndpointValidator.evaluate().

    Exactly one of two shapes: ``valid=True`` with no kind/reason, or
    ``valid=False`` with both set.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    endpoint: str
    valid: bool
    kind: RejectionKind | None = None
    reason: str | None = None

    @model_validator(mode="after")
    def kind_and_reason_match_validity(self) -> ValidationOutcome:
        if self.valid and (self.kind is not None or self.reason is not None):
            raise ValueError("An accepted outcome cannot carry a rejection kind or reason")
        if not self.valid and (self.kind is None or not self.reason):
            raise ValueError("A rejected outcome requires both a kind and a reason")
        return self

    @classmethod
    def accepted(cls, endpoint: str) -> ValidationOutcome:
        return cls(endpoint=endpoint, valid=True)

    @classmethod
    def rejected(cls, endpoint: str, kind: RejectionKind, reason: str) -> ValidationOutcome:
        return cls(endpoint=endpoint, valid=False, kind=kind, reason=reason)
