"""Scheme and port allowlist for webhook destinations.

Only http and https are accepted, each on its conventional port. An
explicit port equal to the default (``http://host:80/``) is fine; any
other port is rejected even when it is the other scheme's default.
"""

from __future__ import annotations

# Only these ports are allowed for webhook delivery
DEFAULT_PORTS: dict[str, int] = {
    "http": 80,
    "https": 443,
}

UNSUPPORTED_PROTOCOL_MESSAGE = "Webhook URL must use http or https protocol"
DISALLOWED_PORT_MESSAGE = (
    "Webhook URL port {port} is not allowed; only 80 (http) and 443 (https)"
)


def is_supported_scheme(scheme: str) -> bool:
    return scheme.lower() in DEFAULT_PORTS


def effective_port(scheme: str, explicit_port: int | None) -> int:
    """Return the explicit port if given, else the scheme's default.

    Raises:
        KeyError: If the scheme is not http or https.
    """
    if explicit_port is not None:
        return explicit_port
    return DEFAULT_PORTS[scheme.lower()]


def check_protocol(scheme: str) -> str | None:
    if not is_supported_scheme(scheme):
        return UNSUPPORTED_PROTOCOL_MESSAGE
    return None


def check_port(scheme: str, explicit_port: int | None) -> str | None:
    """Reject any effective port other than the scheme's default.

    Assumes the scheme already passed check_protocol().
    """
    port = effective_port(scheme, explicit_port)
    if port != DEFAULT_PORTS[scheme.lower()]:
        return DISALLOWED_PORT_MESSAGE.format(port=port)
    return None


def check_protocol_and_port(scheme: str, explicit_port: int | None) -> str | None:
    """Run the protocol check, then the port check.

    Returns:
        None if both pass, otherwise the first rejection message.
    """
    return check_protocol(scheme) or check_port(scheme, explicit_port)
