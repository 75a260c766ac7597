"""Notification channel settings and their endpoint validation.

Channels are stored per user or project as a mapping of channel name to
``{isEnabled, endpoint, minPeriod}``. Only some channels carry an outbound
HTTP URL as their endpoint; those are the ones a user could aim at an
internal service, so they go through the webhook endpoint validator before
the configuration is saved.
"""

from __future__ import annotations

import asyncio

import structlog
from pydantic import BaseModel, ConfigDict, Field

from hookguard.validator import WebhookEndpointValidator

logger = structlog.get_logger()

# Channels whose endpoint is a URL the server will POST to
URL_CHANNELS: tuple[str, ...] = ("slack", "loop", "webhook")


class NotificationChannelSettings(BaseModel):
    """Settings of a single channel."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    is_enabled: bool = Field(alias="isEnabled")
    endpoint: str
    # Minimal pause between two notifications, in seconds
    min_period: int = Field(default=60, ge=0, alias="minPeriod")


class NotificationChannels(BaseModel):
    """All channels a user or project can configure. Every channel is optional."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: NotificationChannelSettings | None = None
    slack: NotificationChannelSettings | None = None
    loop: NotificationChannelSettings | None = None
    telegram: NotificationChannelSettings | None = None
    web_push: NotificationChannelSettings | None = Field(default=None, alias="webPush")
    desktop_push: NotificationChannelSettings | None = Field(default=None, alias="desktopPush")
    webhook: NotificationChannelSettings | None = None

    def url_channels(self) -> dict[str, NotificationChannelSettings]:
        """Return the configured channels whose endpoint is an outbound URL."""
        configured: dict[str, NotificationChannelSettings] = {}
        for name in URL_CHANNELS:
            settings = getattr(self, name)
            if settings is not None:
                configured[name] = settings
        return configured


async def validate_notification_channels(
    channels: NotificationChannels,
    validator: WebhookEndpointValidator | None = None,
) -> dict[str, str]:
    """Validate every URL endpoint in a channel configuration.

    Disabled channels are validated too: a saved endpoint can be re-enabled
    later without passing through validation again.

    Args:
        channels: The configuration a user is trying to save.
        validator: Validator to use. Defaults to one backed by the system resolver.

    Returns:
        Mapping of channel name to rejection reason. Empty if every
        endpoint is acceptable.
    """
    validator = validator if validator is not None else WebhookEndpointValidator()
    to_check = channels.url_channels()

    reasons = await asyncio.gather(
        *(validator.validate(settings.endpoint) for settings in to_check.values())
    )

    errors = {
        name: reason
        for name, reason in zip(to_check, reasons)
        if reason is not None
    }

    if errors:
        await logger.ainfo(
            "notification_channels_rejected",
            channels=sorted(errors),
        )
    return errors
