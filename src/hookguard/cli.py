"""CLI entrypoint: Typer-based developer tooling.

Commands:
    hookguard check       Validate a webhook endpoint URL
    hookguard classify    Classify a single IP address
"""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer(
    name="hookguard",
    help="hookguard: SSRF safety checks for user-supplied webhook endpoints",
)


@app.command()
def check(
    endpoint: str = typer.Argument(help="Webhook URL to validate"),
    timeout: float | None = typer.Option(None, help="DNS timeout in seconds (default from settings)"),
) -> None:
    """Validate a webhook endpoint and print the outcome. Exits 1 if rejected."""
    from hookguard.config import get_settings
    from hookguard.log_config import configure_logging
    from hookguard.validator import WebhookEndpointValidator

    settings = get_settings()
    configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    if timeout is not None and timeout <= 0:
        typer.echo("Error: --timeout must be greater than 0", err=True)
        raise typer.Exit(code=2)

    validator = WebhookEndpointValidator(
        dns_timeout=timeout if timeout is not None else settings.dns_timeout_seconds,
    )
    outcome = asyncio.run(validator.evaluate(endpoint))

    if outcome.valid:
        typer.echo("OK")
        return

    typer.echo(f"REJECTED ({outcome.kind.value}): {outcome.reason}")
    raise typer.Exit(code=1)


@app.command()
def classify(
    address: str = typer.Argument(help="IPv4 or IPv6 address, zone ID allowed"),
) -> None:
    """Report whether an address is private/reserved and which range it falls in."""
    from hookguard.net.addresses import is_ip_literal, match_private_range

    if not is_ip_literal(address):
        typer.echo("not an IP address", err=True)
        raise typer.Exit(code=2)

    rule = match_private_range(address)
    if rule is None:
        typer.echo("public")
    else:
        typer.echo(f"private ({rule.name}, {rule})")


if __name__ == "__main__":
    app()
