"""Lava CLI - Agent-friendly command-line interface for the Lava payment API.

Usage:
    lava-cli ping [--json]
    lava-cli wallets [--json]
    lava-cli withdraw create <account> <amount> <service> <wallet_to> [options] [--json]
    lava-cli withdraw info <id> [--json]
    lava-cli transfer create <account_from> <account_to> <amount> [options] [--json]
    lava-cli transfer info <id> [--json]
    lava-cli transactions [--type T] [--account A] [--from D] [--to D] [--offset N] [--limit N] [--json]
    lava-cli invoice create <wallet_to> <sum> [options] [--json]
    lava-cli invoice info [--id ID] [--order-id ID] [--json]
    lava-cli invoice set-webhook <url> [--json]
    lava-cli invoice secret-key [--json]
    lava-cli init
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any, Callable

import click

from lava_cli.client import LavaClient
from lava_cli.config import init_config, load_config, validate_config
from lava_cli.errors import LavaError
from lava_cli.exit_codes import CONFIG_ERROR, SUCCESS, exit_code_for
from lava_cli.log_config import configure_logging
from lava_cli.output import format_response, format_transactions, format_wallets

logger = logging.getLogger(__name__)

_json_option = click.option("--json", "json_mode", is_flag=True, default=False, help="Output as JSON.")

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _emit(output: str, exit_code: int = SUCCESS) -> None:
    """Print output and exit with the given code."""
    click.echo(output)
    sys.exit(exit_code)


def _emit_error(
    error: dict[str, Any],
    json_mode: bool,
    exit_code: int | None = None,
) -> None:
    """Emit a structured error and exit."""
    if exit_code is None:
        exit_code = exit_code_for(error.get("kind", ""))
    output = format_response("error", error=error, json_mode=json_mode)
    _emit(output, exit_code)


def _make_client(ctx: click.Context, json_mode: bool) -> LavaClient:
    """Build a configured client, validating config first."""
    try:
        config = load_config(api_key=ctx.obj["api_key"], timeout=ctx.obj["timeout"])
    except ValueError as exc:
        _emit_error({"code": None, "kind": "config", "message": f"Configuration error: {exc}"}, json_mode)
    valid, err = validate_config(config)
    if not valid:
        _emit_error(
            {"code": None, "kind": "config", "message": f"Configuration error: {err}"},
            json_mode,
            CONFIG_ERROR,
        )
    return LavaClient(
        api_key=str(config["api_key"]),
        timeout=config["timeout"],  # type: ignore[arg-type]
    )


def _call(
    ctx: click.Context,
    json_mode: bool,
    operation: Callable[[LavaClient], Any],
    formatter: Callable[..., str] | None = None,
) -> None:
    """Run *operation* against a fresh client and emit its result.

    A :class:`LavaError` is turned into an error envelope and the exit code
    matching its kind.
    """
    client = _make_client(ctx, json_mode)
    try:
        result = operation(client)
    except LavaError as exc:
        logger.info("Command failed (%s): %s", exc.kind, exc)
        _emit_error(exc.to_dict(), json_mode)
    if formatter is not None:
        output = formatter(result, json_mode=json_mode)
    else:
        output = format_response("success", data=result, json_mode=json_mode)
    _emit(output, SUCCESS)


def _parse_custom_fields(
    ctx: click.Context,
    param: click.Parameter,
    value: tuple[str, ...],
) -> list[list[str]] | None:
    """Turn repeated ``--field NAME=VALUE`` options into Lava's row list."""
    if not value:
        return None
    rows: list[list[str]] = []
    for item in value:
        name, sep, field_value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", ctx=ctx, param=param)
        rows.append([name, field_value])
    return rows


# ------------------------------------------------------------------
# CLI group
# ------------------------------------------------------------------


@click.group()
@click.option("--api-key", envvar="LAVA_API_KEY", default=None, help="Lava API key.")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds (or LAVA_TIMEOUT).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Write a scrubbed log file (~/.lava-cli/logs) at this level.",
)
@click.version_option(package_name="lava-cli")
@click.pass_context
def cli(ctx: click.Context, api_key: str | None, timeout: float | None, log_level: str | None) -> None:
    """Agent-friendly CLI for the Lava payment API."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["timeout"] = timeout
    if log_level:
        configure_logging(level=log_level)


# ------------------------------------------------------------------
# ping / wallets
# ------------------------------------------------------------------


@cli.command()
@_json_option
@click.pass_context
def ping(ctx: click.Context, json_mode: bool) -> None:
    """Check that the API is reachable and the key is accepted."""
    _call(ctx, json_mode, lambda c: c.ping())


@cli.command()
@_json_option
@click.pass_context
def wallets(ctx: click.Context, json_mode: bool) -> None:
    """List wallets and balances."""
    _call(ctx, json_mode, lambda c: c.list_wallets(), format_wallets)


# ------------------------------------------------------------------
# withdraw
# ------------------------------------------------------------------


@cli.group()
def withdraw() -> None:
    """Create and inspect withdrawals."""


@withdraw.command(name="create")
@click.argument("account")
@click.argument("amount", type=float)
@click.argument("service")
@click.argument("wallet_to")
@click.option("--order-id", default=None, help="Merchant order identifier.")
@click.option("--hook-url", default=None, help="Webhook URL for status updates.")
@click.option("--subtract/--no-subtract", default=None, help="Take the commission from the amount.")
@click.option("--comment", default=None, help="Free-form comment.")
@_json_option
@click.pass_context
def withdraw_create(
    ctx: click.Context,
    account: str,
    amount: float,
    service: str,
    wallet_to: str,
    order_id: str | None,
    hook_url: str | None,
    subtract: bool | None,
    comment: str | None,
    json_mode: bool,
) -> None:
    """Withdraw AMOUNT from ACCOUNT to WALLET_TO through SERVICE."""
    _call(
        ctx,
        json_mode,
        lambda c: c.create_withdrawal(
            account,
            amount,
            service,
            wallet_to,
            order_id=order_id,
            hook_url=hook_url,
            subtract=subtract,
            comment=comment,
        ),
    )


@withdraw.command(name="info")
@click.argument("withdrawal_id")
@_json_option
@click.pass_context
def withdraw_info(ctx: click.Context, withdrawal_id: str, json_mode: bool) -> None:
    """Show a withdrawal by its Lava id."""
    _call(ctx, json_mode, lambda c: c.get_withdrawal(withdrawal_id))


# ------------------------------------------------------------------
# transfer
# ------------------------------------------------------------------


@cli.group()
def transfer() -> None:
    """Create and inspect wallet-to-wallet transfers."""


@transfer.command(name="create")
@click.argument("account_from")
@click.argument("account_to")
@click.argument("amount", type=float)
@click.option("--subtract/--no-subtract", default=None, help="Take the commission from the amount.")
@click.option("--comment", default=None, help="Free-form comment.")
@_json_option
@click.pass_context
def transfer_create(
    ctx: click.Context,
    account_from: str,
    account_to: str,
    amount: float,
    subtract: bool | None,
    comment: str | None,
    json_mode: bool,
) -> None:
    """Transfer AMOUNT from ACCOUNT_FROM to ACCOUNT_TO."""
    _call(
        ctx,
        json_mode,
        lambda c: c.create_transfer(account_from, account_to, amount, subtract=subtract, comment=comment),
    )


@transfer.command(name="info")
@click.argument("transfer_id")
@_json_option
@click.pass_context
def transfer_info(ctx: click.Context, transfer_id: str, json_mode: bool) -> None:
    """Show a transfer by its Lava id."""
    _call(ctx, json_mode, lambda c: c.get_transfer(transfer_id))


# ------------------------------------------------------------------
# transactions
# ------------------------------------------------------------------


@cli.command()
@click.option("--type", "transfer_type", default=None, help="Transaction type filter (e.g. withdraw).")
@click.option("--account", default=None, help="Restrict to one wallet.")
@click.option("--from", "period_start", type=click.DateTime(), default=None, help="Period start (UTC).")
@click.option("--to", "period_end", type=click.DateTime(), default=None, help="Period end (UTC).")
@click.option("--offset", type=int, default=None, help="Records to skip.")
@click.option("--limit", type=int, default=None, help="Maximum records to return.")
@_json_option
@click.pass_context
def transactions(
    ctx: click.Context,
    transfer_type: str | None,
    account: str | None,
    period_start: datetime | None,
    period_end: datetime | None,
    offset: int | None,
    limit: int | None,
    json_mode: bool,
) -> None:
    """List account transactions."""
    _call(
        ctx,
        json_mode,
        lambda c: c.list_transactions(
            transfer_type=transfer_type,
            account=account,
            period_start=period_start,
            period_end=period_end,
            offset=offset,
            limit=limit,
        ),
        format_transactions,
    )


# ------------------------------------------------------------------
# invoice
# ------------------------------------------------------------------


@cli.group()
def invoice() -> None:
    """Create and inspect invoices, manage invoice webhooks."""


@invoice.command(name="create")
@click.argument("wallet_to")
@click.argument("amount", type=float)
@click.option("--order-id", default=None, help="Merchant order identifier.")
@click.option("--hook-url", default=None, help="Webhook URL for payment notifications.")
@click.option("--success-url", default=None, help="Redirect URL after payment.")
@click.option("--fail-url", default=None, help="Redirect URL after a failed payment.")
@click.option("--expire", type=int, default=None, help="Invoice lifetime in minutes.")
@click.option("--subtract/--no-subtract", default=None, help="Charge the commission to the payer.")
@click.option(
    "--field",
    "custom_fields",
    multiple=True,
    callback=_parse_custom_fields,
    help="Custom field as NAME=VALUE. Repeatable.",
)
@click.option("--comment", default=None, help="Comment shown to the payer.")
@click.option("--merchant-id", default=None, help="Merchant identifier.")
@click.option("--merchant-name", default=None, help="Merchant display name.")
@_json_option
@click.pass_context
def invoice_create(
    ctx: click.Context,
    wallet_to: str,
    amount: float,
    order_id: str | None,
    hook_url: str | None,
    success_url: str | None,
    fail_url: str | None,
    expire: int | None,
    subtract: bool | None,
    custom_fields: list[list[str]] | None,
    comment: str | None,
    merchant_id: str | None,
    merchant_name: str | None,
    json_mode: bool,
) -> None:
    """Create an invoice for AMOUNT payable to WALLET_TO."""
    _call(
        ctx,
        json_mode,
        lambda c: c.create_invoice(
            wallet_to,
            amount,
            order_id=order_id,
            hook_url=hook_url,
            success_url=success_url,
            fail_url=fail_url,
            expire=expire,
            subtract=subtract,
            custom_fields=custom_fields,
            comment=comment,
            merchant_id=merchant_id,
            merchant_name=merchant_name,
        ),
    )


@invoice.command(name="info")
@click.option("--id", "invoice_id", default=None, help="Lava invoice id.")
@click.option("--order-id", default=None, help="Merchant order identifier.")
@_json_option
@click.pass_context
def invoice_info(ctx: click.Context, invoice_id: str | None, order_id: str | None, json_mode: bool) -> None:
    """Show an invoice by Lava id or merchant order id."""
    _call(ctx, json_mode, lambda c: c.get_invoice(invoice_id, order_id=order_id))


@invoice.command(name="set-webhook")
@click.argument("url")
@_json_option
@click.pass_context
def invoice_set_webhook(ctx: click.Context, url: str, json_mode: bool) -> None:
    """Set the default webhook URL for invoice notifications."""
    _call(ctx, json_mode, lambda c: c.set_invoice_webhook(url))


@invoice.command(name="secret-key")
@_json_option
@click.pass_context
def invoice_secret_key(ctx: click.Context, json_mode: bool) -> None:
    """Generate a new secret key for webhook signatures."""
    _call(ctx, json_mode, lambda c: c.generate_invoice_secret_key())


# ------------------------------------------------------------------
# init
# ------------------------------------------------------------------


@cli.command()
@click.option("--api-key", prompt="Lava API key", hide_input=True, help="Lava API key.")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds.")
def init(api_key: str, timeout: float | None) -> None:
    """Initialize configuration file (~/.lava-cli/config.yaml)."""
    path = init_config(api_key, timeout=timeout)
    click.echo(f"Configuration saved to {path}")


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

if __name__ == "__main__":
    cli()
