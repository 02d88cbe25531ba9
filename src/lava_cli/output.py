"""Output formatting for lava-cli.

Provides both JSON (machine-parseable) and human-readable (Rich) output
for all CLI responses.
"""

from __future__ import annotations

import json
from io import StringIO
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_amount(value: Any, currency: str | None = None) -> str:
    """Format an amount like ``'1,250.50 RUB'``; unparseable values pass through."""
    if value is None or value == "":
        return "N/A"
    try:
        text = f"{float(value):,.2f}"
    except (TypeError, ValueError):
        text = str(value)
    return f"{text} {currency}" if currency else text


def _render_to_string(renderable: Any) -> str:
    """Render a Rich object to a plain string (with ANSI codes)."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=True, width=100)
    console.print(renderable)
    return buf.getvalue().rstrip("\n")


def _unwrap(payload: Any) -> Any:
    """Return the ``data`` member of an ``{"status": ..., "data": ...}`` payload."""
    if isinstance(payload, dict) and "data" in payload and "status" in payload:
        return payload["data"]
    return payload


# ---------------------------------------------------------------------------
# format_response
# ---------------------------------------------------------------------------


def format_response(
    status: str,
    data: Any = None,
    error: dict[str, Any] | None = None,
    json_mode: bool = False,
) -> str:
    """Build a generic response envelope.

    Parameters
    ----------
    status:
        ``"success"`` or ``"error"``.
    data:
        The decoded API payload (used when *status* is ``"success"``).
    error:
        Error detail dict with keys ``code``, ``kind`` and ``message``.
    json_mode:
        When *True* return a JSON string; otherwise a Rich-formatted string.
    """
    if json_mode:
        envelope: dict[str, Any] = {
            "status": status,
            "data": data,
            "error": error,
        }
        return json.dumps(envelope, indent=2, sort_keys=False, ensure_ascii=False)

    # --- human-readable --------------------------------------------------
    if status == "error" and error:
        kind = error.get("kind") or "error"
        message = error.get("message", "An unknown error occurred.")
        text = Text()
        text.append("Error", style="bold red")
        text.append(f" [{kind}]: ", style="red")
        text.append(str(message))
        return _render_to_string(Panel(text, title="Error", border_style="red"))

    data = _unwrap(data)
    if isinstance(data, dict) and data:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="bold cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value, ensure_ascii=False)
            table.add_row(Text(str(key)), Text(str(value)))
        return _render_to_string(Panel(table, title="Response", border_style="green"))

    if isinstance(data, list):
        return format_records(data, title="Response")

    if data is not None:
        return str(data)

    return f"Status: {status}"


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def format_records(
    records: list[Any],
    title: str,
    columns: list[str] | None = None,
) -> str:
    """Render a list of API records as a Rich table.

    When *columns* is omitted, the keys of the first record are used.
    Non-dict records are shown one per row.
    """
    if not records:
        return f"{title}: nothing found."

    if not all(isinstance(r, dict) for r in records):
        return "\n".join(str(r) for r in records)

    columns = columns or list(records[0].keys())
    table = Table(title=title, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*(Text("" if record.get(c) is None else str(record.get(c))) for c in columns))
    return _render_to_string(table)


def format_wallets(payload: Any, json_mode: bool = False) -> str:
    """Format the ``/wallet/list`` response."""
    if json_mode:
        return format_response("success", data=payload, json_mode=True)

    wallets = _unwrap(payload)
    if not isinstance(wallets, list):
        return format_response("success", data=payload)

    rows = []
    for wallet in wallets:
        if not isinstance(wallet, dict):
            rows.append(wallet)
            continue
        rows.append(
            {
                "account": wallet.get("account"),
                "currency": wallet.get("currency"),
                "balance": format_amount(wallet.get("balance")),
            }
        )
    return format_records(rows, title="Wallets")


def format_transactions(payload: Any, json_mode: bool = False) -> str:
    """Format the ``/transactions/list`` response."""
    if json_mode:
        return format_response("success", data=payload, json_mode=True)

    transactions = _unwrap(payload)
    if not isinstance(transactions, list):
        return format_response("success", data=payload)

    preferred = ["id", "created_at", "transfer_type", "account", "amount", "currency", "status"]
    columns = None
    if transactions and isinstance(transactions[0], dict):
        present = [c for c in preferred if c in transactions[0]]
        columns = present or None
    return format_records(transactions, title="Transactions", columns=columns)
