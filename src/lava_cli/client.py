"""Lava payment API client with one method per endpoint."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any

import requests
from requests.exceptions import InvalidJSONError, RequestException

from lava_cli import validation
from lava_cli.errors import KIND_LOCAL, KIND_REMOTE, KIND_TRANSPORT, LavaError

logger = logging.getLogger(__name__)

BASE_URL = "https://api.lava.ru"


def _render_field(value: Any) -> str:
    """Render an error payload field for the message; non-str/int values as JSON."""
    if isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


class LavaClient:
    """Client for the Lava wallet, transfer and invoice API.

    Every public method maps to exactly one remote endpoint and returns the
    decoded JSON response unchanged.  Any failure, whether reported by Lava,
    by the network layer or while decoding the response, is raised as a
    :class:`~lava_cli.errors.LavaError`.

    Optional parameters left at ``None`` are never sent to the API.

    Args:
        api_key: Lava API key.  Sent verbatim in the ``Authorization`` header.
        timeout: Optional request timeout in seconds.  ``None`` (the default)
            leaves the transport default in place.

    Example::

        client = LavaClient("YOUR-API-KEY")
        wallets = client.list_wallets()
    """

    def __init__(self, api_key: str, timeout: float | None = None) -> None:
        self._api_key = api_key
        self._base_url = BASE_URL
        self._timeout = timeout
        self._session = requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def __repr__(self) -> str:
        return f"LavaClient(base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        """Build a full URL from a relative API path."""
        return f"{self._base_url}{path}"

    @staticmethod
    def _strip_absent(body: dict[str, Any] | None) -> dict[str, Any]:
        """Return a copy of *body* without the entries left unset."""
        return {k: v for k, v in (body or {}).items() if v is not None}

    def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute one authenticated call and normalise the result.

        Args:
            method: ``"GET"`` or ``"POST"``.
            path: Relative API path (e.g. ``"/invoice/create"``).
            body: Request fields.  ``None`` values are dropped.  GET requests
                never carry a body.

        Returns:
            The decoded JSON response, whatever its shape.

        Raises:
            LavaError: When Lava answers with ``{"status": "error"}``, when
                the HTTP call fails, or when the response is not valid JSON.
        """
        url = self._url(path)
        payload = self._strip_absent(body)
        headers = {"Authorization": self._api_key}

        logger.debug("Lava request: %s %s fields=%s", method, path, sorted(payload))
        try:
            response = self._session.request(
                method,
                url,
                json=payload if method != "GET" else None,
                headers=headers,
                timeout=self._timeout,
            )
            result = response.json()
        except InvalidJSONError as exc:
            logger.warning("Lava %s %s could not encode or decode JSON: %s", method, path, exc)
            raise LavaError(str(exc), kind=KIND_LOCAL) from exc
        except RequestException as exc:
            logger.warning("Lava %s %s failed: %s", method, path, exc)
            raise LavaError(str(exc), kind=KIND_TRANSPORT) from exc
        except (TypeError, ValueError) as exc:
            # Body could not be JSON-encoded.
            raise LavaError(str(exc), kind=KIND_LOCAL) from exc

        if isinstance(result, dict) and result.get("status") == "error":
            code = result.get("code")
            message = f"{_render_field(code)}: {_render_field(result.get('message'))}"
            logger.warning("Lava %s %s rejected: %s", method, path, message)
            raise LavaError(message, kind=KIND_REMOTE, code=code)

        return result

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------

    def ping(self) -> Any:
        """Check that the API is reachable and the key is accepted.

        Calls ``GET /test/ping``.
        """
        return self._request("GET", "/test/ping")

    # ------------------------------------------------------------------
    # Wallets
    # ------------------------------------------------------------------

    def list_wallets(self) -> Any:
        """List the wallets of the account.

        Calls ``GET /wallet/list``.
        """
        return self._request("GET", "/wallet/list")

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------

    def create_withdrawal(
        self,
        account: str,
        amount: float,
        service: str,
        wallet_to: str,
        *,
        order_id: str | None = None,
        hook_url: str | None = None,
        subtract: bool | None = None,
        comment: str | None = None,
    ) -> Any:
        """Withdraw funds from a wallet to an external account.

        Calls ``POST /withdraw/create``.

        Args:
            account: Wallet number to withdraw from.
            amount: Amount to withdraw.
            service: Withdrawal service identifier (e.g. ``"card_payoff"``).
            wallet_to: Destination account or card number.
            order_id: Merchant-side order identifier.
            hook_url: URL that receives the withdrawal status webhook.
            subtract: Whether the commission is taken from the amount.
                Sent as ``substract``, the field name this endpoint expects.
            comment: Free-form comment.

        Returns:
            The decoded response with the withdrawal details.
        """
        validation.require_str("account", account)
        validation.require_amount("amount", amount)
        validation.require_str("service", service)
        validation.require_str("wallet_to", wallet_to)
        validation.optional_str("order_id", order_id)
        validation.optional_url("hook_url", hook_url)
        validation.optional_bool("subtract", subtract)
        validation.optional_str("comment", comment)
        return self._request(
            "POST",
            "/withdraw/create",
            {
                "account": account,
                "amount": amount,
                "service": service,
                "wallet_to": wallet_to,
                "order_id": order_id,
                "hook_url": hook_url,
                "substract": subtract,
                "comment": comment,
            },
        )

    def get_withdrawal(self, id: str) -> Any:
        """Get a withdrawal by its Lava identifier.

        Calls ``POST /withdraw/info``.
        """
        validation.require_str("id", id)
        return self._request("POST", "/withdraw/info", {"id": id})

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def create_transfer(
        self,
        account_from: str,
        account_to: str,
        amount: float,
        *,
        subtract: bool | None = None,
        comment: str | None = None,
    ) -> Any:
        """Transfer funds between two Lava wallets.

        Calls ``POST /transfer/create``.

        Args:
            account_from: Source wallet number.
            account_to: Destination wallet number.
            amount: Amount to transfer.
            subtract: Whether the commission is taken from the amount.
            comment: Free-form comment.
        """
        validation.require_str("account_from", account_from)
        validation.require_str("account_to", account_to)
        validation.require_amount("amount", amount)
        validation.optional_bool("subtract", subtract)
        validation.optional_str("comment", comment)
        return self._request(
            "POST",
            "/transfer/create",
            {
                "account_from": account_from,
                "account_to": account_to,
                "amount": amount,
                "subtract": subtract,
                "comment": comment,
            },
        )

    def get_transfer(self, id: str) -> Any:
        """Get a transfer by its Lava identifier.

        Calls ``POST /transfer/info``.
        """
        validation.require_str("id", id)
        return self._request("POST", "/transfer/info", {"id": id})

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        *,
        transfer_type: str | None = None,
        account: str | None = None,
        period_start: date | str | None = None,
        period_end: date | str | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> Any:
        """List account transactions, optionally filtered.

        Calls ``POST /transactions/list``.

        Args:
            transfer_type: Transaction type filter (e.g. ``"withdraw"``).
            account: Restrict to one wallet.
            period_start: Lower bound of the period.  Dates and datetimes
                are sent as UTC ISO-8601 timestamps.
            period_end: Upper bound of the period.
            offset: Number of records to skip.
            limit: Maximum number of records to return.
        """
        validation.optional_str("transfer_type", transfer_type)
        validation.optional_str("account", account)
        validation.optional_period("period_start", period_start)
        validation.optional_period("period_end", period_end)
        validation.check_period_order(period_start, period_end)
        validation.optional_int("offset", offset, minimum=0)
        validation.optional_int("limit", limit, minimum=1)
        return self._request(
            "POST",
            "/transactions/list",
            {
                "transfer_type": transfer_type,
                "account": account,
                "period_start": validation.format_timestamp(period_start),
                "period_end": validation.format_timestamp(period_end),
                "offset": offset,
                "limit": limit,
            },
        )

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def create_invoice(
        self,
        wallet_to: str,
        sum: float,
        *,
        order_id: str | None = None,
        hook_url: str | None = None,
        success_url: str | None = None,
        fail_url: str | None = None,
        expire: int | None = None,
        subtract: bool | None = None,
        custom_fields: list[list[str]] | None = None,
        comment: str | None = None,
        merchant_id: str | None = None,
        merchant_name: str | None = None,
    ) -> Any:
        """Create a payment invoice.

        Calls ``POST /invoice/create``.

        Args:
            wallet_to: Wallet that receives the payment.
            sum: Invoice amount.
            order_id: Merchant-side order identifier.
            hook_url: URL that receives the payment webhook.
            success_url: Redirect target after a successful payment.
            fail_url: Redirect target after a failed payment.
            expire: Invoice lifetime in minutes.
            subtract: Whether the commission is charged to the payer.
            custom_fields: Extra key/value rows attached to the invoice.
            comment: Free-form comment shown to the payer.
            merchant_id: Merchant identifier.
            merchant_name: Merchant display name.
        """
        validation.require_str("wallet_to", wallet_to)
        validation.require_amount("sum", sum)
        validation.optional_str("order_id", order_id)
        validation.optional_url("hook_url", hook_url)
        validation.optional_url("success_url", success_url)
        validation.optional_url("fail_url", fail_url)
        validation.optional_int("expire", expire, minimum=1)
        validation.optional_bool("subtract", subtract)
        validation.optional_custom_fields("custom_fields", custom_fields)
        validation.optional_str("comment", comment)
        validation.optional_str("merchant_id", merchant_id)
        validation.optional_str("merchant_name", merchant_name)
        return self._request(
            "POST",
            "/invoice/create",
            {
                "wallet_to": wallet_to,
                "sum": sum,
                "order_id": order_id,
                "hook_url": hook_url,
                "success_url": success_url,
                "fail_url": fail_url,
                "expire": expire,
                "subtract": subtract,
                "custom_fields": [list(row) for row in custom_fields] if custom_fields is not None else None,
                "comment": comment,
                "merchant_id": merchant_id,
                "merchant_name": merchant_name,
            },
        )

    def get_invoice(
        self,
        id: str | None = None,
        *,
        order_id: str | None = None,
    ) -> Any:
        """Get an invoice by Lava identifier or by merchant order id.

        Calls ``POST /invoice/info``.  Lava expects at least one of the two
        identifiers; the client leaves that check to the API.
        """
        validation.optional_str("id", id)
        validation.optional_str("order_id", order_id)
        return self._request("POST", "/invoice/info", {"id": id, "order_id": order_id})

    def set_invoice_webhook(self, url: str) -> Any:
        """Set the default webhook URL for invoice notifications.

        Calls ``POST /invoice/set-webhook``.
        """
        validation.require_url("url", url)
        return self._request("POST", "/invoice/set-webhook", {"url": url})

    def generate_invoice_secret_key(self) -> Any:
        """Generate a new secret key used to sign invoice webhooks.

        Calls ``GET /invoice/generate-secret-key``.
        """
        return self._request("GET", "/invoice/generate-secret-key")
