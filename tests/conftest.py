"""Shared fixtures for lava-cli test suite."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from lava_cli.client import BASE_URL, LavaClient


# ---------------------------------------------------------------------------
# Constants reused across tests
# ---------------------------------------------------------------------------

TEST_API_KEY = "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.test-key"


def url(path: str) -> str:
    return f"{BASE_URL}{path}"


def sent_body(call: Any) -> Dict[str, Any]:
    """Decode the JSON body of a recorded :mod:`responses` call."""
    return json.loads(call.request.body)


# ---------------------------------------------------------------------------
# Client fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def client() -> LavaClient:
    """Return a LavaClient pre-configured with the test API key."""
    return LavaClient(TEST_API_KEY)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Keep tests independent of the developer's environment and home dir."""
    for var in ("LAVA_API_KEY", "LAVA_TIMEOUT", "LAVA_LOG_DIR", "LAVA_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))


# ---------------------------------------------------------------------------
# Mock API response payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def wallet_list_response() -> List[Dict[str, Any]]:
    """Lava /wallet/list response for an account with two wallets."""
    return [
        {"account": "R10155257", "currency": "RUB", "balance": "1250.50"},
        {"account": "U10155258", "currency": "USD", "balance": "0.00"},
    ]


@pytest.fixture()
def invoice_response() -> Dict[str, Any]:
    """Lava /invoice/create success response."""
    return {
        "status": "success",
        "id": "0ad5a4b8-8d59-4c5e-9f6e-6c4b0c0f4a10",
        "url": "https://acquiring.lava.ru/invoice/0ad5a4b8",
        "expire": 1706700000,
        "sum": "150.00",
        "success_url": None,
        "fail_url": None,
        "hook_url": None,
        "custom_fields": None,
        "merchant_name": None,
        "merchant_id": None,
    }


@pytest.fixture()
def transactions_response() -> List[Dict[str, Any]]:
    """Lava /transactions/list response with one withdrawal."""
    return [
        {
            "id": "a7b1c2d3",
            "created_at": 1706695200,
            "created_date": "2024-01-31 10:00:00",
            "amount": "500.00",
            "status": "success",
            "transfer_type": "withdraw",
            "comission": "12.50",
            "currency": "RUB",
            "account": "R10155257",
        }
    ]


@pytest.fixture()
def error_response() -> Dict[str, Any]:
    """Lava business error payload."""
    return {"status": "error", "code": 42, "message": "bad account"}
