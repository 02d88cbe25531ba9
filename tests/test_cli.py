"""Tests for lava_cli.cli."""

from __future__ import annotations

import json
import stat
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
import responses
import yaml
from click.testing import CliRunner
from requests.exceptions import ConnectionError

from lava_cli.cli import cli
from lava_cli.config import get_default_config_path
from lava_cli.exit_codes import CONFIG_ERROR, LOCAL_ERROR, REMOTE_ERROR, SUCCESS, TRANSPORT_ERROR

from .conftest import TEST_API_KEY, sent_body, url


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, *args: str) -> Any:
    return runner.invoke(cli, ["--api-key", TEST_API_KEY, *args])


# ===================================================================
# Configuration
# ===================================================================


class TestConfiguration:
    def test_missing_api_key(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["ping", "--json"])
        assert result.exit_code == CONFIG_ERROR
        out = json.loads(result.output)
        assert out["status"] == "error"
        assert out["error"]["kind"] == "config"
        assert "api_key" in out["error"]["message"]

    @responses.activate
    def test_api_key_from_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAVA_API_KEY", "env-key")
        responses.add(responses.GET, url("/test/ping"), json={"status": True})
        result = runner.invoke(cli, ["ping", "--json"])
        assert result.exit_code == SUCCESS
        assert responses.calls[0].request.headers["Authorization"] == "env-key"

    @responses.activate
    def test_api_key_from_config_file(self, runner: CliRunner) -> None:
        path = get_default_config_path()
        path.parent.mkdir(parents=True)
        path.write_text(yaml.safe_dump({"api_key": "file-key"}), encoding="utf-8")
        responses.add(responses.GET, url("/test/ping"), json={"status": True})
        result = runner.invoke(cli, ["ping", "--json"])
        assert result.exit_code == SUCCESS
        assert responses.calls[0].request.headers["Authorization"] == "file-key"

    def test_bad_timeout_in_config_file(self, runner: CliRunner) -> None:
        path = get_default_config_path()
        path.parent.mkdir(parents=True)
        path.write_text(yaml.safe_dump({"api_key": "k", "timeout": "later"}), encoding="utf-8")
        result = runner.invoke(cli, ["ping", "--json"])
        assert result.exit_code == CONFIG_ERROR
        assert json.loads(result.output)["error"]["kind"] == "config"

    def test_bad_timeout_in_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAVA_TIMEOUT", "later")
        result = runner.invoke(cli, ["--api-key", "k", "ping", "--json"])
        assert result.exit_code == CONFIG_ERROR
        out = json.loads(result.output)
        assert out["error"]["kind"] == "config"
        assert "later" in out["error"]["message"]

    @responses.activate
    def test_timeout_from_env(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAVA_TIMEOUT", "7")
        responses.add(responses.GET, url("/test/ping"), json={"status": True})
        result = runner.invoke(cli, ["--api-key", "k", "ping", "--json"])
        assert result.exit_code == SUCCESS

    def test_init_writes_config(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["init", "--api-key", "new-key", "--timeout", "10"])
        assert result.exit_code == SUCCESS
        path = get_default_config_path()
        assert str(path) in result.output
        assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"api_key": "new-key", "timeout": 10.0}

    def test_init_prompts_for_key(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["init"], input="prompted-key\n")
        assert result.exit_code == SUCCESS
        data = yaml.safe_load(get_default_config_path().read_text(encoding="utf-8"))
        assert data["api_key"] == "prompted-key"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
    def test_init_file_is_owner_only(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["init", "--api-key", "secret-pay-key"])
        assert result.exit_code == SUCCESS
        path = get_default_config_path()
        assert stat.S_IMODE(path.stat().st_mode) & 0o077 == 0
        assert stat.S_IMODE(path.parent.stat().st_mode) & 0o077 == 0


# ===================================================================
# Read commands
# ===================================================================


class TestReadCommands:
    @responses.activate
    def test_ping_json(self, runner: CliRunner) -> None:
        responses.add(responses.GET, url("/test/ping"), json={"status": True})
        result = _invoke(runner, "ping", "--json")
        assert result.exit_code == SUCCESS
        assert json.loads(result.output) == {"status": "success", "data": {"status": True}, "error": None}

    @responses.activate
    def test_wallets_human(self, runner: CliRunner, wallet_list_response: List[Dict[str, Any]]) -> None:
        responses.add(responses.GET, url("/wallet/list"), json=wallet_list_response)
        result = _invoke(runner, "wallets")
        assert result.exit_code == SUCCESS
        assert "R10155257" in result.output
        assert "1,250.50" in result.output

    @responses.activate
    def test_wallets_json(self, runner: CliRunner, wallet_list_response: List[Dict[str, Any]]) -> None:
        responses.add(responses.GET, url("/wallet/list"), json=wallet_list_response)
        result = _invoke(runner, "wallets", "--json")
        assert json.loads(result.output)["data"] == wallet_list_response

    @responses.activate
    def test_transactions_filters(self, runner: CliRunner, transactions_response: List[Dict[str, Any]]) -> None:
        responses.add(responses.POST, url("/transactions/list"), json=transactions_response)
        result = _invoke(runner, "transactions", "--from", "2024-01-01", "--type", "withdraw", "--limit", "10")
        assert result.exit_code == SUCCESS
        assert "a7b1c2d3" in result.output
        assert sent_body(responses.calls[0]) == {
            "transfer_type": "withdraw",
            "period_start": "2024-01-01T00:00:00.000Z",
            "limit": 10,
        }

    @responses.activate
    def test_withdraw_info(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/withdraw/info"), json={"id": "w-1", "status": "success"})
        result = _invoke(runner, "withdraw", "info", "w-1", "--json")
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {"id": "w-1"}

    @responses.activate
    def test_transfer_info(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/transfer/info"), json={"id": "t-1"})
        result = _invoke(runner, "transfer", "info", "t-1")
        assert result.exit_code == SUCCESS
        assert "t-1" in result.output

    @responses.activate
    def test_invoice_info_by_order_id(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/invoice/info"), json={"status": "success"})
        result = _invoke(runner, "invoice", "info", "--order-id", "order-1", "--json")
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {"order_id": "order-1"}

    @responses.activate
    def test_invoice_secret_key(self, runner: CliRunner) -> None:
        responses.add(
            responses.GET,
            url("/invoice/generate-secret-key"),
            json={"status": "success", "secret_key": "abc123"},
        )
        result = _invoke(runner, "invoice", "secret-key", "--json")
        assert json.loads(result.output)["data"]["secret_key"] == "abc123"
        assert responses.calls[0].request.body is None


# ===================================================================
# Write commands
# ===================================================================


class TestWriteCommands:
    @responses.activate
    def test_withdraw_create(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/withdraw/create"), json={"id": "w-1"})
        result = _invoke(
            runner,
            "withdraw", "create", "R10155257", "100", "card_payoff", "4276000000000000",
            "--order-id", "order-7", "--subtract", "--json",
        )
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {
            "account": "R10155257",
            "amount": 100.0,
            "service": "card_payoff",
            "wallet_to": "4276000000000000",
            "order_id": "order-7",
            "substract": True,
        }

    @responses.activate
    def test_transfer_create_no_subtract(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/transfer/create"), json={"id": "t-1"})
        result = _invoke(runner, "transfer", "create", "R1", "R2", "10.5", "--no-subtract", "--json")
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {
            "account_from": "R1",
            "account_to": "R2",
            "amount": 10.5,
            "subtract": False,
        }

    @responses.activate
    def test_invoice_create_with_custom_fields(self, runner: CliRunner, invoice_response: Dict[str, Any]) -> None:
        responses.add(responses.POST, url("/invoice/create"), json=invoice_response)
        result = _invoke(
            runner,
            "invoice", "create", "R10155257", "150",
            "--hook-url", "https://shop.example/hook",
            "--expire", "60",
            "--field", "name=Ivan",
            "--field", "note=a=b",
            "--json",
        )
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {
            "wallet_to": "R10155257",
            "sum": 150.0,
            "hook_url": "https://shop.example/hook",
            "expire": 60,
            "custom_fields": [["name", "Ivan"], ["note", "a=b"]],
        }

    def test_invoice_create_bad_custom_field(self, runner: CliRunner) -> None:
        result = _invoke(runner, "invoice", "create", "R1", "150", "--field", "broken")
        assert result.exit_code == 2
        assert "NAME=VALUE" in result.output

    @responses.activate
    def test_invoice_set_webhook(self, runner: CliRunner) -> None:
        responses.add(responses.POST, url("/invoice/set-webhook"), json={"status": "success"})
        result = _invoke(runner, "invoice", "set-webhook", "https://shop.example/lava", "--json")
        assert result.exit_code == SUCCESS
        assert sent_body(responses.calls[0]) == {"url": "https://shop.example/lava"}


# ===================================================================
# Error reporting
# ===================================================================


class TestErrors:
    @responses.activate
    def test_remote_error(self, runner: CliRunner, error_response: Dict[str, Any]) -> None:
        responses.add(responses.POST, url("/transfer/info"), json=error_response)
        result = _invoke(runner, "transfer", "info", "t-1", "--json")
        assert result.exit_code == REMOTE_ERROR
        out = json.loads(result.output)
        assert out["error"] == {"code": 42, "kind": "remote", "message": "42: bad account"}

    @responses.activate
    def test_transport_error(self, runner: CliRunner) -> None:
        responses.add(responses.GET, url("/test/ping"), body=ConnectionError("Connection refused"))
        result = _invoke(runner, "ping", "--json")
        assert result.exit_code == TRANSPORT_ERROR
        assert json.loads(result.output)["error"]["message"] == "Connection refused"

    @responses.activate
    def test_transport_error_human(self, runner: CliRunner) -> None:
        responses.add(responses.GET, url("/test/ping"), body=ConnectionError("Connection refused"))
        result = _invoke(runner, "ping")
        assert result.exit_code == TRANSPORT_ERROR
        assert "Connection refused" in result.output

    @responses.activate
    def test_validation_error_is_local(self, runner: CliRunner) -> None:
        result = _invoke(runner, "invoice", "create", "R1", "0", "--json")
        assert result.exit_code == LOCAL_ERROR
        assert json.loads(result.output)["error"]["kind"] == "local"
        assert len(responses.calls) == 0

    @responses.activate
    def test_bad_webhook_url(self, runner: CliRunner) -> None:
        result = _invoke(runner, "invoice", "set-webhook", "shop.example", "--json")
        assert result.exit_code == LOCAL_ERROR
        assert len(responses.calls) == 0


# ===================================================================
# Logging
# ===================================================================


class TestLogLevel:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        import logging

        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers = handlers
        root.setLevel(level)

    @responses.activate
    def test_log_file_never_contains_key(self, runner: CliRunner, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        responses.add(responses.GET, url("/test/ping"), body=ConnectionError("Connection refused"))
        result = runner.invoke(
            cli,
            ["--api-key", TEST_API_KEY, "--log-level", "DEBUG", "ping"],
            env={"LAVA_LOG_DIR": str(log_dir)},
        )
        assert result.exit_code == TRANSPORT_ERROR
        content = (log_dir / "lava-cli.log").read_text(encoding="utf-8")
        assert "/test/ping" in content
        assert TEST_API_KEY not in content
