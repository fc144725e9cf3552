"""Unit tests for the sync command line."""

from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from services.helpscout.client import HelpScoutClient
from services.helpscout.storage import InMemoryLedgerStore
from services.pipeline import run_pipeline
from shared.errors import LedgerUnavailableError
from shared.schemas.sync import LedgerEntry
from tests.beacon_samples import BEACON_FIELDS, beacon_thread, customer_thread


@pytest.fixture
def cli_env(monkeypatch, helpscout):
    """Route the CLI to the fake HelpScout API and an in-memory ledger."""
    ledger = InMemoryLedgerStore()
    monkeypatch.setenv("HSC_API_USER", "key-123")
    monkeypatch.setenv("HSC_API_URL", "https://api.example.test/v1")
    monkeypatch.setenv("HSC_FIELD_MAPPINGS", '{"roles": 101, "site_name": 102}')
    monkeypatch.setattr(
        run_pipeline,
        "HelpScoutClient",
        lambda settings: HelpScoutClient(settings, transport=httpx.MockTransport(helpscout.handler)),
    )
    monkeypatch.setattr(run_pipeline.ArangoLedgerStore, "from_settings", classmethod(lambda cls, settings: ledger))
    return ledger


def test_run_command_updates_conversations(cli_env, helpscout) -> None:
    """run should update new Beacon conversations and report counts."""
    helpscout.add_conversation(10, [customer_thread(), beacon_thread()])

    result = CliRunner().invoke(run_pipeline.cli, ["run", "--query", "query=x"])

    assert result.exit_code == 0
    assert "sent 1, failed 0" in result.output
    assert cli_env.contains("10")


def test_run_command_exits_nonzero_on_failed_update(cli_env, helpscout) -> None:
    """run should exit 1 when any update failed."""
    helpscout.add_conversation(10, [beacon_thread()])
    helpscout.put_status = 503

    result = CliRunner().invoke(run_pipeline.cli, ["run", "--query", "query=x"])

    assert result.exit_code == 1
    assert "failed 1" in result.output


def test_run_command_requires_credentials(monkeypatch) -> None:
    """Missing credentials should be reported as a usage error."""
    monkeypatch.delenv("HSC_API_USER", raising=False)

    result = CliRunner().invoke(run_pipeline.cli, ["run", "--query", "query=x"])

    assert result.exit_code == 1
    assert "HSC_API_USER" in result.output


def test_pending_command_lists_unprocessed_ids(cli_env, helpscout) -> None:
    """pending should list ids not yet in the ledger."""
    helpscout.add_conversation(10, [])
    helpscout.add_conversation(11, [])
    cli_env.upsert(LedgerEntry(conversation_id="10", payload_sent="{}"))

    result = CliRunner().invoke(run_pipeline.cli, ["pending", "--query", "query=x"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "11" in lines
    assert "10" not in lines


def test_extract_command_prints_fields(cli_env, helpscout) -> None:
    """extract should print Beacon fields without sending updates."""
    helpscout.add_conversation(10, [beacon_thread()])

    result = CliRunner().invoke(run_pipeline.cli, ["extract", "10"])

    assert result.exit_code == 0
    assert json.loads(result.output) == BEACON_FIELDS
    assert helpscout.puts == []


def test_ledger_command_reports_missing_entry(cli_env) -> None:
    """ledger should fail for conversations never recorded."""
    result = CliRunner().invoke(run_pipeline.cli, ["ledger", "99"])

    assert result.exit_code == 1
    assert "not in the ledger" in result.output


@pytest.mark.parametrize("args", [["run", "--query", "query=x"], ["pending", "--query", "query=x"], ["ledger", "10"]])
def test_commands_report_unreachable_ledger(monkeypatch, args) -> None:
    """Commands needing the ledger should fail cleanly when it cannot be reached."""

    def unreachable(cls, settings):
        raise LedgerUnavailableError("Ledger database is unreachable: connection refused")

    monkeypatch.setenv("HSC_API_USER", "key-123")
    monkeypatch.setattr(run_pipeline.ArangoLedgerStore, "from_settings", classmethod(unreachable))

    result = CliRunner().invoke(run_pipeline.cli, args)

    assert result.exit_code == 1
    assert "Ledger database is unreachable" in result.output
    assert not isinstance(result.exception, LedgerUnavailableError)


def test_extract_command_reports_non_conversation_item(cli_env, helpscout) -> None:
    """extract should fail cleanly when the API item is not a conversation."""
    helpscout.conversations["10"] = {"number": 5}

    result = CliRunner().invoke(run_pipeline.cli, ["extract", "10"])

    assert result.exit_code == 1
    assert "unexpected Conversation" in result.output
