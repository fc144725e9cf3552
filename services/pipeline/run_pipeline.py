#!/usr/bin/env python3
"""
HSC Beacon Sync Runner - search → load → extract Beacon fields → update → ledger
Run from cron, e.g. every 15 minutes with the query for recent Beacon conversations.
"""

import json
import logging
import sys
from typing import Optional

import click
import structlog

from services.beacon.parser import extract_beacon_fields
from services.helpscout.client import HelpScoutClient
from services.helpscout.storage import ArangoLedgerStore, InMemoryLedgerStore
from services.pipeline.updater import HelpScoutUpdater
from shared.config import SyncSettings
from shared.errors import HelpScoutError, LedgerUnavailableError
from shared.schemas.conversation import ConversationSummary

log = structlog.get_logger()


def configure_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def _load_settings(mappings: Optional[str] = None) -> SyncSettings:
    try:
        return SyncSettings.from_env(mappings=mappings)
    except HelpScoutError as e:
        raise click.ClickException(str(e))


def _open_ledger(settings: SyncSettings) -> ArangoLedgerStore:
    try:
        ledger = ArangoLedgerStore.from_settings(settings)
    except LedgerUnavailableError as e:
        log.warning("Ledger unavailable", error=str(e))
        raise click.ClickException("Ledger database is unreachable")
    if not ledger.check_health():
        log.warning("Ledger health check failed")
        raise click.ClickException("Ledger database is unreachable")
    return ledger


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Sync HelpScout Beacon profile data into conversation custom fields."""
    configure_logging(verbose)


@cli.command()
@click.option("--query", "-q", required=True, help="Raw (already URL-encoded) search query")
@click.option("--mappings", "-m", default=None, help="Field mapping JSON or file (default: HSC_FIELD_MAPPINGS)")
def run(query: str, mappings: Optional[str]):
    """Update every matching conversation not yet in the ledger."""
    settings = _load_settings(mappings)
    log.info("Sync config", api_url=settings.api_url, mapped_fields=len(settings.field_mappings))

    ledger = _open_ledger(settings)

    with HelpScoutClient(settings) as client:
        updater = HelpScoutUpdater(client, ledger)
        updater.set_mappings(settings.field_mappings)
        try:
            report = updater.run(query)
        except HelpScoutError as e:
            log.error("Sync run aborted", error=str(e))
            raise click.ClickException(str(e))

    click.echo(
        f"Fetched {report.fetched}, with Beacon data {report.extracted}, "
        f"sent {report.sent}, failed {report.failed}"
    )
    if report.failed:
        sys.exit(1)


@cli.command()
@click.option("--query", "-q", required=True, help="Raw (already URL-encoded) search query")
def pending(query: str):
    """List conversations a run would process."""
    settings = _load_settings()
    ledger = _open_ledger(settings)

    with HelpScoutClient(settings) as client:
        try:
            conversations = HelpScoutUpdater(client, ledger).fetch_by_query(query)
        except HelpScoutError as e:
            raise click.ClickException(str(e))

    for conversation in conversations:
        click.echo(conversation.id)


@cli.command()
@click.argument("conversation_id")
def extract(conversation_id: str):
    """Print the Beacon fields of one conversation without updating it."""
    settings = _load_settings()

    with HelpScoutClient(settings) as client:
        updater = HelpScoutUpdater(client, InMemoryLedgerStore())
        try:
            conversation = updater.load(ConversationSummary(id=conversation_id))
        except HelpScoutError as e:
            raise click.ClickException(str(e))

    field_set = extract_beacon_fields(conversation)
    if field_set is None:
        raise click.ClickException(f"No Beacon data in conversation {conversation_id}")
    click.echo(json.dumps(field_set.fields, indent=2))


@cli.command()
@click.argument("conversation_id")
def ledger(conversation_id: str):
    """Show the ledger entry for a conversation."""
    settings = _load_settings()
    entry = _open_ledger(settings).get(conversation_id)
    if entry is None:
        raise click.ClickException(f"Conversation {conversation_id} is not in the ledger")
    click.echo(json.dumps(entry.model_dump(), indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
