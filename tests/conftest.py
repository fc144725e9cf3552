"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest


def pytest_sessionstart() -> None:
    """Add the project root to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


@pytest.fixture
def settings():
    from shared.config import SyncSettings

    return SyncSettings(
        api_url="https://api.example.test/v1/",
        user="api-key",
        password="X",
        field_mappings={"roles": 101, "site_name": 102},
    )


@pytest.fixture
def make_client(settings) -> Callable:
    """Build a HelpScoutClient that answers through a handler function."""
    from services.helpscout.client import HelpScoutClient

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        return HelpScoutClient(settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def helpscout():
    from tests.beacon_samples import FakeHelpScout

    return FakeHelpScout()


@pytest.fixture
def ledger():
    from services.helpscout.storage import InMemoryLedgerStore

    return InMemoryLedgerStore()


@pytest.fixture
def updater(make_client, helpscout, ledger, settings):
    from services.pipeline.updater import HelpScoutUpdater

    return HelpScoutUpdater(make_client(helpscout.handler), ledger, mappings=settings.field_mappings)
