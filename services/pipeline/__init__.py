"""
HSC Beacon Sync Pipeline
Search → load → extract Beacon fields → update custom fields → ledger

Components:
- updater.py: HelpScoutUpdater, the sync job itself
- run_pipeline.py: Command-line entry point for cron
"""

from .updater import HelpScoutUpdater

__all__ = ["HelpScoutUpdater"]
