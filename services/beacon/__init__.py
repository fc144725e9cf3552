"""
HSC Beacon Service
Reads customer profile data that the Beacon widget leaves in conversation notes

Components:
- parser.py: Beacon note locator and field table extractor
"""

from .parser import BeaconNoteParser, extract_beacon_fields, find_beacon_note, parse_beacon_fields

__all__ = ["BeaconNoteParser", "extract_beacon_fields", "find_beacon_note", "parse_beacon_fields"]
