"""
Beacon Note Parser
Finds the note the Beacon widget adds to a conversation and reads
the "Customer Information" table out of its HTML body
"""

from typing import Iterator, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from shared.schemas.conversation import BeaconFieldSet, Conversation, Thread

logger = structlog.get_logger()

# Type of "note" and source of "embed-form" identify Beacon notes
BEACON_THREAD_TYPE = "note"
BEACON_SOURCE_TYPE = "embed-form"

# Table "titles" are <strong> tags above each table
HEADING_TAG = "strong"
CUSTOMER_HEADING = "Customer Information"
FIELD_DELIMITER = "$$"


def find_beacon_note(conversation: Conversation) -> Optional[Thread]:
    """Return the first Beacon note of a conversation, if any"""
    for thread in conversation.threads or []:
        if thread.type == BEACON_THREAD_TYPE and thread.source_type == BEACON_SOURCE_TYPE:
            return thread
    return None


def select_customer_table(soup: BeautifulSoup) -> Optional[Tag]:
    """
    Pick the table holding Beacon data.

    Headings and tables are matched by ordinal position across the whole
    document: the n-th <strong> titled "Customer Information" selects the
    n-th <table>. When several headings match, the last one wins.
    """
    headings = soup.find_all(HEADING_TAG)
    tables = soup.find_all("table")

    table_index = None
    for index, heading in enumerate(headings):
        if heading.get_text() == CUSTOMER_HEADING:
            table_index = index

    if table_index is None or table_index >= len(tables):
        return None
    return tables[table_index]


def pair_tokens(tokens: list[str]) -> Iterator[tuple[str, str]]:
    """
    Walk tokens as (name, value) pairs.
    A trailing name without a value is dropped.
    """
    names = tokens[0::2]
    values = tokens[1::2]
    if len(names) > len(values):
        logger.debug("beacon_trailing_key_dropped", key=names[-1])
    return zip(names, values)


def parse_beacon_fields(body: str) -> dict[str, str]:
    """
    Parse the Beacon field table out of a note body.

    The table text concatenates all of its cells, e.g.
        $$roles$$authenticated user, developer$$site_name$$University of Colorado Boulder$$site_url$$

    Args:
        body: HTML body of a Beacon note

    Returns:
        Ordered field name -> value; empty when the table is missing
    """
    soup = BeautifulSoup(body or "", "html.parser")
    table = select_customer_table(soup)
    if table is None:
        return {}

    parts = table.get_text().split(FIELD_DELIMITER)
    # The text begins with the delimiter, so data starts at parts[1]
    tokens = [part.strip() for part in parts[1:]]

    fields: dict[str, str] = {}
    for name, value in pair_tokens(tokens):
        fields[name] = value
    return fields


class BeaconNoteParser:
    """
    Extracts a BeaconFieldSet from a full conversation.

    Only the first Beacon note is considered. If it does not parse,
    later notes are not tried.
    """

    def extract(self, conversation: Conversation) -> Optional[BeaconFieldSet]:
        """
        Args:
            conversation: Conversation loaded with its threads

        Returns:
            The conversation's Beacon fields, or None when there are none
        """
        if conversation.threads is None:
            return None

        note = find_beacon_note(conversation)
        if note is None:
            return None

        fields = parse_beacon_fields(note.body or "")
        if not fields:
            return None

        return BeaconFieldSet(conversation_id=conversation.id, fields=fields)


# Default parser instance
default_parser = BeaconNoteParser()


def extract_beacon_fields(conversation: Conversation) -> Optional[BeaconFieldSet]:
    """Convenience function to extract Beacon fields from a conversation"""
    return default_parser.extract(conversation)
