"""Scraping of AppleScript record literals returned by Outlook.

Outlook renders a list of records as text such as::

    {subject:Hello, sender:alex@example.com}, {subject:Re: Hi, sender:sam}

Values are emitted raw, with no quoting or escaping. This module is a
best-effort scraper over that text, not an AppleScript parser:

- Only flat records are supported. A record ends at the first closing
  brace, so a nested record (Outlook renders a sender as
  ``{name:..., address:...}``) keeps the fields before it, the nested
  record's first field becomes a value with its opening brace, and the
  fields after the nested record are lost.
- A comma inside a value cannot be told apart from a field separator, so
  the text after it becomes a fragment without a key and is dropped.
"""

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from outlook_agent.errors import ParseError

T = TypeVar("T")

# From an opening brace to the first closing brace
RECORD_PATTERN = re.compile(r"\{([^}]+)\}")

logger = logging.getLogger(__name__)


def parse_record_block(block: str) -> dict[str, str]:
    """Split the inside of one record literal into key/value pairs.

    Each comma-separated fragment is split on its first colon, so values may
    themselves contain colons (times, "Re:" subjects). Fragments without a
    colon or with an empty key are ignored.
    """
    record: dict[str, str] = {}
    for fragment in block.split(","):
        key, sep, value = fragment.partition(":")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        record[key] = value.strip()
    return record


def scrape_records(raw: str | None) -> list[dict[str, str]]:
    """
    Extract every flat record literal from raw script output.

    Args:
        raw: The text returned by one automation call.

    Returns:
        One mapping per record, in the order the target enumerated them.
        Records that yield no usable key are dropped.
    """
    if not raw:
        return []

    records = []
    for match in RECORD_PATTERN.finditer(raw):
        record = parse_record_block(match.group(1))
        if record:
            records.append(record)
    return records


def scrape_entities(
    raw: str | None,
    adapter: Callable[[dict[str, str]], T],
    log: logging.Logger | None = None,
) -> list[T]:
    """
    Scrape records and decode each one with an entity adapter.

    A record the adapter rejects with ParseError is skipped; the rest of
    the batch is still returned.
    """
    log = log or logger
    entities = []
    for record in scrape_records(raw):
        try:
            entities.append(adapter(record))
        except ParseError as e:
            log.debug("Skipping undecodable record %r: %s", record, e)
    return entities


def split_list(raw: str | None) -> list[str]:
    """Split Outlook's flat text rendering of a list (``a, b, c``)."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(", ") if item.strip()]
