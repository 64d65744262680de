"""Download one DBLP record and split its BibTeX body into entries."""

from __future__ import annotations

import logging
import re

from dblp_client import DblpIndex, TransportError
from extractors import extract_preformatted
from markup import strip_markup
from models import Entry

LOGGER = logging.getLogger(__name__)

_NAMESPACE_PREFIX_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*:(?=[^/])")


def normalize_key(key: str) -> str:
    """Strip a namespace prefix such as ``DBLP:`` from a record key."""
    return _NAMESPACE_PREFIX_RE.sub("", key.strip(), count=1)


def split_entries(text: str) -> list[Entry]:
    """Split plain BibTeX text on blank lines into entries."""
    entries: list[Entry] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line.rstrip())
        elif current:
            entries.append(Entry(lines=tuple(current)))
            current = []
    if current:
        entries.append(Entry(lines=tuple(current)))
    return entries


class RecordFetcher:
    def __init__(self, index: DblpIndex) -> None:
        self._index = index

    def fetch(self, key: str) -> list[Entry]:
        """Return the entries embedded in the record page for ``key``.

        An empty list means the index returned no record body (NotFound).
        TransportError propagates to the caller.
        """
        record_key = normalize_key(key)
        body = self._index.record(record_key)
        block = extract_preformatted(body) if body is not None else None
        if block is None:
            LOGGER.info("No entry found for key=%s", record_key)
            return []

        entries = split_entries(strip_markup(block))
        if not entries:
            LOGGER.info("No entry found for key=%s", record_key)
        return entries

    def exists(self, key: str) -> bool:
        """Fetch-and-check used when validating a raw key."""
        try:
            return bool(self.fetch(key))
        except TransportError as exc:
            LOGGER.warning("Record check failed for key=%s: %s", key, exc)
            return False
