"""Turn user inputs into DBLP author handles and record keys.

Every public ``resolve_*`` method reports one status line per subject and
returns a (possibly empty) list. Remote failures and unexpected payloads
count as zero results for that step; they never abort the run.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from config import Settings
from dblp_client import DblpIndex, TransportError
from extractors import (
    extract_author_candidates,
    extract_author_keys,
    extract_contents_links,
    extract_record_links,
    extract_result_block,
    extract_year_section,
)
from models import CitationRef, Status
from record_fetcher import RecordFetcher
from status import StatusReporter

LOGGER = logging.getLogger(__name__)

# e.g. "l/Leroy:Xavier" or "m/Meyer_0001:Bertrand"
_HANDLE_RE = re.compile(r"^[^/\s]+/[^/\s:]+:\S+$")
_CITATION_RE = re.compile(r"^\s*\(\s*(?P<name>[^,()]*?\S)\s*,\s*(?P<year>\d{4})\s*\)\s*$")


def is_author_handle(name: str) -> bool:
    return bool(_HANDLE_RE.match(name.strip()))


def parse_citation(text: str) -> CitationRef | None:
    """Parse the literal form ``(name, year)``."""
    match = _CITATION_RE.match(text)
    if match is None:
        return None
    return CitationRef(name=match.group("name"), year=match.group("year"))


class Resolver:
    def __init__(
        self,
        index: DblpIndex,
        fetcher: RecordFetcher,
        settings: Settings,
        reporter: StatusReporter,
    ) -> None:
        self._index = index
        self._fetcher = fetcher
        self._settings = settings
        self._reporter = reporter

    def resolve_author(self, name: str) -> list[str]:
        """Return matching author handles.

        More than one handle is reported AMBIGUOUS; callers must not fetch
        anything for an ambiguous author.
        """
        name = name.strip()
        if is_author_handle(name):
            self._reporter.report(Status.OK, "author", name)
            return [name]

        payload = self._get("author search", self._index.search_authors, name)
        candidates = extract_author_candidates(payload or "")

        if not candidates:
            self._reporter.report(Status.NOT_FOUND, "author", name)
            return []
        if len(candidates) > 1:
            listing = "; ".join(f"{c.handle} ({c.display_name})" for c in candidates)
            self._reporter.report(Status.AMBIGUOUS, "author", name, listing)
            return [c.handle for c in candidates]

        self._reporter.report(Status.OK, "author", name, candidates[0].handle)
        return [candidates[0].handle]

    def resolve_author_keys(self, handle: str) -> list[str]:
        payload = self._get("author key listing", self._index.author_keys, handle)
        keys = extract_author_keys(payload or "")
        if keys:
            self._reporter.report(Status.OK, "handle", handle, f"{len(keys)} records")
        else:
            self._reporter.report(Status.NOT_FOUND, "handle", handle, "no records listed")
        return keys

    def resolve_key(self, key: str) -> list[str]:
        key = key.strip()
        status = Status.OK if self._fetcher.exists(key) else Status.NOT_FOUND
        self._reporter.report(status, "key", key)
        return [key]

    def resolve_conference(self, name: str) -> list[str]:
        name = name.strip()
        index_page = self._get("conference index", self._index.conference, name)
        if index_page is None:
            self._reporter.report(Status.NOT_FOUND, "conf", name)
            return []

        if self._settings.check_only:
            self._reporter.report(Status.OK, "conf", name)
            return []

        keys: list[str] = []
        seen: set[str] = set()
        for link in extract_contents_links(index_page):
            sub_page = self._get("conference contents", self._index.page, link)
            for key in extract_record_links(sub_page or ""):
                if key not in seen:
                    seen.add(key)
                    keys.append(key)

        if keys:
            self._reporter.report(Status.OK, "conf", name, f"{len(keys)} records")
        else:
            self._reporter.report(Status.NOT_FOUND, "conf", name, "no records listed")
        return keys

    def resolve_keyword(self, word: str) -> list[str]:
        word = word.strip()
        payload = self._get("keyword search", self._index.search_keyword, word)
        block = extract_result_block(payload or "")
        keys = extract_record_links(block or "")

        if keys:
            self._reporter.report(Status.OK, "keyword", word, f"{len(keys)} records")
        else:
            self._reporter.report(Status.NOT_FOUND, "keyword", word)
        return keys

    def resolve_citation(self, name: str, year: str) -> list[str]:
        """Return the records an author published in ``year``.

        Every handle the name resolves to is searched, ambiguous ones included.
        """
        subject = f"({name}, {year})"
        handles = self.resolve_author(name)
        if not handles:
            self._reporter.report(Status.NOT_FOUND, "citation", subject)
            return []

        keys: list[str] = []
        for handle in handles:
            payload = self._get("publications by year", self._index.author_by_year, handle)
            section = extract_year_section(payload or "", year)
            found = extract_record_links(section or "")
            if found:
                self._reporter.report(Status.OK, "citation", subject, f"{handle}: {len(found)} records")
            else:
                self._reporter.report(Status.NOT_FOUND, "citation", subject, handle)
            keys.extend(found)
        return keys

    def resolve_citation_text(self, text: str) -> list[str]:
        """Parse ``(name, year)`` and resolve it; anything else is INVALID."""
        citation = parse_citation(text)
        if citation is None:
            self._reporter.report(Status.INVALID, "citation", text.strip(), "expected (name, year)")
            return []
        return self.resolve_citation(citation.name, citation.year)

    def _get(self, step: str, endpoint: Callable[[str], str | None], argument: str) -> str | None:
        try:
            return endpoint(argument)
        except TransportError as exc:
            LOGGER.warning("%s failed for %r: %s", step, argument, exc)
            return None
