"""Drive resolution and fetching across every query of a run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from tqdm import tqdm

from config import Settings
from dblp_client import TransportError
from models import Author, Citation, Conference, Entry, Key, Keyword, Query
from record_fetcher import RecordFetcher, normalize_key
from resolver import Resolver

LOGGER = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    DONE = "done"
    INTERRUPTED = "interrupted"


class CancellationToken:
    """Cooperative cancellation flag, checked between fetches."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class RunResult:
    entries: list[Entry] = field(default_factory=list)
    interrupted: bool = False
    fetched: int = 0
    failed: int = 0


class _Interrupted(Exception):
    pass


class Aggregator:
    def __init__(
        self,
        resolver: Resolver,
        fetcher: RecordFetcher,
        settings: Settings,
        token: CancellationToken | None = None,
    ) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._settings = settings
        self._token = token or CancellationToken()
        self.state = RunState.IDLE

    def run(self, queries: list[Query]) -> RunResult:
        """Resolve and fetch every query in order.

        Returns the accumulated entries (always empty in check mode). When the
        token is cancelled the run stops before the next fetch and returns
        what was accumulated so far with ``interrupted`` set.
        """
        result = RunResult()
        fetched_keys: set[str] = set()

        try:
            for query in queries:
                self._check_cancelled()
                self.state = RunState.RESOLVING
                keys = self._resolve(query)

                if self._settings.check_only or not keys:
                    continue

                self.state = RunState.FETCHING
                self._fetch_all(query, keys, fetched_keys, result)
        except _Interrupted:
            self.state = RunState.INTERRUPTED
            result.interrupted = True
            LOGGER.warning(
                "Interrupted: keeping %s entries fetched so far", len(result.entries)
            )
        else:
            self.state = RunState.DONE

        if self._settings.check_only:
            result.entries = []

        LOGGER.info(
            "Run %s. entries=%s fetched=%s failed=%s",
            self.state.value,
            len(result.entries),
            result.fetched,
            result.failed,
        )
        return result

    def _resolve(self, query: Query) -> list[str]:
        if isinstance(query, Author):
            handles = self._resolver.resolve_author(query.name)
            if len(handles) != 1 or self._settings.check_only:
                return []
            return self._resolver.resolve_author_keys(handles[0])
        if isinstance(query, Key):
            return self._resolver.resolve_key(query.key)
        if isinstance(query, Conference):
            return self._resolver.resolve_conference(query.name)
        if isinstance(query, Keyword):
            return self._resolver.resolve_keyword(query.word)
        if isinstance(query, Citation):
            return self._resolver.resolve_citation_text(query.text)
        raise TypeError(f"Unsupported query type: {type(query).__name__}")

    def _fetch_all(
        self,
        query: Query,
        keys: list[str],
        fetched_keys: set[str],
        result: RunResult,
    ) -> None:
        with tqdm(
            total=len(keys),
            desc=f"{query.kind}={query.text}",
            unit="rec",
            disable=not self._settings.progress,
        ) as bar:
            for key in keys:
                self._check_cancelled()
                record_key = normalize_key(key)
                if record_key in fetched_keys:
                    LOGGER.debug("Skipping already fetched key=%s", record_key)
                    bar.update(1)
                    continue
                fetched_keys.add(record_key)

                try:
                    entries = self._fetcher.fetch(record_key)
                except TransportError as exc:
                    result.failed += 1
                    LOGGER.warning("Fetch failed for key=%s: %s", record_key, exc)
                else:
                    result.fetched += 1
                    result.entries.extend(entries)
                bar.update(1)

    def _check_cancelled(self) -> None:
        if self._token.cancelled:
            raise _Interrupted()
