"""DBLP index endpoints.

Each method performs one GET against the index and returns the response
body as text. A 404 means the page does not exist and is returned as None;
every other HTTP or network failure is raised as TransportError.
"""

from __future__ import annotations

import logging
from urllib.parse import quote, urljoin

import requests

from config import Settings

LOGGER = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """A remote fetch failed for a reason other than a missing page."""


class DblpIndex:
    """Query and record endpoints of one DBLP mirror."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.base_url.rstrip("/") + "/"
        self._search_url = settings.search_url
        self._timeout = settings.timeout_seconds
        self._headers = {"User-Agent": settings.user_agent}

    def search_authors(self, name: str) -> str | None:
        return self._get(urljoin(self._base_url, "search/author"), params={"xauthor": name})

    def author_keys(self, handle: str) -> str | None:
        return self._get(urljoin(self._base_url, f"rec/pers/{_quote_path(handle)}/xk"))

    def author_by_year(self, handle: str) -> str | None:
        return self._get(urljoin(self._base_url, f"pers/tb/{_quote_path(handle)}"))

    def record(self, key: str) -> str | None:
        return self._get(urljoin(self._base_url, f"rec/bibtex/{_quote_path(key)}"))

    def conference(self, name: str) -> str | None:
        return self._get(urljoin(self._base_url, f"db/conf/{_quote_path(name.lower())}/"))

    def page(self, url: str) -> str | None:
        """Fetch a linked page; relative links are resolved against the base URL."""
        return self._get(urljoin(self._base_url, url))

    def search_keyword(self, word: str) -> str | None:
        return self._get(self._search_url, params={"query": word})

    def _get(self, url: str, params: dict[str, str] | None = None) -> str | None:
        LOGGER.debug("GET %s params=%s", url, params)
        try:
            response = requests.get(
                url,
                params=params,
                headers=self._headers,
                timeout=self._timeout,
            )
            if response.status_code == 404:
                LOGGER.debug("GET %s: not found", url)
                return None
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc
        return response.text


def _quote_path(value: str) -> str:
    return quote(value.strip(), safe="/:")
