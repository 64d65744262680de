"""Named extraction functions over DBLP response payloads.

Every function here takes the raw text of one response and returns plain
values or named tuples. None of them raise on unexpected input: a payload
that does not have the expected shape yields ``None`` or an empty list.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from models import AuthorCandidate

# <pre> never nests; the body keeps its raw markup and entities for strip_markup
_PRE_RE = re.compile(r"<pre\b[^>]*>(?P<body>.*?)</pre>", re.IGNORECASE | re.DOTALL)
_RECORD_HREF_RE = re.compile(r"/rec/bibtex/(?P<key>[^?#]+?)(?:\.bib)?(?:[?#].*)?$", re.IGNORECASE)


def _soup(payload: str) -> BeautifulSoup:
    return BeautifulSoup(payload or "", "html.parser")


def extract_author_candidates(payload: str) -> list[AuthorCandidate]:
    """Parse ``<author urlpt="...">Name</author>`` elements of an author search."""
    candidates: list[AuthorCandidate] = []
    seen: set[str] = set()
    for tag in _soup(payload).find_all("author"):
        handle = (tag.get("urlpt") or "").strip()
        if not handle or handle in seen:
            continue
        seen.add(handle)
        candidates.append(AuthorCandidate(handle=handle, display_name=tag.get_text(strip=True)))
    return candidates


def extract_author_keys(payload: str) -> list[str]:
    """Return every publication key in an author's key listing, in order.

    The author's own ``person record`` key (``homepages/...``) is not a
    publication and is skipped.
    """
    keys: list[str] = []
    for tag in _soup(payload).find_all("dblpkey"):
        if "person record" in (tag.get("type") or "").lower():
            continue
        key = tag.get_text(strip=True)
        if key:
            keys.append(key)
    return keys


def extract_preformatted(payload: str) -> str | None:
    """Return the contents of the first ``<pre>`` block, or None if absent."""
    match = _PRE_RE.search(payload or "")
    if match is None:
        return None
    return match.group("body")


def extract_contents_links(payload: str) -> list[str]:
    """Return the targets of every "Contents" link on a conference index page."""
    links: list[str] = []
    for anchor in _soup(payload).find_all("a", href=True):
        if anchor.get_text(strip=True).lower() != "contents":
            continue
        url = anchor["href"].strip()
        if url and url not in links:
            links.append(url)
    return links


def extract_record_links(payload: str) -> list[str]:
    """Return the record keys of every ``.../rec/bibtex/KEY`` link, deduplicated in order."""
    keys: list[str] = []
    seen: set[str] = set()
    for anchor in _soup(payload).find_all("a", href=True):
        match = _RECORD_HREF_RE.search(anchor["href"].strip())
        if match is None:
            continue
        key = match.group("key")
        if key in seen:
            continue
        seen.add(key)
        keys.append(key)
    return keys


def extract_result_block(payload: str) -> str | None:
    """Return the first search result list of a full-text search page."""
    block = _soup(payload).select_one("ul.publ-list")
    if block is None:
        return None
    return str(block)


def extract_year_section(payload: str, year: str) -> str | None:
    """Return the links of the table section headed exactly by ``year``.

    The section runs from that header cell to the next header cell (or the
    end of the page). Returns None when no header reads ``year``.
    """
    soup = _soup(payload)
    header = next((th for th in soup.find_all("th") if th.get_text(strip=True) == year), None)
    if header is None:
        return None

    links: list[str] = []
    for element in header.find_all_next():
        if not isinstance(element, Tag):
            continue
        if element.name == "th":
            break
        if element.name == "a" and element.has_attr("href"):
            links.append(str(element))
    return "\n".join(links)
