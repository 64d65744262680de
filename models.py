"""Shared typed models for the citation fetcher."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Union

_ENTRY_HEADER_RE = re.compile(r"^\s*@(?P<entry_type>\w+)\s*\{\s*(?P<key>[^,\s]+)\s*,")


class Status(str, Enum):
    """Outcome reported for every resolved input."""

    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    INVALID = "INVALID"


class AuthorCandidate(NamedTuple):
    handle: str
    display_name: str


class EntryHeader(NamedTuple):
    entry_type: str
    key: str


class CitationRef(NamedTuple):
    name: str
    year: str


@dataclass(frozen=True, slots=True)
class Author:
    name: str
    kind = "author"

    @property
    def text(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Key:
    key: str
    kind = "key"

    @property
    def text(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class Conference:
    name: str
    kind = "conf"

    @property
    def text(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Keyword:
    word: str
    kind = "keyword"

    @property
    def text(self) -> str:
        return self.word


@dataclass(frozen=True, slots=True)
class Citation:
    """Raw ``(name, year)`` text; the resolver parses it and reports malformed input."""

    text: str
    kind = "citation"


Query = Union[Author, Key, Conference, Keyword, Citation]


def parse_entry_header(line: str) -> EntryHeader | None:
    """Parse an ``@type{key,`` header line."""
    match = _ENTRY_HEADER_RE.match(line)
    if match is None:
        return None
    return EntryHeader(entry_type=match.group("entry_type"), key=match.group("key"))


@dataclass(frozen=True, slots=True)
class Entry:
    """One BibTeX record as an ordered tuple of lines (no line terminators)."""

    lines: tuple[str, ...]

    @property
    def header(self) -> EntryHeader | None:
        if not self.lines:
            return None
        return parse_entry_header(self.lines[0])

    @property
    def key(self) -> str | None:
        header = self.header
        return header.key if header else None

    def render(self) -> str:
        return "\n".join(self.lines)
