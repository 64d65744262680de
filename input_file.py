"""Input-file parsing: ``kind=value`` lines into queries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from models import Author, Citation, Conference, Key, Keyword, Query, Status
from status import StatusReporter

LOGGER = logging.getLogger(__name__)

QUERY_KINDS = ("author", "key", "conf", "citation", "keyword")


class InputFileError(RuntimeError):
    """The selected input file could not be read."""


def build_query(kind: str, value: str, reporter: StatusReporter) -> Query | None:
    """Build the query for one ``kind=value`` pair, reporting INVALID values."""
    value = value.strip()
    if not value:
        reporter.report(Status.INVALID, kind, value, "empty value")
        return None

    if kind == "author":
        return Author(value)
    if kind == "key":
        return Key(value)
    if kind == "conf":
        return Conference(value)
    if kind == "keyword":
        return Keyword(value)
    if kind == "citation":
        return Citation(value)

    reporter.report(Status.INVALID, kind, value, "unknown input kind")
    return None


def parse_input_lines(lines: Iterable[str], reporter: StatusReporter) -> list[Query]:
    queries: list[Query] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        kind, sep, value = line.partition("=")
        kind = kind.strip().lower()
        if not sep or kind not in QUERY_KINDS:
            reporter.report(Status.INVALID, "line", str(line_number), line)
            continue

        query = build_query(kind, value, reporter)
        if query is not None:
            queries.append(query)
    return queries


def read_input_file(path: str | Path, reporter: StatusReporter) -> list[Query]:
    """Read every query in ``path``; an unreadable file is fatal."""
    input_path = Path(path)
    try:
        with input_path.open(encoding="utf-8") as fh:
            lines = fh.readlines()
    except OSError as exc:
        raise InputFileError(f"Cannot read input file {input_path}: {exc}") from exc

    queries = parse_input_lines(lines, reporter)
    LOGGER.info("Read %s queries from %s", len(queries), input_path)
    return queries
