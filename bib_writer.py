"""BibTeX file sink: dedup, field filtering and serialization."""

from __future__ import annotations

import logging
import os
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from models import Entry

LOGGER = logging.getLogger(__name__)

STDOUT_DESTINATION = "-"

_FIELD_RE = re.compile(r"^\s*(?P<field>[A-Za-z][\w-]*)\s*=")


class OutputFileError(RuntimeError):
    """The output destination cannot be written."""


def field_name(line: str) -> str | None:
    """Return the lowercased field name of a ``name = value`` line."""
    match = _FIELD_RE.match(line)
    return match.group("field").lower() if match else None


def _brace_depth(line: str) -> int:
    return line.count("{") - line.count("}")


def clean_entry(entry: Entry, ignore_fields: frozenset[str]) -> Entry:
    """Drop ignored fields and the comma they leave dangling before ``}``.

    A field whose value wraps onto further lines is dropped together with
    those lines, up to the line that closes its braces. The entry's closing
    ``}`` line is always kept.
    """
    lines: list[str] = []
    last = len(entry.lines) - 1
    depth = 0
    for position, line in enumerate(entry.lines):
        if depth > 0 and position < last:
            depth += _brace_depth(line)
            continue
        depth = 0
        if field_name(line) in ignore_fields:
            depth = _brace_depth(line)
            continue
        lines.append(line)

    if len(lines) >= 2 and lines[-1].strip() == "}" and lines[-2].endswith(","):
        lines[-2] = lines[-2][:-1]
    return Entry(lines=tuple(lines))


def filter_entries(entries: Iterable[Entry], ignore_fields: frozenset[str]) -> list[Entry]:
    """Drop entries whose key was already seen, then strip ignored fields.

    With an empty ignore set the surviving entries are kept verbatim.
    """
    kept: list[Entry] = []
    written_keys: set[str] = set()
    for entry in entries:
        header = entry.header
        if header is not None:
            if header.key in written_keys:
                LOGGER.info("Skipping duplicate @%s entry key=%s", header.entry_type, header.key)
                continue
            written_keys.add(header.key)
        kept.append(clean_entry(entry, ignore_fields) if ignore_fields else entry)
    return kept


def ensure_writable(destination: str | Path) -> None:
    """Fail before any processing if ``destination`` cannot be written."""
    if str(destination) == STDOUT_DESTINATION:
        return
    path = Path(destination)
    parent = path.parent if str(path.parent) else Path(".")
    if path.is_dir():
        raise OutputFileError(f"Output path {path} is a directory")
    if path.exists() and not os.access(path, os.W_OK):
        raise OutputFileError(f"Output file {path} is not writable")
    if not path.exists() and not (parent.is_dir() and os.access(parent, os.W_OK)):
        raise OutputFileError(f"Cannot create output file in {parent}")


def write_entries(
    entries: Iterable[Entry],
    destination: str | Path,
    ignore_fields: frozenset[str] = frozenset(),
) -> int:
    """Write entries to ``destination`` (truncating it); returns the number written."""
    kept = filter_entries(entries, ignore_fields)
    with _open_destination(destination) as fh:
        for entry in kept:
            fh.write(entry.render())
            fh.write("\n\n")

    LOGGER.info("Wrote %s entries to %s", len(kept), destination)
    return len(kept)


@contextmanager
def _open_destination(destination: str | Path) -> Iterator[TextIO]:
    if str(destination) == STDOUT_DESTINATION:
        yield sys.stdout
        sys.stdout.flush()
        return

    path = Path(destination)
    try:
        fh = path.open("w", encoding="utf-8")
    except OSError as exc:
        raise OutputFileError(f"Cannot write output file {path}: {exc}") from exc
    with fh:
        yield fh
