from __future__ import annotations

from pathlib import Path

import pytest

import bib_writer
from models import Entry

FIRST = Entry(lines=(
    "@article{foo2020,",
    "  author = {A. Author},",
    "  title  = {First},",
    "  pages  = {1--10}",
    "}",
))
SECOND_SAME_KEY = Entry(lines=(
    "@article{foo2020,",
    "  author = {B. Author},",
    "  title  = {Second}",
    "}",
))
OTHER = Entry(lines=(
    "@inproceedings{bar2021,",
    "  title     = {Other},",
    "  timestamp = {Mon, 01 Jan 2021},",
    "  biburl    = {https://dblp.org/rec/bar2021.bib},",
    "  year      = {2021}",
    "}",
))


def test_write_entries_dedups_by_key_first_wins(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"

    written = bib_writer.write_entries([FIRST, SECOND_SAME_KEY], out, frozenset({"timestamp"}))

    text = out.read_text(encoding="utf-8")
    assert written == 1
    assert text.count("@article{foo2020,") == 1
    assert "First" in text
    assert "Second" not in text


def test_write_entries_dedups_without_ignore_set(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"

    written = bib_writer.write_entries([FIRST, SECOND_SAME_KEY, OTHER], out)

    assert written == 2
    assert out.read_text(encoding="utf-8") == FIRST.render() + "\n\n" + OTHER.render() + "\n\n"


def test_duplicate_is_logged_with_entry_type(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO", logger="bib_writer")

    kept = bib_writer.filter_entries([FIRST, SECOND_SAME_KEY], frozenset())

    assert kept == [FIRST]
    assert "Skipping duplicate @article entry key=foo2020" in caplog.text


def test_entry_header_parses_type_and_key() -> None:
    assert OTHER.header == ("inproceedings", "bar2021")
    assert Entry(lines=("not a header",)).header is None
    assert Entry(lines=()).key is None


def test_ignored_last_field_drops_dangling_comma(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"

    bib_writer.write_entries([FIRST], out, frozenset({"pages"}))

    assert out.read_text(encoding="utf-8") == (
        "@article{foo2020,\n"
        "  author = {A. Author},\n"
        "  title  = {First}\n"
        "}\n\n"
    )


def test_ignored_middle_fields_keep_commas(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"

    bib_writer.write_entries([OTHER], out, frozenset({"timestamp", "biburl"}))

    assert out.read_text(encoding="utf-8") == (
        "@inproceedings{bar2021,\n"
        "  title     = {Other},\n"
        "  year      = {2021}\n"
        "}\n\n"
    )


def test_empty_ignore_set_writes_verbatim(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"
    odd = Entry(lines=("@misc{odd,", "  note = {x},", "}"))

    bib_writer.write_entries([odd], out)

    assert out.read_text(encoding="utf-8") == "@misc{odd,\n  note = {x},\n}\n\n"


def test_field_match_is_case_insensitive() -> None:
    entry = Entry(lines=("@misc{k,", "  title = {T},", "  PAGES = {3}", "}"))
    cleaned = bib_writer.clean_entry(entry, frozenset({"pages"}))
    assert cleaned.lines == ("@misc{k,", "  title = {T}", "}")


def test_ignored_field_drops_its_continuation_lines() -> None:
    entry = Entry(lines=(
        "@article{k,",
        "  author = {A and",
        "               B},",
        "  year = {2000}",
        "}",
    ))
    cleaned = bib_writer.clean_entry(entry, frozenset({"author"}))
    assert cleaned.lines == ("@article{k,", "  year = {2000}", "}")


def test_ignored_wrapped_last_field_drops_dangling_comma() -> None:
    entry = Entry(lines=(
        "@article{k,",
        "  year = {2000},",
        "  title = {A {Long}",
        "           Title}",
        "}",
    ))
    cleaned = bib_writer.clean_entry(entry, frozenset({"title"}))
    assert cleaned.lines == ("@article{k,", "  year = {2000}", "}")


def test_write_entries_truncates_existing_file(tmp_path: Path) -> None:
    out = tmp_path / "out.bib"
    out.write_text("stale content\n", encoding="utf-8")

    bib_writer.write_entries([], out)

    assert out.read_text(encoding="utf-8") == ""


def test_write_entries_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    bib_writer.write_entries([OTHER], "-")
    assert capsys.readouterr().out.startswith("@inproceedings{bar2021,")


def test_write_entries_unwritable_destination(tmp_path: Path) -> None:
    with pytest.raises(bib_writer.OutputFileError):
        bib_writer.write_entries([FIRST], tmp_path / "missing-dir" / "out.bib")


def test_ensure_writable(tmp_path: Path) -> None:
    bib_writer.ensure_writable(tmp_path / "new.bib")
    bib_writer.ensure_writable("-")
    with pytest.raises(bib_writer.OutputFileError):
        bib_writer.ensure_writable(tmp_path)
    with pytest.raises(bib_writer.OutputFileError):
        bib_writer.ensure_writable(tmp_path / "missing-dir" / "out.bib")
    assert not (tmp_path / "new.bib").exists()
