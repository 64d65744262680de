"""CLI entrypoint: fetch DBLP BibTeX records into a local bibliography file."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Any, Sequence

from dotenv import load_dotenv

from aggregator import Aggregator, CancellationToken, RunResult
from bib_writer import OutputFileError, ensure_writable, write_entries
from config import VERSION, Settings, load_settings
from dblp_client import DblpIndex
from input_file import InputFileError, build_query, read_input_file
from models import Query, Status
from record_fetcher import RecordFetcher
from resolver import Resolver
from status import StatusReporter

DEFAULT_OUTPUT = "dblp.bib"
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class _QueryAction(argparse.Action):
    """Append ``(kind, value)`` to a shared list so flag order is preserved."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        items = list(getattr(namespace, "query_flags", None) or [])
        items.append((self.dest, values))
        namespace.query_flags = items


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(
        prog="dblpbib",
        description="Fetch BibTeX entries from DBLP by author, key, conference, citation or keyword",
    )
    parser.set_defaults(query_flags=[])
    parser.add_argument("-a", "--author", action=_QueryAction, metavar="AUTHOR", help="Author name or DBLP handle (e.g. l/Leroy:Xavier)")
    parser.add_argument("-k", "--key", action=_QueryAction, metavar="KEY", help="DBLP record key (e.g. conf/icfp/Leroy00)")
    parser.add_argument("-c", "--conf", action=_QueryAction, metavar="CONF", help="Conference name (e.g. ICFP)")
    parser.add_argument("-C", "--citation", action=_QueryAction, metavar="CITATION", help='Author and year, written "(name, year)"')
    parser.add_argument("-w", "--keyword", action=_QueryAction, metavar="KEYWORD", help="Full-text search keyword")
    parser.add_argument("-i", "--input", metavar="FILE", help="File of kind=value lines (author=, key=, conf=, citation=, keyword=)")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help=f"Output .bib file, '-' for stdout (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--check", action="store_true", help="Only check that inputs resolve; fetch and write nothing")
    parser.add_argument("--ignore-file", default=None, help="Field exclusion list (default: $DBLPBIB_IGNORE_FILE or ./.bibignore)")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log diagnostics to stderr")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")

    args = parser.parse_args(argv)
    if not args.query_flags and not args.input:
        parser.error("at least one of --author, --key, --conf, --citation, --keyword or --input is required")
    return args


def collect_queries(args: argparse.Namespace, reporter: StatusReporter) -> list[Query]:
    """Flags first, in command-line order, then input-file lines in file order."""
    queries: list[Query] = []
    for kind, value in args.query_flags:
        query = build_query(kind, value, reporter)
        if query is not None:
            queries.append(query)
    if args.input:
        queries.extend(read_input_file(args.input, reporter))
    return queries


def install_interrupt_handler(token: CancellationToken) -> None:
    """Turn the first Ctrl-C into a cancellation; a second one aborts immediately."""

    def _handle(signum: int, frame: Any) -> None:  # noqa: ARG001
        logging.warning("Interrupt received, finishing the current request before stopping")
        token.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _handle)


def run(
    queries: list[Query],
    settings: Settings,
    output: str,
    token: CancellationToken,
    index: DblpIndex | None = None,
    reporter: StatusReporter | None = None,
) -> RunResult:
    """Run one fetch cycle and write the result (unless in check mode)."""
    reporter = reporter or StatusReporter()
    index = index or DblpIndex(settings)
    fetcher = RecordFetcher(index)
    resolver = Resolver(index, fetcher, settings, reporter)
    aggregator = Aggregator(resolver, fetcher, settings, token)

    result = aggregator.run(queries)

    if settings.check_only:
        logging.info(
            "Check complete. ok=%s not_found=%s ambiguous=%s invalid=%s",
            reporter.counts[Status.OK],
            reporter.counts[Status.NOT_FOUND],
            reporter.counts[Status.AMBIGUOUS],
            reporter.counts[Status.INVALID],
        )
        return result

    written = write_entries(result.entries, output, settings.ignore_fields)
    logging.info(
        "Run complete. written=%s fetched=%s failed=%s interrupted=%s",
        written,
        result.fetched,
        result.failed,
        result.interrupted,
    )
    return result


def main(argv: Sequence[str] | None = None) -> int:
    """Initialize config and execute one run."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    settings = load_settings(
        check_only=args.check,
        progress=not args.no_progress,
        ignore_file=args.ignore_file,
    )
    reporter = StatusReporter()

    try:
        queries = collect_queries(args, reporter)
        if not settings.check_only:
            ensure_writable(args.output)
    except (InputFileError, OutputFileError) as exc:
        logging.error("%s", exc)
        return EXIT_FAILURE

    token = CancellationToken()
    install_interrupt_handler(token)

    try:
        result = run(queries, settings, args.output, token, reporter=reporter)
    except OutputFileError as exc:
        logging.error("%s", exc)
        return EXIT_FAILURE

    return EXIT_INTERRUPTED if result.interrupted else 0


if __name__ == "__main__":
    sys.exit(main())
