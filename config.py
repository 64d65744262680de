"""Run configuration, read once from the environment and CLI flags."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

LOGGER = logging.getLogger(__name__)

VERSION = "1.0.0"

DEFAULT_BASE_URL = "https://dblp.org"
DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_IGNORE_FILE = ".bibignore"
DEFAULT_USER_AGENT = f"dblpbib/{VERSION}"


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration passed explicitly through the pipeline."""

    check_only: bool = False
    progress: bool = True
    ignore_fields: frozenset[str] = field(default_factory=frozenset)
    base_url: str = DEFAULT_BASE_URL
    search_url: str = f"{DEFAULT_BASE_URL}/search"
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


def load_ignore_fields(path: str | Path) -> frozenset[str]:
    """Load newline-separated field names; a missing file means no filtering."""
    ignore_path = Path(path).expanduser()
    if not ignore_path.is_file():
        LOGGER.debug("No ignore list at %s", ignore_path)
        return frozenset()

    with ignore_path.open(encoding="utf-8") as fh:
        fields = {
            line.strip().lower()
            for line in fh
            if line.strip() and not line.lstrip().startswith("#")
        }
    LOGGER.info("Loaded %s ignored fields from %s", len(fields), ignore_path)
    return frozenset(fields)


def load_settings(
    *,
    check_only: bool = False,
    progress: bool = True,
    ignore_file: str | None = None,
) -> Settings:
    """Build Settings from the environment, with CLI flags taking precedence.

    Environment variables (a ``.env`` file is honoured when the caller ran
    ``load_dotenv()`` first):
        DBLP_BASE_URL: mirror to query (default https://dblp.org).
        DBLP_SEARCH_URL: full-text search endpoint (default {base}/search).
        DBLP_TIMEOUT_SECONDS: per-request timeout.
        DBLPBIB_IGNORE_FILE: exclusion list location (default ./.bibignore).
        DBLPBIB_USER_AGENT: User-Agent header sent with every request.
    """
    base_url = os.getenv("DBLP_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    search_url = os.getenv("DBLP_SEARCH_URL", f"{base_url}/search")
    timeout_seconds = float(os.getenv("DBLP_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    ignore_path = ignore_file or os.getenv("DBLPBIB_IGNORE_FILE", DEFAULT_IGNORE_FILE)

    return Settings(
        check_only=check_only,
        progress=progress,
        ignore_fields=load_ignore_fields(ignore_path),
        base_url=base_url,
        search_url=search_url,
        timeout_seconds=timeout_seconds,
        user_agent=os.getenv("DBLPBIB_USER_AGENT", DEFAULT_USER_AGENT),
    )
