"""Per-input status lines (OK / NOT_FOUND / AMBIGUOUS / INVALID)."""

from __future__ import annotations

import sys
from typing import TextIO

from models import Status


class StatusReporter:
    """Print one human-readable status line per resolved subject.

    These lines are the interactive feedback of check mode, so they go to
    stdout rather than through logging.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.counts: dict[Status, int] = {status: 0 for status in Status}

    def report(self, status: Status, kind: str, subject: str, detail: str = "") -> None:
        self.counts[status] += 1
        line = f"[{status.value}] {kind}={subject}"
        if detail:
            line = f"{line}: {detail}"
        print(line, file=self._stream or sys.stdout, flush=True)
