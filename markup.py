"""Presentation-markup removal for fetched record bodies."""

from __future__ import annotations

import re

# Opening, closing and self-closing tags. Entities are left alone.
_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*?/?>")


def strip_markup(raw: str) -> str:
    """Return ``raw`` with every tag removed and all other text untouched.

    Removal repeats until nothing matches, so fragments such as ``<<b>i>``
    cannot reassemble into a new tag and the result is a fixed point.
    """
    text = raw
    while True:
        text, count = _TAG_RE.subn("", text)
        if count == 0:
            return text
