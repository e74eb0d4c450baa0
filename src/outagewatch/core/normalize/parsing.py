"""
Text cleanup helpers shared by extraction and canonicalization.
"""

from __future__ import annotations

import html
import re

# Non-breaking and zero-width characters the source pages use for layout
_INVISIBLE = str.maketrans({
    "\u00a0": " ",
    "\u2007": " ",
    "\u202f": " ",
    "\u200b": "",
    "\ufeff": "",
})

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse whitespace runs to a single space and trim.

    >>> normalize_whitespace("  ul.\\u00a0Traktorzystów \\n 12 ")
    'ul. Traktorzystów 12'
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.translate(_INVISIBLE)).strip()


def escape_html(text: str) -> str:
    """Escape text for Telegram's HTML parse mode (&, <, >)."""
    return html.escape(text, quote=False)
