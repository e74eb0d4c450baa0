"""
Notifier interface and helpers.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from outagewatch.core.logging import get_logger

logger = get_logger("notify")

_TOKEN = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9]*)[^<>]*>|&#?\w+;|.", re.DOTALL)


class NotifyError(Exception):
    """Notification transport failure."""

    def __init__(self, message: str, status_code: int | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class Notifier(ABC):
    """Sends a rich-text (HTML) message somewhere a human will see it."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Notifier identifier."""

    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    async def send(self, message: str) -> None:
        """Deliver a message.

        Raises:
            NotifyError: If delivery failed
        """

    async def close(self) -> None:
        """Release transport resources."""


class DisabledNotifier(Notifier):
    """Used when credentials are missing: logs and drops every message."""

    def __init__(self, reason: str = "notifications are not configured") -> None:
        self.reason = reason

    @property
    def name(self) -> str:
        return "disabled"

    @property
    def enabled(self) -> bool:
        return False

    async def send(self, message: str) -> None:
        logger.warning("Skipping notification: %s", self.reason)


def _closing_tags(open_tags: list[tuple[str, str]]) -> str:
    return "".join(f"</{name}>" for name, _ in reversed(open_tags))


def _wrap_line(line: str, limit: int) -> list[str]:
    """Hard-wrap one long line without cutting a tag or an entity in two.

    Tags still open at a cut are closed at the end of the piece and reopened
    at the start of the next one, so every piece is balanced HTML.
    """
    pieces: list[str] = []
    open_tags: list[tuple[str, str]] = []
    current = ""
    reopened = 0

    for match in _TOKEN.finditer(line):
        token = match.group(0)
        is_closing, name = match.group(1), match.group(2)

        tags_after = list(open_tags)
        if name and is_closing:
            if tags_after and tags_after[-1][0] == name:
                tags_after.pop()
        elif name:
            tags_after.append((name, token))

        if len(current) > reopened and len(current) + len(token) + len(_closing_tags(tags_after)) > limit:
            pieces.append(current + _closing_tags(open_tags))
            current = "".join(opening for _, opening in open_tags)
            reopened = len(current)

        current += token
        open_tags = tags_after

    pieces.append(current + _closing_tags(open_tags))
    return pieces


def _message_pieces(text: str, limit: int) -> list[tuple[str, str]]:
    """Break text into (piece, separator-after) pairs no longer than limit."""
    pieces: list[tuple[str, str]] = []
    for block in text.split("\n\n"):
        if len(block) <= limit:
            pieces.append((block, "\n\n"))
            continue
        for line in block.split("\n"):
            if len(line) > limit:
                pieces.extend((part, "\n") for part in _wrap_line(line, limit))
            else:
                pieces.append((line, "\n"))
        pieces[-1] = (pieces[-1][0], "\n\n")
    return pieces


def split_message(text: str, limit: int) -> list[str]:
    """Split text into chunks of at most ``limit`` characters.

    Splits on blank lines (record boundaries) first, then on single lines,
    and hard-wraps only a single line that is itself too long, keeping its
    HTML tags balanced in every chunk.
    """
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    separator = ""

    for piece, next_separator in _message_pieces(text, limit):
        if not current:
            current = piece
        elif len(current) + len(separator) + len(piece) <= limit:
            current = f"{current}{separator}{piece}"
        else:
            chunks.append(current)
            current = piece
        separator = next_separator

    if current:
        chunks.append(current)
    return chunks
