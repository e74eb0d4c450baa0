"""
Logging for OutageWatch.

Console output goes through Rich with a ``[category]`` prefix; the optional
log file gets one JSON object per line. Records emitted through a
``ContextualLogger`` carry the category key and run id as attributes so both
outputs can show them.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from rich.console import Console

ROOT_LOGGER = "outagewatch"

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Record attributes copied into JSON output when present
CONTEXT_FIELDS = ("category", "run_id", "url", "outcome", "fingerprint")

LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "default",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}

# httpx logs every request URL at INFO; Telegram URLs embed the bot token
QUIET_LOGGERS = ("httpx", "httpcore", "apscheduler")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(entry, default=str).decode("utf-8")


class RichConsoleHandler(logging.Handler):
    """Writes records to a Rich console, colored by level.

    Messages are rendered as ``Text`` rather than markup; outage reports are
    full of square brackets.
    """

    def __init__(self, console: "Console | None" = None, level: int = logging.INFO):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        from rich.text import Text

        try:
            line = Text()
            category = getattr(record, "category", None)
            if category:
                line.append(f"[{category}] ", style="cyan")
            line.append(self.format(record), style=LEVEL_STYLES.get(record.levelno, "default"))
            self.console.print(line)

            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


def _console_handler(rich_console: bool) -> logging.Handler:
    if rich_console:
        handler: logging.Handler = RichConsoleHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def _file_handler(log_file: Path | str, json_format: bool) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the ``outagewatch`` logger tree.

    Safe to call more than once; handlers from a previous call are replaced.

    Args:
        level: Console log level name
        log_file: Optional file receiving every record at DEBUG and above
        json_format: Write the file as JSON lines instead of plain text
        rich_console: Use Rich on the console (plain stderr lines otherwise)
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(min(numeric_level, logging.DEBUG) if log_file else numeric_level)
    logger.handlers.clear()

    console = _console_handler(rich_console)
    console.setLevel(numeric_level)
    logger.addHandler(console)

    if log_file:
        logger.addHandler(_file_handler(log_file, json_format))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """``outagewatch`` or ``outagewatch.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


class ContextualLogger(logging.LoggerAdapter):
    """Adds ``category`` and ``run_id`` to every record it emits."""

    def __init__(
        self,
        logger: logging.Logger,
        category: str | None = None,
        run_id: str | None = None,
    ):
        context = {"category": category, "run_id": run_id}
        super().__init__(logger, {k: v for k, v in context.items() if v})
        self.category = category
        self.run_id = run_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_contextual_logger(
    name: str | None = None,
    category: str | None = None,
    run_id: str | None = None,
) -> ContextualLogger:
    return ContextualLogger(get_logger(name), category=category, run_id=run_id)
