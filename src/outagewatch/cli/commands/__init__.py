"""CLI command modules."""

from . import check, state

__all__ = [
    "check",
    "state",
]
