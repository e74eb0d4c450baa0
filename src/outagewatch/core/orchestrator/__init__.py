"""Orchestrator - per-category change detection and the category runner."""

from .runner import CategoryCheck, CheckRunner, Outcome, RunSummary, run_outage_check

__all__ = [
    "CategoryCheck",
    "CheckRunner",
    "Outcome",
    "RunSummary",
    "run_outage_check",
]
