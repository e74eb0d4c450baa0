"""Scheduler - recurring trigger for the outage check."""

from .service import SchedulerService, execute_scheduled_check

__all__ = [
    "SchedulerService",
    "execute_scheduled_check",
]
