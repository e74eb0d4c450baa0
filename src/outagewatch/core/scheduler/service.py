"""
APScheduler v4 integration for OutageWatch.

Runs the outage check on a fixed interval. Schedules are kept in memory; the
schedule is rebuilt from configuration on every start.
"""

from __future__ import annotations

from datetime import timedelta

from apscheduler import AsyncScheduler, ConflictPolicy
from apscheduler.triggers.interval import IntervalTrigger

from outagewatch.core.config.loader import load_app_config
from outagewatch.core.config.models import ScheduleConfig
from outagewatch.core.logging import get_logger
from outagewatch.core.orchestrator.runner import run_outage_check

logger = get_logger("scheduler")

SCHEDULE_ID = "outage-check"


async def execute_scheduled_check(config_path: str | None = None) -> str:
    """Execute one scheduled check. Returns the run summary line."""
    config = load_app_config(config_path)
    summary = await run_outage_check(config)
    logger.info("Scheduled check finished: %s", summary.summary)
    return summary.summary


class SchedulerService:
    """Interval scheduler for the outage check."""

    def __init__(self, schedule: ScheduleConfig, config_path: str | None = None) -> None:
        self.schedule = schedule
        self.config_path = config_path

    def build_trigger(self) -> IntervalTrigger:
        return IntervalTrigger(minutes=self.schedule.interval_minutes)

    async def start(self) -> None:
        """Start scheduler in foreground mode (blocking)."""
        if self.schedule.run_on_start:
            await execute_scheduled_check(self.config_path)

        max_jitter = None
        if self.schedule.jitter_seconds > 0:
            max_jitter = timedelta(seconds=self.schedule.jitter_seconds)

        async with AsyncScheduler() as scheduler:
            await scheduler.add_schedule(
                execute_scheduled_check,
                self.build_trigger(),
                id=SCHEDULE_ID,
                args=[self.config_path],
                conflict_policy=ConflictPolicy.replace,
                max_jitter=max_jitter,
            )
            logger.info(
                "Checking every %d minute(s)",
                self.schedule.interval_minutes,
            )
            await scheduler.run_until_stopped()
