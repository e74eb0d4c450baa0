"""
Serverless entry point.

``handler`` takes no meaningful input, runs every configured category once and
always reports success when the run completes; per-category failures are in
the returned outcomes and the logs.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

from outagewatch.core.config import load_app_config
from outagewatch.core.logging import get_logger, setup_logging
from outagewatch.core.orchestrator import RunSummary, run_outage_check

logger = get_logger("handler")


async def handle(config_path: str | None = None, dry_run: bool = False) -> dict[str, Any]:
    config = load_app_config(config_path)
    summary: RunSummary = await run_outage_check(config, dry_run=dry_run)
    return {
        "statusCode": 200,
        "body": summary.summary,
        "outcomes": summary.to_dict()["outcomes"],
    }


def handler(event: Any = None, context: Any = None) -> dict[str, Any]:
    """Run one check over all categories (scheduled-job entry point)."""
    setup_logging(
        level=os.environ.get("OUTAGEWATCH_LOG_LEVEL", "INFO"),
        rich_console=False,
    )
    logger.info("Fetching latest water outage data...")
    return asyncio.run(handle(os.environ.get("OUTAGEWATCH_CONFIG")))
