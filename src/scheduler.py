from __future__ import annotations

import logging
from typing import Literal

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from services.tvl_service import TvlService

logger = logging.getLogger(__name__)

Cadence = Literal["monthly", "daily"]

JOB_ID = "tvl-update"


def cadence_trigger(cadence: Cadence) -> CronTrigger:
    """Midnight UTC every day, or midnight UTC on the 1st of every month."""
    if cadence == "daily":
        return CronTrigger(hour=0, minute=0, timezone="UTC")
    if cadence == "monthly":
        return CronTrigger(day=1, hour=0, minute=0, timezone="UTC")
    msg = f"Unknown cadence: {cadence}"
    raise ValueError(msg)


def run_scheduled_update(service: TvlService) -> None:
    """One scheduled firing: fleet total, then every organization. Never raises."""
    if service.is_running:
        logger.info("Skipping scheduled TVL update, another run is in progress")
        return
    logger.info("Running scheduled TVL update")
    try:
        service.recompute_fleet()
    except Exception:
        logger.exception("Error updating total TVL for all organizations")
    try:
        service.update_each_organization()
    except Exception:
        logger.exception("Error updating TVL for each organization")


def build_scheduler(service: TvlService, cadence: Cadence) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        run_scheduled_update,
        cadence_trigger(cadence),
        args=[service],
        id=JOB_ID,
        name=f"{cadence} TVL update",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def run_schedule(service: TvlService, cadence: Cadence) -> None:
    scheduler = build_scheduler(service, cadence)
    logger.info("Starting %s TVL update schedule", cadence)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("TVL update schedule stopped")


__all__ = ["build_scheduler", "cadence_trigger", "run_schedule", "run_scheduled_update"]
