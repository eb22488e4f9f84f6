import logging

from apscheduler.schedulers.blocking import BlockingScheduler

from mccfix.batch import BatchRunner
from mccfix.config import Settings


logger = logging.getLogger(__name__)


def _run_scheduled_pass(settings: Settings) -> None:
    runner = BatchRunner(settings)
    try:
        result = runner.run()
    except Exception:
        # Already logged by the runner; keep the scheduler alive for the next pass.
        logger.error("scheduled remediation pass failed", extra={"results_path": settings.results_path})
        return

    if result.failed_records:
        logger.warning(
            "scheduled remediation pass completed with failed records",
            extra={"total_records": result.total_records, "failed_records": result.failed_records},
        )
        return
    logger.info(
        "scheduled remediation pass completed",
        extra={"total_records": result.total_records, "results_path": result.results_path},
    )


def start_scheduler(settings: Settings, *, run_now: bool = False) -> None:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        _run_scheduled_pass,
        "cron",
        args=[settings],
        hour=settings.schedule_hour_utc,
        minute=settings.schedule_minute_utc,
        id="daily_mcc_remediation",
        replace_existing=True,
    )

    logger.info(
        "scheduler started",
        extra={
            "schedule_hour_utc": settings.schedule_hour_utc,
            "schedule_minute_utc": settings.schedule_minute_utc,
        },
    )

    if run_now:
        _run_scheduled_pass(settings)

    scheduler.start()
