"""Periodic trigger for refreshing all VPS accounts"""

import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from vps_monitor.config import config
from vps_monitor.models.refresh_result import RefreshResult
from vps_monitor.services.refresh_orchestrator import RefreshOrchestrator

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "vps_refresh"


class RefreshScheduler:
    """Run refresh-all on a crontab schedule in a background thread"""

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        cron_expression: str | None = None,
        scheduler: BackgroundScheduler | None = None,
    ):
        self.orchestrator = orchestrator
        self.cron_expression = cron_expression or config.refresh_cron
        self.scheduler = scheduler
        self.running = False

    def run_refresh_job(self) -> RefreshResult | None:
        """Scheduled job body; failures are logged so the next tick still fires"""
        logger.info("[Scheduler] Running VPS refresh job")
        try:
            result = self.orchestrator.refresh_once()
        except Exception as e:
            logger.error(f"[Scheduler] VPS refresh job failed: {e}", exc_info=True)
            return None

        if result.success:
            logger.info(
                f"[Scheduler] VPS refresh job completed: {result.refreshed_count} refreshed "
                f"in {result.duration_seconds:.2f}s"
            )
        else:
            logger.error(f"[Scheduler] VPS refresh job failed: {result.error}")
        return result

    def start(self) -> None:
        """Register the refresh job and start the scheduler"""
        if self.running:
            logger.warning("Refresh scheduler already running")
            return

        if self.scheduler is None:
            self.scheduler = BackgroundScheduler()

        trigger = CronTrigger.from_crontab(
            self.cron_expression, timezone=config.display_timezone
        )
        self.scheduler.add_job(
            self.run_refresh_job,
            trigger=trigger,
            id=REFRESH_JOB_ID,
            name="VPS Refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        self.running = True
        logger.info(f"Scheduled VPS refresh with cron '{self.cron_expression}'")

    def stop(self) -> None:
        """Remove the refresh job and shut the scheduler down"""
        if not self.running or self.scheduler is None:
            return

        try:
            self.scheduler.remove_job(REFRESH_JOB_ID)
        except JobLookupError:
            logger.warning("Refresh job not found during shutdown")

        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Stopped refresh scheduler")
