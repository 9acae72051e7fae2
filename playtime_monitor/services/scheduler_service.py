import logging
import threading
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from playtime_monitor import config
from playtime_monitor.cron.playtime_sweep import SweepReport, run_sweep

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "playtime_sweep"


class SweepGate:
    """Lets at most one sweep run; triggers that arrive meanwhile are dropped."""

    def __init__(self, job: Callable[[], SweepReport]):
        self.job = job
        self._lock = threading.Lock()

    def run(self) -> Optional[SweepReport]:
        if not self._lock.acquire(blocking=False):
            logger.warning("Previous playtime sweep is still running, dropping this trigger.")
            return None
        try:
            return self.job()
        finally:
            self._lock.release()


class SchedulerService:
    scheduler = BackgroundScheduler()
    gate = SweepGate(run_sweep)

    @staticmethod
    def start():
        if SchedulerService.scheduler.running:
            return

        SchedulerService.scheduler.add_job(
            SchedulerService.gate.run,
            "interval",
            hours=config.SWEEP_INTERVAL_HOURS,
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

        SchedulerService.scheduler.start()
        logger.info(
            f"[SchedulerService] Scheduler started. Playtime sweep every {config.SWEEP_INTERVAL_HOURS} hours."
        )

    @staticmethod
    def stop():
        if SchedulerService.scheduler.running:
            SchedulerService.scheduler.shutdown(wait=False)

    @staticmethod
    def trigger_now() -> Optional[SweepReport]:
        # Manual sweep, same non-overlap gate as the scheduled job
        return SchedulerService.gate.run()
