"""
Scheduler for periodic aggregation runs.
Every scheduled run recomputes the full snapshot.
"""
import logging
import threading
import time
from typing import Any, Callable, List, Optional

import pytz
import schedule

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Runs a job every day at fixed times in a background thread.
    """

    def __init__(self, times: List[str], job_func: Callable[[], Any], timezone: str = "UTC"):
        """
        Initialize the scheduler.

        Args:
            times: List of times in HH:MM format (e.g., ["05:00", "14:00"])
            job_func: Callable executed at every scheduled time
            timezone: Timezone the times are expressed in
        """
        self.times = times
        self.job_func = job_func
        self.jobs = schedule.Scheduler()
        self.running = False
        self.thread = None
        self._stop_event = threading.Event()

        try:
            pytz.timezone(timezone)
            self.timezone = timezone
        except pytz.exceptions.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone: {timezone}, using system local time")
            self.timezone = None

    def _run_job_safely(self):
        """Run the job, logging its errors so later runs still happen."""
        try:
            start_time = time.time()
            self.job_func()
            logger.info(f"Scheduled run completed in {time.time() - start_time:.2f} seconds")
        except Exception as e:
            logger.error(f"Error executing scheduled run: {e}", exc_info=True)

    def start(self):
        """
        Register one daily job per valid time and start the scheduler thread.

        Invalid times are logged and skipped. If none is valid the scheduler
        stays stopped.
        """
        if self.running:
            logger.warning("Scheduler is already running")
            return

        self.jobs.clear()
        for time_str in self.times:
            job = self.jobs.every().day
            try:
                if self.timezone:
                    job.at(time_str, self.timezone)
                else:
                    job.at(time_str)
            except schedule.ScheduleValueError as e:
                logger.error(f"Invalid schedule time '{time_str}': {e}. Skipping.")
                continue
            job.do(self._run_job_safely)
            logger.info(f"Scheduled aggregation run at {time_str} ({self.timezone or 'local time'})")

        if not self.jobs.get_jobs():
            logger.warning("No valid schedule times, scheduler not started")
            return

        self._stop_event.clear()
        self.running = True
        self.thread = threading.Thread(target=self._scheduler_loop, daemon=True)
        self.thread.start()

    def stop(self):
        """Stop the scheduler thread and drop all jobs."""
        if not self.running:
            return

        self._stop_event.set()
        self.running = False
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=5)
            if self.thread.is_alive():
                logger.warning("Scheduler thread did not terminate cleanly.")

        self.jobs.clear()
        logger.info("Scheduler stopped")

    def _scheduler_loop(self):
        while not self._stop_event.is_set():
            self.jobs.run_pending()
            self._stop_event.wait(1)


def initialize_scheduler(times: List[str], timezone: str, job_func: Callable[[], Any]) -> Optional[Scheduler]:
    """
    Create a scheduler for the configured times.

    Args:
        times: Daily run times in HH:MM format
        timezone: Timezone name understood by pytz
        job_func: The function to call for each scheduled run

    Returns:
        A configured Scheduler instance, or None if no times are configured.
    """
    if not times:
        logger.warning("No schedule times configured in settings.")
        return None

    return Scheduler(times=times, job_func=job_func, timezone=timezone)
