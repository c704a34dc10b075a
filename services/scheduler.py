import logging
import threading

import schedule

logger = logging.getLogger(__name__)


class MonitoringScheduler:
    """Runs the threshold evaluator on a fixed interval in a background thread."""

    def __init__(self, app, evaluator, interval_seconds=20, initial_delay_seconds=30):
        self.app = app
        self.evaluator = evaluator
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.scheduler = schedule.Scheduler()
        self.is_running = False
        self.scheduler_thread = None
        self._stop_event = threading.Event()

    def start_scheduled_monitoring(self):
        """Start the scheduled evaluation task"""
        self.scheduler.clear()
        self.scheduler.every(self.interval_seconds).seconds.do(self.run_evaluation_task)

        self.is_running = True
        self._stop_event.clear()
        self.scheduler_thread = threading.Thread(target=self.run_scheduler, name='threshold-evaluator')
        self.scheduler_thread.daemon = True
        self.scheduler_thread.start()

        logger.info("Scheduled evaluation started (every %ss, first run in %ss)",
                    self.interval_seconds, self.initial_delay_seconds)

    def stop_scheduled_monitoring(self):
        """Stop the scheduled evaluation"""
        self.is_running = False
        self._stop_event.set()
        if self.scheduler_thread:
            self.scheduler_thread.join(timeout=5)
        self.scheduler.clear()
        logger.info("Scheduled evaluation stopped.")

    def run_scheduler(self):
        """Run the scheduler loop"""
        if self._stop_event.wait(self.initial_delay_seconds):
            return
        self.run_evaluation_task()
        while self.is_running:
            self.scheduler.run_pending()
            if self._stop_event.wait(1):
                break

    def run_evaluation_task(self):
        """Run one evaluation pass within application context"""
        with self.app.app_context():
            try:
                summary = self.evaluator.evaluate_all()
                logger.info("Evaluated %d networks (%d failed)",
                            len(summary.evaluated), len(summary.failed))
                return summary
            except Exception:
                logger.exception("Error in scheduled evaluation")
                return None
