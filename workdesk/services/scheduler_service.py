import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    def __init__(self, app=None):
        self.scheduler = BackgroundScheduler()
        self.app = app
        if app:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        self.scheduler.add_job(
            func=self.mark_overdue_invoices,
            trigger=CronTrigger(hour=0, minute=30),
            id='mark_overdue_invoices',
            name='Mark unpaid invoices past their due date as overdue',
            replace_existing=True
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("Scheduler started - overdue invoice sweep scheduled for 00:30 daily")

    def mark_overdue_invoices(self):
        """Runs daily. Returns the number of invoices moved to overdue."""
        if not self.app:
            logger.error("App context not available for scheduler")
            return 0

        with self.app.app_context():
            try:
                from workdesk.database.models.invoice import Invoice
                count = Invoice.mark_overdue()
                logger.info("Overdue sweep finished: %d invoice(s) marked overdue", count)
                return count
            except Exception as e:
                logger.error("Error during overdue invoice sweep: %s", e)
                return 0

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler shut down")


scheduler_service = SchedulerService()
