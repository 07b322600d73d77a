"""
Background job scheduler for periodic tasks.
Uses APScheduler to regenerate daily summaries once a day.
"""
import os
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from journal_insights import database
from journal_insights.services.insights_client import build_insights_client
from journal_insights.services.summary_service import generate_daily_summaries_for_all_users

logger = logging.getLogger(__name__)


class BackgroundJobScheduler:
    """Manages background jobs for the application."""

    def __init__(self):
        self.scheduler = BackgroundScheduler()
        self.daily_summary_enabled = os.getenv('DAILY_SUMMARY_ENABLED', 'true').lower() == 'true'
        self.daily_summary_hour = int(os.getenv('DAILY_SUMMARY_HOUR', '0'))
        self.daily_summary_minute = int(os.getenv('DAILY_SUMMARY_MINUTE', '0'))

    def start(self):
        """Start the background job scheduler."""
        if not self.scheduler.running:
            if self.daily_summary_enabled:
                self.scheduler.add_job(
                    func=daily_summary_job,
                    trigger=CronTrigger(hour=self.daily_summary_hour, minute=self.daily_summary_minute),
                    id='daily_summary_job',
                    name='Generate daily summaries for users who journaled yesterday',
                    replace_existing=True,
                    max_instances=1,
                    coalesce=True,
                )
                logger.info(
                    f"Daily summary job scheduled at {self.daily_summary_hour:02d}:{self.daily_summary_minute:02d}"
                )

            self.scheduler.start()
            logger.info("Background job scheduler started")

    def stop(self):
        """Stop the background job scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Background job scheduler stopped")

    def run_daily_summaries_now(self):
        """Manually trigger the daily summary job."""
        return daily_summary_job()


def daily_summary_job(client=None):
    """
    Background job that generates today's summary for every user who
    journaled yesterday. Owns its own session; shares nothing with requests.
    """
    logger.info("Running daily summary generation...")

    owns_client = client is None
    client = client or build_insights_client()
    db = database.SessionLocal()
    try:
        return generate_daily_summaries_for_all_users(db, client)
    except Exception:
        logger.exception("Daily summary job failed")
        return None
    finally:
        db.close()
        if owns_client:
            client.close()


# Global scheduler instance
scheduler = BackgroundJobScheduler()
