"""
Background sweep of the refresh-token ledger.
Uses APScheduler to run cleanup_expired_tokens on an interval.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from models import storage

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def cleanup_tokens_job(app):
    """
    Delete expired and revoked refresh tokens. Failures are logged only;
    a skipped sweep just leaves dead rows around until the next run.
    """
    with app.app_context():
        try:
            app.extensions["session_manager"].cleanup_expired_tokens()
        except Exception:
            storage.rollback()
            logger.exception("Refresh token cleanup failed")


def start_scheduler(app, minutes: int):
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler is already running")
        return scheduler

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        cleanup_tokens_job,
        trigger=IntervalTrigger(minutes=minutes),
        args=[app],
        id="refresh_token_cleanup",
        name="Cleanup expired/revoked refresh tokens",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Background scheduler started. Token cleanup every %d minutes.", minutes)
    return scheduler


def shutdown_scheduler():
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Background scheduler stopped.")
