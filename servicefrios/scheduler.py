from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime
from typing import Optional
import logging

from servicefrios.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

JOB_ID = "servicefrios_generate"


def get_next_run_time() -> Optional[datetime]:
    """Get the next scheduled generation time."""
    job = scheduler.get_job(JOB_ID)
    if job:
        return job.next_run_time
    return None


async def scheduled_generation():
    """Run the generation job."""
    from servicefrios.database import async_session
    from servicefrios.services.generation import generate_services

    logger.info("Starting scheduled service generation")
    try:
        await generate_services(async_session, trigger="scheduled")
    except Exception as e:
        # Already recorded on the run; keep the job alive for tomorrow
        logger.error(f"Scheduled generation failed: {e}")


def configure_jobs():
    """Register the daily generation job when enabled in settings."""
    scheduler.remove_all_jobs()

    if not settings.auto_generate:
        logger.info("Automatic generation disabled")
        return

    trigger = CronTrigger(hour=settings.generate_hour, minute=settings.generate_minute)
    scheduler.add_job(scheduled_generation, trigger, id=JOB_ID)
    logger.info(f"Scheduled daily generation at {settings.generate_hour:02d}:{settings.generate_minute:02d}")


def start_scheduler():
    """Start the scheduler."""
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def stop_scheduler():
    """Stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
