import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.config import settings
from servicefrios.repositories import GenerationRunRepository, ScheduleRepository, ServiceOrderRepository
from servicefrios.services.materializer import OccurrenceMaterializer
from servicefrios.services.scanner import ScanResult, ScheduleScanner

logger = logging.getLogger(__name__)


def default_horizon(today: Optional[date] = None) -> date:
    return (today or date.today()) + timedelta(days=settings.generation_horizon_days)


def build_scanner(session_factory: async_sessionmaker[AsyncSession]) -> ScheduleScanner:
    return ScheduleScanner(
        ScheduleRepository(session_factory),
        OccurrenceMaterializer(ServiceOrderRepository(session_factory)),
        concurrency=settings.scan_concurrency
    )


async def generate_services(
    session_factory: async_sessionmaker[AsyncSession],
    until: Optional[date] = None,
    trigger: str = "manual"
) -> ScanResult:
    """Run one generation pass and record it as a GenerationRun."""
    horizon = until or default_horizon()
    runs = GenerationRunRepository(session_factory)
    run = await runs.start(trigger, horizon)
    logger.info(f"Starting {trigger} generation run {run.id} up to {horizon}")

    try:
        result = await build_scanner(session_factory).run_due_schedules(horizon)
    except Exception as e:
        logger.error(f"Generation run {run.id} failed: {e}")
        await runs.finish(run.id, error_message=str(e))
        raise

    await runs.finish(
        run.id,
        created_count=result.created_count,
        processed_count=result.processed_count,
        error_count=len(result.errors)
    )
    return result
