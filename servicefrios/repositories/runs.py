from datetime import date, datetime
from typing import Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.models import GenerationRun


class GenerationRunRepository:
    """Bookkeeping for generation runs."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def start(self, trigger: str, horizon: date) -> GenerationRun:
        async with self.session_factory() as session:
            run = GenerationRun(trigger=trigger, horizon=horizon, status="running")
            session.add(run)
            await session.commit()
            await session.refresh(run)
            return run

    async def finish(
        self,
        run_id: int,
        created_count: int = 0,
        processed_count: int = 0,
        error_count: int = 0,
        error_message: Optional[str] = None
    ) -> None:
        async with self.session_factory() as session:
            run = await session.get(GenerationRun, run_id)
            run.completed_at = datetime.now()
            run.created_count = created_count
            run.processed_count = processed_count
            run.error_count = error_count
            run.status = "failed" if error_message else "completed"
            run.error_message = error_message
            await session.commit()

    async def latest(self, limit: int = 10) -> list[GenerationRun]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(GenerationRun).order_by(desc(GenerationRun.started_at), desc(GenerationRun.id)).limit(limit)
            )
            return list(result.scalars().all())
