from datetime import date
from typing import Optional

from sqlalchemy import select, func, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.errors import NotFoundError
from servicefrios.models import Schedule


class ScheduleRepository:
    """Data access for maintenance schedules. Each call runs in its own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, schedule_id: int) -> Optional[Schedule]:
        async with self.session_factory() as session:
            return await session.get(Schedule, schedule_id)

    async def add(self, schedule: Schedule) -> Schedule:
        async with self.session_factory() as session:
            session.add(schedule)
            await session.commit()
            await session.refresh(schedule)
            return schedule

    async def update(self, schedule_id: int, patch: dict) -> Schedule:
        async with self.session_factory() as session:
            schedule = await session.get(Schedule, schedule_id)
            if not schedule:
                raise NotFoundError(f"Schedule {schedule_id} not found")
            for field, value in patch.items():
                setattr(schedule, field, value)
            await session.commit()
            await session.refresh(schedule)
            return schedule

    async def delete(self, schedule_id: int) -> None:
        async with self.session_factory() as session:
            schedule = await session.get(Schedule, schedule_id)
            if schedule:
                await session.delete(schedule)
                await session.commit()

    async def find_due(self, horizon: date) -> list[Schedule]:
        """Active schedules whose next run falls on or before the horizon."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Schedule).where(
                    Schedule.is_active == True,
                    or_(Schedule.next_run_at <= horizon, Schedule.next_run_at.is_(None))
                ).order_by(Schedule.id)
            )
            return list(result.scalars().all())

    async def list(
        self,
        client_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 10
    ) -> tuple[list[Schedule], int]:
        query = select(Schedule)
        if client_id is not None:
            query = query.where(Schedule.client_id == client_id)
        if is_active is not None:
            query = query.where(Schedule.is_active == is_active)

        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(query.subquery()))
            result = await session.execute(
                query.order_by(desc(Schedule.created_at), desc(Schedule.id)).offset(offset).limit(limit)
            )
            return list(result.scalars().all()), total or 0
