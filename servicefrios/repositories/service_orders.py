from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.errors import DuplicateOccurrenceError
from servicefrios.models import ServiceOrder

OCCURRENCE_CONSTRAINT = "uq_service_order_occurrence"


def is_occurrence_conflict(error: IntegrityError) -> bool:
    """True when the integrity error comes from the per-occurrence unique constraint."""
    message = str(error.orig)
    # SQLite reports the columns, PostgreSQL the constraint name
    return OCCURRENCE_CONSTRAINT in message or "service_orders.scheduled_day" in message


class ServiceOrderTransaction:
    """Operations available inside a service order transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_one(self, schedule_id: int, day: date, start_time: Optional[str]) -> Optional[ServiceOrder]:
        result = await self.session.execute(
            select(ServiceOrder).where(
                ServiceOrder.schedule_id == schedule_id,
                ServiceOrder.scheduled_day == day,
                ServiceOrder.start_time == start_time
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, data: dict) -> ServiceOrder:
        order = ServiceOrder(**data)
        self.session.add(order)
        await self.session.flush()
        return order


class ServiceOrderRepository:
    """Data access for service orders."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[ServiceOrderTransaction]:
        """Commit on exit, roll back on error; occurrence conflicts become DuplicateOccurrenceError."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield ServiceOrderTransaction(session)
        except IntegrityError as e:
            if is_occurrence_conflict(e):
                raise DuplicateOccurrenceError(str(e.orig)) from e
            raise

    async def count_by_schedule_id(self, schedule_id: int) -> int:
        async with self.session_factory() as session:
            count = await session.scalar(
                select(func.count(ServiceOrder.id)).where(ServiceOrder.schedule_id == schedule_id)
            )
            return count or 0

    async def list(
        self,
        schedule_id: Optional[int] = None,
        offset: int = 0,
        limit: int = 50
    ) -> tuple[list[ServiceOrder], int]:
        query = select(ServiceOrder)
        if schedule_id is not None:
            query = query.where(ServiceOrder.schedule_id == schedule_id)

        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(query.subquery()))
            result = await session.execute(
                query.order_by(desc(ServiceOrder.scheduled_date)).offset(offset).limit(limit)
            )
            return list(result.scalars().all()), total or 0
