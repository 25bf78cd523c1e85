from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.models import Client, Technician


class _ExistenceRepository:
    model = None

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def exists(self, record_id: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.model.id).where(self.model.id == record_id)
            )
            return result.scalar_one_or_none() is not None


class ClientRepository(_ExistenceRepository):
    model = Client


class TechnicianRepository(_ExistenceRepository):
    model = Technician
