from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from servicefrios.config import settings


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=False
)

# Session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency for getting the session factory repositories are built on."""
    return async_session


async def init_db():
    """Initialize the database, creating all tables."""
    # Import models to register them
    from servicefrios import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
