from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from servicefrios.database import get_session_factory
from servicefrios.repositories import GenerationRunRepository
from servicefrios.scheduler import get_next_run_time
from servicefrios.schemas import GenerationRunOut

router = APIRouter()


@router.get("/")
async def list_runs(
    limit: int = Query(10, ge=1, le=100),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """Recent generation runs and the next automatic run, if any."""
    runs = await GenerationRunRepository(session_factory).latest(limit)
    next_run = get_next_run_time()
    return {
        "runs": [GenerationRunOut.model_validate(r) for r in runs],
        "next_run": next_run.strftime('%Y-%m-%d %H:%M') if next_run else None
    }
