from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from typing import Optional

from servicefrios.database import get_session_factory
from servicefrios.repositories import ServiceOrderRepository
from servicefrios.schemas import ServiceOrderOut

router = APIRouter()


@router.get("/")
async def list_service_orders(
    schedule_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """List service orders, latest scheduled first."""
    orders, total = await ServiceOrderRepository(session_factory).list(
        schedule_id=schedule_id,
        offset=(page - 1) * limit,
        limit=limit
    )
    return {
        "success": True,
        "data": [ServiceOrderOut.model_validate(o) for o in orders],
        "total": total
    }
