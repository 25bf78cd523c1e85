from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from datetime import date
from typing import Optional
import logging

from servicefrios.database import get_session_factory
from servicefrios.repositories import (
    ClientRepository, ScheduleRepository, ServiceOrderRepository, TechnicianRepository
)
from servicefrios.schemas import ScheduleCreate, ScheduleOut, ScheduleUpdate
from servicefrios.services.generation import generate_services, default_horizon
from servicefrios.services.schedules import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_schedule_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
) -> ScheduleService:
    return ScheduleService(
        ScheduleRepository(session_factory),
        ServiceOrderRepository(session_factory),
        ClientRepository(session_factory),
        TechnicianRepository(session_factory)
    )


@router.post("/generate-services")
async def generate(
    until: Optional[date] = Query(None),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory)
):
    """Materialize service orders for every due schedule up to ``until``."""
    try:
        result = await generate_services(session_factory, until=until, trigger="manual")
    except Exception as e:
        return JSONResponse(
            {"success": False, "error": "generation_failed", "detail": str(e)},
            status_code=500
        )
    return result.to_dict()


@router.get("/")
async def list_schedules(
    client_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: ScheduleService = Depends(get_schedule_service)
):
    """List schedules, newest first."""
    schedules, total = await service.list(client_id=client_id, is_active=is_active, page=page, limit=limit)
    return {
        "success": True,
        "data": [ScheduleOut.model_validate(s) for s in schedules],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit
        }
    }


@router.post("/", status_code=201)
async def create_schedule(
    payload: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service)
):
    schedule = await service.create(payload.model_dump())
    return {"success": True, "data": ScheduleOut.model_validate(schedule)}


@router.get("/{schedule_id}")
async def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    schedule = await service.get(schedule_id)
    return {"success": True, "data": ScheduleOut.model_validate(schedule)}


@router.put("/{schedule_id}")
async def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service)
):
    schedule = await service.update(schedule_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "data": ScheduleOut.model_validate(schedule)}


@router.delete("/{schedule_id}")
async def delete_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    """Delete a schedule, or deactivate it when it already generated orders."""
    deleted = await service.delete(schedule_id)
    return {
        "success": True,
        "deleted": deleted,
        "message": "Schedule deleted" if deleted else "Schedule has service orders; deactivated instead"
    }


@router.post("/{schedule_id}/toggle-active")
async def toggle_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    schedule = await service.toggle_active(schedule_id)
    return {"success": True, "data": ScheduleOut.model_validate(schedule)}


@router.get("/{schedule_id}/occurrences")
async def preview_occurrences(
    schedule_id: int,
    until: Optional[date] = Query(None),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Dates the schedule would generate orders for, without writing anything."""
    horizon = until or default_horizon()
    dates = await service.preview(schedule_id, horizon)
    return {
        "schedule_id": schedule_id,
        "until": horizon.isoformat(),
        "occurrences": [d.isoformat() for d in dates]
    }
