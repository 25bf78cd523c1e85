import logging
from datetime import date
from typing import Optional

from servicefrios.errors import NotFoundError, ValidationError
from servicefrios.models import Schedule, Priority
from servicefrios.services.recurrence import validate_recurrence, iter_occurrences
from servicefrios.services.scanner import compute_next_run

logger = logging.getLogger(__name__)

RECURRENCE_FIELDS = ("frequency", "custom_interval_days", "day_of_month", "days_of_week")


def _enum_value(value):
    return getattr(value, "value", value)


class ScheduleService:
    """Administration of maintenance schedules."""

    def __init__(self, schedules, orders, clients, technicians):
        self.schedules = schedules
        self.orders = orders
        self.clients = clients
        self.technicians = technicians

    async def get(self, schedule_id: int) -> Schedule:
        schedule = await self.schedules.get(schedule_id)
        if not schedule:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    async def _check_references(self, client_id: Optional[int], technician_id: Optional[int]):
        if client_id is not None and not await self.clients.exists(client_id):
            raise NotFoundError(f"Client {client_id} not found")
        if technician_id is not None and not await self.technicians.exists(technician_id):
            raise NotFoundError(f"Technician {technician_id} not found")

    async def create(self, data: dict) -> Schedule:
        frequency = validate_recurrence(
            data.get("frequency"),
            data.get("custom_interval_days"),
            data.get("day_of_month")
        )
        if data.get("end_date") and data["end_date"] < data["start_date"]:
            raise ValidationError("end_date cannot be before start_date")
        await self._check_references(data.get("client_id"), data.get("technician_id"))

        data = dict(data)
        data["frequency"] = frequency.value
        data["priority"] = _enum_value(data.get("priority")) or Priority.MEDIUM.value
        data.setdefault("service_type", "programado")
        data.setdefault("start_time", "08:00")
        data.setdefault("equipment_ids", [])

        schedule = Schedule(**data)
        schedule.next_run_at = schedule.start_date
        schedule.is_active = True
        schedule = await self.schedules.add(schedule)

        logger.info(f"Created schedule {schedule.id} ({schedule.frequency}) for client {schedule.client_id}")
        return schedule

    async def update(self, schedule_id: int, patch: dict) -> Schedule:
        current = await self.get(schedule_id)

        new_start = patch.pop("start_date", None)
        if new_start is not None and new_start != current.start_date:
            raise ValidationError("start_date cannot be changed once the schedule exists")

        merged = {f: patch.get(f, getattr(current, f)) for f in RECURRENCE_FIELDS}
        frequency = validate_recurrence(
            merged["frequency"],
            merged["custom_interval_days"],
            merged["day_of_month"]
        )
        end_date = patch.get("end_date", current.end_date)
        if end_date and end_date < current.start_date:
            raise ValidationError("end_date cannot be before start_date")
        await self._check_references(patch.get("client_id"), patch.get("technician_id"))

        if "frequency" in patch:
            patch["frequency"] = frequency.value
        if patch.get("priority") is not None:
            patch["priority"] = _enum_value(patch["priority"])

        if any(f in patch and patch[f] != getattr(current, f) for f in RECURRENCE_FIELDS):
            # Recompute against a copy carrying the new recurrence
            probe = Schedule(
                start_date=current.start_date,
                last_run_at=current.last_run_at,
                frequency=frequency.value,
                custom_interval_days=merged["custom_interval_days"],
                day_of_month=merged["day_of_month"]
            )
            patch["next_run_at"] = compute_next_run(probe)

        schedule = await self.schedules.update(schedule_id, patch)
        logger.info(f"Updated schedule {schedule_id}: {', '.join(sorted(patch))}")
        return schedule

    async def toggle_active(self, schedule_id: int) -> Schedule:
        current = await self.get(schedule_id)
        schedule = await self.schedules.update(schedule_id, {"is_active": not current.is_active})
        logger.info(f"Schedule {schedule_id} {'activated' if schedule.is_active else 'deactivated'}")
        return schedule

    async def delete(self, schedule_id: int) -> bool:
        """Delete a schedule without orders, deactivate one with orders. Returns True on hard delete."""
        await self.get(schedule_id)
        if await self.orders.count_by_schedule_id(schedule_id) == 0:
            await self.schedules.delete(schedule_id)
            logger.info(f"Deleted schedule {schedule_id}")
            return True

        await self.schedules.update(schedule_id, {"is_active": False})
        logger.info(f"Schedule {schedule_id} has orders; deactivated instead of deleted")
        return False

    async def preview(self, schedule_id: int, until: date) -> list[date]:
        """Occurrence dates the schedule would materialize up to ``until``."""
        schedule = await self.get(schedule_id)
        return list(iter_occurrences(schedule, until))

    async def list(
        self,
        client_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10
    ) -> tuple[list[Schedule], int]:
        return await self.schedules.list(
            client_id=client_id,
            is_active=is_active,
            offset=(page - 1) * limit,
            limit=limit
        )
