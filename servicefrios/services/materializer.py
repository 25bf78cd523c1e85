import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable, Optional

from servicefrios.errors import DuplicateOccurrenceError
from servicefrios.models.enums import ServiceState, Priority
from servicefrios.services.recurrence import iter_occurrences

logger = logging.getLogger(__name__)


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Human readable order number, e.g. ODT-240131-9f2c41ab."""
    now = now or datetime.now()
    return f"ODT-{now:%y%m%d}-{uuid.uuid4().hex[:8]}"


def parse_start_time(value: Optional[str]) -> time:
    if not value:
        return time(0, 0)
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


@dataclass
class OccurrenceError:
    day: date
    error: str


@dataclass
class MaterializeResult:
    created: int = 0
    skipped: int = 0
    errors: list[OccurrenceError] = field(default_factory=list)


def build_order(schedule, day: date, order_number: str) -> dict:
    """Field values of the service order generated for one occurrence."""
    equipment_id = int(schedule.equipment_ids[0]) if schedule.equipment_ids else None
    return {
        "order_number": order_number,
        "client_id": schedule.client_id,
        "technician_id": schedule.technician_id,
        "equipment_id": equipment_id,
        "schedule_id": schedule.id,
        "scheduled_date": datetime.combine(day, parse_start_time(schedule.start_time)),
        "scheduled_day": day,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "service_type": schedule.service_type,
        "state": ServiceState.PENDING.value,
        "priority": schedule.priority or Priority.MEDIUM.value,
        "description": schedule.description or schedule.name,
        "notes": schedule.notes,
        "details": {
            "generated_by": "schedule",
            "schedule_id": schedule.id,
            "schedule_name": schedule.name,
            "occurrence_date": day.isoformat(),
            "equipment_id": equipment_id
        }
    }


class OccurrenceMaterializer:
    """Turns a schedule's occurrences into service orders, at most one per (day, start time)."""

    def __init__(self, orders, order_numbers: Callable[[], str] = generate_order_number):
        self.orders = orders
        self.order_numbers = order_numbers

    async def materialize(self, schedule, horizon: date) -> MaterializeResult:
        result = MaterializeResult()

        for day in iter_occurrences(schedule, horizon):
            try:
                created = await self._materialize_occurrence(schedule, day)
            except DuplicateOccurrenceError:
                # Another run inserted this occurrence between our check and insert
                created = False
            except Exception as e:
                logger.warning(f"Schedule {schedule.id}: could not create order for {day}: {e}")
                result.errors.append(OccurrenceError(day=day, error=str(e)))
                continue

            if created:
                result.created += 1
            else:
                result.skipped += 1

        if result.created:
            logger.info(f"Schedule {schedule.id}: created {result.created} order(s) up to {horizon}")
        return result

    async def _materialize_occurrence(self, schedule, day: date) -> bool:
        async with self.orders.transaction() as tx:
            existing = await tx.find_one(schedule.id, day, schedule.start_time)
            if existing:
                return False
            await tx.create(build_order(schedule, day, self.order_numbers()))
            return True
