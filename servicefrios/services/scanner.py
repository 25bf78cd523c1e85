import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from servicefrios.services.materializer import OccurrenceMaterializer
from servicefrios.services.recurrence import advance

logger = logging.getLogger(__name__)


@dataclass
class ScheduleError:
    schedule_id: int
    error: str


@dataclass
class ScanResult:
    created_count: int = 0
    processed_count: int = 0
    errors: list[ScheduleError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "createdCount": self.created_count,
            "processedCount": self.processed_count,
            "errors": [{"scheduleId": e.schedule_id, "error": e.error} for e in self.errors]
        }


def compute_next_run(schedule) -> date:
    """Next run date, advanced from the last run (or the start date when never run)."""
    anchor = schedule.last_run_at.date() if schedule.last_run_at else schedule.start_date
    return advance(
        schedule.frequency,
        anchor,
        schedule.custom_interval_days,
        schedule.day_of_month
    )


class ScheduleScanner:
    """Finds due schedules, materializes their occurrences and reschedules them."""

    def __init__(
        self,
        schedules,
        materializer: OccurrenceMaterializer,
        concurrency: int = 1,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.schedules = schedules
        self.materializer = materializer
        self.concurrency = max(1, concurrency)
        self.clock = clock

    async def run_due_schedules(self, horizon: date) -> ScanResult:
        # Failing to read the schedule list is fatal and propagates
        due = await self.schedules.find_due(horizon)
        logger.info(f"Found {len(due)} due schedule(s) up to {horizon}")

        result = ScanResult()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def process(schedule):
            async with semaphore:
                await self._process_schedule(schedule, horizon, result)

        await asyncio.gather(*(process(schedule) for schedule in due))

        logger.info(
            f"Generation complete: {result.created_count} order(s) created, "
            f"{result.processed_count} schedule(s) processed, {len(result.errors)} error(s)"
        )
        return result

    async def _process_schedule(self, schedule, horizon: date, result: ScanResult):
        try:
            outcome = await self.materializer.materialize(schedule, horizon)
        except Exception as e:
            logger.warning(f"Schedule {schedule.id} failed: {e}")
            result.errors.append(ScheduleError(schedule_id=schedule.id, error=str(e)))
            return

        result.created_count += outcome.created
        result.processed_count += 1

        if outcome.errors:
            # Keep next_run_at so the next scan retries this schedule
            for occurrence in outcome.errors:
                result.errors.append(ScheduleError(
                    schedule_id=schedule.id,
                    error=f"{occurrence.day.isoformat()}: {occurrence.error}"
                ))
            return

        try:
            await self.schedules.update(schedule.id, {
                "next_run_at": compute_next_run(schedule),
                "last_run_at": self.clock()
            })
        except Exception as e:
            logger.warning(f"Schedule {schedule.id}: could not update run dates: {e}")
            result.errors.append(ScheduleError(schedule_id=schedule.id, error=str(e)))
