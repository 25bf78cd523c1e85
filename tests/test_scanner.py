from datetime import date, datetime

import pytest

from servicefrios.services.materializer import OccurrenceMaterializer
from servicefrios.services.scanner import ScheduleScanner, compute_next_run
from tests.fakes import FakeScheduleRepository, FakeServiceOrderRepository, FixedClock, make_schedule

NOW = datetime(2024, 1, 10, 12, 0)


def build_scanner(schedules, orders, concurrency=1):
    return ScheduleScanner(
        schedules,
        OccurrenceMaterializer(orders),
        concurrency=concurrency,
        clock=FixedClock(NOW)
    )


async def test_only_due_schedules_are_processed():
    due = make_schedule(id=1, next_run_at=date(2024, 1, 1))
    not_due = make_schedule(id=2, next_run_at=date(2024, 3, 1), start_date=date(2024, 3, 1))
    schedules = FakeScheduleRepository([due, not_due])
    orders = FakeServiceOrderRepository()

    result = await build_scanner(schedules, orders).run_due_schedules(date(2024, 1, 22))

    assert result.processed_count == 1
    assert result.created_count == 4
    assert result.errors == []
    assert due.last_run_at == NOW
    assert not_due.last_run_at is None
    assert orders.days(2) == []


async def test_inactive_schedules_are_skipped():
    schedules = FakeScheduleRepository([make_schedule(is_active=False)])
    orders = FakeServiceOrderRepository()

    result = await build_scanner(schedules, orders).run_due_schedules(date(2024, 1, 22))

    assert result.processed_count == 0
    assert orders.orders == {}


async def test_unset_next_run_is_due():
    schedules = FakeScheduleRepository([make_schedule(next_run_at=None)])

    result = await build_scanner(schedules, FakeServiceOrderRepository()).run_due_schedules(date(2024, 1, 8))

    assert result.processed_count == 1
    assert result.created_count == 2


async def test_next_run_advances_from_start_then_last_run():
    schedule = make_schedule()
    schedules = FakeScheduleRepository([schedule])
    scanner = build_scanner(schedules, FakeServiceOrderRepository())

    await scanner.run_due_schedules(date(2024, 1, 22))
    assert schedule.next_run_at == date(2024, 1, 8)

    await scanner.run_due_schedules(date(2024, 1, 22))
    assert schedule.next_run_at == date(2024, 1, 17)


async def test_rerun_with_same_horizon_creates_nothing():
    schedules = FakeScheduleRepository([make_schedule()])
    scanner = build_scanner(schedules, FakeServiceOrderRepository())

    first = await scanner.run_due_schedules(date(2024, 1, 22))
    second = await scanner.run_due_schedules(date(2024, 1, 22))

    assert first.created_count == 4
    assert second.created_count == 0
    assert second.errors == []


async def test_failing_schedule_does_not_abort_scan():
    broken = make_schedule(id=1)
    healthy = make_schedule(id=2)
    schedules = FakeScheduleRepository([broken, healthy])
    orders = FakeServiceOrderRepository()
    orders.failing_schedules.add(1)

    result = await build_scanner(schedules, orders).run_due_schedules(date(2024, 1, 22))

    assert result.created_count == 4
    assert {e.schedule_id for e in result.errors} == {1}
    assert len(result.errors) == 4
    # Left due so the next scan retries it
    assert broken.next_run_at == date(2024, 1, 1)
    assert broken.last_run_at is None
    assert healthy.last_run_at == NOW


async def test_materializer_exception_is_reported_per_schedule():
    class ExplodingMaterializer:
        async def materialize(self, schedule, horizon):
            raise ConnectionError("lost connection")

    schedules = FakeScheduleRepository([make_schedule()])
    scanner = ScheduleScanner(schedules, ExplodingMaterializer(), clock=FixedClock(NOW))

    result = await scanner.run_due_schedules(date(2024, 1, 22))

    assert result.processed_count == 0
    assert result.to_dict()["errors"] == [{"scheduleId": 1, "error": "lost connection"}]
    assert schedules.updates == []


async def test_fatal_error_propagates():
    schedules = FakeScheduleRepository(fail_find_due=True)

    with pytest.raises(ConnectionError):
        await build_scanner(schedules, FakeServiceOrderRepository()).run_due_schedules(date(2024, 1, 22))


async def test_bounded_concurrency_processes_every_schedule():
    schedules = FakeScheduleRepository([make_schedule(id=i) for i in range(1, 6)])
    orders = FakeServiceOrderRepository(serialize=False)

    result = await build_scanner(schedules, orders, concurrency=3).run_due_schedules(date(2024, 1, 22))

    assert result.processed_count == 5
    assert result.created_count == 20
    assert len(orders.orders) == 20


def test_compute_next_run_uses_last_run_date():
    schedule = make_schedule(frequency="MONTHLY", last_run_at=datetime(2024, 2, 3, 23, 59))
    assert compute_next_run(schedule) == date(2024, 3, 3)
