import pytest

pytestmark = pytest.mark.asyncio


def weekly_payload(client_id, **overrides):
    payload = {
        "client_id": client_id,
        "name": "Mantenimiento preventivo",
        "description": "Limpieza de serpentines",
        "frequency": "WEEKLY",
        "start_date": "2024-01-01",
        "start_time": "09:00",
        "equipment_ids": [],
    }
    payload.update(overrides)
    return payload


async def create_schedule(api, client_id, **overrides):
    response = await api.post("/schedules/", json=weekly_payload(client_id, **overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_health(api):
    response = await api.get("/health")
    assert response.json()["status"] == "ok"


async def test_create_schedule_initializes_next_run(api, directory):
    data = await create_schedule(api, directory.client_id, technician_id=directory.technician_id)

    assert data["next_run_at"] == "2024-01-01"
    assert data["is_active"] is True
    assert data["priority"] == "MEDIUM"
    assert data["last_run_at"] is None


async def test_custom_without_interval_is_rejected(api, directory):
    response = await api.post("/schedules/", json=weekly_payload(directory.client_id, frequency="CUSTOM"))

    assert response.status_code == 400
    assert response.json()["error"] == "configuration_error"

    listed = await api.get("/schedules/")
    assert listed.json()["pagination"]["total"] == 0

    generated = await api.post("/schedules/generate-services", params={"until": "2024-02-01"})
    assert generated.json()["createdCount"] == 0


async def test_unknown_frequency_is_rejected(api, directory):
    response = await api.post("/schedules/", json=weekly_payload(directory.client_id, frequency="HOURLY"))
    assert response.status_code == 400
    assert response.json()["error"] == "configuration_error"


async def test_unknown_client_is_not_found(api, directory):
    response = await api.post("/schedules/", json=weekly_payload(999))
    assert response.status_code == 404


async def test_bad_start_time_is_validation_error(api, directory):
    response = await api.post("/schedules/", json=weekly_payload(directory.client_id, start_time="25:00"))
    assert response.status_code == 422


async def test_generate_services_is_idempotent(api, directory):
    schedule = await create_schedule(api, directory.client_id, equipment_ids=[])

    first = await api.post("/schedules/generate-services", params={"until": "2024-01-22"})
    second = await api.post("/schedules/generate-services", params={"until": "2024-01-22"})

    assert first.status_code == 200
    assert first.json() == {"createdCount": 4, "processedCount": 1, "errors": []}
    assert second.json()["createdCount"] == 0
    assert second.json()["errors"] == []

    orders = await api.get("/service-orders/", params={"schedule_id": schedule["id"]})
    body = orders.json()
    assert body["total"] == 4
    assert {o["scheduled_date"] for o in body["data"]} == {
        "2024-01-01T09:00:00", "2024-01-08T09:00:00", "2024-01-15T09:00:00", "2024-01-22T09:00:00"
    }
    assert all(o["state"] == "PENDING" for o in body["data"])

    refreshed = (await api.get(f"/schedules/{schedule['id']}")).json()["data"]
    assert refreshed["last_run_at"] is not None

    runs = (await api.get("/runs/")).json()["runs"]
    assert [r["created_count"] for r in runs] == [0, 4]


async def test_generate_services_reports_fatal_error(api, monkeypatch):
    async def broken(*args, **kwargs):
        raise ConnectionError("database unavailable")

    monkeypatch.setattr("servicefrios.routers.schedules.generate_services", broken)

    response = await api.post("/schedules/generate-services")

    assert response.status_code == 500
    assert response.json()["detail"] == "database unavailable"


async def test_start_date_is_immutable(api, directory):
    schedule = await create_schedule(api, directory.client_id)

    response = await api.put(f"/schedules/{schedule['id']}", json={"start_date": "2024-02-01"})

    assert response.status_code == 400


async def test_recurrence_change_recomputes_next_run(api, directory):
    schedule = await create_schedule(api, directory.client_id)

    response = await api.put(
        f"/schedules/{schedule['id']}",
        json={"frequency": "MONTHLY", "day_of_month": 15}
    )

    assert response.status_code == 200
    assert response.json()["data"]["next_run_at"] == "2024-02-15"


async def test_update_to_custom_without_interval_is_rejected(api, directory):
    schedule = await create_schedule(api, directory.client_id)

    response = await api.put(f"/schedules/{schedule['id']}", json={"frequency": "CUSTOM"})

    assert response.status_code == 400


async def test_toggle_active(api, directory):
    schedule = await create_schedule(api, directory.client_id)

    response = await api.post(f"/schedules/{schedule['id']}/toggle-active")

    assert response.json()["data"]["is_active"] is False
    listed = await api.get("/schedules/", params={"is_active": "true"})
    assert listed.json()["data"] == []


async def test_delete_without_orders_removes_schedule(api, directory):
    schedule = await create_schedule(api, directory.client_id)

    response = await api.delete(f"/schedules/{schedule['id']}")

    assert response.json()["deleted"] is True
    assert (await api.get(f"/schedules/{schedule['id']}")).status_code == 404


async def test_delete_with_orders_deactivates(api, directory):
    schedule = await create_schedule(api, directory.client_id)
    await api.post("/schedules/generate-services", params={"until": "2024-01-08"})

    response = await api.delete(f"/schedules/{schedule['id']}")

    assert response.json()["deleted"] is False
    remaining = (await api.get(f"/schedules/{schedule['id']}")).json()["data"]
    assert remaining["is_active"] is False


async def test_preview_occurrences(api, directory):
    schedule = await create_schedule(
        api, directory.client_id, frequency="MONTHLY", start_date="2024-01-31", day_of_month=31
    )

    response = await api.get(f"/schedules/{schedule['id']}/occurrences", params={"until": "2024-04-30"})

    assert response.json()["occurrences"] == ["2024-01-31", "2024-02-29", "2024-03-31", "2024-04-30"]


async def test_missing_schedule_is_not_found(api):
    response = await api.get("/schedules/123")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
