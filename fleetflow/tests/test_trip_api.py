"""
Integration tests for trip scheduling endpoints.

Verifies create -> collide -> edit -> delete with ownership rules.
"""

from datetime import date, time

import pytest
from sqlalchemy import select

from conftest import trip_payload
from fleetflow.app.models.audit_log import AuditLog
from fleetflow.app.services.audit import AuditAction

DAY = date(2024, 3, 1)


async def create_trip(client, headers, **kwargs):
    response = await client.post("/v1/trips", json=trip_payload(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["trip"]


@pytest.mark.asyncio
async def test_create_trip(client, alice, alice_headers, vehicle, project):
    response = await client.post("/v1/trips", json=trip_payload(vehicle_id=vehicle.id), headers=alice_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["trip"]["owner_id"] == alice.id
    assert data["trip"]["owner_name"] == "Alice"
    assert data["trip"]["vehicle_label"] == "White SUV (B 1234 XY)"
    assert data["trip"]["mileage_completed"] is False
    assert data["vehicle_totals"] == {str(vehicle.id): 0}


@pytest.mark.asyncio
async def test_trip_creation_is_audited(client, alice_headers, project, db_session):
    trip = await create_trip(client, alice_headers)

    result = await db_session.execute(select(AuditLog).where(AuditLog.action == AuditAction.TRIP_CREATED))
    entry = result.scalar_one()
    assert entry.target_type == "trip"
    assert entry.target_id == trip["id"]
    assert entry.actor_username == "alice"


@pytest.mark.asyncio
async def test_double_booking_rejected_and_touching_window_accepted(
    client, alice_headers, bob_headers, vehicle, project
):
    x = await create_trip(client, bob_headers, vehicle_id=vehicle.id, day=DAY, start=time(9, 0), end=time(11, 0))

    response = await client.post(
        "/v1/trips",
        json=trip_payload(vehicle_id=vehicle.id, day=DAY, start=time(10, 0), end=time(12, 0)),
        headers=alice_headers
    )
    assert response.status_code == 409
    body = response.json()
    assert body["error_code"] == "ERR_TRIP_COLLISION"
    assert body["message"] == "Vehicle already reserved by Bob (09:00 - 11:00)"
    assert body["details"]["conflicting_trip_id"] == x["id"]

    response = await client.post(
        "/v1/trips",
        json=trip_payload(vehicle_id=vehicle.id, day=DAY, start=time(11, 0), end=time(12, 0)),
        headers=alice_headers
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_rejected_trip_is_not_persisted(client, alice_headers, bob_headers, vehicle, project):
    await create_trip(client, bob_headers, vehicle_id=vehicle.id, day=DAY)

    await client.post("/v1/trips", json=trip_payload(vehicle_id=vehicle.id, day=DAY), headers=alice_headers)

    response = await client.get("/v1/trips", headers=alice_headers)
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_check_collision_dry_run(client, alice_headers, bob_headers, vehicle, project):
    x = await create_trip(client, bob_headers, vehicle_id=vehicle.id, day=DAY, start=time(9, 0), end=time(11, 0))
    base = {"date": DAY.isoformat(), "vehicle_id": vehicle.id}

    response = await client.post(
        "/v1/trips/check-collision",
        json={**base, "start_time": "10:30:00", "end_time": "12:00:00"},
        headers=alice_headers
    )
    assert response.status_code == 200
    assert response.json()["conflict"] is True
    assert response.json()["conflicting_trip_id"] == x["id"]

    # Editing the stored trip itself is not a conflict
    response = await client.post(
        "/v1/trips/check-collision",
        json={**base, "start_time": "09:00:00", "end_time": "11:00:00", "trip_id": x["id"]},
        headers=alice_headers
    )
    assert response.json()["conflict"] is False

    response = await client.post(
        "/v1/trips/check-collision",
        json={"date": DAY.isoformat(), "start_time": "09:00:00", "end_time": "11:00:00"},
        headers=alice_headers
    )
    assert response.json() == {"conflict": False, "message": None, "conflicting_trip_id": None}


@pytest.mark.asyncio
async def test_resubmitting_unchanged_trip_succeeds(client, alice_headers, vehicle, project):
    trip = await create_trip(client, alice_headers, vehicle_id=vehicle.id)

    response = await client.put(
        f"/v1/trips/{trip['id']}", json=trip_payload(vehicle_id=vehicle.id), headers=alice_headers
    )

    assert response.status_code == 200
    assert response.json()["trip"]["id"] == trip["id"]


@pytest.mark.asyncio
async def test_edit_requires_owner_or_admin(client, alice_headers, bob_headers, admin_headers, project):
    trip = await create_trip(client, alice_headers)

    response = await client.put(
        f"/v1/trips/{trip['id']}", json=trip_payload(purpose="Hijacked"), headers=bob_headers
    )
    assert response.status_code == 403

    response = await client.put(
        f"/v1/trips/{trip['id']}", json=trip_payload(purpose="Moved by admin"), headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["trip"]["purpose"] == "Moved by admin"
    assert response.json()["trip"]["owner_name"] == "Alice"


@pytest.mark.asyncio
async def test_delete_trip(client, alice_headers, bob_headers, vehicle, project):
    trip = await create_trip(client, alice_headers, vehicle_id=vehicle.id)

    response = await client.delete(f"/v1/trips/{trip['id']}", headers=bob_headers)
    assert response.status_code == 403

    response = await client.delete(f"/v1/trips/{trip['id']}", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["deleted_trip_id"] == trip["id"]
    assert response.json()["trip"] is None

    response = await client.get(f"/v1/trips/{trip['id']}", headers=alice_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_validation_errors(client, alice_headers, project):
    response = await client.post(
        "/v1/trips", json=trip_payload(start=time(11, 0), end=time(9, 0)), headers=alice_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION_001"

    response = await client.post(
        "/v1/trips", json=trip_payload(project_name="Unknown"), headers=alice_headers
    )
    assert response.status_code == 422
    assert response.json()["details"]["project_name"] == "Unknown"

    response = await client.post("/v1/trips", json=trip_payload(vehicle_id=999), headers=alice_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_companions_are_cleaned_and_checked(client, alice, alice_headers, bob, project):
    trip = await create_trip(client, alice_headers, companion_ids=[bob.id, alice.id, bob.id])
    assert trip["companion_ids"] == [bob.id]

    response = await client.post("/v1/trips", json=trip_payload(companion_ids=[4242]), headers=alice_headers)
    assert response.status_code == 422
    assert response.json()["details"]["user_ids"] == [4242]


@pytest.mark.asyncio
async def test_calendar_feed_is_filtered_and_chronological(client, alice, alice_headers, bob_headers, vehicle, project):
    late = await create_trip(client, alice_headers, day=date(2024, 3, 5), start=time(14, 0), end=time(15, 0))
    early = await create_trip(client, bob_headers, day=date(2024, 3, 5), start=time(8, 0), end=time(9, 0))
    await create_trip(client, alice_headers, day=date(2024, 4, 1))
    with_vehicle = await create_trip(client, alice_headers, day=date(2024, 3, 2), vehicle_id=vehicle.id)

    response = await client.get(
        "/v1/trips", params={"date_from": "2024-03-01", "date_to": "2024-03-31"}, headers=bob_headers
    )
    assert response.status_code == 200
    assert [t["id"] for t in response.json()["trips"]] == [with_vehicle["id"], early["id"], late["id"]]

    response = await client.get("/v1/trips", params={"vehicle_id": vehicle.id}, headers=bob_headers)
    assert [t["id"] for t in response.json()["trips"]] == [with_vehicle["id"]]

    response = await client.get("/v1/trips", params={"owner_id": alice.id}, headers=bob_headers)
    assert response.json()["total"] == 3


@pytest.mark.asyncio
async def test_trips_require_authentication(client):
    response = await client.get("/v1/trips")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_trip_history_in_audit_trail(client, alice_headers, admin_headers, project):
    trip = await create_trip(client, alice_headers)
    await client.put(f"/v1/trips/{trip['id']}", json=trip_payload(purpose="Changed"), headers=alice_headers)
    await client.delete(f"/v1/trips/{trip['id']}", headers=alice_headers)

    response = await client.get(
        "/v1/admin/audit", params={"target_type": "trip", "target_id": trip["id"]}, headers=admin_headers
    )
    assert response.status_code == 200
    assert [log["action"] for log in response.json()["logs"]] == [
        AuditAction.TRIP_DELETED, AuditAction.TRIP_UPDATED, AuditAction.TRIP_CREATED
    ]

    response = await client.get("/v1/admin/audit", headers=alice_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_check_collision_for_existing_trip_leaves_it_untouched(client, alice_headers, vehicle, project):
    trip = await create_trip(client, alice_headers, vehicle_id=vehicle.id, day=DAY, start=time(9, 0), end=time(11, 0))

    response = await client.post(
        "/v1/trips/check-collision",
        json={
            "date": DAY.isoformat(), "start_time": "13:00:00", "end_time": "14:00:00",
            "vehicle_id": vehicle.id, "trip_id": trip["id"]
        },
        headers=alice_headers
    )
    assert response.json()["conflict"] is False

    stored = (await client.get(f"/v1/trips/{trip['id']}", headers=alice_headers)).json()
    assert stored["start_time"] == "09:00:00"
    assert stored["end_time"] == "11:00:00"
    assert (await client.get("/v1/trips", headers=alice_headers)).json()["total"] == 1
