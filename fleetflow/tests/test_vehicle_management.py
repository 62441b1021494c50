"""
Integration tests for vehicle and project management.
"""

from datetime import date

import pytest

from conftest import trip_payload
from fleetflow.app.models.vehicle import Vehicle


@pytest.mark.asyncio
async def test_admin_registers_vehicle(client, admin_headers, alice_headers):
    payload = {"license_plate": "D 4321 AB", "name": "Grey Sedan", "vehicle_type": "Sedan", "starting_odometer": 12000}

    response = await client.post("/v1/vehicles", json=payload, headers=alice_headers)
    assert response.status_code == 403

    response = await client.post("/v1/vehicles", json=payload, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "AVAILABLE"
    assert data["total_mileage"] == 0
    assert data["starting_odometer"] == 12000

    response = await client.post("/v1/vehicles", json=payload, headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_maintenance_vehicle_cannot_be_reserved(client, admin_headers, alice_headers, vehicle, project):
    response = await client.patch(
        f"/v1/vehicles/{vehicle.id}", json={"status": "MAINTENANCE"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "MAINTENANCE"

    response = await client.post("/v1/trips", json=trip_payload(vehicle_id=vehicle.id), headers=alice_headers)
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION_001"


@pytest.mark.asyncio
async def test_retired_vehicle_is_hidden_and_unbookable(client, admin_headers, alice_headers, vehicle, project):
    response = await client.delete(f"/v1/vehicles/{vehicle.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.get("/v1/vehicles", headers=alice_headers)
    assert response.json()["total"] == 0

    response = await client.get("/v1/vehicles", params={"include_retired": "true"}, headers=alice_headers)
    assert response.json()["total"] == 1

    response = await client.post("/v1/trips", json=trip_payload(vehicle_id=vehicle.id), headers=alice_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_sync_mileage_recomputes_total(client, admin_headers, alice_headers, vehicle, project, db_session):
    trip = (await client.post(
        "/v1/trips", json=trip_payload(vehicle_id=vehicle.id, day=date(2024, 1, 1)), headers=alice_headers
    )).json()["trip"]
    await client.post(
        f"/v1/trips/{trip['id']}/mileage",
        json={"vehicle_id": vehicle.id, "start_odometer": 500, "end_odometer": 620},
        headers=alice_headers
    )

    # Simulate a lost update on the stored total
    stored = await db_session.get(Vehicle, vehicle.id)
    stored.total_mileage = 9999
    await db_session.commit()

    response = await client.post(f"/v1/vehicles/{vehicle.id}/sync-mileage", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"vehicle_id": vehicle.id, "total_mileage": 120}

    response = await client.post(f"/v1/vehicles/{vehicle.id}/sync-mileage", headers=admin_headers)
    assert response.json()["total_mileage"] == 120

    response = await client.get(f"/v1/vehicles/{vehicle.id}", headers=alice_headers)
    assert response.json()["total_mileage"] == 120


@pytest.mark.asyncio
async def test_changing_baseline_keeps_total_trip_only(client, admin_headers, alice_headers, vehicle, project):
    response = await client.patch(
        f"/v1/vehicles/{vehicle.id}", json={"starting_odometer": 40000}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["starting_odometer"] == 40000
    assert response.json()["total_mileage"] == 0

    # The new baseline is the implied start of the first report
    await client.post("/v1/trips", json=trip_payload(vehicle_id=vehicle.id), headers=alice_headers)
    queue = (await client.get("/v1/mileage/queue", headers=alice_headers)).json()["entries"]
    assert queue[0]["implied_start"] == 40000


@pytest.mark.asyncio
async def test_unknown_vehicle(client, alice_headers):
    response = await client.get("/v1/vehicles/404", headers=alice_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_project_management(client, admin_headers, alice_headers):
    response = await client.post("/v1/projects", json={"name": "Road Survey"}, headers=alice_headers)
    assert response.status_code == 403

    response = await client.post("/v1/projects", json={"name": "Road Survey"}, headers=admin_headers)
    assert response.status_code == 201
    project_id = response.json()["id"]

    response = await client.post("/v1/projects", json={"name": "Road Survey"}, headers=admin_headers)
    assert response.status_code == 400

    response = await client.get("/v1/projects", headers=alice_headers)
    assert [p["name"] for p in response.json()["projects"]] == ["Road Survey"]

    response = await client.delete(f"/v1/projects/{project_id}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get("/v1/projects", headers=alice_headers)
    assert response.json()["total"] == 0
