"""
Database seeding script for initial data.

Creates the ADMIN user plus a starter vehicle pool and project list for
development. Run this script after the database is set up but before first use.

The admin PIN is read from FLEETFLOW_ADMIN_PIN (default 0000); change it
after the first login.
"""

import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from fleetflow.app.core.security import get_pin_hash, is_valid_pin
from fleetflow.app.db.session import AsyncSessionLocal, Base, engine
from fleetflow.app.models.enums import UserRole, VehicleStatus
from fleetflow.app.models.project import Project
from fleetflow.app.models.user import User
from fleetflow.app.models.vehicle import Vehicle

# Registered with Base so create_all builds every table
from fleetflow.app.models.audit_log import AuditLog
from fleetflow.app.models.trip import Trip

SEED_VEHICLES = [
    {"license_plate": "ABC-1234", "name": "White SUV", "vehicle_type": "SUV", "status": VehicleStatus.AVAILABLE},
    {"license_plate": "XYZ-5678", "name": "Black Sedan", "vehicle_type": "Sedan", "status": VehicleStatus.AVAILABLE},
    {"license_plate": "CAR-9999", "name": "Utility Van", "vehicle_type": "Van", "status": VehicleStatus.MAINTENANCE},
]

SEED_PROJECTS = ["General Affairs", "Field Survey", "Client Visits"]


async def seed():
    """
    Seed initial data.

    Creates:
    - 1 ADMIN user
    - the starter vehicle pool
    - the starter project list

    Existing records are left untouched, so the script can be re-run.
    """
    admin_pin = os.getenv("FLEETFLOW_ADMIN_PIN", "0000")
    if not is_valid_pin(admin_pin):
        print("❌ FLEETFLOW_ADMIN_PIN must be a numeric PIN of the configured length")
        sys.exit(1)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")

        result = await db.execute(select(User).where(User.username == "admin"))
        if result.scalar_one_or_none():
            print("ℹ️  ADMIN user already exists, skipping")
        else:
            db.add(User(
                username="admin",
                name="Administrator",
                hashed_pin=get_pin_hash(admin_pin),
                role=UserRole.ADMIN,
                is_active=True
            ))
            print("✅ Created ADMIN user (username: admin)")

        for vehicle_data in SEED_VEHICLES:
            result = await db.execute(
                select(Vehicle).where(Vehicle.license_plate == vehicle_data["license_plate"])
            )
            if result.scalar_one_or_none():
                continue
            db.add(Vehicle(**vehicle_data))
            print(f"✅ Created vehicle {vehicle_data['name']} ({vehicle_data['license_plate']})")

        for name in SEED_PROJECTS:
            result = await db.execute(select(Project).where(Project.name == name))
            if result.scalar_one_or_none():
                continue
            db.add(Project(name=name))
            print(f"✅ Created project {name}")

        await db.commit()

    await engine.dispose()
    print("\n🎉 Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed())
