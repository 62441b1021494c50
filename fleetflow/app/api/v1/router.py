"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from fleetflow.app.api.v1.endpoints import (
    auth, users, vehicles, projects, trips, mileage, stats, audit
)

router = APIRouter()

# Authentication and user management
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(users.admin_router)

# Reference data
router.include_router(vehicles.router)
router.include_router(projects.router)

# Scheduling and mileage reporting
router.include_router(trips.router)
router.include_router(mileage.router)

# Admin dashboard
router.include_router(stats.router)
router.include_router(audit.router)
