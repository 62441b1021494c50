"""
Statistics API Endpoints.

Read-only dashboard data for admins.
"""

import calendar
from datetime import date
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.app.db.session import get_db
from fleetflow.app.models.enums import UserRole
from fleetflow.app.core.guards import require_role
from fleetflow.app.services.stats import StatsService
from fleetflow.app.schemas.stats import StatsReport

router = APIRouter(prefix="/stats", tags=["Admin - Statistics"])


def month_range(month: str) -> Tuple[date, date]:
    """Parse "YYYY-MM" into the first and last day of that month."""
    try:
        year, month_number = (int(part) for part in month.split("-"))
        last_day = calendar.monthrange(year, month_number)[1]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="month must be formatted YYYY-MM"
        )
    return date(year, month_number, 1), date(year, month_number, last_day)


@router.get("", response_model=StatsReport)
async def get_stats(
    month: Optional[str] = Query(None, description="Calendar month, YYYY-MM"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Usage statistics for a month or an explicit date range.

    With neither given, all trips are counted.
    """
    if month:
        if date_from or date_to:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Use either month or date_from/date_to, not both"
            )
        date_from, date_to = month_range(month)

    if date_from and date_to and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be after date_to"
        )

    return await StatsService.build_report(db, date_from, date_to)
