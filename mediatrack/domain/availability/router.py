"""Availability router - FastAPI endpoints for day views and gap search"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import GAP_SEARCH_MONTHS
from ...database import get_db
from ...shared.clock import get_now
from .schemas import AvailabilityResponse, GapSearchResponse
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("", response_model=AvailabilityResponse)
async def get_range_availability(
    start: date = Query(...),
    end: date = Query(..., description="Exclusive end date"),
    now: datetime = Depends(get_now),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Per-day availability of scheduled tasks over [start, end); past days are left out"""
    return await service.get_range_availability(start, end, now)


@router.get("/weekly", response_model=AvailabilityResponse)
async def get_weekly_availability(
    now: datetime = Depends(get_now),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Seven-day availability starting today"""
    return await service.get_weekly_availability(now)


@router.get("/gaps", response_model=GapSearchResponse)
async def search_gaps(
    min_gap_days: int = Query(2, alias="minGapDays"),
    property_id: Optional[int] = Query(None, alias="propertyId"),
    ical_url: Optional[str] = Query(None, alias="icalUrl"),
    months: int = Query(GAP_SEARCH_MONTHS, ge=1, le=24),
    now: datetime = Depends(get_now),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Find free windows of at least minGapDays on one property's calendar"""
    return await service.search_gaps(
        min_gap_days=min_gap_days,
        now=now,
        property_id=property_id,
        ical_url=ical_url,
        months=months,
    )
