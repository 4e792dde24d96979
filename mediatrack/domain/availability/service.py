"""Availability service - Business logic for day views and gap search"""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CONFLICT_MAX_CONCURRENCY, GAP_SEARCH_MONTHS
from ...shared.exceptions import FeedFetchError, InvalidGapRequest
from .aggregator import AvailabilityResult, compute_availability
from .feed_client import ICalFeedClient
from .gaps import find_gaps, validate_min_gap_days
from .repository import AvailabilityRepository
from .schemas import (
    AvailabilityDayResponse,
    AvailabilityOccupantResponse,
    AvailabilityResponse,
    GapResponse,
    GapSearchResponse,
    TaskSummary,
)

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 62


def add_months(day: date, months: int) -> date:
    """Same day-of-month ``months`` later, clamped to the month's last day"""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def day_label(day: date) -> str:
    return f"{day.strftime('%A')}, {day.strftime('%b')} {day.day}"


def to_response(result: AvailabilityResult) -> AvailabilityResponse:
    return AvailabilityResponse(
        days=[
            AvailabilityDayResponse(
                date=day.date,
                label=day_label(day.date),
                hasTurn=day.has_turn,
                tasks=[
                    AvailabilityOccupantResponse(
                        task=TaskSummary.from_task(occupant.task),
                        isTurn=occupant.is_turn,
                        isChangeover=occupant.is_changeover,
                    )
                    for occupant in day.occupants
                ],
            )
            for day in result.days
        ],
        tasksWithoutIcal=[TaskSummary.from_task(task) for task in result.tasks_without_ical],
    )


class AvailabilityService:
    """Service layer for availability views"""

    def __init__(self, db: Session, feed_client: Optional[ICalFeedClient] = None):
        self.db = db
        self.repo = AvailabilityRepository()
        self.feed_client = feed_client or ICalFeedClient()

    async def get_range_availability(
        self, range_start: date, range_end: date, now: datetime
    ) -> AvailabilityResponse:
        """Availability of scheduled tasks over [range_start, range_end), never before today"""
        if range_end <= range_start:
            raise HTTPException(status_code=400, detail="end must be after start")
        if (range_end - range_start).days > MAX_RANGE_DAYS:
            raise HTTPException(
                status_code=400, detail=f"Range may span at most {MAX_RANGE_DAYS} days"
            )

        tasks = self.repo.get_active_scheduled_tasks(self.db)
        properties = self.repo.get_properties(self.db)
        logger.info(
            f"📅 Computing availability {range_start} → {range_end} for {len(tasks)} tasks"
        )

        result = await compute_availability(
            tasks,
            range_start=range_start,
            range_end=range_end,
            not_before=now.date(),
            feed_client=self.feed_client,
            properties=properties,
            max_concurrency=CONFLICT_MAX_CONCURRENCY,
        )
        return to_response(result)

    async def get_weekly_availability(self, now: datetime) -> AvailabilityResponse:
        today = now.date()
        return await self.get_range_availability(today, today + timedelta(days=7), now)

    async def search_gaps(
        self,
        min_gap_days: int,
        now: datetime,
        property_id: Optional[int] = None,
        ical_url: Optional[str] = None,
        months: int = GAP_SEARCH_MONTHS,
    ) -> GapSearchResponse:
        """Free windows on one property's calendar from today until ``months`` out"""
        try:
            validate_min_gap_days(min_gap_days)
        except InvalidGapRequest as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if property_id is not None:
            prop = self.repo.get_property(self.db, property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            ical_url = prop.ical_url
        if not ical_url:
            raise HTTPException(status_code=400, detail="Property has no calendar")

        horizon_start = datetime.combine(now.date(), datetime.min.time())
        horizon_end = datetime.combine(add_months(now.date(), months), datetime.min.time())

        try:
            busy = await self.feed_client.fetch_busy(ical_url)
        except FeedFetchError as e:
            logger.error(f"❌ Gap search failed for {ical_url}: {e}")
            raise HTTPException(
                status_code=502, detail="Failed to fetch the property calendar"
            ) from e

        gaps = find_gaps(busy, horizon_start, horizon_end, min_gap_days)
        return GapSearchResponse(
            icalUrl=ical_url,
            minGapDays=min_gap_days,
            horizonStart=horizon_start.date(),
            horizonEnd=horizon_end.date(),
            gaps=[
                GapResponse(
                    start=gap.start.date(),
                    end=gap.last_day.date(),
                    days=gap.days,
                    label=gap.label,
                )
                for gap in gaps
            ],
        )
