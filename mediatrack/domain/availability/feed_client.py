"""
iCal Feed Client
Fetches booking calendars over HTTP. Feeds are never cached: every evaluation
re-fetches so a reservation made minutes ago is seen on the next run.
"""

import logging
from typing import Optional

import httpx

from ...config import ICAL_FETCH_TIMEOUT
from ...shared.exceptions import FeedFetchError
from .ical_parser import parse_ical
from .intervals import BusyInterval

logger = logging.getLogger(__name__)


class ICalFeedClient:
    """Fetch iCal text and busy intervals, optionally over a shared httpx client"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = ICAL_FETCH_TIMEOUT):
        self._client = client
        self.timeout = timeout

    async def fetch_text(self, ical_url: str) -> str:
        """Return the raw feed text or raise FeedFetchError"""
        try:
            if self._client is not None:
                response = await self._client.get(ical_url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(ical_url, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ iCal fetch error for {ical_url}: {e}")
            raise FeedFetchError(ical_url, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning(f"⚠️ iCal fetch failed for {ical_url}: HTTP {response.status_code}")
            raise FeedFetchError(
                ical_url, f"HTTP {response.status_code}", status_code=response.status_code
            )

        return response.text

    async def fetch_busy(self, ical_url: str) -> list[BusyInterval]:
        """Fetch and parse a feed into busy intervals"""
        text = await self.fetch_text(ical_url)
        return parse_ical(text)
