"""Tests for fetching iCal feeds over HTTP."""

import asyncio
from datetime import datetime

import httpx
import pytest

from conftest import calendar, vevent
from mediatrack.domain.availability.feed_client import ICalFeedClient
from mediatrack.domain.availability.intervals import BusyInterval
from mediatrack.shared.exceptions import FeedFetchError

FEED = "https://calendar.example.com/beach.ics"


def fetch_busy_with(handler, url: str = FEED):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await ICalFeedClient(client=client, timeout=5).fetch_busy(url)

    return asyncio.run(_run())


class TestICalFeedClient:
    def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == FEED
            return httpx.Response(200, text=calendar(vevent("20240105", "20240107")))

        assert fetch_busy_with(handler) == [
            BusyInterval(start=datetime(2024, 1, 5), end=datetime(2024, 1, 7))
        ]

    def test_non_success_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="Not Found")

        with pytest.raises(FeedFetchError) as exc_info:
            fetch_busy_with(handler)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == FEED

    def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FeedFetchError) as exc_info:
            fetch_busy_with(handler)

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.reason

    def test_non_ical_body_yields_no_intervals(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        assert fetch_busy_with(handler) == []
