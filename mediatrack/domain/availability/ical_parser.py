"""
iCal Parser
Turns raw iCal text into busy intervals.

Only DTSTART/DTEND of VEVENT blocks are read. Both value shapes used by booking channels
are accepted:
- date-only ``YYYYMMDD`` (all-day reservation, interpreted as local midnight)
- date-time ``YYYYMMDDTHHMMSS`` with optional ``Z`` suffix

No timezone conversion is performed: every value lands on the same naive local timeline,
which is all the overlap comparisons need.
"""

import logging
from datetime import datetime
from typing import Iterator, Optional

from ...shared.exceptions import FeedParseError
from .intervals import BusyInterval

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y%m%d"
DATETIME_FORMAT = "%Y%m%dT%H%M%S"


def _unfold_lines(ical_text: str) -> Iterator[str]:
    # RFC 5545 folding: a line starting with a space or tab continues the previous one
    current: Optional[str] = None
    for raw in ical_text.splitlines():
        if raw[:1] in (" ", "\t") and current is not None:
            current += raw[1:]
            continue
        if current is not None:
            yield current
        current = raw
    if current is not None:
        yield current


def _split_property(line: str) -> tuple[str, str]:
    """Split ``NAME;PARAM=X:value`` into (``NAME``, ``value``)"""
    head, sep, value = line.partition(":")
    if not sep:
        return "", ""
    name = head.split(";", 1)[0].strip().upper()
    return name, value.strip()


def parse_ical_value(value: str) -> datetime:
    """Parse a DTSTART/DTEND value into a naive datetime"""
    value = value.strip()
    if len(value) == 8 and value.isdigit():
        try:
            return datetime.strptime(value, DATE_FORMAT)
        except ValueError as e:
            raise FeedParseError(f"Invalid date value: {value!r}") from e

    if value.endswith("Z"):
        value = value[:-1]
    if len(value) == 15 and value[8] == "T":
        try:
            return datetime.strptime(value, DATETIME_FORMAT)
        except ValueError as e:
            raise FeedParseError(f"Invalid date-time value: {value!r}") from e

    raise FeedParseError(f"Unsupported date value: {value!r}")


def _iter_event_blocks(ical_text: str) -> Iterator[dict[str, str]]:
    block: Optional[dict[str, str]] = None
    for line in _unfold_lines(ical_text):
        stripped = line.strip()
        upper = stripped.upper()
        if upper == "BEGIN:VEVENT":
            block = {}
        elif upper == "END:VEVENT":
            if block is not None:
                yield block
            block = None
        elif block is not None:
            name, value = _split_property(stripped)
            # First occurrence wins
            if name and name not in block:
                block[name] = value


def parse_ical(ical_text: str) -> list[BusyInterval]:
    """
    Parse VEVENT blocks into busy intervals.

    Blocks missing DTSTART or DTEND, with unparseable values, or with end <= start are
    skipped. The result keeps feed order; sort explicitly where order matters.
    """
    intervals: list[BusyInterval] = []
    if not ical_text:
        return intervals

    skipped = 0
    for block in _iter_event_blocks(ical_text):
        raw_start = block.get("DTSTART")
        raw_end = block.get("DTEND")
        if not raw_start or not raw_end:
            skipped += 1
            continue

        try:
            start = parse_ical_value(raw_start)
            end = parse_ical_value(raw_end)
        except FeedParseError as e:
            logger.debug(f"Skipping VEVENT: {e}")
            skipped += 1
            continue

        if end <= start:
            skipped += 1
            continue

        intervals.append(BusyInterval(start=start, end=end))

    if skipped:
        logger.debug(f"iCal parse: {len(intervals)} events kept, {skipped} skipped")
    return intervals
