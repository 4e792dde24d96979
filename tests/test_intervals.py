"""Tests for the half-open interval rules."""

from datetime import datetime

from mediatrack.domain.availability.intervals import (
    BusyInterval,
    ScheduledWindow,
    occupied_at,
    overlaps,
    sort_intervals,
)


def day(n: int, hour: int = 0) -> datetime:
    return datetime(2024, 1, n, hour)


class TestOverlaps:
    def test_touching_intervals_do_not_overlap(self):
        assert overlaps(day(1), day(5), day(5), day(9)) is False
        assert overlaps(day(5), day(9), day(1), day(5)) is False

    def test_shared_day_overlaps(self):
        assert overlaps(day(1), day(5), day(4), day(9)) is True

    def test_containment_overlaps(self):
        assert overlaps(day(1), day(10), day(3), day(4)) is True
        assert overlaps(day(3), day(4), day(1), day(10)) is True

    def test_zero_width_instant_inside_interval(self):
        assert overlaps(day(3, 12), day(3, 12), day(1), day(5)) is True

    def test_zero_width_instant_at_interval_edges(self):
        # Neither the check-in nor the check-out instant counts as occupied
        assert overlaps(day(1), day(1), day(1), day(5)) is False
        assert overlaps(day(5), day(5), day(1), day(5)) is False


class TestBusyInterval:
    def test_abuts_on_changeover_date(self):
        first = BusyInterval(day(1), day(5, 10))
        second = BusyInterval(day(5, 16), day(8))

        assert first.abuts(second) is True
        assert second.abuts(first) is False

    def test_overlapping_reservations_do_not_abut(self):
        first = BusyInterval(day(1), day(5, 16))
        second = BusyInterval(day(5, 10), day(8))

        assert first.abuts(second) is False

    def test_scheduled_window_collects_overlaps(self):
        busy = [
            BusyInterval(day(1), day(3)),
            BusyInterval(day(4), day(6)),
            BusyInterval(day(9), day(12)),
        ]
        window = ScheduledWindow(day(5, 12), day(9, 12))

        assert window.overlapping(busy) == [busy[1], busy[2]]

    def test_single_day_window_is_a_single_instant(self):
        busy = [BusyInterval(day(4), day(6))]

        assert ScheduledWindow(day(5, 12), day(5, 12)).overlapping(busy) == busy
        assert ScheduledWindow(day(6, 12), day(6, 12)).overlapping(busy) == []


class TestHelpers:
    def test_occupied_at(self):
        busy = [BusyInterval(day(2), day(4))]

        assert occupied_at(busy, day(3)) is True
        assert occupied_at(busy, day(2)) is False
        assert occupied_at(busy, day(4)) is False
        assert occupied_at([], day(3)) is False

    def test_sort_intervals_orders_by_start_then_end(self):
        a = BusyInterval(day(5), day(9))
        b = BusyInterval(day(1), day(7))
        c = BusyInterval(day(1), day(3))

        assert sort_intervals([a, b, c]) == [c, b, a]
