"""Tests for the free-window sweep."""

from datetime import datetime

import pytest

from mediatrack.domain.availability.gaps import Gap, find_gaps, whole_days
from mediatrack.domain.availability.intervals import BusyInterval
from mediatrack.shared.exceptions import InvalidGapRequest


def jan(n: int, hour: int = 0) -> datetime:
    return datetime(2024, 1, n, hour)


HORIZON = (jan(1), jan(20))


class TestFindGaps:
    def test_gaps_between_and_around_reservations(self):
        busy = [BusyInterval(jan(5), jan(7)), BusyInterval(jan(10), jan(12))]

        gaps = find_gaps(busy, *HORIZON, min_gap_days=3)

        assert gaps == [
            Gap(jan(1), jan(5)),
            Gap(jan(7), jan(10)),
            Gap(jan(12), jan(20)),
        ]
        assert [gap.days for gap in gaps] == [4, 3, 8]

    def test_threshold_is_inclusive(self):
        busy = [BusyInterval(jan(5), jan(7)), BusyInterval(jan(10), jan(12))]

        gaps = find_gaps(busy, *HORIZON, min_gap_days=4)

        assert Gap(jan(7), jan(10)) not in gaps
        assert Gap(jan(1), jan(5)) in gaps

    def test_unsorted_input(self):
        busy = [BusyInterval(jan(10), jan(12)), BusyInterval(jan(5), jan(7))]

        assert len(find_gaps(busy, *HORIZON, min_gap_days=3)) == 3

    def test_overlapping_and_contained_reservations_leave_no_phantom_gap(self):
        busy = [
            BusyInterval(jan(3), jan(15)),
            BusyInterval(jan(5), jan(7)),
            BusyInterval(jan(6), jan(12)),
        ]

        gaps = find_gaps(busy, *HORIZON, min_gap_days=2)

        assert gaps == [Gap(jan(1), jan(3)), Gap(jan(15), jan(20))]

    def test_empty_calendar_is_one_gap(self):
        assert find_gaps([], *HORIZON, min_gap_days=2) == [Gap(jan(1), jan(20))]

    def test_reservation_past_the_horizon_is_ignored(self):
        busy = [BusyInterval(jan(25), jan(28))]

        assert find_gaps(busy, *HORIZON, min_gap_days=2) == [Gap(jan(1), jan(20))]

    def test_reservation_in_progress_at_horizon_start(self):
        busy = [BusyInterval(datetime(2023, 12, 28), jan(4))]

        assert find_gaps(busy, *HORIZON, min_gap_days=2) == [Gap(jan(4), jan(20))]

    def test_partial_days_round_down(self):
        # 1 day 20 hours free between check-out and check-in
        busy = [BusyInterval(jan(1), jan(5, 10)), BusyInterval(jan(7, 6), jan(20))]

        assert find_gaps(busy, *HORIZON, min_gap_days=2) == []
        assert whole_days(jan(5, 10), jan(7, 6)) == 1

    def test_empty_horizon(self):
        assert find_gaps([], jan(5), jan(5), min_gap_days=2) == []

    @pytest.mark.parametrize("min_gap_days", [0, 1, -3])
    def test_minimum_below_two_is_rejected(self, min_gap_days):
        with pytest.raises(InvalidGapRequest):
            find_gaps([], *HORIZON, min_gap_days=min_gap_days)


class TestGap:
    def test_label_uses_inclusive_last_day(self):
        gap = Gap(jan(7), jan(10))

        assert gap.last_day == jan(9)
        assert gap.label == "January 7, 2024 - January 9, 2024"

    def test_label_across_years(self):
        gap = Gap(datetime(2023, 12, 30), datetime(2024, 1, 3))

        assert gap.label == "December 30, 2023 - January 2, 2024"
