"""Tests for billing-cycle window computation."""

from datetime import datetime, timedelta, timezone

import pytest

from wagerboard.periods import TimeWindow, iso, period_bounds, ymd


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestAnchorMonth:
    """The current cycle opens on the 5th; before that it is last month's."""

    @pytest.mark.parametrize("day", [1, 2, 3, 4])
    def test_early_days_anchor_previous_month(self, day: int) -> None:
        window = period_bounds(0, now=_utc(2025, 7, day, 12, 0, 0))
        assert (window.start.year, window.start.month) == (2025, 6)

    @pytest.mark.parametrize("day", [5, 6, 15, 28, 31])
    def test_from_fifth_anchor_current_month(self, day: int) -> None:
        window = period_bounds(0, now=_utc(2025, 7, day, 12, 0, 0))
        assert (window.start.year, window.start.month) == (2025, 7)

    def test_boundary_second_of_the_fifth(self) -> None:
        """00:00:00 on the 5th already belongs to the new anchor month."""
        window = period_bounds(0, now=_utc(2025, 3, 5, 0, 0, 0))
        assert window.start == _utc(2025, 3, 5, 0, 0, 1)


class TestBounds:
    """Exact start/end instants for a cycle."""

    def test_current_cycle(self) -> None:
        window = period_bounds(0, now=_utc(2025, 8, 19, 9, 30))
        assert window.start == _utc(2025, 8, 5, 0, 0, 1)
        assert window.end == _utc(2025, 9, 4, 23, 59, 59)

    @pytest.mark.parametrize(
        ("offset", "start", "end"),
        [
            pytest.param(-1, (2025, 7, 5), (2025, 8, 4), id="previous"),
            pytest.param(1, (2025, 9, 5), (2025, 10, 4), id="next"),
            pytest.param(-12, (2024, 8, 5), (2024, 9, 4), id="a_year_back"),
        ],
    )
    def test_offsets(self, offset: int, start: tuple, end: tuple) -> None:
        window = period_bounds(offset, now=_utc(2025, 8, 19))
        assert window.start == _utc(*start, 0, 0, 1)
        assert window.end == _utc(*end, 23, 59, 59)

    def test_december_plus_one_rolls_into_january(self) -> None:
        window = period_bounds(1, now=_utc(2025, 12, 10))
        assert window.start == _utc(2026, 1, 5, 0, 0, 1)
        assert window.end == _utc(2026, 2, 4, 23, 59, 59)

    def test_december_cycle_ends_in_january(self) -> None:
        window = period_bounds(0, now=_utc(2025, 12, 31, 23, 59, 59))
        assert window.end == _utc(2026, 1, 4, 23, 59, 59)

    def test_early_january_anchors_previous_december(self) -> None:
        window = period_bounds(0, now=_utc(2026, 1, 2))
        assert window.start == _utc(2025, 12, 5, 0, 0, 1)
        assert window.end == _utc(2026, 1, 4, 23, 59, 59)

    def test_january_minus_one_rolls_back_a_year(self) -> None:
        window = period_bounds(-1, now=_utc(2026, 1, 20))
        assert window.start == _utc(2025, 12, 5, 0, 0, 1)


class TestContiguity:
    """Consecutive cycles never overlap and are exactly 2 seconds apart."""

    @pytest.mark.parametrize(
        "now",
        [
            pytest.param(_utc(2024, 2, 29), id="leap_day"),
            pytest.param(_utc(2025, 1, 3), id="early_january"),
            pytest.param(_utc(2025, 12, 31), id="new_years_eve"),
            pytest.param(_utc(2025, 6, 4, 23, 59, 59), id="just_before_fifth"),
        ],
    )
    def test_two_second_gap(self, now: datetime) -> None:
        for offset in range(-14, 14):
            current = period_bounds(offset, now=now)
            following = period_bounds(offset + 1, now=now)
            assert current.end < following.start
            assert following.start - current.end == timedelta(seconds=2)


class TestTimeWindow:
    """Value semantics and rendering of TimeWindow."""

    def test_rejects_inverted_window(self) -> None:
        with pytest.raises(ValueError, match="not before"):
            TimeWindow(start=_utc(2025, 8, 2), end=_utc(2025, 8, 1))

    def test_rejects_naive_bounds(self) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            TimeWindow(start=datetime(2025, 8, 1), end=datetime(2025, 8, 2))

    def test_epoch_milliseconds(self) -> None:
        window = TimeWindow(start=_utc(2025, 8, 11), end=_utc(2025, 8, 25))
        assert window.start_ms == 1754870400000
        assert window.end_ms == 1756080000000

    def test_describe(self) -> None:
        window = period_bounds(0, now=_utc(2025, 8, 19))
        assert window.describe() == {
            "startISO": "2025-08-05T00:00:01.000Z",
            "endISO": "2025-09-04T23:59:59.000Z",
            "startYMD": "2025-08-05",
            "endYMD": "2025-09-04",
        }


class TestFormatting:
    def test_ymd_drops_time(self) -> None:
        assert ymd(_utc(2025, 9, 4, 23, 59, 59)) == "2025-09-04"

    def test_ymd_uses_utc_date(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        assert ymd(datetime(2025, 9, 5, 1, 0, tzinfo=plus_two)) == "2025-09-04"

    def test_iso(self) -> None:
        assert iso(_utc(2025, 8, 5, 0, 0, 1)) == "2025-08-05T00:00:01.000Z"
