"""Tests for calendar helpers."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from bank_ledger.exceptions import ValidationError
from bank_ledger.reports.periods import (
    month_bounds,
    month_start,
    next_month,
    to_naive_local,
    trailing_window,
)


class TestMonthStart:
    """Tests for month_start."""

    @pytest.mark.parametrize(
        "value",
        [
            "2024-03",
            "2024-03-17",
            " 2024-03 ",
            date(2024, 3, 17),
            datetime(2024, 3, 31, 23, 59),
        ],
    )
    def test_accepted_forms(self, value: object) -> None:
        assert month_start(value) == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["2024-13", "March 2024", "", None, 202403])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(ValidationError):
            month_start(value)


class TestMonthBounds:
    """Tests for next_month and month_bounds."""

    def test_next_month_wraps_year(self) -> None:
        assert next_month(date(2024, 12, 1)) == date(2025, 1, 1)
        assert next_month(date(2024, 1, 1)) == date(2024, 2, 1)

    def test_half_open_bounds(self) -> None:
        start, end = month_bounds("2024-02")

        assert start == datetime(2024, 2, 1)
        assert end == datetime(2024, 3, 1)


class TestTrailingWindow:
    """Tests for trailing_window."""

    def test_datetime_reference(self) -> None:
        ref = datetime(2024, 3, 31, 12, 0)

        assert trailing_window(ref, timedelta(days=30)) == (datetime(2024, 3, 1, 12, 0), ref)

    def test_date_reference_covers_whole_days(self) -> None:
        start, end = trailing_window(date(2024, 3, 31), 30)

        assert start == datetime(2024, 3, 1)
        assert end == datetime.combine(date(2024, 3, 31), time.max)

    @pytest.mark.parametrize("window", [0, -1, timedelta(0), "30", True])
    def test_invalid_window(self, window: object) -> None:
        with pytest.raises(ValidationError):
            trailing_window(date(2024, 3, 31), window)

    def test_invalid_reference(self) -> None:
        with pytest.raises(ValidationError):
            trailing_window("2024-03-31", 30)

    @pytest.mark.parametrize(
        "reference, window",
        [
            (date(2024, 3, 31), 10**12),
            (date(2024, 3, 31), timedelta(days=999999999)),
            (date(1, 1, 5), 30),
            (datetime(1, 1, 5, 12, 0), timedelta(days=30)),
        ],
    )
    def test_out_of_range(self, reference: date, window: object) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            trailing_window(reference, window)

    def test_aware_reference_becomes_local(self) -> None:
        ref = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)

        start, end = trailing_window(ref, 1)

        assert end.tzinfo is None
        assert end == ref.astimezone().replace(tzinfo=None)
        assert end - start == timedelta(days=1)


class TestToNaiveLocal:
    """Tests for to_naive_local."""

    def test_naive_unchanged(self) -> None:
        value = datetime(2024, 3, 1, 9, 30)

        assert to_naive_local(value) is value

    def test_aware_converted(self) -> None:
        value = datetime(2024, 3, 1, 4, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))

        result = to_naive_local(value)

        assert result.tzinfo is None
        assert result.replace(tzinfo=value.astimezone().tzinfo) == value
