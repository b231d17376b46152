"""Calendar helpers shared by the reports."""

from datetime import date, datetime, time, timedelta

from bank_ledger.exceptions import ValidationError

MONTH_FORMATS = ("%Y-%m", "%Y-%m-%d")


def month_start(value: date | datetime | str) -> date:
    """Return the first day of the month containing ``value``.

    Accepts a date, a datetime, or a ``"YYYY-MM"`` / ``"YYYY-MM-DD"``
    string. The day of month is ignored.

    Raises
    ------
    ValidationError
        If the value cannot be read as a month.
    """
    if isinstance(value, datetime):
        return value.date().replace(day=1)
    if isinstance(value, date):
        return value.replace(day=1)
    if isinstance(value, str):
        for fmt in MONTH_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).date().replace(day=1)
            except ValueError:
                continue
    raise ValidationError(f"Invalid period month: {value!r}")


def next_month(month: date) -> date:
    """Return the first day of the month after ``month``."""
    if month.month == 12:
        return date(month.year + 1, 1, 1)
    return date(month.year, month.month + 1, 1)


def month_bounds(value: date | datetime | str) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` datetime range of a month."""
    start = month_start(value)
    return datetime.combine(start, time.min), datetime.combine(next_month(start), time.min)


def to_naive_local(value: datetime) -> datetime:
    """Return ``value`` as a naive local-time datetime.

    Stored timestamps are naive local time. Aware values are converted to
    the local zone and stripped; naive values pass through unchanged.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def trailing_window(
    reference: date | datetime,
    window: timedelta | int,
) -> tuple[datetime, datetime]:
    """Return the closed ``[reference - window, reference]`` datetime range.

    A plain date reference covers that whole day, so the range runs from
    the start of ``reference - window`` to the end of ``reference``. An int
    window is a number of days. Aware references are compared in local
    time, like stored timestamps.

    Raises
    ------
    ValidationError
        If the reference is not a date, the window is not positive, or the
        range falls outside the supported calendar.
    """
    if isinstance(window, int) and not isinstance(window, bool):
        try:
            window = timedelta(days=window)
        except OverflowError:
            raise ValidationError(f"Window of {window} days is out of range") from None
    if not isinstance(window, timedelta) or window <= timedelta(0):
        raise ValidationError(f"Window must be a positive duration, got {window!r}")

    try:
        if isinstance(reference, datetime):
            reference = to_naive_local(reference)
            return reference - window, reference
        if isinstance(reference, date):
            return (
                datetime.combine(reference - window, time.min),
                datetime.combine(reference, time.max),
            )
    except OverflowError:
        raise ValidationError(
            f"Window {window} before {reference} is out of range"
        ) from None
    raise ValidationError(f"Invalid reference date: {reference!r}")
