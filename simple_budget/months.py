"""Month keys ("YYYY-MM") and their local-time millisecond windows."""

from __future__ import annotations

from datetime import datetime

MONTH_NAMES = {
    "01": "January",
    "02": "February",
    "03": "March",
    "04": "April",
    "05": "May",
    "06": "June",
    "07": "July",
    "08": "August",
    "09": "September",
    "10": "October",
    "11": "November",
    "12": "December",
}


def current_month_year(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{now.year:04d}-{now.month:02d}"


def parse_month_year(month_year: str) -> tuple[int, int]:
    """Split a ``YYYY-MM`` key into ``(year, month)``.

    Raises ValueError for anything else, including out-of-range months.
    """
    text = str(month_year).strip()
    parts = text.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid month key: {month_year!r}")
    if not (parts[0].isdigit() and parts[1].isdigit()):
        raise ValueError(f"Invalid month key: {month_year!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12 or year < 1:
        raise ValueError(f"Invalid month key: {month_year!r}")
    return year, month


def shift_month(month_year: str, delta: int) -> str:
    year, month = parse_month_year(month_year)
    index = year * 12 + (month - 1) + delta
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def _local_millis(year: int, month: int) -> int:
    return int(datetime(year, month, 1).timestamp() * 1000)


def month_bounds(month_year: str) -> tuple[int, int]:
    """Return ``(start, end)`` epoch millis, both inclusive, in local time."""
    year, month = parse_month_year(month_year)
    next_year, next_month = parse_month_year(shift_month(month_year, 1))
    start = _local_millis(year, month)
    end = _local_millis(next_year, next_month) - 1
    return start, end


def month_of_millis(timestamp_millis: int) -> str:
    return current_month_year(datetime.fromtimestamp(timestamp_millis / 1000))


def format_month_year(month_year: str) -> str:
    """Render ``2025-10`` as ``October 2025``; malformed keys come back unchanged."""
    try:
        year, month = parse_month_year(month_year)
    except ValueError:
        return month_year
    return f"{MONTH_NAMES[f'{month:02d}']} {year:04d}"
