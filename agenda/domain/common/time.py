from __future__ import annotations

from datetime import date, datetime


def to_iso(dt: datetime) -> str:
    """Timestamp columns: ISO 8601 with offset. Naive datetimes are refused."""
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt.isoformat()


def parse_local_date(iso: str) -> date:
    """
    Parse a stored ``YYYY-MM-DD`` value as a local calendar date.

    The separators are swapped to ``/`` and the value is read as plain
    year/month/day components. It never goes through a timestamp, so the
    result is the same calendar day whatever the process timezone is.
    """
    raw = (iso or "").strip().replace("-", "/")
    return datetime.strptime(raw, "%Y/%m/%d").date()


def to_iso_date(day: date) -> str:
    """
    Inverse of parse_local_date.

    Aware datetimes are read in their own zone, never shifted to UTC first.
    """
    if isinstance(day, datetime):
        day = day.date()
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"
