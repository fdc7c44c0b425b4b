"""
Local calendar-day handling for scheduled_date.

Run with: python -m pytest tests/test_local_dates.py -v
"""
from __future__ import annotations

import os
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from agenda.domain.agenda.models import Task
from agenda.domain.agenda.views import tasks_on_date
from agenda.domain.common.time import parse_local_date, to_iso_date


def _task(task_id: str, scheduled_date):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        description=None,
        assigned_user_id=None,
        scheduled_date=scheduled_date,
        priority="medium",
        completed=False,
        created_at="",
        updated_at="",
    )


@pytest.fixture
def process_tz():
    """Switch the process timezone for one test and restore it afterwards."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available on this platform")
    old = os.environ.get("TZ")

    def _set(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield _set

    if old is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = old
    time.tzset()


def test_parse_local_date_reads_components():
    assert parse_local_date("2024-03-10") == date(2024, 3, 10)


def test_parse_local_date_accepts_slashes_and_whitespace():
    assert parse_local_date(" 2024/03/10 ") == date(2024, 3, 10)


def test_parse_local_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_local_date("10.03.2024")


def test_to_iso_date_pads_components():
    assert to_iso_date(date(2024, 1, 5)) == "2024-01-05"


def test_to_iso_date_keeps_local_day_of_aware_datetime():
    """23:30 at UTC-3 is already the next day in UTC; the stored day must stay local."""
    late_evening = datetime(2024, 3, 10, 23, 30, tzinfo=timezone(timedelta(hours=-3)))
    assert to_iso_date(late_evening) == "2024-03-10"


def test_round_trip_keeps_calendar_day():
    day = date(2024, 12, 31)
    assert parse_local_date(to_iso_date(day)) == day


@pytest.mark.parametrize(
    "tz_name",
    ["UTC", "America/Sao_Paulo", "America/Los_Angeles", "Pacific/Kiritimati", "Asia/Tokyo"],
)
def test_tasks_on_date_matches_local_day_in_any_timezone(process_tz, tz_name):
    """Stored 2024-03-10 lands on the local March 10 whatever the offset."""
    process_tz(tz_name)
    task = _task("t1", "2024-03-10")
    local_march_10 = date(2024, 3, 10)

    assert tasks_on_date([task], local_march_10) == [task]
    assert tasks_on_date([task], date(2024, 3, 9)) == []
    assert tasks_on_date([task], date(2024, 3, 11)) == []


def test_to_iso_refuses_naive_datetime():
    from agenda.domain.common.time import to_iso

    with pytest.raises(ValueError):
        to_iso(datetime(2024, 3, 10, 12, 0))
