"""
Pure derivations over a loaded task collection. No I/O.
"""
from __future__ import annotations

import calendar
from datetime import date
from typing import Dict, Iterable, List

from agenda.constants import PRIORITY_HIGH
from agenda.domain.agenda.models import AgendaStats, Task

MARKER_NONE = "none"
MARKER_TASKS = "tasks"
MARKER_HIGH = "high"


def tasks_on_date(tasks: Iterable[Task], day: date) -> List[Task]:
    out = []
    for t in tasks:
        if t.scheduled_date is None:
            continue
        d = t.local_date
        if (d.year, d.month, d.day) == (day.year, day.month, day.day):
            out.append(t)
    return out


def unscheduled_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.scheduled_date is None]


def scheduled_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [t for t in tasks if t.scheduled_date is not None]


def completed_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if t.completed)


def total_count(tasks: Iterable[Task]) -> int:
    return sum(1 for _ in tasks)


def has_tasks_on_date(tasks: Iterable[Task], day: date) -> bool:
    return len(tasks_on_date(tasks, day)) > 0


def high_priority_count_on_date(tasks: Iterable[Task], day: date) -> int:
    return sum(1 for t in tasks_on_date(tasks, day) if t.priority == PRIORITY_HIGH)


def month_markers(tasks: Iterable[Task], year: int, month: int) -> Dict[int, str]:
    """Day-of-month -> marker for every day of the month. High priority wins over plain."""
    month_tasks = [
        t for t in scheduled_tasks(tasks)
        if (t.local_date.year, t.local_date.month) == (year, month)
    ]
    markers = {}
    for day_num in range(1, calendar.monthrange(year, month)[1] + 1):
        day = date(year, month, day_num)
        if high_priority_count_on_date(month_tasks, day):
            markers[day_num] = MARKER_HIGH
        elif has_tasks_on_date(month_tasks, day):
            markers[day_num] = MARKER_TASKS
        else:
            markers[day_num] = MARKER_NONE
    return markers


def agenda_stats(tasks: Iterable[Task]) -> AgendaStats:
    tasks = list(tasks)
    return AgendaStats(
        total=total_count(tasks),
        completed=completed_count(tasks),
        unscheduled=len(unscheduled_tasks(tasks)),
    )
