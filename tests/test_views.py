"""
Derived views over a task collection: day partition, counts, month markers.
"""
from __future__ import annotations

from datetime import date

from agenda.domain.agenda.models import Task
from agenda.domain.agenda.views import (
    MARKER_HIGH,
    MARKER_NONE,
    MARKER_TASKS,
    agenda_stats,
    completed_count,
    has_tasks_on_date,
    high_priority_count_on_date,
    month_markers,
    scheduled_tasks,
    tasks_on_date,
    total_count,
    unscheduled_tasks,
)


def _task(task_id, scheduled_date=None, priority="medium", completed=False):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        description=None,
        assigned_user_id=None,
        scheduled_date=scheduled_date,
        priority=priority,
        completed=completed,
        created_at="",
        updated_at="",
    )


TASKS = [
    _task("a", "2024-03-10", priority="high"),
    _task("b", "2024-03-10", completed=True),
    _task("c", "2024-03-15", priority="low"),
    _task("d"),
    _task("e", completed=True),
    _task("f", "2024-04-01", priority="high"),
]


def test_scheduled_and_unscheduled_partition_the_collection():
    scheduled = scheduled_tasks(TASKS)
    unscheduled = unscheduled_tasks(TASKS)
    assert {t.id for t in scheduled} & {t.id for t in unscheduled} == set()
    assert {t.id for t in scheduled} | {t.id for t in unscheduled} == {t.id for t in TASKS}
    assert [t.id for t in unscheduled] == ["d", "e"]


def test_tasks_on_date_keeps_collection_order():
    assert [t.id for t in tasks_on_date(TASKS, date(2024, 3, 10))] == ["a", "b"]
    assert tasks_on_date(TASKS, date(2024, 3, 11)) == []


def test_counts():
    assert total_count(TASKS) == 6
    assert completed_count(TASKS) == 2
    assert total_count([]) == 0


def test_has_tasks_and_high_priority_count():
    assert has_tasks_on_date(TASKS, date(2024, 3, 10))
    assert not has_tasks_on_date(TASKS, date(2024, 3, 9))
    assert high_priority_count_on_date(TASKS, date(2024, 3, 10)) == 1
    assert high_priority_count_on_date(TASKS, date(2024, 3, 15)) == 0


def test_month_markers():
    markers = month_markers(TASKS, 2024, 3)
    assert len(markers) == 31
    assert markers[10] == MARKER_HIGH
    assert markers[15] == MARKER_TASKS
    assert markers[1] == MARKER_NONE

    april = month_markers(TASKS, 2024, 4)
    assert len(april) == 30
    assert april[1] == MARKER_HIGH


def test_high_marker_wins_regardless_of_order():
    tasks = [_task("x", "2024-02-29", priority="high"), _task("y", "2024-02-29")]
    assert month_markers(tasks, 2024, 2)[29] == MARKER_HIGH
    assert month_markers(list(reversed(tasks)), 2024, 2)[29] == MARKER_HIGH


def test_agenda_stats():
    stats = agenda_stats(TASKS)
    assert (stats.total, stats.completed, stats.unscheduled) == (6, 2, 2)
