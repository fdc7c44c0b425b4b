"""
AgendaIndex: loading, dialog lifecycle, busy guard, confirmed deletions.

Run with: python -m pytest tests/test_agenda_index.py -v
"""
from __future__ import annotations

import asyncio
from datetime import date

import pytest

from agenda.domain.agenda.index import PHASE_LOADING, PHASE_READY, AgendaIndex
from agenda.domain.agenda.models import TaskForm, TaskInput, UserForm, UserInput
from agenda.domain.common.errors import GatewayError

TODAY = date(2024, 3, 10)


@pytest.fixture
def index(task_service, user_service):
    return AgendaIndex(task_service, user_service, today=TODAY)


def _seed(task_service, user_service):
    async def run():
        ana = await user_service.create_user(UserInput(name="Ana", role="manager"))
        await task_service.create_task(TaskInput(title="Post", scheduled_date=TODAY, assigned_user_id=ana.id))
        await task_service.create_task(TaskInput(title="Story"))
        return ana

    return asyncio.run(run())


def test_mount_loads_both_collections(index, task_service, user_service):
    _seed(task_service, user_service)
    assert index.phase == PHASE_LOADING

    asyncio.run(index.mount())

    assert index.phase == PHASE_READY
    assert [t.title for t in index.tasks] == ["Story", "Post"]
    assert [u.name for u in index.users] == ["Ana"]
    assert index.selected_date == TODAY
    assert [t.title for t in index.tasks_for_selected_date()] == ["Post"]
    assert [t.title for t in index.unscheduled()] == ["Story"]
    assert index.drain_notifications() == []


def test_mount_with_failed_users_still_shows_tasks(gateway, index, task_service, user_service):
    """list_tasks joins names from users; fail only the users ordered select."""
    _seed(task_service, user_service)

    real_select = gateway.select

    async def select(table, *, filters=None, order_by=None, descending=False):
        if table == "users" and order_by == "name":
            raise GatewayError("users offline")
        return await real_select(table, filters=filters, order_by=order_by, descending=descending)

    gateway.select = select
    asyncio.run(index.mount())

    assert index.phase == PHASE_READY
    assert len(index.tasks) == 2
    assert index.users == []
    notes = index.drain_notifications()
    assert [(n.kind, n.title, n.message) for n in notes] == [("error", "Erro ao carregar usuários", "users offline")]


def test_mount_with_both_failing_ends_ready_and_empty(gateway, index):
    gateway.fail["select"] = "boom"
    asyncio.run(index.mount())
    assert index.phase == PHASE_READY
    assert index.tasks == [] and index.users == []
    assert len(index.drain_notifications()) == 2


def test_create_task_refetches_and_notifies(gateway, index):
    asyncio.run(index.mount())
    form = index.open_task_dialog()
    form.title = "  Reels  "
    form.scheduled_date = TODAY

    ok = asyncio.run(index.submit_task_dialog())

    assert ok is True
    assert index.dialog.open is False
    assert [t.title for t in index.tasks] == ["Reels"]
    assert [n.title for n in index.drain_notifications()] == ["Tarefa criada"]


def test_edit_then_cancel_makes_no_persistence_call(gateway, index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    before = len(gateway.mutations())

    task = index.find_task(index.tasks[0].id)
    form = index.open_task_dialog(task)
    form.title = "Changed"
    index.cancel_task_dialog()

    assert len(gateway.mutations()) == before
    assert index.dialog.open is False
    assert index.find_task(task.id).title == task.title


def test_open_resets_previous_edit(index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())

    post = next(t for t in index.tasks if t.title == "Post")
    edit_form = index.open_task_dialog(post)
    assert edit_form.title == "Post"
    assert edit_form.scheduled_date == TODAY
    assert edit_form.assigned_user_id == post.assigned_user_id

    add_form = index.open_task_dialog()
    assert index.dialog.editing is None
    assert add_form == TaskForm()


def test_validation_failure_keeps_dialog_open(gateway, index):
    asyncio.run(index.mount())
    index.open_task_dialog()

    ok = asyncio.run(index.submit_task_dialog(TaskForm(title="   ")))

    assert ok is False
    assert index.dialog.open is True
    assert index.busy is False
    assert gateway.mutations() == []
    notes = index.drain_notifications()
    assert notes[0].kind == "error"
    assert notes[0].title == "Erro de validação"


def test_persistence_failure_keeps_form(gateway, index):
    asyncio.run(index.mount())
    index.open_task_dialog()
    gateway.fail["insert"] = "disk full"

    ok = asyncio.run(index.submit_task_dialog(TaskForm(title="Post")))

    assert ok is False
    assert index.dialog.open is True
    assert index.dialog.form.title == "Post"
    assert [(n.title, n.message) for n in index.drain_notifications()] == [("Erro ao criar tarefa", "disk full")]


def test_busy_blocks_second_submit(gateway, index):
    asyncio.run(index.mount())
    index.open_task_dialog(None)
    index.busy = True

    assert asyncio.run(index.submit_task_dialog(TaskForm(title="Post"))) is False
    assert gateway.mutations() == []


def test_submit_without_open_dialog_is_ignored(gateway, index):
    asyncio.run(index.mount())
    assert asyncio.run(index.submit_task_dialog(TaskForm(title="Post"))) is False
    assert gateway.mutations() == []


def test_edit_updates_existing_task(gateway, index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    story = next(t for t in index.tasks if t.title == "Story")

    form = index.open_task_dialog(story)
    form.priority = "high"
    assert asyncio.run(index.submit_task_dialog()) is True

    updated = index.find_task(story.id)
    assert updated.priority == "high"
    assert [n.title for n in index.drain_notifications()] == ["Tarefa atualizada"]


def test_toggle_refetches(index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    story = next(t for t in index.tasks if t.title == "Story")

    assert asyncio.run(index.toggle_task(story)) is True
    assert index.find_task(story.id).completed is True
    assert index.stats().completed == 1


def test_task_delete_needs_confirmation(gateway, index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    story = next(t for t in index.tasks if t.title == "Story")

    pending = index.request_task_delete(story)
    assert (pending.entity, pending.entity_id, pending.label) == ("task", story.id, "Story")
    assert not [c for c in gateway.mutations() if c[0] == "delete"]

    index.cancel_pending_delete()
    assert asyncio.run(index.confirm_delete()) is False

    index.request_task_delete(story)
    assert asyncio.run(index.confirm_delete()) is True
    assert index.find_task(story.id) is None
    assert index.pending_delete is None
    assert [n.title for n in index.drain_notifications()] == ["Tarefa removida"]


def test_user_delete_keeps_tasks_unassigned(index, task_service, user_service):
    ana = _seed(task_service, user_service)
    asyncio.run(index.mount())

    index.request_user_delete(index.find_user(ana.id))
    assert asyncio.run(index.confirm_delete()) is True

    assert index.users == []
    post = next(t for t in index.tasks if t.title == "Post")
    assert post.assigned_user_id is None
    assert len(index.tasks) == 2


def test_failed_delete_reports_error(gateway, index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    story = next(t for t in index.tasks if t.title == "Story")
    gateway.fail["delete"] = "locked"

    index.request_task_delete(story)
    assert asyncio.run(index.confirm_delete()) is False
    assert index.find_task(story.id) is not None
    assert [(n.title, n.message) for n in index.drain_notifications()] == [("Erro ao remover tarefa", "locked")]


def test_user_form_create_and_edit(index):
    asyncio.run(index.mount())

    index.open_user_management()
    form = index.start_user_form()
    assert form == UserForm()
    assert asyncio.run(index.submit_user_form(UserForm(name="Ana", role="manager"))) is True
    assert index.user_form is None
    ana = index.users[0]

    index.start_user_form(ana)
    assert index.user_form == UserForm(name="Ana", role="manager")
    assert asyncio.run(index.submit_user_form(UserForm(name="Ana Lima", role="manager"))) is True
    assert [u.name for u in index.users] == ["Ana Lima"]
    assert [n.title for n in index.drain_notifications()] == ["Usuário criado", "Usuário atualizado"]


def test_user_form_validation_keeps_form(gateway, index):
    asyncio.run(index.mount())
    index.start_user_form()

    assert asyncio.run(index.submit_user_form(UserForm(name=" ", role="manager"))) is False
    assert index.user_form is not None
    assert gateway.mutations() == []
    assert index.drain_notifications()[0].title == "Erro de validação"


def test_close_user_management_clears_form(index):
    index.start_user_form()
    index.close_user_management()
    assert index.user_management_open is False
    assert index.user_form is None
    assert index.editing_user is None


def test_select_none_gives_empty_day(index, task_service, user_service):
    _seed(task_service, user_service)
    asyncio.run(index.mount())
    index.select_date(None)
    assert index.tasks_for_selected_date() == []
