"""
Telegram handlers driven with an in-memory FSM context and fake callbacks.

Run with: python -m pytest tests/test_telegram_handlers.py -v
"""
from __future__ import annotations

import asyncio
from datetime import date

import pytest

from agenda.domain.agenda.index import AgendaIndex
from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.models import TaskForm, UserForm, UserInput
from agenda.ui.telegram.handlers.cancel import cancel_cb, cancel_text
from agenda.ui.telegram.handlers.cancel import router as cancel_router
from agenda.ui.telegram.handlers.tasks import new_task_cmd, review_save
from agenda.ui.telegram.handlers.users import user_edit, user_role
from agenda.ui.telegram.states.agenda import TaskDialog, UserDialog
from agenda.ui.telegram.texts import agenda as texts
from agenda.ui.telegram.utils.forms import (
    BUSY_KEY,
    EDIT_TASK_ID_KEY,
    EDIT_USER_ID_KEY,
    RETURN_TO_REVIEW_KEY,
    TASK_FORM_KEY,
    USER_FORM_KEY,
    task_form_from_data,
    task_form_to_data,
    user_form_to_data,
)
from agenda.ui.telegram.utils.screens import send_index
from tests.fakes import FakeCallback, FakeMessage, FixedClock, make_state

TODAY = date(2024, 3, 10)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def roles():
    return RoleCatalog()


async def _in_review(state, form: TaskForm, edit_id=None):
    await state.set_state(TaskDialog.review)
    await state.update_data({
        TASK_FORM_KEY: task_form_to_data(form),
        EDIT_TASK_ID_KEY: edit_id,
        RETURN_TO_REVIEW_KEY: True,
        BUSY_KEY: False,
    })


async def _choosing_role(state, form: UserForm, edit_id=None):
    await state.set_state(UserDialog.role)
    await state.update_data({USER_FORM_KEY: user_form_to_data(form), EDIT_USER_ID_KEY: edit_id, BUSY_KEY: False})


def test_save_creates_task_and_closes_dialog(gateway, task_service, user_service, clock, roles):
    state = make_state()
    cb = FakeCallback("tf:save")

    async def run():
        await _in_review(state, TaskForm(title="Post", scheduled_date=TODAY))
        await review_save(cb, state, task_service, user_service, clock, roles)
        return await state.get_state()

    assert asyncio.run(run()) is None
    assert [r["title"] for r in gateway.tables["tasks"]] == ["Post"]
    assert gateway.tables["tasks"][0]["scheduled_date"] == "2024-03-10"
    assert any("Tarefa criada" in t for t in cb.message.texts())
    assert ("markup", None) in cb.message.edits


def test_double_tap_on_save_creates_one_task(gateway, task_service, user_service, clock, roles):
    """Two taps on the same review card run concurrently; only the first one saves."""
    state = make_state()
    first, second = FakeCallback("tf:save"), FakeCallback("tf:save")

    async def run():
        await _in_review(state, TaskForm(title="Post"))
        await asyncio.gather(
            review_save(first, state, task_service, user_service, clock, roles),
            review_save(second, state, task_service, user_service, clock, roles),
        )

    asyncio.run(run())

    assert len([c for c in gateway.calls if c[0] == "insert"]) == 1
    assert sorted(first.answers + second.answers, key=str) == sorted([None, texts.SAVING], key=str)


def test_failed_save_keeps_form_for_retry(gateway, task_service, user_service, clock, roles):
    state = make_state()
    cb = FakeCallback("tf:save")
    gateway.fail["insert"] = "disk <full>"

    async def run():
        await _in_review(state, TaskForm(title="Post", priority="high"))
        await review_save(cb, state, task_service, user_service, clock, roles)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(run())

    assert current == TaskDialog.review.state
    assert data[BUSY_KEY] is False
    form = task_form_from_data(data[TASK_FORM_KEY])
    assert (form.title, form.priority) == ("Post", "high")
    assert gateway.tables["tasks"] == []
    assert any("disk &lt;full&gt;" in t for t in cb.message.texts())


def test_cancel_closes_dialog_without_writes(gateway):
    state = make_state()
    cb = FakeCallback("cancel")

    async def run():
        await _in_review(state, TaskForm(title="Changed"), edit_id="t1")
        await cancel_cb(cb, state)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(run())

    assert current is None
    assert data == {}
    assert gateway.calls == []
    assert cb.message.texts()[-1] == texts.CANCELLED


def test_new_task_starts_from_defaults_after_an_edit():
    state = make_state()
    message = FakeMessage("/new")

    async def run():
        await _in_review(state, TaskForm(title="Old", priority="high", assigned_user_id="u1"), edit_id="t9")
        await new_task_cmd(message, state)
        return await state.get_state(), await state.get_data()

    current, data = asyncio.run(run())

    assert current == TaskDialog.title.state
    assert data[EDIT_TASK_ID_KEY] is None
    assert data[RETURN_TO_REVIEW_KEY] is False
    assert task_form_from_data(data[TASK_FORM_KEY]) == TaskForm()


def test_double_tap_on_role_creates_one_user(gateway, task_service, user_service, clock, roles):
    state = make_state()
    first, second = FakeCallback("us:role:manager"), FakeCallback("us:role:manager")

    async def run():
        await _choosing_role(state, UserForm(name="Ana"))
        await asyncio.gather(
            user_role(first, state, task_service, user_service, clock, roles),
            user_role(second, state, task_service, user_service, clock, roles),
        )
        return await state.get_state()

    assert asyncio.run(run()) is None
    assert [(r["name"], r["role"]) for r in gateway.tables["users"]] == [("Ana", "manager")]


def test_user_edit_prompt_escapes_name(task_service, user_service, clock):
    state = make_state()

    async def run():
        user = await user_service.create_user(UserInput(name="R&D <team>", role="manager"))
        cb = FakeCallback(f"us:e:{user.id}")
        await user_edit(cb, state, task_service, user_service, clock)
        return cb, await state.get_state()

    cb, current = asyncio.run(run())

    assert current == UserDialog.name.state
    assert cb.message.texts()[-1] == f"<b>R&amp;D &lt;team&gt;</b>\n{texts.ASK_USER_NAME}"


@pytest.mark.parametrize(
    "raw_state, expected",
    [
        (None, True),
        (TaskDialog.review.state, True),
        (TaskDialog.title.state, False),
        (TaskDialog.description.state, False),
        (UserDialog.name.state, False),
    ],
)
def test_cancel_words_only_cancel_outside_text_input(raw_state, expected):
    handler = next(h for h in cancel_router.message.handlers if h.callback is cancel_text)
    ok, _ = asyncio.run(handler.check(FakeMessage("Sair"), raw_state=raw_state))
    assert ok is expected


def test_calendar_without_selection_opens_on_clock_today(task_service, user_service):
    index = AgendaIndex(task_service, user_service, today=date(2031, 7, 15))
    message = FakeMessage()

    async def run():
        await index.mount()
        index.select_date(None)
        await send_index(message, index)

    asyncio.run(run())

    callbacks = [
        b.callback_data
        for _, markup in message.sent
        for row in getattr(markup, "inline_keyboard", None) or []
        for b in row
    ]
    assert "ag:cal:2031-06" in callbacks
    assert "ag:cal:2031-08" in callbacks
