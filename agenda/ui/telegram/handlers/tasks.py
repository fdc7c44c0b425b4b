"""
Task dialog (add/edit) and per-task actions: toggle, edit, delete.

ROUTER MAP:
- /new, "Nova Tarefa"           -> add flow: title -> description -> assignee -> date -> priority -> review
- tk:e:<ctx>:<id>              -> edit flow: review with the task's fields
- tf:*                          -> dialog steps (state bound)
- tk:t / tk:d / tk:y / tk:n    -> toggle, ask delete, confirm delete, keep
"""
from __future__ import annotations

import logging
from datetime import date
from html import escape
from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from agenda.constants import NONE_SENTINEL
from agenda.domain.agenda.index import task_form_from
from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.models import TaskForm
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.domain.common.errors import DomainError
from agenda.domain.common.time import parse_local_date
from agenda.infra.clock.system_clock import SystemClock
from agenda.ui.telegram.keyboards.calendar import month_kb
from agenda.ui.telegram.keyboards.tasks import (
    assignee_kb,
    cancel_kb,
    confirm_kb,
    priority_kb,
    review_kb,
    skip_cancel_kb,
)
from agenda.ui.telegram.render import render_confirm_delete, render_notification, render_review_text
from agenda.ui.telegram.states.agenda import TaskDialog
from agenda.ui.telegram.texts import agenda as texts
from agenda.ui.telegram.utils.callbacks import parse_callback
from agenda.ui.telegram.utils.forms import (
    BUSY_KEY,
    EDIT_TASK_ID_KEY,
    RETURN_TO_REVIEW_KEY,
    TASK_FORM_KEY,
    claim_busy,
    task_form_from_data,
    task_form_to_data,
)
from agenda.ui.telegram.utils.screens import (
    ctx_day,
    flush_notifications,
    open_index,
    redraw_task_list,
    send_task_list,
)

logger = logging.getLogger(__name__)

router = Router()


async def _get_form(state: FSMContext) -> TaskForm:
    data = await state.get_data()
    return task_form_from_data(data.get(TASK_FORM_KEY))


async def _put_form(state: FSMContext, form: TaskForm) -> None:
    await state.update_data({TASK_FORM_KEY: task_form_to_data(form)})


async def _load_users(message: Message, user_service: UserService):
    try:
        return list(await user_service.list_users())
    except DomainError as e:
        await message.answer(f"⚠️ {escape(str(e))}")
        return []


async def _show_review(message: Message, state: FSMContext, user_service: UserService, roles: RoleCatalog) -> None:
    data = await state.get_data()
    form = task_form_from_data(data.get(TASK_FORM_KEY))
    editing = bool(data.get(EDIT_TASK_ID_KEY))
    users = await _load_users(message, user_service)
    await state.set_state(TaskDialog.review)
    await message.answer(render_review_text(form, users, roles, editing), reply_markup=review_kb(editing))


async def _ask_field(
    field: str,
    message: Message,
    state: FSMContext,
    user_service: UserService,
    roles: RoleCatalog,
    clock: SystemClock,
) -> None:
    form = await _get_form(state)

    if field == "title":
        await state.set_state(TaskDialog.title)
        await message.answer(texts.ASK_TITLE, reply_markup=cancel_kb())
    elif field == "description":
        await state.set_state(TaskDialog.description)
        await message.answer(texts.ASK_DESCRIPTION, reply_markup=skip_cancel_kb("tf:skip:description"))
    elif field == "assignee":
        await state.set_state(TaskDialog.assignee)
        users = await _load_users(message, user_service)
        await message.answer(texts.ASK_ASSIGNEE, reply_markup=assignee_kb(users, roles))
    elif field == "date":
        await state.set_state(TaskDialog.date)
        anchor = form.scheduled_date or clock.today()
        await message.answer(
            texts.ASK_DATE,
            reply_markup=month_kb(
                anchor.year,
                anchor.month,
                pick_prefix="tf:date",
                nav_prefix="tf:dnav",
                selected=form.scheduled_date,
                none_button=texts.REMOVE_DATE,
            ),
        )
    elif field == "priority":
        await state.set_state(TaskDialog.priority)
        await message.answer(texts.ASK_PRIORITY, reply_markup=priority_kb())
    else:
        raise ValueError(f"unknown task field: {field}")


_NEXT_FIELD = {
    "title": "description",
    "description": "assignee",
    "assignee": "date",
    "date": "priority",
    "priority": None,
}


async def _advance(
    done_field: str,
    message: Message,
    state: FSMContext,
    user_service: UserService,
    roles: RoleCatalog,
    clock: SystemClock,
) -> None:
    """Go to the next field of the add flow, or back to review when a single field was edited."""
    data = await state.get_data()
    nxt = _NEXT_FIELD[done_field]
    if data.get(RETURN_TO_REVIEW_KEY) or nxt is None:
        await _show_review(message, state, user_service, roles)
        return
    await _ask_field(nxt, message, state, user_service, roles, clock)


# --- open dialog ---


async def _open_add_dialog(message: Message, state: FSMContext) -> None:
    # every open starts from defaults, nothing from an earlier edit survives
    await state.clear()
    await state.set_state(TaskDialog.title)
    await state.update_data({
        TASK_FORM_KEY: task_form_to_data(task_form_from(None)),
        EDIT_TASK_ID_KEY: None,
        RETURN_TO_REVIEW_KEY: False,
        BUSY_KEY: False,
    })
    await message.answer(f"<b>{texts.NEW_TASK_TITLE}</b>\n{texts.ASK_TITLE}", reply_markup=cancel_kb())


@router.message(Command("new"))
async def new_task_cmd(message: Message, state: FSMContext):
    await _open_add_dialog(message, state)


@router.message(F.text == texts.BTN_NEW_TASK)
async def new_task_btn(message: Message, state: FSMContext):
    await _open_add_dialog(message, state)


@router.callback_query(F.data.startswith("tk:e:"))
async def edit_task(
    cb: CallbackQuery,
    state: FSMContext,
    task_service: TaskService,
    user_service: UserService,
    clock: SystemClock,
    roles: RoleCatalog,
):
    parts = parse_callback(cb.data, 4)
    if not parts:
        await cb.answer()
        return
    task_id = parts[3]

    index = await open_index(task_service, user_service, clock)
    task = index.find_task(task_id)
    if task is None:
        await cb.answer(texts.TASK_NOT_FOUND, show_alert=True)
        return
    await cb.answer()

    form = index.open_task_dialog(task)
    await state.clear()
    await state.update_data({
        TASK_FORM_KEY: task_form_to_data(form),
        EDIT_TASK_ID_KEY: task.id,
        RETURN_TO_REVIEW_KEY: True,
        BUSY_KEY: False,
    })
    await _show_review(cb.message, state, user_service, roles)


# --- dialog steps ---


@router.message(TaskDialog.title)
async def step_title(message: Message, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    title = (message.text or "").strip()
    if not title:
        await message.answer(texts.EMPTY_TITLE)
        return
    form = await _get_form(state)
    form.title = title
    await _put_form(state, form)
    await _advance("title", message, state, user_service, roles, clock)


@router.message(TaskDialog.description)
async def step_description(message: Message, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    form = await _get_form(state)
    form.description = (message.text or "").strip()
    await _put_form(state, form)
    await _advance("description", message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.description, F.data == "tf:skip:description")
async def step_description_skip(cb: CallbackQuery, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    await cb.answer()
    form = await _get_form(state)
    form.description = ""
    await _put_form(state, form)
    await _advance("description", cb.message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.assignee, F.data.startswith("tf:user:"))
async def step_assignee(cb: CallbackQuery, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    form = await _get_form(state)
    form.assigned_user_id = parts[2] if parts else NONE_SENTINEL
    await _put_form(state, form)
    await _advance("assignee", cb.message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.date, F.data.startswith("tf:dnav:"))
async def step_date_nav(cb: CallbackQuery, state: FSMContext):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts:
        return
    first = parse_local_date(f"{parts[2]}-01")
    form = await _get_form(state)
    await cb.message.edit_reply_markup(
        reply_markup=month_kb(
            first.year,
            first.month,
            pick_prefix="tf:date",
            nav_prefix="tf:dnav",
            selected=form.scheduled_date,
            none_button=texts.REMOVE_DATE,
        )
    )


@router.callback_query(TaskDialog.date, F.data.startswith("tf:date:"))
async def step_date(cb: CallbackQuery, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts:
        return
    form = await _get_form(state)
    form.scheduled_date = None if parts[2] == "none" else parse_local_date(parts[2])
    await _put_form(state, form)
    await _advance("date", cb.message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.priority, F.data.startswith("tf:prio:"))
async def step_priority(cb: CallbackQuery, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts:
        return
    form = await _get_form(state)
    form.priority = parts[2]
    await _put_form(state, form)
    await _advance("priority", cb.message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.review, F.data.startswith("tf:field:"))
async def review_change_field(cb: CallbackQuery, state: FSMContext, user_service: UserService, roles: RoleCatalog, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts or parts[2] not in _NEXT_FIELD:
        return
    await state.update_data({RETURN_TO_REVIEW_KEY: True})
    await _ask_field(parts[2], cb.message, state, user_service, roles, clock)


@router.callback_query(TaskDialog.review, F.data == "tf:save")
async def review_save(
    cb: CallbackQuery,
    state: FSMContext,
    task_service: TaskService,
    user_service: UserService,
    clock: SystemClock,
    roles: RoleCatalog,
):
    claimed, data = await claim_busy(state)
    if not claimed:
        await cb.answer(texts.SAVING)
        return
    await cb.answer()
    # the save button goes away while the request is in flight
    await cb.message.edit_reply_markup(reply_markup=None)

    form = task_form_from_data(data.get(TASK_FORM_KEY))
    editing_id: Optional[str] = data.get(EDIT_TASK_ID_KEY)

    try:
        index = await open_index(task_service, user_service, clock)
        task = None
        if editing_id:
            task = index.find_task(editing_id)
            if task is None:
                await state.clear()
                await flush_notifications(cb.message, index)
                await cb.message.answer(texts.TASK_NOT_FOUND)
                return
        index.open_task_dialog(task)
        ok = await index.submit_task_dialog(form)
    finally:
        if await state.get_state() is not None:
            await state.update_data({BUSY_KEY: False})

    await flush_notifications(cb.message, index)
    if not ok:
        # form stays as typed, user can fix and save again
        await _show_review(cb.message, state, user_service, roles)
        return

    await state.clear()
    await send_task_list(cb.message, index, form.scheduled_date)


# --- task actions ---


@router.callback_query(F.data.startswith("tk:t:"))
async def toggle_task(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    parts = parse_callback(cb.data, 4)
    if not parts:
        await cb.answer()
        return
    day: Optional[date] = ctx_day(parts[2])

    index = await open_index(task_service, user_service, clock)
    task = index.find_task(parts[3])
    if task is None:
        await cb.answer(texts.TASK_NOT_FOUND, show_alert=True)
    else:
        await index.toggle_task(task)
        notes = index.drain_notifications()
        if notes:
            await cb.answer()
            for n in notes:
                await cb.message.answer(render_notification(n))
        else:
            await cb.answer("✅" if not task.completed else "○")
    await redraw_task_list(cb.message, index, day)


@router.callback_query(F.data.startswith("tk:d:"))
async def ask_delete_task(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    parts = parse_callback(cb.data, 4)
    if not parts:
        await cb.answer()
        return
    index = await open_index(task_service, user_service, clock)
    task = index.find_task(parts[3])
    if task is None:
        await cb.answer(texts.TASK_NOT_FOUND, show_alert=True)
        return
    await cb.answer()
    pending = index.request_task_delete(task)
    await cb.message.answer(
        render_confirm_delete(pending.entity, pending.label),
        reply_markup=confirm_kb(f"tk:y:{parts[2]}:{task.id}", "tk:n"),
    )


@router.callback_query(F.data.startswith("tk:y:"))
async def confirm_delete_task(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    parts = parse_callback(cb.data, 4)
    if not parts:
        await cb.answer()
        return
    await cb.answer()
    await cb.message.edit_reply_markup(reply_markup=None)

    index = await open_index(task_service, user_service, clock)
    task = index.find_task(parts[3])
    if task is None:
        await cb.message.answer(texts.TASK_NOT_FOUND)
    else:
        index.request_task_delete(task)
        await index.confirm_delete()
    await flush_notifications(cb.message, index)
    await send_task_list(cb.message, index, ctx_day(parts[2]))


@router.callback_query(F.data == "tk:n")
async def keep_task(cb: CallbackQuery):
    await cb.answer()
    await cb.message.edit_text(texts.CANCELLED)
