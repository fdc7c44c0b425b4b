"""
User management: list, create, edit, delete (with confirmation).
"""
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from agenda.domain.agenda.index import AgendaIndex
from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.infra.clock.system_clock import SystemClock
from agenda.ui.telegram.keyboards.tasks import cancel_kb, confirm_kb, skip_cancel_kb
from agenda.ui.telegram.keyboards.users import role_kb, users_kb
from agenda.ui.telegram.render import render_confirm_delete, render_user_edit_prompt, render_users_text
from agenda.ui.telegram.states.agenda import UserDialog
from agenda.ui.telegram.texts import agenda as texts
from agenda.ui.telegram.utils.callbacks import parse_callback
from agenda.ui.telegram.utils.forms import (
    BUSY_KEY,
    EDIT_USER_ID_KEY,
    USER_FORM_KEY,
    claim_busy,
    user_form_from_data,
    user_form_to_data,
)
from agenda.ui.telegram.utils.screens import flush_notifications, go_to_main_menu, open_index

router = Router()


async def _send_users(message: Message, index: AgendaIndex, roles: RoleCatalog) -> None:
    index.open_user_management()
    await flush_notifications(message, index)
    await message.answer(render_users_text(index.users, roles), reply_markup=users_kb(index.users, roles))


@router.message(Command("users"))
async def users_cmd(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock, roles: RoleCatalog):
    await state.clear()
    index = await open_index(task_service, user_service, clock)
    await _send_users(message, index, roles)


@router.message(F.text == texts.BTN_USERS)
async def users_btn(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock, roles: RoleCatalog):
    await users_cmd(message, state, task_service, user_service, clock, roles)


@router.callback_query(F.data == "us:close")
async def users_close(cb: CallbackQuery, state: FSMContext):
    await cb.answer()
    await cb.message.edit_reply_markup(reply_markup=None)
    await go_to_main_menu(cb.message, state, text=texts.BTN_CLOSE)


@router.callback_query(F.data == "us:new")
async def user_new(cb: CallbackQuery, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await cb.answer()
    index = AgendaIndex(task_service, user_service, today=clock.today())
    form = index.start_user_form(None)
    await state.clear()
    await state.set_state(UserDialog.name)
    await state.update_data({USER_FORM_KEY: user_form_to_data(form), EDIT_USER_ID_KEY: None, BUSY_KEY: False})
    await cb.message.answer(f"<b>{texts.BTN_NEW_USER}</b>\n{texts.ASK_USER_NAME}", reply_markup=cancel_kb())


@router.callback_query(F.data.startswith("us:e:"))
async def user_edit(cb: CallbackQuery, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    parts = parse_callback(cb.data, 3)
    if not parts:
        await cb.answer()
        return
    index = await open_index(task_service, user_service, clock)
    user = index.find_user(parts[2])
    if user is None:
        await cb.answer(texts.USER_NOT_FOUND, show_alert=True)
        return
    await cb.answer()

    form = index.start_user_form(user)
    await state.clear()
    await state.set_state(UserDialog.name)
    await state.update_data({USER_FORM_KEY: user_form_to_data(form), EDIT_USER_ID_KEY: user.id, BUSY_KEY: False})
    await cb.message.answer(
        render_user_edit_prompt(user),
        reply_markup=skip_cancel_kb("us:keepname"),
    )


@router.message(UserDialog.name)
async def user_name(message: Message, state: FSMContext, roles: RoleCatalog):
    name = (message.text or "").strip()
    if not name:
        await message.answer(texts.EMPTY_NAME)
        return
    data = await state.get_data()
    form = user_form_from_data(data.get(USER_FORM_KEY))
    form.name = name
    await state.update_data({USER_FORM_KEY: user_form_to_data(form)})
    await state.set_state(UserDialog.role)
    await message.answer(texts.ASK_USER_ROLE, reply_markup=role_kb(roles))


@router.callback_query(UserDialog.name, F.data == "us:keepname")
async def user_keep_name(cb: CallbackQuery, state: FSMContext, roles: RoleCatalog):
    await cb.answer()
    await state.set_state(UserDialog.role)
    await cb.message.answer(texts.ASK_USER_ROLE, reply_markup=role_kb(roles))


@router.callback_query(UserDialog.role, F.data.startswith("us:role:"))
async def user_role(
    cb: CallbackQuery,
    state: FSMContext,
    task_service: TaskService,
    user_service: UserService,
    clock: SystemClock,
    roles: RoleCatalog,
):
    parts = parse_callback(cb.data, 3)
    if not parts:
        await cb.answer()
        return
    claimed, data = await claim_busy(state)
    if not claimed:
        await cb.answer(texts.SAVING)
        return
    await cb.answer()
    await cb.message.edit_reply_markup(reply_markup=None)

    form = user_form_from_data(data.get(USER_FORM_KEY))
    form.role = parts[2]

    index = await open_index(task_service, user_service, clock)
    editing = None
    if data.get(EDIT_USER_ID_KEY):
        editing = index.find_user(data[EDIT_USER_ID_KEY])
        if editing is None:
            await state.clear()
            await cb.message.answer(texts.USER_NOT_FOUND)
            return
    index.start_user_form(editing)
    ok = await index.submit_user_form(form)

    if not ok:
        await state.update_data({USER_FORM_KEY: user_form_to_data(form), BUSY_KEY: False})
        await state.set_state(UserDialog.name)
        await flush_notifications(cb.message, index)
        await cb.message.answer(texts.ASK_USER_NAME, reply_markup=cancel_kb())
        return

    await state.clear()
    await _send_users(cb.message, index, roles)


@router.callback_query(F.data.startswith("us:d:"))
async def ask_delete_user(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    parts = parse_callback(cb.data, 3)
    if not parts:
        await cb.answer()
        return
    index = await open_index(task_service, user_service, clock)
    user = index.find_user(parts[2])
    if user is None:
        await cb.answer(texts.USER_NOT_FOUND, show_alert=True)
        return
    await cb.answer()
    pending = index.request_user_delete(user)
    await cb.message.answer(
        render_confirm_delete(pending.entity, pending.label),
        reply_markup=confirm_kb(f"us:y:{user.id}", "us:n"),
    )


@router.callback_query(F.data.startswith("us:y:"))
async def confirm_delete_user(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock, roles: RoleCatalog):
    parts = parse_callback(cb.data, 3)
    if not parts:
        await cb.answer()
        return
    await cb.answer()
    await cb.message.edit_reply_markup(reply_markup=None)

    index = await open_index(task_service, user_service, clock)
    user = index.find_user(parts[2])
    if user is None:
        await cb.message.answer(texts.USER_NOT_FOUND)
    else:
        index.request_user_delete(user)
        await index.confirm_delete()
    await _send_users(cb.message, index, roles)


@router.callback_query(F.data == "us:n")
async def keep_user(cb: CallbackQuery):
    await cb.answer()
    await cb.message.edit_text(texts.CANCELLED)
