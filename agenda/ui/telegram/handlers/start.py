from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.infra.clock.system_clock import SystemClock
from agenda.ui.telegram.texts import agenda as texts
from agenda.ui.telegram.utils.screens import flush_notifications, open_index, send_index, send_task_list

router = Router()


@router.message(CommandStart())
async def start_cmd(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await state.clear()
    await message.answer(texts.LOADING)
    index = await open_index(task_service, user_service, clock)
    await send_index(message, index)


@router.message(Command("menu"))
async def menu_cmd(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await state.clear()
    index = await open_index(task_service, user_service, clock)
    await send_index(message, index)


@router.message(F.text == texts.BTN_AGENDA)
async def agenda_btn(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await menu_cmd(message, state, task_service, user_service, clock)


@router.message(F.text == texts.BTN_UNSCHEDULED)
async def unscheduled_btn(message: Message, state: FSMContext, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await state.clear()
    index = await open_index(task_service, user_service, clock)
    await flush_notifications(message, index)
    await send_task_list(message, index, None)
