from __future__ import annotations

from aiogram import F, Router
from aiogram.types import CallbackQuery

from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.domain.common.time import parse_local_date
from agenda.infra.clock.system_clock import SystemClock
from agenda.ui.telegram.utils.callbacks import parse_callback
from agenda.ui.telegram.utils.screens import calendar_markup, flush_notifications, open_index, send_task_list

router = Router()


@router.callback_query(F.data.startswith("ag:cal:"))
async def calendar_nav(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts:
        return
    first = parse_local_date(f"{parts[2]}-01")
    index = await open_index(task_service, user_service, clock)
    await flush_notifications(cb.message, index)
    await cb.message.edit_reply_markup(reply_markup=calendar_markup(index, first.year, first.month))


@router.callback_query(F.data.startswith("ag:day:"))
async def calendar_pick_day(cb: CallbackQuery, task_service: TaskService, user_service: UserService, clock: SystemClock):
    await cb.answer()
    parts = parse_callback(cb.data, 3)
    if not parts:
        return
    day = parse_local_date(parts[2])
    index = await open_index(task_service, user_service, clock)
    index.select_date(day)
    await flush_notifications(cb.message, index)
    await cb.message.edit_reply_markup(reply_markup=calendar_markup(index, day.year, day.month))
    await send_task_list(cb.message, index, day)
