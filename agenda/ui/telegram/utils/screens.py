from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from agenda.domain.agenda.index import AgendaIndex
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.domain.common.time import parse_local_date, to_iso_date
from agenda.infra.clock.system_clock import SystemClock
from agenda.ui.telegram.keyboards.calendar import month_kb
from agenda.ui.telegram.keyboards.mainmenu import main_menu_kb
from agenda.ui.telegram.keyboards.tasks import task_list_kb
from agenda.ui.telegram.render import (
    render_day_title,
    render_index_text,
    render_notification,
    render_task_list_text,
)
from agenda.ui.telegram.texts import agenda as texts

logger = logging.getLogger(__name__)

UNSCHEDULED_CTX = "u"


def list_ctx(day: Optional[date]) -> str:
    """Callback token naming the list a task button came from."""
    return UNSCHEDULED_CTX if day is None else "d" + to_iso_date(day)


def ctx_day(ctx: str) -> Optional[date]:
    if ctx == UNSCHEDULED_CTX or not ctx.startswith("d"):
        return None
    return parse_local_date(ctx[1:])


async def go_to_main_menu(message: Message, state: Optional[FSMContext] = None, text: str = texts.CANCELLED) -> None:
    """Drop any dialog state and show the reply menu. Nothing is persisted on the way out."""
    if state is not None:
        await state.clear()
    await message.answer(text, reply_markup=main_menu_kb())


async def open_index(task_service: TaskService, user_service: UserService, clock: SystemClock) -> AgendaIndex:
    index = AgendaIndex(task_service, user_service, today=clock.today())
    await index.mount()
    return index


async def flush_notifications(message: Message, index: AgendaIndex) -> None:
    for n in index.drain_notifications():
        await message.answer(render_notification(n))


def calendar_markup(index: AgendaIndex, year: int, month: int):
    return month_kb(
        year,
        month,
        pick_prefix="ag:day",
        nav_prefix="ag:cal",
        markers=index.markers(year, month),
        selected=index.selected_date,
    )


async def send_index(message: Message, index: AgendaIndex) -> None:
    """Stats + calendar, then the selected day and the unscheduled list."""
    await flush_notifications(message, index)
    day = index.selected_date
    anchor = day or index.today
    await message.answer(texts.APP_SUBTITLE, reply_markup=main_menu_kb())
    await message.answer(
        render_index_text(index),
        reply_markup=calendar_markup(index, anchor.year, anchor.month),
    )
    if day is not None:
        await send_task_list(message, index, day)
    await send_task_list(message, index, None)


def task_list_view(index: AgendaIndex, day: Optional[date]):
    if day is None:
        tasks = index.unscheduled()
        title = texts.UNSCHEDULED_TITLE
    else:
        index.select_date(day)
        tasks = index.tasks_for_selected_date()
        title = render_day_title(day)
    return render_task_list_text(title, tasks), task_list_kb(tasks, list_ctx(day))


async def send_task_list(message: Message, index: AgendaIndex, day: Optional[date]) -> None:
    text, markup = task_list_view(index, day)
    await message.answer(text, reply_markup=markup)


async def redraw_task_list(message: Message, index: AgendaIndex, day: Optional[date]) -> None:
    """Edit the list message in place; fall back to a new message when Telegram refuses."""
    text, markup = task_list_view(index, day)
    try:
        await message.edit_text(text, reply_markup=markup)
    except TelegramBadRequest as e:
        logger.debug("List edit failed, sending new message: %s", e)
        await message.answer(text, reply_markup=markup)
