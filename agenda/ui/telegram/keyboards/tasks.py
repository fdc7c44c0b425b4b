from __future__ import annotations

from typing import Iterable, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from agenda.constants import NONE_SENTINEL, PRIORITIES
from agenda.domain.agenda.labels import RoleCatalog, priority_label
from agenda.domain.agenda.models import Task, User
from agenda.ui.telegram.texts import agenda as texts

PRIORITY_ICON = {"high": "🔴", "medium": "🟡", "low": "⚪"}


def _label(text: str, max_len: int = 40) -> str:
    t = text.strip()
    return t[:max_len] + ("…" if len(t) > max_len else "")


def task_list_kb(tasks: Iterable[Task], ctx: str) -> InlineKeyboardMarkup:
    """
    One row per task: toggle / edit / delete.
    ctx tells the handler which list to redraw: "u" or "dYYYY-MM-DD".
    """
    kb = InlineKeyboardBuilder()
    for t in tasks:
        mark = "✅" if t.completed else "○"
        kb.row(
            InlineKeyboardButton(
                text=f"{mark} {PRIORITY_ICON.get(t.priority, '')} {_label(t.title)}",
                callback_data=f"tk:t:{ctx}:{t.id}",
            ),
            InlineKeyboardButton(text="✏️", callback_data=f"tk:e:{ctx}:{t.id}"),
            InlineKeyboardButton(text="🗑️", callback_data=f"tk:d:{ctx}:{t.id}"),
        )
    return kb.as_markup()


def confirm_kb(yes_data: str, no_data: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=texts.BTN_YES, callback_data=yes_data)
    kb.button(text=texts.BTN_NO, callback_data=no_data)
    kb.adjust(2)
    return kb.as_markup()


def skip_cancel_kb(skip_data: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=texts.BTN_SKIP, callback_data=skip_data)
    kb.button(text=texts.BTN_CANCEL, callback_data="cancel")
    kb.adjust(2)
    return kb.as_markup()


def cancel_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=texts.BTN_CANCEL, callback_data="cancel")
    return kb.as_markup()


def assignee_kb(users: Sequence[User], roles: RoleCatalog) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=texts.NO_ASSIGNEE, callback_data=f"tf:user:{NONE_SENTINEL}")
    for u in users:
        kb.button(text=f"{_label(u.name, 30)} ({roles.label(u.role)})", callback_data=f"tf:user:{u.id}")
    kb.adjust(1)
    return kb.as_markup()


def priority_kb() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for p in PRIORITIES:
        kb.button(text=f"{PRIORITY_ICON[p]} {priority_label(p)}", callback_data=f"tf:prio:{p}")
    kb.adjust(3)
    return kb.as_markup()


def review_kb(editing: bool) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text=texts.FIELD_TITLE, callback_data="tf:field:title")
    kb.button(text=texts.FIELD_DESCRIPTION, callback_data="tf:field:description")
    kb.button(text=texts.FIELD_ASSIGNEE, callback_data="tf:field:assignee")
    kb.button(text=texts.FIELD_DATE, callback_data="tf:field:date")
    kb.button(text=texts.FIELD_PRIORITY, callback_data="tf:field:priority")
    kb.button(text=texts.BTN_CANCEL, callback_data="cancel")
    kb.button(text=texts.BTN_UPDATE if editing else texts.BTN_CREATE_TASK, callback_data="tf:save")
    kb.adjust(2, 2, 1, 2)
    return kb.as_markup()
