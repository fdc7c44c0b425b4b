from __future__ import annotations

import calendar
from datetime import date
from typing import Mapping, Optional

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from agenda.domain.agenda.views import MARKER_HIGH, MARKER_TASKS
from agenda.domain.common.time import to_iso_date
from agenda.ui.telegram.texts import agenda as texts

_MARKER_PREFIX = {MARKER_TASKS: "•", MARKER_HIGH: "🔴"}


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def month_token(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_kb(
    year: int,
    month: int,
    *,
    pick_prefix: str,
    nav_prefix: str,
    markers: Optional[Mapping[int, str]] = None,
    selected: Optional[date] = None,
    none_button: Optional[str] = None,
) -> InlineKeyboardMarkup:
    """
    Month grid, Monday first.

    callback_data:
      - f"{pick_prefix}:YYYY-MM-DD" for a day
      - f"{nav_prefix}:YYYY-MM" for previous/next month
      - f"{pick_prefix}:none" for none_button, when given
    """
    markers = markers or {}
    kb = InlineKeyboardBuilder()

    py, pm = shift_month(year, month, -1)
    ny, nm = shift_month(year, month, 1)
    kb.row(
        InlineKeyboardButton(text="◀", callback_data=f"{nav_prefix}:{month_token(py, pm)}"),
        InlineKeyboardButton(text=f"{texts.MONTHS[month - 1]} {year}", callback_data="noop"),
        InlineKeyboardButton(text="▶", callback_data=f"{nav_prefix}:{month_token(ny, nm)}"),
    )
    kb.row(*[InlineKeyboardButton(text=d, callback_data="noop") for d in texts.WEEKDAYS])

    for week in calendar.Calendar(firstweekday=0).monthdayscalendar(year, month):
        buttons = []
        for day_num in week:
            if day_num == 0:
                buttons.append(InlineKeyboardButton(text=" ", callback_data="noop"))
                continue
            day = date(year, month, day_num)
            label = f"{_MARKER_PREFIX.get(markers.get(day_num, ''), '')}{day_num}"
            if selected is not None and day == selected:
                label = f"[{label}]"
            buttons.append(InlineKeyboardButton(text=label, callback_data=f"{pick_prefix}:{to_iso_date(day)}"))
        kb.row(*buttons)

    if none_button:
        kb.row(InlineKeyboardButton(text=none_button, callback_data=f"{pick_prefix}:none"))

    return kb.as_markup()
