from __future__ import annotations

from aiogram.types import ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

from agenda.ui.telegram.texts import agenda as texts


def main_menu_kb() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()

    kb.button(text=texts.BTN_AGENDA)
    kb.button(text=texts.BTN_NEW_TASK)
    kb.button(text=texts.BTN_UNSCHEDULED)
    kb.button(text=texts.BTN_USERS)

    # 2x2 grid
    kb.adjust(2, 2)

    return kb.as_markup(resize_keyboard=True, one_time_keyboard=False)
