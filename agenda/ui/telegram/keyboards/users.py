from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.models import User
from agenda.ui.telegram.texts import agenda as texts


def users_kb(users: Sequence[User], roles: RoleCatalog) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for u in users:
        kb.row(
            InlineKeyboardButton(text=f"{u.name} · {roles.label(u.role)}", callback_data="noop"),
            InlineKeyboardButton(text="✏️", callback_data=f"us:e:{u.id}"),
            InlineKeyboardButton(text="🗑️", callback_data=f"us:d:{u.id}"),
        )
    kb.row(
        InlineKeyboardButton(text=texts.BTN_NEW_USER, callback_data="us:new"),
        InlineKeyboardButton(text=texts.BTN_CLOSE, callback_data="us:close"),
    )
    return kb.as_markup()


def role_kb(roles: RoleCatalog) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for info in roles.all():
        kb.button(text=info.label, callback_data=f"us:role:{info.tag}")
    kb.button(text=texts.BTN_CANCEL, callback_data="cancel")
    kb.adjust(2)
    return kb.as_markup()
