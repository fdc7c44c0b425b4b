from __future__ import annotations

from aiogram import Router, F
from aiogram.filters import Command, StateFilter
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery

from agenda.ui.telegram.states.agenda import TaskDialog, UserDialog
from agenda.ui.telegram.utils.screens import go_to_main_menu

router = Router()

CANCEL_WORDS = {"cancel", "cancelar", "sair", "stop"}

# free-text steps take any word as a value; /cancel and the button still work there
TEXT_INPUT_STATES = (TaskDialog.title, TaskDialog.description, UserDialog.name)


@router.message(Command("cancel"))
async def cancel_cmd(message: Message, state: FSMContext):
    await go_to_main_menu(message, state)


@router.message(F.text.casefold().in_(CANCEL_WORDS), ~StateFilter(*TEXT_INPUT_STATES))
async def cancel_text(message: Message, state: FSMContext):
    await go_to_main_menu(message, state)


@router.callback_query(F.data == "cancel")
async def cancel_cb(cb: CallbackQuery, state: FSMContext):
    # closing a dialog never writes anything
    await cb.answer()
    await cb.message.edit_reply_markup(reply_markup=None)
    await go_to_main_menu(cb.message, state)


@router.callback_query(F.data == "noop")
async def noop_cb(cb: CallbackQuery):
    await cb.answer()
