from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from agenda.ui.telegram.texts import agenda as texts

logger = logging.getLogger(__name__)


class AllowListMiddleware(BaseMiddleware):
    """Only the configured Telegram accounts can use the agenda."""

    def __init__(self, allowed_ids: Iterable[int]) -> None:
        self._allowed = frozenset(allowed_ids)

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user_id = None
        if isinstance(event, (Message, CallbackQuery)) and event.from_user:
            user_id = event.from_user.id

        if user_id not in self._allowed:
            logger.warning("Blocked update from user_id=%s", user_id)
            if isinstance(event, Message):
                await event.answer(texts.NOT_AUTHORIZED)
            elif isinstance(event, CallbackQuery):
                await event.answer(texts.NOT_AUTHORIZED, show_alert=True)
            return None

        return await handler(event, data)
