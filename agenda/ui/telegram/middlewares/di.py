from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.infra.clock.system_clock import SystemClock


class DIMiddleware(BaseMiddleware):
    """
    Puts the services, clock and role catalog into handler kwargs.

    Handlers ask for them by parameter name: task_service, user_service,
    clock, roles.
    """

    def __init__(
        self,
        task_service: TaskService,
        user_service: UserService,
        clock: SystemClock,
        roles: RoleCatalog,
    ) -> None:
        self._tasks = task_service
        self._users = user_service
        self._clock = clock
        self._roles = roles

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["task_service"] = self._tasks
        data["user_service"] = self._users
        data["clock"] = self._clock
        data["roles"] = self._roles

        return await handler(event, data)
