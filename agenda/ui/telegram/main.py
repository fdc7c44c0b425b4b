from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import ExceptionTypeFilter
from aiogram.fsm.storage.memory import MemoryStorage, SimpleEventIsolation
from aiogram.types import ErrorEvent

from agenda.config import load_settings
from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.domain.common.time import to_iso
from agenda.infra.clock.system_clock import SystemClock
from agenda.infra.db.connection import Database
from agenda.infra.db.gateway.sqlite_gateway import SqliteTableGateway
from agenda.infra.db.schema_version import apply_migrations

from agenda.ui.telegram.handlers.calendar import router as calendar_router
from agenda.ui.telegram.handlers.cancel import router as cancel_router
from agenda.ui.telegram.handlers.start import router as start_router
from agenda.ui.telegram.handlers.tasks import router as tasks_router
from agenda.ui.telegram.handlers.users import router as users_router
from agenda.ui.telegram.middlewares.auth import AllowListMiddleware
from agenda.ui.telegram.middlewares.di import DIMiddleware

logger = logging.getLogger(__name__)

_IGNORED_BAD_REQUESTS = (
    "query is too old",
    "query id is invalid",
    "response timeout expired",
    "message is not modified",
)


def build_dispatcher(
    task_service: TaskService,
    user_service: UserService,
    clock: SystemClock,
    roles: RoleCatalog,
    allowed_ids,
) -> Dispatcher:
    # updates from one chat run one at a time
    dp = Dispatcher(storage=MemoryStorage(), events_isolation=SimpleEventIsolation())

    # --- middlewares ---
    for observer in (dp.message, dp.callback_query):
        observer.middleware(AllowListMiddleware(allowed_ids))
        observer.middleware(DIMiddleware(task_service, user_service, clock, roles))

    # --- routers ---
    # cancel first so it wins inside any dialog state
    dp.include_router(cancel_router)
    dp.include_router(start_router)
    dp.include_router(calendar_router)
    dp.include_router(tasks_router)
    dp.include_router(users_router)

    @dp.error(ExceptionTypeFilter(TelegramBadRequest))
    async def handle_stale_callback(event: ErrorEvent) -> None:
        """Old callback queries and no-op edits are harmless (e.g. after a restart)."""
        msg = str(event.exception).lower()
        if any(s in msg for s in _IGNORED_BAD_REQUESTS):
            logger.debug("Ignoring Telegram bad request: %s", event.exception)
            return
        raise event.exception

    @dp.error()
    async def handle_unexpected(event: ErrorEvent) -> None:
        logger.error("Unhandled error in update handler", exc_info=event.exception)
        raise event.exception

    return dp


async def main() -> None:
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - [PID:%(process)d] - %(message)s'
    )
    pid = os.getpid()
    logger.info("Agenda bot starting - PID: %s", pid)

    repo_root = Path(__file__).resolve().parents[3]  # .../agenda/ui/telegram/main.py -> repo root

    # --- DB path: one place, always absolute, ensure dir exists ---
    db_path = settings.db_path
    if not db_path.is_absolute():
        db_path = repo_root / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("DB_PATH: %s", db_path)

    db = Database(str(db_path))
    clock = SystemClock(settings.timezone)

    applied = await apply_migrations(db=db, now_iso=to_iso(clock.now()))
    if applied:
        logger.info("Applied migrations: %s", applied)

    # --- services (constructed once, injected everywhere) ---
    gateway = SqliteTableGateway(db, clock)
    roles = RoleCatalog(settings.roles)
    task_service = TaskService(gateway)
    user_service = UserService(gateway, roles)

    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = build_dispatcher(task_service, user_service, clock, roles, settings.allowed_telegram_ids)

    logger.info("Starting polling - PID: %s", pid)
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
        logger.info("Agenda bot shutdown complete - PID: %s", pid)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
