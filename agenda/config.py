from dataclasses import dataclass
import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from agenda.constants import DEFAULT_ROLES, WEIGHT_MUTED

load_dotenv()


RoleEntry = Tuple[str, str, str]


@dataclass(frozen=True)
class Settings:
    bot_token: str
    allowed_telegram_ids: frozenset[int]
    timezone: str
    db_path: Path
    log_level: str
    roles: Tuple[RoleEntry, ...]


def parse_roles(raw: str) -> Tuple[RoleEntry, ...]:
    """
    AGENDA_ROLES="manager:Gerente:primary,social_media:Social Media:secondary"
    Weight is optional and defaults to muted.
    """
    roles = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        parts = [p.strip() for p in item.split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise RuntimeError(f"AGENDA_ROLES entry invalid: {item!r}")
        weight = parts[2] if len(parts) > 2 and parts[2] else WEIGHT_MUTED
        roles.append((parts[0], parts[1], weight))
    if not roles:
        raise RuntimeError("AGENDA_ROLES is set but empty")
    return tuple(roles)


def parse_ids(raw: str) -> frozenset[int]:
    ids = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.add(int(part))
        except ValueError:
            raise RuntimeError(f"ALLOWED_TELEGRAM_IDS has a non-numeric id: {part!r}")
    return frozenset(i for i in ids if i > 0)


def load_settings() -> Settings:
    bot_token = os.getenv("BOT_TOKEN", "").strip()
    allowed = parse_ids(os.getenv("ALLOWED_TELEGRAM_IDS", ""))
    tz = os.getenv("TZ", "America/Sao_Paulo").strip()
    db_raw = os.getenv("DB_PATH", "data/agenda.db").strip()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    roles_raw = os.getenv("AGENDA_ROLES", "").strip()

    if not bot_token:
        raise RuntimeError("BOT_TOKEN missing in .env")
    if not allowed:
        raise RuntimeError("ALLOWED_TELEGRAM_IDS missing/invalid in .env")

    # db_path may be relative; the entry point resolves it against the repo root
    return Settings(
        bot_token=bot_token,
        allowed_telegram_ids=allowed,
        timezone=tz,
        db_path=Path(db_raw),
        log_level=log_level,
        roles=parse_roles(roles_raw) if roles_raw else DEFAULT_ROLES,
    )
