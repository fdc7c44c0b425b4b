from __future__ import annotations

import logging
from pathlib import Path

from agenda.infra.db.connection import Database

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


async def apply_migrations(db: Database, now_iso: str, migrations_dir: Path = MIGRATIONS_DIR) -> list[int]:
    """Apply every NNN_*.sql file not yet recorded in schema_migrations. Returns applied versions."""
    await db.execute(
        "CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL);"
    )

    applied: list[int] = []
    for p in sorted(p for p in Path(migrations_dir).glob("*.sql") if p.is_file()):
        version = int(p.stem.split("_")[0])

        row = await db.fetchone("SELECT version FROM schema_migrations WHERE version = ?;", (version,))
        if row:
            continue

        logger.info("Applying migration %s", p.name)
        await db.executescript(p.read_text(encoding="utf-8"))
        await db.execute(
            "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?);",
            (version, now_iso),
        )
        applied.append(version)
    return applied
