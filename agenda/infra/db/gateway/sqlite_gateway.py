# agenda/infra/db/gateway/sqlite_gateway.py
from __future__ import annotations

import logging
import re
import uuid
from datetime import timezone
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import aiosqlite

from agenda.domain.agenda.ports import Clock, IdGenerator, Row, TableGateway
from agenda.domain.common.errors import GatewayError
from agenda.domain.common.time import to_iso
from agenda.infra.db.connection import Database

logger = logging.getLogger(__name__)

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# columns the backend owns; callers cannot write them on update
_READ_ONLY_ON_UPDATE = ("id", "created_at", "updated_at")


class UuidGenerator(IdGenerator):
    def new_id(self) -> str:
        return str(uuid.uuid4())


def _ident(name: str) -> str:
    if not _IDENT.match(name or ""):
        raise GatewayError(f"invalid identifier: {name!r}")
    return name


def _where(filters: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
    if not filters:
        return "", []
    parts: List[str] = []
    params: List[Any] = []
    for col, value in filters.items():
        if value is None:
            parts.append(f"{_ident(col)} IS NULL")
        else:
            parts.append(f"{_ident(col)} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(parts), params


class SqliteTableGateway(TableGateway):
    """
    TableGateway over a local SQLite file.

    Like a managed backend it assigns id, created_at and updated_at itself.
    Ids are uuid4 strings unless another generator is given.
    """

    def __init__(self, db: Database, clock: Clock, ids: Optional[IdGenerator] = None) -> None:
        self._db = db
        self._clock = clock
        self._ids = ids or UuidGenerator()

    def _now_iso(self) -> str:
        return to_iso(self._clock.now().astimezone(timezone.utc))

    async def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        where, params = _where(filters)
        sql = f"SELECT * FROM {_ident(table)}{where}"
        if order_by:
            sql += f" ORDER BY {_ident(order_by)} {'DESC' if descending else 'ASC'}"
        rows = await self._run_fetch(sql, params)
        return [dict(r) for r in rows]

    async def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        now = self._now_iso()
        record = dict(values)
        record["id"] = self._ids.new_id()
        record["created_at"] = now
        record["updated_at"] = now

        cols = [_ident(c) for c in record]
        sql = (
            f"INSERT INTO {_ident(table)} ({', '.join(cols)}) "
            f"VALUES ({', '.join('?' for _ in cols)});"
        )
        await self._run(sql, list(record.values()))

        rows = await self._run_fetch(f"SELECT * FROM {_ident(table)} WHERE id = ?", [record["id"]])
        if not rows:
            raise GatewayError(f"inserted row not found in {table}")
        return dict(rows[0])

    async def update(self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]) -> None:
        if not filters:
            raise GatewayError("update requires a filter")
        record = {k: v for k, v in values.items() if k not in _READ_ONLY_ON_UPDATE}
        record["updated_at"] = self._now_iso()

        assignments = ", ".join(f"{_ident(c)} = ?" for c in record)
        where, where_params = _where(filters)
        await self._run(
            f"UPDATE {_ident(table)} SET {assignments}{where};",
            list(record.values()) + where_params,
        )

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> None:
        if not filters:
            raise GatewayError("delete requires a filter")
        where, params = _where(filters)
        await self._run(f"DELETE FROM {_ident(table)}{where};", params)

    async def _run(self, sql: str, params: Sequence[Any]) -> int:
        try:
            return await self._db.execute(sql, params)
        except aiosqlite.Error as e:
            logger.warning("SQLite error: %s", e)
            raise GatewayError(str(e)) from e

    async def _run_fetch(self, sql: str, params: Sequence[Any]) -> list[aiosqlite.Row]:
        try:
            return await self._db.fetchall(sql, params)
        except aiosqlite.Error as e:
            logger.warning("SQLite error: %s", e)
            raise GatewayError(str(e)) from e
