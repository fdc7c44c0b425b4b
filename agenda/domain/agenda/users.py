from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Sequence

from agenda.constants import GENERIC_ERROR_MESSAGE, TASKS_TABLE, USERS_TABLE
from agenda.domain.agenda.labels import RoleCatalog
from agenda.domain.agenda.models import User, UserInput
from agenda.domain.agenda.ports import TableGateway
from agenda.domain.agenda.rules import validate_name
from agenda.domain.common.errors import GatewayError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        name=row["name"],
        role=row["role"],
        created_at=row.get("created_at") or "",
        updated_at=row.get("updated_at") or "",
    )


class UserService:
    """
    User CRUD over the table gateway.

    Deleting a user unassigns its tasks first, so a task never disappears
    together with its assignee.
    """

    def __init__(self, gateway: TableGateway, roles: RoleCatalog) -> None:
        self._gw = gateway
        self._roles = roles

    @property
    def roles(self) -> RoleCatalog:
        return self._roles

    def user_record(self, data: UserInput) -> Dict[str, Any]:
        name = validate_name(data.name)
        if data.role not in self._roles:
            raise ValidationError(f"Cargo inválido: {data.role!r}.")
        return {"name": name, "role": data.role}

    async def create_user(self, data: UserInput) -> User:
        record = self.user_record(data)
        try:
            row = await self._gw.insert(USERS_TABLE, record)
        except GatewayError as e:
            raise self._persistence_error("create_user", e) from e
        logger.info("User created: id=%s role=%s", row.get("id"), record["role"])
        return row_to_user(row)

    async def update_user(self, user_id: str, data: UserInput) -> None:
        record = self.user_record(data)
        try:
            await self._gw.update(USERS_TABLE, record, filters={"id": user_id})
        except GatewayError as e:
            raise self._persistence_error("update_user", e) from e
        logger.info("User updated: id=%s", user_id)

    async def delete_user(self, user_id: str) -> None:
        try:
            await self._gw.update(
                TASKS_TABLE,
                {"assigned_user_id": None},
                filters={"assigned_user_id": user_id},
            )
            await self._gw.delete(USERS_TABLE, filters={"id": user_id})
        except GatewayError as e:
            raise self._persistence_error("delete_user", e) from e
        logger.info("User deleted, tasks unassigned: id=%s", user_id)

    async def list_users(self) -> Sequence[User]:
        try:
            rows = await self._gw.select(USERS_TABLE, order_by="name")
        except GatewayError as e:
            raise self._persistence_error("list_users", e) from e
        return [row_to_user(r) for r in rows]

    def _persistence_error(self, op: str, e: GatewayError) -> PersistenceError:
        logger.warning("Gateway failure in %s: %s", op, e.message)
        return PersistenceError(e.message or GENERIC_ERROR_MESSAGE)
