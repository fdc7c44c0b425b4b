from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Sequence

from agenda.constants import DEFAULT_PRIORITY, GENERIC_ERROR_MESSAGE, TASKS_TABLE, USERS_TABLE
from agenda.domain.agenda.models import Task, TaskInput
from agenda.domain.agenda.ports import TableGateway
from agenda.domain.agenda.rules import (
    normalize_assignee,
    normalize_optional_text,
    validate_priority,
    validate_title,
)
from agenda.domain.common.errors import GatewayError, PersistenceError
from agenda.domain.common.time import to_iso_date

logger = logging.getLogger(__name__)


def task_record(data: TaskInput) -> Dict[str, Any]:
    """
    Validate and normalize form input into the stored shape.

    Raises ValidationError before anything touches the gateway.
    """
    return {
        "title": validate_title(data.title),
        "description": normalize_optional_text(data.description),
        "assigned_user_id": normalize_assignee(data.assigned_user_id),
        "scheduled_date": to_iso_date(data.scheduled_date) if data.scheduled_date else None,
        "priority": validate_priority(data.priority or DEFAULT_PRIORITY),
    }


def row_to_task(row: Mapping[str, Any], assigned_user_name: str | None = None) -> Task:
    return Task(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description"),
        assigned_user_id=row.get("assigned_user_id"),
        scheduled_date=row.get("scheduled_date"),
        priority=row.get("priority") or DEFAULT_PRIORITY,
        completed=bool(row.get("completed")),
        created_at=row.get("created_at") or "",
        updated_at=row.get("updated_at") or "",
        assigned_user_name=assigned_user_name,
    )


class TaskService:
    """
    Task CRUD over the table gateway. No aiogram. No sqlite.
    """

    def __init__(self, gateway: TableGateway) -> None:
        self._gw = gateway

    async def create_task(self, data: TaskInput) -> Task:
        record = task_record(data)
        try:
            row = await self._gw.insert(TASKS_TABLE, record)
        except GatewayError as e:
            raise self._persistence_error("create_task", e) from e
        logger.info("Task created: id=%s", row.get("id"))
        return row_to_task(row)

    async def update_task(self, task_id: str, data: TaskInput) -> None:
        record = task_record(data)
        try:
            await self._gw.update(TASKS_TABLE, record, filters={"id": task_id})
        except GatewayError as e:
            raise self._persistence_error("update_task", e) from e
        logger.info("Task updated: id=%s", task_id)

    async def toggle_completion(self, task_id: str, current_value: bool) -> bool:
        completed = not current_value
        try:
            await self._gw.update(TASKS_TABLE, {"completed": completed}, filters={"id": task_id})
        except GatewayError as e:
            raise self._persistence_error("toggle_completion", e) from e
        logger.info("Task completion toggled: id=%s completed=%s", task_id, completed)
        return completed

    async def delete_task(self, task_id: str) -> None:
        try:
            await self._gw.delete(TASKS_TABLE, filters={"id": task_id})
        except GatewayError as e:
            raise self._persistence_error("delete_task", e) from e
        logger.info("Task deleted: id=%s", task_id)

    async def list_tasks(self) -> Sequence[Task]:
        """All tasks, newest first, with the assignee's name joined in."""
        try:
            rows = await self._gw.select(TASKS_TABLE, order_by="created_at", descending=True)
            user_rows = await self._gw.select(USERS_TABLE)
        except GatewayError as e:
            raise self._persistence_error("list_tasks", e) from e

        names = {str(u["id"]): u["name"] for u in user_rows}
        return [row_to_task(r, names.get(r.get("assigned_user_id") or "")) for r in rows]

    def _persistence_error(self, op: str, e: GatewayError) -> PersistenceError:
        logger.warning("Gateway failure in %s: %s", op, e.message)
        return PersistenceError(e.message or GENERIC_ERROR_MESSAGE)
