"""
FSM storage for dialog forms. Dates go through to_iso_date / parse_local_date only.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from aiogram.fsm.context import FSMContext

from agenda.constants import DEFAULT_PRIORITY, DEFAULT_ROLE
from agenda.domain.agenda.models import TaskForm, UserForm
from agenda.domain.common.time import parse_local_date, to_iso_date

TASK_FORM_KEY = "task_form"
EDIT_TASK_ID_KEY = "edit_task_id"
RETURN_TO_REVIEW_KEY = "return_to_review"
BUSY_KEY = "busy"
USER_FORM_KEY = "user_form"
EDIT_USER_ID_KEY = "edit_user_id"


def task_form_to_data(form: TaskForm) -> Dict[str, Any]:
    return {
        "title": form.title,
        "description": form.description,
        "assigned_user_id": form.assigned_user_id,
        "scheduled_date": to_iso_date(form.scheduled_date) if form.scheduled_date else None,
        "priority": form.priority,
    }


def task_form_from_data(data: Optional[Dict[str, Any]]) -> TaskForm:
    data = data or {}
    raw_date = data.get("scheduled_date")
    return TaskForm(
        title=data.get("title") or "",
        description=data.get("description") or "",
        assigned_user_id=data.get("assigned_user_id") or "",
        scheduled_date=parse_local_date(raw_date) if raw_date else None,
        priority=data.get("priority") or DEFAULT_PRIORITY,
    )


def user_form_to_data(form: UserForm) -> Dict[str, Any]:
    return {"name": form.name, "role": form.role}


def user_form_from_data(data: Optional[Dict[str, Any]]) -> UserForm:
    data = data or {}
    return UserForm(name=data.get("name") or "", role=data.get("role") or DEFAULT_ROLE)


async def claim_busy(state: FSMContext) -> Tuple[bool, Dict[str, Any]]:
    """
    Set BUSY_KEY unless it is already set. Returns (claimed, data before the claim).

    Call it before anything that talks to Telegram: the read and the write
    must not have a suspending await between them, or a double tap gets in.
    """
    data = await state.get_data()
    if data.get(BUSY_KEY):
        return False, data
    await state.update_data({BUSY_KEY: True})
    return True, data
