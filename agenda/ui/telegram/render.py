"""
Text rendering for the agenda screens. Keyboards live in keyboards/.
"""
from __future__ import annotations

from datetime import date
from html import escape
from typing import Iterable, Optional, Sequence

from agenda.constants import (
    WEIGHT_DESTRUCTIVE,
    WEIGHT_MUTED,
    WEIGHT_PRIMARY,
    WEIGHT_SECONDARY,
)
from agenda.domain.agenda.index import AgendaIndex
from agenda.domain.agenda.labels import RoleCatalog, priority_label, priority_weight
from agenda.domain.agenda.models import Notification, Task, TaskForm, User
from agenda.domain.agenda.rules import normalize_assignee
from agenda.ui.telegram.texts import agenda as texts

WEIGHT_BADGE = {
    WEIGHT_DESTRUCTIVE: "🔴",
    WEIGHT_PRIMARY: "🟣",
    WEIGHT_SECONDARY: "🔵",
    WEIGHT_MUTED: "⚪",
}


def format_day(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def badge(weight: str, label: str) -> str:
    return f"{WEIGHT_BADGE.get(weight, WEIGHT_BADGE[WEIGHT_MUTED])} {escape(label)}"


def render_index_text(index: AgendaIndex) -> str:
    stats = index.stats()
    lines = [
        f"<b>{texts.APP_TITLE}</b>",
        texts.APP_SUBTITLE,
        "",
        f"{texts.STAT_TOTAL}: <b>{stats.total}</b>",
        f"{texts.STAT_COMPLETED}: <b>{stats.completed}</b>",
        f"{texts.STAT_UNSCHEDULED}: <b>{stats.unscheduled}</b>",
        "",
        texts.LEGEND,
    ]
    return "\n".join(lines)


def render_task_line(task: Task) -> str:
    mark = "✅" if task.completed else "○"
    title = escape(task.title)
    if task.completed:
        title = f"<s>{title}</s>"
    line = f"{mark} {title}  {badge(priority_weight(task.priority), priority_label(task.priority))}"
    if task.description:
        line += f"\n    {escape(task.description)}"
    if task.assigned_user_name:
        line += f"\n    👤 {escape(task.assigned_user_name)}"
    return line


def render_task_list_text(title: str, tasks: Iterable[Task]) -> str:
    tasks = list(tasks)
    lines = [f"<b>{escape(title)}</b>"]
    if not tasks:
        lines.append(texts.NO_TASKS)
    else:
        lines.extend(render_task_line(t) for t in tasks)
    return "\n".join(lines)


def render_day_title(day: date) -> str:
    return texts.TASKS_FOR_DATE.format(day=format_day(day))


def render_review_text(form: TaskForm, users: Sequence[User], roles: RoleCatalog, editing: bool) -> str:
    assignee_id = normalize_assignee(form.assigned_user_id)
    assignee = texts.NO_ASSIGNEE
    if assignee_id:
        user = next((u for u in users if u.id == assignee_id), None)
        assignee = f"{user.name} ({roles.label(user.role)})" if user else assignee_id

    lines = [
        f"<b>{texts.EDIT_TASK_TITLE if editing else texts.NEW_TASK_TITLE}</b>",
        "",
        f"{texts.FIELD_TITLE}: {escape(form.title) or '-'}",
        f"{texts.FIELD_DESCRIPTION}: {escape(form.description) or '-'}",
        f"{texts.FIELD_ASSIGNEE}: {escape(assignee)}",
        f"{texts.FIELD_DATE}: {format_day(form.scheduled_date) if form.scheduled_date else texts.REMOVE_DATE}",
        f"{texts.FIELD_PRIORITY}: {badge(priority_weight(form.priority), priority_label(form.priority))}",
    ]
    return "\n".join(lines)


def render_users_text(users: Sequence[User], roles: RoleCatalog) -> str:
    lines = [f"<b>{texts.USERS_TITLE}</b>"]
    if not users:
        lines.append(texts.NO_USERS)
    for u in users:
        lines.append(f"{escape(u.name)}  {badge(roles.weight(u.role), roles.label(u.role))}")
    return "\n".join(lines)


def render_user_edit_prompt(user: User) -> str:
    return f"<b>{escape(user.name)}</b>\n{texts.ASK_USER_NAME}"


def render_notification(n: Notification) -> str:
    icon = "✅" if n.kind == "success" else "⚠️"
    text = f"{icon} <b>{escape(n.title)}</b>"
    if n.message:
        text += f"\n{escape(n.message)}"
    return text


def render_confirm_delete(entity: str, label: Optional[str]) -> str:
    if entity == "task":
        return texts.CONFIRM_DELETE_TASK.format(title=escape(label or ""))
    return texts.CONFIRM_DELETE_USER.format(name=escape(label or ""))
