from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import List, Optional

from agenda.domain.agenda.models import (
    AgendaStats,
    DialogState,
    Notification,
    PendingDelete,
    Task,
    TaskForm,
    User,
    UserForm,
)
from agenda.domain.agenda.tasks import TaskService
from agenda.domain.agenda.users import UserService
from agenda.domain.agenda.views import (
    agenda_stats,
    month_markers,
    tasks_on_date,
    unscheduled_tasks,
)
from agenda.domain.common.errors import DomainError, ValidationError

logger = logging.getLogger(__name__)

PHASE_LOADING = "loading"
PHASE_READY = "ready"


def task_form_from(task: Optional[Task]) -> TaskForm:
    """Fresh defaults for None, otherwise the task's fields (date read as a local day)."""
    if task is None:
        return TaskForm()
    return TaskForm(
        title=task.title,
        description=task.description or "",
        assigned_user_id=task.assigned_user_id or "",
        scheduled_date=task.local_date,
        priority=task.priority,
    )


def user_form_from(user: Optional[User]) -> UserForm:
    if user is None:
        return UserForm()
    return UserForm(name=user.name, role=user.role)


class AgendaIndex:
    """
    Owns the agenda screen state: loaded collections, selected day, the task
    dialog, user management and pending deletions.

    Collections are only replaced by a full refetch after a successful
    mutation. Failures become notifications and leave the state retriable.
    """

    def __init__(self, tasks: TaskService, users: UserService, today: date) -> None:
        self._task_svc = tasks
        self._user_svc = users

        self.phase = PHASE_LOADING
        self.tasks: List[Task] = []
        self.users: List[User] = []
        self.today = today
        self.selected_date: Optional[date] = today

        self.dialog = DialogState()
        self.busy = False

        self.user_management_open = False
        self.user_form: Optional[UserForm] = None
        self.editing_user: Optional[User] = None

        self.pending_delete: Optional[PendingDelete] = None
        self._notifications: List[Notification] = []

    # --- loading ---

    async def mount(self) -> None:
        tasks_res, users_res = await asyncio.gather(
            self._task_svc.list_tasks(),
            self._user_svc.list_users(),
            return_exceptions=True,
        )

        if isinstance(tasks_res, DomainError):
            self.tasks = []
            self._error("Erro ao carregar tarefas", tasks_res)
        elif isinstance(tasks_res, BaseException):
            raise tasks_res
        else:
            self.tasks = list(tasks_res)

        if isinstance(users_res, DomainError):
            self.users = []
            self._error("Erro ao carregar usuários", users_res)
        elif isinstance(users_res, BaseException):
            raise users_res
        else:
            self.users = list(users_res)

        self.phase = PHASE_READY

    async def reload_tasks(self) -> bool:
        try:
            self.tasks = list(await self._task_svc.list_tasks())
        except DomainError as e:
            self._error("Erro ao carregar tarefas", e)
            return False
        return True

    async def reload_users(self) -> bool:
        try:
            self.users = list(await self._user_svc.list_users())
        except DomainError as e:
            self._error("Erro ao carregar usuários", e)
            return False
        return True

    # --- derived views ---

    def select_date(self, day: Optional[date]) -> None:
        self.selected_date = day

    def tasks_for_selected_date(self) -> List[Task]:
        if self.selected_date is None:
            return []
        return tasks_on_date(self.tasks, self.selected_date)

    def unscheduled(self) -> List[Task]:
        return unscheduled_tasks(self.tasks)

    def stats(self) -> AgendaStats:
        return agenda_stats(self.tasks)

    def markers(self, year: int, month: int) -> dict[int, str]:
        return month_markers(self.tasks, year, month)

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    # --- task dialog ---

    def open_task_dialog(self, task: Optional[Task] = None) -> TaskForm:
        # reset on every open so an earlier edit never leaks into "add"
        self.dialog = DialogState(open=True, editing=task, form=task_form_from(task))
        return self.dialog.form

    def cancel_task_dialog(self) -> None:
        self.dialog = DialogState()

    async def submit_task_dialog(self, form: Optional[TaskForm] = None) -> bool:
        if not self.dialog.open or self.busy:
            return False
        if form is not None:
            self.dialog.form = form

        editing = self.dialog.editing
        self.busy = True
        try:
            if editing is not None:
                await self._task_svc.update_task(editing.id, self.dialog.form.to_input())
            else:
                await self._task_svc.create_task(self.dialog.form.to_input())
        except ValidationError as e:
            self._error("Erro de validação", e)
            return False
        except DomainError as e:
            self._error("Erro ao atualizar tarefa" if editing else "Erro ao criar tarefa", e)
            return False
        finally:
            self.busy = False

        self.dialog = DialogState()
        await self.reload_tasks()
        if editing is not None:
            self._success("Tarefa atualizada", "A tarefa foi atualizada com sucesso!")
        else:
            self._success("Tarefa criada", "A tarefa foi adicionada com sucesso!")
        return True

    async def toggle_task(self, task: Task) -> bool:
        try:
            await self._task_svc.toggle_completion(task.id, task.completed)
        except DomainError as e:
            self._error("Erro ao atualizar tarefa", e)
            return False
        await self.reload_tasks()
        return True

    def request_task_delete(self, task: Task) -> PendingDelete:
        self.pending_delete = PendingDelete(entity="task", entity_id=task.id, label=task.title)
        return self.pending_delete

    # --- user management ---

    def open_user_management(self) -> None:
        self.user_management_open = True
        self.user_form = None
        self.editing_user = None

    def close_user_management(self) -> None:
        self.user_management_open = False
        self.user_form = None
        self.editing_user = None

    def start_user_form(self, user: Optional[User] = None) -> UserForm:
        self.user_management_open = True
        self.editing_user = user
        self.user_form = user_form_from(user)
        return self.user_form

    def cancel_user_form(self) -> None:
        self.user_form = None
        self.editing_user = None

    async def submit_user_form(self, form: Optional[UserForm] = None) -> bool:
        if self.busy:
            return False
        if form is not None:
            self.user_form = form
        if self.user_form is None:
            return False

        editing = self.editing_user
        self.busy = True
        try:
            if editing is not None:
                await self._user_svc.update_user(editing.id, self.user_form.to_input())
            else:
                await self._user_svc.create_user(self.user_form.to_input())
        except ValidationError as e:
            self._error("Erro de validação", e)
            return False
        except DomainError as e:
            self._error("Erro ao salvar usuário", e)
            return False
        finally:
            self.busy = False

        self.cancel_user_form()
        await self.reload_users()
        if editing is not None:
            # joined assignee names change with the user
            await self.reload_tasks()
            self._success("Usuário atualizado", "As informações foram atualizadas com sucesso!")
        else:
            self._success("Usuário criado", "O usuário foi adicionado com sucesso!")
        return True

    def request_user_delete(self, user: User) -> PendingDelete:
        self.pending_delete = PendingDelete(entity="user", entity_id=user.id, label=user.name)
        return self.pending_delete

    # --- deletion (both entities need confirmation) ---

    def cancel_pending_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        pending = self.pending_delete
        if pending is None or self.busy:
            return False
        self.pending_delete = None

        self.busy = True
        try:
            if pending.entity == "task":
                await self._task_svc.delete_task(pending.entity_id)
            else:
                await self._user_svc.delete_user(pending.entity_id)
        except DomainError as e:
            self._error(
                "Erro ao remover tarefa" if pending.entity == "task" else "Erro ao remover usuário",
                e,
            )
            return False
        finally:
            self.busy = False

        if pending.entity == "task":
            await self.reload_tasks()
            self._success("Tarefa removida", "A tarefa foi excluída com sucesso!")
        else:
            await self.reload_users()
            await self.reload_tasks()
            self._success("Usuário removido", "O usuário foi excluído com sucesso!")
        return True

    # --- notifications ---

    def drain_notifications(self) -> List[Notification]:
        out, self._notifications = self._notifications, []
        return out

    def _success(self, title: str, message: str) -> None:
        self._notifications.append(Notification(kind="success", title=title, message=message))

    def _error(self, title: str, e: Exception) -> None:
        logger.info("%s: %s", title, e)
        self._notifications.append(Notification(kind="error", title=title, message=str(e)))
