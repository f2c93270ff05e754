"""Personal and shared task lists for the signed-in user."""
import asyncio
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from ..shared.logging_config import configure_logging
from ..shared.utils import is_blank
from .errors import Result, ValidationFailure, attempt
from .models import PRIORITIES, Task, TaskDraft, User

logger = configure_logging(__name__)


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    pending: int = 0


class TaskBoard:
    def __init__(self, gateway, notifier, user: User):
        self.gateway = gateway
        self.notifier = notifier
        self.user = user
        self._personal: Tuple[Task, ...] = ()
        self._shared: Tuple[Task, ...] = ()
        self._alive = True

    @property
    def personal(self) -> Tuple[Task, ...]:
        return self._personal

    @property
    def shared(self) -> Tuple[Task, ...]:
        return self._shared

    def dispose(self) -> None:
        self._alive = False

    def stats(self) -> TaskStats:
        tasks = self._personal + self._shared
        done = sum(1 for t in tasks if t.completed)
        return TaskStats(total=len(tasks), completed=done, pending=len(tasks) - done)

    async def load_all(self) -> Dict[str, Result]:
        personal, shared = await asyncio.gather(self._load_personal(), self._load_shared())
        return {"personal": personal, "shared": shared}

    async def _load_personal(self) -> Result:
        result = await attempt(self.gateway.get_tasks, self.user.id)
        if not self._alive:
            return result
        if not result.ok:
            self.notifier.error(f"Failed to load tasks: {result.error}")
            return result
        self._personal = tuple(result.value)
        return result

    async def _load_shared(self) -> Result:
        result = await attempt(self.gateway.get_shared_tasks, self.user.id)
        if not self._alive:
            return result
        if not result.ok:
            self.notifier.error(f"Failed to load shared tasks: {result.error}")
            return result
        self._shared = tuple(result.value)
        return result

    async def create(self, draft: TaskDraft) -> Result:
        if is_blank(draft.name):
            return Result.failure(ValidationFailure("Task name is required"))
        if draft.priority not in PRIORITIES:
            return Result.failure(ValidationFailure(f"Priority must be one of {', '.join(PRIORITIES)}"))
        result = await attempt(self.gateway.create_task, self.user.id, draft)
        if not self._alive:
            return result
        if not result.ok:
            self.notifier.error(f"Could not create task: {result.error}")
            return result
        self._personal = self._personal + (result.value,)
        logger.info("TASK_CREATED user_id=%s task_id=%s", self.user.id, result.value.id)
        self.notifier.success(f"Task '{result.value.name}' created")
        return result

    async def toggle(self, task_id: int) -> Result:
        task = next((t for t in self._personal if t.id == task_id), None)
        if task is None:
            return Result.success(False)
        completed = not task.completed
        result = await attempt(self.gateway.update_task, self.user.id, task_id, completed)
        if not self._alive:
            return result
        if not result.ok:
            self.notifier.error(f"Could not update task: {result.error}")
            return result
        self._personal = tuple(replace(t, completed=completed) if t.id == task_id else t for t in self._personal)
        return Result.success(True)

    async def delete(self, task_id: int, confirm: Optional[Callable[[Task], bool]] = None) -> Result:
        task = next((t for t in self._personal if t.id == task_id), None)
        if task is None:
            return Result.success(False)
        if confirm is not None and not confirm(task):
            return Result.success(False)
        result = await attempt(self.gateway.delete_task, self.user.id, task_id)
        if not self._alive:
            return result
        if not result.ok:
            self.notifier.error(f"Could not delete task: {result.error}")
            return result
        self._personal = tuple(t for t in self._personal if t.id != task_id)
        logger.info("TASK_DELETED user_id=%s task_id=%s", self.user.id, task_id)
        self.notifier.success(f"Task '{task.name}' deleted")
        return Result.success(True)
