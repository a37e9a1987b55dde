"""In-memory task model.

``ModelManager`` is the shared service handle passed to every handler;
``TaskBmc`` holds the task operations.  State lives in process memory and
is guarded by an ``anyio.Lock`` — swap in a real store behind the same
calls for production.
"""

from __future__ import annotations

import logging

import anyio
from pydantic import BaseModel

from gateway.ctx import Ctx
from gateway.errors import EntityNotFoundError

log = logging.getLogger(__name__)


# ── Types ────────────────────────────────────────────────────────────
class Task(BaseModel):
    id: int
    title: str
    done: bool = False


class TaskForCreate(BaseModel):
    title: str


class TaskForUpdate(BaseModel):
    title: str | None = None
    done: bool | None = None


# ── Store ────────────────────────────────────────────────────────────
class ModelManager:
    """Shared handle to the task store.  Safe to share across requests."""

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._next_id = 1000
        self._lock = anyio.Lock()


class TaskBmc:
    ENTITY = "task"

    @staticmethod
    async def create(ctx: Ctx, mm: ModelManager, data: TaskForCreate) -> int:
        async with mm._lock:
            task_id = mm._next_id
            mm._next_id += 1
            mm._tasks[task_id] = Task(id=task_id, title=data.title)
        log.debug("user %s created task %s", ctx.user_id, task_id)
        return task_id

    @staticmethod
    async def get(ctx: Ctx, mm: ModelManager, id: int) -> Task:
        task = mm._tasks.get(id)
        if task is None:
            raise EntityNotFoundError(TaskBmc.ENTITY, id)
        return task.model_copy()

    @staticmethod
    async def list(ctx: Ctx, mm: ModelManager) -> list[Task]:
        return [t.model_copy() for _, t in sorted(mm._tasks.items())]

    @staticmethod
    async def update(ctx: Ctx, mm: ModelManager, id: int, data: TaskForUpdate) -> None:
        async with mm._lock:
            task = mm._tasks.get(id)
            if task is None:
                raise EntityNotFoundError(TaskBmc.ENTITY, id)
            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            mm._tasks[id] = task.model_copy(update=changes)

    @staticmethod
    async def delete(ctx: Ctx, mm: ModelManager, id: int) -> None:
        async with mm._lock:
            if mm._tasks.pop(id, None) is None:
                raise EntityNotFoundError(TaskBmc.ENTITY, id)
        log.debug("user %s deleted task %s", ctx.user_id, id)
