"""Task RPC handlers.

All handlers are registered on the module-level ``registry`` which the
server imports and freezes.  Each one is a thin pass-through to
``TaskBmc``.
"""

from __future__ import annotations

import logging

from gateway.ctx import Ctx
from gateway.dispatcher import Registry
from gateway.model import ModelManager, Task, TaskBmc, TaskForCreate, TaskForUpdate
from gateway.params import DataResult, ParamsForCreate, ParamsForUpdate, ParamsIded

log = logging.getLogger(__name__)

registry = Registry()

# ── Task methods ─────────────────────────────────────────────────────


@registry.handler("create_task", params=ParamsForCreate[TaskForCreate])
async def create_task(
    ctx: Ctx, mm: ModelManager, params: ParamsForCreate[TaskForCreate]
) -> DataResult[Task]:
    task_id = await TaskBmc.create(ctx, mm, params.data)
    task = await TaskBmc.get(ctx, mm, task_id)
    return DataResult[Task](data=task)


@registry.handler("list_tasks")
async def list_tasks(ctx: Ctx, mm: ModelManager) -> DataResult[list[Task]]:
    tasks = await TaskBmc.list(ctx, mm)
    return DataResult[list[Task]](data=tasks)


@registry.handler("update_task", params=ParamsForUpdate[TaskForUpdate])
async def update_task(
    ctx: Ctx, mm: ModelManager, params: ParamsForUpdate[TaskForUpdate]
) -> DataResult[Task]:
    await TaskBmc.update(ctx, mm, params.id, params.data)
    task = await TaskBmc.get(ctx, mm, params.id)
    return DataResult[Task](data=task)


@registry.handler("show_task", params=ParamsIded)
async def show_task(ctx: Ctx, mm: ModelManager, params: ParamsIded) -> DataResult[Task]:
    task = await TaskBmc.get(ctx, mm, params.id)
    return DataResult[Task](data=task)


@registry.handler("delete_task", params=ParamsIded)
async def delete_task(ctx: Ctx, mm: ModelManager, params: ParamsIded) -> DataResult[Task]:
    """Delete a task and return it as it was."""
    task = await TaskBmc.get(ctx, mm, params.id)
    await TaskBmc.delete(ctx, mm, params.id)
    return DataResult[Task](data=task)
