"""
Task operations guarded by the TaskAccessPolicy.

Every operation on an existing task follows the same order: load the task
(NotFoundError if missing), ask the policy (AuthorizationError if denied),
check any referenced user exists (NotFoundError), then write.
"""
from typing import Any, Dict, List, Optional
import datetime as dt

from app.core.config import get_logger
from app.core.exceptions import NotFoundError
from app.core.policy import Operation, TaskAccessPolicy, TaskScope
from app.data_layer.data_obj_mgr import DataObjectManager
from app.model.auth import Actor
from app.model.enums import TaskPriority, TaskStatus
from app.model.task import Task, TaskCreate, TaskUpdate

logger = get_logger("tasks")

# an explicit null in an update clears these, for any other field it is ignored
NULLABLE_FIELDS = frozenset({"description", "due_date", "completed_at"})


class TaskService:
    def __init__(
        self, database: DataObjectManager, policy: Optional[TaskAccessPolicy] = None
    ):
        self.tasks = database.tasks
        self.users = database.users
        self.policy = policy or TaskAccessPolicy()

    async def _get_or_404(self, task_id: int) -> Task:
        task = await self.tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"Task with id {task_id} not found")
        return task

    async def _ensure_user_exists(self, user_id: int) -> None:
        if await self.users.get(user_id) is None:
            raise NotFoundError(f"User with id {user_id} not found")

    async def _apply(
        self, actor: Actor, task_id: int, operation: Operation, payload: Dict[str, Any]
    ) -> Task:
        task = await self._get_or_404(task_id)
        decision = self.policy.decide(actor, task, operation, payload)
        changes = decision.filtered_payload or {}
        if changes.get("assigned_to_id") is not None:
            await self._ensure_user_exists(changes["assigned_to_id"])
        if not changes:
            return task
        logger.info(
            f"{operation.value} task id={task_id} by user id={actor.id} fields={sorted(changes)}"
        )
        return await self.tasks.update(id=task_id, obj_update=changes)

    async def create_task(self, actor: Actor, task_in: TaskCreate) -> Task:
        decision = self.policy.decide(
            actor, None, Operation.CREATE, task_in.model_dump(exclude_unset=True)
        )
        data = decision.filtered_payload
        if data["assigned_to_id"] != actor.id:
            await self._ensure_user_exists(data["assigned_to_id"])
        task = await self.tasks.add(obj_in={**task_in.model_dump(), **data})
        logger.info(f"created task id={task.id} by user id={actor.id}")
        return task

    async def get_task(self, actor: Actor, task_id: int) -> Task:
        task = await self._get_or_404(task_id)
        self.policy.decide(actor, task, Operation.READ)
        return task

    async def list_tasks(
        self,
        actor: Actor,
        *,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Task]:
        scope = self.policy.decide(actor, None, Operation.LIST).scope
        filter = {}
        if status is not None:
            filter["status"] = status
        if priority is not None:
            filter["priority"] = priority

        if scope is TaskScope.ALL:
            return await self.tasks.filter_multi(filter, skip=skip, limit=limit)
        if scope is TaskScope.CREATED_OR_ASSIGNED:
            return await self.tasks.get_multi_by_creator_or_assignee(
                actor.id, skip=skip, limit=limit, **filter
            )
        return await self.tasks.get_multi_by_assignee(
            actor.id, skip=skip, limit=limit, **filter
        )

    async def update_task(self, actor: Actor, task_id: int, task_in: TaskUpdate) -> Task:
        payload = {
            field: value
            for field, value in task_in.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        return await self._apply(actor, task_id, Operation.UPDATE, payload)

    async def update_status(self, actor: Actor, task_id: int, status: TaskStatus) -> Task:
        return await self._apply(
            actor, task_id, Operation.UPDATE_STATUS, {"status": status}
        )

    async def update_priority(
        self, actor: Actor, task_id: int, priority: TaskPriority
    ) -> Task:
        return await self._apply(
            actor, task_id, Operation.UPDATE_PRIORITY, {"priority": priority}
        )

    async def update_due_date(
        self, actor: Actor, task_id: int, due_date: dt.datetime
    ) -> Task:
        return await self._apply(
            actor, task_id, Operation.UPDATE_DUE_DATE, {"due_date": due_date}
        )

    async def assign_task(self, actor: Actor, task_id: int, assignee_id: int) -> Task:
        return await self._apply(
            actor, task_id, Operation.ASSIGN, {"assigned_to_id": assignee_id}
        )

    async def delete_task(self, actor: Actor, task_id: int) -> None:
        task = await self._get_or_404(task_id)
        self.policy.decide(actor, task, Operation.DELETE)
        await self.tasks.delete(id=task_id)
        logger.info(f"deleted task id={task_id} by user id={actor.id}")
