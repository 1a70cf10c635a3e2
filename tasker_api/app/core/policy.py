"""
Role based access control for tasks.

The policy is a pure function of (actor, task, operation, payload): it never
loads anything. Callers check the task exists before asking, and check any
referenced assignee exists after the policy allows the operation.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from app.core.exceptions import AuthorizationError
from app.model.auth import Actor
from app.model.enums import Role
from app.model.task import Task


class Operation(str, Enum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    UPDATE_STATUS = "update_status"
    UPDATE_PRIORITY = "update_priority"
    UPDATE_DUE_DATE = "update_due_date"
    ASSIGN = "assign"
    DELETE = "delete"


class TaskScope(str, Enum):
    """Which tasks a LIST may return."""

    ALL = "all"
    CREATED_OR_ASSIGNED = "created_or_assigned"
    ASSIGNED = "assigned"


# fields a USER may change on a task assigned to them, everything else is dropped
USER_UPDATABLE_FIELDS = frozenset({"status", "completed_at"})


class Decision(BaseModel):
    allowed: bool = True
    filtered_payload: Optional[Dict[str, Any]] = None
    scope: Optional[TaskScope] = None


def _is_creator(actor: Actor, task: Task) -> bool:
    return task.created_by == actor.id


def _is_assignee(actor: Actor, task: Task) -> bool:
    return task.assigned_to_id == actor.id


def _deny(message: str) -> None:
    raise AuthorizationError(message)


class TaskAccessPolicy:
    """Decides who may do what to which task.

    ADMIN may do everything. MANAGER may create, assign and change priority or
    due date on any task, read and change status on tasks they created or are
    assigned, and make general updates only to tasks they created. USER may read
    and change the status of tasks assigned to them; a general update from a
    USER is narrowed to ``status`` and ``completed_at``. Only ADMIN deletes.
    """

    def decide(
        self,
        actor: Actor,
        task: Optional[Task],
        operation: Operation,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Decision:
        """Returns the decision or raises AuthorizationError if denied."""
        operation = Operation(operation)
        if operation is Operation.CREATE:
            return self._create(actor, payload or {})
        if operation is Operation.LIST:
            return Decision(scope=self.list_scope(actor))
        if task is None:
            raise ValueError(f"operation {operation.value} needs a task")

        handler = getattr(self, f"_{operation.value}")
        return handler(actor, task, dict(payload) if payload is not None else None)

    def is_allowed(
        self,
        actor: Actor,
        task: Optional[Task],
        operation: Operation,
        payload: Optional[Dict[str, Any]] = None,
    ) -> bool:
        try:
            self.decide(actor, task, operation, payload)
        except AuthorizationError:
            return False
        return True

    def list_scope(self, actor: Actor) -> TaskScope:
        if actor.role is Role.ADMIN:
            return TaskScope.ALL
        if actor.role is Role.MANAGER:
            return TaskScope.CREATED_OR_ASSIGNED
        return TaskScope.ASSIGNED

    # region per operation

    def _create(self, actor: Actor, payload: Dict[str, Any]) -> Decision:
        if actor.role not in (Role.ADMIN, Role.MANAGER):
            _deny("Only ADMIN and MANAGER can create tasks")
        data = dict(payload)
        data["created_by"] = actor.id
        if data.get("assigned_to_id") is None:
            data["assigned_to_id"] = actor.id
        return Decision(filtered_payload=data)

    def _read(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role is Role.ADMIN:
            return Decision()
        if actor.role is Role.MANAGER and (
            _is_creator(actor, task) or _is_assignee(actor, task)
        ):
            return Decision()
        if actor.role is Role.USER and _is_assignee(actor, task):
            return Decision()
        _deny("You do not have permission to access this task")

    def _update(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role is Role.ADMIN:
            return Decision(filtered_payload=payload)
        if actor.role is Role.MANAGER and _is_creator(actor, task):
            return Decision(filtered_payload=payload)
        if actor.role is Role.USER and _is_assignee(actor, task):
            narrowed = {
                field: value
                for field, value in (payload or {}).items()
                if field in USER_UPDATABLE_FIELDS
            }
            return Decision(filtered_payload=narrowed)
        _deny("You do not have permission to update this task")

    def _update_status(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role is Role.ADMIN:
            return Decision(filtered_payload=payload)
        if actor.role is Role.MANAGER and (
            _is_creator(actor, task) or _is_assignee(actor, task)
        ):
            return Decision(filtered_payload=payload)
        if actor.role is Role.USER and _is_assignee(actor, task):
            return Decision(filtered_payload=payload)
        _deny("You do not have permission to update this task status")

    def _update_priority(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role not in (Role.ADMIN, Role.MANAGER):
            _deny("Only ADMIN and MANAGER can update task priority")
        return Decision(filtered_payload=payload)

    def _update_due_date(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role not in (Role.ADMIN, Role.MANAGER):
            _deny("Only ADMIN and MANAGER can update due date")
        return Decision(filtered_payload=payload)

    def _assign(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role not in (Role.ADMIN, Role.MANAGER):
            _deny("Only ADMIN and MANAGER can assign tasks")
        return Decision(filtered_payload=payload)

    def _delete(self, actor: Actor, task: Task, payload) -> Decision:
        if actor.role is not Role.ADMIN:
            _deny("Only ADMIN can delete tasks")
        return Decision()

    # endregion
