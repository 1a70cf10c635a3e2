""" Defines the task pydantic models. """

from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from .enums import TaskPriority, TaskStatus


def to_naive_utc(value: datetime) -> datetime:
    """Task dates are kept as naive UTC, an aware value is converted first."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class TaskBase(BaseModel):
    title: str = Field(min_length=1, max_length=256)
    description: Optional[str] = Field(default=None, max_length=1024)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[UTCDateTime] = None


class TaskCreate(TaskBase):
    """For creation of a task, the assignee defaults to the creator."""

    assigned_to_id: Optional[int] = None


class TaskUpdate(BaseModel):
    """Every field is optional, only the fields sent are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    description: Optional[str] = Field(default=None, max_length=1024)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to_id: Optional[int] = None
    due_date: Optional[UTCDateTime] = None
    completed_at: Optional[UTCDateTime] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskPriorityUpdate(BaseModel):
    priority: TaskPriority


class TaskDueDateUpdate(BaseModel):
    due_date: UTCDateTime


class TaskAssign(BaseModel):
    assignee_id: int


# Properties stored in DB
class TaskDB(TaskBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assigned_to_id: int
    created_by: int
    completed_at: Optional[UTCDateTime] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


# Properties to return to client
class Task(TaskDB):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Example do laundry",
                "description": "Wash dry and fold them",
                "status": "IN_PROGRESS",
                "priority": "MEDIUM",
                "assigned_to_id": 2,
                "created_by": 1,
                "completed_at": None,
                "due_date": "2022-02-08T18:00:00",
                "created_at": "2022-02-06T09:18:29.345605",
                "updated_at": "2022-02-06T09:18:29.345605",
            }
        },
    )
