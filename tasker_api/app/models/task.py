from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.db.types import UTCDateTime
from app.model.enums import TaskPriority, TaskStatus


class Task(Base):
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(256), nullable=False)
    description = Column(String(1024), nullable=True)
    status = Column(
        Enum(TaskStatus, name="task_status"), nullable=False, default=TaskStatus.PENDING
    )
    priority = Column(
        Enum(TaskPriority, name="task_priority"),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )

    assigned_to_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    assignee = relationship(
        "User", back_populates="assigned_tasks", foreign_keys=[assigned_to_id]
    )
    created_by = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)

    completed_at = Column(UTCDateTime, nullable=True)
    due_date = Column(UTCDateTime, nullable=True)

    # admin fields (does not use inheritance)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
