from sqlalchemy import Integer, String, Column, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship

from app.db.base_class import Base
from app.model.enums import Role


class User(Base):
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(256), unique=True, index=True, nullable=False)
    first_name = Column(String(256), nullable=False)
    last_name = Column(String(256), nullable=True)
    password_hash = Column(String(256), nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    is_active = Column(Boolean, nullable=False, default=True)
    assigned_tasks = relationship(
        "Task",
        back_populates="assignee",
        foreign_keys="Task.assigned_to_id",
        uselist=True,
    )
    # admin fields (does not use inheritance)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
