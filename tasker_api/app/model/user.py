""" Defines the user pydantic models. """

from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from .enums import Role


class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=256)
    last_name: Optional[str] = Field(default=None, max_length=256)


class UserRegister(UserBase):
    """Self registration, the role is always USER."""

    password: str = Field(min_length=6)


class UserCreate(UserRegister):
    """Created by an admin, who may pick the role."""

    role: Role = Role.USER


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=256)
    last_name: Optional[str] = Field(default=None, max_length=256)


class UserRoleUpdate(BaseModel):
    role: Role


class UserStatusUpdate(BaseModel):
    is_active: bool


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class UserDB(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: Role = Role.USER
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class UserInDB(UserDB):
    password_hash: str


# Properties to return to client
class User(UserDB):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "jane@example.com",
                "first_name": "Jane",
                "last_name": "Doe",
                "role": "USER",
                "is_active": True,
                "created_at": "2022-02-06T09:18:29.345605",
                "updated_at": "2022-02-06T09:18:29.345605",
            }
        },
    )
