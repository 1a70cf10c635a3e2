from typing import List

from app.core.config import get_logger
from app.core.exceptions import BadRequestError, NotFoundError
from app.core.security import hash_password_async, verify_password_async
from app.data_layer.data_obj_mgr import DataObjectManager
from app.data_layer.dl_exception import DuplicateObjectError
from app.model.enums import Role
from app.model.user import PasswordChange, UserCreate, UserInDB, UserUpdate

logger = get_logger("users")


class UserService:
    """User administration. Users are never removed, deleting deactivates them."""

    def __init__(self, database: DataObjectManager):
        self.users = database.users

    async def _get_or_404(self, user_id: int) -> UserInDB:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    async def create_user(self, user_in: UserCreate) -> UserInDB:
        email = user_in.email.lower()
        if await self.users.get_by_email(email) is not None:
            raise BadRequestError("User with this email already exists")
        password_hash = await hash_password_async(user_in.password)
        try:
            user = await self.users.add(
                obj_in={
                    "email": email,
                    "first_name": user_in.first_name,
                    "last_name": user_in.last_name,
                    "password_hash": password_hash,
                    "role": user_in.role,
                    "is_active": True,
                }
            )
        except DuplicateObjectError as exc:
            raise BadRequestError("User with this email already exists") from exc
        logger.info(f"created user id={user.id} role={user.role.value}")
        return user

    async def get_user(self, user_id: int) -> UserInDB:
        return await self._get_or_404(user_id)

    async def list_users(self, *, skip: int = 0, limit: int = 100) -> List[UserInDB]:
        return await self.users.get_all(skip=skip, limit=limit)

    async def update_user(self, user_id: int, user_in: UserUpdate) -> UserInDB:
        await self._get_or_404(user_id)
        return await self.users.update(
            id=user_id, obj_update=user_in.model_dump(exclude_unset=True)
        )

    async def update_role(self, user_id: int, role: Role) -> UserInDB:
        await self._get_or_404(user_id)
        logger.info(f"user id={user_id} role -> {role.value}")
        return await self.users.update(id=user_id, obj_update={"role": role})

    async def update_status(self, user_id: int, is_active: bool) -> UserInDB:
        await self._get_or_404(user_id)
        logger.info(f"user id={user_id} is_active -> {is_active}")
        return await self.users.update(id=user_id, obj_update={"is_active": is_active})

    async def delete_user(self, user_id: int) -> UserInDB:
        """Soft delete: the row stays, the account can no longer log in."""
        await self._get_or_404(user_id)
        logger.info(f"deleted (deactivated) user id={user_id}")
        return await self.users.update(id=user_id, obj_update={"is_active": False})

    async def change_password(self, user_id: int, change: PasswordChange) -> None:
        user = await self._get_or_404(user_id)
        if not await verify_password_async(change.current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")
        password_hash = await hash_password_async(change.new_password)
        await self.users.update(id=user_id, obj_update={"password_hash": password_hash})
        logger.info(f"password changed for user id={user_id}")
