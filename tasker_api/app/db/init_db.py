from app.core.config import get_logger, settings
from app.core.security import hash_password_async
from app.data_layer.data_obj_mgr import DataObjectManager
from app.model.enums import Role

logger = get_logger(__name__)


async def init_db(database: DataObjectManager) -> None:
    # Tables and indexes are created by database.connect(), this only seeds data
    if settings.FIRST_SUPERUSER:
        email = settings.FIRST_SUPERUSER.lower()
        user = await database.users.get_by_email(email)
        if not user:
            password_hash = await hash_password_async(settings.FIRST_SUPERUSER_PASSWORD)
            user = await database.users.add(
                obj_in={
                    "email": email,
                    "first_name": "Admin",
                    "last_name": "User",
                    "password_hash": password_hash,
                    "role": Role.ADMIN,
                    "is_active": True,
                }
            )
            logger.info(f"Create initial admin id={user.id}")
        else:
            logger.warning(
                "Skipping creating admin. User with email "
                f"{email} already exists. "
            )
    else:
        logger.warning(
            "Skipping creating admin.  FIRST_SUPERUSER needs to be "
            "provided as an env variable. "
            "e.g.  FIRST_SUPERUSER=admin@tasker.com"
        )
