import os

# cheap hashes and a known backend, set before the app reads its settings
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_TYPE"] = "in-memory"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from asgi_lifespan import LifespanManager  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from typing import Dict, Optional  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.token import TokenAuthority  # noqa: E402
from app.data_layer import database as db  # noqa: E402
from app.data_layer.data_obj_mgr import DataObjectManager  # noqa: E402
from app.main import app, get_database  # noqa: E402
from app.model.auth import Actor  # noqa: E402
from app.model.enums import Role  # noqa: E402
from app.model.task import TaskCreate  # noqa: E402
from app.model.user import UserCreate, UserInDB  # noqa: E402
from app.services.user_service import UserService  # noqa: E402


# region helpers

PASSWORD = "secret123"


def get_url(sub_directory_struct) -> str:
    api_ver = 1
    return f"/api/v{api_ver}/{sub_directory_struct}"


def new_test_task(
    i: Optional[int] = None, assigned_to_id: Optional[int] = None, **kwargs
) -> TaskCreate:
    return TaskCreate(
        title="Init Test Task" if i is None else f"Init Test Task {i}",
        description="Initial Test Task",
        assigned_to_id=assigned_to_id,
        **kwargs,
    )


def actor_of(user: UserInDB) -> Actor:
    return Actor(id=user.id, email=user.email, role=user.role)


def token_authority(database: DataObjectManager) -> TokenAuthority:
    return TokenAuthority.from_settings(settings, find_user_by_id=database.users.get)


def auth_headers(database: DataObjectManager, user: UserInDB) -> Dict[str, str]:
    token = token_authority(database).issue_access_token(user)
    return {"Authorization": f"Bearer {token}"}


# endregion helpers


@pytest_asyncio.fixture
async def test_database():
    # a fresh in-memory backend per test
    database = db.database_factory("in-memory")
    await database.connect()
    yield database
    await database.drop_database()
    await database.close()


@pytest_asyncio.fixture
async def users(test_database: DataObjectManager) -> SimpleNamespace:
    """One account per role plus a second USER."""
    service = UserService(test_database)

    async def create(name: str, role: Role) -> UserInDB:
        return await service.create_user(
            UserCreate(
                email=f"{name}@tasker.com",
                first_name=name.capitalize(),
                password=PASSWORD,
                role=role,
            )
        )

    return SimpleNamespace(
        admin=await create("admin", Role.ADMIN),
        manager=await create("manager", Role.MANAGER),
        user=await create("user", Role.USER),
        other=await create("other", Role.USER),
    )


@pytest.fixture
def headers(test_database: DataObjectManager, users: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(
        admin=auth_headers(test_database, users.admin),
        manager=auth_headers(test_database, users.manager),
        user=auth_headers(test_database, users.user),
        other=auth_headers(test_database, users.other),
    )


@pytest_asyncio.fixture
async def test_client(test_database: DataObjectManager):
    # an async client for use in tests, talking to the per-test database
    async def get_test_database() -> DataObjectManager:
        return test_database

    app.dependency_overrides[get_database] = get_test_database
    async with LifespanManager(app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://127.0.0.1:8000"
        ) as client:
            yield client
    app.dependency_overrides.clear()
