from typing import Dict, List, Optional
from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import datetime as dt

from app.core.config import get_logger, settings
from app.core.exceptions import AuthorizationError, TaskerException
from app.core.token import TokenAuthority
from app.data_layer.database import database_factory
from app.data_layer.data_obj_mgr import DataObjectManager
from app.data_layer.dl_exception import DataLayerException
from app.db.init_db import init_db
from app.model.auth import Actor, AuthResponse, LoginRequest, RefreshRequest, TokenPair
from app.model.enums import Role, TaskPriority, TaskStatus
from app.model.info import Message, ServiceInfo
from app.model.task import (
    Task,
    TaskAssign,
    TaskCreate,
    TaskDueDateUpdate,
    TaskPriorityUpdate,
    TaskStatusUpdate,
    TaskUpdate,
)
from app.model.user import (
    PasswordChange,
    User,
    UserCreate,
    UserRegister,
    UserRoleUpdate,
    UserStatusUpdate,
    UserUpdate,
)
from app.services.auth_service import AuthService
from app.services.task_service import TaskService
from app.services.user_service import UserService
from tasker_api import __version__, __service_name__

logger = get_logger("api")
API = settings.API_V1_STR


# ------------------------------------------------------------------------------
# Globals
app = FastAPI(title=__service_name__, version=__version__)
# this is initiated in the startup and shutdown functions (must be async)
object_db: Optional[DataObjectManager] = None

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(TaskerException)
async def tasker_exception_handler(request: Request, exc: TaskerException) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    elif exc.status_code == status.HTTP_403_FORBIDDEN:
        logger.warning(f"{request.method} {request.url.path} denied: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.message}, headers=headers
    )


@app.exception_handler(DataLayerException)
async def data_layer_exception_handler(
    request: Request, exc: DataLayerException
) -> JSONResponse:
    logger.error(f"data layer error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Data layer error"})


# region dependencies

bearer_scheme = HTTPBearer(auto_error=False)


async def get_database() -> DataObjectManager:
    return object_db


def pagination_dict(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1),
) -> Dict[str, int]:
    capped_limit = min(100, limit)
    return {"skip": skip, "limit": capped_limit}


def get_token_authority(database=Depends(get_database)) -> TokenAuthority:
    return TokenAuthority.from_settings(settings, find_user_by_id=database.users.get)


def get_auth_service(
    database=Depends(get_database), tokens=Depends(get_token_authority)
) -> AuthService:
    return AuthService(database, tokens)


def get_user_service(database=Depends(get_database)) -> UserService:
    return UserService(database)


def get_task_service(database=Depends(get_database)) -> TaskService:
    return TaskService(database)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Actor:
    token = credentials.credentials if credentials is not None else None
    return await auth.authenticate(token)


def require_roles(*allowed_roles: Role):
    async def check_role(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed_roles:
            raise AuthorizationError(
                f"Requires one of roles: {', '.join(r.value for r in allowed_roles)}"
            )
        return actor

    return check_role


require_admin = require_roles(Role.ADMIN)

# endregion dependencies

# region non-data


@app.on_event("startup")
async def startup():
    global object_db
    object_db = database_factory(settings.DATABASE_TYPE)
    await object_db.connect()
    await init_db(object_db)


@app.on_event("shutdown")
async def shutdown():
    global object_db
    if object_db is not None:
        await object_db.close()
    object_db = None


@app.get(f"{API}/ping")
async def model_ping():
    return {"ping": dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")}


@app.get(f"{API}/info", response_model=ServiceInfo)
async def model_info(database=Depends(get_database)) -> ServiceInfo:
    logger.info("get info")
    return ServiceInfo(
        timestamp=dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        service=__service_name__,
        data_source=database.db_type,
        version=__version__,
    )


# endregion

# region auth


@app.post(f"{API}/auth/register", status_code=201, response_model=AuthResponse)
async def register(
    user_in: UserRegister, auth: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    logger.info("request to register user")
    return await auth.register(user_in)


@app.post(f"{API}/auth/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    return await auth.login(credentials.email, credentials.password)


@app.post(f"{API}/auth/refresh", response_model=TokenPair)
async def refresh_token(
    body: RefreshRequest, auth: AuthService = Depends(get_auth_service)
) -> TokenPair:
    return await auth.refresh(body.refresh_token)


@app.post(f"{API}/auth/logout", response_model=Message)
async def logout(
    actor: Actor = Depends(get_current_actor),
    auth: AuthService = Depends(get_auth_service),
) -> Message:
    await auth.logout(actor)
    return Message(message="Logout successful")


@app.get(f"{API}/auth/me", response_model=User)
async def me(
    actor: Actor = Depends(get_current_actor),
    users: UserService = Depends(get_user_service),
):
    return await users.get_user(actor.id)


# endregion

# region users


@app.get(f"{API}/users/profile", response_model=User)
async def get_profile(
    actor: Actor = Depends(get_current_actor),
    users: UserService = Depends(get_user_service),
):
    return await users.get_user(actor.id)


@app.put(f"{API}/users/profile", response_model=User)
async def update_profile(
    user_in: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    users: UserService = Depends(get_user_service),
):
    logger.info(f"request to update profile of user {actor.id}")
    return await users.update_user(actor.id, user_in)


@app.post(f"{API}/users/change-password", response_model=Message)
async def change_password(
    change: PasswordChange,
    actor: Actor = Depends(get_current_actor),
    users: UserService = Depends(get_user_service),
) -> Message:
    await users.change_password(actor.id, change)
    return Message(message="Password changed successfully")


@app.get(f"{API}/users", response_model=List[User])
async def list_users(
    pagination: Dict[str, int] = Depends(pagination_dict),
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.list_users(**pagination)


@app.post(f"{API}/users", status_code=201, response_model=User)
async def create_user(
    user_in: UserCreate,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    logger.info(f"request to create user with role {user_in.role.value}")
    return await users.create_user(user_in)


@app.get(f"{API}/users/{{user_id}}", response_model=User)
async def get_user(
    user_id: int,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.get_user(user_id)


@app.put(f"{API}/users/{{user_id}}", response_model=User)
async def update_user(
    user_id: int,
    user_in: UserUpdate,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.update_user(user_id, user_in)


@app.patch(f"{API}/users/{{user_id}}/role", response_model=User)
async def update_user_role(
    user_id: int,
    body: UserRoleUpdate,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.update_role(user_id, body.role)


@app.patch(f"{API}/users/{{user_id}}/status", response_model=User)
async def update_user_status(
    user_id: int,
    body: UserStatusUpdate,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    return await users.update_status(user_id, body.is_active)


@app.delete(f"{API}/users/{{user_id}}", response_model=User)
async def delete_user(
    user_id: int,
    _: Actor = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    logger.info(f"request to delete user: {user_id}")
    return await users.delete_user(user_id)


# endregion

# region tasks


@app.get(f"{API}/tasks", response_model=List[Task])
async def get_tasks(
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    pagination: Dict[str, int] = Depends(pagination_dict),
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> List[Task]:
    return await tasks.list_tasks(actor, status=status, priority=priority, **pagination)


@app.post(f"{API}/tasks", status_code=201, response_model=Task)
async def create_task(
    task_in: TaskCreate,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    logger.info(f"request to create task by user {actor.id}")
    return await tasks.create_task(actor, task_in)


@app.get(f"{API}/tasks/{{task_id}}", response_model=Task)
async def get_task(
    task_id: int,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    return await tasks.get_task(actor, task_id)


@app.put(f"{API}/tasks/{{task_id}}", response_model=Task)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    logger.info(f"request to update task: {task_id}")
    return await tasks.update_task(actor, task_id, task_in)


@app.patch(f"{API}/tasks/{{task_id}}/status", response_model=Task)
async def update_task_status(
    task_id: int,
    body: TaskStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    return await tasks.update_status(actor, task_id, body.status)


@app.patch(f"{API}/tasks/{{task_id}}/priority", response_model=Task)
async def update_task_priority(
    task_id: int,
    body: TaskPriorityUpdate,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    return await tasks.update_priority(actor, task_id, body.priority)


@app.patch(f"{API}/tasks/{{task_id}}/due-date", response_model=Task)
async def update_task_due_date(
    task_id: int,
    body: TaskDueDateUpdate,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    return await tasks.update_due_date(actor, task_id, body.due_date)


@app.patch(f"{API}/tasks/{{task_id}}/assign", response_model=Task)
async def assign_task(
    task_id: int,
    body: TaskAssign,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    logger.info(f"request to assign task {task_id} to user {body.assignee_id}")
    return await tasks.assign_task(actor, task_id, body.assignee_id)


@app.delete(f"{API}/tasks/{{task_id}}", status_code=204)
async def del_task(
    task_id: int,
    actor: Actor = Depends(get_current_actor),
    tasks: TaskService = Depends(get_task_service),
) -> None:
    logger.info(f"request to delete task: {task_id}")
    await tasks.delete_task(actor, task_id)


# endregion
