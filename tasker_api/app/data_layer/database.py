from typing import List

from app.core.config import get_logger, settings
from app.crud.crud_task import CRUDTaskInMem, CRUDTaskMongo, CRUDTaskSQL
from app.crud.crud_user import CRUDUserInMem, CRUDUserMongo, CRUDUserSQL
from app.model.task import Task
from app.model.user import UserInDB
from .data_obj_mgr import DataObjectManager
from .dl_exception import DataLayerException
from .id_generator import IdGeneratorInmem, IdGeneratorMongo
from .mongo_connection import MongoConnection, MongoCollection

logger = get_logger("data_layer")


def get_database_types() -> List[str]:
    return [
        "in-memory",
        "sqlalchemy",
        "mongo",
    ]


def _in_memory_database(**kwargs) -> DataObjectManager:
    id_gen = IdGeneratorInmem()
    users = CRUDUserInMem(UserInDB, id_gen, "user", unique_keys=("email",))
    tasks = CRUDTaskInMem(Task, id_gen, "task")

    async def drop() -> None:
        await tasks.delete_all()
        await users.delete_all()
        await id_gen.reset()

    return DataObjectManager("in-memory", users, tasks, on_drop=drop)


def _sqlalchemy_database(**kwargs) -> DataObjectManager:
    # imported here so the ORM models are only registered when needed
    from app.db.base import Base, Task as TaskORM, User as UserORM
    from app.db.session import create_engine, create_session_factory

    database_uri = kwargs.get("database_uri", settings.SQLALCHEMY_DATABASE_URI)
    engine = create_engine(database_uri)
    session_factory = create_session_factory(engine)
    users = CRUDUserSQL(UserInDB, UserORM, session_factory)
    tasks = CRUDTaskSQL(Task, TaskORM, session_factory)

    async def connect() -> None:
        # no migrations: create whatever tables are missing
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async def close() -> None:
        await engine.dispose()

    return DataObjectManager(
        "sqlalchemy", users, tasks, on_connect=connect, on_drop=drop, on_close=close
    )


def _mongo_database(**kwargs) -> DataObjectManager:
    db_name = kwargs.get("db_name", settings.MONGO_DB_NAME)
    mongo_conn = MongoConnection(kwargs.get("mongo_url", settings.MONGO_URL))
    user_coll = MongoCollection(mongo_conn, db_name, "users")
    task_coll = MongoCollection(mongo_conn, db_name, "tasks")
    id_gen = IdGeneratorMongo(MongoCollection(mongo_conn, db_name, "ids"))
    users = CRUDUserMongo(UserInDB, user_coll, id_gen, "user")
    tasks = CRUDTaskMongo(Task, task_coll, id_gen, "task")

    async def connect() -> None:
        await user_coll.ensure_index("email", unique=True)
        await task_coll.ensure_index("assigned_to_id")
        await task_coll.ensure_index("created_by")

    async def drop() -> None:
        await mongo_conn.drop_database(db_name)

    async def close() -> None:
        mongo_conn.close()

    return DataObjectManager(
        "mongo", users, tasks, on_connect=connect, on_drop=drop, on_close=close
    )


_FACTORY = {
    "in-memory": _in_memory_database,
    "sqlalchemy": _sqlalchemy_database,
    "mongo": _mongo_database,
}


def database_factory(db_type: str, **kwargs) -> DataObjectManager:
    logger.info(f"DB-factory type={db_type}")
    try:
        builder = _FACTORY[db_type]
    except KeyError:
        raise DataLayerException(f"Unknown database type {db_type}")
    return builder(**kwargs)
