from typing import List
from app.crud.crud_inmem import CRUDInMemBase
from app.crud.crud_mongo import CRUDMongoBase
from app.crud.crud_sql import CRUDSQLBase
from app.model.task import Task


class TaskQueries:
    """Task lookups shared by every backend."""

    async def get_multi_by_assignee(
        self, user_id: int, *, skip: int = 0, limit: int = 100, **filter
    ) -> List[Task]:
        return await self.filter_multi(
            {**filter, "assigned_to_id": user_id}, skip=skip, limit=limit
        )

    async def get_multi_by_creator_or_assignee(
        self, user_id: int, *, skip: int = 0, limit: int = 100, **filter
    ) -> List[Task]:
        return await self.filter_multi(
            filter,
            any_of={"created_by": user_id, "assigned_to_id": user_id},
            skip=skip,
            limit=limit,
        )


class CRUDTaskInMem(TaskQueries, CRUDInMemBase[Task]):
    ...


class CRUDTaskSQL(TaskQueries, CRUDSQLBase[Task]):
    ...


class CRUDTaskMongo(TaskQueries, CRUDMongoBase[Task]):
    ...
