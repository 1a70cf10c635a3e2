""" CRUD operations for data persisted through the SQLAlchemy ORM. """
import datetime as dt
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.crud.base import CRUDBase, ModelType, clean_update
from app.data_layer.dl_exception import DuplicateObjectError
from app.db.base_class import Base


class CRUDSQLBase(CRUDBase[ModelType]):
    """Each call runs in its own session and commits before returning."""

    def __init__(
        self,
        model: Type[ModelType],
        orm_model: Type[Base],
        session_factory: async_sessionmaker,
    ):
        super().__init__(model)
        self.orm_model = orm_model
        self.session_factory = session_factory

    def _to_model(self, db_obj: Optional[Base]) -> Optional[ModelType]:
        return self.model.model_validate(db_obj) if db_obj is not None else None

    def _column(self, field: str):
        return getattr(self.orm_model, field)

    async def get(self, id: int) -> Optional[ModelType]:
        async with self.session_factory() as session:
            return self._to_model(await session.get(self.orm_model, id))

    async def get_by_key(self, key_name: str, key_value: Any) -> Optional[ModelType]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(self.orm_model).where(self._column(key_name) == key_value)
            )
            return self._to_model(result.scalars().first())

    async def filter_multi(
        self,
        filter: Dict[str, Any],
        *,
        any_of: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ModelType]:
        query = select(self.orm_model).where(
            *[self._column(field) == value for field, value in filter.items()]
        )
        if any_of:
            query = query.where(
                or_(*[self._column(field) == value for field, value in any_of.items()])
            )
        query = query.order_by(self.orm_model.id).offset(skip).limit(limit)
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [self._to_model(db_obj) for db_obj in result.scalars().all()]

    async def add(self, *, obj_in: Dict[str, Any]) -> ModelType:
        now = dt.datetime.now()
        db_obj = self.orm_model(**obj_in, created_at=now, updated_at=now)
        async with self.session_factory() as session:
            session.add(db_obj)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateObjectError(str(exc.orig)) from exc
            await session.refresh(db_obj)
            return self._to_model(db_obj)

    async def update(self, *, id: int, obj_update: Dict[str, Any]) -> Optional[ModelType]:
        async with self.session_factory() as session:
            db_obj = await session.get(self.orm_model, id)
            if db_obj is None:
                return None
            for field, value in clean_update(obj_update).items():
                setattr(db_obj, field, value)
            db_obj.updated_at = dt.datetime.now()
            await session.commit()
            await session.refresh(db_obj)
            return self._to_model(db_obj)

    async def delete(self, *, id: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(self.orm_model).where(self.orm_model.id == id)
            )
            await session.commit()
            return result.rowcount == 1

    async def delete_all(self) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(self.orm_model))
            await session.commit()
