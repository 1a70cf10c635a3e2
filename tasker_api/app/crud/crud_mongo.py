""" CRUD operations for data persisted in a Mongo DB. """
from typing import Any, Dict, List, Optional, Type
import datetime as dt
from fastapi.encoders import jsonable_encoder
from pymongo.errors import DuplicateKeyError

from app.crud.base import CRUDBase, ModelType, clean_update
from app.data_layer.dl_exception import DuplicateObjectError
from app.data_layer.mongo_connection import MongoCollection
from app.data_layer.id_generator import IdGeneratorMongo


def _to_query(filter: Dict[str, Any], any_of: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    query = {("_id" if k == "id" else k): jsonable_encoder(v) for k, v in filter.items()}
    if any_of:
        query["$or"] = [
            {("_id" if k == "id" else k): jsonable_encoder(v)} for k, v in any_of.items()
        ]
    return query


class CRUDMongoBase(CRUDBase[ModelType]):
    """Documents use the integer id as `_id`, allocated from a counter collection."""

    def __init__(
        self,
        model: Type[ModelType],
        collection: MongoCollection,
        id_gen: IdGeneratorMongo,
        index: str,
    ):
        super().__init__(model)
        self.db_collection = collection
        self.id_gen = id_gen
        self.index = index

    @property
    def _collection(self):
        return self.db_collection.get_collection()

    def _from_doc(self, raw_obj: Optional[Dict[str, Any]]) -> Optional[ModelType]:
        if raw_obj is None:
            return None
        raw_obj = dict(raw_obj)
        raw_obj["id"] = raw_obj.pop("_id")
        return self.model(**raw_obj)

    def _to_doc(self, obj: ModelType) -> Dict[str, Any]:
        doc = obj.model_dump(mode="python")
        doc["_id"] = doc.pop("id")
        # enums are stored by value, datetimes stay native BSON dates
        return {
            k: (v.value if hasattr(v, "value") else v) for k, v in doc.items()
        }

    async def get(self, id: int) -> Optional[ModelType]:
        return self._from_doc(await self._collection.find_one({"_id": id}))

    async def get_by_key(self, key_name: str, key_value: Any) -> Optional[ModelType]:
        raw_obj = await self._collection.find_one(_to_query({key_name: key_value}, None))
        return self._from_doc(raw_obj)

    async def filter_multi(
        self,
        filter: Dict[str, Any],
        *,
        any_of: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ModelType]:
        # 1 = ascending, -1 = descending
        query = self._collection.find(
            _to_query(filter, any_of), skip=skip, limit=limit
        ).sort("_id", 1)
        return [self._from_doc(raw_obj) async for raw_obj in query]

    async def add(self, *, obj_in: Dict[str, Any]) -> ModelType:
        now = dt.datetime.now()
        new_id = await self.id_gen.get_next_id(self.index)
        db_obj = self.model(
            **{**obj_in, "id": new_id, "created_at": now, "updated_at": now}
        )
        try:
            result = await self._collection.insert_one(self._to_doc(db_obj))
        except DuplicateKeyError as exc:
            raise DuplicateObjectError(str(exc)) from exc
        return await self.get(result.inserted_id)

    async def update(self, *, id: int, obj_update: Dict[str, Any]) -> Optional[ModelType]:
        obj_original = await self.get(id)
        if obj_original is None:
            return None
        update_data = clean_update(obj_update)
        update_data["updated_at"] = dt.datetime.now()
        updated = self.model.model_validate({**obj_original.model_dump(), **update_data})
        doc = self._to_doc(updated)
        del doc["_id"]
        await self._collection.update_one({"_id": id}, {"$set": doc})
        return await self.get(id)

    async def delete(self, *, id: int) -> bool:
        result = await self._collection.delete_one({"_id": id})
        return result.deleted_count == 1

    async def delete_all(self) -> None:
        await self._collection.delete_many({})
