""" CRUD operations for objects held in process memory. """
import datetime as dt
from typing import Any, Dict, List, Optional, Tuple, Type

from app.crud.base import CRUDBase, ModelType, clean_update
from app.data_layer.dl_exception import DuplicateObjectError
from app.data_layer.id_generator import IdGeneratorInmem


def _matches(obj: Any, filter: Dict[str, Any], any_of: Optional[Dict[str, Any]]) -> bool:
    if not all(getattr(obj, field) == value for field, value in filter.items()):
        return False
    if any_of:
        return any(getattr(obj, field) == value for field, value in any_of.items())
    return True


class CRUDInMemBase(CRUDBase[ModelType]):
    def __init__(
        self,
        model: Type[ModelType],
        id_gen: IdGeneratorInmem,
        index: str,
        unique_keys: Tuple[str, ...] = (),
    ):
        super().__init__(model)
        self.id_gen = id_gen
        self.index = index
        self.unique_keys = unique_keys
        self.data: Dict[int, ModelType] = {}

    async def get(self, id: int) -> Optional[ModelType]:
        obj = self.data.get(id)
        return obj.model_copy() if obj is not None else None

    async def get_by_key(self, key_name: str, key_value: Any) -> Optional[ModelType]:
        for obj in self.data.values():
            if getattr(obj, key_name) == key_value:
                return obj.model_copy()
        return None

    async def filter_multi(
        self,
        filter: Dict[str, Any],
        *,
        any_of: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ModelType]:
        matched = [
            obj.model_copy()
            for _, obj in sorted(self.data.items())
            if _matches(obj, filter, any_of)
        ]
        return matched[skip : skip + limit]

    async def add(self, *, obj_in: Dict[str, Any]) -> ModelType:
        now = dt.datetime.now()
        new_id = await self.id_gen.get_next_id(self.index)
        for key in self.unique_keys:
            if any(getattr(obj, key) == obj_in.get(key) for obj in self.data.values()):
                raise DuplicateObjectError(f"{self.index} with this {key} already exists")
        new_obj = self.model(
            **{**obj_in, "id": new_id, "created_at": now, "updated_at": now}
        )
        self.data[new_id] = new_obj
        return new_obj.model_copy()

    async def update(self, *, id: int, obj_update: Dict[str, Any]) -> Optional[ModelType]:
        stored = self.data.get(id)
        if stored is None:
            return None
        update_data = clean_update(obj_update)
        update_data["updated_at"] = dt.datetime.now()
        # re-validate so enum and datetime fields keep their types
        updated = self.model.model_validate({**stored.model_dump(), **update_data})
        self.data[id] = updated
        return updated.model_copy()

    async def delete(self, *, id: int) -> bool:
        return self.data.pop(id, None) is not None

    async def delete_all(self) -> None:
        self.data.clear()
