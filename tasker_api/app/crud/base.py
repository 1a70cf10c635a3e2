""" Generic interface for CRUD operations, implemented once per storage backend. """
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from pydantic import BaseModel


ModelType = TypeVar("ModelType", bound=BaseModel)


class CRUDBase(Generic[ModelType]):
    """Generic class to manage data objects of type ModelType keyed by an integer id.

    Every method is async so the services do not care which backend they talk to.
    Writes do exactly what is asked: no business rules live here.
    """

    def __init__(self, model: Type[ModelType]):
        """
        **Parameters**
        * `model`: the pydantic model returned by reads
        """
        self.model = model

    async def get(self, id: int) -> Optional[ModelType]:
        """Returns an object given its ID or `None` if it does not exist."""
        raise NotImplementedError()

    async def get_by_key(self, key_name: str, key_value: Any) -> Optional[ModelType]:
        """Returns an object given key value or `None` (assuming the key is unique)."""
        raise NotImplementedError()

    async def get_all(self, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        return await self.filter_multi({}, skip=skip, limit=limit)

    async def filter_multi(
        self,
        filter: Dict[str, Any],
        *,
        any_of: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ModelType]:
        """Returns objects ordered by id matching all of `filter` and at least one of `any_of`.

        **Parameters**
        * `filter`: field -> value, every pair must match
        * `any_of`: field -> value, one pair must match (ignored if empty)
        """
        raise NotImplementedError()

    async def add(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Add a new object, allocating its id and timestamps, and return it."""
        raise NotImplementedError()

    async def update(self, *, id: int, obj_update: Dict[str, Any]) -> Optional[ModelType]:
        """Apply the fields in obj_update, return the updated object or `None` if missing.

        `updated_at` is always refreshed and `id` / `created_at` cannot be modified.
        """
        raise NotImplementedError()

    async def delete(self, *, id: int) -> bool:
        """Delete an object, return False if it did not exist."""
        raise NotImplementedError()

    async def delete_all(self) -> None:
        raise NotImplementedError()


def clean_update(obj_update: Dict[str, Any]) -> Dict[str, Any]:
    """Drops keys that may never be written by an update."""
    return {
        field: value
        for field, value in obj_update.items()
        if field not in ("id", "created_at", "updated_at")
    }
