from typing import Any

from pymongo import ReturnDocument
from app.core.config import get_logger
from .mongo_connection import MongoCollection

logger = get_logger("data_layer")


class IdGenerator:
    """Class to generate sequential integer ids, one sequence per index."""

    INIT_VALUE = 1

    async def get_next_id(self, index: Any) -> int:
        raise NotImplementedError()

    async def reset(self) -> None:
        raise NotImplementedError()


class IdGeneratorMongo(IdGenerator):
    def __init__(self, collection: MongoCollection) -> None:
        super().__init__()
        self.collection = collection
        # each item of form: { "index": "task", "next_id": 23 }

    async def get_next_id(self, index: str) -> int:
        # an id is consumed even if the insert that wanted it fails
        rslt = await self.collection.get_collection().find_one_and_update(
            {"index": index},
            {"$inc": {"next_id": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return rslt["next_id"]

    async def reset(self) -> None:
        await self.collection.get_collection().delete_many({})
        logger.info(f"id sequences reset in {self.collection}")


class IdGeneratorInmem(IdGenerator):
    def __init__(self) -> None:
        super().__init__()
        self.ids = {}

    async def get_next_id(self, index: Any) -> int:
        try:
            rslt = self.ids[index]
            self.ids[index] = rslt + 1
            return rslt
        except KeyError:
            self.ids[index] = self.INIT_VALUE + 1
            return self.INIT_VALUE

    async def reset(self) -> None:
        self.ids = {}
