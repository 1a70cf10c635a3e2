from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
    AsyncIOMotorCollection,
)


class MongoConnection:
    """One motor client shared by every collection of a backend."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._client: AsyncIOMotorClient = AsyncIOMotorClient(self._url)

    @property
    def client(self) -> AsyncIOMotorClient:
        if self._client is None:
            raise RuntimeError(f"{self} is closed")
        return self._client

    def database(self, db_name: str) -> AsyncIOMotorDatabase:
        return self.client[db_name]

    async def drop_database(self, db_name: str) -> None:
        await self.client.drop_database(db_name)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __str__(self) -> str:
        # never log credentials
        return f"MongoConnection:host={self._url.rsplit('@', 1)[-1]}"


class MongoCollection:
    def __init__(
        self,
        mongo_conn: MongoConnection,
        db_name: str,
        collection_name: str,
    ) -> None:
        self._mongo_connection = mongo_conn
        self._db_name = db_name
        self._collection_name = collection_name

    def get_collection(self) -> AsyncIOMotorCollection:
        return self._mongo_connection.database(self._db_name)[self._collection_name]

    async def ensure_index(self, field: str, unique: bool = False) -> None:
        await self.get_collection().create_index(field, unique=unique)

    def __str__(self) -> str:
        return f"MongoCollection:{self._db_name}.{self._collection_name} on {self._mongo_connection}"
