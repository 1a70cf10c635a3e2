from typing import Awaitable, Callable, Optional
from app.crud.base import CRUDBase


class DataObjectManager:
    """Class responsible for the persistent collections of one storage backend.

    Built once at start-up by `database_factory` and handed to the services.
    """

    def __init__(
        self,
        db_type: str,
        users: CRUDBase,
        tasks: CRUDBase,
        *,
        on_connect: Optional[Callable[[], Awaitable[None]]] = None,
        on_drop: Optional[Callable[[], Awaitable[None]]] = None,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self.db_type = db_type
        self.users = users
        self.tasks = tasks
        self._on_connect = on_connect
        self._on_drop = on_drop
        self._on_close = on_close

    async def connect(self) -> None:
        """Prepare the backend (tables, indexes), safe to call more than once."""
        if self._on_connect is not None:
            await self._on_connect()

    async def drop_database(self) -> None:
        if self._on_drop is not None:
            await self._on_drop()
        else:
            await self.tasks.delete_all()
            await self.users.delete_all()

    async def close(self) -> None:
        if self._on_close is not None:
            await self._on_close()
