from typing import Optional
from app.crud.crud_inmem import CRUDInMemBase
from app.crud.crud_mongo import CRUDMongoBase
from app.crud.crud_sql import CRUDSQLBase
from app.model.user import UserInDB


class UserQueries:
    """User lookups shared by every backend."""

    async def get_by_email(self, email: str) -> Optional[UserInDB]:
        return await self.get_by_key("email", email.lower())


class CRUDUserInMem(UserQueries, CRUDInMemBase[UserInDB]):
    ...


class CRUDUserSQL(UserQueries, CRUDSQLBase[UserInDB]):
    ...


class CRUDUserMongo(UserQueries, CRUDMongoBase[UserInDB]):
    ...
