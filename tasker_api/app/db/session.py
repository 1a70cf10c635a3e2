"""how to connect to the DB"""
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def create_engine(database_uri: str) -> AsyncEngine:
    # see how to connect to postgres
    # https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
    if database_uri.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_uri or database_uri.endswith("://"):
            # one shared connection, otherwise each connection gets its own empty db
            kwargs["poolclass"] = StaticPool
        return create_async_engine(database_uri, **kwargs)
    return create_async_engine(database_uri, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    # the Session establishes all conversations with the database and represents
    # a "holding zone" for all the objects which you've loaded or associated with it during its lifespan.
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)
