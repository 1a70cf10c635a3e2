import datetime as dt

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from app.model.task import to_naive_utc


class UTCDateTime(TypeDecorator):
    """DateTime stored as naive UTC, aware values are converted on the way in."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: dt.datetime, dialect):
        return to_naive_utc(value) if value is not None else None
