import datetime

from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeDecorator
from sqlalchemy.types import DateTime, String

from tally.model.base import as_utc
from tally.model.id import ShortUUIDKey


class ShortUUIDKeyType(TypeDecorator[ShortUUIDKey]):
    """Stores only the 22 character key; the prefix is implied by the column."""

    impl = String
    cache_ok = True

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        super().__init__(22)  # length of shortuuid

    def process_bind_param(self, value: ShortUUIDKey | str | None, dialect: Dialect) -> str | None:
        if value is None:
            return value
        if not isinstance(value, self.key_type):
            value = self.key_type(value)
        return value.key

    def process_result_value(self, value: str | None, dialect: Dialect) -> ShortUUIDKey | None:
        if value is not None:
            value = self.key_type(key=value)
        return value


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """Timezone-aware UTC datetimes on every backend.

    SQLite has no timezone support, so values are stored there as naive UTC.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self) -> None:
        super().__init__(timezone=True)

    def process_bind_param(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is None:
            return value
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is None:
            return value
        return as_utc(value)
