import datetime

from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeDecorator
from sqlalchemy.types import DateTime, String

from gauntlet.model.id import KEY_LENGTH, ShortUUIDKey


class ShortUUIDKeyType(TypeDecorator[ShortUUIDKey]):
    impl = String
    cache_ok = True

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        super().__init__(KEY_LENGTH)

    def process_bind_param(self, value: ShortUUIDKey | None, dialect: Dialect) -> str | None:
        if value is not None:
            return value.key
        return value

    def process_result_value(self, value: str | None, dialect: Dialect) -> ShortUUIDKey | None:
        if value is not None:
            value = self.key_type.from_key(value)
        return value


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """Timezone-aware timestamps on every backend.

    sqlite has no timezone support and hands back naive values; those are
    taken to be UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is None:
            return value
        if value.tzinfo is None:
            raise ValueError("naive datetime cannot be stored")
        return value.astimezone(datetime.UTC)

    def process_result_value(self, value: datetime.datetime | None, dialect: Dialect) -> datetime.datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=datetime.UTC)
        return value

