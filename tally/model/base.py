import datetime
import typing as t

import pydantic as p


def as_utc(v: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if v.tzinfo is None:
        return v.replace(tzinfo=datetime.UTC)
    return v.astimezone(datetime.UTC)


UTCDatetime = t.Annotated[datetime.datetime, p.AfterValidator(as_utc)]


class BaseModel(p.BaseModel):
    """Dumps by alias unless told otherwise, so views serialize with their camelCase names."""

    def model_dump(  # pyright: ignore [reportIncompatibleMethodOverride]
        self, *, by_alias: bool | None = True, **kwargs: t.Any
    ) -> dict[str, t.Any]:
        return super().model_dump(by_alias=by_alias, **kwargs)


class WithCtime(BaseModel):
    create_time: UTCDatetime


class WithMtime(BaseModel):
    update_time: UTCDatetime


class WithTimestamps(WithCtime, WithMtime): ...
