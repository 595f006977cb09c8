"""``json`` with encoders for the types Tally stores and logs.

Used as the SQLAlchemy JSON serializer (attempt answers) and by the log
formatter for ``extra`` values. Import it in place of the stdlib module::

    import tally.lib.json as json
"""

from __future__ import annotations

import datetime
import decimal
import enum
import functools
import json as pyjson
import pathlib
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


@functools.singledispatch
def encode(obj: t.Any) -> JSONValue:
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


@encode.register
def _(obj: datetime.date) -> str:
    # also datetime.datetime
    return obj.isoformat()


@encode.register
def _(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


@encode.register
def _(obj: decimal.Decimal) -> str:
    return str(obj)


@encode.register
def _(obj: enum.Enum) -> JSONValue:
    return obj.value


@encode.register
def _(obj: pathlib.PurePath) -> str:
    return str(obj)


@encode.register(set)
@encode.register(frozenset)
def _(obj: t.AbstractSet[t.Any]) -> list[t.Any]:
    return sorted(obj, key=str)


@encode.register
def _(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


class JSONEncoder(pyjson.JSONEncoder):
    def default(self, o: t.Any) -> JSONValue:
        return encode(o)


def dumps(obj: t.Any, *, cls: type[pyjson.JSONEncoder] = JSONEncoder, **kw: t.Any) -> str:
    return pyjson.dumps(obj, cls=cls, **kw)


def loads(s: str | bytes | bytearray, **kw: t.Any) -> t.Any:
    return pyjson.loads(s, **kw)
