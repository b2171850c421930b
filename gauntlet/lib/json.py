"""JSON for the values gauntlet stores and logs.

Used as the SQLAlchemy JSON serializer for the candidate record columns, by the
structured log formatter and as the jinja2 `tojson` filter for prompts.
"""

from __future__ import annotations

import datetime
import enum
import json as pyjson
import pathlib
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


def encode_pydantic(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


# first match wins, so subclasses go before their bases
ENCODERS: t.Final[tuple[tuple[type, t.Callable[[t.Any], JSONValue]], ...]] = (
    (p.BaseModel, encode_pydantic),
    (datetime.date, lambda o: o.isoformat()),  # and datetime
    (datetime.timedelta, lambda o: o.total_seconds()),
    (enum.Enum, lambda o: o.value),
    (pathlib.Path, str),
    (set, list),
    (frozenset, list),
    (BaseException, repr),
)


class JSONEncoder(pyjson.JSONEncoder):
    def get_encoders(self) -> t.Sequence[tuple[type, t.Callable[[t.Any], JSONValue]]]:
        return ENCODERS

    def default(self, o: t.Any) -> JSONValue:
        for tp, encoder in self.get_encoders():
            if isinstance(o, tp):
                return encoder(o)
        return pyjson.JSONEncoder.default(self, o)


def dumps(obj: t.Any, *, cls: type[pyjson.JSONEncoder] = JSONEncoder, **kwargs: t.Any) -> str:
    return pyjson.dumps(obj, cls=cls, **kwargs)


def loads(s: str | bytes | bytearray, **kwargs: t.Any) -> t.Any:
    return pyjson.loads(s, **kwargs)
