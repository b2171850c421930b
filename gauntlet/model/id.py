from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KEY_LENGTH: t.Final = 22


class ShortUUIDKey(str):
    """A prefixed shortuuid, e.g. `cand$mhJbKsXuBbwuMn6iSycMPd`.

    Records store only the bare key; the prefix says what kind of record an
    ID belongs to wherever it travels as text.
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str] = "$"

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4)]):
        super().__init_subclass__()
        cls.prefix = prefix

    def __new__(cls, s: str | None = None, /) -> t.Self:
        """Parse a prefixed ID, or mint a new one when called without arguments.

        Raises:
            ValueError: `s` has the wrong prefix, length or alphabet
        """
        if s is None:
            return cls.from_key(shortuuid.uuid())

        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: must begin with {head!r}")
        key = s[len(head) :]
        if len(key) != KEY_LENGTH:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KEY_LENGTH}")
        alphabet = shortuuid.get_alphabet()
        if not set(key) <= set(alphabet):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return super().__new__(cls, s)

    @classmethod
    def from_key(cls, key: str) -> t.Self:
        """Prefix a bare key read back from storage; the key is trusted."""
        return str.__new__(cls, f"{cls.prefix}{cls.separator}{key}")

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {
            "type": "string",
            "pattern": f"^{cls.prefix}\\{cls.separator}[{shortuuid.get_alphabet()}]{{{KEY_LENGTH}}}$",
        }

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        # strings go through __new__, so a malformed ID fails validation
        from_str = core_schema.no_info_after_validator_function(cls, core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(str.__str__),
        )

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key}>"


# fmt: off
class CandidateID(ShortUUIDKey, prefix="cand"): ...
class LogEntryID(ShortUUIDKey, prefix="clog"): ...
