import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from gauntlet.model import BaseModel


class _DictInit(object):
    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


# NOTE: BaseModel is listed so that model_dump defaults to by_alias=True, which
#       the logging dictConfig aliases ("class", "()") depend on
class BaseSettings(_DictInit, PydanticBaseSettings, BaseModel): ...  # pyright: ignore [reportIncompatibleVariableOverride]


class BaseSecrets(_DictInit, PydanticBaseSettings, BaseModel): ...  # pyright: ignore [reportIncompatibleVariableOverride]
