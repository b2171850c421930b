"""Schema for the `logging` settings, which are passed to `logging.config.dictConfig` as dumped."""

import pathlib
import typing as t

import pydantic as p

from .base import BaseSettings

# the standard levels plus TRACE, see gauntlet.core.provider
LogLevel = t.Literal["NOTSET", "TRACE", "DEBUG", "INFO", "WARNING", "WARN", "ERROR", "FATAL", "CRITICAL"]


class FormatterSettings(BaseSettings):
    """An `ExtraFormatter` wrapping `base`, e.g. colorlog.ColoredFormatter or logging.Formatter."""

    class_: t.Literal["gauntlet.lib.logging.ExtraFormatter"] = p.Field(alias="()")
    base: str
    format: str | None = None
    datefmt: str | None = None
    log_colors: dict[str, str] | None = None
    no_color: bool = False
    indent: bool | None = None


class BaseHandlerSettings(BaseSettings):
    formatter: str
    level: LogLevel


class StreamHandlerSettings(BaseHandlerSettings):
    class_: t.Literal["colorlog.StreamHandler"] = p.Field(alias="class")
    stream: str = "ext://sys.stderr"


class WatchedFileHandlerSettings(BaseHandlerSettings):
    """A log file rotated by an outside tool such as logrotate."""

    class_: t.Literal["logging.handlers.WatchedFileHandler"] = p.Field(alias="class")
    filename: pathlib.Path


HandlerSettings = t.Annotated[
    StreamHandlerSettings | WatchedFileHandlerSettings,
    p.Field(discriminator="class_"),
]


class LoggerSettings(BaseSettings):
    level: LogLevel = "NOTSET"
    propagate: bool = True
    handlers: list[str] | None = None


class RootLoggerSettings(BaseSettings):
    handlers: list[str]
    level: LogLevel = "NOTSET"


class LoggingSettings(BaseSettings):
    version: t.Literal[1]
    # uvicorn configures its loggers before ours are applied
    disable_existing_loggers: bool = False
    formatters: dict[str, FormatterSettings]
    handlers: dict[str, HandlerSettings]
    root: RootLoggerSettings
    loggers: dict[str, LoggerSettings] = {}
