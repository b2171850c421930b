import importlib
import json
import logging
import string
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

ReservedKeys = {
    "exception",
    "args",
    "asctime",
    "color_message",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "id",
    "levelname",
    "levelno",
    "lineno",
    "log_color",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def _resolve_formatter(base: type[logging.Formatter] | str) -> type[logging.Formatter]:
    if isinstance(base, str):
        module, _, name = base.rpartition(".")
        return getattr(importlib.import_module(module), name)
    return base


class ExtraFormatter(logging.Formatter):
    """Wrap a base formatter and append `extra={...}` fields as JSON."""

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool = True,
        no_color: bool = False,
        pyg_style: t.Type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        base_cls = _resolve_formatter(base)
        # options the base formatter may not know, such as colorlog's log_colors, arrive as None when unset
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        self.base = base_cls(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.indent = indent
        self.no_color = no_color

    def format(self, record: logging.LogRecord) -> str:
        if "color_message" in record.__dict__:
            record.msg = record.__dict__.pop("color_message")

        msg = record.getMessage()
        if "\n" in msg:
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in set(d.keys()) - ReservedKeys}

        if not extra:
            return message

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), cls=JSONEncoder)
        if self.is_tty(record) and not self.no_color:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter[str](style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    def is_tty(self, record: logging.LogRecord) -> bool:
        handlers = logging.getLogger(record.name).handlers or logging.getLogger().handlers
        for handler in handlers:
            if getattr(handler, "formatter", None) is self:
                isatty = getattr(getattr(handler, "stream", None), "isatty", None)
                return bool(isatty and isatty())
        return False

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
