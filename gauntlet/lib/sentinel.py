from __future__ import annotations

import typing as t


class Sentinel(object):
    """Base for singleton marker values; compare with `isinstance`."""

    _instances: t.ClassVar[dict[type, Sentinel]] = {}

    def __new__(cls) -> t.Self:
        if cls not in Sentinel._instances:
            Sentinel._instances[cls] = super().__new__(cls)
        return t.cast(t.Self, Sentinel._instances[cls])

    def __repr__(self):
        return f"<{type(self).__name__}>"


class NotReady(Sentinel):
    """A container value that is only available after boot, such as the root path."""


class NotSet(Sentinel):
    """An omitted keyword argument, as distinct from an explicit `None`.

    Storage updates and record batches use it so that `None` can be written.
    """
