import typing as t

from gauntlet.lib.json import JSONEncoder as BaseJSONEncoder
from gauntlet.lib.json import JSONValue


class JSONEncoder(BaseJSONEncoder):
    """Log-friendly encoder: never raises, falls back to repr()."""

    def default(self, o: t.Any) -> JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)
