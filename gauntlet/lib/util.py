import re
import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]

_unsafe_filename_chars = re.compile(r"[^A-Za-z0-9]+")


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


def safe_filename_part(s: str, fallback: str = "candidate") -> str:
    """Collapse anything but ASCII letters and digits into single underscores."""
    cleaned = _unsafe_filename_chars.sub("_", s).strip("_")
    return cleaned or fallback
