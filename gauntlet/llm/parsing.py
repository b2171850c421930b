"""Helpers for turning chat model replies into JSON objects."""

from __future__ import annotations

import json
import re
import typing as t

_fenced = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)
_braced = re.compile(r"\{.*\}", re.DOTALL)


def get_content_str(content: t.Any) -> str:
    """Extract string content from a LangChain message content field."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in t.cast(list[t.Any], content):
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return " ".join(parts)
    return str(content)


def extract_json_object(text: str) -> dict[str, t.Any] | None:
    """Find a JSON object in a reply that may wrap it in prose or markdown.

    Returns None when nothing parses; callers decide what that means.
    """
    text = text.strip()
    if not text:
        return None

    candidates = [text]
    if m := _fenced.search(text):
        candidates.append(m.group(1))
    if m := _braced.search(text):
        candidates.append(m.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return t.cast(dict[str, t.Any], parsed)
    return None
