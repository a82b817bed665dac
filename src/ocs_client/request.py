"""Query merging and the `<REQUEST>` wire format."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .constants import DEFAULT_QUERY


def merge_query(params: Mapping[str, Any] | None = None, **overrides: Any) -> dict[str, Any]:
    """Merge caller parameters over the defaults.

    Keys are matched case-insensitively because they end up as uppercase tags.
    Defaults keep their position; new keys are appended in the order given.
    """

    merged: dict[str, Any] = dict(DEFAULT_QUERY)
    for source in (params or {}, overrides):
        for key, value in source.items():
            merged[str(key).lower()] = value
    return merged


def build_request_xml(query: Mapping[str, Any]) -> str:
    """Serialize a merged query into the XML string sent to `get_computers_V1`.

    Values are not escaped; callers must not pass markup characters.
    """

    lines = ["<REQUEST>"]
    for key, value in query.items():
        tag = str(key).upper()
        lines.append(f"  <{tag}>{format_value(value)}</{tag}>")
    lines.append("</REQUEST>")
    return "\n".join(lines) + "\n"


def format_value(value: Any) -> str:
    # IntFlag members stringify to their names on some interpreters.
    if isinstance(value, int):
        return str(int(value))
    return str(value)


__all__ = ["merge_query", "build_request_xml", "format_value"]
