"""Convert OCS XML fragments into plain Python records."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any

from lxml import etree

from .constants import FORCE_ARRAY
from .exceptions import UnexpectedResponseError

CONTENT_KEY = "content"

logger = logging.getLogger(__name__)

_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def xml_to_record(element: etree._Element, force_array: Iterable[str] = FORCE_ARRAY) -> Any:
    """Convert an element into nested dicts, lists and strings.

    Attributes become keys, repeated children become lists, children named in
    `force_array` are lists even when they occur once. A leaf with text is a
    string, an empty leaf is an empty dict, and text that sits beside
    attributes or children is stored under ``content``.
    """

    forced = frozenset(force_array)
    return _convert(element, forced)


def parse_fragment(fragment: str, force_array: Iterable[str] = FORCE_ARRAY) -> Any:
    """Parse one XML document and convert the contents of its root element."""

    return xml_to_record(_parse(fragment), force_array)


def parse_computers(
    fragments: Sequence[str], force_array: Iterable[str] = FORCE_ARRAY
) -> list[dict[str, Any]]:
    """Parse the fragments of a `get_computers_V1` answer.

    The server sends the opening ``<COMPUTERS>`` tag, one fragment per computer
    and the closing tag as separate strings; joined, they form one document
    whose root is discarded.
    """

    joined = "".join(_XML_DECLARATION.sub("", fragment) for fragment in fragments)
    if not joined.strip():
        return []
    root = _parse(joined)
    forced = frozenset(force_array)
    computers: list[dict[str, Any]] = []
    for child in root:
        record = _convert(child, forced)
        computers.append(record if isinstance(record, dict) else {})
    logger.debug("Parsed %d computer records from <%s>", len(computers), root.tag)
    return computers


def _parse(document: str) -> etree._Element:
    try:
        return etree.fromstring(document.strip().encode("utf-8"), parser=_PARSER)
    except etree.XMLSyntaxError as exc:
        raise UnexpectedResponseError(
            f"OCS returned malformed XML: {exc}", details=document[:200]
        ) from exc


def _convert(element: etree._Element, forced: frozenset[str]) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    text = (element.text or "") + "".join(child.tail or "" for child in children)
    has_text = bool(text.strip())

    if not element.attrib and not children:
        return text if has_text else {}

    record: dict[str, Any] = {_local(name): value for name, value in element.attrib.items()}
    grouped: dict[str, list[Any]] = {}
    for child in children:
        grouped.setdefault(_local(child.tag), []).append(_convert(child, forced))
    for name, values in grouped.items():
        record[name] = values if name in forced or len(values) > 1 else values[0]
    if has_text:
        record[CONTENT_KEY] = text
    return record


def _local(name: str) -> str:
    return etree.QName(name).localname


__all__ = ["CONTENT_KEY", "xml_to_record", "parse_fragment", "parse_computers"]
