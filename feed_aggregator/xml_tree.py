"""
Converts raw feed XML into a generic nested-dict tree.

Shape of the tree:
- every element becomes a key of its parent mapping; repeated elements become lists
- attributes become keys prefixed with ``@_``
- an element with neither attributes nor children is represented by its text
- otherwise its text, when present, sits under ``#text``; for an element with
  children that is all of its character data in document order, so inline
  markup such as an xhtml ``<div>`` or unescaped ``<b>`` reads as plain text

Namespaced names keep the prefix the document declared (``dc:date``,
``atom:link``); elements in the default namespace are unprefixed.
"""
import xml.etree.ElementTree as ET
from typing import Any, Dict, Union

from .exceptions import ParseError

ATTRIBUTE_PREFIX = "@_"
TEXT_KEY = "#text"

# Prefixes predefined by XML itself, never declared in documents
_RESERVED_PREFIXES = {
    "http://www.w3.org/XML/1998/namespace": "xml",
}


def parse_xml(content: Union[str, bytes]) -> Dict[str, Any]:
    """
    Parse XML text into a generic tree.

    Args:
        content: Raw XML document

    Returns:
        Mapping with a single key, the root element name

    Raises:
        ParseError: If the document is not well-formed XML
    """
    parser = ET.XMLPullParser(events=("start-ns", "end"))
    prefixes = dict(_RESERVED_PREFIXES)
    root = None

    try:
        parser.feed(content)
        parser.close()
        for event, payload in parser.read_events():
            if event == "start-ns":
                prefix, uri = payload
                prefixes.setdefault(uri, prefix)
            else:
                root = payload
    except ET.ParseError as e:
        raise ParseError(f"Malformed XML: {e}") from e

    if root is None:
        raise ParseError("Document has no root element")

    name = _qualified_name(root.tag, prefixes)
    return {name: _convert(root, prefixes)}


def _qualified_name(tag: str, prefixes: Dict[str, str]) -> str:
    """Turn ElementTree's ``{uri}local`` form back into ``prefix:local``."""
    if not tag.startswith("{"):
        return tag

    uri, local = tag[1:].split("}", 1)
    prefix = prefixes.get(uri, "")
    return f"{prefix}:{local}" if prefix else local


def _convert(element: ET.Element, prefixes: Dict[str, str]) -> Any:
    children = list(element)
    text = "".join(element.itertext()) if children else element.text or ""

    if not element.attrib and not children:
        return text

    node: Dict[str, Any] = {}
    for key, value in element.attrib.items():
        node[ATTRIBUTE_PREFIX + _qualified_name(key, prefixes)] = value

    for child in children:
        name = _qualified_name(child.tag, prefixes)
        value = _convert(child, prefixes)
        if name not in node:
            node[name] = value
        elif isinstance(node[name], list):
            node[name].append(value)
        else:
            node[name] = [node[name], value]

    if text.strip():
        node[TEXT_KEY] = text

    return node
