"""
Permalink extraction for feed entries.

Entries carry their link in one of several shapes: nothing at all, a plain
string (RSS, Atom 0.3), a single link element with rel/href attributes, or a
list of such elements (Atom with self/alternate/enclosure relations). The
shape is decoded once by ``decode_link`` and resolved by ``resolve_link``.
"""
from typing import Any, Dict, Optional

from .models import (
    PLACEHOLDER_LINK,
    LinkDescriptor,
    LinkDescriptorList,
    LinkVariant,
    NoLink,
    PlainLink,
)
from .xml_tree import ATTRIBUTE_PREFIX

SELF_REL = "self"


def _attribute(node: Dict[str, Any], name: str) -> Optional[str]:
    value = node.get(ATTRIBUTE_PREFIX + name) or node.get(name)
    return value if isinstance(value, str) and value else None


def _descriptor(node: Any) -> LinkDescriptor:
    if isinstance(node, dict):
        return LinkDescriptor(rel=_attribute(node, "rel"), href=_attribute(node, "href"))
    # A bare <link>url</link> inside a list of link elements
    if isinstance(node, str) and node.strip():
        return LinkDescriptor(rel=None, href=node.strip())
    return LinkDescriptor(rel=None, href=None)


def decode_link(raw: Any) -> LinkVariant:
    """
    Decode the raw ``link`` value of a parsed entry into a link variant.

    Args:
        raw: Value found under the entry's ``link`` key

    Returns:
        NoLink, PlainLink, LinkDescriptor or LinkDescriptorList
    """
    if raw is None:
        return NoLink()
    if isinstance(raw, str):
        return PlainLink(raw.strip()) if raw.strip() else NoLink()
    if isinstance(raw, list):
        return LinkDescriptorList(tuple(_descriptor(item) for item in raw))
    if isinstance(raw, dict):
        return _descriptor(raw)
    return NoLink()


def resolve_link(link: LinkVariant) -> str:
    """
    Pick the permalink for a decoded link.

    For a list of descriptors the first one whose relation is not ``self``
    and that has an href wins; otherwise the first descriptor's href is used.
    Anything unresolvable yields the ``#`` placeholder.

    Args:
        link: Decoded link variant

    Returns:
        URL string or ``#``
    """
    if isinstance(link, NoLink):
        return PLACEHOLDER_LINK
    if isinstance(link, PlainLink):
        return link.url
    if isinstance(link, LinkDescriptor):
        return link.href or PLACEHOLDER_LINK
    if isinstance(link, LinkDescriptorList):
        for descriptor in link.descriptors:
            if descriptor.rel != SELF_REL and descriptor.href:
                return descriptor.href
        if link.descriptors and link.descriptors[0].href:
            return link.descriptors[0].href
        return PLACEHOLDER_LINK
    raise TypeError(f"Unsupported link representation: {type(link).__name__}")


def resolve_entry_link(entry: Dict[str, Any]) -> str:
    """Resolve the permalink of a parsed Atom entry."""
    return resolve_link(decode_link(entry.get("link")))
