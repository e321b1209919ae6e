from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from lxml import etree

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile("[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


@dataclass(frozen=True)
class Element:
    """A node of a document tree: tag, attributes, children and text.

    Tags and attribute names may carry a ``prefix:`` that is resolved against
    the namespaces given to :func:`to_xml`.
    """

    tag: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    children: tuple[Element, ...] = ()
    text: str | None = None


def text_element(tag: str, text: str, **attrs: str) -> Element:
    return Element(tag, attrs=attrs, text=text)


def xml_safe(value: str) -> str:
    return _INVALID_XML_CHARS.sub("", value)


def _qualify(name: str, namespaces: Mapping[str | None, str], default: bool) -> str:
    prefix, sep, local = name.partition(":")
    if sep:
        return f"{{{namespaces[prefix]}}}{local}"
    if default and None in namespaces:
        return f"{{{namespaces[None]}}}{name}"
    return name


def _build(node: Element, namespaces: Mapping[str | None, str], parent=None):
    tag = _qualify(node.tag, namespaces, default=True)
    if parent is None:
        el = etree.Element(tag, nsmap=dict(namespaces))
    else:
        el = etree.SubElement(parent, tag)

    for name, value in node.attrs.items():
        el.set(_qualify(name, namespaces, default=False), xml_safe(value))
    if node.text is not None:
        el.text = xml_safe(node.text)
    for child in node.children:
        _build(child, namespaces, el)
    return el


def to_xml(root: Element, namespaces: Mapping[str | None, str] | None = None) -> str:
    """Serialize a tree to XML text prefixed with the UTF-8 declaration."""
    tree = _build(root, namespaces or {})
    return XML_DECLARATION + etree.tostring(tree, encoding="unicode")
