"""
Minimal XML writer for report documents.

Trees are built with ``xml.etree.ElementTree``; rendering is done here so
the output layout is fixed: two-space indentation, ``\\n`` line breaks,
``<TAG/>`` for elements with neither text nor children, and all five XML
special characters escaped in text.

The declaration always names Shift_JIS. The rendered string itself is
Unicode; encoding it is the caller's job.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

XML_DECLARATION = '<?xml version="1.0" encoding="Shift_JIS"?>'

INDENT = "  "

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_text(text: str) -> str:
    """Escape ``& < > " '`` for element content."""
    return escape(text, _QUOTE_ENTITIES)


def add_text(parent: ET.Element, tag: str, value: str | None = None) -> ET.Element:
    """Append ``<tag>value</tag>``; None or "" gives ``<tag/>``."""
    child = ET.SubElement(parent, tag)
    if value:
        child.text = value
    return child


def _render(element: ET.Element, depth: int, lines: list[str]) -> None:
    pad = INDENT * depth
    children = list(element)
    if children:
        lines.append(f"{pad}<{element.tag}>")
        for child in children:
            _render(child, depth + 1, lines)
        lines.append(f"{pad}</{element.tag}>")
    elif element.text:
        lines.append(f"{pad}<{element.tag}>{escape_text(element.text)}</{element.tag}>")
    else:
        lines.append(f"{pad}<{element.tag}/>")


def render_element(element: ET.Element, depth: int = 0) -> str:
    """Pretty-print one element subtree."""
    lines: list[str] = []
    _render(element, depth, lines)
    return "\n".join(lines)


def render_document(root: ET.Element) -> str:
    """Declaration plus the pretty-printed tree."""
    return f"{XML_DECLARATION}\n{render_element(root)}"
