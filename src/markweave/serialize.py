"""Serialization of parsed node sequences."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .constants import VOID_ELEMENTS
from .nodes import ElementNode
from .registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .nodes import Node
    from .registry import Registry


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;")


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _format_value(value: str | bool | float) -> str | None:
    # None means the attribute is omitted
    if isinstance(value, bool):
        return "" if value else None
    if isinstance(value, (int, float)):
        if math.isnan(value):
            return None
        return _format_number(float(value))
    return str(value)


def serialize_start_tag(name: str, attrs: dict[str, str | bool | float], registry: Registry = DEFAULT_REGISTRY) -> str:
    prop_to_attribute = {prop: attr for attr, prop in registry.attributes_to_props.items()}
    parts: list[str] = ["<", name]
    for prop, value in attrs.items():
        attr = prop_to_attribute.get(prop, prop)
        text = _format_value(value)
        if text is None:
            continue
        if isinstance(value, bool):
            parts.extend([" ", attr])
            continue
        parts.extend([" ", attr, '="', _escape_attr_value(text), '"'])
    parts.append(">")
    return "".join(parts)


def to_html(nodes: Iterable[Node], registry: Registry = DEFAULT_REGISTRY) -> str:
    """Render a node sequence back to HTML.

    Prop names are mapped back to attribute names (`className` -> `class`),
    `True` booleans render as bare attributes and `False` or `nan` values are
    omitted.
    """

    return "".join(_node_to_html(node, registry) for node in nodes)


def _node_to_html(node: Node, registry: Registry) -> str:
    if isinstance(node, str):
        return _escape_text(node)
    start = serialize_start_tag(node.tag_name, node.attributes, registry)
    if node.tag_name in VOID_ELEMENTS:
        return start
    inner = "".join(_node_to_html(child, registry) for child in node.children)
    return f"{start}{inner}</{node.tag_name}>"


def to_test_format(nodes: Iterable[Node], indent: int = 0) -> str:
    """Render a node sequence as an html5lib-style `| ` tree dump."""

    return "\n".join(_node_to_test_format(node, indent) for node in nodes)


def _node_to_test_format(node: Node, indent: int) -> str:
    if not isinstance(node, ElementNode):
        return f'| {" " * indent}"{node}"'
    lines = [f"| {' ' * indent}<{node.tag_name}>"]
    padding = " " * (indent + 2)
    for name, value in sorted(node.attributes.items()):
        if isinstance(value, bool):
            shown = "true" if value else "false"
        elif isinstance(value, float):
            shown = "nan" if math.isnan(value) else _format_number(value)
        else:
            shown = value
        lines.append(f'| {padding}{name}="{shown}"')
    for child in node.children:
        lines.append(_node_to_test_format(child, indent + 2))
    return "\n".join(lines)
