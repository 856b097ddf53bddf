"""Attribute extraction: allow-list, safety checks, filters and casting."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .filters import apply_filters
from .registry import DEFAULT_REGISTRY, AttributeRule

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any, Protocol

    from .dom import SimpleDomNode
    from .filters import Filter
    from .registry import Registry

    class ReportCallback(Protocol):
        def __call__(self, code: str, message: str, *, node: Any | None = None) -> None: ...


# Checked after removing the characters browsers ignore inside URL schemes
_UNSAFE_VALUE_RE = re.compile(r"(javascript|vbscript|script|xss):", re.IGNORECASE)
_IGNORED_URL_CHARS = str.maketrans("", "", "\t\n\r\0")

_FLOAT_PREFIX_RE = re.compile(r"[\t\n\f\r ]*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|Infinity))")


def is_unsafe_value(value: str) -> bool:
    return _UNSAFE_VALUE_RE.search(value.translate(_IGNORED_URL_CHARS)) is not None


def cast_number(value: str) -> float:
    """Parse the leading decimal number of `value`; `nan` when there is none."""

    m = _FLOAT_PREFIX_RE.match(value)
    if m is None:
        return float("nan")
    return float(m.group(1))


def cast_bool(name: str, value: str) -> bool:
    return value == "true" or value == name


def extract_attributes(
    node: SimpleDomNode,
    registry: Registry = DEFAULT_REGISTRY,
    filters: Iterable[Filter] = (),
    report: ReportCallback | None = None,
) -> dict[str, str | bool | float]:
    """Return the sanitized, cast attributes of `node` keyed by prop name.

    Attributes are dropped when the registry does not allow them (`aria-*`
    are always allowed), when they are event handlers, or when their value
    carries an executable URI scheme. Each drop is passed to `report`.
    """

    attributes: dict[str, str | bool | float] = {}
    if not node.is_element or not node.attrs:
        return attributes

    filters = tuple(filters)
    for raw_name, raw_value in node.attrs.items():
        name = str(raw_name).lower()
        value = "" if raw_value is None else str(raw_value)

        if name.startswith("aria-"):
            rule = AttributeRule.CAST_STRING
        else:
            if name.startswith("on"):
                if report is not None:
                    report("event-handler-attribute", f"Removed event handler attribute '{name}'", node=node)
                continue
            rule = registry.get_attribute_rule(name)
            if rule is None or rule is AttributeRule.DENY:
                if report is not None:
                    report("denied-attribute", f"Removed attribute '{name}' on <{node.name}>", node=node)
                continue

        if is_unsafe_value(value):
            if report is not None:
                report("unsafe-attribute-value", f"Removed unsafe value of attribute '{name}'", node=node)
            continue

        value = apply_filters(filters, name, value)
        # Filtered values get the same check
        if is_unsafe_value(value):
            if report is not None:
                report("unsafe-attribute-value", f"Removed unsafe filtered value of attribute '{name}'", node=node)
            continue

        cast: str | bool | float
        if rule is AttributeRule.CAST_BOOL:
            cast = cast_bool(name, value)
        elif rule is AttributeRule.CAST_NUMBER:
            cast = cast_number(value)
        else:
            cast = value

        attributes[registry.get_prop_name(name)] = cast

    return attributes
