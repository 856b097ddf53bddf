from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .parser import Parser
from .registry import DEFAULT_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .filters import Filter
    from .matchers import Matcher
    from .nodes import Node
    from .registry import Registry


def markup(
    content: str | None,
    *,
    empty_content: Any = None,
    no_html: bool = False,
    matchers: Iterable[Matcher] = (),
    filters: Iterable[Filter] = (),
    registry: Registry = DEFAULT_REGISTRY,
    **props: Any,
) -> list[Node] | Any:
    """Parse `content` and return its nodes, or `empty_content` when there are none."""

    if not content:
        return empty_content

    props["no_html"] = no_html
    nodes = Parser(content, props, matchers, filters, registry=registry).parse()
    return nodes or empty_content
