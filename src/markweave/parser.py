"""Sanitizing parser: markup string to a sequence of text runs and elements."""

from __future__ import annotations

from itertools import count
from typing import TYPE_CHECKING, Any

from .attributes import extract_attributes
from .document import Document
from .matchers import apply_matchers
from .nodes import ElementNode
from .registry import DEFAULT_REGISTRY, TagRule, can_render_child
from .tokens import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .dom import SimpleDomNode
    from .filters import Filter
    from .matchers import Matcher
    from .nodes import Node
    from .registry import Registry, TagConfig


class Parser:
    """Parse `markup` into sanitized nodes.

    The markup is ingested into an inert DOM up front; `parse()` walks it
    once, consulting the registry for every element, and caches the result.

    `props` carries `no_html` (flatten every element to its text), one
    `no_<matcher name>` flag per matcher, and any other value the matchers'
    `create_element` should receive.
    """

    __slots__ = (
        "_content",
        "_keys",
        "collect_errors",
        "document",
        "errors",
        "filters",
        "matchers",
        "props",
        "registry",
    )

    def __init__(
        self,
        markup: str | None,
        props: Mapping[str, Any] | None = None,
        matchers: Iterable[Matcher] = (),
        filters: Iterable[Filter] = (),
        *,
        registry: Registry = DEFAULT_REGISTRY,
        collect_errors: bool = False,
    ) -> None:
        self.props: dict[str, Any] = dict(props or {})
        self.matchers: tuple[Matcher, ...] = tuple(matchers)
        self.filters: tuple[Filter, ...] = tuple(filters)
        self.registry = registry
        self.collect_errors = bool(collect_errors)
        self.document = Document(markup or "", collect_errors=self.collect_errors)
        self.errors: list[ParseError] = list(self.document.errors)
        self._keys = count()
        self._content: list[Node] | None = None

    def parse(self) -> list[Node]:
        if self._content is None:
            self._content = self.parse_node(self.document.root, self.registry.root_config)
        return self._content

    def parse_node(self, parent_node: SimpleDomNode, parent_config: TagConfig) -> list[Node]:
        """Build the node sequence for the children of `parent_node`.

        Adjacent text is merged into one run until an element (or a matcher
        result) interrupts it.
        """

        no_html = bool(self.props.get("no_html"))
        content: list[Node] = []
        merged_text = ""

        for node in parent_node.children or ():
            if node.name == "#text":
                text = apply_matchers(
                    node.data or "",
                    parent_config,
                    self.matchers,
                    self.props,
                    self._next_key,
                    self.registry,
                )
                if isinstance(text, str):
                    merged_text += text
                else:
                    if merged_text:
                        content.append(merged_text)
                        merged_text = ""
                    content.extend(text)
                continue

            if not node.is_element:
                continue

            tag_name = node.name.lower()
            config = self.registry.get_tag(tag_name)
            if config is None:
                self._report("unknown-tag", f"Dropped unknown element <{tag_name}>", node=node)
                continue

            if merged_text:
                content.append(merged_text)
                merged_text = ""

            if config.rule is TagRule.DENY:
                self._report("denied-tag", f"Dropped disallowed element <{tag_name}>", node=node)
                continue

            if no_html or not can_render_child(parent_config, config):
                if not no_html and config.rule is not TagRule.PASS_THROUGH:
                    self._report(
                        "flattened-tag",
                        f"Flattened <{tag_name}> inside <{parent_config.tag_name}>",
                        node=node,
                    )
                content.extend(self.parse_node(node, config))
                continue

            key = self._next_key()
            attributes = extract_attributes(
                node,
                self.registry,
                self.filters,
                self._report if self.collect_errors else None,
            )
            content.append(ElementNode(key, tag_name, attributes, self.parse_node(node, config)))

        if merged_text:
            content.append(merged_text)

        return content

    def _next_key(self) -> int:
        return next(self._keys)

    def _report(self, code: str, message: str, *, node: Any | None = None) -> None:
        if not self.collect_errors:
            return
        line = getattr(node, "origin_line", None)
        column = getattr(node, "origin_column", None)
        self.errors.append(ParseError(code, line=line, column=column, category="sanitize", message=message))
