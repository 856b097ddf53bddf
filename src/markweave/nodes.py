"""Output nodes produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class ElementNode:
    """A sanitized element ready for a rendering layer.

    `key` is unique within one parse and increases in creation order.
    `attributes` holds cast values under their output (prop) names.
    """

    key: int
    tag_name: str
    attributes: dict[str, str | bool | float] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    @property
    def text_content(self) -> str:
        return "".join(child if isinstance(child, str) else child.text_content for child in self.children)


Node = Union[str, ElementNode]
