"""Attribute value filters.

A filter rewrites the raw string value of one attribute before it is cast.
Filters run in registration order and each sees the previous one's output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


class Filter:
    """Base class for attribute filters.

    Subclasses set `attribute` (lowercase) and override `filter`.
    """

    attribute: str

    def filter(self, value: str) -> str:
        return value


@dataclass(frozen=True, slots=True)
class FunctionFilter(Filter):
    """Wrap a plain callable as a filter for one attribute."""

    attribute: str
    func: Callable[[str], str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "attribute", str(self.attribute).lower())

    def filter(self, value: str) -> str:
        return self.func(value)


def apply_filters(filters: Iterable[Filter], attribute: str, value: str) -> str:
    """Run every filter registered for `attribute` over `value`, in order."""

    attribute = attribute.lower()
    for f in filters:
        if f.attribute == attribute:
            value = f.filter(value)
    return value
