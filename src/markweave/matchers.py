"""Text matchers.

A matcher recognizes a substring of a text run (a URL, an email address, a
hashtag) and turns it into an inline element. `apply_matchers` runs every
eligible matcher over a text run and splices the resulting elements between
the literal pieces of text, left to right.

A match only ever covers text no earlier match has claimed, and matcher
output is never matched again. Matchers search the whole text run from a
start position, so their lookbehinds see the characters around a claimed
span.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from .nodes import ElementNode
from .registry import DEFAULT_REGISTRY, TagRule, can_render_child

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from .nodes import Node
    from .registry import Registry, TagConfig


@dataclass(frozen=True, slots=True)
class MatchResult:
    """The first match a matcher found in a piece of text.

    `start` is the offset of `match` within the whole text. When it is None,
    the first occurrence of `match` at or after the search position is used.
    """

    match: str
    props: dict[str, Any] = field(default_factory=dict)
    start: int | None = None


class Matcher:
    """Base class for text matchers.

    Subclasses set `name` and `tag_name` and implement `match` and
    `create_element`. `match` must report only the first match starting at
    or after `pos`; the pipeline calls it again from the end of that match.
    Text before `pos` is context for lookbehinds, never part of a match.
    """

    name: str = ""
    tag_name: str = ""

    @property
    def inverse_name(self) -> str:
        """Props flag that disables this matcher (`no_<name>`)."""
        return f"no_{self.name}"

    def match(self, text: str, pos: int = 0) -> MatchResult | None:
        raise NotImplementedError

    def create_element(self, match: str, props: dict[str, Any]) -> ElementNode:
        raise NotImplementedError


class RegexMatcher(Matcher):
    """Matcher driven by a single compiled pattern."""

    pattern: ClassVar[re.Pattern[str]]

    def match(self, text: str, pos: int = 0) -> MatchResult | None:
        m = self.pattern.search(text, pos)
        if m is None:
            return None
        return MatchResult(m.group(0), self.props_for(m), start=m.start())

    def props_for(self, m: re.Match[str]) -> dict[str, Any]:
        return {}


def _link(key: int, href: str, text: str, props: Mapping[str, Any]) -> ElementNode:
    attributes: dict[str, str | bool | float] = {"href": href}
    if props.get("new_window"):
        attributes["target"] = "_blank"
        attributes["rel"] = "noopener noreferrer"
    return ElementNode(key, "a", attributes, [text])


_TRAILING_PUNCTUATION = ".,:;!?'\")]}"
_OPENERS = {")": "(", "]": "[", "}": "{"}


def _trim_url(url: str) -> str:
    # A closing bracket stays when the URL holds its opener: /wiki/Foo_(bar)
    while url and url[-1] in _TRAILING_PUNCTUATION:
        opener = _OPENERS.get(url[-1])
        if opener is not None and url.count(opener) >= url.count(url[-1]):
            break
        url = url[:-1]
    return url


class UrlMatcher(RegexMatcher):
    """Link bare `http(s)://` and `www.`-style URLs."""

    name = "url"
    tag_name = "a"
    pattern = re.compile(
        r"(?<![@\w.\-/])"
        r"(?:(?P<scheme>https?)://|(?=www\.))"
        r"(?P<host>(?:[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?\.)+[a-z]{2,63})"
        r"(?P<port>:\d{1,5})?"
        r"(?P<path>[/?#][^\s<>\"']*)?",
        re.IGNORECASE,
    )

    def match(self, text: str, pos: int = 0) -> MatchResult | None:
        m = self.pattern.search(text, pos)
        if m is None:
            return None
        url = _trim_url(m.group(0))
        props = self.props_for(m)
        props["url"] = url
        return MatchResult(url, props, start=m.start())

    def props_for(self, m: re.Match[str]) -> dict[str, Any]:
        return {
            "scheme": (m.group("scheme") or "http").lower(),
            "host": m.group("host"),
        }

    def create_element(self, match: str, props: dict[str, Any]) -> ElementNode:
        href = match if "://" in match else f"{props.get('scheme', 'http')}://{match}"
        return _link(props["key"], href, match, props)


class EmailMatcher(RegexMatcher):
    """Link email addresses with a `mailto:` href."""

    name = "email"
    tag_name = "a"
    pattern = re.compile(
        r"(?<![\w.%+\-])"
        r"(?P<username>[a-z0-9._%+\-]+)@"
        r"(?P<host>(?:[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?\.)+[a-z]{2,63})",
        re.IGNORECASE,
    )

    def props_for(self, m: re.Match[str]) -> dict[str, Any]:
        return {
            "email": m.group(0),
            "username": m.group("username"),
            "host": m.group("host"),
        }

    def create_element(self, match: str, props: dict[str, Any]) -> ElementNode:
        return _link(props["key"], f"mailto:{match}", match, props)


class HashtagMatcher(RegexMatcher):
    """Link `#hashtag` words.

    The href comes from the `hashtag_url` prop: either a template where
    `{{hashtag}}` is replaced by the tag (without `#`) or a callable taking
    the tag. Without it the hashtag links to itself.
    """

    name = "hashtag"
    tag_name = "a"
    # At least one non-digit so "#1" is left alone
    pattern = re.compile(r"(?<![\w#&])#(?P<hashtag>[\w\-]*[a-z_][\w\-]*)", re.IGNORECASE)

    def props_for(self, m: re.Match[str]) -> dict[str, Any]:
        return {"hashtag": m.group("hashtag")}

    def create_element(self, match: str, props: dict[str, Any]) -> ElementNode:
        hashtag = props.get("hashtag") or match.lstrip("#")
        url = props.get("hashtag_url") or "#{{hashtag}}"
        href = url(hashtag) if callable(url) else str(url).replace("{{hashtag}}", hashtag)
        return _link(props["key"], href, match, props)


def apply_matchers(
    text: str,
    parent_config: TagConfig | None,
    matchers: Sequence[Matcher],
    props: Mapping[str, Any],
    next_key: Callable[[], int],
    registry: Registry = DEFAULT_REGISTRY,
) -> str | list[Node]:
    """Run `matchers` over `text` and splice in the elements they create.

    Returns `text` unchanged when nothing matched, otherwise the sequence of
    literal text pieces and elements in their original order. Keys are taken
    from `next_key` in matcher order, then left to right.
    """

    if not text or not matchers:
        return text

    # (offset, length, element) for every claimed span
    spans: list[tuple[int, int, ElementNode]] = []
    # (start, end) regions of `text` no matcher has claimed yet
    free: list[tuple[int, int]] = [(0, len(text))]

    for matcher in matchers:
        if props.get(matcher.inverse_name):
            continue

        config = registry.get_tag(matcher.tag_name)
        if config is None or config.rule is TagRule.DENY or not can_render_child(parent_config, config):
            continue

        remaining: list[tuple[int, int]] = []
        for region_start, region_end in free:
            cursor = region_start
            while cursor < region_end:
                # The whole text goes in so lookbehinds see claimed neighbours
                result = matcher.match(text, cursor)
                if result is None or not result.match:
                    break

                matched = result.match
                start = result.start if result.start is not None else text.find(matched, cursor)
                end = start + len(matched)
                if start < cursor or end > region_end or text[start:end] != matched:
                    break

                if start > cursor:
                    remaining.append((cursor, start))

                element = matcher.create_element(matched, {**props, **result.props, "key": next_key()})
                spans.append((start, len(matched), element))
                cursor = end

            if cursor < region_end:
                remaining.append((cursor, region_end))
        free = remaining

    if not spans:
        return text

    spans.sort(key=lambda span: span[0])
    out: list[Node] = []
    pos = 0
    for start, length, element in spans:
        if start > pos:
            out.append(text[pos:start])
        out.append(element)
        pos = start + length
    if pos < len(text):
        out.append(text[pos:])
    return out
