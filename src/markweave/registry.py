"""Tag and attribute allow-list registry.

The registry is data: which tags may be rendered and how they nest, which
attributes survive extraction and how their values are cast, and which
attributes are exposed under a different property name. Deployments can
swap in a stricter or looser `Registry`; the parser only reads it.

All tag and attribute names are ASCII-lowercase.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum


class TagRule(Enum):
    ALLOW = "allow"
    # Dropped together with its whole subtree
    DENY = "deny"
    # Never materialized; its children are spliced into the parent
    PASS_THROUGH = "pass_through"


class TagType(Enum):
    INLINE = "inline"
    BLOCK = "block"
    NONE = "none"


class AttributeRule(Enum):
    DENY = "deny"
    CAST_BOOL = "bool"
    CAST_NUMBER = "number"
    CAST_STRING = "string"


@dataclass(frozen=True, slots=True)
class TagConfig:
    """Structural rule for one tag.

    - `children`: when non-empty, the only tags allowed as direct children.
    - `self_nesting`: whether the tag may contain itself.
    - `block` / `inline`: whether block / inline children are allowed.
    - `tag_name`: filled in by `Registry` from the table key.
    """

    rule: TagRule = TagRule.ALLOW
    type: TagType = TagType.NONE
    children: Collection[str] = field(default_factory=frozenset)
    self_nesting: bool = True
    block: bool = True
    inline: bool = True
    tag_name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.children, frozenset):
            object.__setattr__(self, "children", frozenset(str(name).lower() for name in self.children))


@dataclass(frozen=True, slots=True)
class Registry:
    """Allow-list tables consulted read-only during a parse.

    - Tags missing from `tags` are unknown: dropped with their subtree.
    - Attributes missing from `attributes` are dropped (except `aria-*`).
    - `attributes_to_props` renames attributes in the output (class -> className).
    - `root_tag` names the entry used as the parent config of the content root.
    """

    tags: Mapping[str, TagConfig]
    attributes: Mapping[str, AttributeRule]
    attributes_to_props: Mapping[str, str] = field(default_factory=dict)
    root_tag: str = "body"

    def __post_init__(self) -> None:
        # Normalize keys and stamp each config with its own tag name.
        tags: dict[str, TagConfig] = {}
        for name, config in self.tags.items():
            name = str(name).lower()
            tags[name] = config if config.tag_name == name else replace(config, tag_name=name)
        object.__setattr__(self, "tags", tags)

        object.__setattr__(
            self,
            "attributes",
            {str(name).lower(): rule for name, rule in self.attributes.items()},
        )
        object.__setattr__(
            self,
            "attributes_to_props",
            {str(name).lower(): str(prop) for name, prop in self.attributes_to_props.items()},
        )
        object.__setattr__(self, "root_tag", str(self.root_tag).lower())

    def get_tag(self, tag_name: str) -> TagConfig | None:
        return self.tags.get(tag_name.lower())

    def get_attribute_rule(self, attribute: str) -> AttributeRule | None:
        return self.attributes.get(attribute.lower())

    def get_prop_name(self, attribute: str) -> str:
        attribute = attribute.lower()
        return self.attributes_to_props.get(attribute, attribute)

    @property
    def root_config(self) -> TagConfig:
        config = self.tags.get(self.root_tag)
        if config is None:
            return TagConfig(tag_name=self.root_tag)
        return config


def can_render_child(parent: TagConfig | None, child: TagConfig | None) -> bool:
    """Return whether `child` may be materialized directly under `parent`.

    Rules are checked in a fixed order and the first decisive one wins, so a
    pass-through child is rejected even when the parent lists it as allowed.
    """

    if parent is None or child is None or not parent.tag_name or not child.tag_name:
        return False

    if child.rule is TagRule.PASS_THROUGH:
        return False

    if parent.children and child.tag_name not in parent.children:
        return False

    if not parent.self_nesting and parent.tag_name == child.tag_name:
        return False

    if not parent.block and child.type is TagType.BLOCK:
        return False

    if not parent.inline and child.type is TagType.INLINE:
        return False

    return True


def _inline(**kwargs: object) -> TagConfig:
    return TagConfig(type=TagType.INLINE, block=False, **kwargs)  # type: ignore[arg-type]


def _block(**kwargs: object) -> TagConfig:
    return TagConfig(type=TagType.BLOCK, **kwargs)  # type: ignore[arg-type]


def _void(tag_type: TagType) -> TagConfig:
    return TagConfig(type=tag_type, block=False, inline=False)


_DENY = TagConfig(rule=TagRule.DENY)
_PASS_THROUGH = TagConfig(rule=TagRule.PASS_THROUGH)

DEFAULT_TAGS: dict[str, TagConfig] = {
    # Root
    "body": TagConfig(rule=TagRule.PASS_THROUGH),
    # Sectioning and grouping
    "article": _block(),
    "aside": _block(),
    "blockquote": _block(),
    "details": _block(),
    "div": _block(),
    "figure": _block(),
    "footer": _block(),
    "header": _block(),
    "main": _block(),
    "nav": _block(),
    "section": _block(),
    # Text blocks (inline content only)
    "address": _block(block=False),
    "figcaption": _block(block=False),
    "h1": _block(block=False),
    "h2": _block(block=False),
    "h3": _block(block=False),
    "h4": _block(block=False),
    "h5": _block(block=False),
    "h6": _block(block=False),
    "p": _block(block=False, self_nesting=False),
    "pre": _block(block=False),
    "summary": _block(block=False),
    # Lists
    "ul": _block(children=["li"]),
    "ol": _block(children=["li"]),
    "li": _block(self_nesting=False),
    "dl": _block(children=["dt", "dd"]),
    "dt": _block(block=False),
    "dd": _block(),
    # Tables
    "table": _block(children=["caption", "colgroup", "thead", "tbody", "tfoot", "tr"]),
    "caption": _block(block=False),
    "colgroup": _block(children=["col"]),
    "col": _void(TagType.NONE),
    "thead": _block(children=["tr"]),
    "tbody": _block(children=["tr"]),
    "tfoot": _block(children=["tr"]),
    "tr": _block(children=["th", "td"]),
    "th": _block(),
    "td": _block(),
    # Phrasing
    "a": _inline(self_nesting=False),
    "abbr": _inline(),
    "b": _inline(),
    "bdi": _inline(),
    "bdo": _inline(),
    "cite": _inline(),
    "code": _inline(),
    "data": _inline(),
    "del": _inline(),
    "dfn": _inline(),
    "em": _inline(),
    "i": _inline(),
    "ins": _inline(),
    "kbd": _inline(),
    "mark": _inline(),
    "q": _inline(),
    "s": _inline(),
    "samp": _inline(),
    "small": _inline(),
    "span": _inline(),
    "strong": _inline(),
    "sub": _inline(),
    "sup": _inline(),
    "time": _inline(),
    "u": _inline(),
    "var": _inline(),
    # Void
    "br": _void(TagType.INLINE),
    "hr": _void(TagType.BLOCK),
    "img": _void(TagType.INLINE),
    "wbr": _void(TagType.INLINE),
    # Presentational wrappers: keep the content, drop the wrapper
    "acronym": _PASS_THROUGH,
    "big": _PASS_THROUGH,
    "center": _PASS_THROUGH,
    "font": _PASS_THROUGH,
    "html": _PASS_THROUGH,
    "nobr": _PASS_THROUGH,
    "strike": _PASS_THROUGH,
    "tt": _PASS_THROUGH,
    # Executable, interactive or resource-loading
    "applet": _DENY,
    "base": _DENY,
    "button": _DENY,
    "canvas": _DENY,
    "dialog": _DENY,
    "embed": _DENY,
    "form": _DENY,
    "frame": _DENY,
    "frameset": _DENY,
    "head": _DENY,
    "iframe": _DENY,
    "input": _DENY,
    "link": _DENY,
    "math": _DENY,
    "meta": _DENY,
    "noscript": _DENY,
    "object": _DENY,
    "option": _DENY,
    "script": _DENY,
    "select": _DENY,
    "style": _DENY,
    "svg": _DENY,
    "template": _DENY,
    "textarea": _DENY,
    "title": _DENY,
}

DEFAULT_ATTRIBUTES: dict[str, AttributeRule] = {
    "abbr": AttributeRule.CAST_STRING,
    "alt": AttributeRule.CAST_STRING,
    "cite": AttributeRule.CAST_STRING,
    "class": AttributeRule.CAST_STRING,
    "cols": AttributeRule.CAST_NUMBER,
    "colspan": AttributeRule.CAST_NUMBER,
    "datetime": AttributeRule.CAST_STRING,
    "dir": AttributeRule.CAST_STRING,
    "headers": AttributeRule.CAST_STRING,
    "height": AttributeRule.CAST_NUMBER,
    "hidden": AttributeRule.CAST_BOOL,
    "href": AttributeRule.CAST_STRING,
    "id": AttributeRule.CAST_STRING,
    "lang": AttributeRule.CAST_STRING,
    "open": AttributeRule.CAST_BOOL,
    "reversed": AttributeRule.CAST_BOOL,
    "role": AttributeRule.CAST_STRING,
    "rows": AttributeRule.CAST_NUMBER,
    "rowspan": AttributeRule.CAST_NUMBER,
    "scope": AttributeRule.CAST_STRING,
    "span": AttributeRule.CAST_NUMBER,
    "src": AttributeRule.CAST_STRING,
    "srcset": AttributeRule.DENY,
    "start": AttributeRule.CAST_NUMBER,
    "style": AttributeRule.DENY,
    "target": AttributeRule.CAST_STRING,
    "title": AttributeRule.CAST_STRING,
    "type": AttributeRule.CAST_STRING,
    "value": AttributeRule.CAST_NUMBER,
    "width": AttributeRule.CAST_NUMBER,
}

DEFAULT_ATTRIBUTES_TO_PROPS: dict[str, str] = {
    "class": "className",
    "colspan": "colSpan",
    "datetime": "dateTime",
    "for": "htmlFor",
    "rowspan": "rowSpan",
}

DEFAULT_REGISTRY: Registry = Registry(
    tags=DEFAULT_TAGS,
    attributes=DEFAULT_ATTRIBUTES,
    attributes_to_props=DEFAULT_ATTRIBUTES_TO_PROPS,
)
