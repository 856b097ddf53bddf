from __future__ import annotations

import unittest

from markweave.registry import (
    DEFAULT_REGISTRY,
    AttributeRule,
    Registry,
    TagConfig,
    TagRule,
    TagType,
    can_render_child,
)


def _config(name: str, **kwargs) -> TagConfig:
    return TagConfig(tag_name=name, **kwargs)


class TestRegistry(unittest.TestCase):
    def test_registry_normalizes_names(self) -> None:
        registry = Registry(
            tags={"DIV": TagConfig(type=TagType.BLOCK, children=["P", "Span"])},
            attributes={"Title": AttributeRule.CAST_STRING},
            attributes_to_props={"CLASS": "className"},
        )
        config = registry.get_tag("div")
        assert config is not None
        assert config.tag_name == "div"
        assert config.children == frozenset({"p", "span"})
        assert registry.get_tag("DIV") is config
        assert registry.get_attribute_rule("TITLE") is AttributeRule.CAST_STRING
        assert registry.get_prop_name("class") == "className"

    def test_lookups_for_unknown_names(self) -> None:
        assert DEFAULT_REGISTRY.get_tag("blink") is None
        assert DEFAULT_REGISTRY.get_attribute_rule("data-foo") is None
        assert DEFAULT_REGISTRY.get_prop_name("href") == "href"

    def test_default_tables(self) -> None:
        assert DEFAULT_REGISTRY.get_tag("script").rule is TagRule.DENY
        assert DEFAULT_REGISTRY.get_tag("font").rule is TagRule.PASS_THROUGH
        assert DEFAULT_REGISTRY.get_tag("span").type is TagType.INLINE
        assert DEFAULT_REGISTRY.get_tag("div").type is TagType.BLOCK
        assert DEFAULT_REGISTRY.get_attribute_rule("style") is AttributeRule.DENY
        assert DEFAULT_REGISTRY.get_attribute_rule("width") is AttributeRule.CAST_NUMBER
        assert DEFAULT_REGISTRY.get_prop_name("class") == "className"
        assert DEFAULT_REGISTRY.get_prop_name("colspan") == "colSpan"

    def test_root_config(self) -> None:
        assert DEFAULT_REGISTRY.root_config.tag_name == "body"
        registry = Registry(tags={}, attributes={}, root_tag="Section")
        assert registry.root_config.tag_name == "section"
        assert registry.root_config.block

    def test_tag_config_is_frozen(self) -> None:
        config = DEFAULT_REGISTRY.get_tag("div")
        with self.assertRaises(AttributeError):
            config.block = False  # type: ignore[misc]


class TestCanRenderChild(unittest.TestCase):
    def test_missing_tag_name(self) -> None:
        assert can_render_child(TagConfig(), _config("span")) is False
        assert can_render_child(_config("div"), TagConfig()) is False
        assert can_render_child(None, _config("span")) is False

    def test_pass_through_child_is_never_rendered(self) -> None:
        parent = _config("div", children=["font"])
        assert can_render_child(parent, _config("font", rule=TagRule.PASS_THROUGH)) is False

    def test_allowed_children(self) -> None:
        parent = _config("ul", children=["li"])
        assert can_render_child(parent, _config("li")) is True
        assert can_render_child(parent, _config("p")) is False

    def test_self_nesting(self) -> None:
        parent = _config("a", self_nesting=False)
        assert can_render_child(parent, _config("a")) is False
        assert can_render_child(_config("div"), _config("div")) is True

    def test_block_and_inline_children(self) -> None:
        no_block = _config("p", block=False)
        no_inline = _config("hr", inline=False)
        assert can_render_child(no_block, _config("div", type=TagType.BLOCK)) is False
        assert can_render_child(no_block, _config("b", type=TagType.INLINE)) is True
        assert can_render_child(no_inline, _config("b", type=TagType.INLINE)) is False
        assert can_render_child(no_inline, _config("div", type=TagType.BLOCK)) is True

    def test_rule_order(self) -> None:
        # Allowed-children check runs before the block check
        parent = _config("p", block=False, children=["div"])
        assert can_render_child(parent, _config("div", type=TagType.BLOCK)) is False
        # Self nesting is decided before type checks
        parent = _config("li", self_nesting=False)
        assert can_render_child(parent, _config("li", type=TagType.BLOCK)) is False

    def test_default_nesting(self) -> None:
        tags = DEFAULT_REGISTRY.get_tag
        assert can_render_child(tags("ul"), tags("li"))
        assert not can_render_child(tags("ul"), tags("p"))
        assert not can_render_child(tags("span"), tags("div"))
        assert can_render_child(tags("span"), tags("b"))
        assert not can_render_child(tags("a"), tags("a"))
        assert not can_render_child(tags("br"), tags("b"))
        assert can_render_child(DEFAULT_REGISTRY.root_config, tags("main"))


if __name__ == "__main__":
    unittest.main()
