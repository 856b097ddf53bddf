from __future__ import annotations

import math
import unittest

from markweave.attributes import cast_number, extract_attributes, is_unsafe_value
from markweave.dom import SimpleDomNode, TextNode
from markweave.filters import FunctionFilter
from markweave.registry import DEFAULT_REGISTRY, AttributeRule, Registry, TagConfig


def _node(name: str, **attrs: str) -> SimpleDomNode:
    return SimpleDomNode(name, dict(attrs))


class TestExtractAttributes(unittest.TestCase):
    def test_allowed_attributes_are_kept(self) -> None:
        node = SimpleDomNode("a", {"href": "/x", "title": "T", "target": "_blank"})
        assert extract_attributes(node) == {"href": "/x", "title": "T", "target": "_blank"}

    def test_prop_names_are_remapped(self) -> None:
        node = SimpleDomNode("td", {"class": "c", "colspan": "2", "datetime": "d"})
        assert extract_attributes(node) == {"className": "c", "colSpan": 2.0, "dateTime": "d"}

    def test_unknown_and_denied_attributes_are_dropped(self) -> None:
        node = SimpleDomNode("div", {"data-foo": "1", "style": "color: red", "id": "x"})
        assert extract_attributes(node) == {"id": "x"}

    def test_event_handlers_are_dropped(self) -> None:
        registry = Registry(
            tags={"div": TagConfig()},
            attributes={"onclick": AttributeRule.CAST_STRING},
        )
        node = SimpleDomNode("div", {"onclick": "go()", "onmouseover": "go()"})
        assert extract_attributes(node, registry) == {}

    def test_executable_uris_are_dropped(self) -> None:
        for value in (
            "javascript:alert(1)",
            "JaVaScRiPt:alert(1)",
            "java\tscript:alert(1)",
            "java\nscript:alert(1)",
            "vbscript:msgbox",
            "xss:x",
            "  javascript:alert(1)",
        ):
            assert extract_attributes(_node("a", href=value)) == {}, value

    def test_safe_uris_are_kept(self) -> None:
        assert extract_attributes(_node("a", href="https://example.com/?q=script")) == {
            "href": "https://example.com/?q=script"
        }

    def test_aria_attributes_bypass_the_allow_list(self) -> None:
        node = SimpleDomNode("div", {"aria-label": "Close", "ARIA-hidden": "true"})
        assert extract_attributes(node) == {"aria-label": "Close", "aria-hidden": "true"}

    def test_aria_attributes_are_still_checked_for_unsafe_values(self) -> None:
        assert extract_attributes(_node("div", **{"aria-describedby": "javascript:x"})) == {}

    def test_boolean_cast(self) -> None:
        assert extract_attributes(_node("details", open="open")) == {"open": True}
        assert extract_attributes(_node("details", open="true")) == {"open": True}
        assert extract_attributes(_node("details", open="")) == {"open": False}
        assert extract_attributes(_node("details", open="yes")) == {"open": False}

    def test_number_cast(self) -> None:
        assert extract_attributes(_node("img", width="100")) == {"width": 100.0}
        assert extract_attributes(_node("img", width="12.5px")) == {"width": 12.5}
        value = extract_attributes(_node("img", width="wide"))["width"]
        assert isinstance(value, float)
        assert math.isnan(value)

    def test_filters_run_before_casting(self) -> None:
        filters = [
            FunctionFilter("href", lambda value: value.replace("http:", "https:")),
            FunctionFilter("width", lambda value: "50"),
        ]
        node = SimpleDomNode("img", {"width": "10"})
        assert extract_attributes(node, DEFAULT_REGISTRY, filters) == {"width": 50.0}
        node = SimpleDomNode("a", {"href": "http://example.com"})
        assert extract_attributes(node, DEFAULT_REGISTRY, filters) == {"href": "https://example.com"}

    def test_filter_output_is_checked_for_unsafe_values(self) -> None:
        filters = [FunctionFilter("href", lambda value: "javascript:" + value)]
        assert extract_attributes(_node("a", href="x"), DEFAULT_REGISTRY, filters) == {}

    def test_non_elements_have_no_attributes(self) -> None:
        assert extract_attributes(TextNode("x")) == {}  # type: ignore[arg-type]
        assert extract_attributes(SimpleDomNode("#comment", data="x")) == {}

    def test_drops_are_reported(self) -> None:
        reports: list[str] = []

        def report(code: str, message: str, *, node=None) -> None:
            reports.append(code)

        node = SimpleDomNode("a", {"onclick": "x", "style": "x", "href": "javascript:x", "title": "ok"})
        assert extract_attributes(node, DEFAULT_REGISTRY, (), report) == {"title": "ok"}
        assert reports == ["event-handler-attribute", "denied-attribute", "unsafe-attribute-value"]


class TestHelpers(unittest.TestCase):
    def test_cast_number(self) -> None:
        assert cast_number("3") == 3.0
        assert cast_number("  -4.5e1abc") == -45.0
        assert cast_number(".5") == 0.5
        assert cast_number("Infinity") == math.inf
        assert math.isnan(cast_number(""))
        assert math.isnan(cast_number("px10"))

    def test_is_unsafe_value(self) -> None:
        assert is_unsafe_value("javascript:void(0)")
        assert is_unsafe_value("java\x00script:x")
        assert not is_unsafe_value("/path/to/script.js")


if __name__ == "__main__":
    unittest.main()
