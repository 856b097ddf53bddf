from __future__ import annotations

import unittest

from markweave import (
    DEFAULT_REGISTRY,
    ElementNode,
    EmailMatcher,
    FunctionFilter,
    HashtagMatcher,
    ParseError,
    Parser,
    Registry,
    TagConfig,
    TagRule,
    TagType,
    UrlMatcher,
)

MOCK_MARKUP = """<!DOCTYPE html>
<html>
<head>
  <title>Test</title>
</head>
<body>
  <main role="main">
    Main content
    <div>
      <a href="#">Link</a>
      <span class="foo">String</span>
    </div>
  </main>
  <aside id="sidebar">
    Sidebar content
  </aside>
</body>
</html>"""


def _keys(nodes):
    keys = []
    for node in nodes:
        if isinstance(node, ElementNode):
            keys.append(node.key)
            keys.extend(_keys(node.children))
    return keys


class TestParser(unittest.TestCase):
    def test_parses_the_document_body(self) -> None:
        assert Parser(MOCK_MARKUP).parse() == [
            "\n  ",
            ElementNode(
                0,
                "main",
                {"role": "main"},
                [
                    "\n    Main content\n    ",
                    ElementNode(
                        1,
                        "div",
                        {},
                        [
                            "\n      ",
                            ElementNode(2, "a", {"href": "#"}, ["Link"]),
                            "\n      ",
                            ElementNode(3, "span", {"className": "foo"}, ["String"]),
                            "\n    ",
                        ],
                    ),
                    "\n  ",
                ],
            ),
            "\n  ",
            ElementNode(4, "aside", {"id": "sidebar"}, ["\n    Sidebar content\n  "]),
            "\n\n",
        ]

    def test_parses_a_fragment(self) -> None:
        markup = (
            '<main role="main"><div><a href="#">Link</a> <span class="foo">String</span></div></main>'
            '<aside id="sidebar">Sidebar content</aside>'
        )
        assert Parser(markup).parse() == [
            ElementNode(
                0,
                "main",
                {"role": "main"},
                [
                    ElementNode(
                        1,
                        "div",
                        {},
                        [
                            ElementNode(2, "a", {"href": "#"}, ["Link"]),
                            " ",
                            ElementNode(3, "span", {"className": "foo"}, ["String"]),
                        ],
                    ),
                ],
            ),
            ElementNode(4, "aside", {"id": "sidebar"}, ["Sidebar content"]),
        ]

    def test_empty_input(self) -> None:
        assert Parser("").parse() == []
        assert Parser(None).parse() == []

    def test_parse_is_cached(self) -> None:
        parser = Parser("<b>x</b>")
        assert parser.parse() is parser.parse()
        assert _keys(parser.parse()) == [0]

    def test_deterministic(self) -> None:
        markup = "<p>Hi <b>there</b> https://example.com <i>and</i> #tag</p>"
        matchers = [UrlMatcher(), HashtagMatcher()]
        assert Parser(markup, {}, matchers).parse() == Parser(markup, {}, matchers).parse()

    def test_keys_have_no_gaps(self) -> None:
        markup = "<ul><li>one https://a.io</li><li>two <b>x@y.io</b></li></ul><p><em>#tag</em></p>"
        nodes = Parser(markup, {}, [UrlMatcher(), EmailMatcher(), HashtagMatcher()]).parse()
        keys = _keys(nodes)
        assert sorted(keys) == list(range(len(keys)))
        assert len(keys) == 9

    def test_plain_text(self) -> None:
        assert Parser("just text").parse() == ["just text"]
        assert Parser("a &amp; b &lt;c&gt;").parse() == ["a & b <c>"]

    def test_text_is_never_reparsed_as_markup(self) -> None:
        assert Parser("&lt;script&gt;alert(1)&lt;/script&gt;").parse() == ["<script>alert(1)</script>"]

    def test_unknown_tags_are_dropped_with_children(self) -> None:
        assert Parser("a<blink>hidden <b>x</b></blink>b").parse() == ["ab"]

    def test_denied_tags_are_dropped_with_children(self) -> None:
        assert Parser("a<script>alert(1)</script>b").parse() == ["a", "b"]
        assert Parser('<p>x<iframe src="//evil"></iframe></p>').parse() == [ElementNode(0, "p", {}, ["x"])]
        assert Parser("<form><b>x</b></form>y").parse() == ["y"]

    def test_pass_through_children_are_spliced(self) -> None:
        assert Parser("<font>hello <b>x</b></font>").parse() == ["hello ", ElementNode(0, "b", {}, ["x"])]
        assert Parser("<center><center>x</center></center>").parse() == ["x"]

    def test_block_under_no_block_parent_is_flattened(self) -> None:
        assert Parser("<span><div>Hi <b>there</b></div></span>").parse() == [
            ElementNode(0, "span", {}, ["Hi ", ElementNode(1, "b", {}, ["there"])]),
        ]

    def test_disallowed_children_are_flattened(self) -> None:
        assert Parser("<ul><p>x</p><li>y</li></ul>").parse() == [
            ElementNode(0, "ul", {}, ["x", ElementNode(1, "li", {}, ["y"])]),
        ]

    def test_links_do_not_nest(self) -> None:
        nodes = Parser('<a href="/a"><a href="/b">x</a></a>').parse()
        assert nodes == [ElementNode(0, "a", {"href": "/a"}, ["x"])]

    def test_event_handlers_and_executable_uris_are_removed(self) -> None:
        nodes = Parser('<a href="javascript:alert(1)" onclick="x()" title="t">x</a>').parse()
        assert nodes == [ElementNode(0, "a", {"title": "t"}, ["x"])]

    def test_no_html_flattens_everything(self) -> None:
        nodes = Parser("<p>Hello <b>world</b></p><script>x</script>", {"no_html": True}).parse()
        assert all(isinstance(node, str) for node in nodes)
        assert "".join(nodes) == "Hello world"

    def test_no_html_still_runs_matchers(self) -> None:
        nodes = Parser("<p>see https://a.io</p>", {"no_html": True}, [UrlMatcher()]).parse()
        assert nodes == ["see ", ElementNode(0, "a", {"href": "https://a.io"}, ["https://a.io"])]

    def test_matchers_in_text(self) -> None:
        nodes = Parser("<p>Mail me@example.org or see https://example.com</p>", {}, [UrlMatcher(), EmailMatcher()]).parse()
        assert nodes == [
            ElementNode(
                0,
                "p",
                {},
                [
                    "Mail ",
                    ElementNode(2, "a", {"href": "mailto:me@example.org"}, ["me@example.org"]),
                    " or see ",
                    ElementNode(1, "a", {"href": "https://example.com"}, ["https://example.com"]),
                ],
            ),
        ]

    def test_matcher_flushes_pending_text(self) -> None:
        nodes = Parser("a<blink>b</blink> #tag", {}, [HashtagMatcher()]).parse()
        assert nodes == ["a", " ", ElementNode(0, "a", {"href": "#tag"}, ["#tag"])]

    def test_matchers_skip_text_inside_links(self) -> None:
        nodes = Parser('<a href="/x">https://a.io</a>', {}, [UrlMatcher()]).parse()
        assert nodes == [ElementNode(0, "a", {"href": "/x"}, ["https://a.io"])]

    def test_matcher_disabled_by_prop(self) -> None:
        assert Parser("#tag", {"no_hashtag": True}, [HashtagMatcher()]).parse() == ["#tag"]

    def test_props_are_forwarded_to_matchers(self) -> None:
        nodes = Parser("#tag", {"hashtag_url": "/t/{{hashtag}}"}, [HashtagMatcher()]).parse()
        assert nodes == [ElementNode(0, "a", {"href": "/t/tag"}, ["#tag"])]

    def test_filters(self) -> None:
        filters = [FunctionFilter("href", lambda value: value.replace("http://", "https://"))]
        nodes = Parser('<a href="http://a.io">x</a>', filters=filters).parse()
        assert nodes == [ElementNode(0, "a", {"href": "https://a.io"}, ["x"])]

    def test_custom_registry(self) -> None:
        registry = Registry(
            tags={
                "body": TagConfig(),
                "b": TagConfig(type=TagType.INLINE),
                "i": TagConfig(rule=TagRule.PASS_THROUGH),
                "div": TagConfig(rule=TagRule.DENY),
            },
            attributes={},
        )
        nodes = Parser('<b class="x">1</b><i>2</i><div>3</div><p>4</p>', registry=registry).parse()
        assert nodes == [ElementNode(0, "b", {}, ["1"]), "2"]

    def test_comments_are_ignored(self) -> None:
        assert Parser("a<!-- hidden -->b").parse() == ["ab"]

    def test_default_registry_is_not_mutated(self) -> None:
        before = dict(DEFAULT_REGISTRY.tags)
        Parser("<p>x</p>").parse()
        assert DEFAULT_REGISTRY.tags == before


class TestParserErrors(unittest.TestCase):
    def test_no_errors_by_default(self) -> None:
        parser = Parser('<p onclick="x">a</p><blink></blink>')
        parser.parse()
        assert parser.errors == []

    def test_sanitizer_decisions_are_collected(self) -> None:
        parser = Parser(
            '<p onclick="x()" style="color:red">a</p><span><div>b</div></span>'
            "<blink>c</blink><script>d</script><a href=\"javascript:x\">e</a>",
            collect_errors=True,
        )
        parser.parse()
        sanitize = [e for e in parser.errors if e.category == "sanitize"]
        assert [e.code for e in sanitize] == [
            "event-handler-attribute",
            "denied-attribute",
            "flattened-tag",
            "unknown-tag",
            "denied-tag",
            "unsafe-attribute-value",
        ]
        assert all(isinstance(e, ParseError) for e in sanitize)
        assert sanitize[0].line == 1
        assert sanitize[0].column == 1

    def test_tokenizer_errors_are_collected(self) -> None:
        parser = Parser("<p>\x00</p>", collect_errors=True)
        assert "unexpected-null-character" in [e.code for e in parser.errors]


if __name__ == "__main__":
    unittest.main()
