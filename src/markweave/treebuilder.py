import enum

from .constants import (
    AUTO_CLOSING_TAGS,
    CELL_BOUNDARIES,
    HEAD_ELEMENTS,
    HEADING_ELEMENTS,
    SCOPE_BOUNDARIES,
    TABLE_STRUCTURE_ELEMENTS,
    VOID_ELEMENTS,
)
from .dom import SimpleDomNode, TextNode
from .tokens import CharacterTokens, CommentToken, DoctypeToken, EOFToken, ParseError, Tag, TokenSinkResult

_HTML_WHITESPACE = "\t\n\f\r "


class InsertionMode(enum.IntEnum):
    INITIAL = 0
    IN_HEAD = 1
    AFTER_HEAD = 2
    IN_BODY = 3


def _is_all_whitespace(text):
    return text.strip(_HTML_WHITESPACE) == ""


class TreeBuilder:
    """Builds an inert DOM from tokenizer output.

    Full documents get an implicit html/head/body skeleton; fragments are
    parsed straight into a body container, the way assigning innerHTML on a
    detached document's body does. Recovery is best-effort and never raises.
    """

    __slots__ = (
        "body_element",
        "collect_errors",
        "document",
        "errors",
        "fragment",
        "head_element",
        "html_element",
        "mode",
        "open_elements",
    )

    def __init__(self, fragment=False, collect_errors=False):
        self.fragment = bool(fragment)
        self.collect_errors = bool(collect_errors)
        self.errors = []
        self.open_elements = []
        self.head_element = None
        self.body_element = None
        if self.fragment:
            self.document = SimpleDomNode("#document-fragment")
            self.html_element = None
            self.body_element = SimpleDomNode("body")
            self.document.append_child(self.body_element)
            self.open_elements.append(self.body_element)
            self.mode = InsertionMode.IN_BODY
        else:
            self.document = SimpleDomNode("#document")
            self.html_element = SimpleDomNode("html")
            self.document.append_child(self.html_element)
            self.open_elements.append(self.html_element)
            self.mode = InsertionMode.INITIAL

    @property
    def current_node(self):
        return self.open_elements[-1]

    def _parse_error(self, code, line=None, column=None):
        if self.collect_errors:
            self.errors.append(ParseError(code, line=line, column=column, category="tokenizer"))

    def process_token(self, token):
        if isinstance(token, ParseError):
            self.errors.append(token)
            return TokenSinkResult.Continue

        if isinstance(token, DoctypeToken):
            if self.fragment or self.mode != InsertionMode.INITIAL or self.head_element is not None:
                self._parse_error("unexpected-doctype")
                return TokenSinkResult.Continue
            doctype = SimpleDomNode("!doctype", data=token.doctype)
            doctype.parent = self.document
            self.document.children.insert(0, doctype)
            return TokenSinkResult.Continue

        if isinstance(token, EOFToken):
            if not self.fragment:
                self._ensure_body()
            del self.open_elements[1:]
            return TokenSinkResult.Continue

        mode = self.mode
        if mode == InsertionMode.IN_BODY:
            return self._mode_in_body(token)
        if mode == InsertionMode.IN_HEAD:
            return self._mode_in_head(token)
        return self._mode_before_body(token)

    def finish(self):
        if not self.fragment:
            self._ensure_body()
        return self.document

    def content_root(self):
        """Return the container whose children are the visible content."""
        if not self.fragment:
            self._ensure_body()
        return self.body_element

    # Insertion modes ------------------------------------------------------

    def _mode_before_body(self, token):
        # INITIAL and AFTER_HEAD: leading whitespace is dropped, head content goes to <head>
        if isinstance(token, CharacterTokens):
            data = token.data.lstrip(_HTML_WHITESPACE)
            if not data:
                return TokenSinkResult.Continue
            return self._enter_body(CharacterTokens(data))
        if isinstance(token, CommentToken):
            self.current_node.append_child(SimpleDomNode("#comment", data=token.data))
            return TokenSinkResult.Continue

        name = token.name
        if token.kind == Tag.START:
            if name == "html":
                self._merge_attrs(self.html_element, token.attrs)
                return TokenSinkResult.Continue
            if name == "head" or name in HEAD_ELEMENTS:
                if name == "head" and self.head_element is not None:
                    self._parse_error("unexpected-start-tag", token.line, token.column)
                    return TokenSinkResult.Continue
                self._ensure_head(token.attrs if name == "head" else None)
                self.open_elements.append(self.head_element)
                self.mode = InsertionMode.IN_HEAD
                if name == "head":
                    return TokenSinkResult.Continue
                return self._mode_in_head(token)
            if name == "body":
                self._ensure_body(token.attrs)
                return TokenSinkResult.Continue
            return self._enter_body(token)

        if name == "br":
            return self._enter_body(token)
        if name not in {"head", "body", "html"}:
            self._parse_error("unexpected-end-tag", token.line, token.column)
        return TokenSinkResult.Continue

    def _mode_in_head(self, token):
        current = self.current_node
        if current is not self.head_element:
            # Inside <title>, <style> or <script>: raw text up to the end tag
            if isinstance(token, CharacterTokens):
                current.append_child(TextNode(token.data))
                return TokenSinkResult.Continue
            self.open_elements.pop()
            if isinstance(token, Tag) and token.kind == Tag.END and token.name == current.name:
                return TokenSinkResult.Continue

        if isinstance(token, CharacterTokens) and _is_all_whitespace(token.data):
            self.head_element.append_child(TextNode(token.data))
            return TokenSinkResult.Continue
        if isinstance(token, CommentToken):
            self.head_element.append_child(SimpleDomNode("#comment", data=token.data))
            return TokenSinkResult.Continue
        if isinstance(token, Tag):
            if token.kind == Tag.START and token.name in HEAD_ELEMENTS:
                node = SimpleDomNode(token.name, dict(token.attrs), origin_line=token.line, origin_column=token.column)
                self.head_element.append_child(node)
                if token.name not in VOID_ELEMENTS:
                    self.open_elements.append(node)
                return TokenSinkResult.Continue
            if token.kind == Tag.END and token.name == "head":
                self._leave_head()
                return TokenSinkResult.Continue
        self._leave_head()
        return self._mode_before_body(token)

    def _mode_in_body(self, token):
        if isinstance(token, CharacterTokens):
            self._insert_text(token.data)
            return TokenSinkResult.Continue
        if isinstance(token, CommentToken):
            self.current_node.append_child(SimpleDomNode("#comment", data=token.data))
            return TokenSinkResult.Continue
        if token.kind == Tag.START:
            return self._handle_start_tag(token)
        return self._handle_end_tag(token)

    # Body handlers --------------------------------------------------------

    def _handle_start_tag(self, token):
        name = token.name
        if name in {"html", "body"}:
            target = self.html_element if name == "html" else self.body_element
            if self.fragment:
                self._parse_error("unexpected-start-tag", token.line, token.column)
            else:
                self._merge_attrs(target, token.attrs)
            return TokenSinkResult.Continue
        if name in {"head", "frameset"}:
            self._parse_error("unexpected-start-tag", token.line, token.column)
            return TokenSinkResult.Continue

        self._close_implied(name)
        self._insert_element(token)
        return TokenSinkResult.Continue

    def _handle_end_tag(self, token):
        name = token.name
        if name in {"body", "html"}:
            return TokenSinkResult.Continue
        if name == "br":
            # </br> is treated as <br>
            self._parse_error("unexpected-end-tag", token.line, token.column)
            self._insert_element(Tag(Tag.START, "br", {}, line=token.line, column=token.column))
            return TokenSinkResult.Continue

        index = self._find_in_scope(name)
        if index is None:
            self._parse_error("unexpected-end-tag", token.line, token.column)
            if name == "p":
                # </p> without an open <p> produces an empty paragraph
                self._insert_element(Tag(Tag.START, "p", {}, line=token.line, column=token.column))
                self.open_elements.pop()
            return TokenSinkResult.Continue
        if index != len(self.open_elements) - 1:
            self._parse_error("end-tag-too-early", token.line, token.column)
        del self.open_elements[index:]
        return TokenSinkResult.Continue

    def _close_implied(self, name):
        # Walk down from the current node, ending elements the new tag implicitly closes
        index = len(self.open_elements) - 1
        while index > 0:
            node = self.open_elements[index]
            closers = AUTO_CLOSING_TAGS.get(node.name)
            if closers is not None and name in closers:
                # Headings only auto-close when they are the current node
                if node.name not in HEADING_ELEMENTS or index == len(self.open_elements) - 1:
                    del self.open_elements[index:]
            elif node.name in SCOPE_BOUNDARIES:
                return
            index -= 1

    def _find_in_scope(self, name):
        table_structure = name in TABLE_STRUCTURE_ELEMENTS
        for index in range(len(self.open_elements) - 1, 0, -1):
            node_name = self.open_elements[index].name
            if node_name == name:
                return index
            if table_structure and node_name in CELL_BOUNDARIES:
                continue
            if node_name in SCOPE_BOUNDARIES:
                return None
        return None

    # Insertion helpers ----------------------------------------------------

    def _insert_element(self, token):
        node = SimpleDomNode(token.name, dict(token.attrs), origin_line=token.line, origin_column=token.column)
        self.current_node.append_child(node)
        if token.name not in VOID_ELEMENTS:
            self.open_elements.append(node)
        return node

    def _insert_text(self, data):
        if "\0" in data:
            data = data.replace("\0", "")
        if not data:
            return
        parent = self.current_node
        if parent.children and parent.children[-1].name == "#text":
            parent.children[-1].data += data
            return
        parent.append_child(TextNode(data))

    def _ensure_head(self, attrs=None):
        if self.head_element is None:
            self.head_element = SimpleDomNode("head", dict(attrs or {}))
            self.html_element.append_child(self.head_element)

    def _leave_head(self):
        del self.open_elements[1:]
        self.mode = InsertionMode.AFTER_HEAD

    def _ensure_body(self, attrs=None):
        if self.body_element is None:
            self._ensure_head()
            self.body_element = SimpleDomNode("body", dict(attrs or {}))
            self.html_element.append_child(self.body_element)
            del self.open_elements[1:]
            self.open_elements.append(self.body_element)
            self.mode = InsertionMode.IN_BODY
        elif attrs:
            self._merge_attrs(self.body_element, attrs)

    def _enter_body(self, token):
        self._ensure_body()
        return self._mode_in_body(token)

    @staticmethod
    def _merge_attrs(node, attrs):
        for name, value in attrs.items():
            if name not in node.attrs:
                node.attrs[name] = value
