import re

from .constants import RAWTEXT_ELEMENTS, RCDATA_ELEMENTS
from .entities import decode_entities_in_text
from .tokens import (
    CharacterTokens,
    CommentToken,
    Doctype,
    DoctypeToken,
    EOFToken,
    ParseError,
    Tag,
)

_WHITESPACE = ("\t", "\n", "\f", " ")
_ATTR_VALUE_DOUBLE_PATTERN = re.compile(r'["&\n\0]')
_ATTR_VALUE_SINGLE_PATTERN = re.compile(r"['&\n\0]")
_ATTR_VALUE_UNQUOTED_PATTERN = re.compile(r"[\t\n\f >&\"'<=`\0]")
_COMMENT_END_PATTERN = re.compile(r"--!?>")


class TokenizerOpts:
    __slots__ = ("collect_errors", "discard_bom")

    def __init__(self, collect_errors=False, discard_bom=True):
        self.collect_errors = bool(collect_errors)
        self.discard_bom = bool(discard_bom)


class Tokenizer:
    """Inert HTML tokenizer.

    Turns a string into Tag/character/comment/doctype tokens pushed into a
    sink (`sink.process_token(token)`). It only reads the input buffer: no
    script is run and no resource referenced by the markup is fetched.
    """

    DATA = 0
    TAG_OPEN = 1
    END_TAG_OPEN = 2
    TAG_NAME = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    AFTER_ATTRIBUTE_NAME = 6
    BEFORE_ATTRIBUTE_VALUE = 7
    ATTRIBUTE_VALUE_DOUBLE = 8
    ATTRIBUTE_VALUE_SINGLE = 9
    ATTRIBUTE_VALUE_UNQUOTED = 10
    SELF_CLOSING_START_TAG = 11
    MARKUP_DECLARATION_OPEN = 12
    COMMENT = 13
    BOGUS_COMMENT = 14
    DOCTYPE = 15
    RAWTEXT = 16
    PLAINTEXT = 17

    __slots__ = (
        "buffer",
        "column_anchor",
        "current_attr_name",
        "current_attr_value",
        "current_attr_value_has_amp",
        "current_char",
        "current_comment",
        "current_tag_attrs",
        "current_tag_kind",
        "current_tag_line",
        "current_tag_pos",
        "current_tag_name",
        "current_tag_self_closing",
        "length",
        "line",
        "opts",
        "pos",
        "rawtext_end_pattern",
        "rawtext_tag_name",
        "sink",
        "state",
        "text_buffer",
    )

    def __init__(self, sink, opts=None):
        self.sink = sink
        self.opts = opts or TokenizerOpts()

        self.state = self.DATA
        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.current_char = ""
        self.line = 1
        self.column_anchor = (0, 0)

        self.text_buffer = []
        self.current_tag_name = []
        self.current_tag_attrs = {}
        self.current_tag_kind = Tag.START
        self.current_tag_line = 1
        self.current_tag_pos = 0
        self.current_tag_self_closing = False
        self.current_attr_name = []
        self.current_attr_value = []
        self.current_attr_value_has_amp = False
        self.current_comment = []
        self.rawtext_tag_name = None
        self.rawtext_end_pattern = None

    def run(self, html):
        if html and html[0] == "\ufeff" and self.opts.discard_bom:
            html = html[1:]

        # Newline normalization up front keeps every state handler CR-free
        html = html or ""
        if "\r" in html:
            html = html.replace("\r\n", "\n").replace("\r", "\n")

        self.buffer = html
        self.length = len(html)
        self.pos = 0
        self.line = 1
        self.current_char = ""
        self.column_anchor = (0, 0)
        self.state = self.DATA
        self.text_buffer.clear()
        self.current_comment.clear()
        self.rawtext_tag_name = None
        self.rawtext_end_pattern = None
        self._start_tag(Tag.START)

        while True:
            state = self.state
            if state == self.DATA:
                if self._state_data():
                    break
            elif state == self.TAG_OPEN:
                if self._state_tag_open():
                    break
            elif state == self.END_TAG_OPEN:
                if self._state_end_tag_open():
                    break
            elif state == self.TAG_NAME:
                if self._state_tag_name():
                    break
            elif state == self.BEFORE_ATTRIBUTE_NAME:
                if self._state_before_attribute_name():
                    break
            elif state == self.ATTRIBUTE_NAME:
                if self._state_attribute_name():
                    break
            elif state == self.AFTER_ATTRIBUTE_NAME:
                if self._state_after_attribute_name():
                    break
            elif state == self.BEFORE_ATTRIBUTE_VALUE:
                if self._state_before_attribute_value():
                    break
            elif state == self.ATTRIBUTE_VALUE_DOUBLE:
                if self._state_attribute_value_quoted('"', _ATTR_VALUE_DOUBLE_PATTERN):
                    break
            elif state == self.ATTRIBUTE_VALUE_SINGLE:
                if self._state_attribute_value_quoted("'", _ATTR_VALUE_SINGLE_PATTERN):
                    break
            elif state == self.ATTRIBUTE_VALUE_UNQUOTED:
                if self._state_attribute_value_unquoted():
                    break
            elif state == self.SELF_CLOSING_START_TAG:
                if self._state_self_closing_start_tag():
                    break
            elif state == self.MARKUP_DECLARATION_OPEN:
                if self._state_markup_declaration_open():
                    break
            elif state == self.COMMENT:
                if self._state_comment():
                    break
            elif state == self.BOGUS_COMMENT:
                if self._state_bogus_comment():
                    break
            elif state == self.DOCTYPE:
                if self._state_doctype():
                    break
            elif state == self.RAWTEXT:
                if self._state_rawtext():
                    break
            elif state == self.PLAINTEXT:
                if self._state_plaintext():
                    break
            else:
                # Unknown state fallback to data.
                self.state = self.DATA

    # ---------------------
    # State handlers
    # ---------------------

    def _state_data(self):
        buffer = self.buffer
        pos = self.pos
        end = buffer.find("<", pos)
        if end == -1:
            end = self.length
        if end > pos:
            self._append_text_chunk(buffer[pos:end])
        if end >= self.length:
            self.pos = self.length
            self._emit_eof()
            return True
        self.pos = end + 1
        self.current_char = "<"
        self.state = self.TAG_OPEN
        return False

    def _state_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-before-tag-name")
            self.text_buffer.append("<")
            self._emit_eof()
            return True
        if c == "!":
            self.state = self.MARKUP_DECLARATION_OPEN
            return False
        if c == "/":
            self.state = self.END_TAG_OPEN
            return False
        if c == "?":
            self._emit_error("unexpected-question-mark-instead-of-tag-name")
            self.current_comment.clear()
            self._reconsume_current()
            self.state = self.BOGUS_COMMENT
            return False
        if c.isascii() and c.isalpha():
            self._start_tag(Tag.START)
            self._append_tag_name(c)
            self.state = self.TAG_NAME
            return False

        self._emit_error("invalid-first-character-of-tag-name")
        self.text_buffer.append("<")
        self._reconsume_current()
        self.state = self.DATA
        return False

    def _state_end_tag_open(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-before-tag-name")
            self.text_buffer.append("</")
            self._emit_eof()
            return True
        if c.isascii() and c.isalpha():
            self._start_tag(Tag.END)
            self._append_tag_name(c)
            self.state = self.TAG_NAME
            return False
        if c == ">":
            self._emit_error("missing-end-tag-name")
            self.state = self.DATA
            return False

        self._emit_error("invalid-first-character-of-tag-name")
        self.current_comment.clear()
        self._reconsume_current()
        self.state = self.BOGUS_COMMENT
        return False

    def _state_tag_name(self):
        while True:
            c = self._get_char()
            if c is None:
                # The unfinished tag is discarded
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                self.state = self.BEFORE_ATTRIBUTE_NAME
                return False
            if c == "/":
                self.state = self.SELF_CLOSING_START_TAG
                return False
            if c == ">":
                self._emit_current_tag()
                return False
            if c == "\0":
                self._emit_error("unexpected-null-character")
                c = "\ufffd"
            self._append_tag_name(c)

    def _state_before_attribute_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                continue
            if c == "/":
                self.state = self.SELF_CLOSING_START_TAG
                return False
            if c == ">":
                self._emit_current_tag()
                return False
            if c == "=":
                self._emit_error("unexpected-equals-sign-before-attribute-name")
            self._start_attribute()
            self._append_attr_name(c)
            self.state = self.ATTRIBUTE_NAME
            return False

    def _state_attribute_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                self.state = self.AFTER_ATTRIBUTE_NAME
                return False
            if c == "/":
                self._finish_attribute()
                self.state = self.SELF_CLOSING_START_TAG
                return False
            if c == "=":
                self.state = self.BEFORE_ATTRIBUTE_VALUE
                return False
            if c == ">":
                self._emit_current_tag()
                return False
            if c == "\0":
                self._emit_error("unexpected-null-character")
                c = "\ufffd"
            elif c in ('"', "'", "<"):
                self._emit_error("unexpected-character-in-attribute-name")
            self._append_attr_name(c)

    def _state_after_attribute_name(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                continue
            if c == "/":
                self._finish_attribute()
                self.state = self.SELF_CLOSING_START_TAG
                return False
            if c == "=":
                self.state = self.BEFORE_ATTRIBUTE_VALUE
                return False
            if c == ">":
                self._emit_current_tag()
                return False
            self._finish_attribute()
            self._start_attribute()
            self._append_attr_name(c)
            self.state = self.ATTRIBUTE_NAME
            return False

    def _state_before_attribute_value(self):
        while True:
            c = self._get_char()
            if c is None:
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                continue
            if c == '"':
                self.state = self.ATTRIBUTE_VALUE_DOUBLE
                return False
            if c == "'":
                self.state = self.ATTRIBUTE_VALUE_SINGLE
                return False
            if c == ">":
                self._emit_error("missing-attribute-value")
                self._emit_current_tag()
                return False
            self._reconsume_current()
            self.state = self.ATTRIBUTE_VALUE_UNQUOTED
            return False

    def _state_attribute_value_quoted(self, quote, stop_pattern):
        while True:
            if self._consume_attribute_value_run(stop_pattern):
                continue
            c = self._get_char()
            if c is None:
                # The unfinished tag is discarded
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c == quote:
                self._finish_attribute()
                self.state = self.AFTER_ATTRIBUTE_NAME
                return False
            if c == "&":
                self.current_attr_value_has_amp = True
            elif c == "\0":
                self._emit_error("unexpected-null-character")
                c = "\ufffd"
            self.current_attr_value.append(c)

    def _state_attribute_value_unquoted(self):
        while True:
            if self._consume_attribute_value_run(_ATTR_VALUE_UNQUOTED_PATTERN):
                continue
            c = self._get_char()
            if c is None:
                self._emit_error("eof-in-tag")
                self._emit_eof()
                return True
            if c in _WHITESPACE:
                self._finish_attribute()
                self.state = self.BEFORE_ATTRIBUTE_NAME
                return False
            if c == ">":
                self._emit_current_tag()
                return False
            if c == "&":
                self.current_attr_value_has_amp = True
            elif c == "\0":
                self._emit_error("unexpected-null-character")
                c = "\ufffd"
            elif c in ('"', "'", "<", "=", "`"):
                self._emit_error("unexpected-character-in-unquoted-attribute-value")
            self.current_attr_value.append(c)

    def _state_self_closing_start_tag(self):
        c = self._get_char()
        if c is None:
            self._emit_error("eof-in-tag")
            self._emit_eof()
            return True
        if c == ">":
            self.current_tag_self_closing = True
            self._emit_current_tag()
            return False
        self._emit_error("unexpected-solidus-in-tag")
        self._reconsume_current()
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_markup_declaration_open(self):
        if self._consume_if("--"):
            self.state = self.COMMENT
            return False
        if self._consume_case_insensitive("DOCTYPE"):
            self.state = self.DOCTYPE
            return False
        self.current_comment.clear()
        if self._consume_if("[CDATA["):
            # No foreign content here, CDATA is always a bogus comment
            self._emit_error("cdata-in-html-content")
            self.current_comment.append("[CDATA[")
        else:
            self._emit_error("incorrectly-opened-comment")
        self.state = self.BOGUS_COMMENT
        return False

    def _state_comment(self):
        buffer = self.buffer
        pos = self.pos
        # <!--> and <!---> close immediately
        for abrupt in (">", "->"):
            if buffer.startswith(abrupt, pos):
                self._emit_error("abrupt-closing-of-empty-comment")
                self.pos = pos + len(abrupt)
                self._emit_comment("")
                self.state = self.DATA
                return False

        match = _COMMENT_END_PATTERN.search(buffer, pos)
        if match is None:
            data = buffer[pos:]
            self.line += data.count("\n")
            self.pos = self.length
            self._emit_error("eof-in-comment")
            self._emit_comment(data.replace("\0", "\ufffd"))
            self._emit_eof()
            return True

        data = buffer[pos : match.start()]
        self.line += data.count("\n")
        self.pos = match.end()
        if match.group() == "--!>":
            self._emit_error("incorrectly-closed-comment")
        self._emit_comment(data.replace("\0", "\ufffd"))
        self.state = self.DATA
        return False

    def _state_bogus_comment(self):
        buffer = self.buffer
        pos = self.pos
        end = buffer.find(">", pos)
        if end == -1:
            end = self.length
        data = buffer[pos:end]
        self.line += data.count("\n")
        self.current_comment.append(data.replace("\0", "\ufffd"))
        comment = "".join(self.current_comment)
        self.current_comment.clear()
        self._emit_comment(comment)
        if end >= self.length:
            self.pos = self.length
            self._emit_eof()
            return True
        self.pos = end + 1
        self.state = self.DATA
        return False

    def _state_doctype(self):
        buffer = self.buffer
        pos = self.pos
        end = buffer.find(">", pos)
        at_eof = end == -1
        if at_eof:
            end = self.length
            self._emit_error("eof-in-doctype")
        data = buffer[pos:end]
        self.line += data.count("\n")
        parts = data.split()
        name = parts[0].lower() if parts else None
        if name is None:
            self._emit_error("missing-doctype-name")
        self._flush_text()
        self._emit_token(DoctypeToken(Doctype(name)))
        if at_eof:
            self.pos = self.length
            self._emit_eof()
            return True
        self.pos = end + 1
        self.state = self.DATA
        return False

    def _state_rawtext(self):
        buffer = self.buffer
        pos = self.pos
        match = self.rawtext_end_pattern.search(buffer, pos)
        end = match.start() if match else self.length
        if end > pos:
            self._append_text_chunk(buffer[pos:end])
        if match is None:
            self.pos = self.length
            self._emit_error("eof-in-rawtext")
            self._emit_eof()
            return True

        self._flush_text()
        name = self.rawtext_tag_name
        self.rawtext_tag_name = None
        self.rawtext_end_pattern = None
        self.pos = match.end()
        self._start_tag(Tag.END)
        self.current_tag_name.append(name)
        self.state = self.BEFORE_ATTRIBUTE_NAME
        return False

    def _state_plaintext(self):
        if self.pos < self.length:
            self._append_text_chunk(self.buffer[self.pos :])
        self.pos = self.length
        self._emit_eof()
        return True

    # ---------------------
    # Low-level helpers
    # ---------------------

    def _get_char(self):
        if self.pos >= self.length:
            self.current_char = None
            return None
        c = self.buffer[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
        self.current_char = c
        return c

    def _reconsume_current(self):
        if self.current_char is None:
            return
        self.pos -= 1
        if self.current_char == "\n":
            self.line -= 1

    def _flush_text(self):
        if not self.text_buffer:
            return
        data = "".join(self.text_buffer)
        self.text_buffer.clear()
        if not data:
            return
        # RAWTEXT (script, style, ...) and PLAINTEXT keep references verbatim,
        # RCDATA (title, textarea) and normal data decode them
        raw = self.state == self.PLAINTEXT or (
            self.state == self.RAWTEXT and self.rawtext_tag_name not in RCDATA_ELEMENTS
        )
        if not raw and "&" in data:
            data = decode_entities_in_text(data)
        self._emit_token(CharacterTokens(data))

    def _start_tag(self, kind):
        self.current_tag_kind = kind
        self.current_tag_line = self.line
        self.current_tag_pos = self.pos
        self.current_tag_name.clear()
        self.current_tag_attrs = {}
        self.current_tag_self_closing = False
        self._start_attribute()

    def _start_attribute(self):
        self.current_attr_name.clear()
        self.current_attr_value.clear()
        self.current_attr_value_has_amp = False

    def _append_tag_name(self, c):
        if "A" <= c <= "Z":
            c = chr(ord(c) + 32)
        self.current_tag_name.append(c)

    def _append_attr_name(self, c):
        if "A" <= c <= "Z":
            c = chr(ord(c) + 32)
        self.current_attr_name.append(c)

    def _finish_attribute(self):
        if not self.current_attr_name:
            self._start_attribute()
            return
        name = "".join(self.current_attr_name)
        value = "".join(self.current_attr_value)
        if self.current_attr_value_has_amp:
            value = decode_entities_in_text(value, in_attribute=True)
        if name in self.current_tag_attrs:
            self._emit_error("duplicate-attribute")
        else:
            self.current_tag_attrs[name] = value
        self._start_attribute()

    def _append_text_chunk(self, chunk):
        if "\0" in chunk and self.state != self.RAWTEXT:
            self._emit_error("unexpected-null-character", index=self.pos + chunk.index("\0"))
        self.line += chunk.count("\n")
        self.text_buffer.append(chunk)

    def _consume_attribute_value_run(self, stop_pattern):
        pos = self.pos
        if pos >= self.length:
            return False
        match = stop_pattern.search(self.buffer, pos)
        end = match.start() if match else self.length
        if end == pos:
            return False
        chunk = self.buffer[pos:end]
        self.line += chunk.count("\n")
        self.current_attr_value.append(chunk)
        self.pos = end
        return True

    def _emit_current_tag(self):
        self._finish_attribute()
        self._flush_text()
        name = "".join(self.current_tag_name)
        tag = Tag(
            self.current_tag_kind,
            name,
            self.current_tag_attrs,
            self.current_tag_self_closing,
            line=self.current_tag_line,
        )
        if self.opts.collect_errors:
            tag.column = self._column(self.buffer.rfind("<", 0, self.current_tag_pos))
        self.state = self.DATA
        if tag.kind == Tag.START:
            if name in RAWTEXT_ELEMENTS:
                self.state = self.RAWTEXT
                self.rawtext_tag_name = name
                self.rawtext_end_pattern = re.compile(
                    "</" + re.escape(name) + r"(?=[\t\n\f />])",
                    re.IGNORECASE,
                )
            elif name == "plaintext":
                self.state = self.PLAINTEXT
        else:
            if tag.attrs:
                self._emit_error("end-tag-with-attributes")
            if tag.self_closing:
                self._emit_error("end-tag-with-trailing-solidus")
        self._start_tag(Tag.START)
        self._emit_token(tag)

    def _emit_comment(self, data):
        self._flush_text()
        self._emit_token(CommentToken(data))

    def _emit_eof(self):
        self._flush_text()
        self._emit_token(EOFToken())

    def _emit_token(self, token):
        self.sink.process_token(token)

    def _emit_error(self, code, index=None):
        # Points at the last consumed character unless `index` is given
        if not self.opts.collect_errors:
            return
        line = self.line
        if index is None:
            index = max(self.pos - 1, 0)
        elif index > self.pos:
            line += self.buffer.count("\n", self.pos, index)
        self._emit_token(ParseError(code, line=line, column=self._column(index), category="tokenizer"))

    def _column(self, index):
        # 1-based; scans forward from the previous lookup so a run stays linear
        anchor, line_start = self.column_anchor
        if index < anchor:
            return index - self.buffer.rfind("\n", 0, index)
        newline = self.buffer.rfind("\n", anchor, index)
        if newline != -1:
            line_start = newline + 1
        self.column_anchor = (index, line_start)
        return index - line_start + 1

    def _consume_if(self, literal):
        if not self.buffer.startswith(literal, self.pos):
            return False
        self.pos += len(literal)
        return True

    def _consume_case_insensitive(self, literal):
        end = self.pos + len(literal)
        if end > self.length:
            return False
        if self.buffer[self.pos : end].lower() != literal.lower():
            return False
        self.pos = end
        return True
