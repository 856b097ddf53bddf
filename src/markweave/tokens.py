class Tag:
    __slots__ = ("attrs", "column", "kind", "line", "name", "self_closing")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs, self_closing=False, line=None, column=None):
        self.kind = kind
        self.name = name
        self.attrs = attrs if attrs is not None else {}
        self.self_closing = bool(self_closing)
        self.line = line
        self.column = column

    def __repr__(self):
        attrs = " ".join(f"{name}={value!r}" for name, value in self.attrs.items())
        closing = " /" if self.self_closing else ""
        kind_str = "start" if self.kind == self.START else "end"
        return f"<{kind_str}:{self.name}{closing} {attrs}>"


class CharacterTokens:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class CommentToken:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class Doctype:
    __slots__ = ("name",)

    def __init__(self, name=None):
        self.name = name


class DoctypeToken:
    __slots__ = ("doctype",)

    def __init__(self, doctype):
        self.doctype = doctype


class EOFToken:
    __slots__ = ()


class TokenSinkResult:
    __slots__ = ()

    Continue = 0


class ParseError:
    """A diagnostic record: a tokenizer error or a sanitizer drop decision."""

    __slots__ = ("category", "code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, category="tokenizer", message=None):
        self.code = code
        self.line = line
        self.column = column
        self.category = category
        self.message = message or code

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        if self.line is not None:
            return f"ParseError({self.code!r}, line={self.line})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        if self.line is not None:
            location = f"({self.line},{self.column})" if self.column is not None else f"({self.line})"
            if self.message != self.code:
                return f"{location}: {self.code} - {self.message}"
            return f"{location}: {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return (
            self.code == other.code
            and self.line == other.line
            and self.column == other.column
            and self.category == other.category
        )

    __hash__ = None  # Unhashable since we define __eq__
