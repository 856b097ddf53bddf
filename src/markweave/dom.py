class SimpleDomNode:
    """Inert DOM node produced by document ingestion.

    - name: tag name for elements, or "#document", "#document-fragment",
      "#comment", "!doctype"
    - attrs: ordered dict of attributes (None for comments and doctypes)
    - children: ordered list of child nodes (None for comments and doctypes)
    - data: comment text or Doctype for leaf nodes
    """

    __slots__ = ("attrs", "children", "data", "name", "origin_column", "origin_line", "parent")

    def __init__(self, name, attrs=None, data=None, origin_line=None, origin_column=None):
        self.name = name
        self.parent = None
        self.data = data
        self.origin_line = origin_line
        self.origin_column = origin_column

        if name == "#comment" or name == "!doctype":
            self.children = None
            self.attrs = None
        else:
            self.children = []
            self.attrs = attrs if attrs is not None else {}

    @property
    def is_element(self):
        return not (self.name.startswith("#") or self.name == "!doctype")

    def append_child(self, node):
        self.children.append(node)
        node.parent = self

    @property
    def text_content(self):
        if self.children is None:
            return ""
        return "".join(child.text_content for child in self.children)

    def to_test_format(self, indent=0):
        if self.name in {"#document", "#document-fragment"}:
            parts = [child.to_test_format(0) for child in self.children]
            return "\n".join(part for part in parts if part)
        if self.name == "#comment":
            return f"| {' ' * indent}<!-- {self.data or ''} -->"
        if self.name == "!doctype":
            name = self.data.name if self.data and self.data.name else ""
            return f"| <!DOCTYPE {name}>"

        sections = [f"| {' ' * indent}<{self.name}>"]
        padding = " " * (indent + 2)
        for attr_name, attr_value in sorted(self.attrs.items()):
            sections.append(f'| {padding}{attr_name}="{attr_value or ""}"')
        for child in self.children:
            sections.append(child.to_test_format(indent + 2))
        return "\n".join(sections)


class TextNode:
    __slots__ = ("data", "name", "parent")

    def __init__(self, data):
        self.data = data
        self.parent = None
        self.name = "#text"

    is_element = False

    @property
    def text_content(self):
        return self.data or ""

    def to_test_format(self, indent=0):
        return f'| {" " * indent}"{self.data or ""}"'
