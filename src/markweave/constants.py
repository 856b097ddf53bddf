"""Element tables used by document ingestion.

Elements are kept in ordered lists or sets for membership tests; the
tree builder only needs enough of the HTML insertion rules to give a
browser-shaped tree for ordinary content.

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/syntax.html#optional-tags
"""

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Content is raw text up to the matching end tag; never parsed as markup
RAWTEXT_ELEMENTS = frozenset(
    {
        "iframe",
        "noembed",
        "noframes",
        "script",
        "style",
        "textarea",
        "title",
        "xmp",
    }
)

# Raw text elements whose content still decodes character references
RCDATA_ELEMENTS = frozenset({"textarea", "title"})

# Allowed in <head> when parsing a full document
HEAD_ELEMENTS = frozenset(
    {
        "base",
        "basefont",
        "bgsound",
        "link",
        "meta",
        "noframes",
        "script",
        "style",
        "title",
    }
)

_CLOSES_P = [
    "address",
    "article",
    "aside",
    "blockquote",
    "center",
    "details",
    "dialog",
    "dir",
    "div",
    "dl",
    "dd",
    "dt",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hgroup",
    "hr",
    "li",
    "listing",
    "main",
    "menu",
    "nav",
    "ol",
    "p",
    "plaintext",
    "pre",
    "search",
    "section",
    "summary",
    "table",
    "ul",
]

HEADING_ELEMENTS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# open element -> start tags that implicitly end it
AUTO_CLOSING_TAGS = {
    "p": frozenset(_CLOSES_P),
    "li": frozenset({"li"}),
    "dt": frozenset({"dt", "dd"}),
    "dd": frozenset({"dt", "dd"}),
    "option": frozenset({"option", "optgroup"}),
    "optgroup": frozenset({"optgroup"}),
    "rt": frozenset({"rt", "rp"}),
    "rp": frozenset({"rt", "rp"}),
    "td": frozenset({"td", "th", "tr", "tbody", "thead", "tfoot"}),
    "th": frozenset({"td", "th", "tr", "tbody", "thead", "tfoot"}),
    "tr": frozenset({"tr", "tbody", "thead", "tfoot"}),
    "tbody": frozenset({"tbody", "thead", "tfoot"}),
    "thead": frozenset({"tbody", "thead", "tfoot"}),
    "tfoot": frozenset({"tbody", "thead", "tfoot"}),
    **{heading: frozenset(HEADING_ELEMENTS) for heading in HEADING_ELEMENTS},
}

# Searches for implied or explicit end tags stop at these ancestors
SCOPE_BOUNDARIES = frozenset(
    {
        "applet",
        "body",
        "button",
        "caption",
        "dl",
        "html",
        "marquee",
        "object",
        "ol",
        "select",
        "table",
        "td",
        "template",
        "th",
        "ul",
    }
)

# End tags for table structure look past open cells to find their element
TABLE_STRUCTURE_ELEMENTS = frozenset({"table", "tbody", "tfoot", "thead", "tr"})
CELL_BOUNDARIES = frozenset({"caption", "td", "th"})
