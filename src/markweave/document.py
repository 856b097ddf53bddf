"""Document ingestion entry point."""

from .tokenizer import Tokenizer, TokenizerOpts
from .treebuilder import TreeBuilder


def is_full_document(markup):
    return markup[:9].upper() == "<!DOCTYPE"


class Document:
    """An inert, detached DOM for `markup`.

    Markup starting with a doctype is parsed as a full document; anything
    else is parsed as a fragment straight into a body container. Either way
    `root` is the body whose children are the visible content.
    """

    __slots__ = ("document", "errors", "root", "tokenizer", "tree_builder")

    def __init__(self, markup, *, collect_errors=False, tokenizer_opts=None):
        markup = markup or ""
        self.tree_builder = TreeBuilder(fragment=not is_full_document(markup), collect_errors=collect_errors)
        opts = tokenizer_opts or TokenizerOpts(collect_errors=collect_errors)
        self.tokenizer = Tokenizer(self.tree_builder, opts)
        self.tokenizer.run(markup)
        self.document = self.tree_builder.finish()
        self.root = self.tree_builder.content_root()
        self.errors = self.tree_builder.errors


def create_document(markup, *, collect_errors=False):
    """Parse `markup` and return its content root (a body container)."""
    return Document(markup, collect_errors=collect_errors).root
