from .attributes import extract_attributes
from .document import Document, create_document
from .filters import Filter, FunctionFilter, apply_filters
from .markup import markup
from .matchers import EmailMatcher, HashtagMatcher, Matcher, MatchResult, RegexMatcher, UrlMatcher, apply_matchers
from .nodes import ElementNode
from .parser import Parser
from .registry import (
    DEFAULT_REGISTRY,
    AttributeRule,
    Registry,
    TagConfig,
    TagRule,
    TagType,
    can_render_child,
)
from .serialize import to_html, to_test_format
from .tokens import ParseError

__all__ = [
    "DEFAULT_REGISTRY",
    "AttributeRule",
    "Document",
    "ElementNode",
    "EmailMatcher",
    "Filter",
    "FunctionFilter",
    "HashtagMatcher",
    "MatchResult",
    "Matcher",
    "ParseError",
    "Parser",
    "RegexMatcher",
    "Registry",
    "TagConfig",
    "TagRule",
    "TagType",
    "UrlMatcher",
    "apply_filters",
    "apply_matchers",
    "can_render_child",
    "create_document",
    "extract_attributes",
    "markup",
    "to_html",
    "to_test_format",
]
