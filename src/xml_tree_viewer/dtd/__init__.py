"""DTD grammar loading and skeleton document generation."""

from .grammar import (
    AttributeDecl,
    AttributeDefault,
    ContentModel,
    ContentModelType,
    DTDGrammar,
    ElementDecl,
    parse_grammar,
)
from .skeleton import (
    NO_ELEMENTS_MESSAGE,
    SkeletonBuilder,
    build_skeleton,
    escape_attribute,
    infer_root_element,
    normalize_dtd_source,
)

__all__ = [
    "AttributeDecl",
    "AttributeDefault",
    "ContentModel",
    "ContentModelType",
    "DTDGrammar",
    "ElementDecl",
    "parse_grammar",
    "NO_ELEMENTS_MESSAGE",
    "SkeletonBuilder",
    "build_skeleton",
    "escape_attribute",
    "infer_root_element",
    "normalize_dtd_source",
]
