"""Minimal XML instance generation from a DTD.

The builder walks the grammar from an inferred root element and emits one
indented element per declared child, so the result shows the shape a valid
document would take without any real content.
"""

import re
from typing import FrozenSet, List, Optional

from xml_tree_viewer.dtd.grammar import (
    AttributeDecl,
    AttributeDefault,
    ContentModelType,
    DTDGrammar,
    parse_grammar,
)
from xml_tree_viewer.shared import GrammarError, SkeletonConfig, get_logger

NO_ELEMENTS_MESSAGE = "No <!ELEMENT ...> declarations found in DTD."

_XML_DECLARATION_RE = re.compile(r"<\?xml[\s\S]*?\?>", re.IGNORECASE)
_INTERNAL_SUBSET_RE = re.compile(r"<!DOCTYPE[\s\S]*?\[([\s\S]*?)\]\s*>", re.IGNORECASE)
_ELEMENT_DECL_RE = re.compile(r"<!ELEMENT\s")

_ATTRIBUTE_ESCAPES = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ("'", "&apos;"),
)


def normalize_dtd_source(source: str) -> str:
    """Reduce DTD source text to bare declarations.

    XML declarations are removed. When the remaining text is a DOCTYPE with
    an internal subset, only the subset is kept.

    Args:
        source: DTD file contents or a document carrying a DOCTYPE

    Returns:
        Declarations ready for grammar parsing
    """
    without_declaration = _XML_DECLARATION_RE.sub("", source).strip()
    subset = _INTERNAL_SUBSET_RE.search(without_declaration)
    if subset and subset.group(1).strip():
        return subset.group(1).strip()
    return without_declaration


def infer_root_element(grammar: DTDGrammar) -> str:
    """Pick the element most likely to be the document root.

    Args:
        grammar: Parsed grammar with at least one element declaration

    Returns:
        The first declared element that no content model references as a
        declared child, or the first declared element when every element is
        referenced (cyclic grammars)
    """
    names = grammar.element_names
    if not names:
        raise GrammarError(NO_ELEMENTS_MESSAGE)

    referenced = set()
    for name in names:
        model = grammar.get_content_model(name)
        if model is None:
            continue
        referenced.update(child for child in model.children if grammar.has_element(child))

    for name in names:
        if name not in referenced:
            return name
    return names[0]


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    for char, entity in _ATTRIBUTE_ESCAPES:
        value = value.replace(char, entity)
    return value


class SkeletonBuilder:
    """Build an indented XML skeleton from a DTD grammar.

    Examples:
        >>> grammar = parse_grammar("<!ELEMENT root (item)> <!ELEMENT item EMPTY>")
        >>> print(SkeletonBuilder(grammar).build())
        <root>
          <item/>
        </root>
    """

    def __init__(
        self,
        grammar: DTDGrammar,
        config: Optional[SkeletonConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.grammar = grammar
        self.config = config or SkeletonConfig()
        self.logger = get_logger(__name__, correlation_id, "skeleton")

    def build(self, root_name: Optional[str] = None) -> str:
        """Build the skeleton document.

        Args:
            root_name: Element to start from, inferred when omitted

        Returns:
            Skeleton XML text without a trailing newline

        Raises:
            GrammarError: If the grammar declares no elements
        """
        if not len(self.grammar):
            raise GrammarError(NO_ELEMENTS_MESSAGE)

        if root_name is None:
            root_name = infer_root_element(self.grammar)
        self.logger.debug("Building skeleton", extra={"root_element": root_name})

        return self._build_element(root_name, frozenset(), 0)

    def _build_element(self, name: str, ancestors: FrozenSet[str], depth: int) -> str:
        indent = self.config.indent * depth
        attributes = self._build_attributes(name)
        self_closing = f"{indent}<{name}{attributes}/>"
        text_only = f"{indent}<{name}{attributes}>{self.config.placeholder_text}</{name}>"

        if name in ancestors:
            self.logger.debug("Content model cycle", extra={"element": name, "depth": depth})
            return self_closing

        model = self.grammar.get_content_model(name)
        if model is None or model.type is ContentModelType.EMPTY:
            return self_closing
        if model.type is ContentModelType.PCDATA:
            return text_only

        children = [child for child in model.children if self.grammar.has_element(child)]
        if not children:
            if model.type in (ContentModelType.ANY, ContentModelType.MIXED):
                return text_only
            return self_closing

        nested = ancestors | {name}
        rendered = [self._build_element(child, nested, depth + 1) for child in children]
        return "\n".join([f"{indent}<{name}{attributes}>", *rendered, f"{indent}</{name}>"])

    def _build_attributes(self, name: str) -> str:
        rendered: List[str] = []
        for attribute in self.grammar.get_attributes(name):
            value = _attribute_value(attribute)
            if value is not None:
                rendered.append(f'{attribute.name}="{value}"')
        if not rendered:
            return ""
        return " " + " ".join(rendered)


def build_skeleton(
    dtd_text: str,
    config: Optional[SkeletonConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Generate a minimal XML document from DTD text.

    Args:
        dtd_text: DTD file contents, optionally wrapped in a DOCTYPE
        config: Optional skeleton configuration
        correlation_id: Optional correlation id for log records

    Returns:
        Indented skeleton XML text

    Raises:
        ParseError: If the declarations cannot be parsed
        GrammarError: If no element is declared
    """
    declarations = normalize_dtd_source(dtd_text)
    if not _ELEMENT_DECL_RE.search(declarations):
        raise GrammarError(NO_ELEMENTS_MESSAGE)

    grammar = parse_grammar(declarations)
    return SkeletonBuilder(grammar, config, correlation_id).build()


def _attribute_value(attribute: AttributeDecl) -> Optional[str]:
    if attribute.default is AttributeDefault.IMPLIED:
        return None
    if attribute.default is AttributeDefault.REQUIRED:
        return ""
    if attribute.default_value:
        return escape_attribute(attribute.default_value)
    return None
