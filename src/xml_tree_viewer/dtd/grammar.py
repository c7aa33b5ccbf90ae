"""DTD grammar model built on lxml's DTD parser.

lxml exposes libxml2's declaration objects directly; this module copies what
the skeleton builder needs into small immutable records so the rest of the
package never touches libxml2 types.
"""

import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from lxml import etree

from xml_tree_viewer.shared import ParseError, get_logger

logger = get_logger(__name__, component="dtd_grammar")


class ContentModelType(Enum):
    """Kind of content an element declaration allows."""

    EMPTY = "empty"
    ANY = "any"
    PCDATA = "pcdata"
    MIXED = "mixed"
    CHILDREN = "children"


class AttributeDefault(Enum):
    """Default declaration of an attribute."""

    REQUIRED = "#REQUIRED"
    IMPLIED = "#IMPLIED"
    FIXED = "#FIXED"
    DEFAULT = "default"


_ATTRIBUTE_DEFAULTS = {
    "required": AttributeDefault.REQUIRED,
    "implied": AttributeDefault.IMPLIED,
    "fixed": AttributeDefault.FIXED,
    "none": AttributeDefault.DEFAULT,
}


@dataclass(frozen=True)
class ContentModel:
    """Content model of one element declaration.

    Attributes:
        type: Content model classification
        children: Child element names in first-seen order, without duplicates
    """

    type: ContentModelType
    children: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AttributeDecl:
    """A single attribute declared in an ATTLIST."""

    name: str
    default: AttributeDefault
    default_value: str = ""


@dataclass(frozen=True)
class ElementDecl:
    """An element declaration with its content model and attributes."""

    name: str
    content_model: ContentModel
    attributes: Tuple[AttributeDecl, ...] = ()


@dataclass
class DTDGrammar:
    """Element declarations of a DTD in declaration order.

    Attributes:
        elements: Element declarations keyed by qualified name
    """

    elements: Dict[str, ElementDecl] = field(default_factory=dict)

    @classmethod
    def from_lxml(cls, dtd: etree.DTD) -> "DTDGrammar":
        """Build a grammar from a parsed lxml DTD.

        Elements that are only mentioned by an ATTLIST and never declared
        with ``<!ELEMENT>`` are left out.
        """
        declared = [e for e in dtd.iterelements() if e.type != "undefined"]
        resolve = _reference_resolver(_qualified_name(e) for e in declared)

        grammar = cls()
        for element in declared:
            name = _qualified_name(element)
            grammar.elements[name] = ElementDecl(
                name=name,
                content_model=_content_model(element, resolve),
                attributes=tuple(_attribute_decl(attr) for attr in element.iterattributes()),
            )
        return grammar

    @property
    def element_names(self) -> List[str]:
        """Declared element names in declaration order."""
        return list(self.elements)

    def has_element(self, name: str) -> bool:
        return name in self.elements

    def get_element(self, name: str) -> Optional[ElementDecl]:
        return self.elements.get(name)

    def get_content_model(self, name: str) -> Optional[ContentModel]:
        decl = self.elements.get(name)
        return decl.content_model if decl else None

    def get_attributes(self, name: str) -> Tuple[AttributeDecl, ...]:
        decl = self.elements.get(name)
        return decl.attributes if decl else ()

    def __len__(self) -> int:
        return len(self.elements)


def parse_grammar(dtd_text: str) -> DTDGrammar:
    """Parse DTD declarations into a grammar.

    Args:
        dtd_text: Bare DTD declarations (no DOCTYPE wrapper)

    Returns:
        Parsed grammar, possibly without any element declarations

    Raises:
        ParseError: If lxml cannot parse the declarations
    """
    try:
        dtd = etree.DTD(io.StringIO(dtd_text))
    except etree.DTDParseError as e:
        message = str(e) or "invalid declarations"
        raise ParseError(f"DTD parse error: {message}") from e

    grammar = DTDGrammar.from_lxml(dtd)
    logger.debug("DTD grammar parsed", extra={"element_count": len(grammar)})
    return grammar


def _qualified_name(decl: object) -> str:
    prefix = getattr(decl, "prefix", None)
    if prefix:
        return f"{prefix}:{decl.name}"
    return decl.name


def _reference_resolver(declared_names: Iterable[str]) -> Callable[[str], str]:
    """Map content-model references back to declared qualified names.

    libxml2 keeps the prefix of a content-model reference apart from its
    local name and lxml only exposes the local part. A reference resolves to
    the declaration with the same name, or else to the single prefixed
    declaration sharing its local name.
    """
    exact = set()
    by_local: Dict[str, List[str]] = {}
    for name in declared_names:
        exact.add(name)
        by_local.setdefault(name.rpartition(":")[2], []).append(name)

    def resolve(local_name: str) -> str:
        if local_name in exact:
            return local_name
        candidates = by_local.get(local_name, [])
        if len(candidates) == 1:
            return candidates[0]
        return local_name

    return resolve


def _content_model(
    element: "etree._DTDElementDecl", resolve: Callable[[str], str]
) -> ContentModel:
    children = _dedupe(resolve(name) for name in _iter_child_names(element.content))

    if element.type == "empty":
        return ContentModel(ContentModelType.EMPTY)
    if element.type == "any":
        return ContentModel(ContentModelType.ANY)
    if element.type == "mixed":
        # (#PCDATA) alone is text-only; (#PCDATA|a|b)* is mixed
        if not children:
            return ContentModel(ContentModelType.PCDATA)
        return ContentModel(ContentModelType.MIXED, children)
    return ContentModel(ContentModelType.CHILDREN, children)


def _iter_child_names(node: Optional["etree._DTDContentDecl"]) -> Iterator[str]:
    if node is None:
        return
    if node.type == "element":
        yield node.name
        return
    yield from _iter_child_names(node.left)
    yield from _iter_child_names(node.right)


def _dedupe(names: Iterator[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(names))


def _attribute_decl(attribute: "etree._DTDAttributeDecl") -> AttributeDecl:
    return AttributeDecl(
        name=_qualified_name(attribute),
        default=_ATTRIBUTE_DEFAULTS.get(attribute.default, AttributeDefault.DEFAULT),
        default_value=attribute.default_value or "",
    )
