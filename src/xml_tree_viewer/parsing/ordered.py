"""Order-preserving XML parsing built on lxml.

This module turns document text into the ordered item list consumed by the
tree normalizer. Each item is a single-key mapping:

    {"tag": [child items...], ":@": {"@_name": "value"}}   element
    {"#text": "value"}                                     text run
    {"?xml": [], ":@": {"@_version": "1.0"}}               declaration / PI

The shape matches the "preserve order" output of common JavaScript XML
parsers, so any producer emitting it can replace this one.
"""

import codecs
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from lxml import etree

from xml_tree_viewer.shared import ParseError, ParserConfig, get_logger

ATTRIBUTES_KEY = ":@"
ATTRIBUTE_PREFIX = "@_"
TEXT_KEY = "#text"
DECLARATION_PREFIX = "?"

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# Private wrapper that lets several top-level elements share one parse
_FRAGMENT_TAG = "xml-tree-viewer-fragment"
# Undeclared prefixes are bound on the wrapper so names parse as written
_UNBOUND_PREFIX_URI = "urn:xml-tree-viewer:unbound:"
_RESERVED_PREFIXES = frozenset({"xml", "xmlns"})

_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml\s(.*?)\?>", re.DOTALL)
_PSEUDO_ATTRIBUTE_RE = re.compile(r"([\w.:-]+)\s*=\s*([\"'])(.*?)\2", re.DOTALL)
_DOCTYPE_RE = re.compile(r"<!DOCTYPE\s[^\[>]*(?:\[.*?\]\s*)?>", re.DOTALL | re.IGNORECASE)
_PREFIXED_NAME_RE = re.compile(r"(?<=[<\s/])([A-Za-z_][\w.-]*):[A-Za-z_][\w.-]*")

# Longest marks first so UTF-32 is not taken for UTF-16
_BOM_ENCODINGS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)
_ENCODING_DECLARATION_RE = re.compile(
    rb"^\s*<\?xml\s[^>]*?encoding\s*=\s*[\"']([A-Za-z][\w.:-]*)[\"']"
)

OrderedItem = Dict[str, Any]


class OrderedXMLParser:
    """Parse XML text into an order-preserving list of items.

    Examples:
        >>> OrderedXMLParser().parse('<root id="1">hi</root>')
        [{'root': [{'#text': 'hi'}], ':@': {'@_id': '1'}}]
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        max_input_size_bytes: Optional[int] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.max_input_size_bytes = max_input_size_bytes
        self.logger = get_logger(__name__, correlation_id, "ordered_parser")

    def _make_parser(self) -> etree.XMLParser:
        return etree.XMLParser(
            load_dtd=self.config.load_external_dtd,
            no_network=True,
            huge_tree=False,
            strip_cdata=True,
            remove_blank_text=False,
            remove_comments=False,
            remove_pis=not self.config.keep_processing_instructions,
        )

    def parse(self, content: Union[str, bytes]) -> List[OrderedItem]:
        """Parse document text into ordered items.

        Args:
            content: XML document as text or bytes in a detected encoding

        Returns:
            Ordered list of top-level items, declaration first when present

        Raises:
            ParseError: If the document is empty, too large or not well-formed
        """
        text = decode_document(content)

        if self.max_input_size_bytes is not None:
            size = len(text.encode("utf-8"))
            if size > self.max_input_size_bytes:
                raise ParseError(
                    f"Document is {size} bytes, larger than the "
                    f"{self.max_input_size_bytes} byte limit"
                )

        if not text.strip():
            raise ParseError("Document is empty")

        items: List[OrderedItem] = []
        declaration = _XML_DECLARATION_RE.match(text)
        if declaration:
            items.append(_declaration_item("xml", declaration.group(1)))
            # Blank the declaration out so parser line numbers stay true
            text = re.sub(r"[^\n]", " ", declaration.group(0)) + text[declaration.end():]

        prolog, body = _split_prolog(text)
        wrapper_tag = _FRAGMENT_TAG + _unbound_declarations(body)
        source = f"{prolog}<{wrapper_tag}>{body}</{_FRAGMENT_TAG}>"

        try:
            wrapper = etree.fromstring(source, self._make_parser())
        except etree.XMLSyntaxError as e:
            line, column = e.position if e.position else (None, None)
            self.logger.debug(
                "lxml rejected document",
                extra={"error": e.msg, "line": line, "column": column}
            )
            raise ParseError(f"XML parse error: {e.msg}", line=line, column=column) from e

        if self.config.keep_processing_instructions:
            preceding = [
                node for node in wrapper.itersiblings(preceding=True)
                if node.tag is etree.ProcessingInstruction
            ]
            items.extend(self._pi_item(node) for node in reversed(preceding))

        body_items = self._child_items(wrapper, dict(wrapper.nsmap))
        if not any(_is_element_item(item) for item in body_items):
            raise ParseError("Document has no root element")
        items.extend(body_items)

        self.logger.debug(
            "Ordered parse completed",
            extra={"top_level_items": len(items)}
        )
        return items

    def _child_items(
        self, element: etree._Element, parent_nsmap: Dict[Optional[str], str]
    ) -> List[OrderedItem]:
        items: List[OrderedItem] = []
        self._append_text(items, element.text)

        for child in element:
            if isinstance(child.tag, str):
                items.append(self._element_item(child, parent_nsmap))
            elif child.tag is etree.ProcessingInstruction:
                items.append(self._pi_item(child))
            elif child.tag is etree.Entity:
                self._append_text(items, child.text)
            # Comments are dropped, their tails still belong to the parent
            self._append_text(items, child.tail)

        return items

    def _element_item(
        self, element: etree._Element, parent_nsmap: Dict[Optional[str], str]
    ) -> OrderedItem:
        nsmap = dict(element.nsmap)
        attributes: Dict[str, str] = {}

        for prefix, uri in nsmap.items():
            if parent_nsmap.get(prefix) != uri:
                name = f"xmlns:{prefix}" if prefix else "xmlns"
                attributes[ATTRIBUTE_PREFIX + name] = uri

        prefixes = {uri: prefix for prefix, uri in nsmap.items() if prefix}
        prefixes[XML_NAMESPACE] = "xml"
        for name, value in element.attrib.items():
            attributes[ATTRIBUTE_PREFIX + _prefixed_name(name, prefixes)] = value

        item: OrderedItem = {
            _qualified_tag(element): self._child_items(element, nsmap),
        }
        if attributes:
            item[ATTRIBUTES_KEY] = attributes
        return item

    def _pi_item(self, node: Any) -> OrderedItem:
        children = []
        self._append_text(children, node.text)
        return {DECLARATION_PREFIX + node.target: children}

    def _append_text(self, items: List[OrderedItem], text: Optional[str]) -> None:
        if text is None:
            return
        if self.config.trim_values:
            text = text.strip()
        if text:
            items.append({TEXT_KEY: text})


def parse_ordered(
    content: Union[str, bytes], config: Optional[ParserConfig] = None
) -> List[OrderedItem]:
    """Parse XML text into ordered items with a default parser.

    Args:
        content: XML document text
        config: Optional parser configuration

    Returns:
        Ordered item list
    """
    return OrderedXMLParser(config).parse(content)


def decode_document(content: Union[str, bytes]) -> str:
    """Turn document bytes into text using the detected encoding.

    Raises:
        ParseError: If the encoding is unknown or the bytes do not match it
    """
    if isinstance(content, bytes):
        encoding = detect_encoding(content)
        try:
            content = content.decode(encoding)
        except LookupError as e:
            raise ParseError(f"Unknown document encoding: {encoding}") from e
        except UnicodeDecodeError as e:
            raise ParseError(f"Document is not valid {encoding}: {e}") from e
    return content.lstrip("\ufeff")


def detect_encoding(data: bytes) -> str:
    """Find the encoding of document bytes.

    A byte order mark wins over the encoding named in the XML declaration;
    documents with neither are UTF-8.

    Args:
        data: Raw document bytes

    Returns:
        Codec name suitable for ``bytes.decode``
    """
    for bom, encoding in _BOM_ENCODINGS:
        if data.startswith(bom):
            return encoding
    declaration = _ENCODING_DECLARATION_RE.match(data)
    if declaration:
        return declaration.group(1).decode("ascii")
    return "UTF-8"


def _split_prolog(text: str) -> Tuple[str, str]:
    """Split text at the end of its DOCTYPE so the wrapper can follow it."""
    doctype = _DOCTYPE_RE.search(text)
    if doctype is None:
        return "", text
    before = text[:doctype.start()]
    # Only whitespace, comments and PIs may precede a document type declaration
    if re.search(r"<(?![!?])", before):
        return "", text
    return text[:doctype.end()], text[doctype.end():]


def _unbound_declarations(body: str) -> str:
    """Namespace declarations for every prefix used in the body.

    Prefixes the document declares itself are redeclared on inner elements
    and keep their own URI there.
    """
    prefixes = sorted(
        {match.group(1) for match in _PREFIXED_NAME_RE.finditer(body)} - _RESERVED_PREFIXES
    )
    return "".join(
        f' xmlns:{prefix}="{_UNBOUND_PREFIX_URI}{prefix}"' for prefix in prefixes
    )


def _declaration_item(target: str, body: str) -> OrderedItem:
    attributes = {
        ATTRIBUTE_PREFIX + match.group(1): match.group(3)
        for match in _PSEUDO_ATTRIBUTE_RE.finditer(body)
    }
    item: OrderedItem = {DECLARATION_PREFIX + target: []}
    if attributes:
        item[ATTRIBUTES_KEY] = attributes
    return item


def _qualified_tag(element: etree._Element) -> str:
    local_name = etree.QName(element).localname
    if element.prefix:
        return f"{element.prefix}:{local_name}"
    return local_name


def _prefixed_name(name: str, prefixes: Dict[str, str]) -> str:
    if not name.startswith("{"):
        return name
    qname = etree.QName(name)
    prefix = prefixes.get(qname.namespace or "")
    if prefix:
        return f"{prefix}:{qname.localname}"
    return qname.localname


def _is_element_item(item: OrderedItem) -> bool:
    return any(
        key != ATTRIBUTES_KEY and key != TEXT_KEY
        and not key.startswith(DECLARATION_PREFIX)
        for key in item
    )
