"""Order-preserving XML parsing.

Key Components:
    OrderedXMLParser: lxml-backed producer of ordered item lists
    parse_ordered: Convenience function using a default parser
    decode_document: Byte decoding by BOM or declared encoding
"""

from .ordered import (
    ATTRIBUTE_PREFIX,
    ATTRIBUTES_KEY,
    DECLARATION_PREFIX,
    TEXT_KEY,
    OrderedItem,
    OrderedXMLParser,
    decode_document,
    detect_encoding,
    parse_ordered,
)

__all__ = [
    "ATTRIBUTE_PREFIX",
    "ATTRIBUTES_KEY",
    "DECLARATION_PREFIX",
    "TEXT_KEY",
    "OrderedItem",
    "OrderedXMLParser",
    "decode_document",
    "detect_encoding",
    "parse_ordered",
]
