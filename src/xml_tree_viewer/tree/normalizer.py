"""Ordered-item normalization for the XML tree viewer.

This module collapses the verbose, order-preserving parser output (separate
items for elements, attribute carriers, text runs and declarations) into the
uniform XMLNode tree that every renderer consumes.
"""

from collections.abc import Mapping, Sequence
from typing import Any, List, Optional, Tuple

from xml_tree_viewer.parsing.ordered import (
    ATTRIBUTE_PREFIX,
    ATTRIBUTES_KEY,
    DECLARATION_PREFIX,
    TEXT_KEY,
)
from xml_tree_viewer.shared import NormalizerConfig, StructuralError, get_logger
from xml_tree_viewer.tree.node import DOCUMENT_TAG, XMLNode

# Item classifications returned by _item_key
_TEXT = "text"
_DECLARATION = "declaration"
_ELEMENT = "element"


class TreeNormalizer:
    """Convert ordered parser items into a normalized XMLNode tree.

    The normalizer trusts the producer for well-formedness but fails fast with
    StructuralError when an item does not have the expected shape.

    Examples:
        >>> items = [{"root": [{"#text": "hi"}], ":@": {"@_id": "1"}}]
        >>> node = TreeNormalizer().normalize(items)
        >>> node.tag_name, dict(node.attributes), node.text_content
        ('root', {'id': '1'}, 'hi')
    """

    def __init__(
        self,
        config: Optional[NormalizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or NormalizerConfig()
        self.logger = get_logger(__name__, correlation_id, "normalizer")

    def normalize(self, items: Sequence) -> XMLNode:
        """Normalize a document's ordered items into a single root node.

        Args:
            items: Top-level ordered items of the document

        Returns:
            The only top-level element, or a synthetic document node wrapping
            several top-level elements

        Raises:
            StructuralError: If an item violates the ordered item schema or
                the document has no element at all
        """
        roots = self._normalize_items(_as_item_list(items, "document"))

        if not roots:
            raise StructuralError("Document contains no elements", item=items)

        if len(roots) == 1:
            root = roots[0]
        else:
            root = XMLNode(tag_name=DOCUMENT_TAG, children=tuple(roots))

        self.logger.debug(
            "Normalized document",
            extra={
                "top_level_elements": len(roots),
                "node_count": root.node_count,
                "wrapped": len(roots) > 1,
            }
        )
        return root

    def _normalize_items(self, items: List[Any]) -> List[XMLNode]:
        nodes: List[XMLNode] = []
        for item in items:
            kind, key = _item_key(item)
            # Declarations and stray top-level text carry no element
            if kind == _ELEMENT:
                nodes.append(self._normalize_element(key, item))
        return nodes

    def _normalize_element(self, tag_name: str, item: Mapping) -> XMLNode:
        attributes = {}
        if ATTRIBUTES_KEY in item:
            carrier = item[ATTRIBUTES_KEY]
            if not isinstance(carrier, Mapping):
                raise StructuralError(
                    f"Attributes of <{tag_name}> must be a mapping", item=item
                )
            for raw_name, value in carrier.items():
                attributes[_strip_prefix(raw_name)] = str(value)

        text_runs: List[str] = []
        children: List[XMLNode] = []
        for child in _as_item_list(item[tag_name], f"<{tag_name}>"):
            kind, key = _item_key(child)
            if kind == _TEXT:
                text_runs.append(str(child[TEXT_KEY]))
            elif kind == _ELEMENT:
                children.append(self._normalize_element(key, child))

        return XMLNode(
            tag_name=tag_name,
            attributes=attributes,
            text_content=self._merge_text(text_runs),
            children=tuple(children),
        )

    def _merge_text(self, runs: List[str]) -> str:
        if not runs:
            return ""
        if self.config.mixed_text == "last":
            return runs[-1]
        return " ".join(run for run in runs if run)


def normalize(items: Sequence, config: Optional[NormalizerConfig] = None) -> XMLNode:
    """Normalize ordered parser items with a default normalizer.

    Args:
        items: Top-level ordered items
        config: Optional normalizer configuration

    Returns:
        Root XMLNode of the normalized tree
    """
    return TreeNormalizer(config).normalize(items)


def _as_item_list(value: Any, owner: str) -> List[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise StructuralError(
            f"Content of {owner} must be a list of items, got {type(value).__name__}",
            item=value,
        )
    return list(value)


def _item_key(item: Any) -> Tuple[str, str]:
    """Classify an item and return its significant key."""
    if not isinstance(item, Mapping):
        raise StructuralError(
            f"Ordered item must be a mapping, got {type(item).__name__}", item=item
        )

    keys = [key for key in item if key != ATTRIBUTES_KEY]
    if not keys:
        raise StructuralError("Ordered item has no element, text or declaration key", item=item)
    if len(keys) > 1:
        raise StructuralError(
            f"Ordered item has several keys {keys}, expected exactly one", item=item
        )

    key = keys[0]
    if not isinstance(key, str) or not key:
        raise StructuralError(f"Ordered item key must be a non-empty string: {key!r}", item=item)
    if key == TEXT_KEY:
        if ATTRIBUTES_KEY in item:
            raise StructuralError("Text item cannot carry attributes", item=item)
        return _TEXT, key
    if key.startswith(DECLARATION_PREFIX):
        return _DECLARATION, key
    return _ELEMENT, key


def _strip_prefix(raw_name: Any) -> str:
    name = str(raw_name)
    if name.startswith(ATTRIBUTE_PREFIX):
        return name[len(ATTRIBUTE_PREFIX):]
    return name
