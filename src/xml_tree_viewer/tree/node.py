"""Normalized tree node for the XML tree viewer.

Every renderer consumes this one uniform structure. Nodes are immutable once
built; their kind (leaf, branch, empty) is always derived from the children
and text rather than stored.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple

DOCUMENT_TAG = "(document)"


class NodeKind(Enum):
    """Structural classification of a normalized node."""

    LEAF = auto()     # Text and no children
    BRANCH = auto()   # At least one child, text or not
    EMPTY = auto()    # Neither children nor text


@dataclass(frozen=True)
class XMLNode:
    """A single element of the normalized tree.

    Attributes:
        tag_name: Element name, or ``"(document)"`` for a synthetic wrapper
        attributes: Read-only mapping of attribute name to value
        text_content: Direct text of the element, empty string if none
        children: Child nodes in document order
    """

    tag_name: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    text_content: str = ""
    children: Tuple["XMLNode", ...] = ()

    def __post_init__(self) -> None:
        """Validate the node and freeze its containers."""
        if not self.tag_name:
            raise ValueError("Node tag name cannot be empty")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "children", tuple(self.children))
        for child in self.children:
            if not isinstance(child, XMLNode):
                raise TypeError("Children must be XMLNode instances")

    def __hash__(self) -> int:
        return hash((
            self.tag_name,
            tuple(sorted(self.attributes.items())),
            self.text_content,
            self.children,
        ))

    @property
    def kind(self) -> NodeKind:
        """Classification computed from children and text."""
        return classify(self)

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def is_branch(self) -> bool:
        return self.kind is NodeKind.BRANCH

    @property
    def is_empty(self) -> bool:
        return self.kind is NodeKind.EMPTY

    @property
    def is_document_wrapper(self) -> bool:
        """Check if this node is a synthetic multi-root wrapper."""
        return self.tag_name == DOCUMENT_TAG

    def iter_nodes(self) -> Iterator["XMLNode"]:
        """Iterate over this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    @property
    def node_count(self) -> int:
        """Number of nodes in the subtree rooted here."""
        return sum(1 for _ in self.iter_nodes())

    @property
    def max_depth(self) -> int:
        """Depth of the deepest descendant (a lone node has depth 0)."""
        if not self.children:
            return 0
        return 1 + max(child.max_depth for child in self.children)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to a plain dictionary."""
        return {
            "tag_name": self.tag_name,
            "attributes": dict(self.attributes),
            "text_content": self.text_content,
            "children": [child.to_dict() for child in self.children],
        }


def classify(node: XMLNode) -> NodeKind:
    """Classify a node as leaf, branch or empty.

    Args:
        node: Node to classify

    Returns:
        BRANCH when the node has children, LEAF when it only has text,
        EMPTY otherwise
    """
    if node.children:
        return NodeKind.BRANCH
    if node.text_content:
        return NodeKind.LEAF
    return NodeKind.EMPTY
