"""Normalized tree model and ordered-item normalization.

Key Components:
    XMLNode: Immutable node with tag name, attributes, text and children
    NodeKind: Leaf / branch / empty classification computed on demand
    TreeNormalizer: Converts ordered parser items into an XMLNode tree
"""

from .node import DOCUMENT_TAG, NodeKind, XMLNode, classify
from .normalizer import TreeNormalizer, normalize

__all__ = [
    "DOCUMENT_TAG",
    "NodeKind",
    "XMLNode",
    "classify",
    "TreeNormalizer",
    "normalize",
]
