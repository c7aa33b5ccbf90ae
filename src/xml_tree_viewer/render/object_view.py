"""JSON-compatible object view of a normalized tree.

Leaves collapse to their text, repeated sibling tags become lists, attributes
are stored under ``_name`` keys and mixed-content text under ``#text``.
"""

import json
from typing import Any, Dict, List, Union

from xml_tree_viewer.tree.node import XMLNode

ATTRIBUTE_KEY_PREFIX = "_"
MIXED_TEXT_KEY = "#text"

JSONValue = Union[str, List[Any], Dict[str, Any]]


def to_object_view(node: XMLNode) -> JSONValue:
    """Transform a subtree into nested dicts, lists and strings.

    Args:
        node: Subtree root

    Returns:
        The text itself for a leaf, otherwise a dict keyed by child tag names
        followed by underscore-prefixed attributes

    Examples:
        >>> root = XMLNode("root", {"id": "1"}, children=(XMLNode("child", text_content="hello"),))
        >>> to_object_view(root)
        {'child': 'hello', '_id': '1'}
    """
    if node.is_leaf:
        return node.text_content

    groups: Dict[str, List[XMLNode]] = {}
    for child in node.children:
        groups.setdefault(child.tag_name, []).append(child)

    result: Dict[str, Any] = {}
    for tag_name, members in groups.items():
        if len(members) == 1:
            result[tag_name] = to_object_view(members[0])
        else:
            result[tag_name] = [to_object_view(member) for member in members]

    for name, value in node.attributes.items():
        result[ATTRIBUTE_KEY_PREFIX + name] = value

    if node.text_content and node.children:
        result[MIXED_TEXT_KEY] = node.text_content

    return result


def to_json(node: XMLNode, indent: int = 2) -> str:
    """Serialize the object view of a subtree as JSON text."""
    return json.dumps(to_object_view(node), indent=indent, ensure_ascii=False)
