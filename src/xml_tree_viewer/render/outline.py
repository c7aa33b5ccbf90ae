"""Indented text outline of a normalized tree.

Produces one line per node, drawn with conventional tree connectors:

    <root id="1">
    ├── <title> → "Hello"
    └── <items>
        └── <item>
"""

from xml_tree_viewer.tree.node import XMLNode

TEE = "├── "
CORNER = "└── "
PIPE = "│   "
SPACE = "    "
ARROW = " → "


def format_tag(node: XMLNode) -> str:
    """Render a node's opening tag with its attributes."""
    attrs = " ".join(f'{name}="{value}"' for name, value in node.attributes.items())
    if attrs:
        return f"<{node.tag_name} {attrs}>"
    return f"<{node.tag_name}>"


def render_outline(
    node: XMLNode,
    indent: str = "",
    is_last: bool = True,
    is_root: bool = True
) -> str:
    """Render a subtree as a connector-annotated outline.

    Lines are concatenated during a pre-order traversal, so the output order
    is document order.

    Args:
        node: Subtree root
        indent: Padding inherited from the ancestors
        is_last: Whether the node is the last child of its parent
        is_root: Whether the node is the outline root (drawn without connector)

    Returns:
        Newline-terminated lines, one per node
    """
    if is_root:
        connector, child_indent = "", ""
    elif is_last:
        connector, child_indent = CORNER, SPACE
    else:
        connector, child_indent = TEE, PIPE

    display = format_tag(node)
    if node.is_leaf:
        display += f'{ARROW}"{node.text_content}"'

    result = f"{indent}{connector}{display}\n"

    last_index = len(node.children) - 1
    for index, child in enumerate(node.children):
        result += render_outline(child, indent + child_indent, index == last_index, False)

    return result
