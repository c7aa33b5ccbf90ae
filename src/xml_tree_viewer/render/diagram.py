"""Mermaid flowchart markup for a normalized tree.

Node identifiers ``N0, N1, ...`` follow document pre-order starting at the
root. Declarations and styling are produced by two separate traversals that
share :func:`number_nodes`, so both always agree on which ID names which node.
"""

from itertools import count
from typing import Iterator, List, Optional, Tuple

from xml_tree_viewer.shared import DiagramConfig, get_logger
from xml_tree_viewer.tree.node import NodeKind, XMLNode

LINE_BREAK = "<br/>"
INDENT = "    "

_LABEL_ESCAPES = (
    ('"', "#quot;"),
    ("<", "#lt;"),
    (">", "#gt;"),
    ("&", "#amp;"),
)

NumberedNode = Tuple[str, XMLNode, Optional[str]]


def escape_label(text: str) -> str:
    """Escape the characters Mermaid cannot take literally inside a label."""
    for char, entity in _LABEL_ESCAPES:
        text = text.replace(char, entity)
    return text


def build_label(node: XMLNode) -> str:
    """Build a node label: tag, attributes, then the text of a leaf in bold."""
    label = escape_label(node.tag_name)

    if node.attributes:
        attrs = LINE_BREAK.join(
            f"{escape_label(name)}={escape_label(value)}"
            for name, value in node.attributes.items()
        )
        label += f"{LINE_BREAK}{attrs}"

    if node.is_leaf:
        label += f"{LINE_BREAK}<b>{escape_label(node.text_content)}</b>"

    return label


def number_nodes(root: XMLNode) -> Iterator[NumberedNode]:
    """Yield ``(node_id, node, parent_id)`` for every node in pre-order."""
    counter = count()

    def visit(node: XMLNode, parent_id: Optional[str]) -> Iterator[NumberedNode]:
        node_id = f"N{next(counter)}"
        yield node_id, node, parent_id
        for child in node.children:
            yield from visit(child, node_id)

    return visit(root, None)


class DiagramGenerator:
    """Generate Mermaid flowchart markup from a normalized tree."""

    def __init__(
        self,
        config: Optional[DiagramConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or DiagramConfig()
        self.logger = get_logger(__name__, correlation_id, "diagram")

    def generate(self, root: XMLNode) -> str:
        """Generate flowchart markup for a tree.

        Args:
            root: Root of the normalized tree

        Returns:
            Mermaid markup, lines joined by newlines without a trailing newline
        """
        lines: List[str] = [f"graph {self.config.direction}"]

        for node_id, node, parent_id in number_nodes(root):
            label = build_label(node)
            if node.is_leaf:
                lines.append(f'{INDENT}{node_id}("{label}")')
            else:
                lines.append(f'{INDENT}{node_id}["{label}"]')

            if parent_id is not None:
                lines.append(f"{INDENT}{parent_id} --> {node_id}")

        lines.append("")
        lines.extend(self._style_lines(root))

        self.logger.debug(
            "Diagram generated",
            extra={"line_count": len(lines), "node_count": root.node_count}
        )
        return "\n".join(lines)

    def _style_lines(self, root: XMLNode) -> List[str]:
        lines = [
            f"{INDENT}classDef root {self.config.root_style}",
            f"{INDENT}classDef branch {self.config.branch_style}",
            f"{INDENT}classDef leaf {self.config.leaf_style}",
        ]
        if self.config.style_empty_nodes:
            lines.append(f"{INDENT}classDef empty {self.config.empty_style}")
        lines.append(f"{INDENT}class N0 root")

        groups = {NodeKind.BRANCH: [], NodeKind.LEAF: [], NodeKind.EMPTY: []}
        for node_id, node, parent_id in number_nodes(root):
            if parent_id is not None:
                groups[node.kind].append(node_id)

        class_names = [(NodeKind.BRANCH, "branch"), (NodeKind.LEAF, "leaf")]
        if self.config.style_empty_nodes:
            class_names.append((NodeKind.EMPTY, "empty"))

        for kind, class_name in class_names:
            # Mermaid rejects a class statement with no node IDs
            if groups[kind]:
                lines.append(f"{INDENT}class {','.join(groups[kind])} {class_name}")

        return lines


def to_diagram_markup(root: XMLNode, config: Optional[DiagramConfig] = None) -> str:
    """Generate Mermaid flowchart markup with a default generator.

    Args:
        root: Root of the normalized tree
        config: Optional diagram configuration

    Returns:
        Mermaid flowchart markup
    """
    return DiagramGenerator(config).generate(root)
