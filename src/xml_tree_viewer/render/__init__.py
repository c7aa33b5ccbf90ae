"""Renderers turning a normalized tree into presentable artifacts.

Key Components:
    render_outline: Connector-annotated text outline
    to_object_view: JSON-compatible nested value
    DiagramGenerator: Mermaid flowchart markup
"""

from .diagram import DiagramGenerator, build_label, escape_label, number_nodes, to_diagram_markup
from .object_view import to_json, to_object_view
from .outline import format_tag, render_outline

__all__ = [
    "DiagramGenerator",
    "build_label",
    "escape_label",
    "number_nodes",
    "to_diagram_markup",
    "to_json",
    "to_object_view",
    "format_tag",
    "render_outline",
]
