"""XML Tree Viewer.

Turns an XML document into a normalized tree and renders it as a text
outline, a JSON object view and Mermaid flowchart markup. DTD files are
first turned into a minimal skeleton document.

Progressive API Disclosure:
- Level 1: Simple functions - render(), parse_xml(), build_skeleton()
- Level 2: Configured viewer - XMLTreeViewer class
- Level 3: View sessions - SessionRegistry with chunked artifact export
"""

__version__ = "0.1.0"
__author__ = "XML Tree Viewer Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import (
    ArtifactChunk,
    ArtifactTransfer,
    RenderResult,
    SessionRegistry,
    ViewSession,
    XMLTreeViewer,
    parse_xml,
    render,
)
from .dtd import build_skeleton

# Renderers usable on any normalized tree
from .render import render_outline, to_diagram_markup, to_json, to_object_view

# Configuration classes for advanced usage
from .shared.config import ViewerConfig

# Core data structures
from .tree import NodeKind, XMLNode

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "render",
    "parse_xml",
    "build_skeleton",

    # Level 2: Configured viewer
    "XMLTreeViewer",

    # Level 3: Sessions
    "SessionRegistry",
    "ViewSession",
    "ArtifactTransfer",
    "ArtifactChunk",

    # Results and data structures
    "RenderResult",
    "XMLNode",
    "NodeKind",

    # Renderers
    "render_outline",
    "to_object_view",
    "to_json",
    "to_diagram_markup",

    # Configuration
    "ViewerConfig",
]
