"""Public viewer API.

Key Components:
    render: Never-fail rendering of a document into every representation
    XMLTreeViewer: Reusable viewer with statistics
    SessionRegistry: Open view sessions with chunked artifact export
"""

from .session import (
    ARTIFACTS,
    ArtifactChunk,
    ArtifactTransfer,
    SessionRegistry,
    ViewSession,
)
from .viewer import (
    RenderResult,
    XMLTreeViewer,
    is_dtd_file,
    parse_xml,
    render,
)

__all__ = [
    "ARTIFACTS",
    "ArtifactChunk",
    "ArtifactTransfer",
    "SessionRegistry",
    "ViewSession",
    "RenderResult",
    "XMLTreeViewer",
    "is_dtd_file",
    "parse_xml",
    "render",
]
