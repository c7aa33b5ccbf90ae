"""Viewer API producing every representation of a document in one call.

Module-level functions cover one-shot use; :class:`XMLTreeViewer` keeps a
configuration and usage statistics across many renders. Rendering follows a
never-fail contract: errors are reported through the result's diagnostics
instead of being raised.
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from xml_tree_viewer.dtd import build_skeleton
from xml_tree_viewer.parsing import OrderedXMLParser, decode_document
from xml_tree_viewer.render import DiagramGenerator, render_outline, to_object_view
from xml_tree_viewer.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParseError,
    ViewerConfig,
    XMLTreeError,
    get_logger,
)
from xml_tree_viewer.tree import TreeNormalizer, XMLNode

ContentType = Union[str, bytes]

MS_PER_SECOND = 1000
DTD_SUFFIX = ".dtd"
DEFAULT_FILE_NAME = "document.xml"


@dataclass
class RenderResult:
    """All representations of one document, or the reason there are none.

    On failure every artifact is ``None`` and ``diagnostics`` holds a single
    CRITICAL entry with the user-facing error message.
    """

    file_name: str = DEFAULT_FILE_NAME
    tree: Optional[XMLNode] = None
    outline: Optional[str] = None
    object_view: Any = None
    diagram: Optional[str] = None
    skeleton: Optional[str] = None
    success: bool = True

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None
    processing_time_ms: float = 0.0

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    @property
    def error_message(self) -> Optional[str]:
        """Message of the first critical diagnostic, if the render failed."""
        for diag in self.diagnostics:
            if diag.severity is DiagnosticSeverity.CRITICAL:
                return diag.message
        return None

    @property
    def is_dtd(self) -> bool:
        return is_dtd_file(self.file_name)

    @property
    def json_text(self) -> Optional[str]:
        """Pretty-printed JSON of the object view."""
        if not self.success:
            return None
        return json.dumps(self.object_view, indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-compatible dictionary."""
        return {
            "file_name": self.file_name,
            "success": self.success,
            "outline": self.outline,
            "object_view": self.object_view,
            "diagram": self.diagram,
            "skeleton": self.skeleton,
            "statistics": {
                "node_count": self.tree.node_count if self.tree else 0,
                "max_depth": self.tree.max_depth if self.tree else 0,
                "processing_time_ms": self.processing_time_ms,
            },
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


def is_dtd_file(file_name: str) -> bool:
    """Check if a file name denotes a DTD by its extension."""
    return file_name.lower().endswith(DTD_SUFFIX)


def parse_xml(
    content: ContentType,
    config: Optional[ViewerConfig] = None,
    correlation_id: Optional[str] = None
) -> XMLNode:
    """Parse XML text into a normalized tree.

    Args:
        content: XML document text
        config: Optional viewer configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Root of the normalized tree

    Raises:
        ParseError: If the document is not well-formed
        StructuralError: If the parsed items cannot be normalized

    Examples:
        >>> parse_xml("<a/><b/>").tag_name
        '(document)'
    """
    config = config or ViewerConfig()
    parser = OrderedXMLParser(
        config.parser,
        max_input_size_bytes=config.global_.max_input_size_bytes,
        correlation_id=correlation_id,
    )
    items = parser.parse(content)
    return TreeNormalizer(config.normalizer, correlation_id).normalize(items)


def render(
    content: ContentType,
    file_name: str = DEFAULT_FILE_NAME,
    config: Optional[ViewerConfig] = None,
    correlation_id: Optional[str] = None
) -> RenderResult:
    """Render a document into every representation.

    DTD files (by extension) are first turned into a skeleton document,
    which is then rendered like any XML input.

    Args:
        content: Document text
        file_name: Name used to detect DTD input and shown in results
        config: Optional viewer configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        RenderResult; never raises for bad input

    Examples:
        >>> result = render('<root id="1"><child>hello</child></root>')
        >>> result.object_view
        {'child': 'hello', '_id': '1'}

        >>> result = render("<root>")
        >>> result.success
        False
    """
    start_time = time.time()
    config = config or ViewerConfig()
    logger = get_logger(__name__, correlation_id, "render")

    logger.info(
        "Starting render",
        extra={"file_name": file_name, "is_dtd": is_dtd_file(file_name)}
    )

    try:
        result = _render_content(content, file_name, config, correlation_id)
    except XMLTreeError as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.warning(
            "Render failed",
            extra={
                "file_name": file_name,
                "error_type": type(e).__name__,
                "error": str(e),
            }
        )
        return _create_error_result(file_name, e, correlation_id, processing_time)
    except Exception as e:
        # Never-fail guarantee
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "Render failed unexpectedly",
            extra={"file_name": file_name, "processing_time_ms": processing_time}
        )
        return _create_error_result(
            file_name, f"Render failed: {e}", correlation_id, processing_time
        )

    result.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
    logger.info(
        "Render completed",
        extra={
            "file_name": file_name,
            "node_count": result.tree.node_count if result.tree else 0,
            "processing_time_ms": result.processing_time_ms,
        }
    )
    return result


def _render_content(
    content: ContentType,
    file_name: str,
    config: ViewerConfig,
    correlation_id: Optional[str]
) -> RenderResult:
    skeleton = None
    if is_dtd_file(file_name):
        skeleton = build_skeleton(decode_document(content), config.skeleton, correlation_id)
        content = skeleton

    tree = parse_xml(content, config, correlation_id)
    return RenderResult(
        file_name=file_name,
        tree=tree,
        outline=render_outline(tree),
        object_view=to_object_view(tree),
        diagram=DiagramGenerator(config.diagram, correlation_id).generate(tree),
        skeleton=skeleton,
        correlation_id=correlation_id,
    )


def _create_error_result(
    file_name: str,
    error: Union[str, Exception],
    correlation_id: Optional[str],
    processing_time: float
) -> RenderResult:
    """Create a failed result carrying one critical diagnostic.

    Args:
        file_name: Name of the rendered file
        error: Exception or message describing the failure
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        RenderResult with no artifacts
    """
    result = RenderResult(
        file_name=file_name,
        success=False,
        correlation_id=correlation_id,
        processing_time_ms=processing_time,
    )

    position = None
    details = None
    if isinstance(error, ParseError) and error.line is not None:
        position = {"line": error.line, "column": error.column or 0}
    if isinstance(error, Exception):
        details = {"error_type": type(error).__name__}

    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        str(error),
        "viewer",
        position=position,
        details=details,
    )
    return result


class XMLTreeViewer:
    """Reusable viewer with a fixed configuration and usage statistics.

    Examples:
        >>> viewer = XMLTreeViewer(ViewerConfig.compact())
        >>> viewer.render("<root><item/></root>").success
        True
        >>> viewer.statistics["total_renders"]
        1
    """

    def __init__(
        self,
        config: Optional[ViewerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the viewer.

        Args:
            config: Viewer configuration (defaults to ``ViewerConfig.default()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ViewerConfig.default()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_viewer")

        self._render_count = 0
        self._successful_renders = 0
        self._total_processing_time = 0.0

    def render(
        self,
        content: ContentType,
        file_name: str = DEFAULT_FILE_NAME,
        correlation_id_override: Optional[str] = None
    ) -> RenderResult:
        """Render a document with this viewer's configuration.

        Args:
            content: Document text
            file_name: Name used to detect DTD input
            correlation_id_override: Optional correlation ID for this render

        Returns:
            RenderResult with every representation or a critical diagnostic
        """
        result = render(
            content,
            file_name=file_name,
            config=self.config,
            correlation_id=correlation_id_override or self.correlation_id,
        )
        self._record(result)
        return result

    def render_file(self, file_path: Union[str, Path]) -> RenderResult:
        """Read and render a file from disk.

        Args:
            file_path: Path to an XML or DTD file

        Returns:
            RenderResult; missing or unreadable files produce a failed result
        """
        path_obj = Path(file_path)
        self.logger.info("Rendering file", extra={"file_path": str(path_obj)})

        error_message = None
        if not path_obj.exists():
            error_message = f"File not found: {path_obj}"
        elif not path_obj.is_file():
            error_message = f"Path is not a file: {path_obj}"

        if error_message is None:
            try:
                content = path_obj.read_bytes()
            except OSError as e:
                error_message = f"Unable to read file {path_obj}: {e.strerror or e}"

        if error_message is not None:
            self.logger.warning("File not rendered", extra={"error": error_message})
            result = _create_error_result(path_obj.name, error_message, self.correlation_id, 0.0)
            self._record(result)
            return result

        return self.render(content, file_name=path_obj.name)

    def _record(self, result: RenderResult) -> None:
        self._render_count += 1
        self._total_processing_time += result.processing_time_ms
        if result.success:
            self._successful_renders += 1

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get viewer usage statistics.

        Returns:
            Dictionary with render counts and timings
        """
        return {
            "total_renders": self._render_count,
            "successful_renders": self._successful_renders,
            "failed_renders": self._render_count - self._successful_renders,
            "success_rate": (
                self._successful_renders / self._render_count
                if self._render_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._render_count
                if self._render_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset viewer usage statistics."""
        self._render_count = 0
        self._successful_renders = 0
        self._total_processing_time = 0.0

        self.logger.info("Viewer statistics reset")
