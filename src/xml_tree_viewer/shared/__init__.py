"""Shared utilities for the XML tree viewer.

This module provides the configuration objects, exception hierarchy,
diagnostic types and logging helpers used across all processing stages.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DiagramConfig,
    GlobalConfig,
    NormalizerConfig,
    ParserConfig,
    SessionConfig,
    SkeletonConfig,
    ViewerConfig,
)
from .errors import (
    GrammarError,
    ParseError,
    RenderFailedError,
    SessionError,
    SessionNotFoundError,
    StructuralError,
    TransferAbandonedError,
    XMLTreeError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DiagramConfig",
    "GlobalConfig",
    "NormalizerConfig",
    "ParserConfig",
    "SessionConfig",
    "SkeletonConfig",
    "ViewerConfig",
    "GrammarError",
    "ParseError",
    "RenderFailedError",
    "SessionError",
    "SessionNotFoundError",
    "StructuralError",
    "TransferAbandonedError",
    "XMLTreeError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
]
