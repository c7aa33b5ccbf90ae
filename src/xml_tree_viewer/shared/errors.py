"""Exception hierarchy for the XML tree viewer.

Every failure is scoped to a single render request: nothing raised here
leaves shared state behind, and a later request starts from scratch.
"""

from typing import Any, Optional


class XMLTreeError(Exception):
    """Base exception for all tree viewer errors."""


class ParseError(XMLTreeError):
    """Raised when the XML or DTD text cannot be parsed.

    The message carries the underlying parser diagnostic verbatim.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class StructuralError(XMLTreeError):
    """Raised when ordered parser output does not have the expected item shape."""

    def __init__(self, message: str, item: Any = None) -> None:
        super().__init__(message)
        self.item = item


class GrammarError(XMLTreeError):
    """Raised when a DTD grammar cannot produce a skeleton document."""


class SessionError(XMLTreeError):
    """Base exception for view session failures."""


class SessionNotFoundError(SessionError):
    """Raised when a session identifier is not registered."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Unknown view session: {session_id}")
        self.session_id = session_id


class RenderFailedError(SessionError):
    """Raised when an artifact is requested from a session whose last render failed."""


class TransferAbandonedError(SessionError):
    """Raised when a chunked transfer is used after its idle timeout elapsed."""
