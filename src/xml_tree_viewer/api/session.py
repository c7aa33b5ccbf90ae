"""View sessions and chunked artifact transfer.

A view session pairs one open document with its latest render. Sessions live
in an explicit :class:`SessionRegistry` owned by the caller, so several
independent registries (for example one per editor window) can coexist.
Artifacts leave a session as fixed-size byte chunks tagged with the session
identifier, which lets a presentation surface reassemble them even when
transfers for different sessions interleave.
"""

import json
import math
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from xml_tree_viewer.api.viewer import ContentType, RenderResult, render
from xml_tree_viewer.shared import (
    RenderFailedError,
    SessionNotFoundError,
    TransferAbandonedError,
    ViewerConfig,
    get_logger,
)

ARTIFACTS = ("outline", "json", "diagram", "skeleton")


@dataclass(frozen=True)
class ArtifactChunk:
    """One slice of an encoded artifact.

    Attributes:
        session_id: Session the artifact belongs to
        index: Zero-based position of this chunk
        total: Number of chunks in the whole transfer
        data: UTF-8 bytes of this slice
    """

    session_id: str
    index: int
    total: int
    data: bytes

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1


class ArtifactTransfer:
    """Finite, restartable sequence of chunks for one artifact.

    Every call to ``iter()`` starts again from chunk 0. A transfer that is not
    touched for ``timeout_seconds`` is abandoned; any further use raises
    TransferAbandonedError.

    Examples:
        >>> transfer = ArtifactTransfer("s1", b"abcdef", chunk_size=4, timeout_seconds=30.0)
        >>> [chunk.data for chunk in transfer]
        [b'abcd', b'ef']
    """

    def __init__(
        self,
        session_id: str,
        data: bytes,
        chunk_size: int,
        timeout_seconds: float
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self.session_id = session_id
        self.chunk_size = chunk_size
        self.timeout_seconds = timeout_seconds
        self._data = data
        self._abandoned = False
        self._last_touched = time.monotonic()

    @property
    def total(self) -> int:
        """Number of chunks in the transfer."""
        return math.ceil(len(self._data) / self.chunk_size)

    @property
    def size(self) -> int:
        """Total number of bytes in the transfer."""
        return len(self._data)

    @property
    def is_abandoned(self) -> bool:
        """Check if the transfer was cancelled or sat idle past its timeout."""
        if not self._abandoned and time.monotonic() - self._last_touched > self.timeout_seconds:
            self._abandoned = True
        return self._abandoned

    def cancel(self) -> None:
        """Abandon the transfer immediately."""
        self._abandoned = True

    def get_chunk(self, index: int) -> ArtifactChunk:
        """Fetch a single chunk, resuming a transfer at any position.

        Args:
            index: Zero-based chunk index

        Returns:
            The requested chunk

        Raises:
            IndexError: If the index is out of range
            TransferAbandonedError: If the transfer was abandoned
        """
        self._touch()
        total = self.total
        if not 0 <= index < total:
            raise IndexError(f"Chunk index {index} out of range for {total} chunks")
        start = index * self.chunk_size
        return ArtifactChunk(
            session_id=self.session_id,
            index=index,
            total=total,
            data=self._data[start:start + self.chunk_size],
        )

    def __iter__(self) -> Iterator[ArtifactChunk]:
        for index in range(self.total):
            yield self.get_chunk(index)

    def __len__(self) -> int:
        return self.total

    def _touch(self) -> None:
        if self.is_abandoned:
            raise TransferAbandonedError(
                f"Transfer for session {self.session_id} was abandoned"
            )
        self._last_touched = time.monotonic()


class ViewSession:
    """One open document and its most recent render.

    Attributes:
        session_id: Opaque identifier, also used as the logging correlation ID
        file_name: Name of the viewed file
        text: Current document text
        result: Latest render result, successful or not
    """

    def __init__(
        self,
        session_id: str,
        file_name: str,
        text: ContentType,
        config: ViewerConfig
    ) -> None:
        self.session_id = session_id
        self.file_name = file_name
        self.config = config
        self.logger = get_logger(__name__, session_id, "view_session")
        self.created_at = time.time()
        self.text = text
        self.result = self._render(text)

    def _render(self, text: ContentType) -> RenderResult:
        self.updated_at = time.time()
        return render(text, self.file_name, self.config, correlation_id=self.session_id)

    def update(self, text: ContentType) -> RenderResult:
        """Re-render after the document was edited.

        A failed render replaces the previous result.
        """
        self.text = text
        self.result = self._render(text)
        self.logger.debug("Session re-rendered", extra={"success": self.result.success})
        return self.result

    @property
    def success(self) -> bool:
        return self.result.success

    def artifact_text(self, artifact: str) -> str:
        """Get the text of one artifact of the latest render.

        Args:
            artifact: One of ``outline``, ``json``, ``diagram`` or ``skeleton``

        Returns:
            Artifact text

        Raises:
            ValueError: If the artifact name is unknown or not produced for
                this kind of file
            RenderFailedError: If the latest render failed
        """
        if artifact not in ARTIFACTS:
            raise ValueError(f"Unknown artifact {artifact!r}, expected one of {list(ARTIFACTS)}")
        if not self.result.success:
            raise RenderFailedError(
                f"Session {self.session_id} has no {artifact}: {self.result.error_message}"
            )

        if artifact == "outline":
            return self.result.outline
        if artifact == "json":
            return json.dumps(self.result.object_view, indent=2, ensure_ascii=False)
        if artifact == "diagram":
            return self.result.diagram
        if self.result.skeleton is None:
            raise ValueError(f"Session {self.session_id} is not a DTD and has no skeleton")
        return self.result.skeleton

    def export_chunks(self, artifact: str, chunk_size: Optional[int] = None) -> ArtifactTransfer:
        """Export an artifact as a chunked transfer.

        Args:
            artifact: Artifact name
            chunk_size: Bytes per chunk, defaults to the session configuration

        Returns:
            ArtifactTransfer over the UTF-8 encoded artifact
        """
        data = self.artifact_text(artifact).encode("utf-8")
        transfer = ArtifactTransfer(
            self.session_id,
            data,
            self.config.session.default_chunk_size if chunk_size is None else chunk_size,
            self.config.session.transfer_timeout_seconds,
        )
        self.logger.debug(
            "Artifact export started",
            extra={"artifact": artifact, "size": transfer.size, "chunks": transfer.total}
        )
        return transfer


class SessionRegistry:
    """Thread-safe registry of open view sessions.

    Examples:
        >>> registry = SessionRegistry()
        >>> session = registry.open("doc.xml", "<root/>")
        >>> session.session_id in registry
        True
        >>> registry.close(session.session_id)
        >>> len(registry)
        0
    """

    def __init__(self, config: Optional[ViewerConfig] = None) -> None:
        self.config = config or ViewerConfig.default()
        self.logger = get_logger(__name__, component="session_registry")
        self._sessions: Dict[str, ViewSession] = {}
        self._lock = threading.Lock()

    def open(self, file_name: str, text: ContentType) -> ViewSession:
        """Open a session for a document and render it.

        Args:
            file_name: Name of the viewed file
            text: Document text

        Returns:
            The new session; its result may be a failed render
        """
        session_id = uuid.uuid4().hex
        session = ViewSession(session_id, file_name, text, self.config)
        with self._lock:
            self._sessions[session_id] = session

        self.logger.bind(session_id).info(
            "View session opened",
            extra={"file_name": file_name, "success": session.success}
        )
        return session

    def get(self, session_id: str) -> ViewSession:
        """Look up a session.

        Raises:
            SessionNotFoundError: If the session is not registered
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def update(self, session_id: str, text: ContentType) -> RenderResult:
        """Re-render a session after its document changed."""
        return self.get(session_id).update(text)

    def close(self, session_id: str) -> None:
        """Tear down a session.

        Raises:
            SessionNotFoundError: If the session is not registered
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        self.logger.bind(session_id).info("View session closed")

    def close_all(self) -> None:
        """Tear down every session."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        self.logger.info("All view sessions closed", extra={"session_count": count})

    @property
    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
