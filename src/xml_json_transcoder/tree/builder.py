"""Event-to-tree builder for XML-to-JSON transcoding.

This module implements the state machine that turns an ordered stream of XML
parse events into a ``JSONNode`` tree and, at document end, writes that tree as
JSON to an output sink.

The builder keeps a cursor (the node receiving events) and an explicit stack
of the cursor's ancestors. An element start pushes the cursor, attaches the new
node to it and moves the cursor down; an element end pops the stack to move
the cursor back up. After any run of matched start/end pairs the stack is back
at its previous depth.
"""

import time
from enum import Enum, auto
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from xml_json_transcoder.output.sink import OutputSink
from xml_json_transcoder.shared import (
    CorrelationLogger,
    PerformanceMetrics,
    ProtocolViolationError,
    TranscoderConfig,
    get_logger,
)
from xml_json_transcoder.shared.config import DEFAULT_INDENT_WIDTH, DEFAULT_TEXT_KEY
from xml_json_transcoder.tree.node import JSONNode
from xml_json_transcoder.tree.serializer import JSONNodeWriter

Attributes = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


class BuilderState(Enum):
    """Lifecycle states of a ``JSONTreeBuilder``."""

    IDLE = auto()              # No document in progress
    DOCUMENT_STARTED = auto()  # Root exists, cursor is the root
    IN_ELEMENT = auto()        # At least one element has started


class JSONTreeBuilder:
    """Build a node tree from XML parse events and write it out as JSON.

    One instance handles one document at a time and may be reused for the
    next document once ``end_document`` has returned. Instances are not
    thread-safe.

    Args:
        sink: Destination for the serialized JSON
        compact: Render without whitespace (True) or indented (False); fixed
            for the life of the builder
        indent_width: Spaces per depth level in indented mode
        text_key: JSON member name for character data
        skip_whitespace_text: Do not render whitespace-only text
        logger: Optional logger; defaults to a per-instance correlation logger
        correlation_id: Optional correlation ID for request tracking
    """

    def __init__(
        self,
        sink: OutputSink,
        compact: bool = True,
        indent_width: int = DEFAULT_INDENT_WIDTH,
        text_key: str = DEFAULT_TEXT_KEY,
        skip_whitespace_text: bool = True,
        logger: Optional[CorrelationLogger] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.sink = sink
        self.correlation_id = correlation_id
        self.logger = logger or get_logger(__name__, correlation_id, "json_tree_builder")
        self._writer = JSONNodeWriter(
            compact=compact,
            indent_width=indent_width,
            text_key=text_key,
            skip_whitespace_text=skip_whitespace_text,
            ensure_ascii=sink.escape_non_ascii,
        )

        # Tree building state
        self._head: Optional[JSONNode] = None
        self._current: Optional[JSONNode] = None
        self._ancestors: List[JSONNode] = []
        self._state = BuilderState.IDLE

        # Statistics
        self._elements_seen = 0
        self._characters_seen = 0
        self._max_depth = 0
        self._start_time = 0.0
        self.metrics = PerformanceMetrics()

    @classmethod
    def from_config(
        cls,
        sink: OutputSink,
        config: TranscoderConfig,
        logger: Optional[CorrelationLogger] = None,
    ) -> "JSONTreeBuilder":
        """Create a builder using the rendering options of ``config``."""
        return cls(
            sink,
            compact=config.compact,
            indent_width=config.indent_width,
            text_key=config.text_key,
            skip_whitespace_text=config.skip_whitespace_text,
            logger=logger,
            correlation_id=config.correlation_id,
        )

    @property
    def compact(self) -> bool:
        """Whether output is rendered without whitespace."""
        return self._writer.compact

    @property
    def state(self) -> BuilderState:
        """Current lifecycle state."""
        return self._state

    @property
    def head(self) -> Optional[JSONNode]:
        """Root of the tree under construction, or None when idle."""
        return self._head

    @property
    def current(self) -> Optional[JSONNode]:
        """Node currently receiving events."""
        return self._current

    @property
    def depth(self) -> int:
        """Number of ancestors on the stack."""
        return len(self._ancestors)

    def start_document(self) -> None:
        """Begin a new document with a fresh synthetic root.

        Raises:
            ProtocolViolationError: If a document is already in progress
        """
        if self._state is not BuilderState.IDLE or self._head is not None:
            raise ProtocolViolationError(
                "Document start received while a document is in progress",
                event="start_document",
                depth=self.depth,
            )

        self._reset_state()
        self._head = JSONNode()
        self._current = self._head
        self._state = BuilderState.DOCUMENT_STARTED
        self._start_time = time.perf_counter()

        self.logger.debug("Document started")

    def start_element(self, name: str, attributes: Attributes = None) -> None:
        """Open an element as the last child of the current node.

        Args:
            name: Local name of the element
            attributes: Attribute names and values in document order, either
                a mapping or a sequence of pairs; copied
        """
        node = JSONNode(name=name, attributes=dict(attributes or {}))
        self._elements_seen += 1

        if self._head is None:
            # No document start was delivered; the first element is the root.
            if not self._start_time:
                self._start_time = time.perf_counter()
            self._head = node
            self._current = node
        else:
            if self._current is None:
                raise ProtocolViolationError(
                    f"Element start {name!r} received after the outermost element closed",
                    event="start_element",
                    depth=self.depth,
                )
            self._ancestors.append(self._current)
            self._current.add_child(node)
            self._current = node

        self._max_depth = max(self._max_depth, self.depth)
        self._state = BuilderState.IN_ELEMENT

    def characters(self, fragment: str) -> None:
        """Append character data to the current node.

        Raises:
            ProtocolViolationError: If no node is open to receive the text
        """
        if self._current is None:
            raise ProtocolViolationError(
                "Character data received with no open element",
                event="characters",
                depth=self.depth,
            )

        self._current.append_text(fragment)
        self._characters_seen += len(fragment)

    def end_element(self) -> None:
        """Close the current element and return the cursor to its parent.

        Raises:
            ProtocolViolationError: If there is no open element to close
        """
        if self._current is None:
            raise ProtocolViolationError(
                "Element end received with no open element",
                event="end_element",
                depth=self.depth,
            )

        if self._ancestors:
            self._current = self._ancestors.pop()
        else:
            self._current = None

    def end_document(self) -> None:
        """Serialize the tree to the sink, flush it once and return to idle.

        The builder is reset even when serialization or the sink fails; the
        sink's contents are undefined in that case.

        Raises:
            ProtocolViolationError: If no document is in progress or elements
                are still open
        """
        if self._head is None:
            raise ProtocolViolationError(
                "Document end received with no document in progress",
                event="end_document",
            )

        try:
            if self._ancestors:
                raise ProtocolViolationError(
                    f"Document end received with {len(self._ancestors)} unclosed element(s)",
                    event="end_document",
                    depth=self.depth,
                )

            bytes_before = self.sink.bytes_written
            with self.sink:
                self._writer.write(self._head, self.sink, 0, True)

            self.metrics = PerformanceMetrics(
                processing_time_ms=(time.perf_counter() - self._start_time) * 1000,
                elements_processed=self._elements_seen,
                characters_processed=self._characters_seen,
                bytes_written=self.sink.bytes_written - bytes_before,
                max_depth=self._max_depth,
            )
            self.logger.debug(
                "Document written",
                extra={
                    "element_count": self.metrics.elements_processed,
                    "bytes_written": self.metrics.bytes_written,
                    "compact": self.compact,
                },
            )
        finally:
            self._reset_state()

    def flush_buffer(self) -> None:
        """Flush anything remaining in the sink's buffers."""
        self.sink.flush()

    def reset(self) -> None:
        """Discard any partial tree and return to idle."""
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset internal state for a new document."""
        self._head = None
        self._current = None
        self._ancestors.clear()
        self._state = BuilderState.IDLE
        self._elements_seen = 0
        self._characters_seen = 0
        self._max_depth = 0
        self._start_time = 0.0
