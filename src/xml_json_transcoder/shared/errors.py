"""Exception types raised by the XML-to-JSON transcoder.

Every failure surfaces synchronously to the caller of the failing operation.
Sink write and flush failures are not wrapped: the underlying ``OSError`` (or
whatever the stream raised) propagates unchanged.
"""

from typing import Optional


class TranscoderError(Exception):
    """Base exception for transcoder failures."""


class ProtocolViolationError(TranscoderError):
    """Raised when parse events arrive in an order the builder cannot accept.

    Examples are character data with no open element, an element end with
    nothing left to close, or a second document start before the first ended.
    """

    def __init__(self, message: str, event: Optional[str] = None,
                 depth: Optional[int] = None):
        super().__init__(message)
        self.event = event
        self.depth = depth


class UnsupportedEncodingError(TranscoderError, LookupError):
    """Raised when an output sink is created with an unknown text encoding."""

    def __init__(self, encoding: str):
        super().__init__(f"Unsupported output encoding: {encoding!r}")
        self.encoding = encoding
