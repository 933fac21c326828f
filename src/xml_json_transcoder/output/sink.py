"""Byte-oriented output sink for JSON text.

The sink owns the text encoding step: callers hand it ``str`` fragments and it
appends the encoded bytes to the wrapped binary stream. It is acquired once per
document with a ``with`` block and flushed once when that block exits cleanly.
"""

import codecs
from typing import Any, BinaryIO, Optional

from xml_json_transcoder.shared.errors import UnsupportedEncodingError


def lookup_text_encoding(encoding: str) -> codecs.CodecInfo:
    """Resolve ``encoding`` to a codec that encodes ``str`` to ``bytes``.

    Transform codecs such as ``hex`` or ``rot13`` are registered with
    ``codecs`` but cannot encode text, so they are rejected as well.

    Raises:
        UnsupportedEncodingError: If ``encoding`` is unknown or not a text encoding
    """
    try:
        codec = codecs.lookup(encoding)
        "".encode(codec.name)
    except LookupError as e:
        raise UnsupportedEncodingError(encoding) from e
    return codec


class OutputSink:
    """Append-only text sink over a binary stream.

    Encodings outside the UTF family cannot represent every character, so for
    those the sink asks writers to escape non-ASCII text (``escape_non_ascii``).
    The bytes written are then plain ASCII and encoding cannot fail part-way
    through a document.

    Args:
        stream: Binary stream with ``write`` and ``flush`` (file opened in
            ``"wb"`` mode, ``io.BytesIO``, ``sys.stdout.buffer``)
        encoding: Output text encoding, validated immediately

    Raises:
        UnsupportedEncodingError: If ``encoding`` is not a known text codec
    """

    def __init__(self, stream: BinaryIO, encoding: str = "utf-8") -> None:
        codec = lookup_text_encoding(encoding)

        self.stream = stream
        self.encoding = codec.name
        self.escape_non_ascii = not codec.name.startswith("utf")
        self._encoder = codec.incrementalencoder()
        self.bytes_written = 0
        self.flush_count = 0
        self._acquired = False

    def write(self, text: str) -> None:
        """Encode ``text`` and append it to the stream."""
        data = self._encoder.encode(text)
        if data:
            self.stream.write(data)
            self.bytes_written += len(data)

    def flush(self) -> None:
        """Write any pending encoder state and flush the stream."""
        tail = self._encoder.encode("", final=True)
        if tail:
            self.stream.write(tail)
            self.bytes_written += len(tail)
        self._encoder.reset()
        self.stream.flush()
        self.flush_count += 1

    def __enter__(self) -> "OutputSink":
        if self._acquired:
            raise RuntimeError("Output sink is already in use")
        self._acquired = True
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException],
                 tb: Any) -> None:
        self._acquired = False
        if exc_type is None:
            self.flush()
