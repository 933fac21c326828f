"""Tests for the byte-oriented output sink."""

import io
from unittest.mock import MagicMock

import pytest

from xml_json_transcoder.output import OutputSink, lookup_text_encoding
from xml_json_transcoder.shared import TranscoderError, UnsupportedEncodingError


class TestOutputSink:
    """Test encoding, counting and flushing."""

    def test_writes_utf8_by_default(self) -> None:
        """Test text is encoded as UTF-8."""
        stream = io.BytesIO()
        sink = OutputSink(stream)

        sink.write('{"a":"é"}')

        assert stream.getvalue() == '{"a":"é"}'.encode("utf-8")
        assert sink.bytes_written == len('{"a":"é"}'.encode("utf-8"))
        assert sink.encoding == "utf-8"

    def test_encoding_name_is_normalized(self) -> None:
        """Test codec aliases resolve to their canonical name."""
        assert OutputSink(io.BytesIO(), "UTF8").encoding == "utf-8"

    def test_other_encoding(self) -> None:
        """Test a non-default output encoding."""
        stream = io.BytesIO()
        sink = OutputSink(stream, "latin-1")

        sink.write("é")
        sink.flush()

        assert stream.getvalue() == b"\xe9"

    def test_stateful_encoding_round_trips(self) -> None:
        """Test an encoding with a byte order mark decodes back."""
        stream = io.BytesIO()
        sink = OutputSink(stream, "utf-16")

        sink.write('{"a":')
        sink.write('"1"}')
        sink.flush()

        assert stream.getvalue().decode("utf-16") == '{"a":"1"}'

    def test_unsupported_encoding_fails_at_construction(self) -> None:
        """Test an unknown encoding is rejected before anything is written."""
        stream = MagicMock()

        with pytest.raises(UnsupportedEncodingError) as exc_info:
            OutputSink(stream, "no-such-codec")

        assert exc_info.value.encoding == "no-such-codec"
        assert isinstance(exc_info.value, LookupError)
        assert isinstance(exc_info.value, TranscoderError)
        stream.write.assert_not_called()

    @pytest.mark.parametrize("encoding", ["hex", "rot13", "base64", "zlib"])
    def test_transform_codec_fails_at_construction(self, encoding) -> None:
        """Test a registered codec that cannot encode text is rejected."""
        stream = MagicMock()

        with pytest.raises(UnsupportedEncodingError, match="Unsupported output encoding"):
            OutputSink(stream, encoding)

        stream.write.assert_not_called()

    @pytest.mark.parametrize("encoding,escaped", [
        ("utf-8", False),
        ("UTF-16", False),
        ("utf_32", False),
        ("latin-1", True),
        ("ascii", True),
        ("cp1252", True),
    ])
    def test_escape_non_ascii(self, encoding, escaped) -> None:
        """Test only encodings outside the UTF family request escaping."""
        assert OutputSink(io.BytesIO(), encoding).escape_non_ascii is escaped

    def test_lookup_text_encoding(self) -> None:
        """Test encoding names resolve to their codec."""
        assert lookup_text_encoding("Latin1").name == "iso8859-1"

        with pytest.raises(UnsupportedEncodingError):
            lookup_text_encoding("hex")

    def test_flush_counts(self) -> None:
        """Test flush forwards to the stream and is counted."""
        stream = MagicMock()
        sink = OutputSink(stream)

        sink.flush()
        sink.flush()

        assert stream.flush.call_count == 2
        assert sink.flush_count == 2

    def test_empty_write_does_not_touch_stream(self) -> None:
        """Test writing an empty string is a no-op."""
        stream = MagicMock()
        OutputSink(stream).write("")

        stream.write.assert_not_called()


class TestOutputSinkScope:
    """Test the scoped acquisition used per document."""

    def test_flushes_on_clean_exit(self) -> None:
        """Test leaving the block normally flushes once."""
        stream = MagicMock()
        sink = OutputSink(stream)

        with sink:
            sink.write("{}")

        stream.flush.assert_called_once()

    def test_no_flush_when_block_fails(self) -> None:
        """Test leaving the block with an error skips the flush."""
        stream = MagicMock()
        sink = OutputSink(stream)

        with pytest.raises(RuntimeError, match="boom"):
            with sink:
                raise RuntimeError("boom")

        stream.flush.assert_not_called()

    def test_nested_acquisition_rejected(self) -> None:
        """Test the sink cannot be acquired twice at once."""
        sink = OutputSink(io.BytesIO())

        with sink:
            with pytest.raises(RuntimeError, match="already in use"):
                with sink:
                    pass

    def test_reacquire_after_release(self) -> None:
        """Test the sink can be used for the next document."""
        stream = io.BytesIO()
        sink = OutputSink(stream)

        with sink:
            sink.write("{}")
        with sink:
            sink.write("{}")

        assert stream.getvalue() == b"{}{}"
        assert sink.flush_count == 2
