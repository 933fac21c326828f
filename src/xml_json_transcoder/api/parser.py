"""High-level transcoding API.

Progressive API disclosure:
- Level 1: ``transcode_string``, ``transcode``, ``transcode_file``
- Level 2: ``XMLJSONTranscoder`` configured with a ``TranscoderConfig``
- Level 3: ``JSONTreeBuilder`` driven directly with parse events
"""

import io
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Union

from xml_json_transcoder.api.adapters import XMLSource, get_adapter
from xml_json_transcoder.output.sink import OutputSink, lookup_text_encoding
from xml_json_transcoder.shared import (
    PerformanceMetrics,
    TranscoderConfig,
    get_logger,
)
from xml_json_transcoder.tree.builder import JSONTreeBuilder


class XMLJSONTranscoder:
    """Configured XML-to-JSON transcoder.

    Args:
        config: Rendering, encoding and parser options; defaults to compact
            output through ``xml.sax``

    Raises:
        UnsupportedEncodingError: If the configured output encoding is unknown or
            is not a text encoding
    """

    def __init__(self, config: Optional[TranscoderConfig] = None) -> None:
        self.config = config or TranscoderConfig()
        lookup_text_encoding(self.config.encoding)

        self.correlation_id = self.config.correlation_id or str(uuid.uuid4())
        self.logger = get_logger(__name__, self.correlation_id, "xml_json_transcoder")
        self.adapter = get_adapter(self.config.parser, self.correlation_id)

    def transcode(self, source: XMLSource, stream: BinaryIO) -> PerformanceMetrics:
        """Convert one XML document and write the JSON to ``stream``.

        Args:
            source: XML text, bytes, a ``Path`` or a binary file object
            stream: Binary output stream

        Returns:
            Metrics for the converted document
        """
        sink = OutputSink(stream, self.config.encoding)
        builder = JSONTreeBuilder.from_config(
            sink,
            self.config,
            logger=get_logger(
                "xml_json_transcoder.tree.builder", self.correlation_id, "json_tree_builder"
            ),
        )

        try:
            self.adapter.feed(source, builder)
        except Exception:
            self.logger.error(
                "Transcoding failed",
                extra={"parser": self.config.parser},
            )
            raise

        self.logger.info(
            "Transcoding completed",
            extra={
                "parser": self.config.parser,
                "compact": self.config.compact,
                **builder.metrics.to_dict(),
            },
        )
        return builder.metrics

    def transcode_to_string(self, source: XMLSource) -> str:
        """Convert one XML document and return the JSON text."""
        buffer = io.BytesIO()
        self.transcode(source, buffer)
        return buffer.getvalue().decode(self.config.encoding)

    def transcode_file(
        self, path: Union[str, Path], output_path: Optional[Union[str, Path]] = None
    ) -> PerformanceMetrics:
        """Convert an XML file.

        Args:
            path: XML input file
            output_path: JSON output file; defaults to ``path`` with a
                ``.json`` suffix
        """
        path = Path(path)
        output_path = Path(output_path) if output_path else path.with_suffix(".json")
        with output_path.open("wb") as stream:
            return self.transcode(path, stream)


def transcode(source: XMLSource, stream: BinaryIO, compact: bool = True) -> PerformanceMetrics:
    """Convert XML from ``source`` and write JSON to the binary ``stream``."""
    return XMLJSONTranscoder(TranscoderConfig(compact=compact)).transcode(source, stream)


def transcode_string(xml: Union[str, bytes], compact: bool = True) -> str:
    """Convert an XML document given as text or bytes and return the JSON text."""
    return XMLJSONTranscoder(TranscoderConfig(compact=compact)).transcode_to_string(xml)


def transcode_file(
    path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    compact: bool = True,
) -> PerformanceMetrics:
    """Convert an XML file to a JSON file."""
    return XMLJSONTranscoder(TranscoderConfig(compact=compact)).transcode_file(
        path, output_path
    )
