"""XML-to-JSON Transcoder.

Converts XML parse events into a tree mirroring the element hierarchy and
writes that tree as compact or indented JSON.

Progressive API Disclosure:
- Level 1: Simple functions - transcode(), transcode_string(), transcode_file()
- Level 2: Configured transcoder - XMLJSONTranscoder class
- Level 3: Event-driven builder - JSONTreeBuilder fed by any parser
"""

__version__ = "0.1.0"
__author__ = "XML JSON Transcoder Team"

from .api import XMLJSONTranscoder, transcode, transcode_file, transcode_string
from .output import OutputSink
from .shared.config import TranscoderConfig
from .shared.errors import (
    ProtocolViolationError,
    TranscoderError,
    UnsupportedEncodingError,
)
from .tree import JSONNode, JSONTreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple transcoding functions
    "transcode",
    "transcode_string",
    "transcode_file",

    # Level 2: Configured transcoder
    "XMLJSONTranscoder",
    "TranscoderConfig",

    # Level 3: Builder, tree and sink
    "JSONTreeBuilder",
    "JSONNode",
    "OutputSink",

    # Errors
    "TranscoderError",
    "ProtocolViolationError",
    "UnsupportedEncodingError",
]
