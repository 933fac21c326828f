"""Public transcoding API and parser adapters."""

from .adapters import (
    AdapterMetadata,
    EventSourceAdapter,
    LxmlEventAdapter,
    SaxEventAdapter,
    get_adapter,
    list_available_adapters,
    register_adapter,
)
from .parser import XMLJSONTranscoder, transcode, transcode_file, transcode_string

__all__ = [
    "AdapterMetadata",
    "EventSourceAdapter",
    "LxmlEventAdapter",
    "SaxEventAdapter",
    "get_adapter",
    "list_available_adapters",
    "register_adapter",
    "XMLJSONTranscoder",
    "transcode",
    "transcode_file",
    "transcode_string",
]
