"""Output sinks for serialized JSON text."""

from .sink import OutputSink, lookup_text_encoding

__all__ = ["OutputSink", "lookup_text_encoding"]
