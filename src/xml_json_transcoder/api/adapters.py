"""Parser adapters that drive a ``JSONTreeBuilder`` from a real XML parser.

Each adapter translates one parser's callbacks into the builder's five events
(document start, element start, character data, element end, document end).
The parser is trusted for well-formedness; the adapters only reduce element
names to their local part and hand attributes over in document order.

If the parser fails part-way through a document the builder is reset before
the error propagates, so the same builder can take the next document.
"""

import io
import xml.sax
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Type, Union
from xml.sax import handler as sax_handler
from xml.sax import xmlreader

from lxml import etree

from xml_json_transcoder.shared import get_logger
from xml_json_transcoder.tree.builder import JSONTreeBuilder

XMLSource = Union[str, bytes, Path, BinaryIO]

_READ_CHUNK_SIZE = 64 * 1024


def local_name(name: str) -> str:
    """Strip a namespace prefix (``p:name``) or Clark URI (``{uri}name``)."""
    if name.startswith("{"):
        return name.rpartition("}")[2]
    return name.rpartition(":")[2]


@dataclass
class AdapterMetadata:
    """Metadata describing a parser adapter."""

    name: str
    target_library: str
    description: str


class EventSourceAdapter(ABC):
    """Base class for adapters feeding parse events into a builder."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, self.metadata.name)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    def is_available(self) -> bool:
        """Check if the underlying parser can be used."""
        return True

    def feed(self, source: XMLSource, builder: JSONTreeBuilder) -> None:
        """Parse ``source`` and deliver its events to ``builder``.

        Args:
            source: XML text (``str``), raw bytes, a ``Path`` or a binary file
                object
            builder: Builder receiving the events; idle on return
        """
        self.logger.debug(
            "Feeding parse events",
            extra={"source_type": type(source).__name__},
        )
        try:
            self._parse(source, builder)
        except BaseException:
            builder.reset()
            raise

    @abstractmethod
    def _parse(self, source: XMLSource, builder: JSONTreeBuilder) -> None:
        """Run the parser over ``source``."""


class _SaxContentHandler(sax_handler.ContentHandler):
    """SAX content handler forwarding callbacks to a builder."""

    def __init__(self, builder: JSONTreeBuilder) -> None:
        super().__init__()
        self._builder = builder

    def startDocument(self) -> None:
        self._builder.start_document()

    def endDocument(self) -> None:
        self._builder.end_document()

    def startElement(self, name: str, attrs: xmlreader.AttributesImpl) -> None:
        attributes = [(attr, attrs.getValue(attr)) for attr in attrs.getNames()]
        self._builder.start_element(local_name(name), attributes)

    def endElement(self, name: str) -> None:
        self._builder.end_element()

    def characters(self, content: str) -> None:
        self._builder.characters(content)


class SaxEventAdapter(EventSourceAdapter):
    """Adapter for the standard library ``xml.sax`` (expat) parser."""

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="sax",
            target_library="xml.sax",
            description="Streaming SAX events from the standard library expat reader",
        )

    def _parse(self, source: XMLSource, builder: JSONTreeBuilder) -> None:
        parser = xml.sax.make_parser()
        parser.setFeature(sax_handler.feature_namespaces, False)
        parser.setFeature(sax_handler.feature_external_ges, False)
        parser.setContentHandler(_SaxContentHandler(builder))

        if isinstance(source, Path):
            parser.parse(str(source))
        elif isinstance(source, (str, bytes)):
            input_source = xmlreader.InputSource()
            if isinstance(source, str):
                input_source.setCharacterStream(io.StringIO(source))
            else:
                input_source.setByteStream(io.BytesIO(source))
            parser.parse(input_source)
        else:
            parser.parse(source)


def _attribute_pairs(attrib: Dict[str, str]) -> List[Tuple[str, str]]:
    """Name lxml attributes by local name, keeping Clark names that would collide.

    An element may carry several attributes with the same local name in
    different namespaces (``x:id`` and ``id``). Those keep their ``{uri}local``
    name so no value is lost.
    """
    names = [local_name(key) for key in attrib]
    shared = {name for name in names if names.count(name) > 1}
    return [
        (key if name in shared and key.startswith("{") else name, value)
        for (key, value), name in zip(attrib.items(), names)
    ]


class _LxmlTarget:
    """lxml parser target forwarding callbacks to a builder."""

    def __init__(self, builder: JSONTreeBuilder) -> None:
        self._builder = builder

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        attributes = _attribute_pairs(attrib)
        self._builder.start_element(local_name(tag), attributes)

    def end(self, tag: str) -> None:
        self._builder.end_element()

    def data(self, data: str) -> None:
        self._builder.characters(data)

    def close(self) -> None:
        return None


class LxmlEventAdapter(EventSourceAdapter):
    """Adapter for ``lxml.etree`` feed parsing with a parser target.

    lxml has no document callbacks, so the adapter brackets the parse with the
    builder's document start and end. Attribute names in Clark notation are
    reduced to their local part unless another attribute of the same element
    shares it.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""
        return AdapterMetadata(
            name="lxml",
            target_library="lxml",
            description="libxml2 feed parser with a target receiving element events",
        )

    def _parse(self, source: XMLSource, builder: JSONTreeBuilder) -> None:
        parser = etree.XMLParser(
            target=_LxmlTarget(builder),
            resolve_entities=False,
            no_network=True,
        )

        builder.start_document()
        if isinstance(source, (str, bytes)):
            parser.feed(source)
        elif isinstance(source, Path):
            with source.open("rb") as stream:
                self._feed_stream(parser, stream)
        else:
            self._feed_stream(parser, source)
        parser.close()
        builder.end_document()

    @staticmethod
    def _feed_stream(parser: etree.XMLParser, stream: BinaryIO) -> None:
        while True:
            chunk = stream.read(_READ_CHUNK_SIZE)
            if not chunk:
                break
            parser.feed(chunk)


class AdapterRegistry:
    """Registry of parser adapters by name."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[EventSourceAdapter]] = {}

    def register(self, name: str, adapter_class: Type[EventSourceAdapter]) -> None:
        """Register an adapter class under ``name``."""
        if not issubclass(adapter_class, EventSourceAdapter):
            raise TypeError("Adapter must be an EventSourceAdapter subclass")
        self._adapters[name] = adapter_class

    def get(self, name: str, correlation_id: Optional[str] = None) -> EventSourceAdapter:
        """Instantiate the adapter registered under ``name``.

        Raises:
            KeyError: If no adapter has that name
        """
        try:
            adapter_class = self._adapters[name]
        except KeyError:
            known = ", ".join(sorted(self._adapters))
            raise KeyError(f"Unknown parser adapter {name!r} (known: {known})") from None
        return adapter_class(correlation_id)

    def names(self) -> List[str]:
        """Get registered adapter names."""
        return sorted(self._adapters)


_registry = AdapterRegistry()
_registry.register("sax", SaxEventAdapter)
_registry.register("lxml", LxmlEventAdapter)


def register_adapter(name: str, adapter_class: Type[EventSourceAdapter]) -> None:
    """Register an adapter class globally."""
    _registry.register(name, adapter_class)


def get_adapter(name: str, correlation_id: Optional[str] = None) -> EventSourceAdapter:
    """Get an adapter instance by name."""
    return _registry.get(name, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """Get metadata for all registered adapters that can be used."""
    adapters = [_registry.get(name) for name in _registry.names()]
    return [adapter.metadata for adapter in adapters if adapter.is_available()]
