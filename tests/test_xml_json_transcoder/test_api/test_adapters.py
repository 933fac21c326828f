"""Tests for the parser adapters feeding the builder."""

import io
import json
import xml.sax

import pytest
from lxml import etree

from xml_json_transcoder.api.adapters import (
    AdapterMetadata,
    EventSourceAdapter,
    LxmlEventAdapter,
    SaxEventAdapter,
    get_adapter,
    list_available_adapters,
    local_name,
    register_adapter,
)
from xml_json_transcoder.output import OutputSink
from xml_json_transcoder.tree import BuilderState, JSONTreeBuilder

ADAPTERS = [SaxEventAdapter, LxmlEventAdapter]


def run(adapter: EventSourceAdapter, source, **builder_kwargs) -> str:
    stream = io.BytesIO()
    builder = JSONTreeBuilder(OutputSink(stream), **builder_kwargs)
    adapter.feed(source, builder)
    return stream.getvalue().decode("utf-8")


class TestLocalName:
    """Test namespace stripping of element names."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("item", "item"),
            ("ns:item", "item"),
            ("{urn:example}item", "item"),
            ("{http://example.com/a:b}item", "item"),
        ],
    )
    def test_local_name(self, name, expected) -> None:
        """Test prefix and Clark notation are removed."""
        assert local_name(name) == expected


@pytest.mark.parametrize("adapter_class", ADAPTERS)
class TestAdapterConversion:
    """Behaviour shared by every parser backend."""

    def test_reference_example(self, adapter_class) -> None:
        """Test the canonical document through a real parser."""
        source = b'<a x="1"><b>hi</b><b>bye</b></a>'

        assert run(adapter_class(), source) == '{"a":{"x":"1","b":["hi","bye"]}}'

    def test_entities_and_cdata(self, adapter_class) -> None:
        """Test entity references and CDATA arrive as accumulated text."""
        source = b'<a>x &amp; y <![CDATA[<raw>]]> &#233;</a>'

        assert json.loads(run(adapter_class(), source)) == {"a": "x & y <raw> é"}

    def test_escaped_attribute(self, adapter_class) -> None:
        """Test quote and backslash in an attribute produce valid JSON."""
        source = b'<a v="say &quot;hi&quot; \\ now"/>'

        text = run(adapter_class(), source)

        assert text == '{"a":{"v":"say \\"hi\\" \\\\ now"}}'
        assert json.loads(text)["a"]["v"] == 'say "hi" \\ now'

    def test_comments_and_processing_instructions_dropped(self, adapter_class) -> None:
        """Test comments and PIs do not reach the tree."""
        source = b'<?xml version="1.0"?><a><!-- note --><?pi data?><b>1</b></a>'

        assert run(adapter_class(), source) == '{"a":{"b":"1"}}'

    def test_pretty_printed_input(self, adapter_class) -> None:
        """Test indentation whitespace in the input is not rendered."""
        source = b"<list>\n  <item>1</item>\n  <item>2</item>\n  <item>3</item>\n</list>\n"

        assert run(adapter_class(), source) == '{"list":{"item":["1","2","3"]}}'

    def test_declared_input_encoding(self, adapter_class) -> None:
        """Test bytes in a declared non-UTF-8 encoding are decoded."""
        source = b'<?xml version="1.0" encoding="ISO-8859-1"?><a>caf\xe9</a>'

        assert run(adapter_class(), source) == '{"a":"café"}'

    def test_indented_output(self, adapter_class) -> None:
        """Test the builder's indented mode through a parser."""
        text = run(adapter_class(), b"<a><b>1</b></a>", compact=False)

        assert text == '{\n  "a": {\n    "b": "1"\n  }\n}'

    def test_file_object_source(self, adapter_class) -> None:
        """Test reading from a binary file object."""
        source = io.BytesIO(b"<a><b>1</b></a>")

        assert run(adapter_class(), source) == '{"a":{"b":"1"}}'

    def test_path_source(self, adapter_class, tmp_path) -> None:
        """Test reading from a file path."""
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<a><b>1</b></a>")

        assert run(adapter_class(), path) == '{"a":{"b":"1"}}'

    def test_str_source(self, adapter_class) -> None:
        """Test reading XML given as text."""
        assert run(adapter_class(), "<a>été</a>") == '{"a":"été"}'

    def test_builder_reset_after_parse_error(self, adapter_class) -> None:
        """Test a malformed document leaves the builder idle and reusable."""
        stream = io.BytesIO()
        builder = JSONTreeBuilder(OutputSink(stream))
        adapter = adapter_class()

        with pytest.raises((xml.sax.SAXException, etree.XMLSyntaxError)):
            adapter.feed(b"<a><b></a>", builder)

        assert builder.state is BuilderState.IDLE
        assert builder.head is None

        adapter.feed(b"<c>ok</c>", builder)
        assert stream.getvalue() == b'{"c":"ok"}'


class TestNamespaceHandling:
    """Test backend-specific treatment of prefixed names."""

    SOURCE = b'<ns:a xmlns:ns="urn:x" ns:attr="1"><ns:b>t</ns:b></ns:a>'

    def test_sax_keeps_attribute_names_literally(self) -> None:
        """Test SAX drops element prefixes but keeps attribute qualified names."""
        value = json.loads(run(SaxEventAdapter(), self.SOURCE))

        assert value == {"a": {"xmlns:ns": "urn:x", "ns:attr": "1", "b": "t"}}

    def test_lxml_uses_local_names(self) -> None:
        """Test lxml reduces Clark-notation names to local names."""
        value = json.loads(run(LxmlEventAdapter(), self.SOURCE))

        assert value == {"a": {"attr": "1", "b": "t"}}

    def test_lxml_keeps_attributes_sharing_a_local_name(self) -> None:
        """Test a namespaced attribute keeps its Clark name when the local name is taken."""
        source = b'<a xmlns:x="u" x:id="1" id="2" x:k="3"><id>4</id></a>'

        text = run(LxmlEventAdapter(), source)

        assert text == '{"a":{"{u}id":"1","id":"2","k":"3","id":"4"}}'

    def test_lxml_namespaced_attributes_sharing_a_local_name(self) -> None:
        """Test two namespaced attributes with one local name both survive."""
        source = b'<a xmlns:x="u" xmlns:y="v" x:id="1" y:id="2"/>'

        value = json.loads(run(LxmlEventAdapter(), source))

        assert value == {"a": {"{u}id": "1", "{v}id": "2"}}

    def test_sax_keeps_attributes_sharing_a_local_name(self) -> None:
        """Test SAX keeps qualified names, so prefixed and plain attributes differ."""
        source = b'<a xmlns:x="u" x:id="1" id="2"/>'

        value = json.loads(run(SaxEventAdapter(), source))

        assert value == {"a": {"xmlns:x": "u", "x:id": "1", "id": "2"}}


class TestAdapterRegistry:
    """Test adapter lookup and registration."""

    def test_get_builtin_adapters(self) -> None:
        """Test the built-in backends are registered."""
        assert isinstance(get_adapter("sax"), SaxEventAdapter)
        assert isinstance(get_adapter("lxml", "corr"), LxmlEventAdapter)
        assert get_adapter("lxml", "corr").correlation_id == "corr"

    def test_unknown_adapter(self) -> None:
        """Test an unknown name lists the known backends."""
        with pytest.raises(KeyError, match="Unknown parser adapter 'dom'"):
            get_adapter("dom")

    def test_list_available_adapters(self) -> None:
        """Test metadata of usable adapters."""
        names = [meta.name for meta in list_available_adapters()]

        assert "sax" in names
        assert "lxml" in names

    def test_register_rejects_non_adapter(self) -> None:
        """Test registering an unrelated class fails."""
        with pytest.raises(TypeError):
            register_adapter("bogus", dict)  # type: ignore

    def test_register_custom_adapter(self) -> None:
        """Test a custom event source can be registered and used."""

        class ListEventAdapter(EventSourceAdapter):
            @property
            def metadata(self) -> AdapterMetadata:
                return AdapterMetadata("events", "builtin", "Pre-recorded events")

            def _parse(self, source, builder) -> None:
                builder.start_document()
                for name, text in source:
                    builder.start_element(name)
                    builder.characters(text)
                    builder.end_element()
                builder.end_document()

        register_adapter("events", ListEventAdapter)

        text = run(get_adapter("events"), [("a", "1"), ("a", "2")])

        assert text == '{"a":["1","2"]}'
