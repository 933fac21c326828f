"""Recursive JSON writer for build trees.

Rendering rules:

- A node's members are its attributes (attribute name as key), then its text
  under the reserved text key, then its children grouped by name. A name that
  occurs once among the children becomes a single member; a repeated name
  becomes an array in document order. Group order is first-occurrence order.
- A node with no attributes and no children but with text collapses to the
  bare text string, both as a member value and as an array element. A node
  with nothing at all renders as ``{}``.
- The synthetic root (empty name) is not wrapped: its members become the
  members of the outermost object.
- Every leaf is a JSON string. No numeric or boolean inference.

Indented output uses the same layout as ``json.dumps(value, indent=N)`` so the
two modes differ only in whitespace.
"""

import io
import json
from typing import Any, Dict, List, Protocol, Tuple, Union

from xml_json_transcoder.shared.config import DEFAULT_INDENT_WIDTH, DEFAULT_TEXT_KEY
from xml_json_transcoder.tree.node import JSONNode

MemberValue = Union[str, JSONNode, List[JSONNode]]


class TextSink(Protocol):
    """Anything with a ``write(str)`` method."""

    def write(self, text: str) -> Any:
        ...


def _quote(value: str, ensure_ascii: bool = False) -> str:
    return json.dumps(value, ensure_ascii=ensure_ascii)


class JSONNodeWriter:
    """Render ``JSONNode`` trees as JSON text.

    Args:
        compact: Omit all non-essential whitespace
        indent_width: Spaces per depth level in indented mode
        text_key: Member name used for an element's character data
        skip_whitespace_text: Do not render whitespace-only text
        ensure_ascii: Escape non-ASCII characters as ``\\uXXXX`` sequences
    """

    def __init__(
        self,
        compact: bool = True,
        indent_width: int = DEFAULT_INDENT_WIDTH,
        text_key: str = DEFAULT_TEXT_KEY,
        skip_whitespace_text: bool = True,
        ensure_ascii: bool = False,
    ) -> None:
        self.compact = compact
        self.indent_width = indent_width
        self.text_key = text_key
        self.skip_whitespace_text = skip_whitespace_text
        self.ensure_ascii = ensure_ascii
        self._key_separator = ":" if compact else ": "

    def is_scalar(self, node: JSONNode) -> bool:
        """Check if ``node`` collapses to its bare text string."""
        return (
            not node.attributes
            and not node.children
            and node.significant_text(self.skip_whitespace_text) is not None
        )

    def members(self, node: JSONNode) -> List[Tuple[str, MemberValue]]:
        """Get the ordered JSON members of ``node``."""
        result: List[Tuple[str, MemberValue]] = list(node.attributes.items())

        text = node.significant_text(self.skip_whitespace_text)
        if text is not None:
            result.append((self.text_key, text))

        for name, group in node.child_groups().items():
            if len(group) == 1:
                result.append((name, group[0]))
            else:
                result.append((name, group))

        return result

    def write(
        self,
        node: JSONNode,
        sink: TextSink,
        indent_level: int = 0,
        top_level: bool = True,
    ) -> None:
        """Append the JSON rendering of ``node`` to ``sink``.

        Args:
            node: Node to render together with its subtree
            sink: Destination with a ``write(str)`` method
            indent_level: Depth of ``node`` in the output, for indentation
            top_level: Render as a complete JSON document. The synthetic root
                contributes its members directly; any other node is wrapped as
                ``{"name": value}``.
        """
        if top_level:
            if node.is_root:
                self._write_object(self.members(node), sink, indent_level)
            else:
                self._write_object([(node.name, node)], sink, indent_level)
        else:
            self._write_value(node, sink, indent_level)

    def _write_value(self, value: MemberValue, sink: TextSink, level: int) -> None:
        if isinstance(value, str):
            sink.write(_quote(value, self.ensure_ascii))
        elif isinstance(value, list):
            self._write_array(value, sink, level)
        elif self.is_scalar(value):
            sink.write(_quote(value.text, self.ensure_ascii))
        else:
            self._write_object(self.members(value), sink, level)

    def _write_object(
        self, members: List[Tuple[str, MemberValue]], sink: TextSink, level: int
    ) -> None:
        if not members:
            sink.write("{}")
            return

        sink.write("{")
        for index, (key, value) in enumerate(members):
            if index:
                sink.write(",")
            self._newline(sink, level + 1)
            sink.write(_quote(key, self.ensure_ascii))
            sink.write(self._key_separator)
            self._write_value(value, sink, level + 1)
        self._newline(sink, level)
        sink.write("}")

    def _write_array(self, items: List[JSONNode], sink: TextSink, level: int) -> None:
        sink.write("[")
        for index, item in enumerate(items):
            if index:
                sink.write(",")
            self._newline(sink, level + 1)
            self._write_value(item, sink, level + 1)
        self._newline(sink, level)
        sink.write("]")

    def _newline(self, sink: TextSink, level: int) -> None:
        if not self.compact:
            sink.write("\n" + " " * (self.indent_width * level))

    def to_python(self, node: JSONNode, top_level: bool = True) -> Any:
        """Build the value ``write`` would produce as plain dicts, lists and strings.

        When an attribute name, the text key and a child name collide, the
        written JSON repeats the key while the returned dict keeps the last one.
        """
        if top_level and not node.is_root:
            return {node.name: self.to_python(node, top_level=False)}
        if not top_level and self.is_scalar(node):
            return node.text

        value: Dict[str, Any] = {}
        for key, member in self.members(node):
            if isinstance(member, str):
                value[key] = member
            elif isinstance(member, list):
                value[key] = [self.to_python(item, top_level=False) for item in member]
            else:
                value[key] = self.to_python(member, top_level=False)
        return value


def serialize(
    node: JSONNode,
    compact: bool = True,
    indent_width: int = DEFAULT_INDENT_WIDTH,
    text_key: str = DEFAULT_TEXT_KEY,
    skip_whitespace_text: bool = True,
) -> str:
    """Render ``node`` as a complete JSON document string."""
    buffer = io.StringIO()
    writer = JSONNodeWriter(compact, indent_width, text_key, skip_whitespace_text)
    writer.write(node, buffer)
    return buffer.getvalue()


def to_python(
    node: JSONNode,
    text_key: str = DEFAULT_TEXT_KEY,
    skip_whitespace_text: bool = True,
) -> Any:
    """Convert ``node`` to the Python value its JSON rendering loads as."""
    writer = JSONNodeWriter(text_key=text_key, skip_whitespace_text=skip_whitespace_text)
    return writer.to_python(node)
