"""Tree node type shared by the builder and the serializer.

A ``JSONNode`` mirrors one XML element: its local name, the attributes seen at
element start, the character data accumulated so far, and its child elements in
document order. The synthetic document root is a node with an empty name.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass(eq=False)
class JSONNode:
    """One XML element (or the synthetic document root) in the build tree.

    Children are attached when their start event arrives, before they are
    populated, so text and grandchildren added later are visible through the
    parent's ``children`` list.
    """

    name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    children: List["JSONNode"] = field(default_factory=list)
    parent: Optional["JSONNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Establish parent relationships for children given at construction."""
        for child in self.children:
            child.parent = self

    @property
    def is_root(self) -> bool:
        """Check if this is the synthetic document root."""
        return self.name == ""

    @property
    def has_text(self) -> bool:
        """Check if any character data has been received."""
        return self.text is not None and self.text != ""

    def significant_text(self, skip_whitespace: bool = True) -> Optional[str]:
        """Get the text to render, or None if there is nothing to render.

        Args:
            skip_whitespace: Treat whitespace-only text (indentation between
                child elements) as absent

        Returns:
            The accumulated text, unmodified, when it should be rendered
        """
        if not self.has_text:
            return None
        if skip_whitespace and not self.text.strip():
            return None
        return self.text

    def append_text(self, fragment: str) -> None:
        """Append a character-data fragment to the accumulated text."""
        if self.text is None:
            self.text = fragment
        else:
            self.text += fragment

    def add_child(self, child: "JSONNode") -> None:
        """Attach ``child`` as the last child of this node."""
        if not isinstance(child, JSONNode):
            raise TypeError("Child must be a JSONNode instance")
        if child.parent is not None:
            raise ValueError(f"Node {child.name!r} is already attached to a parent")

        child.parent = self
        self.children.append(child)

    def find_children(self, name: str) -> List["JSONNode"]:
        """Find all direct children with matching name."""
        return [child for child in self.children if child.name == name]

    def child_groups(self) -> Dict[str, List["JSONNode"]]:
        """Group children by name.

        Key order follows the first occurrence of each name and every group
        keeps its members in document order.
        """
        groups: Dict[str, List[JSONNode]] = {}
        for child in self.children:
            groups.setdefault(child.name, []).append(child)
        return groups

    def iter_nodes(self) -> Iterator["JSONNode"]:
        """Iterate over this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_depth(self) -> int:
        """Get depth of this node in the tree (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth
