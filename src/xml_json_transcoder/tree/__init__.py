"""Tree building and serialization for XML-to-JSON transcoding.

Key Components:
    JSONNode: One XML element with attributes, accumulated text and children
    JSONTreeBuilder: Event-driven builder that owns the tree for one document
    JSONNodeWriter: Recursive writer rendering a tree as compact or indented JSON
"""

from .builder import BuilderState, JSONTreeBuilder
from .node import JSONNode
from .serializer import JSONNodeWriter, serialize, to_python

__all__ = [
    "BuilderState",
    "JSONNode",
    "JSONNodeWriter",
    "JSONTreeBuilder",
    "serialize",
    "to_python",
]
