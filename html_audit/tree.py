"""
In-memory document tree.

The loader converts whatever the parsing library produced into these plain
nodes, so extractors and the validator only ever talk to the small query
surface defined here: select by tag, select by attribute predicate, text
content and attribute lookup. Tests can build a tree by hand with the same
classes and never touch a parser.

Nodes are frozen once built: children are tuples, attributes are read-only
mappings, and the parent link is a lookup reference only.
"""

from collections import Counter
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Optional

# Tag names the validator takes a census of
CENSUS_TAGS = ("html", "head", "body", "title")

DOCUMENT_TAG = "#document"


class Node:
    """An element (``tag`` set) or a text node (``tag`` is None)."""

    __slots__ = ("tag", "attrs", "children", "parent", "data")

    def __init__(
        self,
        tag: Optional[str],
        attrs: Optional[Mapping[str, str]] = None,
        children: tuple = (),
        data: str = ""
    ):
        self.tag = tag
        # Copy so the caller's dict can never alias the tree's storage
        self.attrs = MappingProxyType(dict(attrs or {}))
        self.children = tuple(children)
        self.data = data
        self.parent = None
        for child in self.children:
            child.parent = self

    @classmethod
    def text_node(cls, data: str) -> "Node":
        return cls(None, data=data)

    @property
    def is_text(self) -> bool:
        return self.tag is None

    def __repr__(self) -> str:
        if self.is_text:
            return f"Node(text={self.data[:20]!r})"
        return f"Node(<{self.tag}> attrs={dict(self.attrs)!r} children={len(self.children)})"

    # --- Attribute access ---

    def get(self, name: str, default=None):
        """Attribute value or ``default`` when the attribute is absent."""
        return self.attrs.get(name, default)

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    # --- Traversal ---

    def iter_descendants(self) -> Iterator["Node"]:
        """All descendant elements in document order (pre-order)."""
        # Explicit stack: html5lib happily builds trees deeper than the
        # recursion limit for pathological markup.
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.is_text:
                continue
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, *tags: str) -> list["Node"]:
        """Descendant elements whose tag is one of ``tags`` (document order)."""
        wanted = set(tags)
        return [node for node in self.iter_descendants() if node.tag in wanted]

    def find(self, *tags: str) -> Optional["Node"]:
        wanted = set(tags)
        for node in self.iter_descendants():
            if node.tag in wanted:
                return node
        return None

    def select(
        self,
        attr: str,
        predicate: Optional[Callable[[str], bool]] = None,
        tags: tuple = ()
    ) -> list["Node"]:
        """
        Descendant elements carrying ``attr`` whose value satisfies ``predicate``.

        Args:
            attr: Attribute that must be present
            predicate: Optional test on the attribute value
            tags: Optional tag names to restrict the match to
        """
        matches = []
        for node in self.iter_descendants():
            if tags and node.tag not in tags:
                continue
            if attr not in node.attrs:
                continue
            if predicate is None or predicate(node.attrs[attr]):
                matches.append(node)
        return matches

    def text_content(self, skip: tuple = ()) -> str:
        """
        Concatenated text of all descendant text nodes, like DOM textContent.

        Args:
            skip: Tag names whose subtrees contribute no text
        """
        if self.is_text:
            return self.data
        parts = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.is_text:
                parts.append(node.data)
            elif node.tag not in skip:
                stack.extend(reversed(node.children))
        return "".join(parts)


class DocumentTree:
    """
    A parsed document: the root node plus facts about the source markup.

    ``authored_counts`` records how many times html/head/body/title were
    written in the markup itself. Browser-style parsers synthesize the first
    three, so the tree alone cannot tell whether they were present.
    """

    def __init__(
        self,
        root: Node,
        authored_counts: Optional[Mapping[str, int]] = None,
        warnings: Optional[list[str]] = None,
        parser: str = "memory"
    ):
        self.root = root
        if authored_counts is None:
            authored_counts = Counter(
                node.tag for node in root.iter_descendants() if node.tag in CENSUS_TAGS
            )
        self.authored_counts = MappingProxyType(
            {tag: int(authored_counts.get(tag, 0)) for tag in CENSUS_TAGS}
        )
        self.warnings = tuple(warnings or ())
        self.parser = parser

    @classmethod
    def from_element(cls, element: Node, **kwargs) -> "DocumentTree":
        """Wrap a hand-built element (usually <html>) in a document node."""
        return cls(Node(DOCUMENT_TAG, children=(element,)), **kwargs)

    @property
    def document_element(self) -> Optional[Node]:
        """The root element (first element child of the document)."""
        for child in self.root.children:
            if not child.is_text:
                return child
        return None

    # The query surface mirrors Node so callers can treat the tree as a node.

    def iter_elements(self) -> Iterator[Node]:
        return self.root.iter_descendants()

    def find_all(self, *tags: str) -> list[Node]:
        return self.root.find_all(*tags)

    def find(self, *tags: str) -> Optional[Node]:
        return self.root.find(*tags)

    def select(self, attr: str, predicate=None, tags: tuple = ()) -> list[Node]:
        return self.root.select(attr, predicate, tags)
