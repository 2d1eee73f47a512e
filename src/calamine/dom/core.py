# src/calamine/dom/core.py
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    """Tagged kind of every node stored in the arena."""
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"


class Node(BaseModel):
    """
    A single node of the document arena.

    Nodes reference each other by integer index only. A node whose `parent` is
    None is either the root or detached.
    """
    index: int
    kind: NodeKind
    tag: Optional[str] = None
    attrs: Dict[str, str] = Field(default_factory=dict)
    text: str = ""
    parent: Optional[int] = None
    children: List[int] = Field(default_factory=list)

    @property
    def is_element(self) -> bool:
        return self.kind is NodeKind.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT


class DocumentTree:
    """
    Arena-backed mutable document tree.

    Element identity is the node index, which stays stable for the lifetime of
    the tree, so score maps and other per-element tables are keyed by int.
    Detached subtrees remain in the arena but are unreachable from the root.
    """

    def __init__(self) -> None:
        self.nodes: List[Node] = []
        self.root: Optional[int] = None

    # -------- Construction --------

    def _add(self, node: Node) -> int:
        self.nodes.append(node)
        return node.index

    def create_element(self, tag: str, attrs: Optional[Dict[str, str]] = None) -> int:
        return self._add(Node(index=len(self.nodes), kind=NodeKind.ELEMENT,
                              tag=tag.lower(), attrs=dict(attrs or {})))

    def create_text(self, text: str) -> int:
        return self._add(Node(index=len(self.nodes), kind=NodeKind.TEXT, text=text))

    def create_comment(self, text: str) -> int:
        return self._add(Node(index=len(self.nodes), kind=NodeKind.COMMENT, text=text))

    # -------- Accessors --------

    def node(self, index: int) -> Node:
        return self.nodes[index]

    def is_element(self, index: int) -> bool:
        return self.nodes[index].kind is NodeKind.ELEMENT

    def is_text(self, index: int) -> bool:
        return self.nodes[index].kind is NodeKind.TEXT

    def tag(self, index: int) -> Optional[str]:
        return self.nodes[index].tag

    def parent(self, index: int) -> Optional[int]:
        return self.nodes[index].parent

    def children(self, index: int) -> List[int]:
        """Returns a snapshot of the child list."""
        return list(self.nodes[index].children)

    def element_children(self, index: int) -> List[int]:
        return [c for c in self.nodes[index].children if self.nodes[c].kind is NodeKind.ELEMENT]

    def first_child(self, index: int) -> Optional[int]:
        kids = self.nodes[index].children
        return kids[0] if kids else None

    def last_child(self, index: int) -> Optional[int]:
        kids = self.nodes[index].children
        return kids[-1] if kids else None

    def previous_sibling(self, index: int) -> Optional[int]:
        parent = self.nodes[index].parent
        if parent is None:
            return None
        siblings = self.nodes[parent].children
        pos = siblings.index(index)
        return siblings[pos - 1] if pos > 0 else None

    def next_sibling(self, index: int) -> Optional[int]:
        parent = self.nodes[index].parent
        if parent is None:
            return None
        siblings = self.nodes[parent].children
        pos = siblings.index(index)
        return siblings[pos + 1] if pos + 1 < len(siblings) else None

    def previous_element_sibling(self, index: int) -> Optional[int]:
        sibling = self.previous_sibling(index)
        while sibling is not None and not self.is_element(sibling):
            sibling = self.previous_sibling(sibling)
        return sibling

    # -------- Attributes --------

    def get_attr(self, index: int, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.nodes[index].attrs.get(name, default)

    def has_attr(self, index: int, name: str) -> bool:
        return name in self.nodes[index].attrs

    def set_attr(self, index: int, name: str, value: str) -> None:
        self.nodes[index].attrs[name.lower()] = value

    def remove_attr(self, index: int, name: str) -> None:
        self.nodes[index].attrs.pop(name, None)

    # -------- Document landmarks --------

    @property
    def body(self) -> Optional[int]:
        """The first `body` child of the root, or None for a body-less tree."""
        if self.root is None:
            return None
        for child in self.nodes[self.root].children:
            if self.nodes[child].tag == "body":
                return child
        return None

    @property
    def head(self) -> Optional[int]:
        if self.root is None:
            return None
        for child in self.nodes[self.root].children:
            if self.nodes[child].tag == "head":
                return child
        return None

    # -------- Topology queries --------

    def ancestors(self, index: int) -> List[int]:
        """Walks upward, nearest ancestor first."""
        out: List[int] = []
        parent = self.nodes[index].parent
        while parent is not None:
            out.append(parent)
            parent = self.nodes[parent].parent
        return out

    def is_attached(self, index: int) -> bool:
        """True when the node is the root or reachable from it."""
        if self.root is None:
            return False
        current: Optional[int] = index
        while current is not None:
            if current == self.root:
                return True
            current = self.nodes[current].parent
        return False

    def contains(self, ancestor: int, index: int) -> bool:
        """Inclusive containment: a node contains itself."""
        current: Optional[int] = index
        while current is not None:
            if current == ancestor:
                return True
            current = self.nodes[current].parent
        return False

    def closest(self, index: int, tags: Iterable[str], include_self: bool = False) -> Optional[int]:
        """Nearest ancestor (optionally self) whose tag is in `tags`."""
        wanted = tags if isinstance(tags, (set, frozenset)) else set(tags)
        current = index if include_self else self.nodes[index].parent
        while current is not None:
            if self.nodes[current].tag in wanted:
                return current
            current = self.nodes[current].parent
        return None

    def descendants(self, index: int, include_self: bool = False) -> List[int]:
        """
        Pre-order snapshot of all nodes below `index`.

        Uses an explicit stack so hostile nesting depth cannot exhaust the
        interpreter stack.
        """
        out: List[int] = [index] if include_self else []
        stack = list(reversed(self.nodes[index].children))
        while stack:
            current = stack.pop()
            out.append(current)
            kids = self.nodes[current].children
            if kids:
                stack.extend(reversed(kids))
        return out

    def elements(self, index: Optional[int] = None, include_self: bool = False) -> List[int]:
        """Pre-order snapshot of descendant elements (default scope: root)."""
        scope = self.root if index is None else index
        if scope is None:
            return []
        return [i for i in self.descendants(scope, include_self)
                if self.nodes[i].kind is NodeKind.ELEMENT]

    def elements_by_tag(self, index: int, tags: Iterable[str]) -> List[int]:
        wanted = set(tags)
        return [i for i in self.elements(index) if self.nodes[i].tag in wanted]

    def text_content(self, index: int) -> str:
        node = self.nodes[index]
        if node.kind is NodeKind.TEXT:
            return node.text
        if node.kind is NodeKind.COMMENT:
            return ""
        return "".join(self.nodes[i].text for i in self.descendants(index)
                       if self.nodes[i].kind is NodeKind.TEXT)

    # -------- Mutation --------

    def detach(self, index: int) -> None:
        """Removes the node (and its subtree) from its parent. No-op on orphans."""
        node = self.nodes[index]
        if node.parent is None:
            return
        self.nodes[node.parent].children.remove(index)
        node.parent = None

    def append_new(self, parent: int, child: int) -> None:
        """Links a freshly created, parentless node under `parent` without the cycle check."""
        self.nodes[parent].children.append(child)
        self.nodes[child].parent = parent

    def append_child(self, parent: int, child: int) -> None:
        self._check_insertion(parent, child)
        self.detach(child)
        self.nodes[parent].children.append(child)
        self.nodes[child].parent = parent

    def insert_before(self, parent: int, child: int, reference: Optional[int]) -> None:
        """Inserts `child` under `parent` before `reference` (append when None)."""
        if reference is None:
            self.append_child(parent, child)
            return
        if self.nodes[reference].parent != parent:
            raise ValueError(f"Node {reference} is not a child of {parent}.")
        self._check_insertion(parent, child)
        self.detach(child)
        siblings = self.nodes[parent].children
        siblings.insert(siblings.index(reference), child)
        self.nodes[child].parent = parent

    def _check_insertion(self, parent: int, child: int) -> None:
        if self.nodes[parent].kind is not NodeKind.ELEMENT:
            raise ValueError("Only elements can hold children.")
        if self.contains(child, parent):
            raise ValueError(f"Inserting node {child} under {parent} would create a cycle.")

    def unwrap(self, index: int) -> None:
        """
        Replaces an element with its child nodes.

        A single space text node is inserted wherever the move would make two
        text nodes adjacent, so words on either side do not merge.
        """
        parent = self.nodes[index].parent
        if parent is None:
            return

        previous = self.previous_sibling(index)
        following = self.next_sibling(index)
        first = self.first_child(index)
        last = self.last_child(index)

        if previous is not None and first is not None and self.is_text(previous) and self.is_text(first):
            self.insert_before(parent, self.create_text(" "), index)

        for child in self.children(index):
            self.insert_before(parent, child, index)

        if following is not None and last is not None and self.is_text(following) and self.is_text(last):
            self.insert_before(parent, self.create_text(" "), index)

        self.detach(index)
