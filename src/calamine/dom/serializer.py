# src/calamine/dom/serializer.py
import html
from typing import List, Optional, Tuple

from .core import DocumentTree, NodeKind

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "command", "embed", "hr", "img", "input",
    "keygen", "link", "meta", "param", "source", "track", "wbr",
})

# Children of these elements are written verbatim
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "xmp", "plaintext"})


def _open_tag(tree: DocumentTree, index: int, index_attribute: Optional[str] = None) -> str:
    node = tree.node(index)
    parts = [node.tag]
    for name, value in node.attrs.items():
        if name == index_attribute:
            continue
        if value == "":
            parts.append(name)
        else:
            parts.append(f'{name}="{html.escape(value, quote=True)}"')
    if index_attribute:
        parts.append(f'{index_attribute}="{index}"')
    return "<" + " ".join(parts) + ">"


def serialize(tree: DocumentTree, index: Optional[int] = None, index_attribute: Optional[str] = None) -> str:
    """
    Serializes a node (default: the document root) and its subtree to HTML.

    Args:
        tree (DocumentTree): The tree to serialize.
        index (Optional[int]): The node to start from.
        index_attribute (Optional[str]): When set, every element is written
            with its arena index under this attribute name.

    Returns:
        str: The markup, or an empty string for an empty tree.
    """
    start = tree.root if index is None else index
    if start is None:
        return ""

    out: List[str] = []
    # (node, closing) pairs; closing entries emit the end tag
    stack: List[Tuple[int, bool]] = [(start, False)]

    while stack:
        current, closing = stack.pop()
        node = tree.node(current)

        if closing:
            out.append(f"</{node.tag}>")
            continue

        if node.kind is NodeKind.TEXT:
            parent = node.parent
            if parent is not None and tree.tag(parent) in RAW_TEXT_ELEMENTS:
                out.append(node.text)
            else:
                out.append(html.escape(node.text, quote=False))
            continue

        if node.kind is NodeKind.COMMENT:
            out.append(f"<!--{node.text}-->")
            continue

        out.append(_open_tag(tree, current, index_attribute))
        if node.tag in VOID_ELEMENTS:
            continue

        stack.append((current, True))
        stack.extend((child, False) for child in reversed(node.children))

    return "".join(out)


def serialize_children(tree: DocumentTree, index: Optional[int]) -> str:
    """Serializes only the child nodes of `index` (the element's inner HTML)."""
    if index is None:
        return ""
    return "".join(serialize(tree, child) for child in tree.children(index))
