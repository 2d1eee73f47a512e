# src/calamine/dom/builder.py
import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from .core import DocumentTree

logger = logging.getLogger(__name__)

# Strings bs4 keeps in the soup that never become document content
_SKIPPED_STRINGS = (Doctype, Declaration, ProcessingInstruction)


class TreeBuilder:
    """
    Builder responsible for converting raw HTML into a DocumentTree.
    BeautifulSoup does the tolerant parsing; this class only copies the soup
    into the index-addressed arena the extraction engine works on.
    """

    def __init__(self, ensure_body: bool = True):
        self.ensure_body = ensure_body

    def parse(self, html: str) -> DocumentTree:
        """
        Parses raw HTML into a DocumentTree.

        Args:
            html (str): The raw HTML string.

        Returns:
            DocumentTree: The arena tree. Its root is None when the input held
                          no markup at all.
        """
        if not html:
            return DocumentTree()

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        if not clean_html:
            return DocumentTree()

        soup = BeautifulSoup(clean_html, 'html.parser')
        return self.from_soup(soup)

    def from_soup(self, soup: BeautifulSoup) -> DocumentTree:
        """Copies an already parsed soup into a new DocumentTree."""
        tree = DocumentTree()
        top_level = self._copy_nodes(tree, soup)

        html_nodes = [i for i in top_level if tree.tag(i) == "html"]
        if html_nodes:
            tree.root = html_nodes[0]
        elif top_level:
            # Fragment without an <html> element: synthesize one
            tree.root = tree.create_element("html")
            for index in top_level:
                tree.append_child(tree.root, index)
        else:
            return tree

        if self.ensure_body and tree.body is None:
            self._insert_body(tree)

        logger.debug("Built tree with %d nodes.", len(tree.nodes))
        return tree

    def _copy_nodes(self, tree: DocumentTree, soup: BeautifulSoup) -> List[int]:
        """
        Iteratively copies the soup. Returns the indices of the top-level nodes.
        """
        top_level: List[int] = []
        stack: List[Tuple[object, Optional[int]]] = [
            (child, None) for child in reversed(list(soup.contents))
        ]

        while stack:
            item, parent = stack.pop()
            index = self._copy_single(tree, item)
            if index is None:
                continue

            if parent is None:
                top_level.append(index)
            else:
                tree.append_new(parent, index)

            if isinstance(item, Tag):
                stack.extend((child, index) for child in reversed(list(item.contents)))

        return top_level

    @staticmethod
    def _copy_single(tree: DocumentTree, item: object) -> Optional[int]:
        if isinstance(item, Tag):
            return tree.create_element(item.name, _flatten_attrs(item.attrs))
        if isinstance(item, Comment):
            return tree.create_comment(str(item))
        if isinstance(item, _SKIPPED_STRINGS):
            return None
        if isinstance(item, NavigableString):
            return tree.create_text(str(item))
        return None

    @staticmethod
    def _insert_body(tree: DocumentTree) -> None:
        """Moves every non-head child of the root into a new <body>."""
        body = tree.create_element("body")
        for child in tree.children(tree.root):
            if tree.tag(child) != "head":
                tree.append_child(body, child)
        tree.append_child(tree.root, body)


def _flatten_attrs(attrs: dict) -> dict:
    """bs4 returns multi-valued attributes (class, rel) as lists."""
    out = {}
    for name, value in attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        out[name.lower()] = "" if value is None else str(value)
    return out
