# src/calamine/dom/soup_view.py
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .core import DocumentTree
from .serializer import serialize

logger = logging.getLogger(__name__)

# Carries each element's arena index into the soup
INDEX_ATTRIBUTE = "data-calamine-index"


class SoupView:
    """
    A BeautifulSoup snapshot of the attached part of a DocumentTree.

    Every element in the soup carries its arena index, so matches found with
    bs4's CSS selector engine map straight back onto the arena. Detached
    subtrees are never serialized and therefore can never match. Mutations
    made to the tree after the view was built are not reflected.
    """

    def __init__(self, tree: DocumentTree):
        self.tree = tree
        self.soup = BeautifulSoup(serialize(tree, index_attribute=INDEX_ATTRIBUTE), 'html.parser')
        logger.debug("Built soup view of %d nodes.", len(tree.nodes))

    def tag_for(self, index: int) -> Optional[Tag]:
        return self.soup.find(attrs={INDEX_ATTRIBUTE: str(index)})

    def select(self, selector: str, scope: Optional[int] = None) -> List[int]:
        """
        Matches a CSS selector against the descendants of `scope`.

        Args:
            selector (str): Any selector soupsieve understands.
            scope (Optional[int]): Element whose descendants are searched; the
                                   whole document when None.

        Returns:
            List[int]: Arena indices of the matches, in document order.

        Raises:
            soupsieve.SelectorSyntaxError: If the selector cannot be parsed.
        """
        context = self.soup if scope is None else self.tag_for(scope)
        if context is None:
            return []
        return [int(tag[INDEX_ATTRIBUTE]) for tag in context.select(selector) if tag.has_attr(INDEX_ATTRIBUTE)]
