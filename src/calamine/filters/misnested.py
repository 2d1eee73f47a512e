# src/calamine/filters/misnested.py
import logging
from typing import Optional

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)

BLOCK_TAGS = frozenset({"blockquote", "h1", "h2", "h3", "h4", "h5", "h6", "p"})
INLINE_TAGS = frozenset({"a", "span", "b", "strong", "i"})
LIST_TAGS = frozenset({"ul", "ol", "dl"})
MEDIA_TAGS = frozenset({"audio", "picture", "video"})

# Upper bound of relocations per block element
MAX_RELOCATIONS = 32


def relocate_block(tree: DocumentTree, block: int, max_relocations: int = MAX_RELOCATIONS) -> int:
    """
    Turns "inline wrapping block" into "block wrapping inline".

    The block moves before its inline ancestor, its children move into that
    ancestor, and the ancestor is then nested inside the block. Repeats for
    the next inline ancestor up to `max_relocations` times.

    Returns:
        int: The number of relocations performed.
    """
    moves = 0
    while moves < max_relocations:
        ancestor = tree.closest(block, INLINE_TAGS)
        if ancestor is None:
            break
        grandparent = tree.parent(ancestor)
        if grandparent is None:
            break

        tree.insert_before(grandparent, block, ancestor)
        for child in tree.children(block):
            tree.append_child(ancestor, child)
        tree.append_child(block, ancestor)
        moves += 1
    return moves


def repair_misnested(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Repairs common invalid nesting below `scope` (default: the body).

    - hr elements directly inside lists are removed
    - anchors nested in anchors are unwrapped
    - figcaption outside any figure is removed
    - source outside audio/picture/video is removed
    - blocks inside inline elements are relocated

    Returns:
        int: The number of repairs.
    """
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    repairs = 0

    for hr in tree.elements_by_tag(scope, ("hr",)):
        parent = tree.parent(hr)
        if parent is not None and tree.tag(parent) in LIST_TAGS:
            tree.detach(hr)
            repairs += 1

    for anchor in tree.elements_by_tag(scope, ("a",)):
        if tree.parent(anchor) is not None and tree.closest(anchor, ("a",)) is not None:
            tree.unwrap(anchor)
            repairs += 1

    for caption in tree.elements_by_tag(scope, ("figcaption",)):
        if tree.is_attached(caption) and tree.closest(caption, ("figure",)) is None:
            tree.detach(caption)
            repairs += 1

    for source in tree.elements_by_tag(scope, ("source",)):
        if tree.is_attached(source) and tree.closest(source, MEDIA_TAGS) is None:
            tree.detach(source)
            repairs += 1

    for block in tree.elements_by_tag(scope, BLOCK_TAGS):
        if tree.is_attached(block):
            repairs += relocate_block(tree, block)

    if repairs:
        logger.debug("Repaired %d misnested elements.", repairs)
    return repairs
