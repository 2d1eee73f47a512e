# src/calamine/extraction/pruner.py
import logging

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)


class PruneError(RuntimeError):
    """Raised when pruning would detach the selected content root."""


def prune(tree: DocumentTree, root: int) -> int:
    """
    Removes every element below the body that neither contains `root` nor
    is contained by it.

    Only the ancestor chain of the root is descended; everything hanging
    off that chain is detached as a whole subtree, so detached nodes are
    never visited again. Text nodes along the chain are left alone.

    Args:
        tree (DocumentTree): The document to prune in place.
        root (int): The selected content root.

    Returns:
        int: The number of detached subtrees.

    Raises:
        PruneError: If the root is not attached below the body. Raised
                    before any mutation.
    """
    body = tree.body
    if body is None or root in (body, tree.root):
        return 0

    if not tree.is_attached(root) or not tree.contains(body, root):
        raise PruneError(f"Content root {root} is not attached below the body.")

    chain = set(tree.ancestors(root))
    removed = 0
    stack = [body]

    while stack:
        current = stack.pop()
        for child in tree.children(current):
            if child == root or not tree.is_element(child):
                continue
            if child in chain:
                stack.append(child)
                continue
            if tree.parent(child) == current:
                tree.detach(child)
                removed += 1

    logger.debug("Pruned %d subtrees around root %d.", removed, root)
    return removed
