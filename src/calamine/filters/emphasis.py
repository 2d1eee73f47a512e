# src/calamine/filters/emphasis.py
import logging
import re
from typing import Optional

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)

EMPHASIS_TAGS = ("b", "big", "em", "i", "strong", "mark", "u")

_WHITESPACE_RUN = re.compile(r"\s+")


def condensed_length(text: str) -> int:
    return len(_WHITESPACE_RUN.sub(" ", text).strip())


def unwrap_long_emphasis(tree: DocumentTree, threshold: int = 500, scope: Optional[int] = None) -> int:
    """Unwraps emphasis elements whose condensed text is longer than `threshold`."""
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    unwrapped = 0
    for element in tree.elements_by_tag(scope, EMPHASIS_TAGS):
        if condensed_length(tree.text_content(element)) > threshold:
            tree.unwrap(element)
            unwrapped += 1

    if unwrapped:
        logger.debug("Unwrapped %d emphasis elements longer than %d characters.", unwrapped, threshold)
    return unwrapped
