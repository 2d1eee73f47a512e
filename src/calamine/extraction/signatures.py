# src/calamine/extraction/signatures.py
import logging
from typing import Iterable, Optional, Tuple

from soupsieve import SelectorSyntaxError

from calamine.dom.core import DocumentTree
from calamine.dom.soup_view import SoupView
from calamine.extraction.bias_tables import DEFAULT_SIGNATURES

logger = logging.getLogger(__name__)


def find_signature_match(
        tree: DocumentTree,
        body: int,
        signatures: Iterable[str] = DEFAULT_SIGNATURES,
) -> Optional[Tuple[int, str]]:
    """
    Looks for a known content container below the body.

    Signatures are CSS selectors, tried in order against a soup view of the
    current tree; the first one that matches exactly one element wins. Zero or
    multiple matches move on to the next signature.

    Returns:
        Optional[Tuple[int, str]]: (element index, matching signature), or
        None when no signature is unambiguous.
    """
    view: Optional[SoupView] = None
    for signature in signatures:
        if view is None:
            view = SoupView(tree)
        try:
            found = view.select(signature, scope=body)
        except SelectorSyntaxError as e:
            logger.warning("Skipping invalid signature %r: %s", signature, e)
            continue

        if len(found) == 1:
            logger.debug("Signature %r matched element %d.", signature, found[0])
            return found[0], signature
    return None
