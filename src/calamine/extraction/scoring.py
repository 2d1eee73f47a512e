# src/calamine/extraction/scoring.py
import logging
from collections import defaultdict
from typing import Dict, Iterable, Optional, Set, Tuple

from calamine.dom.core import DocumentTree
from calamine.extraction.bias_tables import BiasTables
from calamine.extraction.features import EXTRACTORS, Extractor

logger = logging.getLogger(__name__)


class ScoreMap:
    """
    Element index -> accumulated score (default 0.0).

    Only elements attached to the tree can receive scores. The attached set
    is captured when the map is created; call `refresh()` after mutating the
    tree to re-validate it.
    """

    def __init__(self, tree: DocumentTree):
        self.tree = tree
        self._scores: Dict[int, float] = {}
        self.features: Dict[int, Dict[str, float]] = defaultdict(dict)
        self._attached: Set[int] = set()
        self.refresh()

    def refresh(self) -> None:
        if self.tree.root is None:
            self._attached = set()
        else:
            self._attached = set(self.tree.elements(self.tree.root, include_self=True))
        # Drop entries of elements detached since the last validation
        for index in [i for i in self._scores if i not in self._attached]:
            del self._scores[index]
            self.features.pop(index, None)

    def add(self, index: int, value: float, feature: Optional[str] = None) -> bool:
        """Adds to an element's score. Returns False when the element is detached."""
        if index not in self._attached:
            logger.debug("Rejected score write to detached node %d.", index)
            return False
        self._scores[index] = self._scores.get(index, 0.0) + value
        if feature:
            self.features[index][feature] = self.features[index].get(feature, 0.0) + value
        return True

    def get(self, index: int) -> float:
        return self._scores.get(index, 0.0)

    def items(self) -> Iterable[Tuple[int, float]]:
        return self._scores.items()

    def as_dict(self) -> Dict[int, float]:
        return dict(self._scores)

    def __contains__(self, index: int) -> bool:
        return index in self._scores

    def __len__(self) -> int:
        return len(self._scores)


def score_tree(
        tree: DocumentTree,
        body: int,
        tables: Optional[BiasTables] = None,
        extractors: Tuple[Tuple[str, Extractor], ...] = EXTRACTORS,
) -> ScoreMap:
    """
    Runs every extractor and sums their contributions into a ScoreMap.

    Args:
        tree (DocumentTree): The (pre-filtered) document.
        body (int): Index of the body element; only its subtree is scored.
        tables (Optional[BiasTables]): Weights, defaults when omitted.
        extractors: Ordered (feature name, extractor) pairs.

    Returns:
        ScoreMap: The aggregated scores, with a per-feature breakdown.
    """
    tables = tables or BiasTables()
    scores = ScoreMap(tree)
    for name, extractor in extractors:
        contributions = extractor(tree, body, tables)
        # Sorted so float summation order never depends on dict history
        for index in sorted(contributions):
            scores.add(index, contributions[index], feature=name)
    logger.debug("Scored %d elements.", len(scores))
    return scores


def select_best_element(tree: DocumentTree, body: int, scores: ScoreMap) -> Optional[int]:
    """
    Returns the element below `body` with the strictly highest positive
    score; ties go to the first element in document order. None when no
    element scores above zero.
    """
    best: Optional[int] = None
    best_score = 0.0
    for index in tree.elements(body):
        score = scores.get(index)
        if score > best_score:
            best, best_score = index, score
    return best
