# src/calamine/extraction/annotate.py
from typing import Optional

from calamine.dom.core import DocumentTree
from calamine.extraction.scoring import ScoreMap

ANNOTATION_PREFIX = "data-calamine-"
SCORE_ATTRIBUTE = ANNOTATION_PREFIX + "score"
ROOT_ATTRIBUTE = ANNOTATION_PREFIX + "root"


def annotate_scores(tree: DocumentTree, scores: Optional[ScoreMap], root: Optional[int], method: str) -> int:
    """
    Writes diagnostic attributes onto the scored elements.

    Every attached element with a non-zero score gets `data-calamine-score`
    plus one `data-calamine-<feature>` attribute per contributing feature.
    The selected root is marked with `data-calamine-root="<method>"`.

    Returns:
        int: The number of annotated elements.
    """
    annotated = 0
    if scores is not None:
        for index, score in sorted(scores.items()):
            if not score or not tree.is_attached(index):
                continue
            tree.set_attr(index, SCORE_ATTRIBUTE, f"{score:.2f}")
            for feature, value in sorted(scores.features.get(index, {}).items()):
                if value:
                    tree.set_attr(index, f"{ANNOTATION_PREFIX}{feature}", f"{value:.2f}")
            annotated += 1

    if root is not None:
        tree.set_attr(root, ROOT_ATTRIBUTE, method)
    return annotated


def is_annotation(name: str) -> bool:
    return name.startswith(ANNOTATION_PREFIX)
