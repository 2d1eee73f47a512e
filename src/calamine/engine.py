# src/calamine/engine.py
import logging
from typing import Optional

from calamine.dom.builder import TreeBuilder
from calamine.dom.core import DocumentTree
from calamine.dom.serializer import serialize, serialize_children
from calamine.extraction.annotate import annotate_scores
from calamine.extraction.prefilter import prefilter
from calamine.extraction.pruner import PruneError, prune
from calamine.extraction.scoring import ScoreMap, score_tree, select_best_element
from calamine.extraction.signatures import find_signature_match
from calamine.filters.anchors import remove_invalid_anchors, unwrap_formatting_anchors
from calamine.filters.attributes import filter_attributes, remove_empty_attributes
from calamine.filters.breaks import remove_duplicate_breaks
from calamine.filters.emphasis import unwrap_long_emphasis
from calamine.filters.figures import filter_figures
from calamine.filters.forms import filter_form_elements
from calamine.filters.images import remove_sourceless_images, resolve_lazy_images, resolve_responsive_images
from calamine.filters.leaves import remove_leaves
from calamine.filters.lists import unwrap_single_item_lists
from calamine.filters.misnested import repair_misnested
from calamine.filters.tables import unwrap_single_column_tables
from calamine.filters.telemetry import remove_ping_attributes, remove_telemetry_images
from calamine.filters.whitespace import condense_whitespace, trim_document
from calamine.model import ExtractionReport, ExtractionResult, ExtractionSettings

logger = logging.getLogger(__name__)


class ContentExtractor:
    """
    Isolates the main content of an HTML document.

    Pipeline: pre-filter, signature match or scoring plus best-element
    selection, optional annotation, pruning, then the post-filters. The
    extractor holds no per-document state, so one instance can process any
    number of documents.
    """

    def __init__(self, settings: Optional[ExtractionSettings] = None, builder: Optional[TreeBuilder] = None):
        self.settings = settings or ExtractionSettings()
        self.builder = builder or TreeBuilder()

    def extract(self, html: str, base_url: Optional[str] = None) -> ExtractionResult:
        """
        Parses, extracts and serializes a document.

        Args:
            html (str): Raw HTML.
            base_url (Optional[str]): Used to judge lazy image URLs.

        Returns:
            ExtractionResult: The whole cleaned document, the body's inner
                              HTML and the extraction report.
        """
        tree = self.builder.parse(html)
        report = self.extract_tree(tree, base_url=base_url)
        return ExtractionResult(
            html=serialize(tree),
            content=serialize_children(tree, tree.body),
            report=report,
        )

    def extract_tree(self, tree: DocumentTree, base_url: Optional[str] = None) -> ExtractionReport:
        """Runs the pipeline on `tree` in place and reports what was selected."""
        body = tree.body
        if tree.root is None or body is None:
            logger.debug("Document has no root or body; nothing to extract.")
            return ExtractionReport(method="none")

        report = ExtractionReport(elements_before=len(tree.elements(body)))
        prefilter(tree)

        scores: Optional[ScoreMap] = None
        match = find_signature_match(tree, body, self.settings.signatures)
        if match is not None:
            report.root, report.signature = match
            report.method = "signature"
        else:
            scores = score_tree(tree, body, self.settings.tables)
            best = select_best_element(tree, body, scores)
            if best is not None:
                report.root = best
                report.root_score = round(scores.get(best), 2)
                report.method = "score"

        if report.root is not None:
            report.root_tag = tree.tag(report.root)
            logger.debug("Selected <%s> (%d) via %s.", report.root_tag, report.root, report.method)
        else:
            logger.debug("No confident content root; keeping the document whole.")

        if self.settings.annotate:
            annotate_scores(tree, scores, report.root, report.method)

        if report.root is not None:
            try:
                prune(tree, report.root)
                report.pruned = True
            except PruneError as e:
                logger.warning("Pruning skipped: %s", e)

        self._apply_filters(tree, base_url)
        report.elements_after = len(tree.elements(body))
        return report

    def _apply_filters(self, tree: DocumentTree, base_url: Optional[str]) -> None:
        settings = self.settings
        resolve_lazy_images(tree, base_url)
        resolve_responsive_images(tree)
        remove_telemetry_images(tree, base_url)
        remove_ping_attributes(tree)
        remove_sourceless_images(tree)
        remove_invalid_anchors(tree)
        unwrap_formatting_anchors(tree)
        filter_form_elements(tree)
        repair_misnested(tree)
        filter_figures(tree)
        unwrap_long_emphasis(tree, settings.emphasis_unwrap_threshold)
        remove_duplicate_breaks(tree)
        remove_leaves(tree)
        unwrap_single_column_tables(tree, settings.row_scan_limit)
        unwrap_single_item_lists(tree)
        condense_whitespace(tree)
        trim_document(tree)
        filter_attributes(tree, settings.attribute_whitelist, keep_annotations=settings.annotate)
        remove_empty_attributes(tree)
