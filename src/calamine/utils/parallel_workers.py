# src/calamine/utils/parallel_workers.py
import json
import logging
from typing import Optional

from calamine.engine import ContentExtractor
from calamine.model import ExtractionSettings, SourceDocument

logger = logging.getLogger(__name__)


def extract_document_worker(document: SourceDocument, settings: ExtractionSettings) -> Optional[str]:
    """
    Worker function extracting one document.
    Returns the ExtractionResult as a JSON string (or None on error).
    """
    if not document.html or not document.html.strip():
        logger.debug("Worker skip document %s: empty input.", document.id)
        return None

    try:
        result = ContentExtractor(settings).extract(document.html, base_url=document.base_url)
        # JSON keeps the payload cheap to pass back under the spawn start method
        return json.dumps(result.model_dump(mode="json"), ensure_ascii=False)
    except Exception as e:
        logger.error("WORKER ERROR extracting document %s: %s", document.id, e, exc_info=True)
        return None
