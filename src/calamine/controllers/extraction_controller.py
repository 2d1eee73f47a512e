# src/calamine/controllers/extraction_controller.py
from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tqdm.auto import tqdm

from calamine.model import ExtractionResult, ExtractionSettings, SourceDocument
from calamine.utils.parallel_workers import extract_document_worker

logger = logging.getLogger(__name__)


class ExtractionController:
    """
    Orchestrates content extraction over many independent documents.
    Utilizes multiprocessing to maximize throughput for CPU-intensive tree work.
    """

    def __init__(self, *, default_workers: Optional[int] = None) -> None:
        self.default_workers = default_workers or (os.cpu_count() or 4)

    def _load_documents(self, input_dir: Path, pattern: str, show_progress: bool) -> List[SourceDocument]:
        """Reads every matching file below `input_dir` as a document."""
        paths = sorted(p for p in input_dir.rglob(pattern) if p.is_file())
        iterator = paths if not show_progress else tqdm(paths, desc="Reading documents", unit="doc", leave=False)

        documents: List[SourceDocument] = []
        for path in iterator:
            try:
                html = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.error("Could not read %s: %s", path, e)
                continue
            documents.append(SourceDocument(id=str(path.relative_to(input_dir)), html=html))
        return documents

    def _persist_results(
            self,
            output_dir: Path,
            results: Dict[str, ExtractionResult],
            content_only: bool,
            show_progress: bool,
    ) -> int:
        """Writes one output file per result, mirroring the input layout."""
        items = sorted(results.items())
        if show_progress:
            items = list(tqdm(items, desc="Saving documents", unit="doc", leave=False))

        saved = 0
        for doc_id, result in items:
            target = output_dir / doc_id
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(result.content if content_only else result.html, encoding="utf-8")
            saved += 1
        return saved

    def extract_many(
            self,
            documents: Iterable[SourceDocument],
            *,
            settings: Optional[ExtractionSettings] = None,
            workers: Optional[int] = None,
            show_progress: bool = True,
    ) -> Dict[str, Any]:
        """
        Runs the extractor over all documents in a process pool.
        Returns the per-document results plus execution statistics.
        """
        docs = list(documents)
        if not docs:
            return self._empty_stats()

        settings = settings or ExtractionSettings.from_config()
        n_workers = int(workers or self.default_workers)

        start = time.perf_counter()
        ok, ko = 0, 0
        results: Dict[str, ExtractionResult] = {}
        failed: List[str] = []

        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            futures = {pool.submit(extract_document_worker, doc, settings): doc.id for doc in docs}
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Extracting", unit=" doc")

            for fut in iterator:
                doc_id = futures[fut]
                try:
                    result_json = fut.result()
                    if not result_json or not isinstance(result_json, str):
                        ko += 1
                        failed.append(doc_id)
                        continue

                    results[doc_id] = ExtractionResult.model_validate(json.loads(result_json))
                    ok += 1
                except Exception as e:
                    ko += 1
                    failed.append(doc_id)
                    logger.error("Failed to process document %s: %s", doc_id, e, exc_info=True)

        dur = time.perf_counter() - start
        methods: Dict[str, int] = {}
        for result in results.values():
            methods[result.report.method] = methods.get(result.report.method, 0) + 1

        return {
            "results": results,
            "failed": sorted(failed),
            "documents_total": len(docs),
            "documents_success": ok,
            "documents_failed": ko,
            "methods": methods,
            "duration_s": round(dur, 3),
            "documents_per_s": round((len(docs) / dur) if dur > 0 else 0.0, 2),
        }

    def extract_directory(
            self,
            input_dir: Path,
            output_dir: Path,
            *,
            pattern: str = "*.html",
            settings: Optional[ExtractionSettings] = None,
            workers: Optional[int] = None,
            content_only: bool = False,
            show_progress: bool = True,
    ) -> Dict[str, Any]:
        """Extracts every matching file of `input_dir` into `output_dir`."""
        documents = self._load_documents(Path(input_dir), pattern, show_progress=show_progress)
        stats = self.extract_many(documents, settings=settings, workers=workers, show_progress=show_progress)
        stats["documents_saved"] = self._persist_results(
            Path(output_dir), stats["results"], content_only, show_progress=show_progress
        )
        return stats

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        """Returns a default stats dictionary for empty batches."""
        return {
            "results": {}, "failed": [], "documents_total": 0, "documents_success": 0,
            "documents_failed": 0, "methods": {}, "duration_s": 0.0, "documents_per_s": 0.0,
        }
