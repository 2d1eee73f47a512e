# src/calamine/model.py
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from calamine.extraction.bias_tables import BiasTables, DEFAULT_SIGNATURES
from calamine.filters.attributes import DEFAULT_ATTRIBUTE_WHITELIST

logger = logging.getLogger(__name__)


class Descriptor(BaseModel):
    """One candidate of an image `srcset`: a url plus optional size hints."""
    url: str
    width: Optional[int] = None
    height: Optional[int] = None
    density: Optional[float] = None

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, v: Any) -> str:
        if v is None:
            raise ValueError("url is required")
        s = str(v).strip()
        if not s:
            raise ValueError("url cannot be empty")
        return s


class ExtractionSettings(BaseModel):
    """
    Per-invocation engine options.

    Defaults mirror the `extraction` section of settings.json; use
    `from_config()` to build an instance from the active configuration.
    """
    row_scan_limit: int = Field(default=20, ge=0)
    emphasis_unwrap_threshold: int = Field(default=500, ge=0)
    annotate: bool = False
    signatures: List[str] = Field(default_factory=lambda: list(DEFAULT_SIGNATURES))
    attribute_whitelist: Dict[str, List[str]] = Field(
        default_factory=lambda: {tag: list(names) for tag, names in DEFAULT_ATTRIBUTE_WHITELIST.items()}
    )
    tables: BiasTables = Field(default_factory=BiasTables)

    @classmethod
    def from_config(cls, **overrides: Any) -> "ExtractionSettings":
        """
        Builds settings from the `extraction` configuration section.
        Explicit keyword arguments win over configured values; None values
        are ignored so CLI defaults do not mask the configuration.
        """
        from calamine.managers.config_manager import config_manager

        section = config_manager.get_nested("extraction", {}) or {}
        if not isinstance(section, dict):
            logger.warning("Ignoring non-dict 'extraction' configuration section.")
            section = {}

        values = {k: v for k, v in section.items() if k in cls.model_fields}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class ExtractionReport(BaseModel):
    """Outcome of running the pipeline on a tree."""
    method: str = "none"  # 'signature', 'score' or 'none'
    root: Optional[int] = None
    root_tag: Optional[str] = None
    root_score: Optional[float] = None
    signature: Optional[str] = None
    pruned: bool = False
    elements_before: int = 0
    elements_after: int = 0


class ExtractionResult(BaseModel):
    """Serialized output of `ContentExtractor.extract`."""
    html: str
    content: str
    report: ExtractionReport


class SourceDocument(BaseModel):
    """A raw document queued for batch extraction."""
    id: str
    html: str
    base_url: Optional[str] = None
