"""Extraction cascade: structured data first, then layout heuristics."""
from typing import List, Optional, Sequence
import logging

from ..document import Document
from ..metrics import MetricsCollector
from ..models import ExtractionResult
from .dom import (
    CardExtractor, HeadingExtractor, LayoutExtractor, LinkExtractor, ListExtractor,
    dedupe_page,
)
from .matchers import SelectorVocabulary
from .structured import METHOD as STRUCTURED_METHOD, StructuredDataExtractor

logger = logging.getLogger(__name__)


class ExtractionPipeline:
    """Runs the extraction strategies over one page.

    Order of strategies:
    1. Structured data; when it yields anything the layout cascade is skipped
    2. Card, List, Link; the first non-empty result wins
    3. Heading, only when Card, List and Link all came back empty
    """

    def __init__(self,
                 structured: Optional[StructuredDataExtractor] = None,
                 layout: Optional[Sequence[LayoutExtractor]] = None,
                 fallback: Optional[LayoutExtractor] = None,
                 metrics: Optional[MetricsCollector] = None) -> None:
        self.metrics = metrics
        self.structured = structured or StructuredDataExtractor(metrics)
        self.layout = list(layout) if layout is not None else [
            CardExtractor(), ListExtractor(), LinkExtractor(),
        ]
        self.fallback = fallback if fallback is not None else HeadingExtractor()

    @classmethod
    def from_vocabulary(cls,
                        vocabulary: Optional[SelectorVocabulary] = None,
                        job_keywords: Optional[Sequence[str]] = None,
                        intent_phrases: Optional[Sequence[str]] = None,
                        metrics: Optional[MetricsCollector] = None) -> "ExtractionPipeline":
        """Build the default cascade with a shared vocabulary and keyword list."""
        vocabulary = vocabulary or SelectorVocabulary()
        return cls(
            layout=[
                CardExtractor(vocabulary, job_keywords),
                ListExtractor(vocabulary, job_keywords),
                LinkExtractor(vocabulary, job_keywords),
            ],
            fallback=HeadingExtractor(vocabulary, job_keywords, intent_phrases),
            metrics=metrics,
        )

    def run(self, document: Document, company: str = "") -> ExtractionResult:
        """Extract job candidates from a document.

        Args:
            document: The fetched page
            company: Company name stamped on every candidate

        Returns:
            ExtractionResult naming the strategy that produced the candidates
            and every strategy attempted
        """
        attempted: List[str] = [STRUCTURED_METHOD]
        candidates = dedupe_page(self.structured.extract(document))
        method = STRUCTURED_METHOD if candidates else None

        if not candidates:
            for extractor in self.layout:
                attempted.append(extractor.method)
                candidates = extractor.extract(document)
                if candidates:
                    method = extractor.method
                    break

        if not candidates and self.fallback is not None:
            attempted.append(self.fallback.method)
            candidates = self.fallback.extract(document)
            method = self.fallback.method if candidates else None

        for candidate in candidates:
            candidate.company = company
        if self.metrics and method:
            self.metrics.record_candidates(method, len(candidates))
        logger.info(f"Extracted {len(candidates)} jobs from {document.url} "
                    f"(method: {method or 'none'})")
        return ExtractionResult(candidates=candidates, method=method, attempted=attempted)
