"""Layout heuristics for pages without structured job data.

Four strategies, cheapest and most specific first:
- CardExtractor: repeating job-card containers
- ListExtractor: list items mentioning job keywords
- LinkExtractor: hyperlinks whose text or href mentions job keywords
- HeadingExtractor: headings that look like job titles, on hiring pages only
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import logging
import re

from bs4 import Tag

from ..document import Document
from ..models import JobCandidate, clean_text
from .matchers import SelectorVocabulary, first_text, outermost
from .structured import normalize_date

logger = logging.getLogger(__name__)

DEFAULT_JOB_KEYWORDS = [
    "apply now", "apply here", "job opening", "position available",
    "we are hiring", "join our team", "career opportunity", "vacancy",
    "employment", "full time", "part time", "contract", "internship",
    "remote", "on-site", "hybrid",
]

DEFAULT_HIRING_INTENT_PHRASES = [
    "we are hiring", "join our team", "career opportunities", "open positions",
]

TITLE_PATTERNS = [
    re.compile(r"\b(engineer|developer|manager|analyst|designer|coordinator|specialist|director|lead|senior|junior)\b", re.I),
    re.compile(r"\b(full.time|part.time|remote|contract|internship)\b", re.I),
    re.compile(r"\b(software|marketing|sales|hr|finance|operations|product)\b", re.I),
]

LOCATION_PATTERNS = [
    re.compile(r"location\s*[:\-]\s*([^|•\n]+?)(?:\s*[|•(]|$)", re.I),
    re.compile(r"\b(Remote|Hybrid|On-site|Onsite)\b", re.I),
    re.compile(r"\b(?:in|at)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]*)*(?:,\s*[A-Z]{2})?)"),
]

# Separators between the title and the rest of a list item's text
TITLE_SEPARATORS = re.compile(r"\s+[-–—|•·]\s+|\s*[|•·]\s*|\s+\(|,\s+|\n")

# Call-to-action fragments that are never part of a title
CALL_TO_ACTION = re.compile(r"\b(apply now|apply here|learn more|view job|see details)\b.*$", re.I)


def contains_keyword(text: str, keywords: Sequence[str]) -> bool:
    """True if text contains a keyword or its hyphenated variant."""
    lowered = text.lower()
    return any(k in lowered or k.replace(" ", "-") in lowered for k in keywords)


def looks_like_job_title(text: str) -> bool:
    if not text or len(text) < 5 or len(text) > 100:
        return False
    return any(pattern.search(text) for pattern in TITLE_PATTERNS)


def dedupe_page(candidates: List[JobCandidate]) -> List[JobCandidate]:
    """Keep the first candidate per case and whitespace insensitive (title, location)."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = candidate.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


class LayoutExtractor(ABC):
    """Shared contract: document in, ordered page-local unique candidates out."""

    method = ""

    def __init__(self, vocabulary: Optional[SelectorVocabulary] = None,
                 job_keywords: Optional[Sequence[str]] = None) -> None:
        self.vocabulary = vocabulary or SelectorVocabulary()
        self.job_keywords = list(job_keywords or DEFAULT_JOB_KEYWORDS)

    def extract(self, document: Document) -> List[JobCandidate]:
        candidates = dedupe_page(self._extract(document))
        logger.debug(f"{self.method} extractor found {len(candidates)} jobs on {document.url}")
        return candidates

    @abstractmethod
    def _extract(self, document: Document) -> List[JobCandidate]:
        """Strategy-specific scan of the document."""

    def _candidate(self, document: Document, title: str, raw_text: str,
                   url: Optional[str] = None, **fields) -> Optional[JobCandidate]:
        title = clean_text(title)
        if not title:
            return None
        return JobCandidate(
            title=title,
            url=url or document.url,
            source_url=document.url,
            extraction_method=self.method,
            raw_text=clean_text(raw_text)[:1000],
            **fields,
        )


class CardExtractor(LayoutExtractor):
    """Finds repeating job-card containers.

    Card families are tried in rank order; the first family yielding at
    least one titled card wins.
    """

    method = "card"

    def _extract(self, document: Document) -> List[JobCandidate]:
        for family in self.vocabulary.card_families:
            cards = outermost(family.find_all(document.body))
            jobs = [job for job in (self._parse_card(document, card) for card in cards) if job]
            if jobs:
                return jobs
        return []

    def _parse_card(self, document: Document, card: Tag) -> Optional[JobCandidate]:
        title = first_text(card, self.vocabulary.title)
        if not title:
            return None
        link = card.find("a", href=True)
        return self._candidate(
            document,
            title,
            card.get_text(" "),
            url=document.resolve(link["href"]) if link else document.url,
            location=first_text(card, self.vocabulary.location),
            department=first_text(card, self.vocabulary.department),
            posted_date=self._posted_date(card),
        )

    def _posted_date(self, card: Tag) -> Optional[str]:
        time_el = card.find("time", attrs={"datetime": True})
        if time_el:
            return normalize_date(time_el["datetime"])
        return normalize_date(first_text(card, self.vocabulary.date))


class ListExtractor(LayoutExtractor):
    """Accepts list items whose text mentions a job keyword."""

    method = "list"

    def _extract(self, document: Document) -> List[JobCandidate]:
        jobs = []
        seen_items = set()
        for container_matcher in self.vocabulary.list_containers:
            for container in container_matcher.find_all(document.body):
                for item in self._items(container):
                    if id(item) in seen_items:
                        continue
                    seen_items.add(id(item))
                    job = self._parse_item(document, item)
                    if job:
                        jobs.append(job)
        return jobs

    def _items(self, container: Tag) -> List[Tag]:
        items = []
        for matcher in self.vocabulary.list_items:
            items.extend(matcher.find_all(container))
        return outermost(items)

    def _parse_item(self, document: Document, item: Tag) -> Optional[JobCandidate]:
        text = clean_text(item.get_text(" "))
        if not text or not contains_keyword(text, self.job_keywords):
            return None
        link = item.find("a", href=True)
        return self._candidate(
            document,
            extract_title(item, text),
            text,
            url=document.resolve(link["href"]) if link else document.url,
            location=extract_location(text),
        )


def extract_title(item: Tag, text: str) -> str:
    """Best guess at a list item's title.

    Prefers an emphasised child (heading, strong, link) and falls back to
    the leading segment of the item text.
    """
    for name in ("h1", "h2", "h3", "h4", "h5", "strong", "b", "a"):
        child = item.find(name)
        if child:
            child_text = CALL_TO_ACTION.sub("", clean_text(child.get_text(" "))).strip()
            if child_text:
                return child_text
    head = TITLE_SEPARATORS.split(text, maxsplit=1)[0]
    return CALL_TO_ACTION.sub("", head).strip(" -–—|:")


def extract_location(text: str) -> str:
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return ""


class LinkExtractor(LayoutExtractor):
    """Accepts hyperlinks whose text or href mentions a job keyword."""

    method = "link"

    def _extract(self, document: Document) -> List[JobCandidate]:
        jobs = []
        for link in document.links():
            text = clean_text(link.get_text(" "))
            if not text:
                continue
            href = link["href"].lower()
            lowered = text.lower()
            if not any(k in lowered or k.replace(" ", "-") in href for k in self.job_keywords):
                continue
            job = self._candidate(document, text, text, url=document.resolve(link["href"]))
            if job:
                jobs.append(job)
        return jobs


class HeadingExtractor(LayoutExtractor):
    """Last resort: job-like headings on pages that announce hiring."""

    method = "heading"

    def __init__(self, vocabulary: Optional[SelectorVocabulary] = None,
                 job_keywords: Optional[Sequence[str]] = None,
                 intent_phrases: Optional[Sequence[str]] = None) -> None:
        super().__init__(vocabulary, job_keywords)
        self.intent_phrases = [p.lower() for p in (intent_phrases or DEFAULT_HIRING_INTENT_PHRASES)]

    def has_hiring_intent(self, document: Document) -> bool:
        body_text = document.text.lower()
        return any(phrase in body_text for phrase in self.intent_phrases)

    def _extract(self, document: Document) -> List[JobCandidate]:
        if not self.has_hiring_intent(document):
            return []
        jobs = []
        for heading in document.body.find_all(list(self.vocabulary.headings)):
            text = clean_text(heading.get_text(" "))
            if not looks_like_job_title(text):
                continue
            job = self._candidate(document, text, text)
            if job:
                jobs.append(job)
        return jobs


DEFAULT_CAREER_PAGE_PATTERNS = [
    "/careers", "/jobs", "/opportunities", "/positions", "/employment",
    "/work-with-us", "/join-us", "/team", "/people",
]


def discover_career_pages(document: Document,
                          patterns: Optional[Sequence[str]] = None,
                          limit: int = 5) -> List[str]:
    """Links on a company homepage that look like career pages.

    A link qualifies when its href contains a career path pattern or its
    text contains the pattern's words. Only absolute http(s) URLs other than
    the page itself are returned, unique and in document order.
    """
    patterns = list(patterns or DEFAULT_CAREER_PAGE_PATTERNS)
    words = [p.strip("/").replace("-", " ") for p in patterns]
    found: List[str] = []
    for link in document.links():
        href = link["href"].lower()
        text = clean_text(link.get_text(" ")).lower()
        if not any(p in href for p in patterns) and not any(w and w in text for w in words):
            continue
        url = document.resolve(link["href"])
        if not url.startswith(("http://", "https://")) or url == document.url or url in found:
            continue
        found.append(url)
        if len(found) >= limit:
            break
    logger.debug(f"Discovered {len(found)} career pages on {document.url}")
    return found
