"""Structured-data extraction for JobPosting metadata.

Handles:
- Multiple ld+json script blocks on one page
- @graph containers and top-level lists
- @type given as a string or a list
- jobLocation as an object, a list of objects or a plain string
- Blocks with JS artifacts (comments, trailing commas)
"""
import json
import re
import logging
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from ..document import Document
from ..error_handling import MalformedStructuredData
from ..metrics import MetricsCollector
from ..models import JobCandidate, clean_text

logger = logging.getLogger(__name__)

METHOD = "structured"


def parse_block(content: str) -> Any:
    """Parse one ld+json block, tolerating common JS artifacts.

    Raises:
        MalformedStructuredData: If the block is not JSON even after cleanup
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass
    cleaned = re.sub(r"/\*.*?\*/", "", content, flags=re.DOTALL)
    cleaned = re.sub(r"^\s*//.*?$", "", cleaned, flags=re.MULTILINE)
    cleaned = re.sub(r",\s*([\]}])", r"\1", cleaned)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedStructuredData(f"Invalid ld+json block: {e}", content) from e


def iter_objects(data: Any) -> Iterable[Dict]:
    """Walk a JSON-LD value, yielding every object including nested graphs."""
    if isinstance(data, list):
        for item in data:
            yield from iter_objects(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from iter_objects(data["@graph"])
        for key in ("mainEntity", "itemListElement", "item"):
            if key in data:
                yield from iter_objects(data[key])


def is_job_posting(obj: Dict) -> bool:
    obj_type = obj.get("@type", "")
    if isinstance(obj_type, list):
        return "JobPosting" in obj_type
    return obj_type == "JobPosting"


def normalize_date(value: Any) -> Optional[str]:
    """ISO date (YYYY-MM-DD) for a date-like string, or None."""
    if not value or not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value).date().isoformat()
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable date {value!r}")
        return None


def _string(value: Any) -> str:
    """A text value: the string itself or the first string in a list."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return next((item for item in value if isinstance(item, str)), "")
    return ""


def _location(posting: Dict) -> str:
    location = posting.get("jobLocation")
    if isinstance(location, list):
        location = location[0] if location else None
    if isinstance(location, dict):
        address = location.get("address")
        if isinstance(address, dict):
            return _string(address.get("addressLocality")) or _string(address.get("addressRegion"))
        if isinstance(address, str):
            return address
        return _string(location.get("name"))
    if isinstance(location, str):
        return location
    if _string(posting.get("jobLocationType")).upper() == "TELECOMMUTE":
        return "Remote"
    return ""


def _department(posting: Dict) -> str:
    organization = posting.get("hiringOrganization")
    if isinstance(organization, dict) and _string(organization.get("department")):
        return _string(organization["department"])
    return _string(posting.get("department"))


def _title(posting: Dict) -> str:
    return clean_text(_string(posting.get("title")) or _string(posting.get("name")))


class StructuredDataExtractor:
    """Maps embedded JobPosting entries straight to job candidates."""

    def __init__(self, metrics: Optional[MetricsCollector] = None) -> None:
        self.metrics = metrics

    def postings(self, document: Document) -> List[Dict]:
        """All JobPosting objects declared on the page, in document order."""
        found = []
        for script in document.soup.find_all("script", attrs={"type": "application/ld+json"}):
            content = (script.string or script.get_text() or "").strip()
            if not content:
                continue
            try:
                data = parse_block(content)
            except MalformedStructuredData as e:
                logger.warning(f"Skipping malformed structured data on {document.url}: {e}")
                if self.metrics:
                    self.metrics.record_malformed_block()
                continue
            found.extend(obj for obj in iter_objects(data) if is_job_posting(obj))
        return found

    def extract(self, document: Document) -> List[JobCandidate]:
        candidates = []
        for posting in self.postings(document):
            title = _title(posting)
            if not title:
                logger.debug(f"Skipping JobPosting without title on {document.url}")
                continue
            url = _string(posting.get("url"))
            candidates.append(JobCandidate(
                title=title,
                location=_location(posting),
                department=_department(posting),
                posted_date=normalize_date(posting.get("datePosted")),
                url=document.resolve(url or None),
                source_url=document.url,
                extraction_method=METHOD,
                raw_text=json.dumps(posting)[:1000],
            ))
        logger.debug(f"Structured data yielded {len(candidates)} postings on {document.url}")
        return candidates
