"""Data models for the talent radar application."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List


@dataclass
class Company:
    """A company to scan.

    Attributes:
        name: Company name
        website: Company homepage URL
        linkedin_url: Company page on the professional network (optional)
        career_page_url: Dedicated careers page URL (optional)
    """
    name: str
    website: str = ""
    linkedin_url: Optional[str] = None
    career_page_url: Optional[str] = None

    def __post_init__(self):
        """Validate required fields."""
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Company name is required and must be a non-empty string")
        if not self.website and not self.career_page_url:
            raise ValueError(f"Company {self.name} needs a website or a career page URL")


@dataclass
class JobCandidate:
    """A job posting extracted from a page, prior to reconciliation.

    Attributes:
        title: Job title
        location: Job location, empty when unknown
        department: Department or team, empty when unknown
        posted_date: ISO date (YYYY-MM-DD) the job was posted, if known
        url: Link to the posting
        source_url: Page the posting was extracted from
        extraction_method: Strategy that produced the candidate
            ("structured", "card", "list", "link", "heading")
        raw_text: Text the candidate was derived from
        company: Company the page belongs to
    """
    title: str
    location: str = ""
    department: str = ""
    posted_date: Optional[str] = None
    url: str = ""
    source_url: str = ""
    extraction_method: str = ""
    raw_text: str = ""
    company: str = ""

    def __post_init__(self):
        """Collapse whitespace and reject empty titles."""
        self.title = clean_text(self.title)
        self.location = clean_text(self.location)
        self.department = clean_text(self.department)
        if not self.title:
            raise ValueError("Job title is required and must be a non-empty string")

    def dedup_key(self) -> tuple:
        """Case and whitespace insensitive (title, location) key."""
        return (squash(self.title), squash(self.location))


@dataclass
class HireCandidate:
    """A leadership hire extracted from an announcement or a person record."""
    person_name: str
    company: str
    position: str
    source: str
    confidence_score: int = 0
    start_date: Optional[datetime] = None
    previous_company: Optional[str] = None
    linkedin_profile: Optional[str] = None
    found_date: datetime = field(default_factory=datetime.utcnow)
    verified: bool = False

    def __post_init__(self):
        if not 0 <= self.confidence_score <= 100:
            raise ValueError(f"Confidence score must be within 0-100, got {self.confidence_score}")

    def dedup_key(self) -> tuple:
        return (
            self.person_name.lower().strip(),
            self.company.lower().strip(),
            self.position.lower().strip(),
        )


@dataclass
class ExtractionResult:
    """Outcome of running the extraction cascade over one page.

    Attributes:
        candidates: Page-local deduplicated job candidates
        method: Strategy that produced the candidates, None when all were empty
        attempted: Strategies that ran, in order
    """
    candidates: List[JobCandidate] = field(default_factory=list)
    method: Optional[str] = None
    attempted: List[str] = field(default_factory=list)


@dataclass
class ScanSummary:
    """Summary of one scan cycle, sent to the analytics sink."""
    processed_count: int = 0
    new_item_count: int = 0
    error_count: int = 0
    duration_ms: int = 0
    jobs_found: int = 0
    hires_found: int = 0
    started_at: datetime = field(default_factory=datetime.utcnow)


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace into single spaces."""
    if not text:
        return ""
    return " ".join(text.split())


def squash(text: Optional[str]) -> str:
    """Lower-case text with all whitespace removed."""
    if not text:
        return ""
    return "".join(text.split()).lower()
