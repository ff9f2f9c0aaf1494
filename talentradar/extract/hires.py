"""Hire announcement extraction from free text.

Announcements are matched with a small table of regex rules, one per
surface syntax. Each rule names the groups that hold the person and the
position, so matches map to fields without guessing.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging
import re

from ..document import Document
from ..error_handling import ValidationRejection
from ..metrics import MetricsCollector
from ..models import HireCandidate, clean_text

logger = logging.getLogger(__name__)

GRAMMAR_CONFIDENCE = 90

DEFAULT_JOB_POSTING_MARKERS = [
    "hiring", "seeking", "looking for", "apply now", "job opening",
    "we are hiring", "join our team", "career opportunity",
]

DEFAULT_ROLE_KEYWORDS = [
    "ceo", "cto", "cfo", "coo", "chief", "director", "manager", "head",
    "vice president", "vp", "president", "senior", "lead", "officer",
    "executive", "principal", "analyst", "specialist", "coordinator",
]

DEFAULT_DENYLIST = [
    "wrexham", "star", "basketball", "football", "tennis", "soccer",
    "striker", "midfielder", "defender", "goalkeeper", "player", "eagles",
    "content", "market", "prop", "tel", "go",
]

# Capitalised words that open sentences, never the first word of a name
SENTENCE_OPENERS = [
    "Today", "Yesterday", "Recently", "Earlier", "Last", "This", "Please", "Meet",
    "Welcome", "Welcoming", "Congratulations", "Introducing", "Announcing",
]

# Smith, McKenzie, O'Brien, Smith-Jones
NAME_TOKEN = r"[A-Z](?:[a-z]+|'[A-Z][a-z]+)(?:[A-Z][a-z]+)?(?:-[A-Z][a-z]+)?"
# Two or three capitalised words, starting at a word boundary
NAME = (
    r"(?<![\w'])(?!(?:" + "|".join(SENTENCE_OPENERS) + r")\b)"
    r"(?P<name>" + NAME_TOKEN + r"\s+" + NAME_TOKEN + r"(?:\s" + NAME_TOKEN + r")?)"
)
# Role text on a single line
POSITION = r"(?P<position>[\w&/' \-]{2,100})"
FILLERS = r"(?:(?i:our|the|a|an)\s+)?(?:(?i:new)\s+)?"

LEADING_FILLER = re.compile(r"^(?:as|our|the|a|an|new)\s+", re.I)
TRAILING_CLAUSE = re.compile(r"\s+(?:at|effective|starting)\b.*$", re.I)


@dataclass(frozen=True)
class HireRule:
    """One announcement syntax and the groups holding each field."""
    name: str
    pattern: re.Pattern
    fields: Dict[str, str] = field(default_factory=lambda: {
        "person_name": "name",
        "position": "position",
    })

    def parse(self, match: "re.Match") -> Dict[str, str]:
        return {attr: match.group(group) or "" for attr, group in self.fields.items()}


HIRE_RULES = [
    HireRule("joined", re.compile(
        NAME + r"\s+(?:(?i:has)\s+)?(?i:joined|joins|joining)\s+"
        r"(?:[\w&.\-]+\s+){0,5}?(?i:as)\s+" + FILLERS + POSITION)),
    HireRule("greeting", re.compile(
        r"(?i:congratulations|welcome|welcoming|announce|announcing|introducing)\s+"
        r"(?:(?i:to)\s+)?" + NAME + r",?\s+(?:(?i:who)\s+)?(?:(?i:has\s+been)\s+)?"
        r"(?:(?i:appointed|named)\s+)?(?:(?i:as|to)\s+)?" + FILLERS + POSITION)),
    HireRule("appointed", re.compile(
        NAME + r"\s+(?i:is|has\s+been|was)\s+(?i:appointed|named|promoted)\s+"
        r"(?:(?i:as|to)\s+)?" + FILLERS + POSITION)),
    HireRule("will_lead", re.compile(
        NAME + r"\s+(?i:will\s+lead\s+as)\s+" + FILLERS + POSITION)),
    HireRule("title_at", re.compile(
        NAME + r",?\s+" + FILLERS + POSITION + r"\s+(?i:at)\s+[A-Z]")),
]


def clean_position(position: str) -> str:
    """Strip filler words and trailing company or date clauses from a role."""
    position = clean_text(position)
    previous = None
    while previous != position:
        previous = position
        position = LEADING_FILLER.sub("", position)
    position = TRAILING_CLAUSE.sub("", position)
    return position.strip(" ,.;:-")


def validate_hire(person_name: str, position: str,
                  denylist: Sequence[str] = DEFAULT_DENYLIST,
                  role_keywords: Sequence[str] = DEFAULT_ROLE_KEYWORDS) -> None:
    """Check a hire against the acceptance gate.

    Raises:
        ValidationRejection: With the reason the hire was rejected
    """
    tokens = person_name.split()
    if not 2 <= len(tokens) <= 3:
        raise ValidationRejection("name_tokens")
    denied = {term.lower() for term in denylist}
    if any(token.lower() in denied for token in tokens):
        raise ValidationRejection("denylisted_name")
    if not 2 < len(position) < 100:
        raise ValidationRejection("position_length")
    lowered = position.lower()
    if not any(re.search(r"\b" + re.escape(keyword), lowered) for keyword in role_keywords):
        raise ValidationRejection("no_role_keyword")


def is_valid_hire(person_name: str, position: str,
                  denylist: Sequence[str] = DEFAULT_DENYLIST,
                  role_keywords: Sequence[str] = DEFAULT_ROLE_KEYWORDS) -> bool:
    try:
        validate_hire(person_name, position, denylist, role_keywords)
    except ValidationRejection:
        return False
    return True


class HireExtractor:
    """Finds hire announcements in prose.

    Text that reads like a job posting is skipped entirely: hire
    extraction and job extraction never run on the same text.
    """

    def __init__(self,
                 rules: Optional[Sequence[HireRule]] = None,
                 job_posting_markers: Optional[Sequence[str]] = None,
                 role_keywords: Optional[Sequence[str]] = None,
                 denylist: Optional[Sequence[str]] = None,
                 metrics: Optional[MetricsCollector] = None) -> None:
        self.rules = list(rules or HIRE_RULES)
        self.job_posting_markers = [m.lower() for m in (job_posting_markers or DEFAULT_JOB_POSTING_MARKERS)]
        self.role_keywords = list(role_keywords or DEFAULT_ROLE_KEYWORDS)
        self.denylist = list(denylist or DEFAULT_DENYLIST)
        self.metrics = metrics

    def looks_like_job_posting(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.job_posting_markers)

    def extract(self, text: str, company: str, source: str = "") -> List[HireCandidate]:
        """Extract hires announced in a piece of text.

        Args:
            text: Prose to scan
            company: Company the hires are attributed to
            source: Provenance label stored on each hire

        Returns:
            Validated hires, at most one per person, in rule order
        """
        text = text or ""
        if self.looks_like_job_posting(text):
            logger.debug("Skipping text that reads like a job posting")
            return []

        hires: List[HireCandidate] = []
        seen_names = set()
        for rule in self.rules:
            for match in rule.pattern.finditer(text):
                fields = rule.parse(match)
                person_name = clean_text(fields["person_name"])
                if person_name.lower() in seen_names:
                    continue
                position = clean_position(fields["position"])
                try:
                    validate_hire(person_name, position, self.denylist, self.role_keywords)
                except ValidationRejection as e:
                    logger.debug(f"Rejected {person_name!r} / {position!r} ({rule.name}): {e.reason}")
                    if self.metrics:
                        self.metrics.record_rejection(e.reason)
                    continue
                seen_names.add(person_name.lower())
                hires.append(HireCandidate(
                    person_name=person_name,
                    company=company,
                    position=position,
                    source=source,
                    confidence_score=GRAMMAR_CONFIDENCE,
                ))
        if self.metrics:
            self.metrics.record_candidates("grammar", len(hires))
        return hires

    def extract_document(self, document: Document, company: str, source: str = "") -> List[HireCandidate]:
        """Extract hires from every post-sized block of a page."""
        hires: List[HireCandidate] = []
        for block in document.text_blocks():
            hires.extend(self.extract(block, company, source))
        logger.info(f"Found {len(hires)} hire announcements on {document.url}")
        return hires
