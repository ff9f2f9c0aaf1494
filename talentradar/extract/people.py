"""Hires derived from structured person-search records.

A person record is scored only when its current employer matches the
target company and the current job started within the last six months.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import re

import requests
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from requests.exceptions import RequestException

from ..models import HireCandidate

logger = logging.getLogger(__name__)

PERSON_SEARCH_URL = "https://api.peopledatalabs.com/v5/person/search"
PERSON_SEARCH_SOURCE = "PDL Person Search"
RECENT_MONTHS = 6

LEGAL_SUFFIXES = re.compile(r"\b(Inc|Corp|LLC|Ltd|Co)\b\.?", re.I)


def clean_company_name(name: Optional[str]) -> str:
    """Lower-cased company name without legal suffixes."""
    if not name or not isinstance(name, str):
        return ""
    return " ".join(LEGAL_SUFFIXES.sub("", name.lower()).split())


def is_company_match(first: Optional[str], second: Optional[str]) -> bool:
    """Fuzzy company name comparison.

    Names match when, after dropping legal suffixes, they are equal, one
    contains the other, or at least 70% of the significant words of the
    shorter name overlap with the other's.
    """
    clean_first = clean_company_name(first)
    clean_second = clean_company_name(second)
    if not clean_first or not clean_second:
        return False
    if clean_first == clean_second:
        return True
    if clean_first in clean_second or clean_second in clean_first:
        return True

    words_first = [w for w in clean_first.split() if len(w) > 2]
    words_second = [w for w in clean_second.split() if len(w) > 2]
    if not words_first or not words_second:
        return False
    overlap = [w1 for w1 in words_first if any(w2 in w1 or w1 in w2 for w2 in words_second)]
    return len(overlap) >= min(len(words_first), len(words_second)) * 0.7


def _name(entry: Optional[Dict[str, Any]]) -> str:
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return entry["name"].strip()
    return ""


def _string(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _full_name(person: Any) -> str:
    return _string(person.get("full_name")) if isinstance(person, dict) else ""


def _experience(person: Any) -> List[Dict[str, Any]]:
    """Job history entries of a record, most recent first.

    Entries that are not objects make the whole history unusable, since the
    first entry must be the current job.
    """
    experience = person.get("experience") if isinstance(person, dict) else None
    if not isinstance(experience, list) or not all(isinstance(e, dict) for e in experience):
        return []
    return experience


def parse_start_date(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug(f"Unparseable start date {value!r}")
        return None


class PersonRecordScorer:
    """Turns person-search records into scored hire candidates."""

    BASE_SCORE = 70

    def __init__(self, now: Optional[datetime] = None, recent_months: int = RECENT_MONTHS) -> None:
        self.now = now
        self.recent_months = recent_months

    def cutoff(self) -> datetime:
        return (self.now or datetime.utcnow()) - relativedelta(months=self.recent_months)

    def score(self, person: Dict[str, Any]) -> int:
        experience = _experience(person)
        current = experience[0] if experience else {}
        previous = experience[1] if len(experience) > 1 else {}
        score = self.BASE_SCORE
        if " " in _full_name(person):
            score += 10
        if _string(person.get("linkedin_url")):
            score += 15
        if _name(current.get("title")):
            score += 10
        if _name(previous.get("company")):
            score += 5
        return min(score, 100)

    def to_hire(self, person: Dict[str, Any], company: str) -> Optional[HireCandidate]:
        """Score one record, or None when it does not describe a recent hire.

        Args:
            person: Record with ``full_name``, ``linkedin_url`` and an
                ``experience`` list, most recent job first
            company: Target company name
        """
        experience = _experience(person)
        if not experience or not _full_name(person):
            logger.debug("Skipping person record without a name or a current job")
            return None
        current = experience[0]
        employer = _name(current.get("company"))
        if not is_company_match(employer, company):
            logger.debug(f"Employer {employer!r} does not match {company!r}")
            return None
        start_date = parse_start_date(current.get("start_date"))
        if start_date is None or start_date.replace(tzinfo=None) < self.cutoff():
            logger.debug(f"Start date {current.get('start_date')!r} outside the recent window")
            return None

        previous = experience[1] if len(experience) > 1 else {}
        return HireCandidate(
            person_name=_full_name(person),
            company=company,
            position=_name(current.get("title")),
            source=PERSON_SEARCH_SOURCE,
            confidence_score=self.score(person),
            start_date=start_date,
            previous_company=_name(previous.get("company")) or None,
            linkedin_profile=_string(person.get("linkedin_url")) or None,
        )

    def score_records(self, records: List[Dict[str, Any]], company: str) -> List[HireCandidate]:
        hires = []
        for person in records:
            hire = self.to_hire(person, company)
            if hire:
                hires.append(hire)
        return hires


class PeopleSearchClient:
    """Person-search API client for recent hires at a company."""

    def __init__(self, api_key: str, scorer: Optional[PersonRecordScorer] = None,
                 url: str = PERSON_SEARCH_URL, timeout: float = 30.0, size: int = 10) -> None:
        if not api_key:
            raise ValueError("A person-search API key is required")
        self.api_key = api_key
        self.scorer = scorer or PersonRecordScorer()
        self.url = url
        self.timeout = timeout
        self.size = size

    def build_query(self, company: str) -> Dict[str, Any]:
        since = self.scorer.cutoff().date().isoformat()
        return {
            "query": {
                "bool": {
                    "must": [
                        {"bool": {"should": [
                            {"term": {"job_company_name": company.lower()}},
                            {"match": {"job_company_name": company}},
                        ]}},
                        {"range": {"job_start_date": {"gte": since}}},
                    ]
                }
            },
            "size": self.size,
            "required": "experience,linkedin_url,full_name",
        }

    def find_recent_hires(self, company: str) -> List[HireCandidate]:
        """Query the API and score the returned records.

        Network and API failures are logged and yield no hires.
        """
        headers = {"X-Api-Key": self.api_key, "Content-Type": "application/json"}
        try:
            response = requests.post(self.url, json=self.build_query(company),
                                     headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (RequestException, ValueError) as e:
            logger.warning(f"Person search failed for {company}: {e}")
            return []
        records = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            logger.warning(f"Person search for {company} returned no record list")
            return []
        hires = self.scorer.score_records(records, company)
        logger.info(f"Person search returned {len(records)} records, {len(hires)} recent hires at {company}")
        return hires
