"""Exact and fuzzy duplicate detection for extracted candidates."""
from datetime import date
from typing import Dict, List, Optional, Tuple
import logging

from ..metrics import MetricsCollector
from ..models import HireCandidate, JobCandidate

logger = logging.getLogger(__name__)

STRICT = "strict"
LENIENT = "lenient"
DEDUP_MODES = (STRICT, LENIENT)


def levenshtein(first: str, second: str) -> int:
    """Edit distance with unit cost per insertion, deletion and substitution."""
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)
    previous = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def name_distance(first: str, second: str) -> float:
    """Edit distance between two names divided by the longer name's length."""
    first = first.lower().strip()
    second = second.lower().strip()
    longest = max(len(first), len(second), 1)
    return levenshtein(first, second) / longest


class HireDeduplicator:
    """Removes duplicate hires, keeping the first occurrence.

    In strict mode two hires are duplicates when person, company and position
    are equal ignoring case. In lenient mode company and position must still
    match exactly, but person names may differ by a normalized edit distance
    up to ``name_threshold``.
    """

    def __init__(self, mode: str = STRICT, name_threshold: float = 0.25,
                 metrics: Optional[MetricsCollector] = None):
        """Initialize the deduplicator.

        Args:
            mode: "strict" or "lenient"
            name_threshold: Largest normalized name distance still treated as
                the same person in lenient mode
            metrics: Collector for duplicate counts
        """
        if mode not in DEDUP_MODES:
            raise ValueError(f"Invalid dedup mode: {mode}")
        self.mode = mode
        self.name_threshold = name_threshold
        self.metrics = metrics

    def is_duplicate(self, candidate: HireCandidate, accepted: HireCandidate) -> bool:
        if self.mode == STRICT:
            return candidate.dedup_key() == accepted.dedup_key()
        if candidate.company.lower().strip() != accepted.company.lower().strip():
            return False
        if candidate.position.lower().strip() != accepted.position.lower().strip():
            return False
        return name_distance(candidate.person_name, accepted.person_name) <= self.name_threshold

    def deduplicate(self, hires: List[HireCandidate]) -> List[HireCandidate]:
        unique: List[HireCandidate] = []
        seen_keys = set()
        for hire in hires:
            if self.mode == STRICT:
                key = hire.dedup_key()
                duplicate = key in seen_keys
                seen_keys.add(key)
            else:
                duplicate = any(self.is_duplicate(hire, accepted) for accepted in unique)
            if duplicate:
                logger.debug(f"Dropping duplicate hire {hire.person_name} at {hire.company}")
                continue
            unique.append(hire)
        removed = len(hires) - len(unique)
        if removed and self.metrics:
            self.metrics.record_duplicates_removed(removed)
        return unique


class JobReconciler:
    """Removes duplicate jobs per company and fills in missing posted dates."""

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self.metrics = metrics

    @staticmethod
    def key(job: JobCandidate) -> Tuple[str, str, str]:
        title, location = job.dedup_key()
        return (job.company.lower().strip(), title, location)

    def reconcile(self, jobs: List[JobCandidate], scan_date: Optional[date] = None) -> List[JobCandidate]:
        """Deduplicate jobs, keeping the first occurrence of each key.

        Args:
            jobs: Jobs from every page of the cycle, in extraction order
            scan_date: Date stamped on jobs with no posted date

        Returns:
            Unique jobs in their original order
        """
        backfill = (scan_date or date.today()).isoformat()
        unique: Dict[Tuple[str, str, str], JobCandidate] = {}
        for job in jobs:
            key = self.key(job)
            if key in unique:
                logger.debug(f"Dropping duplicate job {job.title!r} at {job.company}")
                continue
            if not job.posted_date:
                job.posted_date = backfill
            unique[key] = job
        removed = len(jobs) - len(unique)
        if removed and self.metrics:
            self.metrics.record_duplicates_removed(removed)
        return list(unique.values())
