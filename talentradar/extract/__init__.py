"""Candidate extraction from fetched documents.

The module is organized into:
- matchers: Ranked structural matchers and the selector vocabulary
- structured: Embedded JobPosting metadata
- dom: Card, List, Link and Heading layout heuristics
- pipeline: The extraction cascade
- hires: Hire announcements in free text
- people: Scored hires from person-search records
"""

from .dom import (
    CardExtractor, HeadingExtractor, LinkExtractor, ListExtractor, discover_career_pages,
)
from .hires import HireExtractor, is_valid_hire, validate_hire
from .matchers import Matcher, SelectorVocabulary
from .people import PeopleSearchClient, PersonRecordScorer, is_company_match
from .pipeline import ExtractionPipeline
from .structured import StructuredDataExtractor

__all__ = [
    'CardExtractor',
    'HeadingExtractor',
    'LinkExtractor',
    'ListExtractor',
    'discover_career_pages',
    'HireExtractor',
    'is_valid_hire',
    'validate_hire',
    'Matcher',
    'SelectorVocabulary',
    'PeopleSearchClient',
    'PersonRecordScorer',
    'is_company_match',
    'ExtractionPipeline',
    'StructuredDataExtractor',
]
