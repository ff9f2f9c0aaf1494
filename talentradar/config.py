"""Configuration loader for companies and scan settings."""
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging
import os

import yaml
from dotenv import load_dotenv

from .domain.deduplication import DEDUP_MODES, LENIENT, STRICT
from .extract.dom import (
    DEFAULT_CAREER_PAGE_PATTERNS, DEFAULT_HIRING_INTENT_PHRASES, DEFAULT_JOB_KEYWORDS,
)
from .extract.hires import DEFAULT_DENYLIST, DEFAULT_JOB_POSTING_MARKERS, DEFAULT_ROLE_KEYWORDS
from .models import Company

logger = logging.getLogger(__name__)

VALID_FETCH_METHODS = {"headless", "http"}

DEFAULT_CONFIG_FILES = ["talentradar.yml", "companies.yml"]

# Press and news search pages; {query} is replaced with the quoted company name
DEFAULT_HIRE_SOURCE_TEMPLATES = {
    "Press Release": "https://www.prnewswire.com/search/news/?keyword={query}%20appoints",
    "Industry News": "https://www.businesswire.com/portal/site/home/search/?searchType=news&searchTerm={query}%20appointed",
}


@dataclass
class ScanConfig:
    """Settings for one scan cycle.

    Attributes:
        min_delay_ms: Lower bound of the delay before each network call
        max_delay_ms: Upper bound of the delay before each network call
        max_fetch_retries: Total navigation attempts per URL
        dedup_mode: "strict" or "lenient" hire deduplication
        job_keywords: Keywords marking list items and links as jobs
        role_keywords: Business-role keywords a hire's position must contain
        denylist: Tokens that disqualify a person name
        hiring_intent_phrases: Phrases that enable heading extraction
        job_posting_markers: Phrases that mark text as a job posting
        career_page_patterns: Path fragments of career pages
        max_career_pages: Most career pages discovered per company
        hire_source_templates: Provenance label to search URL template
        linkedin_posts_suffix: Path appended to a company page for its posts
        auth_cookies_file: Cookie file for protected sources
        people_search_api_key: Enables the person-search client when set
    """
    min_delay_ms: int = 2000
    max_delay_ms: int = 8000
    max_fetch_retries: int = 3
    dedup_mode: str = STRICT
    backoff_min_ms: int = 5000
    backoff_max_ms: int = 10000
    fetch_timeout_ms: int = 30000
    fetch_method: str = "headless"
    headless: bool = True
    job_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_JOB_KEYWORDS))
    role_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_ROLE_KEYWORDS))
    denylist: List[str] = field(default_factory=lambda: list(DEFAULT_DENYLIST))
    hiring_intent_phrases: List[str] = field(default_factory=lambda: list(DEFAULT_HIRING_INTENT_PHRASES))
    job_posting_markers: List[str] = field(default_factory=lambda: list(DEFAULT_JOB_POSTING_MARKERS))
    career_page_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_CAREER_PAGE_PATTERNS))
    max_career_pages: int = 5
    hire_source_templates: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HIRE_SOURCE_TEMPLATES))
    linkedin_posts_suffix: str = "/posts/"
    auth_cookies_file: Optional[str] = None
    people_search_api_key: Optional[str] = None
    database_url: str = "sqlite:///talentradar.db"

    def __post_init__(self):
        """Validate settings."""
        if self.min_delay_ms < 0 or self.max_delay_ms < self.min_delay_ms:
            raise ValueError(f"Invalid delay window [{self.min_delay_ms}, {self.max_delay_ms}]")
        if self.backoff_min_ms < 0 or self.backoff_max_ms < self.backoff_min_ms:
            raise ValueError(f"Invalid backoff window [{self.backoff_min_ms}, {self.backoff_max_ms}]")
        if self.max_fetch_retries < 1:
            raise ValueError("max_fetch_retries must be at least 1")
        if self.dedup_mode not in DEDUP_MODES:
            raise ValueError(f"Invalid dedup mode: {self.dedup_mode}")
        if self.fetch_method not in VALID_FETCH_METHODS:
            raise ValueError(f"Invalid fetch method: {self.fetch_method}")
        if self.fetch_timeout_ms <= 0:
            raise ValueError("fetch_timeout_ms must be positive")
        if self.max_career_pages < 0:
            raise ValueError("max_career_pages must not be negative")

    @classmethod
    def from_env(cls, config: Optional["Config"] = None, **overrides) -> "ScanConfig":
        """Build settings from environment variables, then apply overrides."""
        config = config or Config()
        values: Dict[str, Any] = {
            "min_delay_ms": config.get_int("MIN_DELAY_MS", 2000),
            "max_delay_ms": config.get_int("MAX_DELAY_MS", 8000),
            "max_fetch_retries": config.get_int("MAX_RETRIES", 3),
            "dedup_mode": STRICT if config.get_bool("DEDUP_STRICT", True) else LENIENT,
            "fetch_method": config.get("FETCH_METHOD", "headless"),
            "headless": config.get_bool("HEADLESS_MODE", True),
            "fetch_timeout_ms": config.get_int("FETCH_TIMEOUT_MS", 30000),
            "auth_cookies_file": config.get("LINKEDIN_COOKIES_FILE"),
            "people_search_api_key": config.get("PDL_API_KEY"),
            "database_url": config.get("DATABASE_URL", "sqlite:///talentradar.db"),
        }
        for key, name in (("JOB_KEYWORDS", "job_keywords"),
                          ("ROLE_KEYWORDS", "role_keywords"),
                          ("DENYLIST_TERMS", "denylist")):
            terms = config.get_list(key)
            if terms:
                values[name] = terms
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown scan settings: {', '.join(sorted(unknown))}")
        values.update(overrides)
        return cls(**values)


def _find_config_file(path: Optional[Path]) -> Path:
    if path is None:
        for fname in DEFAULT_CONFIG_FILES:
            if Path(fname).exists():
                return Path(fname)
        raise FileNotFoundError("No config file found (talentradar.yml or companies.yml)")
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    return path


def _read_yaml(path: Path) -> Any:
    with open(path, "r") as f:
        return yaml.safe_load(f)


def parse_companies(data: Any) -> List[Company]:
    """Build Company objects from a ``companies:`` section or a top-level list.

    Raises:
        ValueError: If an entry lacks a name or both website and career page
    """
    if isinstance(data, dict):
        data = data.get("companies", [])
    if not isinstance(data, list):
        raise ValueError("Company configuration must be a list")
    companies = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"Invalid company entry: {item!r}")
        companies.append(Company(
            name=item.get("name", ""),
            website=item.get("website", ""),
            linkedin_url=item.get("linkedin_url"),
            career_page_url=item.get("career_page_url"),
        ))
    return companies


def load_companies(path: Optional[Path] = None) -> List[Company]:
    """Load and validate companies from a YAML file.

    Args:
        path: Path to the YAML file; the default config files are tried when None

    Returns:
        List of Company objects

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If an entry is invalid
    """
    path = _find_config_file(path)
    companies = parse_companies(_read_yaml(path))
    logger.info(f"Loaded {len(companies)} companies from {path}")
    return companies


def load_scan_config(path: Optional[Path] = None, env_file: Optional[str] = None) -> ScanConfig:
    """Load scan settings: the file's ``scan:`` section over environment over defaults.

    A missing file is not an error when no path is given.
    """
    overrides: Dict[str, Any] = {}
    try:
        found = _find_config_file(path)
    except FileNotFoundError:
        if path is not None:
            raise
        found = None
    if found is not None:
        data = _read_yaml(found) or {}
        if isinstance(data, dict):
            overrides = data.get("scan") or {}
    return ScanConfig.from_env(Config(env_file), **overrides)


class Config:
    """Configuration manager with environment variable and .env file support."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Optional path to .env file
        """
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        elif os.path.exists(".env"):
            load_dotenv(".env")
            logger.info("Loaded configuration from .env file")
        else:
            logger.debug("No .env file found, using environment variables only")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return os.getenv(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, str(default).lower())
        return str(value).lower() in ('true', '1', 'yes', 'on')

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value for {key}: {value}, using default {default}")
            return default

    def get_list(self, key: str, default: Optional[list] = None, separator: str = ",") -> list:
        if default is None:
            default = []
        value = self.get(key)
        if not value:
            return default
        return [item.strip() for item in str(value).split(separator) if item.strip()]
