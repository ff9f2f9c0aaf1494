"""Main orchestration logic for talentradar."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote_plus
import logging
import threading
import time

from .config import ScanConfig
from .database import Database
from .document import Document
from .domain.deduplication import HireDeduplicator, JobReconciler
from .error_handling import CapabilityInitError, FetchError
from .extract.dom import discover_career_pages
from .extract.hires import HireExtractor
from .extract.people import PeopleSearchClient, PersonRecordScorer
from .extract.pipeline import ExtractionPipeline
from .fetchers import AuthContext, BrowserSession, Fetcher, HeadlessFetcher, HttpFetcher
from .metrics import MetricsCollector
from .models import Company, HireCandidate, JobCandidate, ScanSummary
from .notifiers.base import Notifier, format_new_items
from .rate_limiter import RateGovernor

logger = logging.getLogger(__name__)

LINKEDIN_SOURCE = "LinkedIn"


class ScanState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    SCANNING_COMPANY = "scanning_company"
    AGGREGATING = "aggregating"
    EMITTING = "emitting"


@dataclass
class HireSource:
    """A page announcing hires, with the label stored as the hire's source."""
    url: str
    label: str
    auth: Optional[AuthContext] = None


@dataclass
class CompanyScan:
    """Raw output of scanning one company."""
    company: Company
    jobs: List[JobCandidate] = field(default_factory=list)
    hires: List[HireCandidate] = field(default_factory=list)
    errors: int = 0


@dataclass
class CycleResult:
    """Everything one scan cycle produced."""
    summary: ScanSummary
    jobs: List[JobCandidate] = field(default_factory=list)
    hires: List[HireCandidate] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    cancelled: bool = False


def unique_companies(companies: Sequence[Company]) -> List[Company]:
    """Companies in order, dropping repeats of a name (case-insensitive)."""
    seen = set()
    unique = []
    for company in companies:
        key = company.name.strip().lower()
        if key in seen:
            logger.warning(f"Company {company.name} is listed more than once; scanning it once")
            continue
        seen.add(key)
        unique.append(company)
    return unique


class ScanOrchestrator:
    """Drives one scan cycle over a list of companies.

    Companies and their URLs are processed strictly one at a time. A failing
    URL is logged and skipped; only a failure to start the fetch capability
    aborts the cycle. Cancellation is honoured between companies.
    """

    def __init__(self,
                 fetcher: Fetcher,
                 config: Optional[ScanConfig] = None,
                 pipeline: Optional[ExtractionPipeline] = None,
                 hire_extractor: Optional[HireExtractor] = None,
                 store: Optional[Database] = None,
                 notifiers: Optional[Sequence[Notifier]] = None,
                 people_client: Optional[PeopleSearchClient] = None,
                 auth: Optional[AuthContext] = None,
                 metrics: Optional[MetricsCollector] = None):
        """Initialize the orchestrator with its collaborators.

        Args:
            fetcher: Paced page acquisition; owned by this orchestrator per cycle
            config: Scan settings
            pipeline: Job extraction cascade
            hire_extractor: Free-text hire extractor
            store: Tabular store receiving accepted candidates and summaries
            notifiers: Sinks for "Found N new ..." lines
            people_client: Optional person-search client
            auth: Credentials for the professional-network posts pages
            metrics: Collector shared with the other components
        """
        self.config = config or ScanConfig()
        self.metrics = metrics or MetricsCollector()
        self.fetcher = fetcher
        self.pipeline = pipeline or ExtractionPipeline.from_vocabulary(
            job_keywords=self.config.job_keywords,
            intent_phrases=self.config.hiring_intent_phrases,
            metrics=self.metrics,
        )
        self.hire_extractor = hire_extractor or HireExtractor(
            job_posting_markers=self.config.job_posting_markers,
            role_keywords=self.config.role_keywords,
            denylist=self.config.denylist,
            metrics=self.metrics,
        )
        self.job_reconciler = JobReconciler(metrics=self.metrics)
        self.hire_deduplicator = HireDeduplicator(self.config.dedup_mode, metrics=self.metrics)
        self.store = store
        self.notifiers = list(notifiers or [])
        self.people_client = people_client
        self.auth = auth
        self.state = ScanState.IDLE
        self._cancel = threading.Event()

    @classmethod
    def from_config(cls, config: ScanConfig,
                    store: Optional[Database] = None,
                    notifiers: Optional[Sequence[Notifier]] = None) -> "ScanOrchestrator":
        """Wire the default collaborators for a configuration."""
        metrics = MetricsCollector()
        if config.fetch_method == "http":
            backend = HttpFetcher(timeout_ms=config.fetch_timeout_ms)
        else:
            backend = HeadlessFetcher(BrowserSession(headless=config.headless),
                                      timeout_ms=config.fetch_timeout_ms)
        governor = RateGovernor(
            min_delay_ms=config.min_delay_ms,
            max_delay_ms=config.max_delay_ms,
            max_fetch_retries=config.max_fetch_retries,
            backoff_min_ms=config.backoff_min_ms,
            backoff_max_ms=config.backoff_max_ms,
            metrics=metrics,
        )
        auth = None
        if config.auth_cookies_file:
            try:
                auth = AuthContext.from_cookie_file(Path(config.auth_cookies_file))
            except (OSError, ValueError) as e:
                logger.warning(f"Could not load cookies from {config.auth_cookies_file}: {e}")
        people_client = None
        if config.people_search_api_key:
            people_client = PeopleSearchClient(config.people_search_api_key, PersonRecordScorer())
        return cls(
            fetcher=Fetcher(backend, governor, metrics),
            config=config,
            store=store,
            notifiers=notifiers,
            people_client=people_client,
            auth=auth,
            metrics=metrics,
        )

    def cancel(self) -> None:
        """Stop the cycle before the next company."""
        self._cancel.set()

    def job_urls(self, company: Company) -> List[str]:
        urls = []
        for url in (company.website, company.career_page_url):
            if url and url not in urls:
                urls.append(url)
        return urls

    def hire_sources(self, company: Company) -> List[HireSource]:
        sources = []
        if company.linkedin_url:
            posts_url = company.linkedin_url.rstrip("/") + self.config.linkedin_posts_suffix
            sources.append(HireSource(posts_url, LINKEDIN_SOURCE, self.auth))
        query = quote_plus(f'"{company.name}"')
        for label, template in self.config.hire_source_templates.items():
            sources.append(HireSource(template.format(query=query), label))
        return sources

    def _fetch(self, url: str, scan: CompanyScan,
               auth: Optional[AuthContext] = None) -> Optional[Document]:
        try:
            return self.fetcher.acquire(url, auth)
        except FetchError as e:
            logger.warning(f"Skipping {url} for {scan.company.name}: {e}")
        except Exception as e:
            logger.warning(f"Unexpected error fetching {url} for {scan.company.name}: {e}")
        scan.errors += 1
        return None

    def _extract_jobs(self, document: Document, scan: CompanyScan) -> None:
        try:
            result = self.pipeline.run(document, scan.company.name)
            scan.jobs.extend(result.candidates)
        except Exception as e:
            logger.warning(f"Job extraction failed on {document.url}: {e}")
            scan.errors += 1

    def scan_company(self, company: Company) -> CompanyScan:
        """Fetch and extract every source of one company.

        Per-URL failures are counted and skipped.
        """
        scan = CompanyScan(company)
        urls = self.job_urls(company)
        homepage: Optional[Document] = None
        for url in urls:
            document = self._fetch(url, scan)
            if document is None:
                continue
            if url == company.website:
                homepage = document
            self._extract_jobs(document, scan)

        if len(urls) == 1 and homepage is not None and self.config.max_career_pages:
            for url in discover_career_pages(homepage, self.config.career_page_patterns,
                                             self.config.max_career_pages):
                if url in urls:
                    continue
                document = self._fetch(url, scan)
                if document is not None:
                    self._extract_jobs(document, scan)

        for source in self.hire_sources(company):
            document = self._fetch(source.url, scan, source.auth)
            if document is None:
                continue
            try:
                scan.hires.extend(self.hire_extractor.extract_document(document, company.name, source.label))
            except Exception as e:
                logger.warning(f"Hire extraction failed on {source.url}: {e}")
                scan.errors += 1

        if self.people_client is not None:
            try:
                scan.hires.extend(self.people_client.find_recent_hires(company.name))
            except Exception as e:
                logger.warning(f"Person search failed for {company.name}: {e}")
                scan.errors += 1

        if not scan.jobs and not scan.hires:
            logger.warning(f"No jobs or hires found for {company.name}")
        else:
            logger.info(f"{company.name}: {len(scan.jobs)} job candidates, {len(scan.hires)} hire candidates")
        return scan

    def run_cycle(self, companies: Sequence[Company], scan_date: Optional[date] = None) -> CycleResult:
        """Run one full scan cycle.

        Args:
            companies: Companies to scan, in order
            scan_date: Date used for jobs with no posted date

        Returns:
            CycleResult with the summary and the reconciled candidates

        Raises:
            CapabilityInitError: If the fetch capability cannot be started
        """
        started_at = datetime.utcnow()
        started = time.monotonic()
        companies = unique_companies(companies)
        self._cancel.clear()
        self.state = ScanState.INITIALIZING
        try:
            self.fetcher.open()
        except CapabilityInitError as e:
            logger.error(f"Scan cycle aborted, fetch capability unavailable: {e}")
            self.state = ScanState.IDLE
            raise

        scans: List[CompanyScan] = []
        cancelled = False
        try:
            for index, company in enumerate(companies):
                if self._cancel.is_set():
                    logger.warning(f"Scan cancelled after {index} of {len(companies)} companies")
                    cancelled = True
                    break
                self.state = ScanState.SCANNING_COMPANY
                logger.info(f"Scanning company {index + 1}/{len(companies)}: {company.name}")
                scans.append(self.scan_company(company))
        finally:
            self.fetcher.close()

        self.state = ScanState.AGGREGATING
        jobs = self.job_reconciler.reconcile(
            [job for scan in scans for job in scan.jobs], scan_date)
        hires = self.hire_deduplicator.deduplicate(
            [hire for scan in scans for hire in scan.hires])

        self.state = ScanState.EMITTING
        new_counts = self._emit(scans, jobs, hires)
        summary = ScanSummary(
            processed_count=len(scans),
            new_item_count=sum(jobs_new + hires_new for jobs_new, hires_new in new_counts.values()),
            error_count=sum(scan.errors for scan in scans),
            duration_ms=int((time.monotonic() - started) * 1000),
            jobs_found=len(jobs),
            hires_found=len(hires),
            started_at=started_at,
        )
        messages = self._messages(scans, new_counts)
        if self.store is not None:
            self.store.record_summary(summary)
        for notifier in self.notifiers:
            try:
                notifier.notify(messages)
            except Exception as e:
                logger.error(f"Failed to send notification: {e}")

        logger.info(f"Scan cycle complete: {summary.processed_count} companies, "
                    f"{summary.new_item_count} new items, {summary.error_count} errors "
                    f"in {summary.duration_ms} ms")
        logger.debug(f"Cycle metrics: {self.metrics.get_summary()}")
        self.state = ScanState.IDLE
        return CycleResult(summary=summary, jobs=jobs, hires=hires,
                           messages=messages, cancelled=cancelled)

    def _emit(self, scans: List[CompanyScan], jobs: List[JobCandidate],
              hires: List[HireCandidate]) -> Dict[str, Tuple[int, int]]:
        """Append candidates to the store; returns new (jobs, hires) per company."""
        counts: Dict[str, Tuple[int, int]] = {}
        for scan in scans:
            name = scan.company.name
            company_jobs = [job for job in jobs if job.company == name]
            company_hires = [hire for hire in hires if hire.company == name]
            if self.store is not None:
                counts[name] = (self.store.add_jobs(company_jobs), self.store.add_hires(company_hires))
            else:
                counts[name] = (len(company_jobs), len(company_hires))
        return counts

    def _messages(self, scans: List[CompanyScan], counts: Dict[str, Tuple[int, int]]) -> List[str]:
        messages = []
        for scan in scans:
            new_jobs, new_hires = counts.get(scan.company.name, (0, 0))
            if new_jobs:
                messages.append(format_new_items(new_jobs, "jobs", scan.company.name))
            if new_hires:
                messages.append(format_new_items(new_hires, "hires", scan.company.name))
        return messages
