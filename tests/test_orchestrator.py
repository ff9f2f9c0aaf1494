"""Tests for the scan orchestrator."""
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests_mock

from talentradar.config import ScanConfig
from talentradar.core import ScanOrchestrator, ScanState
from talentradar.database import Database
from talentradar.document import Document
from talentradar.error_handling import CapabilityInitError, NavigationError
from talentradar.extract.people import PERSON_SEARCH_URL, PeopleSearchClient
from talentradar.fetchers import AuthContext, Fetcher, PageBackend
from talentradar.models import Company
from talentradar.rate_limiter import RateGovernor

PAGES = {
    "https://acme.example": "<html><body><p>Welcome to Acme</p></body></html>",
    "https://acme.example/careers": """<html><body>
        <div class="job-card"><h3>Backend Engineer</h3><span class="location">Berlin</span></div>
        <div class="job-card"><h3>Data Analyst</h3></div>
    </body></html>""",
    "https://www.linkedin.com/company/acme/posts/": """<html><body>
        <article>Welcome Dana White, our new Chief Marketing Officer.</article>
        <article>We are hiring engineers, apply now!</article>
    </body></html>""",
    "https://news.example/search?q=%22Acme%22": """<html><body>
        <article>Maria Garcia has been appointed as the new Chief Financial Officer.</article>
    </body></html>""",
    "https://beta.example": '<html><body><a href="/careers">Careers</a></body></html>',
}


class FakeBackend(PageBackend):
    """Serves canned pages; unknown URLs fail navigation."""

    def __init__(self, pages=None, on_fetch=None):
        self.pages = dict(PAGES if pages is None else pages)
        self.on_fetch = on_fetch
        self.requests = []
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True

    def fetch(self, url, auth=None):
        self.requests.append((url, auth))
        if self.on_fetch:
            self.on_fetch(url)
        if url not in self.pages:
            raise NavigationError(url, "not found")
        return Document(url, self.pages[url])


@pytest.fixture
def companies():
    return [
        Company(name="Acme", website="https://acme.example",
                career_page_url="https://acme.example/careers",
                linkedin_url="https://www.linkedin.com/company/acme"),
        Company(name="Beta", website="https://beta.example"),
    ]


@pytest.fixture
def config():
    return ScanConfig(min_delay_ms=0, max_delay_ms=0, backoff_min_ms=0, backoff_max_ms=0,
                      hire_source_templates={"Press Release": "https://news.example/search?q={query}"})


@pytest.fixture
def store():
    return Database("sqlite://")


def make_orchestrator(config, backend, store=None, notifier=None, auth=None):
    fetcher = Fetcher(backend, RateGovernor.immediate())
    return ScanOrchestrator(fetcher, config=config, store=store,
                            notifiers=[notifier] if notifier else None, auth=auth)


def test_full_cycle(config, companies, store):
    backend = FakeBackend()
    notifier = MagicMock()
    auth = AuthContext(cookies=[{"name": "li_at", "value": "token"}])
    orchestrator = make_orchestrator(config, backend, store, notifier, auth)

    result = orchestrator.run_cycle(companies, scan_date=date(2024, 5, 1))

    assert [(j.title, j.company) for j in result.jobs] == [("Backend Engineer", "Acme"), ("Data Analyst", "Acme")]
    assert all(j.posted_date == "2024-05-01" for j in result.jobs)
    assert [(h.person_name, h.source) for h in result.hires] == [
        ("Dana White", "LinkedIn"), ("Maria Garcia", "Press Release"),
    ]

    summary = result.summary
    assert summary.processed_count == 2
    assert summary.new_item_count == 4
    assert summary.error_count == 2  # Beta's discovered career page and press page
    assert summary.duration_ms >= 0

    assert result.messages == ["Found 2 new jobs at Acme", "Found 2 new hires at Acme"]
    notifier.notify.assert_called_once_with(result.messages)
    assert store.count_jobs("Acme") == 2
    assert store.count_hires("Acme") == 2
    assert store.latest_summary().new_item_count == 4

    assert ("https://www.linkedin.com/company/acme/posts/", auth) in backend.requests
    assert ("https://beta.example/careers", None) in backend.requests
    assert backend.opened and backend.closed
    assert orchestrator.state == ScanState.IDLE


def test_second_cycle_reports_nothing_new(config, companies, store):
    make_orchestrator(config, FakeBackend(), store).run_cycle(companies)
    notifier = MagicMock()

    result = make_orchestrator(config, FakeBackend(), store, notifier).run_cycle(companies)

    assert result.summary.new_item_count == 0
    assert result.messages == []
    notifier.notify.assert_called_once_with([])


def test_without_store_new_items_are_the_reconciled_candidates(config, companies):
    result = make_orchestrator(config, FakeBackend()).run_cycle(companies)
    assert result.summary.new_item_count == 4
    assert result.summary.jobs_found == 2
    assert result.summary.hires_found == 2


def test_capability_failure_is_fatal(config, companies):
    backend = FakeBackend()
    backend.open = MagicMock(side_effect=CapabilityInitError("browser missing"))
    orchestrator = make_orchestrator(config, backend)

    with pytest.raises(CapabilityInitError):
        orchestrator.run_cycle(companies)
    assert backend.requests == []
    assert orchestrator.state == ScanState.IDLE


def test_unexpected_error_on_one_url_does_not_stop_scan(config, companies):
    def explode(url):
        if url == "https://acme.example":
            raise RuntimeError("renderer crashed")

    result = make_orchestrator(config, FakeBackend(on_fetch=explode)).run_cycle(companies)

    assert len(result.jobs) == 2
    assert result.summary.error_count == 3


def test_cancel_between_companies(config, companies):
    holder = {}

    def cancel_on_first_fetch(url):
        holder["orchestrator"].cancel()

    backend = FakeBackend(on_fetch=cancel_on_first_fetch)
    orchestrator = holder["orchestrator"] = make_orchestrator(config, backend)

    result = orchestrator.run_cycle(companies)

    assert result.cancelled is True
    assert result.summary.processed_count == 1
    assert not any(url.startswith("https://beta.example") for url, _ in backend.requests)
    assert backend.closed


def test_zero_result_company_is_a_warning(config, caplog):
    backend = FakeBackend(pages={"https://empty.example": "<html><body></body></html>"})
    config.hire_source_templates = {}
    with caplog.at_level("WARNING"):
        result = make_orchestrator(config, backend).run_cycle(
            [Company(name="Empty", website="https://empty.example")])
    assert result.summary.error_count == 0
    assert "No jobs or hires found for Empty" in caplog.text


def test_people_search_hires_included(config):
    people_client = MagicMock()
    people_client.find_recent_hires.return_value = []
    config.hire_source_templates = {}
    backend = FakeBackend(pages={"https://acme.example": "<html></html>"})
    orchestrator = ScanOrchestrator(Fetcher(backend, RateGovernor.immediate()), config=config,
                                    people_client=people_client)

    orchestrator.run_cycle([Company(name="Acme", website="https://acme.example")])

    people_client.find_recent_hires.assert_called_once_with("Acme")


def test_lenient_mode_collapses_near_duplicate_names(config):
    config.dedup_mode = "lenient"
    config.hire_source_templates = {"Press Release": "https://news.example/a?q={query}",
                                    "Industry News": "https://news.example/b?q={query}"}
    pages = {
        "https://acme.example": "<html></html>",
        "https://news.example/a?q=%22Acme%22": "<p>Jon Doe joined Acme as CTO.</p>",
        "https://news.example/b?q=%22Acme%22": "<p>John Doe joined Acme as CTO.</p>",
    }
    result = make_orchestrator(config, FakeBackend(pages=pages)).run_cycle(
        [Company(name="Acme", website="https://acme.example")])
    assert [h.person_name for h in result.hires] == ["Jon Doe"]


def test_malformed_person_records_do_not_abort_cycle(config):
    config.hire_source_templates = {}
    pages = {"https://acme.example": "<html></html>", "https://beta.example": "<html></html>"}
    orchestrator = ScanOrchestrator(Fetcher(FakeBackend(pages=pages), RateGovernor.immediate()),
                                    config=config, people_client=PeopleSearchClient("secret"))
    companies = [Company(name="Acme", website="https://acme.example"),
                 Company(name="Beta", website="https://beta.example")]

    with requests_mock.Mocker() as m:
        m.post(PERSON_SEARCH_URL, json={"data": [{"full_name": "Jane Smith", "experience": ["Acme"]}]})
        result = orchestrator.run_cycle(companies)

    assert result.summary.processed_count == 2
    assert result.hires == []


def test_people_client_failure_counts_as_error(config):
    config.hire_source_templates = {}
    people_client = MagicMock()
    people_client.find_recent_hires.side_effect = [AttributeError("bad record"), []]
    pages = {"https://acme.example": "<html></html>", "https://beta.example": "<html></html>"}
    orchestrator = ScanOrchestrator(Fetcher(FakeBackend(pages=pages), RateGovernor.immediate()),
                                    config=config, people_client=people_client)

    result = orchestrator.run_cycle([Company(name="Acme", website="https://acme.example"),
                                     Company(name="Beta", website="https://beta.example")])

    assert result.summary.processed_count == 2
    assert result.summary.error_count == 1
    assert people_client.find_recent_hires.call_count == 2


def test_repeated_company_is_scanned_once(config, companies, store):
    backend = FakeBackend()
    repeated = [companies[0], companies[1], Company(name="acme", website="https://acme.example")]

    result = make_orchestrator(config, backend, store).run_cycle(repeated)

    assert result.summary.processed_count == 2
    assert result.messages == ["Found 2 new jobs at Acme", "Found 2 new hires at Acme"]
    assert [url for url, _ in backend.requests].count("https://acme.example/careers") == 1
