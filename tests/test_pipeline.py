"""Tests for the extraction cascade ordering."""
import json
from unittest.mock import MagicMock

from talentradar.document import Document
from talentradar.extract.dom import CardExtractor, HeadingExtractor, LinkExtractor, ListExtractor
from talentradar.extract.pipeline import ExtractionPipeline
from talentradar.metrics import MetricsCollector
from talentradar.models import JobCandidate

URL = "https://acme.example/careers"


def spy(extractor):
    """Wrap an extractor so calls can be asserted while keeping its behaviour."""
    mock = MagicMock(wraps=extractor)
    mock.method = extractor.method
    return mock


def make_pipeline(metrics=None):
    card, lst, link, heading = (spy(CardExtractor()), spy(ListExtractor()),
                                spy(LinkExtractor()), spy(HeadingExtractor()))
    pipeline = ExtractionPipeline(layout=[card, lst, link], fallback=heading, metrics=metrics)
    return pipeline, card, lst, link, heading


def test_structured_data_short_circuits_layout_cascade():
    posting = {"@type": "JobPosting", "title": "Staff Engineer", "jobLocation": "Remote"}
    html = f"""<html><head><script type="application/ld+json">{json.dumps(posting)}</script></head>
    <body><div class="job-card"><h3>Other Role</h3></div><a href="/apply">Apply now</a></body></html>"""
    pipeline, card, lst, link, heading = make_pipeline()

    result = pipeline.run(Document(URL, html), company="Acme")

    assert result.method == "structured"
    assert [c.title for c in result.candidates] == ["Staff Engineer"]
    assert result.candidates[0].company == "Acme"
    assert result.attempted == ["structured"]
    for extractor in (card, lst, link, heading):
        extractor.extract.assert_not_called()


def test_list_result_stops_cascade():
    html = """<html><body><ul><li>Account Executive - Full time</li></ul></body></html>"""
    pipeline, card, lst, link, heading = make_pipeline()

    result = pipeline.run(Document(URL, html))

    assert result.method == "list"
    assert [c.title for c in result.candidates] == ["Account Executive"]
    assert result.attempted == ["structured", "card", "list"]
    card.extract.assert_called_once()
    link.extract.assert_not_called()
    heading.extract.assert_not_called()


def test_heading_runs_only_when_layout_extractors_are_empty():
    html = """<html><body><h1>Join our team</h1><h2>Product Designer</h2></body></html>"""
    pipeline, card, lst, link, heading = make_pipeline()

    result = pipeline.run(Document(URL, html))

    assert result.method == "heading"
    assert [c.title for c in result.candidates] == ["Product Designer"]
    assert result.attempted == ["structured", "card", "list", "link", "heading"]


def test_empty_page_is_not_an_error():
    result = ExtractionPipeline().run(Document(URL, "<html><body><p>Hello</p></body></html>"))
    assert result.candidates == []
    assert result.method is None


def test_metrics_record_candidates_by_method():
    metrics = MetricsCollector()
    html = """<html><body><a href="/jobs/remote-support">Support Specialist (Remote)</a></body></html>"""
    result = ExtractionPipeline.from_vocabulary(metrics=metrics).run(Document(URL, html))
    assert result.method == "link"
    assert metrics.candidates_by_method["link"] == 1


def test_injected_strategy_order():
    first = MagicMock()
    first.method = "first"
    first.extract.return_value = [JobCandidate(title="Injected Role")]
    second = MagicMock()
    second.method = "second"
    structured = MagicMock()
    structured.extract.return_value = []

    result = ExtractionPipeline(structured=structured, layout=[first, second]).run(
        Document(URL, "<html></html>"))

    assert result.method == "first"
    second.extract.assert_not_called()


def test_list_valued_structured_fields_do_not_break_page():
    posting = {"@type": "JobPosting", "title": "Staff Engineer",
               "jobLocation": {"address": {"addressLocality": ["Berlin", "Munich"]}}}
    html = f"""<html><head><script type="application/ld+json">{json.dumps(posting)}</script></head>
    <body><div class="job-card"><h3>Other Role</h3></div></body></html>"""

    result = ExtractionPipeline.from_vocabulary().run(Document(URL, html), company="Acme")

    assert result.method == "structured"
    assert [(c.title, c.location) for c in result.candidates] == [("Staff Engineer", "Berlin")]
