"""Tests for structured JobPosting extraction."""
import json

import pytest

from talentradar.document import Document
from talentradar.error_handling import MalformedStructuredData
from talentradar.extract.structured import (
    StructuredDataExtractor, iter_objects, normalize_date, parse_block,
)
from talentradar.metrics import MetricsCollector


def _page(*blocks: str) -> Document:
    scripts = "".join(f'<script type="application/ld+json">{b}</script>' for b in blocks)
    return Document("https://acme.example/careers", f"<html><head>{scripts}</head><body></body></html>")


@pytest.fixture
def posting():
    return {
        "@context": "https://schema.org",
        "@type": "JobPosting",
        "title": "Senior Data Engineer",
        "datePosted": "2024-03-05T10:00:00Z",
        "url": "/jobs/42",
        "hiringOrganization": {"@type": "Organization", "name": "Acme", "department": "Data"},
        "jobLocation": {"@type": "Place", "address": {"addressLocality": "Berlin", "addressCountry": "DE"}},
    }


class TestParseBlock:
    def test_valid_json(self):
        assert parse_block('{"a": 1}') == {"a": 1}

    def test_trailing_commas_and_comments(self):
        content = '{"@type": "JobPosting", /* note */ "title": "Analyst",}'
        assert parse_block(content) == {"@type": "JobPosting", "title": "Analyst"}

    def test_invalid_block_raises(self):
        with pytest.raises(MalformedStructuredData):
            parse_block("{not json at all")


def test_iter_objects_walks_graph():
    data = {"@graph": [{"@type": "WebPage"}, {"@type": "JobPosting", "title": "A"}]}
    types = [obj.get("@type") for obj in iter_objects(data)]
    assert "JobPosting" in types
    assert "WebPage" in types


@pytest.mark.parametrize("value,expected", [
    ("2024-03-05T10:00:00Z", "2024-03-05"),
    ("March 5, 2024", "2024-03-05"),
    ("not a date", None),
    (None, None),
    ("", None),
])
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_extracts_declared_posting(posting):
    jobs = StructuredDataExtractor().extract(_page(json.dumps(posting)))
    assert len(jobs) == 1
    job = jobs[0]
    assert job.title == "Senior Data Engineer"
    assert job.location == "Berlin"
    assert job.department == "Data"
    assert job.posted_date == "2024-03-05"
    assert job.url == "https://acme.example/jobs/42"
    assert job.source_url == "https://acme.example/careers"
    assert job.extraction_method == "structured"


def test_multiple_blocks_and_graph(posting):
    second = dict(posting, title="Product Manager", jobLocation="Remote")
    graph = json.dumps({"@context": "https://schema.org", "@graph": [{"@type": "Organization"}, second]})
    jobs = StructuredDataExtractor().extract(_page(json.dumps(posting), graph))
    assert [j.title for j in jobs] == ["Senior Data Engineer", "Product Manager"]
    assert jobs[1].location == "Remote"


def test_type_list_and_telecommute():
    posting = {"@type": ["JobPosting"], "title": "Support Lead", "jobLocationType": "TELECOMMUTE"}
    jobs = StructuredDataExtractor().extract(_page(json.dumps(posting)))
    assert jobs[0].location == "Remote"


def test_malformed_block_is_skipped(posting):
    metrics = MetricsCollector()
    jobs = StructuredDataExtractor(metrics).extract(_page("{broken", json.dumps(posting)))
    assert [j.title for j in jobs] == ["Senior Data Engineer"]
    assert metrics.malformed_blocks == 1


def test_posting_without_title_is_dropped():
    jobs = StructuredDataExtractor().extract(_page(json.dumps({"@type": "JobPosting", "title": "  "})))
    assert jobs == []


def test_non_job_entities_ignored():
    jobs = StructuredDataExtractor().extract(_page(json.dumps({"@type": "Organization", "name": "Acme"})))
    assert jobs == []


@pytest.mark.parametrize("overrides,location,department", [
    ({"jobLocation": {"address": {"addressLocality": ["Berlin", "Munich"]}}}, "Berlin", "Data"),
    ({"jobLocation": {"address": {"addressLocality": {"name": "Berlin"}, "addressRegion": "BE"}}}, "BE", "Data"),
    ({"jobLocation": {"name": 42}}, "", "Data"),
    ({"hiringOrganization": {"department": {"name": "Data"}}, "department": ["Analytics"]}, "Berlin", "Analytics"),
    ({"jobLocationType": ["TELECOMMUTE"], "jobLocation": None}, "Remote", "Data"),
])
def test_non_string_fields_are_coerced(posting, overrides, location, department):
    posting.update(overrides)
    [job] = StructuredDataExtractor().extract(_page(json.dumps(posting)))
    assert job.location == location
    assert job.department == department


def test_non_string_title_and_url(posting):
    posting.update({"title": ["Platform Engineer", "Ignored"], "url": {"@id": "x"}})
    [job] = StructuredDataExtractor().extract(_page(json.dumps(posting)))
    assert job.title == "Platform Engineer"
    assert job.url == "https://acme.example/careers"


def test_posting_with_unusable_title_is_dropped(posting):
    posting["title"] = {"en": "Engineer"}
    assert StructuredDataExtractor().extract(_page(json.dumps(posting))) == []
