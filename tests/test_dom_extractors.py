"""Tests for the layout heuristic extractors."""
import pytest

from talentradar.document import Document
from talentradar.extract.dom import (
    CardExtractor, HeadingExtractor, LinkExtractor, ListExtractor,
    contains_keyword, discover_career_pages, extract_location, looks_like_job_title,
)

BASE_URL = "https://acme.example/careers"


def page(body: str, url: str = BASE_URL) -> Document:
    return Document(url, f"<html><body>{body}</body></html>")


class TestCardExtractor:
    def test_extracts_fields_from_job_cards(self):
        doc = page("""
        <div class="jobs">
          <div class="job-card">
            <h3 class="job-title">Backend Engineer</h3>
            <span class="job-location">Berlin</span>
            <span class="department">Platform</span>
            <time datetime="2024-02-01">Feb 1</time>
            <a href="/jobs/1">Apply</a>
          </div>
          <div class="job-card">
            <h3 class="job-title">Data Analyst</h3>
            <span class="location">Remote</span>
            <a href="/jobs/2">Apply</a>
          </div>
          <div class="job-card"><span class="location">Nowhere</span></div>
        </div>
        """)
        jobs = CardExtractor().extract(doc)

        assert [j.title for j in jobs] == ["Backend Engineer", "Data Analyst"]
        first = jobs[0]
        assert first.location == "Berlin"
        assert first.department == "Platform"
        assert first.posted_date == "2024-02-01"
        assert first.url == "https://acme.example/jobs/1"
        assert first.extraction_method == "card"
        assert jobs[1].location == "Remote"

    def test_card_with_job_descendant(self):
        doc = page("""
        <div class="card"><h2>Operations Manager</h2><span class="job-type">Full time</span></div>
        <div class="card"><h2>Our office</h2></div>
        """)
        jobs = CardExtractor().extract(doc)
        assert [j.title for j in jobs] == ["Operations Manager"]
        assert jobs[0].url == BASE_URL

    def test_nested_cards_counted_once(self):
        doc = page("""
        <div class="job-card"><div class="job-card-body"><h3>QA Lead</h3></div></div>
        """)
        assert [j.title for j in CardExtractor().extract(doc)] == ["QA Lead"]

    def test_page_local_dedup(self):
        doc = page("""
        <div class="job-card"><h3>Sales  Director</h3><span class="location">NYC</span></div>
        <div class="job-card"><h3>sales director</h3><span class="location">nyc</span></div>
        <div class="job-card"><h3>Sales Director</h3><span class="location">Boston</span></div>
        """)
        jobs = CardExtractor().extract(doc)
        assert [(j.title, j.location) for j in jobs] == [("Sales Director", "NYC"), ("Sales Director", "Boston")]

    def test_no_cards(self):
        assert CardExtractor().extract(page("<p>About us</p>")) == []


class TestListExtractor:
    def test_accepts_only_items_with_job_keywords(self):
        doc = page("""
        <ul class="jobs-list">
          <li><a href="/jobs/a">Marketing Manager</a> - Full time - Location: Austin, TX</li>
          <li>Office party photos</li>
          <li>Senior Designer | Remote | Apply now</li>
        </ul>
        """)
        jobs = ListExtractor().extract(doc)

        assert [j.title for j in jobs] == ["Marketing Manager", "Senior Designer"]
        assert jobs[0].location == "Austin, TX"
        assert jobs[0].url == "https://acme.example/jobs/a"
        assert jobs[1].location == "Remote"
        assert jobs[1].url == BASE_URL
        assert all(j.extraction_method == "list" for j in jobs)

    def test_hyphenated_keyword(self):
        doc = page("<ol><li>Warehouse Associate, full-time</li></ol>")
        jobs = ListExtractor().extract(doc)
        assert [j.title for j in jobs] == ["Warehouse Associate"]

    def test_custom_keywords(self):
        doc = page("<ul><li>Barista - weekend shifts</li></ul>")
        assert ListExtractor(job_keywords=["weekend shifts"]).extract(doc)[0].title == "Barista"


class TestLinkExtractor:
    def test_matches_text_or_hyphenated_href(self):
        doc = page("""
        <p>Hello</p>
        <a href="/about">About us</a>
        <a href="/careers/join-our-team">Open roles</a>
        <a href="/programs">Internship program</a>
        <a href="/empty"></a>
        """)
        jobs = LinkExtractor().extract(doc)

        assert [j.title for j in jobs] == ["Open roles", "Internship program"]
        assert jobs[0].url == "https://acme.example/careers/join-our-team"
        assert all(j.extraction_method == "link" for j in jobs)


class TestHeadingExtractor:
    def test_requires_hiring_intent(self):
        body = "<h2>Software Engineer</h2><h4>Marketing Lead (Remote)</h4>"
        assert HeadingExtractor().extract(page("<h1>Welcome</h1>" + body)) == []

    def test_accepts_job_like_headings(self):
        doc = page("""
        <h1>We are hiring!</h1>
        <h2>Software Engineer</h2>
        <h3>Our values</h3>
        <h4>Marketing Lead (Remote)</h4>
        <h2>Hi</h2>
        <h5>Senior Developer</h5>
        """)
        jobs = HeadingExtractor().extract(doc)
        assert [j.title for j in jobs] == ["Software Engineer", "Marketing Lead (Remote)"]
        assert all(j.extraction_method == "heading" for j in jobs)


@pytest.mark.parametrize("text,expected", [
    ("Senior Python Developer", True),
    ("Part-time barista", True),
    ("Finance team", True),
    ("Our story", False),
    ("Lead", False),
    ("Engineer " * 20, False),
])
def test_looks_like_job_title(text, expected):
    assert looks_like_job_title(text) is expected


@pytest.mark.parametrize("text,expected", [
    ("Location: Denver, CO | Apply", "Denver, CO"),
    ("Fully remote role", "remote"),
    ("Support agent based in Lisbon", "Lisbon"),
    ("No place given", ""),
])
def test_extract_location(text, expected):
    assert extract_location(text) == expected


def test_contains_keyword_hyphenated():
    assert contains_keyword("Now hiring: on-site cook", ["on site"])
    assert not contains_keyword("Company picnic", ["full time"])


class TestDiscoverCareerPages:
    def test_finds_career_links(self):
        doc = page("""
        <a href="/careers">Careers</a>
        <a href="https://acme.example/careers">Work here</a>
        <a href="/blog">Blog</a>
        <a href="mailto:hello@acme.example">Email</a>
        <a href="/about">Join Us</a>
        <a href="#top">Top</a>
        """, url="https://acme.example/")
        assert discover_career_pages(doc) == [
            "https://acme.example/careers",
            "https://acme.example/about",
        ]

    def test_respects_limit(self):
        doc = page('<a href="/jobs">Jobs</a><a href="/team">Team</a>', url="https://acme.example/")
        assert discover_career_pages(doc, limit=1) == ["https://acme.example/jobs"]
