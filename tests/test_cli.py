"""Tests for the command-line interface."""
from click.testing import CliRunner
import pytest

from talentradar.cli import cli

CAREERS_HTML = """<html><body>
<div class="job-card"><h3>Designer</h3><span class="location">Berlin</span></div>
<div class="job-card"><h3>Analyst</h3></div>
</body></html>"""


@pytest.fixture
def runner():
    return CliRunner()


def test_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("scan", "extract", "hires", "companies"):
        assert command in result.output


def test_extract_saved_page(runner):
    with runner.isolated_filesystem():
        with open("careers.html", "w") as f:
            f.write(CAREERS_HTML)
        result = runner.invoke(cli, ["extract", "careers.html", "--url", "https://acme.example/careers"])
    assert result.exit_code == 0
    assert "Jobs (card)" in result.output
    assert "Designer" in result.output


def test_extract_nothing_found(runner):
    with runner.isolated_filesystem():
        with open("empty.html", "w") as f:
            f.write("<html><body><p>About us</p></body></html>")
        result = runner.invoke(cli, ["extract", "empty.html"])
    assert result.exit_code == 0
    assert "No jobs found" in result.output


def test_hires_from_text(runner):
    with runner.isolated_filesystem():
        with open("news.txt", "w") as f:
            f.write("Jane Doe has been appointed as CFO.")
        result = runner.invoke(cli, ["hires", "news.txt", "--company", "Acme"])
    assert result.exit_code == 0
    assert "Hires at Acme" in result.output
    assert "Jane Doe" in result.output


def test_hires_requires_company(runner):
    with runner.isolated_filesystem():
        with open("news.txt", "w") as f:
            f.write("")
        result = runner.invoke(cli, ["hires", "news.txt"])
    assert result.exit_code != 0


def test_companies_lists_config(runner):
    with runner.isolated_filesystem():
        with open("companies.yml", "w") as f:
            f.write("- name: Acme\n  website: https://acme.example\n")
        result = runner.invoke(cli, ["companies", "--config", "companies.yml"])
    assert result.exit_code == 0
    assert "Acme" in result.output


def test_scan_rejects_invalid_settings(runner):
    with runner.isolated_filesystem():
        with open("talentradar.yml", "w") as f:
            f.write("scan:\n  dedup_mode: fuzzy\n")
        result = runner.invoke(cli, ["scan", "--config", "talentradar.yml"])
    assert result.exit_code == 1
    assert "Invalid scan settings" in result.output


def test_scan_without_companies(runner):
    with runner.isolated_filesystem():
        with open("talentradar.yml", "w") as f:
            f.write("scan:\n  database_url: 'sqlite://'\ncompanies: []\n")
        result = runner.invoke(cli, ["scan", "--config", "talentradar.yml", "--http"])
    assert result.exit_code == 0
    assert "No companies configured" in result.output
