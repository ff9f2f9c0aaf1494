"""Command-line interface for TalentRadar."""
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from .config import load_companies, load_scan_config
from .core import ScanOrchestrator
from .database import Database
from .document import Document
from .error_handling import CapabilityInitError
from .extract.hires import HireExtractor
from .extract.pipeline import ExtractionPipeline
from .notifiers import ConsoleNotifier, LogNotifier

console = Console()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """TalentRadar - Job posting and leadership hire tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


@cli.command()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='YAML file with companies and scan settings')
@click.option('--env-file', help='Path to a .env file')
@click.option('--http', 'use_http', is_flag=True, help='Fetch with plain HTTP instead of a headless browser')
def scan(config_path: Optional[Path], env_file: Optional[str], use_http: bool):
    """Scan every configured company for new jobs and hires."""
    try:
        settings = load_scan_config(config_path, env_file)
    except ValueError as e:
        console.print(f"[red]Invalid scan settings: {e}[/red]")
        sys.exit(1)
    if use_http:
        settings.fetch_method = "http"
    db = Database(settings.database_url)
    try:
        companies = load_companies(config_path)
    except FileNotFoundError:
        companies = db.list_companies()
    except ValueError as e:
        console.print(f"[red]Invalid company configuration: {e}[/red]")
        sys.exit(1)
    if not companies:
        console.print("[yellow]No companies configured[/yellow]")
        return
    for company in companies:
        db.add_company(company)

    orchestrator = ScanOrchestrator.from_config(
        settings, store=db, notifiers=[ConsoleNotifier(console), LogNotifier()])
    console.print(f"[blue]Scanning {len(companies)} companies...[/blue]")
    try:
        result = orchestrator.run_cycle(companies)
    except CapabilityInitError as e:
        console.print(f"[red]Scan aborted: {e}[/red]")
        sys.exit(1)

    summary = result.summary
    console.print(f"\n[bold green]Scan Summary:[/bold green]")
    console.print(f"  Companies processed: {summary.processed_count}")
    console.print(f"  Jobs found: {summary.jobs_found}")
    console.print(f"  Hires found: {summary.hires_found}")
    console.print(f"  New items stored: {summary.new_item_count}")
    console.print(f"  Errors: {summary.error_count}")
    console.print(f"  Duration: {summary.duration_ms / 1000:.1f}s")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--url', default=None, help='URL the page was saved from, used to resolve links')
@click.option('--company', default='', help='Company name stamped on the results')
def extract(path: Path, url: Optional[str], company: str):
    """Run the job extraction cascade on a saved HTML page."""
    document = Document(url or path.resolve().as_uri(), path.read_text(encoding="utf-8", errors="replace"))
    result = ExtractionPipeline.from_vocabulary().run(document, company)
    if not result.candidates:
        console.print(f"[yellow]No jobs found (tried: {', '.join(result.attempted)})[/yellow]")
        return

    table = Table(title=f"Jobs ({result.method})")
    table.add_column("Title", style="cyan")
    table.add_column("Location", style="blue")
    table.add_column("Department", style="green")
    table.add_column("Posted", style="magenta")
    table.add_column("URL", style="yellow")
    for job in result.candidates:
        table.add_row(job.title, job.location or "N/A", job.department or "N/A",
                      job.posted_date or "N/A", job.url)
    console.print(table)


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--company', required=True, help='Company the hires are attributed to')
@click.option('--source', default='Manual', help='Provenance label for the hires')
def hires(path: Path, company: str, source: str):
    """Find hire announcements in a text or HTML file."""
    text = path.read_text(encoding="utf-8", errors="replace")
    extractor = HireExtractor()
    if path.suffix.lower() in (".html", ".htm"):
        found = extractor.extract_document(Document(path.resolve().as_uri(), text), company, source)
    else:
        found = extractor.extract(text, company, source)
    if not found:
        console.print("[yellow]No hire announcements found[/yellow]")
        return

    table = Table(title=f"Hires at {company}")
    table.add_column("Name", style="cyan")
    table.add_column("Position", style="green")
    table.add_column("Source", style="blue")
    table.add_column("Confidence", style="magenta")
    for hire in found:
        table.add_row(hire.person_name, hire.position, hire.source, str(hire.confidence_score))
    console.print(table)


@cli.command()
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='YAML file with companies')
def companies(config_path: Optional[Path]):
    """List configured companies."""
    try:
        configured = load_companies(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    table = Table(title="Configured Companies")
    table.add_column("Name", style="cyan")
    table.add_column("Website", style="blue")
    table.add_column("Career Page", style="green")
    table.add_column("LinkedIn", style="yellow")
    for company in configured:
        table.add_row(company.name, company.website or "N/A",
                      company.career_page_url or "N/A", company.linkedin_url or "N/A")
    console.print(table)
