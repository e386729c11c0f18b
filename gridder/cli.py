"""
Command-line interface for Gridder.

Fetches the statistics page for one date, extracts the pair and length
tables and publishes them to either CSV files or a new Google Sheets sheet.
"""

import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

import typer
from rich.console import Console
from rich.markup import escape

from gridder.config import get_settings
from gridder.csv_sink import write_tables
from gridder.extraction.parser import parse_content
from gridder.fetch import fetch_for_date
from gridder.google_sheets.client import SpreadsheetHandle
from gridder.google_sheets.provisioning import SheetProvisioner
from gridder.models import FrequencyTables
from gridder.utils.errors import ConfigurationError, GridderException, format_cause_chain
from gridder.utils.logging import LogContext, get_logger, setup_logging

# New puzzles are published at midnight US-West time
US_WEST_TZ = ZoneInfo("America/Los_Angeles")

app = typer.Typer(
    name="gridder",
    help="Extract daily puzzle statistics into CSV files or a Google spreadsheet",
    add_completion=False,
)
console = Console(stderr=True)
logger = get_logger(__name__)


def parse_date(value: Optional[str]) -> date:
    """Parse ``YYYY-MM-DD``; today in US-West time when not given."""
    if not value:
        return datetime.now(US_WEST_TZ).date()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ConfigurationError(f"failed to parse {value!r} into a date") from e


def load_tables(day: date, from_file: Optional[Path]) -> FrequencyTables:
    """Read the page from ``from_file`` or fetch it, then extract both tables."""
    if from_file is not None:
        logger.info(f"Reading statistics page from {from_file}")
        try:
            body = from_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"failed to read {from_file}") from e
    else:
        body = fetch_for_date(day)

    tables = parse_content(body)
    logger.info(
        f"Extracted {len(tables.pairs)} pairs and {len(tables.lengths)} length counts"
    )
    return tables


def _fail(error: GridderException) -> None:
    console.print(
        f"[red]error:[/red] {escape(format_cause_chain(error))}",
        highlight=False,
        soft_wrap=True,
    )
    raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Gridder daily statistics tool. Without a command, writes today's CSV files."""
    try:
        setup_logging(log_level="DEBUG" if verbose else None)
    except GridderException as e:
        _fail(e)

    if ctx.invoked_subcommand is None:
        run_csv(None, None, None)


def run_csv(
    day: Optional[str], filename_format: Optional[str], from_file: Optional[Path]
) -> None:
    """Extract the tables for ``day`` and write both CSV files."""
    settings = get_settings()
    try:
        target = parse_date(day)
        with LogContext(date=str(target)):
            tables = load_tables(target, from_file)
            pairs_path, lengths_path = write_tables(
                target, tables, filename_format or settings.filename_format
            )
    except GridderException as e:
        _fail(e)

    console.print("operation success!")
    console.print(f"pairs written to:   {pairs_path}", highlight=False, soft_wrap=True)
    console.print(f"lengths written to: {lengths_path}", highlight=False, soft_wrap=True)
    console.print()
    console.print("instructions:\n---")
    console.print("import length CSV to B3")
    console.print("import pair   CSV to F3")
    console.print("remember to replace cell data!")


@app.command("csv")
def csv_command(
    day: Optional[str] = typer.Argument(
        None, help="The date to retrieve data for (YYYY-MM-DD)"
    ),
    filename_format: Optional[str] = typer.Option(
        None,
        "--filename-format",
        "-f",
        help='Output filename template; _ITEM_ becomes "pairs" or "lengths"',
    ),
    from_file: Optional[Path] = typer.Option(
        None, "--from-file", help="Parse a saved page instead of fetching it"
    ),
):
    """Write the pair and length tables to CSV files."""
    run_csv(day, filename_format, from_file)


@app.command("sheets")
def sheets_command(
    day: Optional[str] = typer.Argument(
        None, help="The date to retrieve data for (YYYY-MM-DD)"
    ),
    spreadsheet_id: Optional[str] = typer.Option(
        None, "--spreadsheet-id", "-s", help="Target spreadsheet (GRIDDER_SPREADSHEET_ID)"
    ),
    service_account_file: Optional[Path] = typer.Option(
        None,
        "--service-account",
        "-a",
        help="Service account key file (GRIDDER_SERVICE_ACCOUNT_FILE)",
    ),
    template: Optional[str] = typer.Option(
        None, "--template", "-t", help="Title of the template sheet"
    ),
    from_file: Optional[Path] = typer.Option(
        None, "--from-file", help="Parse a saved page instead of fetching it"
    ),
):
    """Create a dated sheet from the template and fill in both tables."""
    settings = get_settings()
    try:
        target = parse_date(day)
        spreadsheet_id = spreadsheet_id or settings.require_spreadsheet_id()
        service_account_file = (
            service_account_file or settings.require_service_account_file()
        )

        with LogContext(date=str(target)):
            tables = load_tables(target, from_file)
            handle = SpreadsheetHandle.connect(spreadsheet_id, service_account_file)
            provisioner = SheetProvisioner(handle, template or settings.template_sheet)
            sheet = asyncio.run(provisioner.create_for_date(target, tables))
    except GridderException as e:
        _fail(e)

    console.print("operation success!")
    console.print(
        f"created sheet {sheet.title!r} (id {sheet.sheet_id}) in {spreadsheet_id}",
        highlight=False,
    )


if __name__ == "__main__":
    app()
