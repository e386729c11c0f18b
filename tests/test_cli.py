"""
Tests for the command-line interface.
"""

from datetime import date

import pytest
from typer.testing import CliRunner

from gridder import cli, config
from gridder.cli import app, parse_date
from gridder.config import DEFAULT_FILENAME_FORMAT
from gridder.google_sheets.client import SpreadsheetHandle
from gridder.utils.errors import ConfigurationError, FetchError
from tests.conftest import build_page
from tests.test_provisioning import FakeSheetsService, _sheet

runner = CliRunner()


@pytest.fixture
def page_file(tmp_path, page_html):
    path = tmp_path / "page.html"
    path.write_text(page_html, encoding="utf-8")
    return path


def test_parse_date():
    """Test date argument parsing and the US-West default."""
    assert parse_date("2024-03-09") == date(2024, 3, 9)
    assert isinstance(parse_date(None), date)

    with pytest.raises(ConfigurationError, match="failed to parse 'yesterday'"):
        parse_date("yesterday")


def test_csv_from_file(tmp_path, page_file):
    """Test CSV output from a saved page."""
    result = runner.invoke(
        app,
        [
            "csv",
            "2024-03-09",
            "--from-file",
            str(page_file),
            "-f",
            str(tmp_path / "%Y-%m-%d-_ITEM_.csv"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "operation success!" in result.output
    assert (tmp_path / "2024-03-09-pairs.csv").is_file()
    assert (tmp_path / "2024-03-09-lengths.csv").is_file()


def test_csv_fetches_page(tmp_path, monkeypatch):
    """Test that the csv command fetches the page for the given date."""
    requested = []

    def fake_fetch(day):
        requested.append(day)
        return build_page()

    monkeypatch.setattr(cli, "fetch_for_date", fake_fetch)

    result = runner.invoke(app, ["csv", "2024-03-09", "-f", str(tmp_path / "_ITEM_.csv")])

    assert result.exit_code == 0, result.output
    assert requested == [date(2024, 3, 9)]


def test_fetch_failure_exits_non_zero(tmp_path, monkeypatch):
    """Test that a fetch error prints its cause and exits 1."""
    def fake_fetch(day):
        raise FetchError("status", "https://example.test")

    monkeypatch.setattr(cli, "fetch_for_date", fake_fetch)

    result = runner.invoke(app, ["csv", "2024-03-09", "-f", str(tmp_path / "_ITEM_.csv")])

    assert result.exit_code == 1
    assert "got bad http status from server" in result.output
    assert not list(tmp_path.glob("*.csv"))


def test_extraction_failure_exits_non_zero(tmp_path):
    """Test that a malformed page prints its cause and exits 1."""
    page = tmp_path / "page.html"
    page.write_text(build_page(include_table=False), encoding="utf-8")

    result = runner.invoke(
        app, ["csv", "2024-03-09", "--from-file", str(page), "-f", str(tmp_path / "_ITEM_.csv")]
    )

    assert result.exit_code == 1
    assert "missing results table" in result.output


def test_sheets_requires_spreadsheet_id(page_file, monkeypatch):
    """Test that the sheets command needs a spreadsheet ID."""
    monkeypatch.delenv("GRIDDER_SPREADSHEET_ID", raising=False)
    monkeypatch.setattr(cli.get_settings(), "spreadsheet_id", None)

    result = runner.invoke(app, ["sheets", "2024-03-09", "--from-file", str(page_file)])

    assert result.exit_code == 1
    assert "spreadsheet_id" in result.output


def test_sheets_creates_sheet(tmp_path, page_file, monkeypatch):
    """Test the sheets command end to end against a fake service."""
    service = FakeSheetsService([_sheet(0, "Summary"), _sheet(1, "TEMPLATE")])
    connected = []

    def fake_connect(spreadsheet_id, service_account_file):
        connected.append((spreadsheet_id, service_account_file))
        return SpreadsheetHandle(service=service, spreadsheet_id=spreadsheet_id)

    monkeypatch.setattr(SpreadsheetHandle, "connect", staticmethod(fake_connect))
    key_file = tmp_path / "key.json"

    result = runner.invoke(
        app,
        [
            "sheets",
            "2024-03-09",
            "--from-file",
            str(page_file),
            "--spreadsheet-id",
            "sheet-123",
            "--service-account",
            str(key_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "2024-03-09" in result.output
    assert connected == [("sheet-123", key_file)]
    assert service.cells["2024-03-09"]["B3:D"][0] == ["A", 4, 2]


def test_sheets_failure_reports_step(tmp_path, page_file, monkeypatch):
    """Test that a failed step is named in the error output."""
    service = FakeSheetsService([_sheet(0, "Summary")])
    monkeypatch.setattr(
        SpreadsheetHandle,
        "connect",
        staticmethod(lambda sid, key: SpreadsheetHandle(service=service, spreadsheet_id=sid)),
    )

    result = runner.invoke(
        app,
        [
            "sheets",
            "2024-03-09",
            "--from-file",
            str(page_file),
            "-s",
            "sheet-123",
            "-a",
            str(tmp_path / "key.json"),
        ],
    )

    assert result.exit_code == 1
    assert "could not identify template sheet" in result.output
    assert "did not find template sheet" in result.output


def test_bad_timeout_reported_as_error(tmp_path, page_file, monkeypatch):
    """Test that a bad timeout setting prints an error line and exits 1."""
    monkeypatch.setenv("GRIDDER_REQUEST_TIMEOUT", "abc")
    monkeypatch.setattr(config, "_settings", None)

    result = runner.invoke(
        app,
        ["csv", "2024-03-09", "--from-file", str(page_file), "-f", str(tmp_path / "_ITEM_.csv")],
    )

    assert result.exit_code == 1
    assert "error:" in result.output
    assert "GRIDDER_REQUEST_TIMEOUT is not a number" in result.output
    assert not list(tmp_path.glob("*.csv"))


def test_no_command_writes_csv(tmp_path, monkeypatch):
    """Test that a bare invocation writes today's CSV files."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli.get_settings(), "filename_format", DEFAULT_FILENAME_FORMAT)
    monkeypatch.setattr(cli, "fetch_for_date", lambda day: build_page())

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "operation success!" in result.output
    assert sorted(p.name.split("-")[-1] for p in tmp_path.glob("*.csv")) == [
        "lengths.csv",
        "pairs.csv",
    ]
