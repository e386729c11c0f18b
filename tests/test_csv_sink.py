"""
Tests for CSV output.
"""

import csv
from datetime import date

import pytest

from gridder.csv_sink import prepare_csv_path, write_rows, write_tables
from gridder.utils.errors import OutputPathError

DAY = date(2024, 3, 9)


def _read(path):
    with open(path, newline="", encoding="utf-8") as handle:
        return list(csv.reader(handle))


class TestPrepareCsvPath:
    """Output path templates."""

    def test_item_and_date_substituted(self, tmp_path):
        """Test placeholder and date substitution in the template."""
        template = str(tmp_path / "out" / "%Y" / "%m-%d-_ITEM_.csv")

        path = prepare_csv_path(DAY, template, "pairs")

        assert path == (tmp_path / "out" / "2024" / "03-09-pairs.csv").resolve()
        assert path.parent.is_dir()

    def test_empty_template_uses_default(self, tmp_path, monkeypatch):
        """Test fallback to the default template."""
        monkeypatch.chdir(tmp_path)

        path = prepare_csv_path(DAY, "", "lengths")

        assert path == tmp_path.resolve() / "2024-03-09-lengths.csv"

    def test_template_ending_in_slash(self, tmp_path):
        """Test rejection of a template naming a directory."""
        with pytest.raises(OutputPathError, match="must not end in a slash"):
            prepare_csv_path(DAY, f"{tmp_path}/", "pairs")

    def test_existing_directory(self, tmp_path):
        """Test rejection of a target that is a directory."""
        (tmp_path / "pairs.csv").mkdir()

        with pytest.raises(OutputPathError, match="already exists as a directory"):
            prepare_csv_path(DAY, str(tmp_path / "_ITEM_.csv"), "pairs")


class TestWriteTables:
    """Row layout of both files."""

    def test_writes_both_files(self, tmp_path, tables):
        """Test contents of the pairs and lengths files."""
        pairs_path, lengths_path = write_tables(DAY, tables, str(tmp_path / "_ITEM_.csv"))

        assert pairs_path.name == "pairs.csv"
        assert lengths_path.name == "lengths.csv"
        assert _read(pairs_path) == [["AC", "2"], ["AT", "2"], ["CA", "1"], ["CO", "5"]]
        assert _read(lengths_path) == [
            ["A", "4", "2"],
            ["A", "5", "1"],
            ["C", "4", "1"],
            ["C", "5", "2"],
        ]

    def test_failed_write_leaves_previous_file(self, tmp_path):
        """Test that an interrupted write keeps the old file."""
        target = tmp_path / "pairs.csv"
        target.write_text("old\n", encoding="utf-8")

        def rows():
            yield ["AB", 1]
            raise RuntimeError("interrupted")

        with pytest.raises(RuntimeError):
            write_rows(target, rows())

        assert target.read_text(encoding="utf-8") == "old\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["pairs.csv"]
