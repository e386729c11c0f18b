"""
CSV output of the frequency tables.

Each table goes to its own file. Rows are written to a temporary file beside
the target, which replaces the target only once every row is written.
"""

import csv
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Tuple

from gridder.config import DEFAULT_FILENAME_FORMAT
from gridder.models import FrequencyTables
from gridder.utils.errors import OutputPathError
from gridder.utils.logging import get_logger

logger = get_logger(__name__)

ITEM_PLACEHOLDER = "_ITEM_"


def prepare_csv_path(day: date, template: str, key: str) -> Path:
    """
    Resolve the output path for one table.

    ``_ITEM_`` in ``template`` is replaced with ``key`` before the template is
    formatted with ``day`` (strftime codes). Missing parent directories are
    created.

    Raises:
        OutputPathError: If the template names a directory or the parent
            cannot be created
    """
    template = template or DEFAULT_FILENAME_FORMAT
    if template.endswith(("/", os.sep)):
        raise OutputPathError(
            f"filename template must not end in a slash ({template})",
            {"template": template},
        )

    csv_path = Path(day.strftime(template.replace(ITEM_PLACEHOLDER, key)))
    dirname = csv_path.parent

    if not dirname.exists():
        try:
            dirname.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputPathError(f"failed to mkdir {dirname}", {"path": str(dirname)}) from e
    elif csv_path.is_dir():
        raise OutputPathError(
            f"{csv_path} already exists as a directory", {"path": str(csv_path)}
        )

    try:
        return dirname.resolve(strict=True) / csv_path.name
    except OSError as e:
        raise OutputPathError(
            f"failed to canonicalise {dirname}", {"path": str(dirname)}
        ) from e


def write_rows(path: Path, rows: Iterable[Iterable[Any]]) -> int:
    """Write ``rows`` to ``path`` without a header; returns the row count."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    count = 0
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            for row in rows:
                writer.writerow(row)
                count += 1
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return count


def write_tables(day: date, tables: FrequencyTables, template: str) -> Tuple[Path, Path]:
    """
    Write both tables for ``day``.

    Returns:
        ``(pairs_path, lengths_path)``
    """
    written: List[Path] = []
    for key, rows in (("lengths", tables.length_rows()), ("pairs", tables.pair_rows())):
        path = prepare_csv_path(day, template, key)
        try:
            count = write_rows(path, rows)
        except OSError as e:
            raise OutputPathError(
                f"error writing output for {key} to {path}", {"path": str(path)}
            ) from e
        logger.info(f"Wrote {count} {key} rows to {path}")
        written.append(path)

    lengths_path, pairs_path = written
    return pairs_path, lengths_path
