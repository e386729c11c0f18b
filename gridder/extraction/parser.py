"""
Extraction of the pair and length aggregates from the statistics page.

The page is expected to hold one results table (``table.table``) whose parent
element also contains the descriptive ``p.content`` paragraphs. The two-letter
list lives in the paragraph at ``PAIR_BLOCK_INDEX``; if the page layout moves
it, extraction fails there rather than reading the wrong paragraph.
"""

import re
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from gridder.models import FrequencyTables, LengthMap, PairMap
from gridder.utils.errors import (
    CellParseError,
    MalformedTableError,
    MissingContentBlockError,
    MissingTableError,
    PairCountParseError,
)
from gridder.utils.logging import get_logger

logger = get_logger(__name__)

TABLE_SELECTOR = "table.table"
ROW_SELECTOR = "tr.row"
CELL_SELECTOR = "td.cell"
CONTENT_SELECTOR = "p.content"

# Fifth content paragraph holds the "AB-3 AC-1 ..." list
PAIR_BLOCK_INDEX = 4

SUM_GLYPH = "Σ"
EMPTY_GLYPH = "-"

TWO_LETTER_PATTERN = re.compile(r"\b([a-zA-Z]{2})-(\d+)\b")


def parse_content(body: str) -> FrequencyTables:
    """
    Extract both aggregates from a statistics page.

    Args:
        body: Full HTML text of the page

    Returns:
        Pair and length tables

    Raises:
        StructuralError: If the table or the pair paragraph is missing
        ParseError: If a count cannot be read
    """
    page = BeautifulSoup(body, "html.parser")

    table = page.select_one(TABLE_SELECTOR)
    if table is None:
        raise MissingTableError(TABLE_SELECTOR)

    container = table.parent
    content_blocks = container.select(CONTENT_SELECTOR) if container is not None else []
    if len(content_blocks) <= PAIR_BLOCK_INDEX:
        raise MissingContentBlockError(PAIR_BLOCK_INDEX, len(content_blocks))

    pairs = extract_pairs(content_blocks[PAIR_BLOCK_INDEX].get_text())
    lengths = extract_lengths(table)

    logger.debug(f"Extracted {len(pairs)} pairs and {len(lengths)} length counts")
    return FrequencyTables(pairs=pairs, lengths=lengths)


def extract_pairs(text: str) -> PairMap:
    """
    Read ``XY-n`` tokens out of a paragraph's text.

    A pair that appears twice keeps the count of its last occurrence.
    """
    pairs: Dict[Tuple[str, str], int] = {}
    for match in TWO_LETTER_PATTERN.finditer(text):
        prefix, count = match.groups()
        try:
            value = int(count)
        except ValueError:
            raise PairCountParseError(match.group(0))
        key = (prefix[0], prefix[1])
        if key in pairs:
            logger.warning(f"Pair {prefix!r} listed more than once; keeping last count")
        pairs[key] = value
    return pairs


def extract_lengths(table: Tag) -> LengthMap:
    """
    Read the letter-by-length grid of the results table.

    The first row holds the word lengths, each later row a starting letter and
    its counts. The trailing column (row totals) and the ``Σ`` row (column
    totals) are left out.
    """
    rows = table.select(ROW_SELECTOR)
    if not rows:
        raise MalformedTableError("results table has no rows")

    _, word_lengths = _read_row(rows[0], 0)

    lengths: Dict[Tuple[str, int], int] = {}
    for row_number, row in enumerate(rows[1:], start=1):
        letter, counts = _read_row(row, row_number)
        if letter is None:
            raise MalformedTableError(f"row {row_number} has no letter label")
        if letter == SUM_GLYPH:
            continue

        if len(counts) != len(word_lengths):
            raise MalformedTableError(
                f"row {row_number} ({letter!r}) has {len(counts)} counts "
                f"for {len(word_lengths)} word lengths"
            )

        for word_length, count in zip(word_lengths, counts):
            lengths[(letter, word_length)] = count

    return lengths


def _read_row(row: Tag, row_number: int) -> Tuple[Optional[str], List[int]]:
    cells = row.select(CELL_SELECTOR)
    if not cells:
        raise MalformedTableError(f"row {row_number} has no cells")

    label = cells[0].get_text().strip()
    letter = label[0] if label else None

    if letter == SUM_GLYPH and row_number > 0:
        return letter, []

    values = [
        _read_cell(cell.get_text(), row_number, column)
        for column, cell in enumerate(cells[1:], start=1)
    ]
    if not values:
        raise MalformedTableError(f"row {row_number} has no total column")

    # drop the row total
    return letter, values[:-1]


def _read_cell(text: str, row_number: int, column: int) -> int:
    value = text.strip()
    if value in (SUM_GLYPH, EMPTY_GLYPH):
        return 0
    if not value.isdigit() or not value.isascii():
        raise CellParseError(value, row_number, column)
    return int(value)
