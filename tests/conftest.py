"""
Shared fixtures for Gridder tests.
"""

from typing import List, Optional, Sequence

import pytest

from gridder.models import FrequencyTables

HEADER = ["", "4", "5", "6", "7", "8", "Σ"]

ROWS = [
    ["A", "2", "1", "-", "-", "1", "4"],
    ["C", "1", "2", "0", "-", "3", "6"],
    ["Σ", "3", "3", "0", "-", "4", "10"],
]

PAIR_TEXT = "AC-2 AT-2 CA-1 CO-5"


def build_page(
    header: Sequence[str] = HEADER,
    rows: Sequence[Sequence[str]] = ROWS,
    pair_text: str = PAIR_TEXT,
    content_blocks: int = 6,
    include_table: bool = True,
) -> str:
    """Render a statistics page shaped like the published one."""

    def render_row(cells: Sequence[str]) -> str:
        tds = "".join(f'<td class="cell">{cell}</td>' for cell in cells)
        return f'<tr class="row">{tds}</tr>'

    paragraphs: List[str] = []
    for index in range(content_blocks):
        text = pair_text if index == 4 else f"Paragraph {index}: WORDS: 14, POINTS: 70"
        paragraphs.append(f'<p class="content">{text}</p>')

    table = ""
    if include_table:
        body = "".join(render_row(row) for row in [header, *rows])
        table = f'<table class="table">{body}</table>'

    return (
        "<html><head><title>Forum</title></head><body>"
        '<section class="story">'
        + "".join(paragraphs[:3])
        + table
        + "".join(paragraphs[3:])
        + "</section></body></html>"
    )


@pytest.fixture
def page_html() -> str:
    return build_page()


@pytest.fixture
def tables() -> FrequencyTables:
    return FrequencyTables(
        pairs={("A", "C"): 2, ("A", "T"): 2, ("C", "A"): 1, ("C", "O"): 5},
        lengths={
            ("A", 4): 2,
            ("A", 5): 1,
            ("C", 4): 1,
            ("C", 5): 2,
        },
    )
