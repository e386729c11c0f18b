"""
Core data models for Gridder.

The two frequency maps produced by extraction, the bundle every sink
consumes, and the pydantic models that validate Google Sheets API responses.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# (first letter, second letter) -> number of answers starting with that pair
PairMap = Mapping[Tuple[str, str], int]

# (starting letter, word length) -> number of answers
LengthMap = Mapping[Tuple[str, int], int]


def _frozen(mapping: Mapping) -> Mapping:
    """Copy ``mapping`` in key order behind a read-only view."""
    return MappingProxyType(dict(sorted(mapping.items())))


@dataclass(frozen=True)
class FrequencyTables:
    """Both aggregates extracted from one source page."""

    pairs: PairMap = field(default_factory=dict)
    lengths: LengthMap = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pairs", _frozen(self.pairs))
        object.__setattr__(self, "lengths", _frozen(self.lengths))

    def pair_rows(self) -> List[List[Any]]:
        """Rows of ``[pair, count]`` sorted by pair."""
        return [[f"{a}{b}", count] for (a, b), count in sorted(self.pairs.items())]

    def length_rows(self) -> List[List[Any]]:
        """Rows of ``[letter, length, count]`` sorted by letter then length."""
        return [
            [letter, length, count]
            for (letter, length), count in sorted(self.lengths.items())
        ]

    @property
    def letters(self) -> List[str]:
        """Starting letters present in the length table."""
        return sorted({letter for letter, _ in self.lengths})


# =============================================================================
# Google Sheets Models
# =============================================================================


class SheetProperties(BaseModel):
    """Subset of a sheet's ``properties`` returned by the Sheets API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sheet_id: Optional[int] = Field(None, alias="sheetId")
    title: Optional[str] = None
    index: Optional[int] = None


class SheetIdentity(BaseModel):
    """Numeric id and title of a sheet created during this run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sheet_id: int = Field(..., alias="sheetId", description="Numeric sheet ID")
    title: str = Field(..., min_length=1, description="Sheet display title")
