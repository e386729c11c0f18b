"""
Creation of a dated sheet from the spreadsheet's template sheet.

The workflow runs three remote steps in order and stops at the first failure:

    START -> TEMPLATE_LOCATED -> SHEET_DUPLICATED -> POPULATED

Nothing is rolled back. If population fails, the duplicated sheet stays in the
spreadsheet and has to be removed by hand.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from gridder.google_sheets.client import SpreadsheetHandle
from gridder.models import FrequencyTables, SheetIdentity, SheetProperties
from gridder.utils.errors import (
    GridderException,
    MissingDuplicateResponseError,
    NoSheetsError,
    ProvisioningError,
    TemplateNotFoundError,
)
from gridder.utils.logging import LogContext, get_logger, log_performance

logger = get_logger(__name__)

DEFAULT_TEMPLATE_TITLE = "TEMPLATE"

# New sheets go right after the first sheet
INSERT_SHEET_INDEX = 1

SHEET_TITLE_FORMAT = "%Y-%m-%d"

PAIRS_RANGE = "F3:G"
LENGTHS_RANGE = "B3:D"


class ProvisioningState(str, Enum):
    """Progress of one provisioning run."""

    START = "start"
    TEMPLATE_LOCATED = "template_located"
    SHEET_DUPLICATED = "sheet_duplicated"
    POPULATED = "populated"
    FAILED = "failed"


def sheet_title_for(day: date) -> str:
    return day.strftime(SHEET_TITLE_FORMAT)


def sheet_range(title: str, cells: str) -> str:
    """A1 range on the sheet called ``title``."""
    escaped = title.replace("'", "''")
    return f"'{escaped}'!{cells}"


@log_performance
async def locate_template(
    handle: SpreadsheetHandle, template_title: str = DEFAULT_TEMPLATE_TITLE
) -> SheetProperties:
    """
    Find the template sheet in the spreadsheet metadata.

    Raises:
        SheetsAPIError: If the metadata request fails
        NoSheetsError: If the spreadsheet lists no sheets
        TemplateNotFoundError: If no sheet is titled ``template_title``
    """
    request = handle.service.spreadsheets().get(
        spreadsheetId=handle.spreadsheet_id,
        fields="sheets.properties(sheetId,title,index)",
    )
    metadata = await handle.execute(request, "spreadsheets.get")

    sheets = metadata.get("sheets") or []
    if not sheets:
        raise NoSheetsError(handle.spreadsheet_id)

    titles = []
    for sheet in sheets:
        properties = SheetProperties.model_validate(sheet.get("properties") or {})
        if properties.title == template_title and properties.sheet_id is not None:
            logger.debug(f"Template sheet {template_title!r} has id {properties.sheet_id}")
            return properties
        if properties.title is not None:
            titles.append(properties.title)

    raise TemplateNotFoundError(template_title, titles)


@log_performance
async def duplicate_template(
    handle: SpreadsheetHandle, template_id: int, day: date
) -> SheetIdentity:
    """
    Copy the template sheet to a new sheet titled after ``day``.

    Raises:
        SheetsAPIError: If the batch update fails
        MissingDuplicateResponseError: If the reply lacks the new sheet's
            id or title
    """
    body = {
        "requests": [
            {
                "duplicateSheet": {
                    "sourceSheetId": template_id,
                    "insertSheetIndex": INSERT_SHEET_INDEX,
                    "newSheetName": sheet_title_for(day),
                }
            }
        ]
    }
    request = handle.service.spreadsheets().batchUpdate(
        spreadsheetId=handle.spreadsheet_id, body=body
    )
    response = await handle.execute(request, "spreadsheets.batchUpdate")

    replies = response.get("replies") or []
    properties: Optional[Dict[str, Any]] = None
    if replies:
        properties = (replies[0].get("duplicateSheet") or {}).get("properties")
    if not properties:
        raise MissingDuplicateResponseError()

    try:
        return SheetIdentity.model_validate(properties)
    except ValidationError as e:
        raise MissingDuplicateResponseError() from e


def build_value_ranges(title: str, tables: FrequencyTables) -> List[Dict[str, Any]]:
    """Pair and length ranges for one batch values update."""
    return [
        {
            "range": sheet_range(title, PAIRS_RANGE),
            "majorDimension": "ROWS",
            "values": tables.pair_rows(),
        },
        {
            "range": sheet_range(title, LENGTHS_RANGE),
            "majorDimension": "ROWS",
            "values": tables.length_rows(),
        },
    ]


@log_performance
async def populate_sheet(
    handle: SpreadsheetHandle, sheet: SheetIdentity, tables: FrequencyTables
) -> Dict[str, Any]:
    """
    Write both tables into ``sheet`` with one batch values update.

    Raises:
        SheetsAPIError: If the update fails
    """
    body = {
        "valueInputOption": "RAW",
        "data": build_value_ranges(sheet.title, tables),
    }
    request = handle.service.spreadsheets().values().batchUpdate(
        spreadsheetId=handle.spreadsheet_id, body=body
    )
    return await handle.execute(request, "spreadsheets.values.batchUpdate")


class SheetProvisioner:
    """
    Runs the locate, duplicate and populate steps for one date.

    ``state`` records how far the last run got, so a caller can tell whether
    a failed run left a new sheet behind.
    """

    def __init__(
        self, handle: SpreadsheetHandle, template_title: str = DEFAULT_TEMPLATE_TITLE
    ) -> None:
        self.handle = handle
        self.template_title = template_title
        self.state = ProvisioningState.START
        self.sheet: Optional[SheetIdentity] = None

    async def create_for_date(self, day: date, tables: FrequencyTables) -> SheetIdentity:
        """
        Create and fill the sheet for ``day``.

        Raises:
            ProvisioningError: Chained to the cause of the failed step
        """
        self.state = ProvisioningState.START
        self.sheet = None

        with LogContext(spreadsheet_id=self.handle.spreadsheet_id, date=str(day)):
            template = await self._step(
                "locate_template",
                "could not identify template sheet",
                locate_template(self.handle, self.template_title),
            )
            self.state = ProvisioningState.TEMPLATE_LOCATED

            self.sheet = await self._step(
                "duplicate_template",
                "could not duplicate template sheet",
                duplicate_template(self.handle, template.sheet_id, day),
            )
            self.state = ProvisioningState.SHEET_DUPLICATED
            logger.info(f"Created sheet {self.sheet.title!r} (id {self.sheet.sheet_id})")

            await self._step(
                "populate",
                "could not populate data in new sheet",
                populate_sheet(self.handle, self.sheet, tables),
            )
            self.state = ProvisioningState.POPULATED

        return self.sheet

    async def _step(self, step: str, message: str, operation):
        try:
            return await operation
        except GridderException as e:
            failed_from = self.state
            self.state = ProvisioningState.FAILED
            if failed_from is ProvisioningState.SHEET_DUPLICATED and self.sheet is not None:
                logger.warning(
                    f"Sheet {self.sheet.title!r} was created but not populated; "
                    "remove it by hand before retrying"
                )
            raise ProvisioningError(step, message) from e
