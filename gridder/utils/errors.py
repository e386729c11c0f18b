"""
Custom exceptions for Gridder.

This module defines all custom exceptions used throughout the application.
Every failure is terminal for a run; the CLI renders the ``__cause__`` chain
of the exception it catches.
"""

from typing import Any, Optional


class GridderException(Exception):
    """Base exception for all Gridder-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


def format_cause_chain(exc: BaseException) -> str:
    """
    Render an exception and its explicit causes as ``outer: inner: ...``.

    Args:
        exc: Outermost exception

    Returns:
        Single-line description of the whole chain
    """
    parts = []
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        parts.append(text)
        current = current.__cause__
    return ": ".join(parts)


# =============================================================================
# Structural Exceptions
# =============================================================================


class StructuralError(GridderException):
    """A document does not have the shape the tool depends on."""

    pass


class MissingTableError(StructuralError):
    """The results table is absent from the source page."""

    def __init__(self, selector: str) -> None:
        """Initialize with the selector that matched nothing."""
        message = f"missing results table on page (selector {selector!r})"
        super().__init__(message, {"selector": selector})


class MissingContentBlockError(StructuralError):
    """Too few content paragraphs beside the results table."""

    def __init__(self, index: int, found: int) -> None:
        """Initialize with the wanted index and the number of blocks found."""
        message = f"content block #{index} not found ({found} content blocks on page)"
        super().__init__(message, {"index": index, "found": found})


class MalformedTableError(StructuralError):
    """The results table rows do not line up."""

    pass


class NoSheetsError(StructuralError):
    """Spreadsheet metadata lists no sheets at all."""

    def __init__(self, spreadsheet_id: str) -> None:
        """Initialize with spreadsheet ID."""
        message = "no sheets in spreadsheet metadata"
        super().__init__(message, {"spreadsheet_id": spreadsheet_id})


class TemplateNotFoundError(StructuralError):
    """No sheet carries the template title."""

    def __init__(self, title: str, available: list[str]) -> None:
        """Initialize with the wanted title and the titles that exist."""
        message = f"did not find template sheet {title!r}"
        super().__init__(message, {"title": title, "available": available})


# =============================================================================
# Parse Exceptions
# =============================================================================


class ParseError(GridderException):
    """A token or cell could not be read as the expected number."""

    pass


class CellParseError(ParseError):
    """A table cell is neither a count nor a known placeholder."""

    def __init__(self, text: str, row: int, column: int) -> None:
        """Initialize with cell text and its position."""
        message = f"cannot read table cell {text!r} at row {row}, column {column} as a count"
        super().__init__(message, {"text": text, "row": row, "column": column})


class PairCountParseError(ParseError):
    """A two-letter token carries an unreadable count."""

    def __init__(self, token: str) -> None:
        """Initialize with the offending token."""
        message = f"cannot read count of two-letter token {token!r}"
        super().__init__(message, {"token": token})


# =============================================================================
# Transport Exceptions
# =============================================================================


class TransportError(GridderException):
    """A network or API call failed."""

    pass


class FetchError(TransportError):
    """Retrieving the source page failed."""

    def __init__(self, stage: str, url: str) -> None:
        """Initialize with the failed stage and the requested URL."""
        messages = {
            "request": "failed to get info page",
            "status": "got bad http status from server",
            "body": "failed to read response body",
        }
        message = messages.get(stage, f"failed to fetch page ({stage})")
        super().__init__(message, {"stage": stage, "url": url})
        self.stage = stage


class SheetsAPIError(TransportError):
    """A Google Sheets API call failed."""

    def __init__(self, operation: str, status: Optional[int] = None) -> None:
        """Initialize with the API operation and HTTP status if known."""
        message = f"error reaching Sheets API during {operation}"
        if status is not None:
            message += f" (HTTP {status})"
        super().__init__(message, {"operation": operation, "status": status})


# =============================================================================
# Response Shape Exceptions
# =============================================================================


class ResponseShapeError(GridderException):
    """A remote call succeeded but its response lacks required fields."""

    pass


class MissingDuplicateResponseError(ResponseShapeError):
    """Duplicate-sheet reply does not echo the new sheet's id and title."""

    def __init__(self) -> None:
        """Initialize the error."""
        super().__init__("duplicate-sheet response missing key fields")


# =============================================================================
# Provisioning Exceptions
# =============================================================================


class ProvisioningError(GridderException):
    """A step of the spreadsheet provisioning workflow failed."""

    def __init__(self, step: str, message: str) -> None:
        """Initialize with the failed step."""
        super().__init__(message, {"step": step})
        self.step = step


# =============================================================================
# Output Exceptions
# =============================================================================


class OutputPathError(GridderException):
    """A CSV output path could not be prepared."""

    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(GridderException):
    """Configuration error."""

    pass


class MissingConfigurationError(ConfigurationError):
    """Required configuration missing."""

    def __init__(self, config_name: str, env_var: Optional[str] = None) -> None:
        """Initialize with config name."""
        message = f"Required configuration '{config_name}' is missing"
        if env_var:
            message += f" (set {env_var})"
        super().__init__(message, {"config_name": config_name, "env_var": env_var})


class CredentialsError(ConfigurationError):
    """Service account credentials could not be loaded."""

    pass
