"""Exception types raised by the Fivetran client and the sheet exporter.

Every failure the package raises on purpose derives from
``FivetranAutomationError`` so callers (the CLI in particular) can catch the
whole family in one place.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ErrorData(BaseModel):
    """Status code and raw body of a failed API call."""
    status_code: int
    body: str = ""


class FivetranAutomationError(Exception):
    """Base class for all errors raised by this package."""


class ApiError(FivetranAutomationError):
    """Raised when the API answers with a status code outside 200-299."""

    def __init__(self, error: ErrorData):
        self.error = error
        super().__init__(f"ResponseError: Response Code={error.status_code}, {error.body}")

    @property
    def status_code(self) -> int:
        return self.error.status_code


class ResponseDecodeError(FivetranAutomationError):
    """Raised when a listing response is not a ``{data: {items, next_cursor}}`` envelope."""


class PaginationFault(FivetranAutomationError):
    """Failure while fetching a continuation page.

    Never escapes ``CursorPager.run``; it is logged and recorded on the
    returned ``QueryResult`` instead.
    """

    def __init__(self, cursor: str, cause: Exception):
        self.cursor = cursor
        self.cause = cause
        super().__init__(f"Fetching page at cursor {cursor!r} failed: {cause}")


class ConnectorPauseError(FivetranAutomationError):
    """Raised when a connector could not be paused."""

    def __init__(self, connector_id: str, error: Optional[ErrorData] = None):
        self.connector_id = connector_id
        self.error = error
        super().__init__(f"pauseConnector: Pause Failed, connector_id='{connector_id}'")


class ExportError(FivetranAutomationError):
    """Raised for invalid export arguments or an unreadable source sheet."""
