"""Type definitions for the Fivetran automation toolkit."""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError

from .errors import ResponseDecodeError

# A remote resource record (group, user, team, connector). No schema is enforced.
Item = Dict[str, Any]

# One conjunctive filter clause; the empty mapping means "no filtering".
FilterSpec = Dict[str, Any]


class RequestParams(BaseModel):
    """Method, headers and serialized body of one API request."""
    method: str
    headers: Dict[str, str]
    content: Optional[str] = None  # JSON text, only for PATCH/POST


class ListingData(BaseModel):
    """The ``data`` member of a listing response."""
    model_config = {"extra": "allow"}

    # Fivetran returns an array, but some endpoints key items by id
    items: Union[List[Any], Dict[str, Any]]
    next_cursor: Optional[str] = None


class ListingEnvelope(BaseModel):
    """Top-level body of a listing response."""
    model_config = {"extra": "allow"}

    data: ListingData


class Page(BaseModel):
    """One fetched page: items in response order plus the continuation cursor."""
    items: List[Any]
    next_cursor: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Page":
        """Decode a listing response body into a ``Page``.

        Raises ``ResponseDecodeError`` when *payload* does not have the
        ``{data: {items, next_cursor}}`` shape.
        """
        try:
            envelope = ListingEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise ResponseDecodeError(f"Unexpected listing response: {exc}") from exc

        items = envelope.data.items
        if isinstance(items, dict):
            items = list(items.values())
        return cls(items=items, next_cursor=envelope.data.next_cursor)

    @property
    def has_next(self) -> bool:
        return bool(self.next_cursor)


class DoneReason(str, Enum):
    """Why a paginated query stopped."""
    EXHAUSTED = "exhausted"
    MATCH_FOUND = "match_found"
    FETCH_FAILED = "fetch_failed"
    CURSOR_REPEATED = "cursor_repeated"


class QueryResult(BaseModel):
    """Items accumulated by one paginated query and how it ended."""
    items: List[Any] = []
    reason: DoneReason
    pages: int = 0
    error: Optional[str] = None  # set when reason is FETCH_FAILED

    @property
    def complete(self) -> bool:
        """True unless pagination was cut short before the listing was exhausted."""
        return self.reason in (DoneReason.EXHAUSTED, DoneReason.MATCH_FOUND)


class ExportBlob(BaseModel):
    """Formatted sheet contents ready to be written to a file store."""
    content: str
    content_type: str
    filename: str
