from __future__ import annotations
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "notFound"
    FORBIDDEN = "forbidden"
    GENERIC_FETCH_ERROR = "genericFetchError"
    INVALID_LISTING = "invalidListing"


def classify_fetch_status(status: int) -> ErrorKind:
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 403:
        return ErrorKind.FORBIDDEN
    return ErrorKind.GENERIC_FETCH_ERROR


class ListingViewError(Exception):
    """Base class for errors raised by listingview."""


class FavoritesUpdateError(ListingViewError):
    def __init__(self, message: str, *, status: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status = status
        self.detail = detail


class UnknownDecisionError(ListingViewError, TypeError):
    def __init__(self, decision: Any):
        super().__init__(f"Cannot dispatch {type(decision).__name__!r}; not a Decision")
        self.decision = decision
