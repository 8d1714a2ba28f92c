from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional, Union

from listingview.errors import UnknownDecisionError
from listingview.resolver import Decision, Loading, NotFound, PageError, Ready, Redirect
from listingview.schemas import Listing, RouteParams
from listingview.transactions import ProcessType


@dataclass(frozen=True)
class RedirectView:
    name: str
    params: RouteParams
    search: str = ""
    view: Literal["redirect"] = "redirect"


@dataclass(frozen=True)
class NotFoundView:
    view: Literal["notFound"] = "notFound"


@dataclass(frozen=True)
class ErrorView:
    invalid_listing: bool = False
    status: Optional[int] = None
    view: Literal["error"] = "error"


@dataclass(frozen=True)
class LoadingView:
    view: Literal["loading"] = "loading"


@dataclass(frozen=True)
class ListingDisplayView:
    listing: Listing
    is_own_listing: bool
    process_type: ProcessType
    payout_details_warning: bool
    is_favorite: bool
    view: Literal["listing"] = "listing"


View = Union[RedirectView, NotFoundView, ErrorView, LoadingView, ListingDisplayView]


def dispatch(decision: Decision, *, is_favorite: bool = False) -> View:
    if isinstance(decision, Redirect):
        return RedirectView(name=decision.name, params=decision.params, search=decision.search)
    if isinstance(decision, NotFound):
        return NotFoundView()
    if isinstance(decision, PageError):
        return ErrorView(invalid_listing=decision.invalid_listing, status=decision.status)
    if isinstance(decision, Loading):
        return LoadingView()
    if isinstance(decision, Ready):
        return ListingDisplayView(
            listing=decision.listing,
            is_own_listing=decision.is_own_listing,
            process_type=decision.process_type,
            payout_details_warning=decision.payout_details_warning,
            is_favorite=is_favorite,
        )
    raise UnknownDecisionError(decision)
