"""
Access & variant resolution for the listing page.

``resolve_listing_page`` turns route parameters, the data layer's fetch
outcome and the listing/user snapshots into a single ``Decision``. Rules are
evaluated top to bottom and the first match wins:

1. pending-approval route for a listing that is no longer pending -> Redirect
2. draft / pending-approval route answered with 403             -> Redirect
3. 404                                                          -> NotFound
4. any other fetch error                                        -> PageError
5. listing not loaded yet                                       -> Loading
6. publicData missing listingType / process alias / unit type   -> PageError(invalidListing)
7. otherwise                                                    -> Ready

Redirects always target the public variant of the same listing and keep the
query string. The function is pure and never raises.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Literal, Optional, Union

from listingview.errors import ErrorKind, classify_fetch_status
from listingview.schemas import (
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Listing,
    ListingState,
    ListingVariant,
    RouteParams,
    User,
)
from listingview.transactions import (
    ProcessType,
    classify_process,
    process_name_from_alias,
    requires_payout_details,
    resolve_latest_process_name,
)

logger = logging.getLogger("listingview.resolver")

LISTING_PAGE = "ListingPage"


@dataclass(frozen=True)
class Redirect:
    params: RouteParams
    search: str = ""
    name: str = LISTING_PAGE
    kind: Literal["redirect"] = "redirect"


@dataclass(frozen=True)
class NotFound:
    kind: Literal["notFound"] = "notFound"


@dataclass(frozen=True)
class PageError:
    error: ErrorKind
    status: Optional[int] = None
    kind: Literal["error"] = "error"

    @property
    def invalid_listing(self) -> bool:
        return self.error is ErrorKind.INVALID_LISTING


@dataclass(frozen=True)
class Loading:
    kind: Literal["loading"] = "loading"


@dataclass(frozen=True)
class Ready:
    listing: Listing
    process_type: ProcessType
    process_name: str
    is_own_listing: bool
    payout_details_warning: bool
    kind: Literal["ready"] = "ready"


Decision = Union[Redirect, NotFound, PageError, Loading, Ready]


def is_own_listing(listing: Listing, current_user: Optional[User]) -> bool:
    if current_user is None or listing.author is None:
        return False
    return bool(current_user.id) and current_user.id == listing.author.id


def _is_approved(listing: Listing) -> bool:
    return bool(listing.id) and listing.attributes.state is not ListingState.PENDING_APPROVAL


def resolve_listing_page(
    *,
    route: RouteParams,
    fetch: FetchOutcome,
    listing: Listing,
    current_user: Optional[User] = None,
    search: str = "",
) -> Decision:
    variant = route.variant
    failure = fetch if isinstance(fetch, FetchFailure) else None
    error_kind = classify_fetch_status(failure.status) if failure else None

    if variant is ListingVariant.PENDING_APPROVAL and _is_approved(listing):
        logger.debug(f"listing {route.id} approved since; redirecting to public page")
        return Redirect(params=route.public(), search=search)

    if variant is not None and error_kind is ErrorKind.FORBIDDEN:
        logger.debug(f"listing {route.id} {variant.value} variant forbidden; redirecting to public page")
        return Redirect(params=route.public(), search=search)

    if error_kind is ErrorKind.NOT_FOUND:
        return NotFound()

    if failure is not None:
        logger.info(f"listing {route.id} fetch failed with status {failure.status}")
        return PageError(error=ErrorKind.GENERIC_FETCH_ERROR, status=failure.status)

    if not listing.id:
        if isinstance(fetch, FetchSuccess) and not fetch.listing_present:
            return NotFound()
        return Loading()

    public_data = listing.attributes.public_data
    if not listing.is_valid_for_display:
        logger.warning(
            f"listing {listing.id} has incomplete publicData "
            f"(listingType={public_data.listing_type!r}, "
            f"transactionProcessAlias={public_data.transaction_process_alias!r}, "
            f"unitType={public_data.unit_type!r})"
        )
        return PageError(error=ErrorKind.INVALID_LISTING)

    alias = public_data.transaction_process_alias
    process_type = classify_process(alias)
    own = is_own_listing(listing, current_user)
    payout_ready = bool(current_user and current_user.attributes.stripe_connected)
    warning = own and requires_payout_details(process_type, public_data.unit_type) and not payout_ready

    return Ready(
        listing=listing,
        process_type=process_type,
        process_name=resolve_latest_process_name(process_name_from_alias(alias)),
        is_own_listing=own,
        payout_details_warning=warning,
    )
