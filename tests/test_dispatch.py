import pytest

from listingview.dispatch import (
    ErrorView,
    ListingDisplayView,
    LoadingView,
    NotFoundView,
    RedirectView,
    dispatch,
)
from listingview.errors import ErrorKind, UnknownDecisionError
from listingview.resolver import Loading, NotFound, PageError, Ready, Redirect
from listingview.schemas import RouteParams
from listingview.snapshots import ensure_listing
from listingview.transactions import ProcessType

from conftest import LISTING_ID, listing_record


def test_redirect_view_keeps_target_and_query():
    params = RouteParams(id=LISTING_ID, slug="cabin")
    view = dispatch(Redirect(params=params, search="?q=1"))
    assert view == RedirectView(name="ListingPage", params=params, search="?q=1")


def test_simple_views():
    assert dispatch(NotFound()) == NotFoundView()
    assert dispatch(Loading()) == LoadingView()


def test_error_view_flags_invalid_listing():
    assert dispatch(PageError(error=ErrorKind.INVALID_LISTING)) == ErrorView(invalid_listing=True)
    assert dispatch(PageError(error=ErrorKind.GENERIC_FETCH_ERROR, status=500)) == ErrorView(
        invalid_listing=False, status=500
    )


def test_ready_becomes_listing_display():
    listing = ensure_listing(listing_record())
    ready = Ready(
        listing=listing,
        process_type=ProcessType.PURCHASE,
        process_name="default-purchase",
        is_own_listing=True,
        payout_details_warning=True,
    )
    view = dispatch(ready, is_favorite=True)
    assert view == ListingDisplayView(
        listing=listing,
        is_own_listing=True,
        process_type=ProcessType.PURCHASE,
        payout_details_warning=True,
        is_favorite=True,
    )
    assert view.view == "listing"


def test_unknown_decision_is_rejected():
    with pytest.raises(UnknownDecisionError):
        dispatch("ready")
