import itertools

import pytest

from listingview.errors import ErrorKind
from listingview.resolver import Loading, NotFound, PageError, Ready, Redirect, resolve_listing_page
from listingview.schemas import (
    FetchFailure,
    FetchPending,
    FetchSuccess,
    Listing,
    ListingVariant,
    RouteParams,
)
from listingview.snapshots import ensure_listing, ensure_own_listing
from listingview.transactions import ProcessType

from conftest import LISTING_ID, OWNER_ID, VIEWER_ID, listing_record, user

PUBLIC = RouteParams(id=LISTING_ID, slug="cozy-cabin")
DRAFT = RouteParams(id=LISTING_ID, slug="cozy-cabin", variant=ListingVariant.DRAFT)
PENDING = RouteParams(id=LISTING_ID, slug="cozy-cabin", variant=ListingVariant.PENDING_APPROVAL)
EMPTY = Listing()


def resolve(route, fetch, listing, current_user=None, search=""):
    return resolve_listing_page(route=route, fetch=fetch, listing=listing, current_user=current_user, search=search)


# ------------------------------------------------------------
# Redirects
# ------------------------------------------------------------
@pytest.mark.parametrize("state", ["published", "closed", "draft"])
def test_pending_route_redirects_once_listing_left_pending(state):
    listing = ensure_own_listing(listing_record(state=state))
    decision = resolve(PENDING, FetchSuccess(), listing, search="?tab=reviews")
    assert decision == Redirect(params=PENDING.public(), search="?tab=reviews")
    assert decision.params.variant is None
    assert decision.params.slug == "cozy-cabin"
    assert decision.name == "ListingPage"


@pytest.mark.parametrize("state", ["archivedSomething", None])
def test_pending_route_redirects_unknown_or_missing_state(state):
    listing = ensure_own_listing(listing_record(state=state))
    assert listing.attributes.state is None
    decision = resolve(PENDING, FetchSuccess(), listing)
    assert decision == Redirect(params=PENDING.public())


def test_malformed_price_does_not_hide_pending_listing_from_owner(owner):
    record = listing_record(state="pendingApproval")
    record["attributes"]["price"] = {"amount": "lots", "currency": "EUR"}
    decision = resolve(PENDING, FetchSuccess(), ensure_own_listing(record), owner)
    assert isinstance(decision, Ready)
    assert decision.is_own_listing
    assert decision.listing.attributes.price is None

    public = ensure_listing(listing_record() | {"attributes": record["attributes"] | {"state": "published"}})
    assert isinstance(resolve(PUBLIC, FetchSuccess(), public), Ready)


def test_pending_route_without_listing_does_not_redirect():
    assert resolve(PENDING, FetchPending(), EMPTY) == Loading()


@pytest.mark.parametrize("route", [DRAFT, PENDING])
def test_forbidden_restricted_variant_redirects_to_public(route):
    decision = resolve(route, FetchFailure(status=403), EMPTY, search="?a=1")
    assert isinstance(decision, Redirect)
    assert decision.params == route.public()
    assert decision.search == "?a=1"


def test_forbidden_public_variant_is_an_error():
    # redirecting the public page to itself would loop
    listing = ensure_listing(listing_record(state="pendingApproval"))
    decision = resolve(PUBLIC, FetchFailure(status=403), listing)
    assert decision == PageError(error=ErrorKind.GENERIC_FETCH_ERROR, status=403)


# ------------------------------------------------------------
# Fetch errors and loading
# ------------------------------------------------------------
@pytest.mark.parametrize("route", [PUBLIC, DRAFT, PENDING])
def test_not_found_on_any_variant(route):
    assert resolve(route, FetchFailure(status=404), EMPTY) == NotFound()


@pytest.mark.parametrize("status", [400, 401, 409, 500, 503])
def test_other_fetch_errors_are_generic(status):
    decision = resolve(PUBLIC, FetchFailure(status=status), EMPTY)
    assert isinstance(decision, PageError)
    assert decision.error is ErrorKind.GENERIC_FETCH_ERROR
    assert decision.status == status
    assert not decision.invalid_listing


def test_loading_until_listing_arrives():
    assert resolve(PUBLIC, FetchPending(), EMPTY) == Loading()


def test_success_without_listing_is_not_found():
    assert resolve(PUBLIC, FetchSuccess(listing_present=False), EMPTY) == NotFound()


def test_cached_listing_renders_while_refetching():
    listing = ensure_listing(listing_record())
    assert isinstance(resolve(PUBLIC, FetchPending(), listing), Ready)


# ------------------------------------------------------------
# Listing validity
# ------------------------------------------------------------
@pytest.mark.parametrize("missing", ["listing_type", "process_alias", "unit_type"])
@pytest.mark.parametrize("fetch", [FetchSuccess(), FetchPending()])
def test_incomplete_public_data_is_invalid_listing(missing, fetch):
    listing = ensure_listing(listing_record(**{missing: None}))
    decision = resolve(PUBLIC, fetch, listing)
    assert decision == PageError(error=ErrorKind.INVALID_LISTING)
    assert decision.invalid_listing


def test_all_public_data_missing_is_invalid_listing():
    listing = ensure_listing(listing_record(listing_type=None, process_alias=None, unit_type=None))
    assert resolve(DRAFT, FetchSuccess(), listing).invalid_listing


def test_unparseable_alias_still_renders_as_inquiry():
    listing = ensure_listing(listing_record(process_alias="???", unit_type="inquiry"))
    decision = resolve(PUBLIC, FetchSuccess(), listing)
    assert isinstance(decision, Ready)
    assert decision.process_type is ProcessType.INQUIRY


# ------------------------------------------------------------
# Ready
# ------------------------------------------------------------
def test_ready_for_anonymous_viewer():
    listing = ensure_listing(listing_record())
    decision = resolve(PUBLIC, FetchSuccess(), listing)
    assert decision == Ready(
        listing=listing,
        process_type=ProcessType.BOOKING,
        process_name="default-booking",
        is_own_listing=False,
        payout_details_warning=False,
    )


def test_ownership_requires_matching_ids(owner, viewer):
    listing = ensure_listing(listing_record())
    assert resolve(PUBLIC, FetchSuccess(), listing, owner).is_own_listing
    assert not resolve(PUBLIC, FetchSuccess(), listing, viewer).is_own_listing

    authorless = ensure_listing(listing_record(author_id=None))
    assert not resolve(PUBLIC, FetchSuccess(), authorless, owner).is_own_listing


def test_owner_without_payout_sees_warning_on_booking(owner, payout_ready_owner):
    listing = ensure_listing(listing_record())
    assert resolve(PUBLIC, FetchSuccess(), listing, owner).payout_details_warning
    assert not resolve(PUBLIC, FetchSuccess(), listing, payout_ready_owner).payout_details_warning


PROCESSES = [
    ("default-booking/release-1", ProcessType.BOOKING),
    ("default-purchase/release-1", ProcessType.PURCHASE),
    ("default-negotiation/release-1", ProcessType.NEGOTIATION),
    ("default-inquiry/release-1", ProcessType.INQUIRY),
]


@pytest.mark.parametrize(
    "process,owns,payout_done,unit_type",
    list(itertools.product(PROCESSES, [True, False], [True, False], ["offer", "request"])),
)
def test_payout_warning_matrix(process, owns, payout_done, unit_type):
    alias, process_type = process
    listing = ensure_listing(listing_record(process_alias=alias, unit_type=unit_type))
    viewer_id = OWNER_ID if owns else VIEWER_ID
    decision = resolve(PUBLIC, FetchSuccess(), listing, user(viewer_id, stripe_connected=payout_done))

    needs_payout = process_type in (ProcessType.BOOKING, ProcessType.PURCHASE) or (
        process_type is ProcessType.NEGOTIATION and unit_type == "offer"
    )
    assert decision.process_type is process_type
    assert decision.payout_details_warning is (owns and not payout_done and needs_payout)


# ------------------------------------------------------------
# Worked examples
# ------------------------------------------------------------
NEGOTIATION_LISTING = {
    "listing_type": "a",
    "process_alias": "flex-negotiation-inquiry/1",
    "unit_type": "inquiry",
}


def test_pending_negotiation_listing_viewed_by_owner(owner):
    listing = ensure_own_listing(listing_record(state="pendingApproval", **NEGOTIATION_LISTING))
    decision = resolve(PENDING, FetchSuccess(), listing, owner)
    assert isinstance(decision, Ready)
    assert decision.process_type is ProcessType.NEGOTIATION
    assert decision.is_own_listing
    assert decision.payout_details_warning is False


def test_forbidden_pending_negotiation_listing_redirects(viewer):
    decision = resolve(PENDING, FetchFailure(status=403), EMPTY, viewer, search="?ref=mail")
    assert decision == Redirect(params=PENDING.public(), search="?ref=mail")


def test_resolver_does_not_mutate_inputs(owner):
    listing = ensure_listing(listing_record())
    before = listing.model_dump()
    resolve(PUBLIC, FetchSuccess(), listing, owner)
    assert listing.model_dump() == before
