# Resolve a listing page scenario from JSON and print the resulting view.
#
#   listingview-resolve scenario.json
#
# scenario.json:
#   {
#     "route": {"id": "...", "variant": "pendingApproval"},
#     "fetch": {"kind": "success"},
#     "listing": {... listing record ...},
#     "own": true,                      # store the listing as the viewer's own
#     "currentUser": {... user record ...},
#     "search": "?foo=bar"
#   }
from __future__ import annotations
import argparse
import json
import logging
import sys

from pydantic import TypeAdapter

from listingview.config import load_listing_types
from listingview.gateways.memory import InMemoryListingStore
from listingview.logging_setup import setup_logging
from listingview.page import ListingPage, ListingPageRequest, render_listing_page
from listingview.schemas import RouteParams, parse_fetch_outcome
from listingview.snapshots import ensure_current_user

_page_adapter = TypeAdapter(ListingPage)


def build_request(scenario: dict) -> tuple[ListingPageRequest, InMemoryListingStore]:
    route = RouteParams.model_validate(scenario["route"])
    store = InMemoryListingStore()
    listing = scenario.get("listing")
    if listing:
        store.add_listing({"id": route.id, **listing}, own=bool(scenario.get("own")))
    request = ListingPageRequest(
        route=route,
        fetch=parse_fetch_outcome(scenario.get("fetch") or {"kind": "pending"}),
        current_user=ensure_current_user(scenario.get("currentUser")),
        search=scenario.get("search") or "",
        show_own_listings_only=bool(scenario.get("showOwnListingsOnly")),
        inquiry_modal_open_for_listing_id=scenario.get("inquiryModalOpenForListingId"),
    )
    return request, store


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve which view a listing page renders.")
    parser.add_argument("scenario", help="path to a JSON scenario file, or - for stdin")
    parser.add_argument("--listing-types", help="listing types YAML (defaults to the packaged file)")
    args = parser.parse_args(argv)

    setup_logging()
    logger = logging.getLogger("listingview")

    if args.scenario == "-":
        scenario = json.load(sys.stdin)
    else:
        with open(args.scenario, "r", encoding="utf-8") as f:
            scenario = json.load(f)

    request, store = build_request(scenario)
    page = render_listing_page(request, store, load_listing_types(args.listing_types))
    logger.info(f"listing {request.route.id} resolved to view {page.view.view!r}")

    out = _page_adapter.dump_python(page, mode="json", by_alias=True)
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
