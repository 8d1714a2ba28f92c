"""
Listing page composition.

Picks the listing record the route asks for, runs the resolver, dispatches
the decision to a view and adds the bits the page chrome needs around the
main view (action bar, favorite button, author name, inquiry modal).
``ListingPageController`` adds the cross-render state: latest-request-wins
navigation and sequenced favorites updates.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from listingview.config import find_listing_type
from listingview.dispatch import View, dispatch
from listingview.favorites import FavoritesUpdate, favorite_ids, resolve_favorite_toggle
from listingview.gateways.base import FavoritesGateway, ListingSource
from listingview.resolver import Ready, resolve_listing_page
from listingview.schemas import (
    FetchOutcome,
    Listing,
    ListingState,
    ListingTypeConfig,
    ListingVariant,
    RouteParams,
    User,
)
from listingview.sequencing import FavoritesSequencer, LatestRequestGate
from listingview.snapshots import create_slug, ensure_listing, ensure_own_listing, user_display_name

logger = logging.getLogger("listingview.page")

LISTING_PAGE_PARAM_TYPE_DRAFT = "draft"
LISTING_PAGE_PARAM_TYPE_EDIT = "edit"
SIGNUP_PAGE = "SignupPage"


@dataclass(frozen=True)
class ListingPageRequest:
    route: RouteParams
    fetch: FetchOutcome
    current_user: Optional[User] = None
    search: str = ""
    show_own_listings_only: bool = False
    inquiry_modal_open_for_listing_id: Optional[str] = None


@dataclass(frozen=True)
class ActionBar:
    is_own_listing: bool
    listing_state: Optional[ListingState]
    # edit link target, owners only
    edit_params: Optional[dict[str, str]] = None

    @property
    def is_closed(self) -> bool:
        return self.listing_state is ListingState.CLOSED

    @property
    def is_pending_approval(self) -> bool:
        return self.listing_state is ListingState.PENDING_APPROVAL

    @property
    def is_draft(self) -> bool:
        return self.listing_state is ListingState.DRAFT


@dataclass(frozen=True)
class ListingPage:
    view: View
    params: RouteParams
    action_bar: Optional[ActionBar] = None
    show_listing_image: bool = True
    author_display_name: str = ""
    show_favorite_button: bool = False
    inquiry_modal_open: bool = False


def select_listing(
    source: ListingSource, route: RouteParams, *, show_own_listings_only: bool = False
) -> Listing:
    """Restricted variants read the viewer's own listings; the public page reads the shared cache."""
    if route.is_restricted_variant or show_own_listings_only:
        return ensure_own_listing(source.get_own_listing(route.id))
    return ensure_listing(source.get_listing(route.id))


def _edit_params(route: RouteParams, slug: str) -> dict[str, str]:
    is_draft = route.variant is ListingVariant.DRAFT
    return {
        "id": route.id,
        "slug": slug,
        "type": LISTING_PAGE_PARAM_TYPE_DRAFT if is_draft else LISTING_PAGE_PARAM_TYPE_EDIT,
        "tab": "photos" if is_draft else "details",
    }


def _action_bar(ready: Ready, params: RouteParams) -> Optional[ActionBar]:
    state = ready.listing.attributes.state
    if ready.is_own_listing:
        return ActionBar(is_own_listing=True, listing_state=state, edit_params=_edit_params(params, params.slug or ""))
    if state is ListingState.CLOSED:
        return ActionBar(is_own_listing=False, listing_state=state)
    return None


def render_listing_page(
    request: ListingPageRequest,
    source: ListingSource,
    listing_types: Iterable[ListingTypeConfig] = (),
    *,
    favorites: Optional[list[str]] = None,
) -> ListingPage:
    """
    Resolve and dispatch one render cycle.

    ``favorites`` overrides the favorites on the user snapshot, e.g. with the
    optimistic set while updates are still in flight.
    """
    route = request.route
    listing = select_listing(source, route, show_own_listings_only=request.show_own_listings_only)
    params = route if route.slug else route.model_copy(update={"slug": create_slug(listing.attributes.title)})

    decision = resolve_listing_page(
        route=params,
        fetch=request.fetch,
        listing=listing,
        current_user=request.current_user,
        search=request.search,
    )
    if not isinstance(decision, Ready):
        return ListingPage(view=dispatch(decision), params=params)

    member_of = favorites if favorites is not None else favorite_ids(request.current_user)
    view = dispatch(decision, is_favorite=bool(listing.id) and listing.id in member_of)

    listing_type = find_listing_type(list(listing_types), listing.attributes.public_data.listing_type)
    return ListingPage(
        view=view,
        params=params,
        action_bar=_action_bar(decision, params),
        show_listing_image=listing_type.require_listing_image if listing_type else True,
        author_display_name=user_display_name(listing.author),
        show_favorite_button=not decision.is_own_listing,
        inquiry_modal_open=request.inquiry_modal_open_for_listing_id == route.id,
    )


# ------------------------------------------------------------
# Controller
# ------------------------------------------------------------
@dataclass(frozen=True)
class SignupRedirect:
    # where to come back to after signing up
    from_path: str
    name: str = SIGNUP_PAGE


@dataclass(frozen=True)
class FavoriteToggle:
    update: Optional[FavoritesUpdate] = None
    favorites: list[str] = field(default_factory=list)
    task: Optional[asyncio.Task] = None
    signup: Optional[SignupRedirect] = None


def _route_key(route: RouteParams) -> tuple:
    # slug is cosmetic; id and variant identify the page
    return (route.id, route.variant)


class ListingPageController:
    def __init__(
        self,
        source: ListingSource,
        gateway: FavoritesGateway,
        listing_types: Iterable[ListingTypeConfig] = (),
    ) -> None:
        self.source = source
        self.listing_types = list(listing_types)
        self.gate: LatestRequestGate[ListingPage] = LatestRequestGate()
        self.favorites = FavoritesSequencer(gateway)

    def navigate(self, route: RouteParams) -> int:
        return self.gate.begin(_route_key(route))

    def render(self, token: int, request: ListingPageRequest) -> Optional[ListingPage]:
        """Render for a navigation token; stale tokens yield ``None``."""
        if not self.gate.is_current(token, _route_key(request.route)):
            logger.debug(f"skipping render for stale navigation {token} (route {request.route.id})")
            return None
        user = request.current_user
        favorites = None
        if user is not None and user.id:
            self.favorites.seed(user.id, favorite_ids(user))
            favorites = self.favorites.local_favorites(user.id)
        page = render_listing_page(request, self.source, self.listing_types, favorites=favorites)
        return self.gate.commit(token, page)

    def toggle_favorite(
        self, current_user: Optional[User], listing_id: str, *, return_to: str = ""
    ) -> FavoriteToggle:
        """
        Flip the favorite state of ``listing_id`` for ``current_user``.

        Must run inside the event loop: the update is sent in the background
        and the returned ``favorites`` already reflect it.
        """
        if current_user is None:
            return FavoriteToggle(signup=SignupRedirect(from_path=return_to))

        if current_user.id:
            self.favorites.seed(current_user.id, favorite_ids(current_user))
        local = self.favorites.local_favorites(current_user.id) if current_user.id else []
        update = resolve_favorite_toggle(current_user, listing_id, listing_id in local)
        if update is None:
            return FavoriteToggle(favorites=local)

        task = self.favorites.schedule(update)
        return FavoriteToggle(
            update=update,
            favorites=self.favorites.local_favorites(update.user_id),
            task=task,
        )
