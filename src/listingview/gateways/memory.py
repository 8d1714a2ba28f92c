from __future__ import annotations
import asyncio
import logging
from typing import Iterable, Optional

from listingview.favorites import FavoritesUpdate
from listingview.gateways.base import FavoritesGateway, FavoritesResult, ListingSource, RawRecord
from listingview.schemas import coerce_id

logger = logging.getLogger("listingview.gateways")


class InMemoryListingStore(ListingSource):
    """Listing cache keyed by id, with a separate view of the viewer's own listings."""

    def __init__(self) -> None:
        self._listings: dict[str, RawRecord] = {}
        self._own_listings: dict[str, RawRecord] = {}

    def add_listing(self, record: RawRecord, *, own: bool = False) -> None:
        listing_id = coerce_id(record["id"])
        target = self._own_listings if own else self._listings
        target[listing_id] = record

    def get_listing(self, listing_id: str) -> Optional[RawRecord]:
        return self._listings.get(listing_id)

    def get_own_listing(self, listing_id: str) -> Optional[RawRecord]:
        return self._own_listings.get(listing_id)


class InMemoryFavoritesGateway(FavoritesGateway):
    """
    Favorites store for tests and local runs. ``delay`` lets callers interleave
    concurrent updates; ``fail_with`` makes every call raise.
    """

    def __init__(
        self,
        favorites: Optional[dict[str, Iterable[str]]] = None,
        *,
        delay: float = 0.0,
        fail_with: Optional[Exception] = None,
    ) -> None:
        self._favorites: dict[str, list[str]] = {
            user_id: list(dict.fromkeys(ids)) for user_id, ids in (favorites or {}).items()
        }
        self.delay = delay
        self.fail_with = fail_with
        self.calls: list[FavoritesUpdate] = []

    def favorites_for(self, user_id: str) -> list[str]:
        return list(self._favorites.get(user_id, []))

    async def update_favorites(self, update: FavoritesUpdate) -> FavoritesResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.calls.append(update)
        if self.fail_with is not None:
            raise self.fail_with
        favorites = update.apply(self._favorites.get(update.user_id, []))
        self._favorites[update.user_id] = favorites
        logger.debug(f"favorites {update.action.value} {update.listing_id} for user {update.user_id}")
        return FavoritesResult.for_update(update, favorites)
