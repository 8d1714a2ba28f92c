from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from listingview.favorites import FavoriteAction, FavoritesUpdate

RawRecord = Mapping[str, Any]


class ListingSource(ABC):
    """Read access to listings already fetched by the data layer."""

    @abstractmethod
    def get_listing(self, listing_id: str) -> Optional[RawRecord]:
        ...

    @abstractmethod
    def get_own_listing(self, listing_id: str) -> Optional[RawRecord]:
        ...


@dataclass(frozen=True)
class FavoritesResult:
    user_id: str
    listing_id: str
    action: FavoriteAction
    # full favorites list when the backend reports it back
    favorites: Optional[list[str]] = field(default=None)

    @classmethod
    def for_update(cls, update: FavoritesUpdate, favorites: Optional[list[str]] = None) -> "FavoritesResult":
        return cls(
            user_id=update.user_id,
            listing_id=update.listing_id,
            action=update.action,
            favorites=favorites,
        )


class FavoritesGateway(ABC):
    """
    Persists favorites updates. Implementations must be idempotent: adding a
    present id or removing an absent one is a successful no-op.
    """

    @abstractmethod
    async def update_favorites(self, update: FavoritesUpdate) -> FavoritesResult:
        ...
