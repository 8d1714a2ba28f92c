from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from listingview.schemas import User

logger = logging.getLogger("listingview.favorites")


class FavoriteAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class FavoritesUpdate:
    """Intended change to one user's favorites, computed from a local snapshot."""

    user_id: str
    listing_id: str
    action: FavoriteAction

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.listing_id)

    def apply(self, favorites: Iterable[str]) -> list[str]:
        """
        Return the favorites after this update. Adding a present id or
        removing an absent one leaves the list unchanged.
        """
        current = list(dict.fromkeys(favorites))
        if self.action is FavoriteAction.ADD:
            if self.listing_id not in current:
                current.append(self.listing_id)
            return current
        return [f for f in current if f != self.listing_id]

    def to_payload(self) -> dict[str, str]:
        return {"userId": self.user_id, "listingId": self.listing_id, "action": self.action.value}


def favorite_ids(user: Optional[User]) -> list[str]:
    if user is None:
        return []
    return list(user.attributes.profile.public_data.favorites)


def is_favorite(user: Optional[User], listing_id: Optional[str]) -> bool:
    return bool(listing_id) and listing_id in favorite_ids(user)


def resolve_favorite_toggle(
    user: Optional[User], listing_id: str, is_member: bool
) -> Optional[FavoritesUpdate]:
    # favorites need a signed-in user; the page gates this, we just tolerate it
    if user is None or not user.id:
        logger.debug(f"favorite toggle for {listing_id} ignored: no current user")
        return None
    action = FavoriteAction.REMOVE if is_member else FavoriteAction.ADD
    return FavoritesUpdate(user_id=user.id, listing_id=listing_id, action=action)


def toggle_favorite(
    user: Optional[User], listing_id: str
) -> tuple[Optional[FavoritesUpdate], list[str]]:
    favorites = favorite_ids(user)
    update = resolve_favorite_toggle(user, listing_id, listing_id in favorites)
    if update is None:
        return None, favorites
    return update, update.apply(favorites)
