from __future__ import annotations
import asyncio
import itertools
import logging
from typing import Generic, Hashable, Iterable, Optional, TypeVar

from listingview.favorites import FavoritesUpdate
from listingview.gateways.base import FavoritesGateway, FavoritesResult

logger = logging.getLogger("listingview.sequencing")

T = TypeVar("T")


class LatestRequestGate(Generic[T]):
    """
    Latest request wins. Every navigation takes a new token; a result is only
    accepted for the most recent token, so a slow resolution for an abandoned
    route can never be rendered against newer route params.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._route: Optional[Hashable] = None

    def begin(self, route: Optional[Hashable] = None) -> int:
        self._latest = next(self._counter)
        self._route = route
        return self._latest

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, token: int, route: Optional[Hashable] = None) -> bool:
        """True for the latest token; with ``route``, only if it is the route that token navigated to."""
        if token != self._latest:
            return False
        return route is None or route == self._route

    def commit(self, token: int, value: T) -> Optional[T]:
        if not self.is_current(token):
            logger.debug(f"discarding stale result for token {token} (latest {self._latest})")
            return None
        return value


class FavoritesSequencer:
    """
    Sends favorites updates through a gateway without blocking the caller.

    The optimistic local favorites are updated as soon as an update is
    scheduled. Sends for the same (user, listing) pair run strictly in the
    order they were scheduled; different pairs are independent. A failed send
    is reported on its task and leaves the optimistic favorites as they are.
    """

    def __init__(self, gateway: FavoritesGateway) -> None:
        self.gateway = gateway
        self._local: dict[str, list[str]] = {}
        self._tails: dict[tuple[str, str], asyncio.Task] = {}
        self._pending: set[asyncio.Task] = set()

    def seed(self, user_id: str, favorites: Iterable[str]) -> None:
        """Start from the user's persisted favorites unless we already track them."""
        self._local.setdefault(user_id, list(dict.fromkeys(favorites)))

    def local_favorites(self, user_id: str) -> list[str]:
        return list(self._local.get(user_id, []))

    def schedule(self, update: FavoritesUpdate) -> asyncio.Task:
        self._local[update.user_id] = update.apply(self._local.get(update.user_id, []))

        previous = self._tails.get(update.key)
        task = asyncio.get_running_loop().create_task(self._send_after(previous, update))
        self._tails[update.key] = task
        self._pending.add(task)
        task.add_done_callback(lambda t: self._forget(update.key, t))
        return task

    def _forget(self, key: tuple[str, str], task: asyncio.Task) -> None:
        self._pending.discard(task)
        if self._tails.get(key) is task:
            del self._tails[key]

    async def _send_after(
        self, previous: Optional[asyncio.Task], update: FavoritesUpdate
    ) -> FavoritesResult:
        if previous is not None:
            # order only; the earlier send reports its own failure
            await asyncio.wait([previous])
        try:
            return await self.gateway.update_favorites(update)
        except Exception:
            logger.exception(
                f"favorites {update.action.value} {update.listing_id} for user {update.user_id} failed"
            )
            raise

    async def drain(self) -> None:
        """Wait for every scheduled send to finish, successful or not."""
        while True:
            pending = [t for t in self._pending if not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)
