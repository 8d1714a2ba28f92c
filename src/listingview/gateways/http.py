from __future__ import annotations
import logging
from typing import Optional

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_fixed

from listingview.config import settings
from listingview.errors import FavoritesUpdateError
from listingview.favorites import FavoritesUpdate
from listingview.gateways.base import FavoritesGateway, FavoritesResult

logger = logging.getLogger("listingview.gateways")


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class HttpFavoritesGateway(FavoritesGateway):
    """
    Sends favorites updates to the marketplace API as
    ``POST {base_url}/favorites {"userId", "listingId", "action"}``.

    The endpoint applies add/remove idempotently, so transport failures and
    5xx answers are retried; any other error status surfaces as
    ``FavoritesUpdateError``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.MARKETPLACE_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FAVORITES_TIMEOUT_SEC
        self._client = client

    @retry(
        retry=retry_if_exception(_is_retryable),
        wait=wait_fixed(settings.FAVORITES_RETRY_WAIT_SEC),
        stop=stop_after_attempt(settings.FAVORITES_MAX_ATTEMPTS),
        reraise=True,
    )
    async def _post(self, client: httpx.AsyncClient, update: FavoritesUpdate) -> httpx.Response:
        r = await client.post(f"{self.base_url}/favorites", json=update.to_payload(), timeout=self.timeout)
        if r.status_code >= 500:
            r.raise_for_status()
        return r

    async def _send(self, update: FavoritesUpdate) -> httpx.Response:
        if self._client is not None:
            return await self._post(self._client, update)
        async with httpx.AsyncClient() as client:
            return await self._post(client, update)

    async def update_favorites(self, update: FavoritesUpdate) -> FavoritesResult:
        try:
            r = await self._send(update)
        except httpx.HTTPStatusError as e:
            raise FavoritesUpdateError(
                f"Favorites update failed with HTTP {e.response.status_code}",
                status=e.response.status_code,
                detail=e.response.text,
            ) from e
        except httpx.TransportError as e:
            raise FavoritesUpdateError(f"Favorites update failed: {e}") from e

        if r.status_code >= 400:
            raise FavoritesUpdateError(
                f"Favorites update rejected with HTTP {r.status_code}",
                status=r.status_code,
                detail=r.text,
            )

        favorites = None
        if r.content:
            try:
                body = r.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("favorites"), list):
                favorites = [str(f) for f in body["favorites"]]
        logger.info(f"favorites {update.action.value} {update.listing_id} for user {update.user_id}: HTTP {r.status_code}")
        return FavoritesResult.for_update(update, favorites)
