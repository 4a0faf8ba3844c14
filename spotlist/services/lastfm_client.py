from __future__ import annotations

import logging
from typing import Optional

import httpx

from spotlist.config import Settings
from spotlist.services.http import SerialClient, decode_response
from spotlist.services.lookup import MalformedResponse, RemoteFailure

logger = logging.getLogger(__name__)

LASTFM_TRACK_NOT_FOUND = 6


class LastfmClient(SerialClient):
    """Looks up Last.fm playcounts for tracks."""

    def __init__(
        self,
        api_key: str = "",
        api_url: str = "https://ws.audioscrobbler.com/2.0/",
        delay: float = 0.1,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(delay=delay, timeout=timeout, http_client=http_client)
        self.api_key = api_key
        self.api_url = api_url

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "LastfmClient":
        return cls(
            api_key=settings.lastfm_api_key,
            api_url=settings.lastfm_api_url,
            delay=settings.request_delay,
            timeout=settings.request_timeout,
            http_client=http_client,
        )

    async def fetch_rating(self, artist: str, title: str) -> Optional[int]:
        if not self.api_key:
            raise RemoteFailure("Last.fm API key is not configured")
        params = {
            "method": "track.getInfo",
            "api_key": self.api_key,
            "artist": artist,
            "track": title,
            "format": "json",
        }
        response = await self.get(self.api_url, params)
        if _is_not_found(response):
            logger.debug("Last.fm has no track '%s' by '%s'", title, artist)
            return None
        body = decode_response(response, self.api_url)
        playcount = (body.get("track") or {}).get("playcount")
        if playcount is None:
            return None
        try:
            return int(playcount)
        except (TypeError, ValueError) as exc:
            raise MalformedResponse(f"Last.fm playcount '{playcount}' is not a number") from exc


def _is_not_found(response: httpx.Response) -> bool:
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("error") == LASTFM_TRACK_NOT_FOUND


__all__ = ["LastfmClient"]
