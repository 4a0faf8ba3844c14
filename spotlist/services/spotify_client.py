from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from spotlist.config import Settings
from spotlist.models import AlbumRecord, AlbumRef, ArtistRecord, TrackRecord
from spotlist.services import sorting
from spotlist.services.http import SerialClient, decode_response, parse_model
from spotlist.services.lookup import MalformedResponse, RemoteFailure

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN = 60.0


class SpotifyClient(SerialClient):
    """Spotify Web API lookups used to resolve playlist entries."""

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        api_url: str = "https://api.spotify.com/v1",
        auth_url: str = "https://accounts.spotify.com/api/token",
        delay: float = 0.1,
        timeout: float = 10.0,
        rank_search_results: bool = False,
        rank_artist_albums: bool = False,
        album_groups: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(delay=delay, timeout=timeout, http_client=http_client)
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_url = api_url.rstrip("/")
        self.auth_url = auth_url
        self.rank_search_results = rank_search_results
        self.rank_artist_albums = rank_artist_albums
        self.album_groups = album_groups
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "SpotifyClient":
        return cls(
            client_id=settings.spotify_client_id,
            client_secret=settings.spotify_client_secret,
            api_url=settings.spotify_api_url,
            auth_url=settings.spotify_auth_url,
            delay=settings.request_delay,
            timeout=settings.request_timeout,
            rank_search_results=settings.rank_search_results,
            rank_artist_albums=settings.rank_artist_albums,
            album_groups=settings.artist_album_groups,
            http_client=http_client,
        )

    async def _headers(self) -> Dict[str, str]:
        if not (self.client_id and self.client_secret):
            return {}
        if self._token is None or time.monotonic() >= self._token_expires_at:
            await self._authorize()
        return {"Authorization": f"Bearer {self._token}"}

    async def _authorize(self) -> None:
        logger.debug("Requesting Spotify access token from %s", self.auth_url)
        try:
            response = await self._client.post(
                self.auth_url,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
            )
        except httpx.HTTPError as exc:
            raise RemoteFailure(f"Spotify authorization failed: {exc}") from exc
        body = decode_response(response, self.auth_url)
        token = body.get("access_token")
        if not token:
            raise MalformedResponse("Spotify authorization response has no access_token")
        expires_in = float(body.get("expires_in") or 3600)
        self._token = token
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0.0)

    async def _collect_pages(self, page: Any) -> List[Any]:
        if not isinstance(page, dict) or not isinstance(page.get("items"), list):
            raise MalformedResponse("Paged response has no items list")
        items = list(page["items"])
        next_url = page.get("next")
        while next_url:
            page = await self.get_json(next_url)
            if not isinstance(page.get("items"), list):
                raise MalformedResponse(f"Page {next_url} has no items list")
            items.extend(page["items"])
            next_url = page.get("next")
        return items

    async def _search(self, kind: str, query: str) -> List[Any]:
        body = await self.get_json(f"{self.api_url}/search", {"type": kind, "q": query})
        block = body.get(f"{kind}s")
        if not isinstance(block, dict):
            raise MalformedResponse(f"Search response has no {kind}s block")
        items = block.get("items") or []
        return [item for item in items if isinstance(item, dict)]

    async def search_track(self, query: str) -> Optional[TrackRecord]:
        items = await self._search("track", query)
        candidates = [parse_model(TrackRecord, item) for item in items if item.get("uri")]
        logger.debug("Track search '%s' returned %s candidates", query, len(candidates))
        if not candidates:
            return None
        if self.rank_search_results:
            candidates = sorting.stable_sort(candidates, sorting.track(query))
        return candidates[0]

    async def fetch_track(self, track_id: str) -> TrackRecord:
        body = await self.get_json(f"{self.api_url}/tracks/{quote(str(track_id), safe='')}")
        return parse_model(TrackRecord, body)

    async def search_album(self, query: str) -> Optional[AlbumRef]:
        items = await self._search("album", query)
        for item in items:
            if item.get("id"):
                return parse_model(AlbumRef, item)
        return None

    async def fetch_album(self, album_id: str) -> AlbumRecord:
        body = await self.get_json(f"{self.api_url}/albums/{quote(str(album_id), safe='')}")
        tracks = await self._collect_pages(body.get("tracks"))
        return parse_model(AlbumRecord, dict(body, tracks=tracks))

    async def search_artist(self, query: str) -> Optional[ArtistRecord]:
        items = await self._search("artist", query)
        for item in items:
            if item.get("id"):
                return parse_model(ArtistRecord, item)
        return None

    async def fetch_artist_albums(self, artist_id: str) -> List[AlbumRef]:
        params: Dict[str, Any] = {"limit": 50}
        if self.album_groups:
            params["include_groups"] = self.album_groups
        body = await self.get_json(
            f"{self.api_url}/artists/{quote(str(artist_id), safe='')}/albums",
            params,
        )
        albums = [parse_model(AlbumRef, item) for item in await self._collect_pages(body)]
        if self.rank_artist_albums:
            albums = sorting.stable_sort(albums, sorting.album)
        return albums


__all__ = ["SpotifyClient"]
