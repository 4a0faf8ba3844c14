from __future__ import annotations

from typing import List, Optional, Protocol

from spotlist.models import AlbumRecord, AlbumRef, ArtistRecord, TrackRecord


class ResolutionError(Exception):
    """Base class for failures that abort the resolution of an entry."""


class NotFound(ResolutionError):
    pass


class RemoteFailure(ResolutionError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(ResolutionError):
    pass


class TrackLookup(Protocol):
    async def search_track(self, query: str) -> Optional[TrackRecord]: ...

    async def fetch_track(self, track_id: str) -> TrackRecord: ...

    async def search_album(self, query: str) -> Optional[AlbumRef]: ...

    async def fetch_album(self, album_id: str) -> AlbumRecord: ...

    async def search_artist(self, query: str) -> Optional[ArtistRecord]: ...

    async def fetch_artist_albums(self, artist_id: str) -> List[AlbumRef]: ...


class RatingLookup(Protocol):
    async def fetch_rating(self, artist: str, title: str) -> Optional[int]: ...


__all__ = [
    "MalformedResponse",
    "NotFound",
    "RatingLookup",
    "RemoteFailure",
    "ResolutionError",
    "TrackLookup",
]
