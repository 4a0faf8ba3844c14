from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ArtistRef(BaseModel):
    id: Optional[str] = None
    name: str = ""
    uri: Optional[str] = None


class AlbumRef(BaseModel):
    id: Optional[str] = None
    name: str = ""
    uri: Optional[str] = None
    album_type: Optional[str] = None
    album_group: Optional[str] = None
    popularity: Optional[int] = None


class TrackRecord(BaseModel):
    id: str
    uri: str
    name: str
    artists: List[ArtistRef] = []
    album: Optional[AlbumRef] = None
    popularity: Optional[int] = None
    explicit: bool = False

    @property
    def is_full(self) -> bool:
        return self.popularity is not None

    @property
    def full_name(self) -> str:
        artist = self.artists[0].name.strip() if self.artists else ""
        return f"{self.name} - {artist}"


class AlbumRecord(AlbumRef):
    id: str
    tracks: List[TrackRecord] = []


class ArtistRecord(BaseModel):
    id: str
    name: str = ""
    uri: Optional[str] = None
    popularity: Optional[int] = None


class ResolveRequest(BaseModel):
    playlist: str
    job_id: Optional[str] = None


class ResolveResult(BaseModel):
    uris: List[str]
    text: str
    count: int


class PreviewEntry(BaseModel):
    kind: str
    entry: str


class PlaylistPreview(BaseModel):
    ordering: Optional[str] = None
    grouping: Optional[str] = None
    unique: bool = True
    entries: List[PreviewEntry]


__all__ = [
    "AlbumRecord",
    "AlbumRef",
    "ArtistRecord",
    "ArtistRef",
    "PlaylistPreview",
    "PreviewEntry",
    "ResolveRequest",
    "ResolveResult",
    "TrackRecord",
]
