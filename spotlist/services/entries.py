"""Playlist entries and how they resolve.

Every entry keeps the text it was created from in ``entry``. Calling
``dispatch`` moves the entry forward through its resolution states:

* a :class:`Track` resolves to itself, now carrying Spotify data;
* an :class:`Album` resolves to a :class:`Queue` of tracks;
* an :class:`Artist` resolves to a :class:`Queue` of album queues, which
  the caller flattens.

Remote calls go through the injected lookup capabilities, one at a time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TypeVar

from spotlist.models import AlbumRecord, AlbumRef, ArtistRecord, TrackRecord
from spotlist.services.lookup import NotFound, RatingLookup, TrackLookup
from spotlist.services.queue import Queue

logger = logging.getLogger(__name__)

TRACK_URI = re.compile(r"^spotify:track:([A-Za-z0-9]+)", re.IGNORECASE)
TRACK_LINK = re.compile(r"^https?://open\.spotify\.com/track/([A-Za-z0-9]+)", re.IGNORECASE)

T = TypeVar("T")


class TrackState(str, Enum):
    UNRESOLVED = "unresolved"
    SIMPLIFIED = "simplified"
    FULL = "full"


class AlbumState(str, Enum):
    UNSEARCHED = "unsearched"
    SEARCHED = "searched"
    FETCHED = "fetched"
    EXPANDED = "expanded"


class ArtistState(str, Enum):
    UNSEARCHED = "unsearched"
    SEARCHED = "searched"
    ALBUMS_FETCHED = "albums_fetched"
    EXPANDED = "expanded"


@dataclass(frozen=True)
class TrackResolution:
    state: TrackState = TrackState.UNRESOLVED
    record: Optional[TrackRecord] = None
    searched: bool = False


def parse_track_reference(text: str) -> Optional[str]:
    """Return the track id of a Spotify URI or web link, else ``None``."""
    match = TRACK_URI.match(text) or TRACK_LINK.match(text)
    if match:
        return match.group(1)
    return None


def _require(lookup: Optional[T], kind: str) -> T:
    if lookup is None:
        raise RuntimeError(f"No {kind} lookup configured for this entry")
    return lookup


class Track:
    def __init__(
        self,
        entry: str,
        record: Optional[TrackRecord] = None,
        lookup: Optional[TrackLookup] = None,
        ratings: Optional[RatingLookup] = None,
    ) -> None:
        self.entry = entry.strip()
        self.lookup = lookup
        self.ratings = ratings
        self.playcount: Optional[int] = None
        if record is None:
            self.resolution = TrackResolution()
        elif record.is_full:
            self.resolution = TrackResolution(TrackState.FULL, record)
        else:
            self.resolution = TrackResolution(TrackState.SIMPLIFIED, record)

    @property
    def state(self) -> TrackState:
        return self.resolution.state

    @property
    def record(self) -> Optional[TrackRecord]:
        return self.resolution.record

    @property
    def id(self) -> Optional[str]:
        if self.record is not None:
            return self.record.id
        return parse_track_reference(self.entry)

    async def dispatch(self) -> "Track":
        if self.state is TrackState.FULL:
            return self
        if self.state is TrackState.SIMPLIFIED or parse_track_reference(self.entry):
            return await self.fetch_track()
        if self.resolution.searched:
            return self
        return await self.search_for_track()

    async def fetch_track(self) -> "Track":
        lookup = _require(self.lookup, "track")
        track_id = self.id
        logger.debug("Fetching track %s for entry '%s'", track_id, self.entry)
        record = await lookup.fetch_track(track_id)
        self.resolution = TrackResolution(TrackState.FULL, record, self.resolution.searched)
        return self

    async def search_for_track(self) -> "Track":
        lookup = _require(self.lookup, "track")
        logger.debug("Searching for track '%s'", self.entry)
        record = await lookup.search_track(self.entry)
        if record is None:
            logger.info("No match found for '%s'", self.entry)
            self.resolution = TrackResolution(searched=True)
        else:
            self.resolution = TrackResolution(TrackState.SIMPLIFIED, record, searched=True)
        return self

    async def fetch_lastfm(self) -> "Track":
        ratings = _require(self.ratings, "rating")
        self.playcount = await ratings.fetch_rating(self.artist, self.title)
        return self

    @property
    def lastfm(self) -> int:
        if self.playcount is None:
            return -1
        return self.playcount

    @property
    def uri(self) -> str:
        if self.record is None:
            return ""
        return self.record.uri

    @property
    def popularity(self) -> int:
        if self.state is TrackState.FULL and self.record.popularity is not None:
            return self.record.popularity
        return -1

    @property
    def explicit(self) -> bool:
        return bool(self.record and self.record.explicit)

    @property
    def artist(self) -> str:
        if self.record is not None and self.record.artists and self.record.artists[0].name:
            return self.record.artists[0].name.strip()
        return ""

    @property
    def artists(self) -> str:
        if self.record is None:
            return ""
        return ", ".join(artist.name.strip() for artist in self.record.artists)

    @property
    def title(self) -> str:
        if self.record is None:
            return ""
        return self.record.name

    @property
    def album(self) -> str:
        if self.state is TrackState.FULL and self.record.album is not None:
            return self.record.album.name
        return ""

    @property
    def full_name(self) -> str:
        title = self.title
        if not title:
            return ""
        artist = self.artist
        if artist:
            return f"{title} - {artist}"
        return title

    @property
    def name(self) -> str:
        return self.full_name

    def equals(self, other: object) -> bool:
        return str(self).lower() == str(other).lower()

    def __str__(self) -> str:
        return self.full_name or self.entry

    def __repr__(self) -> str:
        return f"Track({self.entry!r}, state={self.state.value})"


class Album:
    def __init__(
        self,
        entry: str,
        record: Optional[AlbumRef] = None,
        lookup: Optional[TrackLookup] = None,
        ratings: Optional[RatingLookup] = None,
    ) -> None:
        self.entry = entry.strip()
        self.lookup = lookup
        self.ratings = ratings
        self.search_match: Optional[AlbumRef] = None
        self.album_record: Optional[AlbumRecord] = None
        self.expanded = False
        if isinstance(record, AlbumRecord):
            self.album_record = record
        elif record is not None:
            self.search_match = record

    @property
    def state(self) -> AlbumState:
        if self.expanded:
            return AlbumState.EXPANDED
        if self.album_record is not None:
            return AlbumState.FETCHED
        if self.search_match is not None:
            return AlbumState.SEARCHED
        return AlbumState.UNSEARCHED

    @property
    def id(self) -> Optional[str]:
        if self.album_record is not None:
            return self.album_record.id
        if self.search_match is not None:
            return self.search_match.id
        return None

    @property
    def album_type(self) -> Optional[str]:
        source = self.album_record or self.search_match
        return source.album_type if source else None

    @property
    def album_group(self) -> Optional[str]:
        source = self.album_record or self.search_match
        return source.album_group if source else None

    @property
    def popularity(self) -> int:
        source = self.album_record or self.search_match
        if source is None or source.popularity is None:
            return -1
        return source.popularity

    async def dispatch(self) -> Queue:
        if self.album_record is None:
            if self.search_match is None:
                await self.search_for_album()
            await self.fetch_album()
        return self.create_queue()

    async def search_for_album(self) -> AlbumRef:
        lookup = _require(self.lookup, "album")
        logger.debug("Searching for album '%s'", self.entry)
        match = await lookup.search_album(self.entry)
        if match is None or not match.id:
            raise NotFound(f"No album found for '{self.entry}'")
        self.search_match = match
        return match

    async def fetch_album(self) -> AlbumRecord:
        lookup = _require(self.lookup, "album")
        logger.debug("Fetching album %s for entry '%s'", self.id, self.entry)
        self.album_record = await lookup.fetch_album(self.id)
        return self.album_record

    def create_queue(self) -> Queue:
        queue = Queue()
        for record in self.album_record.tracks:
            queue.add(Track(self.entry, record, lookup=self.lookup, ratings=self.ratings))
        self.expanded = True
        logger.debug("Album '%s' expanded into %s tracks", self.entry, queue.size())
        return queue

    def __str__(self) -> str:
        source = self.album_record or self.search_match
        if source is not None and source.name:
            return source.name
        return self.entry

    def __repr__(self) -> str:
        return f"Album({self.entry!r}, state={self.state.value})"


class Artist:
    def __init__(
        self,
        entry: str,
        lookup: Optional[TrackLookup] = None,
        ratings: Optional[RatingLookup] = None,
    ) -> None:
        self.entry = entry.strip()
        self.lookup = lookup
        self.ratings = ratings
        self.artist_record: Optional[ArtistRecord] = None
        self.album_listing: Optional[List[AlbumRef]] = None
        self.albums: Optional[Queue] = None

    @property
    def state(self) -> ArtistState:
        if self.albums is not None:
            return ArtistState.EXPANDED
        if self.album_listing is not None:
            return ArtistState.ALBUMS_FETCHED
        if self.artist_record is not None:
            return ArtistState.SEARCHED
        return ArtistState.UNSEARCHED

    @property
    def id(self) -> Optional[str]:
        if self.artist_record is not None:
            return self.artist_record.id
        return None

    async def dispatch(self) -> Queue:
        if self.albums is None:
            if self.album_listing is None:
                if self.artist_record is None:
                    await self.search_for_artist()
                await self.fetch_albums()
            self.albums = self.create_queue()
        return await self.albums.dispatch()

    async def search_for_artist(self) -> ArtistRecord:
        lookup = _require(self.lookup, "artist")
        logger.debug("Searching for artist '%s'", self.entry)
        record = await lookup.search_artist(self.entry)
        if record is None or not record.id:
            raise NotFound(f"No artist found for '{self.entry}'")
        self.artist_record = record
        return record

    async def fetch_albums(self) -> List[AlbumRef]:
        lookup = _require(self.lookup, "artist")
        logger.debug("Fetching albums of artist %s for entry '%s'", self.id, self.entry)
        self.album_listing = list(await lookup.fetch_artist_albums(self.id))
        return self.album_listing

    def create_queue(self) -> Queue:
        queue = Queue()
        for album in self.album_listing:
            queue.add(Album(self.entry, album, lookup=self.lookup, ratings=self.ratings))
        logger.debug("Artist '%s' has %s albums", self.entry, queue.size())
        return queue

    def __str__(self) -> str:
        if self.artist_record is not None and self.artist_record.name:
            return self.artist_record.name
        return self.entry

    def __repr__(self) -> str:
        return f"Artist({self.entry!r}, state={self.state.value})"


__all__ = [
    "Album",
    "AlbumState",
    "Artist",
    "ArtistState",
    "Track",
    "TrackResolution",
    "TrackState",
    "parse_track_reference",
]
