from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional

from spotlist.models import PlaylistPreview, PreviewEntry
from spotlist.services import sorting
from spotlist.services.entries import Album, Artist, Track
from spotlist.services.lookup import RatingLookup, TrackLookup
from spotlist.services.queue import Queue

logger = logging.getLogger(__name__)

ORDER_POPULARITY = "popularity"
ORDER_LASTFM = "lastfm"
GROUP_ENTRY = "entry"
GROUP_ARTIST = "artist"
GROUP_ALBUM = "album"

LINE_BREAK = re.compile(r"\r\n|\r|\n")
ORDER_DIRECTIVES = (
    (re.compile(r"^#ORDER BY POPULARITY", re.IGNORECASE), ORDER_POPULARITY),
    (re.compile(r"^#ORDER BY LAST.?FM", re.IGNORECASE), ORDER_LASTFM),
)
GROUP_DIRECTIVES = (
    (re.compile(r"^#GROUP BY ENTRY", re.IGNORECASE), GROUP_ENTRY),
    (re.compile(r"^#GROUP BY ARTIST", re.IGNORECASE), GROUP_ARTIST),
    (re.compile(r"^#GROUP BY ALBUM", re.IGNORECASE), GROUP_ALBUM),
)
UNIQUE_DIRECTIVE = re.compile(r"^#UNIQUE", re.IGNORECASE)
ALBUM_DIRECTIVE = re.compile(r"^#ALBUM (.*)$", re.IGNORECASE)
ARTIST_DIRECTIVE = re.compile(r"^#ARTIST (.*)$", re.IGNORECASE)


class Playlist:
    """A playlist description and the pipeline that resolves it.

    Lines starting with ``#`` are directives (ordering, grouping,
    album and artist entries); every other non-blank line is a track.
    """

    def __init__(
        self,
        text: str = "",
        lookup: Optional[TrackLookup] = None,
        ratings: Optional[RatingLookup] = None,
    ) -> None:
        self.lookup = lookup
        self.ratings = ratings
        self.ordering: Optional[str] = None
        self.grouping: Optional[str] = None
        self.unique = True
        self.entries = Queue()
        self._parse(text)

    def _parse(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        for line in LINE_BREAK.split(text):
            self._parse_line(line)
        logger.debug(
            "Parsed playlist: %s entries, ordering=%s grouping=%s unique=%s",
            self.entries.size(),
            self.ordering,
            self.grouping,
            self.unique,
        )

    def _parse_line(self, line: str) -> None:
        if not line.strip():
            return
        for pattern, ordering in ORDER_DIRECTIVES:
            if pattern.match(line):
                self.ordering = ordering
                return
        for pattern, grouping in GROUP_DIRECTIVES:
            if pattern.match(line):
                self.grouping = grouping
                return
        if UNIQUE_DIRECTIVE.match(line):
            self.unique = True
            return
        album = ALBUM_DIRECTIVE.match(line)
        if album:
            self.entries.add(Album(album.group(1), lookup=self.lookup, ratings=self.ratings))
            return
        artist = ARTIST_DIRECTIVE.match(line)
        if artist:
            self.entries.add(Artist(artist.group(1), lookup=self.lookup, ratings=self.ratings))
            return
        self.entries.add(Track(line, lookup=self.lookup, ratings=self.ratings))

    async def dispatch(self, progress_callback: Optional[Callable[[int], None]] = None) -> str:
        """Resolve every entry and return the newline-separated track URIs."""
        total = self.entries.size()
        await self.fetch_tracks(progress_callback)
        logger.info("Resolved %s entries into %s tracks", total, self.entries.size())
        self.dedup()
        await self.order()
        await self.group()
        return self.render()

    async def fetch_tracks(self, progress_callback: Optional[Callable[[int], None]] = None) -> "Playlist":
        result = await self.entries.dispatch(progress_callback)
        self.entries = result.flatten()
        return self

    async def refresh_tracks(self) -> "Playlist":
        result = await self.entries.dispatch()
        self.entries = result.flatten()
        return self

    async def fetch_lastfm(self) -> "Playlist":
        await self.entries.resolve_all(lambda track: track.fetch_lastfm())
        return self

    def dedup(self) -> None:
        if self.unique:
            self.entries.dedup()

    async def order(self) -> None:
        if self.ordering == ORDER_POPULARITY:
            await self.refresh_tracks()
            self.order_by_popularity()
        elif self.ordering == ORDER_LASTFM:
            await self.fetch_lastfm()
            self.order_by_lastfm()

    def order_by_popularity(self) -> None:
        self.entries.sort(sorting.popularity)

    def order_by_lastfm(self) -> None:
        self.entries.sort(sorting.lastfm)

    async def group(self) -> None:
        if self.grouping == GROUP_ARTIST:
            self.group_by_artist()
        elif self.grouping == GROUP_ALBUM:
            await self.refresh_tracks()
            self.group_by_album()
        elif self.grouping == GROUP_ENTRY:
            self.group_by_entry()

    def group_by_artist(self) -> None:
        self.entries.group(lambda track: track.artist)

    def group_by_album(self) -> None:
        self.entries.group(lambda track: track.album)

    def group_by_entry(self) -> None:
        self.entries.group(lambda track: track.entry)

    def uris(self) -> List[str]:
        return [track.uri for track in self.entries if track.uri]

    def render(self) -> str:
        for track in self.entries:
            logger.debug("%s (last.fm %s) -> %s", track, track.lastfm, track.uri or "<none>")
        return "\n".join(self.uris()).strip()

    def preview(self) -> PlaylistPreview:
        return PlaylistPreview(
            ordering=self.ordering,
            grouping=self.grouping,
            unique=self.unique,
            entries=[
                PreviewEntry(kind=type(entry).__name__.lower(), entry=entry.entry)
                for entry in self.entries
            ],
        )


__all__ = ["Playlist"]
