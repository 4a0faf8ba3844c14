import asyncio
from typing import Dict, List, Optional

import pytest

from spotlist.models import AlbumRecord, AlbumRef, ArtistRecord, ArtistRef, TrackRecord
from spotlist.services.lookup import NotFound, RemoteFailure


def make_track(track_id, name, artist="Band", popularity=None, album=None, explicit=False):
    return TrackRecord(
        id=track_id,
        uri=f"spotify:track:{track_id}",
        name=name,
        artists=[ArtistRef(id=f"artist-{artist.lower()}", name=artist)],
        album=AlbumRef(id=f"album-{album.lower()}", name=album) if album else None,
        popularity=popularity,
        explicit=explicit,
    )


def simplified(record):
    return record.model_copy(update={"popularity": None, "album": None})


class FakeLookup:
    """In-memory catalog that records every call it receives."""

    def __init__(self):
        self.tracks: Dict[str, TrackRecord] = {}
        self.track_search: Dict[str, TrackRecord] = {}
        self.albums: Dict[str, AlbumRecord] = {}
        self.album_search: Dict[str, AlbumRef] = {}
        self.artist_search: Dict[str, ArtistRecord] = {}
        self.artist_albums: Dict[str, List[AlbumRef]] = {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _call(self, name, argument):
        self.calls.append((name, argument))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if argument in self.failures:
                raise self.failures[argument]
        finally:
            self.in_flight -= 1

    def calls_to(self, name):
        return [argument for call, argument in self.calls if call == name]

    async def search_track(self, query) -> Optional[TrackRecord]:
        await self._call("search_track", query)
        match = self.track_search.get(query.lower())
        return simplified(match) if match else None

    async def fetch_track(self, track_id) -> TrackRecord:
        await self._call("fetch_track", track_id)
        if track_id not in self.tracks:
            raise RemoteFailure(f"no track {track_id}", status_code=404)
        return self.tracks[track_id]

    async def search_album(self, query) -> Optional[AlbumRef]:
        await self._call("search_album", query)
        return self.album_search.get(query.lower())

    async def fetch_album(self, album_id) -> AlbumRecord:
        await self._call("fetch_album", album_id)
        if album_id not in self.albums:
            raise RemoteFailure(f"no album {album_id}", status_code=404)
        return self.albums[album_id]

    async def search_artist(self, query) -> Optional[ArtistRecord]:
        await self._call("search_artist", query)
        return self.artist_search.get(query.lower())

    async def fetch_artist_albums(self, artist_id) -> List[AlbumRef]:
        await self._call("fetch_artist_albums", artist_id)
        if artist_id not in self.artist_albums:
            raise NotFound(f"no artist {artist_id}")
        return self.artist_albums[artist_id]


class FakeRatings:
    def __init__(self, playcounts=None):
        self.playcounts = dict(playcounts or {})
        self.calls: List[tuple] = []

    async def fetch_rating(self, artist, title) -> Optional[int]:
        self.calls.append((artist, title))
        await asyncio.sleep(0)
        return self.playcounts.get((artist, title))


@pytest.fixture
def lookup():
    """A small catalog: one band with two albums, plus a solo track."""
    fake = FakeLookup()
    song_one = make_track("t1", "Song One", popularity=10, album="First")
    song_two = make_track("t2", "Song Two", popularity=90, album="First")
    other = make_track("t3", "Other Song", artist="Singer", popularity=50, album="Solo")
    hit = make_track("t4", "Hit", popularity=70, album="Second", explicit=True)
    b_side = make_track("t5", "B-Side", popularity=5, album="Second")
    ballad = make_track("t6", "Ballad", popularity=40, album="Second")
    for record in (song_one, song_two, other, hit, b_side, ballad):
        fake.tracks[record.id] = record

    fake.track_search["song one"] = song_one
    fake.track_search["song two"] = song_two
    fake.track_search["other song"] = other

    fake.albums["a1"] = AlbumRecord(
        id="a1", name="First", album_type="album", tracks=[simplified(song_one), simplified(song_two)]
    )
    fake.albums["a2"] = AlbumRecord(
        id="a2", name="Second", album_type="single", tracks=[simplified(hit), simplified(b_side), simplified(ballad)]
    )
    fake.album_search["first"] = AlbumRef(id="a1", name="First", album_type="album")
    fake.artist_search["band"] = ArtistRecord(id="ar1", name="Band")
    fake.artist_albums["ar1"] = [
        AlbumRef(id="a1", name="First", album_type="album"),
        AlbumRef(id="a2", name="Second", album_type="single"),
    ]
    return fake


@pytest.fixture
def run():
    return asyncio.run


class Managed:
    """Wraps a fake lookup so it can be used as an async context manager."""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False
