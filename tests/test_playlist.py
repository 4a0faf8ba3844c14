import pytest

from spotlist.services.entries import Album, Artist, Track
from spotlist.services.lookup import NotFound, RemoteFailure
from spotlist.services.playlist import Playlist

from conftest import FakeRatings, make_track


def entries(playlist):
    return [entry.entry for entry in playlist.entries]


class TestParsing:
    def test_empty_string_creates_empty_playlist(self):
        assert Playlist("").entries.items == []
        assert Playlist("   \n  ").entries.items == []

    def test_one_entry(self):
        assert entries(Playlist("test")) == ["test"]

    def test_two_entries(self):
        assert entries(Playlist("test1\ntest2")) == ["test1", "test2"]

    def test_ignores_empty_lines(self):
        assert entries(Playlist("test1\n\n\n\ntest2")) == ["test1", "test2"]

    def test_mixed_line_endings(self):
        assert entries(Playlist("a\r\nb\rc\nd")) == ["a", "b", "c", "d"]

    def test_defaults(self):
        playlist = Playlist("test")
        assert playlist.ordering is None
        assert playlist.grouping is None
        assert playlist.unique is True

    def test_order_by_popularity(self):
        playlist = Playlist("#ORDER BY POPULARITY\ntest1\ntest2")
        assert entries(playlist) == ["test1", "test2"]
        assert playlist.ordering == "popularity"

    @pytest.mark.parametrize("line", ["#ORDER BY LASTFM", "#order by last.fm", "#ORDER BY LAST FM"])
    def test_order_by_lastfm(self, line):
        playlist = Playlist(f"{line}\ntest1\ntest2")
        assert entries(playlist) == ["test1", "test2"]
        assert playlist.ordering == "lastfm"

    @pytest.mark.parametrize("word, grouping", [("ENTRY", "entry"), ("artist", "artist"), ("Album", "album")])
    def test_group_by(self, word, grouping):
        assert Playlist(f"#GROUP BY {word}\ntest").grouping == grouping

    def test_album_and_artist_entries(self):
        playlist = Playlist("#ALBUM First\n#ARTIST  Band \nSong One")
        kinds = [type(entry) for entry in playlist.entries]
        assert kinds == [Album, Artist, Track]
        assert entries(playlist) == ["First", "Band", "Song One"]

    def test_hash_prefixed_titles_are_tracks(self):
        playlist = Playlist("#1 Crush - Garbage\n#thatPOWER - will.i.am")
        assert [type(entry) for entry in playlist.entries] == [Track, Track]
        assert entries(playlist) == ["#1 Crush - Garbage", "#thatPOWER - will.i.am"]

    def test_entries_receive_lookups(self, lookup):
        ratings = FakeRatings()
        playlist = Playlist("#ALBUM x\nSong One", lookup=lookup, ratings=ratings)
        assert all(entry.lookup is lookup and entry.ratings is ratings for entry in playlist.entries)

    def test_preview(self):
        preview = Playlist("#ORDER BY POPULARITY\n#ARTIST Band\nSong One").preview()
        assert preview.ordering == "popularity"
        assert [(item.kind, item.entry) for item in preview.entries] == [("artist", "Band"), ("track", "Song One")]


class TestPipeline:
    def test_dispatch_all_entries(self, lookup, run):
        text = run(Playlist("Song One\nSong Two", lookup=lookup).dispatch())
        assert text == "spotify:track:t1\nspotify:track:t2"

    def test_unmatched_tracks_are_dropped(self, lookup, run):
        text = run(Playlist("Song One\nno such song\nSong Two", lookup=lookup).dispatch())
        assert text == "spotify:track:t1\nspotify:track:t2"

    def test_duplicates_removed(self, lookup, run):
        playlist = Playlist("Song One\nsong one\nSong Two\nspotify:track:t1", lookup=lookup)
        text = run(playlist.dispatch())
        assert text == "spotify:track:t1\nspotify:track:t2"

    def test_order_by_popularity(self, lookup, run):
        playlist = Playlist("#ORDER BY POPULARITY\nSong One\nSong Two", lookup=lookup)
        text = run(playlist.dispatch())
        assert text == "spotify:track:t2\nspotify:track:t1"
        assert lookup.calls_to("fetch_track") == ["t1", "t2"]

    def test_order_by_popularity_ties_keep_input_order(self, lookup, run):
        lookup.tracks["t7"] = make_track("t7", "Twin A", popularity=60)
        lookup.tracks["t8"] = make_track("t8", "Twin B", popularity=60)
        playlist = Playlist(
            "#ORDER BY POPULARITY\nspotify:track:t8\nspotify:track:t7\nspotify:track:t2",
            lookup=lookup,
        )
        assert run(playlist.dispatch()).split("\n") == [
            "spotify:track:t2",
            "spotify:track:t8",
            "spotify:track:t7",
        ]

    def test_order_by_lastfm(self, lookup, run):
        ratings = FakeRatings({("Band", "Song One"): 900, ("Singer", "Other Song"): 50})
        playlist = Playlist("#ORDER BY LASTFM\nOther Song\nSong Two\nSong One", lookup=lookup, ratings=ratings)
        text = run(playlist.dispatch())
        assert text.split("\n") == ["spotify:track:t1", "spotify:track:t3", "spotify:track:t2"]
        assert ratings.calls == [("Singer", "Other Song"), ("Band", "Song Two"), ("Band", "Song One")]
        assert lookup.calls_to("fetch_track") == []

    def test_artist_entry_expands_to_all_album_tracks(self, lookup, run):
        playlist = Playlist("#ARTIST Band", lookup=lookup)
        text = run(playlist.dispatch())
        assert text.split("\n") == [f"spotify:track:t{i}" for i in (1, 2, 4, 5, 6)]

    def test_group_by_artist(self, lookup, run):
        playlist = Playlist("#GROUP BY ARTIST\nSong One\nOther Song\nSong Two", lookup=lookup)
        assert run(playlist.dispatch()).split("\n") == [
            "spotify:track:t1",
            "spotify:track:t2",
            "spotify:track:t3",
        ]

    def test_group_by_album_refreshes_tracks(self, lookup, run):
        playlist = Playlist("#GROUP BY ALBUM\nSong One\nspotify:track:t4\nSong Two", lookup=lookup)
        text = run(playlist.dispatch())
        assert text.split("\n") == ["spotify:track:t1", "spotify:track:t2", "spotify:track:t4"]
        assert [track.album for track in playlist.entries] == ["First", "First", "Second"]

    def test_group_by_entry(self, lookup, run):
        playlist = Playlist("#GROUP BY ENTRY\n#ALBUM First\nOther Song\n#ALBUM First", lookup=lookup)
        playlist.unique = False
        text = run(playlist.dispatch())
        assert text.split("\n") == [
            "spotify:track:t1",
            "spotify:track:t2",
            "spotify:track:t1",
            "spotify:track:t2",
            "spotify:track:t3",
        ]

    def test_failure_aborts_whole_playlist(self, lookup, run):
        lookup.failures["Song Two"] = RemoteFailure("server error", status_code=500)
        playlist = Playlist("Song One\nSong Two\nOther Song", lookup=lookup)
        with pytest.raises(RemoteFailure):
            run(playlist.dispatch())
        assert lookup.calls_to("search_track") == ["Song One", "Song Two"]

    def test_missing_album_aborts_playlist(self, lookup, run):
        with pytest.raises(NotFound):
            run(Playlist("Song One\n#ALBUM Nope", lookup=lookup).dispatch())

    def test_progress_counts_top_level_entries(self, lookup, run):
        progress = []
        run(Playlist("#ARTIST Band\nSong One", lookup=lookup).dispatch(progress.append))
        assert progress == [1, 2]

    def test_calls_never_overlap(self, lookup, run):
        playlist = Playlist("#ORDER BY POPULARITY\n#GROUP BY ALBUM\n#ARTIST Band\nSong One\nOther Song", lookup=lookup)
        run(playlist.dispatch())
        assert lookup.max_in_flight == 1
