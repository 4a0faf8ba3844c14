import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from spotlist.config import settings
from spotlist.services.lastfm_client import LastfmClient
from spotlist.services.lookup import ResolutionError
from spotlist.services.playlist import Playlist
from spotlist.services.spotify_client import SpotifyClient

logger = logging.getLogger("spotlist")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve a playlist description into Spotify track URIs.")
    parser.add_argument("input", nargs="?", default="input.txt", help="Playlist description file")
    parser.add_argument("output", nargs="?", default="output.txt", help="File to write the URIs to")
    return parser.parse_args(argv)


async def resolve_text(text: str) -> str:
    async with SpotifyClient.from_settings(settings) as spotify, LastfmClient.from_settings(settings) as lastfm:
        playlist = Playlist(text, lookup=spotify, ratings=lastfm)
        return await playlist.dispatch()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        text = Path(args.input).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Unable to read %s: %s", args.input, exc)
        return 1

    try:
        result = asyncio.run(resolve_text(text))
    except ResolutionError as exc:
        logger.exception("Playlist resolution failed: %s", exc)
        return 1

    Path(args.output).write_text(result, encoding="utf-8")
    logger.info("Wrote to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
