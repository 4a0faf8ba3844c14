import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from spotlist.config import settings
from spotlist.models import PlaylistPreview, ResolveRequest, ResolveResult
from spotlist.services.lastfm_client import LastfmClient
from spotlist.services.lookup import ResolutionError
from spotlist.services.playlist import Playlist
from spotlist.services.progress import progress_tracker
from spotlist.services.spotify_client import SpotifyClient

LOG_DIR = Path("logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_FILE = LOG_DIR / "spotlist.log"

root_logger = logging.getLogger()
root_logger.handlers.clear()
root_logger.setLevel(logging.DEBUG)

console_handler = logging.StreamHandler()
console_handler.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(
    logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
)

root_logger.addHandler(console_handler)
root_logger.addHandler(file_handler)

logger = logging.getLogger(__name__)

app = FastAPI(title="spotlist")


def build_spotify_client() -> SpotifyClient:
    return SpotifyClient.from_settings(settings)


def build_lastfm_client() -> LastfmClient:
    return LastfmClient.from_settings(settings)


@app.post("/resolve")
async def resolve_playlist(payload: ResolveRequest) -> JSONResponse:
    job_id = (payload.job_id or "").strip()

    async with build_spotify_client() as spotify, build_lastfm_client() as lastfm:
        playlist = Playlist(payload.playlist, lookup=spotify, ratings=lastfm)
        total_entries = playlist.entries.size()
        if not total_entries:
            logger.warning("Resolve aborted: playlist has no entries")
            return JSONResponse({"error": "The playlist has no entries."}, status_code=400)

        logger.info(
            "Resolving playlist with %s entries (ordering=%s, grouping=%s)",
            total_entries,
            playlist.ordering,
            playlist.grouping,
        )
        if job_id:
            progress_tracker.start(job_id, total_entries)

        try:
            text = await playlist.dispatch(progress_tracker.callback(job_id) if job_id else None)
        except ResolutionError as exc:
            logger.exception("Playlist resolution failed: %s", exc)
            if job_id:
                progress_tracker.error(job_id)
            return JSONResponse(
                {"error": str(exc), "kind": type(exc).__name__},
                status_code=502,
            )

    if job_id:
        progress_tracker.finish(job_id)

    uris = playlist.uris()
    logger.info("Playlist resolved into %s tracks", len(uris))
    result = ResolveResult(uris=uris, text=text, count=len(uris))
    return JSONResponse(result.model_dump())


@app.post("/preview")
async def preview_playlist(payload: ResolveRequest) -> JSONResponse:
    preview: PlaylistPreview = Playlist(payload.playlist).preview()
    return JSONResponse(preview.model_dump())


@app.get("/progress/{job_id}")
async def get_progress(job_id: str) -> JSONResponse:
    snapshot = progress_tracker.snapshot(job_id)
    if snapshot is None:
        return JSONResponse({"status": "unknown"}, status_code=404)
    status = snapshot.get("status")
    if status in {"completed", "error"}:
        progress_tracker.pop(job_id)
    return JSONResponse(snapshot)
