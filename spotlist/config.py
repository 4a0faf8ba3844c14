from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    spotify_client_id: str = Field(default="", alias="SPOTIFY_CLIENT_ID")
    spotify_client_secret: str = Field(default="", alias="SPOTIFY_CLIENT_SECRET")
    spotify_api_url: str = Field(default="https://api.spotify.com/v1", alias="SPOTIFY_API_URL")
    spotify_auth_url: str = Field(default="https://accounts.spotify.com/api/token", alias="SPOTIFY_AUTH_URL")
    lastfm_api_key: str = Field(default="", alias="LASTFM_API_KEY")
    lastfm_api_url: str = Field(default="https://ws.audioscrobbler.com/2.0/", alias="LASTFM_API_URL")
    request_delay: float = Field(default=0.1, alias="REQUEST_DELAY")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")
    rank_search_results: bool = Field(default=False, alias="RANK_SEARCH_RESULTS")
    rank_artist_albums: bool = Field(default=False, alias="RANK_ARTIST_ALBUMS")
    artist_album_groups: Optional[str] = Field(default=None, alias="ARTIST_ALBUM_GROUPS")
    app_port: int = Field(default=8080, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )


settings = Settings()
