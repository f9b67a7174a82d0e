import json
import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Type

import httpx

from .errors import (
    AddTracksError,
    PlaylistCreateError,
    ProfileError,
    SearchError,
    SpotifyApiError,
)
from .token_manager import TokenInfo


logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyClient:
    """Thin Spotify Web API client on top of httpx.

    This client expects an OAuth access token already obtained by the
    Authorizer. Calls are made one at a time and are never retried: a
    non-success status is raised as the SpotifyApiError subclass the caller
    asked for, carrying the raw response body.
    """

    def __init__(self, token: TokenInfo, *, http_client: Optional[httpx.Client] = None):
        self.token = token
        self._http_client = http_client
        self._owns_client = http_client is None

    def __enter__(self) -> "SpotifyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=30.0, follow_redirects=False)
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    # -----------------
    # HTTP helpers
    # -----------------

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        error_cls: Type[SpotifyApiError] = SpotifyApiError,
        action: str = "request",
    ) -> Dict[str, Any]:
        """Make a Spotify Web API request and return parsed JSON."""

        url = f"{SPOTIFY_API_BASE_URL}{path}"
        headers = {
            "Authorization": f"{self.token.token_type} {self.token.access_token}",
            "Accept": "application/json",
        }
        if params:
            params = {k: str(v) for k, v in params.items() if v is not None}

        logger.debug("%s %s params=%s", method.upper(), path, params)
        try:
            resp = self.http_client.request(method.upper(), url, params=params, json=json_body, headers=headers)
        except httpx.HTTPError as e:
            raise error_cls(f"Spotify API {action} failed: {e}") from e

        if not resp.is_success:
            raise error_cls(
                f"Spotify API {action} failed (HTTP {resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        if not resp.content:
            return {}

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise error_cls(
                f"Spotify API {action} response was not JSON (status {resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        return payload if isinstance(payload, dict) else {}

    # -----------------
    # Convenience endpoints
    # -----------------

    def me(self) -> Dict[str, Any]:
        return self.request_json("GET", "/me", error_cls=ProfileError, action="profile lookup")

    def search_tracks(self, query: str, *, limit: int = 1) -> List[Dict[str, Any]]:
        """Return the track items matching a free-text query (at most `limit`)."""

        payload = self.request_json(
            "GET",
            "/search",
            params={"q": query, "type": "track", "limit": limit},
            error_cls=SearchError,
            action="search",
        )
        items = (payload.get("tracks") or {}).get("items") or []
        return [x for x in items if isinstance(x, dict)]

    def create_playlist(self, user_id: str, name: str, *, description: str = "", public: bool = False) -> Dict[str, Any]:
        return self.request_json(
            "POST",
            f"/users/{urllib.parse.quote(str(user_id), safe='')}/playlists",
            json_body={"name": name, "description": description, "public": public},
            error_cls=PlaylistCreateError,
            action="playlist creation",
        )

    def add_items_to_playlist(self, playlist_id: str, uris: List[str]) -> Dict[str, Any]:
        """Append up to 100 track URIs to a playlist in one call."""

        return self.request_json(
            "POST",
            f"/playlists/{playlist_id}/tracks",
            json_body={"uris": list(uris)},
            error_cls=AddTracksError,
            action="add tracks",
        )
