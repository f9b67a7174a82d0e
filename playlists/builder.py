from dataclasses import dataclass
from typing import List, Sequence

from spotify_api.client import SpotifyClient
from spotify_api.errors import AddTracksError, PlaylistCreateError, ProfileError
from utils.logger import log_info, log_success

# Spotify accepts at most 100 URIs per add-items call.
MAX_TRACKS_PER_REQUEST = 100
PLAYLIST_DESCRIPTION = "Created via API"


@dataclass(frozen=True)
class PlaylistResult:
    playlist_id: str
    name: str
    track_count: int


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def track_uri(track_id: str) -> str:
    return f"spotify:track:{track_id}"


class PlaylistBuilder:
    """Creates a private playlist for the current user and fills it."""

    def __init__(self, client: SpotifyClient, *, chunk_size: int = MAX_TRACKS_PER_REQUEST):
        self.client = client
        self.chunk_size = min(int(chunk_size), MAX_TRACKS_PER_REQUEST)

    def current_user_id(self) -> str:
        user_id = str(self.client.me().get("id") or "").strip()
        if not user_id:
            raise ProfileError("Spotify profile response did not include a user id")
        return user_id

    def create_playlist(self, user_id: str, name: str) -> str:
        payload = self.client.create_playlist(user_id, name, description=PLAYLIST_DESCRIPTION, public=False)
        playlist_id = str(payload.get("id") or "").strip()
        if not playlist_id:
            raise PlaylistCreateError(f"Spotify did not return an id for playlist {name!r}: {payload}")
        return playlist_id

    def add_tracks(self, playlist_id: str, track_ids: Sequence[str]) -> int:
        """Append tracks in order, one chunk at a time.

        Stops at the first failing chunk; tracks from earlier chunks stay in
        the playlist and later chunks are never sent.
        """
        inserted = 0
        for chunk in chunked(track_ids, self.chunk_size):
            try:
                self.client.add_items_to_playlist(playlist_id, [track_uri(t) for t in chunk])
            except AddTracksError as e:
                raise AddTracksError(
                    f"Failed to add tracks after {inserted} of {len(track_ids)}: {e.message}",
                    status_code=e.status_code,
                    body=e.body,
                    inserted=inserted,
                ) from e
            inserted += len(chunk)
        return inserted

    def build(self, name: str, track_ids: Sequence[str]) -> PlaylistResult:
        user_id = self.current_user_id()
        playlist_id = self.create_playlist(user_id, name)
        log_info(f'Created playlist "{name}" with ID: {playlist_id}')

        added = self.add_tracks(playlist_id, track_ids)
        log_success(f"Added {added} tracks to playlist.")
        return PlaylistResult(playlist_id=playlist_id, name=name, track_count=added)
