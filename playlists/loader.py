import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from spotify_api.errors import PlaylistSpecError


@dataclass(frozen=True)
class PlaylistSpec:
    """Playlist name plus its entries (share URLs or search queries), in order."""

    name: str
    tracks: Tuple[str, ...]

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PlaylistSpec":
        if not isinstance(data, dict):
            raise PlaylistSpecError("Invalid JSON format: must be an object with playlistName and tracks")

        name = data.get("playlistName")
        tracks = data.get("tracks")
        if not isinstance(name, str) or not name.strip():
            raise PlaylistSpecError("Invalid JSON format: playlistName must be a non-empty string")
        if not isinstance(tracks, list):
            raise PlaylistSpecError("Invalid JSON format: tracks must be an array")

        bad = [t for t in tracks if not isinstance(t, str)]
        if bad:
            raise PlaylistSpecError(f"Invalid JSON format: tracks must be strings, got invalid elements: {bad}")

        entries = tuple(t.strip() for t in tracks if t.strip())
        return PlaylistSpec(name=name.strip(), tracks=entries)


def load_playlist_spec(path: str) -> PlaylistSpec:
    """Read a playlist file of the form {"playlistName": str, "tracks": [str, ...]}."""
    if not os.path.exists(path):
        raise PlaylistSpecError(f"Playlist file {path} not found.", details={"path": path})

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise PlaylistSpecError(f"Playlist file {path} contains invalid JSON: {e}", details={"path": path}) from e
    except OSError as e:
        raise PlaylistSpecError(f"Could not read playlist file {path}: {e}", details={"path": path}) from e

    return PlaylistSpec.from_dict(data)
