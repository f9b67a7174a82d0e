"""Playlist input, track resolution and playlist creation."""

from .builder import PlaylistBuilder, PlaylistResult
from .loader import PlaylistSpec, load_playlist_spec
from .resolver import DirectId, NeedsSearch, TrackResolver, classify_entry, extract_track_id
from .workflow import import_playlist

__all__ = [
    "PlaylistBuilder",
    "PlaylistResult",
    "PlaylistSpec",
    "load_playlist_spec",
    "DirectId",
    "NeedsSearch",
    "TrackResolver",
    "classify_entry",
    "extract_track_id",
    "import_playlist",
]
