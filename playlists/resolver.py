"""Turn playlist entries into Spotify track ids.

An entry is either a share link (https://open.spotify.com/track/<id>?si=...)
whose id we can read straight off the path, or anything else, which is sent
to the search endpoint as a free-text query and resolved to the top hit.
"""

import re
import urllib.parse
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from tqdm import tqdm

from spotify_api.client import SpotifyClient
from spotify_api.errors import NoTracksResolvedError
from utils.logger import log_info, log_warning

SPOTIFY_WEB_HOST = "open.spotify.com"

# /track/<id> or /intl-xx/track/<id>, trailing slash tolerated
_TRACK_PATH_RE = re.compile(r"^/(?:intl-[A-Za-z-]+/)?track/([^/]+)/?$")


@dataclass(frozen=True)
class DirectId:
    track_id: str


@dataclass(frozen=True)
class NeedsSearch:
    query: str


Resolution = Union[DirectId, NeedsSearch]


def extract_track_id(entry: str) -> Optional[str]:
    """Return the track id of an open.spotify.com track link, else None.

    Malformed URLs count as "not a link", never as an error.
    """
    try:
        parsed = urllib.parse.urlparse(str(entry or "").strip())
        host = (parsed.hostname or "").lower()
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or host != SPOTIFY_WEB_HOST:
        return None

    match = _TRACK_PATH_RE.match(parsed.path)
    return match.group(1) if match else None


def classify_entry(entry: str) -> Resolution:
    track_id = extract_track_id(entry)
    if track_id:
        return DirectId(track_id)
    return NeedsSearch(str(entry or "").strip())


class TrackResolver:
    """Resolves entries one by one, in order, using at most one search per entry."""

    def __init__(self, client: SpotifyClient):
        self.client = client

    def resolve(self, entry: str) -> Optional[str]:
        resolution = classify_entry(entry)
        if isinstance(resolution, DirectId):
            return resolution.track_id

        if not resolution.query:
            log_warning("Skipping blank playlist entry")
            return None

        items = self.client.search_tracks(resolution.query, limit=1)
        track_id = str(items[0].get("id") or "").strip() if items else ""
        if not track_id:
            log_warning(f'Skipping track: "{resolution.query}" (no search results)')
            return None
        return track_id

    def resolve_all(self, entries: Iterable[str], *, show_progress: bool = False) -> List[str]:
        """Resolve every entry, skipping the ones search can't find.

        Raises:
            NoTracksResolvedError: when nothing at all could be resolved.
            SearchError: when a search call itself fails.
        """
        track_ids: List[str] = []
        for entry in tqdm(entries, desc="Resolving", unit="track", disable=not show_progress, leave=False):
            track_id = self.resolve(entry)
            if track_id:
                track_ids.append(track_id)

        if not track_ids:
            raise NoTracksResolvedError("No valid tracks found to add to playlist")

        log_info(f"Resolved {len(track_ids)} track(s).")
        return track_ids
