from typing import Optional

import httpx

from spotify_api.auth import SpotifyConfig
from spotify_api.authorizer import Authorizer
from spotify_api.client import SpotifyClient

from .builder import PlaylistBuilder, PlaylistResult
from .loader import PlaylistSpec
from .resolver import TrackResolver


def import_playlist(
    config: SpotifyConfig,
    spec: PlaylistSpec,
    *,
    authorizer: Optional[Authorizer] = None,
    http_client: Optional[httpx.Client] = None,
    show_progress: bool = False,
) -> PlaylistResult:
    """Authorize, resolve every entry, then create and fill the playlist.

    Nothing is created on Spotify unless at least one entry resolved.
    """
    authorizer = authorizer or Authorizer(config)
    token = authorizer.authorize()

    with SpotifyClient(token, http_client=http_client) as client:
        track_ids = TrackResolver(client).resolve_all(spec.tracks, show_progress=show_progress)
        return PlaylistBuilder(client).build(spec.name, track_ids)
