"""Spotify Web API integration (OAuth authorization code flow).

Token lifecycle (token_manager, auth, callback_server, authorizer) plus a
small bearer-authenticated client for the endpoints the playlist builder uses.
"""

from .auth import SpotifyConfig, SpotifyOAuth
from .authorizer import Authorizer
from .client import SpotifyClient
from .token_manager import TokenInfo, TokenManager

__all__ = [
    "Authorizer",
    "SpotifyClient",
    "SpotifyConfig",
    "SpotifyOAuth",
    "TokenInfo",
    "TokenManager",
]
