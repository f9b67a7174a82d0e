"""Exception classes for the playlist builder.

Hierarchy:
    SpotifyPlaylistError (base)
        ConfigError - bad or missing config.json
        PlaylistSpecError - bad or missing playlist input file
        AuthError
            AuthDeniedError - user (or Spotify) refused consent
            NoCodeError - redirect carried neither code nor error
            TokenGrantError
                AuthExchangeError - authorization_code grant rejected
                AuthRefreshError - refresh_token grant rejected
        SpotifyApiError - Web API call returned a non-success status
            SearchError
            ProfileError
            PlaylistCreateError
            AddTracksError
        NoTracksResolvedError - nothing in the playlist could be resolved

Every one of these is fatal for the current run.
"""

from typing import Any, Dict, Optional


class SpotifyPlaylistError(Exception):
    """Base exception for all playlist builder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with extra context (status codes, paths, ...).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(SpotifyPlaylistError):
    pass


class PlaylistSpecError(SpotifyPlaylistError):
    pass


class AuthError(SpotifyPlaylistError):
    pass


class AuthDeniedError(AuthError):
    pass


class NoCodeError(AuthError):
    pass


class TokenGrantError(AuthError):
    """The token endpoint rejected a grant.

    `body` holds the raw response text from the token endpoint.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message, details={"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class AuthExchangeError(TokenGrantError):
    """Raised when Spotify rejects the authorization_code grant."""


class AuthRefreshError(TokenGrantError):
    """Raised when Spotify rejects the refresh_token grant."""


class SpotifyApiError(SpotifyPlaylistError):
    """A Web API call returned a non-success HTTP status (or failed in transport)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message, details={"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class SearchError(SpotifyApiError):
    pass


class ProfileError(SpotifyApiError):
    pass


class PlaylistCreateError(SpotifyApiError):
    pass


class AddTracksError(SpotifyApiError):
    """Raised on the first failing insertion chunk.

    `inserted` is the number of tracks already added by earlier chunks;
    they are left in the playlist.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "", inserted: int = 0) -> None:
        super().__init__(message, status_code=status_code, body=body)
        self.inserted = inserted
        self.details["inserted"] = inserted


class NoTracksResolvedError(SpotifyPlaylistError):
    pass
