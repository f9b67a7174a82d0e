import json
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Type

import httpx

from .errors import AuthExchangeError, AuthRefreshError, TokenGrantError
from .token_manager import DEFAULT_TOKEN_CACHE_PATH, TokenInfo

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"
SPOTIFY_TOKEN_URL = f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"
DEFAULT_SCOPES: Tuple[str, ...] = (
    "playlist-modify-private",
    "playlist-modify-public",
    "user-read-private",
)


@dataclass(frozen=True)
class SpotifyConfig:
    """Static credentials and paths, built once at startup and passed explicitly."""

    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: Tuple[str, ...] = DEFAULT_SCOPES
    token_path: str = DEFAULT_TOKEN_CACHE_PATH


def spotify_app_setup_instructions(*, redirect_uri: str = DEFAULT_REDIRECT_URI) -> str:
    """Return user-facing setup instructions for creating a Spotify Developer app."""

    redirect_uri = str(redirect_uri or "").strip() or DEFAULT_REDIRECT_URI
    return (
        "Spotify app setup:\n"
        "1) Go to https://developer.spotify.com/dashboard\n"
        "2) Create an app (or select an existing app)\n"
        f"3) Add this Redirect URI in the app settings: {redirect_uri}\n"
        "4) Copy the Client ID and Client Secret into config.json as clientId / clientSecret\n"
        f'5) Set redirectUri in config.json to "{redirect_uri}"\n\n'
        "Notes:\n"
        "- Redirect URI must match *exactly* what you configure in the Spotify dashboard.\n"
        "- The redirect URI must point at this machine; a one-shot listener captures the code.\n"
    )


def extract_code_from_redirect_url(redirect_url: str) -> Dict[str, str]:
    """Parse a redirect URL and return {"code": ..., "state": ..., "error": ...} (missing keys omitted)."""

    parsed = urllib.parse.urlparse(str(redirect_url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    out: Dict[str, str] = {}
    if qs.get("code"):
        out["code"] = str(qs["code"][0])
    if qs.get("state"):
        out["state"] = str(qs["state"][0])
    if qs.get("error"):
        out["error"] = str(qs["error"][0])
    return out


class SpotifyOAuth:
    """Spotify OAuth (Authorization Code, confidential client) helper.

    Talks only to the accounts service: builds the consent URL and performs
    the authorization_code and refresh_token grants. Persistence is the
    caller's job (see Authorizer).
    """

    def __init__(self, config: SpotifyConfig, *, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.http_client = http_client

    def get_authorize_url(self, *, scopes: Optional[Iterable[str]] = None, show_dialog: bool = True) -> str:
        scope_list = list(scopes if scopes is not None else self.config.scopes)
        scope_str = " ".join([str(s).strip() for s in scope_list if str(s).strip()])

        params: Dict[str, str] = {
            "client_id": self.config.client_id,
            "response_type": "code",
            "redirect_uri": self.config.redirect_uri,
            "show_dialog": "true" if show_dialog else "false",
        }
        if scope_str:
            params["scope"] = scope_str

        return f"{SPOTIFY_ACCOUNTS_BASE_URL}/authorize?{urllib.parse.urlencode(params)}"

    def exchange_code(self, code: str, *, now: Optional[int] = None) -> TokenInfo:
        """Trade an authorization code for a fresh token triple."""

        payload = self._post_form(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
            },
            error_cls=AuthExchangeError,
            action="token exchange",
        )
        token = TokenInfo.from_spotify_token_response(payload, now=now)
        if not token.access_token:
            raise AuthExchangeError(f"Spotify token exchange failed: {payload}", body=json.dumps(payload))
        return token

    def refresh(self, refresh_token: str, *, now: Optional[int] = None) -> TokenInfo:
        """Run the refresh_token grant.

        Spotify may omit refresh_token on refresh; the one passed in is kept.
        """

        payload = self._post_form(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
            },
            error_cls=AuthRefreshError,
            action="token refresh",
        )
        token = TokenInfo.from_spotify_token_response(payload, now=now, previous_refresh_token=refresh_token)
        if not token.access_token:
            raise AuthRefreshError(f"Spotify token refresh failed: {payload}", body=json.dumps(payload))
        return token

    def _post_form(
        self,
        form: Dict[str, Any],
        *,
        error_cls: Type[TokenGrantError],
        action: str,
    ) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}
        logger.debug("POST %s grant_type=%s", SPOTIFY_TOKEN_URL, data.get("grant_type"))

        try:
            if self.http_client is not None:
                resp = self.http_client.post(
                    SPOTIFY_TOKEN_URL,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
            else:
                with httpx.Client(timeout=30.0, follow_redirects=False) as client:
                    resp = client.post(
                        SPOTIFY_TOKEN_URL,
                        data=data,
                        headers={"Content-Type": "application/x-www-form-urlencoded"},
                    )
        except httpx.HTTPError as e:
            raise error_cls(f"Spotify {action} request failed: {e}") from e

        if not resp.is_success:
            raise error_cls(
                f"Spotify {action} failed (HTTP {resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise error_cls(
                f"Spotify {action} response was not JSON: {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        if not isinstance(payload, dict):
            raise error_cls(
                f"Spotify {action} response was not an object: {payload}",
                status_code=resp.status_code,
                body=resp.text,
            )

        return payload
