import logging
from typing import Callable, Optional

from utils.logger import log_info, log_success

from .auth import SpotifyConfig, SpotifyOAuth
from .callback_server import wait_for_authorization_code
from .errors import AuthRefreshError
from .token_manager import TokenInfo, TokenManager, now_ms

logger = logging.getLogger(__name__)

CodeProvider = Callable[[str, str], str]


class Authorizer:
    """Hands out a usable access token, refreshing or re-authorizing as needed.

    Three paths from authorize():
      - nothing stored: interactive browser flow, exchange the code, persist
      - stored and not expired: return it untouched, no network
      - stored and expired: refresh, keep the old refresh token if Spotify
        didn't rotate it, persist

    The stored token is only overwritten after a grant succeeds, so a failed
    refresh leaves the previous file as it was.
    """

    def __init__(
        self,
        config: SpotifyConfig,
        *,
        oauth: Optional[SpotifyOAuth] = None,
        token_manager: Optional[TokenManager] = None,
        code_provider: Optional[CodeProvider] = None,
        skew_ms: int = 0,
    ):
        self.config = config
        self.oauth = oauth or SpotifyOAuth(config)
        self.token_manager = token_manager or TokenManager(cache_path=config.token_path)
        # (redirect_uri, auth_url) -> code
        self.code_provider = code_provider or wait_for_authorization_code
        self.skew_ms = int(skew_ms)

    def authorize(self, *, now: Optional[int] = None) -> TokenInfo:
        token = self.token_manager.load()

        if token is None:
            return self._authorize_interactively()

        now_ts = now_ms() if now is None else int(now)
        if not token.is_expired(now=now_ts, skew_ms=self.skew_ms):
            logger.debug("Using cached Spotify token (expires_at=%s)", token.expires_at)
            return token

        return self._refresh(token, now_ts)

    def _refresh(self, token: TokenInfo, now: int) -> TokenInfo:
        if not token.refresh_token:
            raise AuthRefreshError(
                "Spotify token expired and no refresh_token is available. Run again with --reauth."
            )

        log_info("Access token expired, refreshing...")
        refreshed = self.oauth.refresh(token.refresh_token, now=now)
        self.token_manager.save(refreshed)
        return refreshed

    def _authorize_interactively(self) -> TokenInfo:
        auth_url = self.oauth.get_authorize_url(show_dialog=True)
        code = self.code_provider(self.config.redirect_uri, auth_url)
        token = self.oauth.exchange_code(code)
        self.token_manager.save(token)
        log_success("Spotify authorization complete.")
        return token
