import json
import math
import os
import tempfile
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


DEFAULT_TOKEN_CACHE_PATH = "spotify_tokens.json"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TokenInfo:
    """Canonical token payload stored by TokenManager.

    expires_at is an absolute instant in epoch milliseconds: the access token
    is safe to use up to and including that instant.
    """

    access_token: str
    refresh_token: Optional[str]
    expires_at: int
    token_type: str = "Bearer"
    scope: Optional[str] = None

    @staticmethod
    def from_spotify_token_response(
        payload: Dict[str, Any],
        *,
        now: Optional[int] = None,
        previous_refresh_token: Optional[str] = None,
    ) -> "TokenInfo":
        """Convert Spotify token response JSON into TokenInfo.

        Spotify returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (omitted on some refreshes)
        - scope (space-delimited string)

        When refresh_token is missing, previous_refresh_token is kept.
        """

        now_ts = now_ms() if now is None else int(now)
        expires_in = float(payload.get("expires_in") or 0)

        return TokenInfo(
            access_token=str(payload.get("access_token") or ""),
            refresh_token=payload.get("refresh_token") or previous_refresh_token,
            expires_at=now_ts + int(expires_in * 1000),
            token_type=str(payload.get("token_type") or "Bearer"),
            scope=payload.get("scope"),
        )

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TokenInfo":
        if not isinstance(data, dict):
            raise ValueError("token payload must be an object")
        access_token = data.get("access_token")
        expires_at = data.get("expires_at")
        if not access_token or expires_at is None or isinstance(expires_at, bool):
            raise ValueError("token payload is missing access_token or expires_at")
        if isinstance(expires_at, float) and not math.isfinite(expires_at):
            raise ValueError("token expires_at must be a finite number")
        return TokenInfo(
            access_token=str(access_token),
            refresh_token=data.get("refresh_token"),
            expires_at=int(expires_at),
            token_type=str(data.get("token_type") or "Bearer"),
            scope=data.get("scope"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "token_type": self.token_type,
            "scope": self.scope,
        }

    def is_expired(self, *, now: Optional[int] = None, skew_ms: int = 0) -> bool:
        """True once `now` is strictly past expires_at (minus an optional skew)."""
        now_ts = now_ms() if now is None else int(now)
        return now_ts > self.expires_at - int(skew_ms)


class TokenManager:
    """Loads and persists the OAuth token triple as a JSON file."""

    def __init__(self, *, cache_path: str = DEFAULT_TOKEN_CACHE_PATH):
        self.cache_path = cache_path

    def ensure_cache_dir(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.cache_path))
        os.makedirs(directory, exist_ok=True)

    def load(self) -> Optional[TokenInfo]:
        """Load cached token info from disk.

        A missing, unreadable or malformed file means "no stored session" and
        returns None.
        """
        if not os.path.exists(self.cache_path):
            return None

        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return None

        try:
            return TokenInfo.from_dict(data)
        except (TypeError, ValueError, OverflowError):
            return None

    def save(self, token: TokenInfo) -> None:
        """Overwrite the token file.

        Writes to a sibling temp file and renames it over the old one, so a
        crash mid-write never leaves a truncated token file behind.
        """
        self.ensure_cache_dir()
        directory = os.path.dirname(os.path.abspath(self.cache_path))
        fd, tmp_path = tempfile.mkstemp(prefix=".spotify_tokens.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(token.to_dict(), f, indent=2)
            os.replace(tmp_path, self.cache_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def clear(self) -> bool:
        if os.path.exists(self.cache_path):
            os.remove(self.cache_path)
            return True
        return False
