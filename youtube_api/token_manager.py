import json
import os
import time
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Dict, Optional


DEFAULT_TOKEN_CACHE_PATH = os.path.join("~", ".youtube_token.json")


@dataclass(frozen=True)
class TokenInfo:
    """Canonical credential payload stored by TokenManager.

    expires_at is an epoch timestamp; 0 means the expiry is unknown.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_at: float = 0.0
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @staticmethod
    def from_token_response(payload: Dict[str, Any], *, now: Optional[float] = None) -> "TokenInfo":
        """Convert a Google token endpoint response into TokenInfo.

        Google returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (only on the first consent with access_type=offline)
        - scope (space-delimited string)
        """

        now_ts = float(time.time() if now is None else now)
        expires_in = payload.get("expires_in")

        return TokenInfo(
            access_token=str(payload.get("access_token", "")),
            token_type=str(payload.get("token_type") or "Bearer"),
            expires_at=(now_ts + float(expires_in)) if expires_in else 0.0,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )

    @staticmethod
    def from_google_credentials(credentials: Any) -> "TokenInfo":
        """Convert the google.oauth2 Credentials an InstalledAppFlow hands back.

        Their expiry is a naive UTC datetime (or None).
        """

        expiry = getattr(credentials, "expiry", None)
        scopes = getattr(credentials, "granted_scopes", None) or getattr(credentials, "scopes", None)

        return TokenInfo(
            access_token=str(credentials.token or ""),
            expires_at=expiry.replace(tzinfo=timezone.utc).timestamp() if expiry else 0.0,
            refresh_token=credentials.refresh_token,
            scope=(scopes if isinstance(scopes, str) else " ".join(scopes)) if scopes else None,
        )

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TokenInfo":
        return TokenInfo(
            access_token=str(data["access_token"]),
            token_type=str(data.get("token_type") or "Bearer"),
            expires_at=float(data.get("expires_at") or 0),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
            "refresh_token": self.refresh_token,
            "scope": self.scope,
        }


class TokenManager:
    """Persists the OAuth credential between runs."""

    def __init__(self, *, cache_path: str = DEFAULT_TOKEN_CACHE_PATH):
        self.cache_path = os.path.expanduser(cache_path)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "TokenManager":
        return cls(cache_path=str((config or {}).get("youtube_token_file") or DEFAULT_TOKEN_CACHE_PATH))

    def load(self) -> Optional[TokenInfo]:
        """Load the cached credential, or None if absent or unparsable.

        No validity check is made here; an expired credential only shows up
        when a request is rejected.
        """
        if not os.path.exists(self.cache_path):
            return None

        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            token = TokenInfo.from_dict(data)
        except (OSError, ValueError, TypeError, KeyError, AttributeError):
            return None

        return token if token.access_token else None

    def save(self, token: TokenInfo) -> None:
        """Persist the credential, overwriting any previous file.

        Filesystem errors propagate.
        """
        parent = os.path.dirname(self.cache_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.cache_path, "w", encoding="utf-8") as f:
            json.dump(token.to_dict(), f, indent=2)

    def clear(self) -> bool:
        try:
            if os.path.exists(self.cache_path):
                os.remove(self.cache_path)
            return True
        except OSError:
            return False

    @staticmethod
    def is_expired(token: TokenInfo, *, skew_seconds: int = 60) -> bool:
        if not token.expires_at:
            return False
        return time.time() >= float(token.expires_at) - float(skew_seconds)
