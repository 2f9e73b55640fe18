import logging
from typing import Any, Dict, Optional

from .auth import YouTubeOAuth
from .token_manager import TokenInfo, TokenManager

logger = logging.getLogger(__name__)


class APIKeyCredentials:
    """Static API key sent as the ``key`` query parameter."""

    supports_user_data = False

    def __init__(self, api_key: str):
        self.api_key = api_key

    def apply(self, headers: Dict[str, str], params: Dict[str, Any]) -> None:
        params["key"] = self.api_key


class OAuthCredentials:
    """Bearer token credential, refreshed lazily when a known expiry has passed."""

    supports_user_data = True

    def __init__(
        self,
        token: TokenInfo,
        *,
        auth: Optional[YouTubeOAuth] = None,
        auto_refresh: bool = True,
    ):
        self.token = token
        self.auth = auth
        self.auto_refresh = auto_refresh

    @property
    def token_manager(self) -> Optional[TokenManager]:
        return self.auth.token_manager if self.auth is not None else None

    def get_token(self) -> TokenInfo:
        if not TokenManager.is_expired(self.token):
            return self.token

        if not self.auto_refresh or self.auth is None or not self.token.refresh_token:
            # Send it anyway; the API rejects it and the caller re-authenticates.
            logger.debug("YouTube token expired and cannot be refreshed")
            return self.token

        self.token = self.auth.refresh_access_token(refresh_token=self.token.refresh_token)
        return self.token

    def apply(self, headers: Dict[str, str], params: Dict[str, Any]) -> None:
        token = self.get_token()
        headers["Authorization"] = f"{token.token_type} {token.access_token}"
