"""YouTube Data API integration (OAuth loopback flow or API key).

Entry points:
- obtain_client(): authorized YouTubeClient for the configured strategy
- YouTubeClient.list_my_playlists() / list_playlist_items(): fully paged listings
"""

from .auth import YouTubeOAuth
from .bootstrap import obtain_client, run_interactive_flow
from .consent_flow import OAuthConsentSession
from .client import YouTubeClient
from .credentials import APIKeyCredentials, OAuthCredentials
from .exceptions import (
    APIRequestError,
    AuthorizationError,
    AuthorizationTimeoutError,
    ClientSecretsError,
    TokenExchangeError,
    YouTubeAPIError,
)
from .token_manager import TokenInfo, TokenManager

__all__ = [
    "YouTubeOAuth",
    "obtain_client",
    "run_interactive_flow",
    "OAuthConsentSession",
    "YouTubeClient",
    "APIKeyCredentials",
    "OAuthCredentials",
    "APIRequestError",
    "AuthorizationError",
    "AuthorizationTimeoutError",
    "ClientSecretsError",
    "TokenExchangeError",
    "YouTubeAPIError",
    "TokenInfo",
    "TokenManager",
]
