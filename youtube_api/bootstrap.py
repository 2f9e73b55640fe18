"""Obtain an authorized YouTubeClient.

Two strategies sit behind obtain_client():

- "oauth": reuse the cached credential if one parses, otherwise run the
  interactive loopback consent flow and persist the result.
- "api_key": wrap a static API key; no network, no persistence.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .auth import YouTubeOAuth
from .client import YouTubeClient
from .consent_flow import OAuthConsentSession
from .credentials import APIKeyCredentials, OAuthCredentials
from .exceptions import ClientSecretsError
from .token_manager import TokenInfo

logger = logging.getLogger(__name__)

AUTH_MODES = ("oauth", "api_key")


def run_interactive_flow(
    auth: YouTubeOAuth,
    *,
    notify: Callable[[str], Any] = print,
    open_browser: bool = False,
) -> TokenInfo:
    """Run the loopback authorization-code flow and persist the credential.

    Blocks until the browser redirect arrives or youtube_auth_timeout elapses;
    the local server is shut down either way.
    """

    config = auth.config
    session = OAuthConsentSession(auth, notify=notify)
    token = session.run(
        host=str(config.get("youtube_redirect_host") or "localhost"),
        port=int(config.get("youtube_redirect_port", 8080)),
        timeout=float(config.get("youtube_auth_timeout", 300)),
        open_browser=open_browser,
    )

    logger.info(f"Saving token to {auth.token_manager.cache_path}")
    auth.token_manager.save(token)
    return token


def obtain_client(
    config: Dict[str, Any],
    mode: Optional[str] = None,
    *,
    notify: Callable[[str], Any] = print,
    open_browser: Optional[bool] = None,
    auth: Optional[YouTubeOAuth] = None,
) -> YouTubeClient:
    """Return a YouTubeClient authorized with the requested strategy.

    mode and open_browser fall back to youtube_auth_mode and
    youtube_open_browser when left as None. auth lets a caller supply an
    already-loaded YouTubeOAuth instead of reading the client secrets file.
    """

    config = config or {}
    mode = str(mode or config.get("youtube_auth_mode") or "oauth")
    if mode not in AUTH_MODES:
        raise ValueError(f"Unknown auth mode: {mode}. Available: {list(AUTH_MODES)}")

    if mode == "api_key":
        api_key = str(config.get("youtube_api_key") or "").strip()
        if not api_key:
            raise ClientSecretsError("youtube_api_key is not set.")
        return YouTubeClient(APIKeyCredentials(api_key), config)

    auth = auth or YouTubeOAuth(config)
    auto_refresh = bool(config.get("youtube_auto_refresh", True))

    token = auth.load_cached_token()
    if token is not None:
        logger.debug(f"Using cached token from {auth.token_manager.cache_path}")
        return YouTubeClient(OAuthCredentials(token, auth=auth, auto_refresh=auto_refresh), config)

    if open_browser is None:
        open_browser = bool(config.get("youtube_open_browser", False))

    token = run_interactive_flow(auth, notify=notify, open_browser=open_browser)
    return YouTubeClient(OAuthCredentials(token, auth=auth, auto_refresh=auto_refresh), config)
