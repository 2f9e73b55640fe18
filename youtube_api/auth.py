import json
import logging
import os
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from google_auth_oauthlib.flow import InstalledAppFlow

from .exceptions import ClientSecretsError, TokenExchangeError
from .token_manager import TokenInfo, TokenManager

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
YOUTUBE_READONLY_SCOPE = "https://www.googleapis.com/auth/youtube.readonly"

DEFAULT_CLIENT_SECRETS_FILE = "credentials.json"


@dataclass(frozen=True)
class ClientSecrets:
    client_id: str
    client_secret: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    @staticmethod
    def from_client_config(client_config: Dict[str, Any]) -> "ClientSecrets":
        """Pick the installed/web section out of a Google client config."""
        section = client_config.get("installed") or client_config.get("web") or {}
        return ClientSecrets(
            client_id=str(section.get("client_id") or ""),
            client_secret=str(section.get("client_secret") or ""),
            auth_uri=str(section.get("auth_uri") or GOOGLE_AUTH_URI),
            token_uri=str(section.get("token_uri") or GOOGLE_TOKEN_URI),
        )


def load_client_config(path: str, scopes: Optional[List[str]] = None) -> Dict[str, Any]:
    """Read the downloaded client secrets file. Any failure raises ClientSecretsError.

    Returns the {"installed": {...}} or {"web": {...}} mapping that
    InstalledAppFlow.from_client_config accepts.
    """

    try:
        flow = InstalledAppFlow.from_client_secrets_file(path, scopes=scopes or [YOUTUBE_READONLY_SCOPE])
    except FileNotFoundError as e:
        raise ClientSecretsError(f"Unable to read client secret file {path}: file not found") from e
    except (OSError, ValueError, TypeError, KeyError) as e:
        raise ClientSecretsError(f"Unable to parse client secret file {path}: {e}") from e

    if not str(flow.client_config.get("client_secret") or "").strip():
        raise ClientSecretsError(f"Client secret file {path} has no client_secret.")

    return {flow.client_type: dict(flow.client_config)}


def client_secrets_path(config: Dict[str, Any]) -> str:
    return os.path.expanduser(str((config or {}).get("youtube_client_secrets_file") or DEFAULT_CLIENT_SECRETS_FILE))


def configured_scopes(config: Dict[str, Any]) -> List[str]:
    scopes = [str(s).strip() for s in ((config or {}).get("youtube_scopes") or []) if str(s).strip()]
    return scopes or [YOUTUBE_READONLY_SCOPE]


def check_youtube_credentials(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate YouTube auth config fields and return a structured status dict."""

    config = config or {}
    mode = str(config.get("youtube_auth_mode") or "oauth")
    secrets_file = client_secrets_path(config)

    if mode == "api_key":
        ok = bool(str(config.get("youtube_api_key") or "").strip())
        return {
            "ok": ok,
            "mode": mode,
            "client_secrets_file": secrets_file,
            "message": "API key is set." if ok else "youtube_auth_mode is api_key but youtube_api_key is empty.",
        }

    try:
        load_client_config(secrets_file)
    except ClientSecretsError as e:
        return {"ok": False, "mode": mode, "client_secrets_file": secrets_file, "message": str(e)}

    return {
        "ok": True,
        "mode": mode,
        "client_secrets_file": secrets_file,
        "message": "YouTube client secrets look OK.",
    }


def youtube_app_setup_instructions(*, redirect_uri: str = "http://localhost:8080/") -> str:
    """Return user-facing setup instructions for creating a Google Cloud OAuth client."""

    redirect_uri = str(redirect_uri or "").strip() or "http://localhost:8080/"
    return (
        "YouTube API setup:\n"
        "1) Go to https://console.cloud.google.com/apis/library/youtube.googleapis.com and enable the API\n"
        "2) Under Credentials, create an OAuth client ID of type 'Desktop app'\n"
        f"3) If you use a 'Web application' client instead, add this redirect URI: {redirect_uri}\n"
        "4) Download the client JSON and save it as credentials.json (or set youtube_client_secrets_file)\n\n"
        "Notes:\n"
        "- Read-only scope is requested; nothing on your channel is modified.\n"
        "- For public playlists only, an API key (youtube_auth_mode=api_key) is enough.\n"
    )


class YouTubeOAuth:
    """Google OAuth (Authorization Code, loopback redirect) helper.

    Holds the client config the consent flow is built from, and refreshes
    cached credentials against the token endpoint.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        client_config: Optional[Dict[str, Any]] = None,
        token_manager: Optional[TokenManager] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config or {}
        self.scopes = configured_scopes(self.config)
        if client_config is None:
            client_config = load_client_config(client_secrets_path(self.config), self.scopes)
        self.client_config = client_config
        self.client_secrets = ClientSecrets.from_client_config(client_config)
        self.token_manager = token_manager or TokenManager.from_config(self.config)
        self.http_client = http_client

    @staticmethod
    def generate_state() -> str:
        return secrets.token_urlsafe(16).rstrip("=")

    def refresh_access_token(self, *, refresh_token: str) -> TokenInfo:
        payload = self._post_form(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_secrets.client_id,
                "client_secret": self.client_secrets.client_secret,
            },
        )

        token = TokenInfo.from_token_response(payload)

        # Google omits refresh_token on refresh; keep existing.
        if not token.refresh_token:
            token = TokenInfo(
                access_token=token.access_token,
                token_type=token.token_type,
                expires_at=token.expires_at,
                refresh_token=refresh_token,
                scope=token.scope,
            )

        if not token.access_token:
            raise TokenExchangeError(f"Token refresh returned no access_token: {payload}")

        self.token_manager.save(token)
        logger.info("Refreshed YouTube access token")
        return token

    def load_cached_token(self) -> Optional[TokenInfo]:
        return self.token_manager.load()

    def _post_form(self, form: Dict[str, Any]) -> Dict[str, Any]:
        url = self.client_secrets.token_uri
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}
        timeout = float(self.config.get("youtube_request_timeout", 30))

        try:
            if self.http_client is not None:
                resp = self.http_client.post(url, data=data)
            else:
                with httpx.Client(timeout=timeout, follow_redirects=False) as client:
                    resp = client.post(url, data=data)
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Token request failed: {e}") from e

        if resp.status_code >= 400:
            raise TokenExchangeError(f"Token request failed (HTTP {resp.status_code}): {resp.text}")

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise TokenExchangeError(f"Token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict):
            raise TokenExchangeError(f"Token response was not an object: {payload}")

        return payload
