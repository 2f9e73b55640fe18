import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from .credentials import APIKeyCredentials, OAuthCredentials
from .exceptions import APIRequestError, AuthorizationError

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"

# API maximum for playlists.list / playlistItems.list.
MAX_PAGE_SIZE = 50
DEFAULT_PARTS = ("snippet", "contentDetails")

Credentials = Union[OAuthCredentials, APIKeyCredentials]


def _error_reason(body: str) -> Optional[str]:
    """Pull the first error reason out of Google's error envelope."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return None
    errors = error.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("reason"):
        return str(errors[0]["reason"])
    return error.get("status") or None


class YouTubeClient:
    """Thin YouTube Data API v3 client.

    Authentication is delegated to a credentials object (OAuth bearer token or
    static API key). High-level helpers return *fully paged* lists; any failed
    page aborts the call with no partial result and no retry.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[Dict[str, Any]] = None,
        *,
        http_client: Optional[httpx.Client] = None,
    ):
        self.credentials = credentials
        self.config = config or {}
        self._http = http_client or httpx.Client(
            base_url=YOUTUBE_API_BASE_URL,
            timeout=float(self.config.get("youtube_request_timeout", 30)),
        )

    @property
    def page_size(self) -> int:
        return max(1, min(MAX_PAGE_SIZE, int(self.config.get("youtube_page_size") or MAX_PAGE_SIZE)))

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "YouTubeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -----------------
    # HTTP helpers
    # -----------------

    def request_json(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a YouTube Data API request and return parsed JSON.

        Non-2xx responses raise APIRequestError; transport errors from httpx
        propagate unchanged.
        """

        query = {k: v for k, v in (params or {}).items() if v is not None}
        headers = {"Accept": "application/json"}
        self.credentials.apply(headers, query)

        resp = self._http.request(method.upper(), path, params=query, headers=headers)

        if resp.status_code >= 400:
            raise APIRequestError(resp.status_code, resp.text, reason=_error_reason(resp.text))

        if not resp.content:
            return {}

        try:
            return resp.json()
        except ValueError as e:
            raise APIRequestError(resp.status_code, resp.text, reason="invalidJson") from e

    def _paginate(self, path: str, *, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Follow nextPageToken until it is empty, concatenating items in order."""

        out: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        pages = 0

        while True:
            page_params = {**params, "maxResults": self.page_size}
            if page_token:
                page_params["pageToken"] = page_token

            page = self.request_json("GET", path, params=page_params)
            pages += 1
            out.extend(page.get("items") or [])

            page_token = page.get("nextPageToken") or None
            if not page_token:
                break

        logger.debug(f"Fetched {len(out)} items from {path} in {pages} page(s)")
        return out

    # -----------------
    # Single pages
    # -----------------

    def playlists_page(self, *, page_token: Optional[str] = None) -> Dict[str, Any]:
        self._require_user_credentials()
        return self.request_json(
            "GET",
            "/playlists",
            params={
                "part": ",".join(DEFAULT_PARTS),
                "mine": "true",
                "maxResults": self.page_size,
                "pageToken": page_token or None,
            },
        )

    def playlist_items_page(self, playlist_id: str, *, page_token: Optional[str] = None) -> Dict[str, Any]:
        return self.request_json(
            "GET",
            "/playlistItems",
            params={
                "part": ",".join(DEFAULT_PARTS),
                "playlistId": playlist_id,
                "maxResults": self.page_size,
                "pageToken": page_token or None,
            },
        )

    # -----------------
    # High-level helpers (fully paged)
    # -----------------

    def list_my_playlists(self) -> List[Dict[str, Any]]:
        """Return every playlist owned by the authenticated user."""
        self._require_user_credentials()
        return self._paginate("/playlists", params={"part": ",".join(DEFAULT_PARTS), "mine": "true"})

    def list_playlist_items(self, playlist_id: str) -> List[Dict[str, Any]]:
        """Return every item of a playlist, in playlist order."""
        if not str(playlist_id or "").strip():
            raise ValueError("playlist_id is required")
        return self._paginate(
            "/playlistItems",
            params={"part": ",".join(DEFAULT_PARTS), "playlistId": str(playlist_id).strip()},
        )

    def _require_user_credentials(self) -> None:
        if not getattr(self.credentials, "supports_user_data", False):
            raise AuthorizationError("Listing your own playlists requires OAuth credentials, not an API key.")
