"""Errors raised by the YouTube API integration."""

from typing import Optional


class YouTubeAPIError(RuntimeError):
    """Base class for every error raised by youtube_api."""


class ClientSecretsError(YouTubeAPIError):
    """Client secrets (or API key) are missing or cannot be parsed."""


class AuthorizationError(YouTubeAPIError):
    """OAuth authorization did not complete."""


class AuthorizationTimeoutError(AuthorizationError):
    """No callback arrived before the configured timeout."""


class TokenExchangeError(AuthorizationError):
    """Token endpoint rejected the code/refresh exchange."""


class APIRequestError(YouTubeAPIError):
    """YouTube Data API returned a non-2xx response."""

    def __init__(self, status_code: int, body: str = "", *, reason: Optional[str] = None):
        self.status_code = int(status_code)
        self.body = body or ""
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"YouTube API error {self.status_code}{detail}: {self.body}")
