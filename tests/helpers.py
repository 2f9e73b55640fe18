"""Shared fakes for the YouTube API tests (no real network calls)."""

import json
import threading
import urllib.parse
from typing import Callable, List
from unittest import mock

import httpx
import requests

from youtube_api.auth import YouTubeOAuth
from youtube_api.client import YOUTUBE_API_BASE_URL, YouTubeClient
from youtube_api.token_manager import TokenManager

TOKEN_URI = "https://oauth2.example.test/token"

CLIENT_CONFIG = {
    "installed": {
        "client_id": "client-id.apps.googleusercontent.com",
        "client_secret": "client-secret",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": TOKEN_URI,
        "redirect_uris": ["http://localhost"],
    }
}


class RecordingTransport:
    """Wrap a handler in httpx.MockTransport and keep every request it saw."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self, **kwargs) -> httpx.Client:
        return httpx.Client(transport=self.transport, **kwargs)


class FakeTokenEndpoint:
    """Answers the code exchange InstalledAppFlow.fetch_token sends through requests.

    Use patch() as a context manager; requests.Session.send is replaced for its duration.
    """

    def __init__(self, status: int = 200, payload=None):
        self.status = status
        self.payload = payload if payload is not None else {
            "access_token": "ya29.access",
            "token_type": "Bearer",
            "expires_in": 3599,
            "refresh_token": "1//refresh",
        }
        self.requests: List[requests.PreparedRequest] = []

    def _send(self, session, request, **kwargs):
        self.requests.append(request)
        response = requests.Response()
        response.status_code = self.status
        response._content = json.dumps(self.payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def patch(self):
        return mock.patch.object(requests.Session, "send", autospec=True, side_effect=self._send)

    def form(self, index: int = 0) -> dict:
        body = self.requests[index].body
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        return dict(urllib.parse.parse_qsl(body or ""))


def query_params(url: str) -> dict:
    return {k: v[0] for k, v in urllib.parse.parse_qs(urllib.parse.urlparse(url).query).items()}


def simulate_browser(authorize_url: str, **overrides) -> threading.Thread:
    """Follow the authorize URL the way Google would: redirect back with state + code.

    overrides replace (or, when None, drop) the redirect's query parameters.
    """

    qs = query_params(authorize_url)
    params = {"state": qs["state"], "code": "4/0Abrowser"}
    params.update(overrides)
    params = {k: v for k, v in params.items() if v is not None}

    def run():
        with httpx.Client(trust_env=False, timeout=5) as http:
            http.get(qs["redirect_uri"], params=params)

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


def make_api_client(handler, credentials, config=None):
    recorder = RecordingTransport(handler)
    client = YouTubeClient(credentials, config or {}, http_client=recorder.client(base_url=YOUTUBE_API_BASE_URL))
    return client, recorder


def make_oauth(token_handler, cache_path: str, config=None):
    recorder = RecordingTransport(token_handler)
    auth = YouTubeOAuth(
        config or {},
        client_config=CLIENT_CONFIG,
        token_manager=TokenManager(cache_path=cache_path),
        http_client=recorder.client(),
    )
    return auth, recorder


def token_response(access_token: str = "ya29.access", refresh_token: str = "1//refresh") -> httpx.Response:
    payload = {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": 3599,
        "scope": "https://www.googleapis.com/auth/youtube.readonly",
    }
    if refresh_token:
        payload["refresh_token"] = refresh_token
    return httpx.Response(200, json=payload)
