"""Loopback consent flow built on google_auth_oauthlib's InstalledAppFlow.

One OAuthConsentSession is created per interactive login. It owns the state
value that InstalledAppFlow checks the redirect against, and turns the
oauthlib failures into this package's exceptions.
"""

import logging
from typing import Any, Callable, Optional

import requests
from google_auth_oauthlib.flow import InstalledAppFlow
from oauthlib.oauth2.rfc6749.errors import (
    AccessDeniedError,
    MismatchingStateError,
    MissingCodeError,
    OAuth2Error,
)

from .auth import YouTubeOAuth
from .exceptions import AuthorizationError, AuthorizationTimeoutError, TokenExchangeError
from .token_manager import TokenInfo

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Authorization successful! You can close this window."
AUTH_PROMPT = "Visit the URL for the auth dialog:"


class LoopbackFlow(InstalledAppFlow):
    """InstalledAppFlow that hands the authorization URL to a callback instead of print()."""

    on_authorization_url: Optional[Callable[[str], Any]] = None

    def authorization_url(self, **kwargs):
        url, state = super().authorization_url(**kwargs)
        if self.on_authorization_url is not None:
            self.on_authorization_url(url)
        return url, state


class OAuthConsentSession:
    """State for one interactive authorization attempt."""

    def __init__(
        self,
        auth: YouTubeOAuth,
        *,
        state: Optional[str] = None,
        notify: Callable[[str], Any] = print,
    ):
        self.auth = auth
        self.state = state or auth.generate_state()
        self.notify = notify
        self.flow = LoopbackFlow.from_client_config(auth.client_config, scopes=auth.scopes, state=self.state)
        self.flow.on_authorization_url = self._announce

    @property
    def redirect_uri(self) -> Optional[str]:
        return self.flow.redirect_uri

    def _announce(self, url: str) -> None:
        logger.info(f"Waiting for the OAuth redirect on {self.flow.redirect_uri}")
        self.notify(AUTH_PROMPT)
        self.notify(url)

    def run(
        self,
        *,
        host: str = "localhost",
        port: int = 8080,
        timeout: Optional[float] = 300,
        open_browser: bool = False,
    ) -> TokenInfo:
        """Serve exactly one redirect on host:port, then exchange its code.

        The loopback server is closed before this returns or raises.
        """

        try:
            self.flow.run_local_server(
                host=host,
                port=int(port),
                open_browser=open_browser,
                timeout_seconds=timeout,
                authorization_prompt_message=None,
                success_message=SUCCESS_MESSAGE,
                access_type="offline",
            )
        except AttributeError as e:
            # run_local_server has no redirect URI to parse when timeout_seconds elapses.
            raise AuthorizationTimeoutError(f"No OAuth callback received within {timeout} seconds") from e
        except MismatchingStateError as e:
            logger.warning("Rejected OAuth callback with mismatched state")
            raise AuthorizationError("State parameter doesn't match") from e
        except MissingCodeError as e:
            raise AuthorizationError("Code not found in URL") from e
        except AccessDeniedError as e:
            raise AuthorizationError(f"Authorization denied by provider: {e.error}") from e
        except OAuth2Error as e:
            raise TokenExchangeError(f"Failed to exchange token: {e.error}: {e.description}") from e
        except requests.RequestException as e:
            raise TokenExchangeError(f"Token request failed: {e}") from e

        token = TokenInfo.from_google_credentials(self.flow.credentials)
        if not token.access_token:
            raise TokenExchangeError("Token exchange returned no access_token")

        logger.info("OAuth callback received; token exchange succeeded")
        return token
