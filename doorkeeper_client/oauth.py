from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, Type

import requests

from .config import ClientConfiguration
from .errors import NetworkError, OAuthClientError, TokenExchangeError, TokenRefreshError
from .models import AuthorizationRequest, TokenPair

LOGGER = logging.getLogger(__name__)

AUTHORIZATION_PARAMS = ("response_type", "client_id", "redirect_uri", "scope", "state")


class AuthorizationClient:
    """Talks to the authorization server: builds the authorize redirect and calls the token endpoint.

    Token requests are never retried. A failed exchange or refresh is raised to
    the caller as a :class:`TokenExchangeError`, :class:`TokenRefreshError` or
    :class:`NetworkError`; nothing here touches the user session.
    """

    def __init__(self, config: ClientConfiguration, http: Any | None = None) -> None:
        config.validate()
        self.config = config
        self.http = http if http is not None else requests.Session()

    def build_authorization_uri(self, state: str) -> str:
        parts = urllib.parse.urlsplit(self.config.authorization_url)
        query = [
            (k, v)
            for k, v in urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
            if k not in AUTHORIZATION_PARAMS
        ]
        query += [
            ("response_type", "code"),
            ("client_id", self.config.client_id),
            ("redirect_uri", self.config.redirect_uri),
            ("scope", self.config.scope),
            ("state", state),
        ]
        return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))

    def authorization_request(self, state: str) -> AuthorizationRequest:
        return AuthorizationRequest(url=self.build_authorization_uri(state), state=state)

    def exchange_code(self, code: str) -> TokenPair:
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        return self._token_request(form, TokenExchangeError)

    def refresh(self, refresh_token: str) -> TokenPair:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        tokens = self._token_request(form, TokenRefreshError)
        if tokens.refresh_token:
            return tokens
        # rotation is optional; keep the token we already hold
        return TokenPair(access_token=tokens.access_token, refresh_token=refresh_token, payload=tokens.payload)

    def _token_request(self, form: Dict[str, str], error_cls: Type[OAuthClientError]) -> TokenPair:
        grant = form["grant_type"]
        try:
            resp = self.http.post(
                self.config.token_url,
                data=form,
                headers={"Accept": "application/json"},
                timeout=self.config.request_timeout,
                # a redirect would resend client_secret to an unchecked Location
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            LOGGER.warning("Token endpoint unreachable (grant=%s): %s", grant, exc.__class__.__name__)
            raise NetworkError(f"Token endpoint request failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = None
        body: Dict[str, Any] = payload if isinstance(payload, dict) else {}

        if not 200 <= resp.status_code < 300:
            LOGGER.warning(
                "Token endpoint returned status %s (grant=%s, error=%s)", resp.status_code, grant, body.get("error")
            )
            raise error_cls(
                f"Token endpoint returned status {resp.status_code}",
                code=_str_or_none(body.get("error")),
                description=_str_or_none(body.get("error_description")),
                status=resp.status_code,
                payload=body or None,
            )

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            LOGGER.warning("Token endpoint response missing access_token (grant=%s)", grant)
            raise error_cls("Token endpoint response missing access_token", status=resp.status_code, payload=body or None)

        LOGGER.debug("Token endpoint accepted grant=%s", grant)
        return TokenPair(
            access_token=access_token,
            refresh_token=_str_or_none(body.get("refresh_token")),
            payload=body,
        )


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
