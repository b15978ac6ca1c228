from __future__ import annotations

from typing import Any, Dict, Optional


class ConfigurationError(ValueError):
    """Required client configuration is missing or unusable. Fatal at startup."""


class OAuthClientError(Exception):
    """Base class for failures surfaced to the user by the sign-in flow."""

    default_message = "OAuth request failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        description: str | None = None,
        status: int | None = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.code = code
        self.description = description
        self.status = status
        self.payload = payload

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"message": self.message}
        if self.code:
            out["code"] = self.code
        if self.description:
            out["description"] = self.description
        if self.status is not None:
            out["status"] = self.status
        return out


class ProviderDeniedError(OAuthClientError):
    default_message = "The authorization server returned an error"


class TokenExchangeError(OAuthClientError):
    default_message = "Exchanging the authorization code failed"


class TokenRefreshError(OAuthClientError):
    default_message = "Refreshing the access token failed"


class NetworkError(OAuthClientError):
    default_message = "Could not reach the token endpoint"
