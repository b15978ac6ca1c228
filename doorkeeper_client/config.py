from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping
from urllib.parse import urlparse

import dotenv

from .errors import ConfigurationError

DEFAULT_SCOPE = "search"
DEFAULT_REQUEST_TIMEOUT = 30.0

# field name -> environment variable
ENV_VARS = {
    "authorization_url": "AUTHORIZATION_URL",
    "token_url": "TOKEN_URL",
    "client_id": "CONFIDENTIAL_CLIENT_ID",
    "client_secret": "CONFIDENTIAL_CLIENT_SECRET",
    "redirect_uri": "CONFIDENTIAL_CLIENT_REDIRECT_URI",
    "scope": "OAUTH_SCOPE",
}

_TRUTHY = ("1", "true", "yes", "on")


def env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ClientConfiguration:
    authorization_url: str
    token_url: str
    client_id: str
    client_secret: str
    redirect_uri: str
    scope: str = DEFAULT_SCOPE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    allow_insecure_transport: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        missing = [
            ENV_VARS[f.name]
            for f in fields(self)
            if f.name in ENV_VARS and not (isinstance(getattr(self, f.name), str) and getattr(self, f.name).strip())
        ]
        if missing:
            raise ConfigurationError(f"Missing OAuth client configuration: {', '.join(missing)}")
        for name in ("authorization_url", "token_url", "redirect_uri"):
            parsed = urlparse(getattr(self, name))
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigurationError(f"{ENV_VARS[name]} is not an absolute http(s) URL: {getattr(self, name)!r}")
        if urlparse(self.token_url).scheme != "https" and not self.allow_insecure_transport:
            raise ConfigurationError(
                f"TOKEN_URL must use https (got {self.token_url!r}); "
                "set OAUTH_ALLOW_INSECURE_TRANSPORT=1 for local development only"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError("OAUTH_REQUEST_TIMEOUT must be positive")

    @property
    def site_host(self) -> str:
        return urlparse(self.authorization_url).hostname or ""

    def redacted(self) -> dict:
        secret = self.client_secret
        return {
            "authorization_url": self.authorization_url,
            "token_url": self.token_url,
            "client_id": self.client_id,
            "client_secret": (secret[:4] + "…") if len(secret) > 8 else "***",
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "request_timeout": self.request_timeout,
            "allow_insecure_transport": self.allow_insecure_transport,
        }


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_REQUEST_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"OAUTH_REQUEST_TIMEOUT must be a number, got {raw!r}") from None


def load_config(environ: Mapping[str, str] | None = None, *, use_dotenv: bool = True) -> ClientConfiguration:
    """Build the client configuration from the environment.

    A ``.env`` file in the working directory is loaded first when ``use_dotenv``
    is set; values already present in the environment win.
    """
    if environ is None:
        if use_dotenv:
            dotenv.load_dotenv()
        environ = os.environ

    values = {name: (environ.get(var) or "").strip() for name, var in ENV_VARS.items()}
    values["scope"] = values["scope"] or DEFAULT_SCOPE
    return ClientConfiguration(
        **values,
        request_timeout=_parse_timeout(environ.get("OAUTH_REQUEST_TIMEOUT")),
        allow_insecure_transport=env_flag(environ.get("OAUTH_ALLOW_INSECURE_TRANSPORT")),
    )
