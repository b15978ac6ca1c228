from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import OAuthClientError


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def token_type(self) -> Optional[str]:
        value = self.payload.get("token_type")
        return value if isinstance(value, str) else None

    @property
    def expires_in(self) -> Optional[int]:
        value = self.payload.get("expires_in")
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(value)
        return None


@dataclass(frozen=True)
class AuthorizationRequest:
    url: str
    state: str


@dataclass(frozen=True)
class TokenResult:
    tokens: Optional[TokenPair] = None
    error: Optional[OAuthClientError] = None

    @property
    def ok(self) -> bool:
        return self.tokens is not None and self.error is None
