from __future__ import annotations

from typing import Any, Dict, MutableMapping, Optional, Protocol

from flask import session

from .models import TokenPair

STATE_KEY = "state"
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class SessionTokenStore(Protocol):
    """Per-user storage for the CSRF nonce and the token pair."""

    def get_state(self) -> Optional[str]: ...

    def set_state(self, state: str) -> None: ...

    def clear_state(self) -> None: ...

    def get_access_token(self) -> Optional[str]: ...

    def get_refresh_token(self) -> Optional[str]: ...

    def store_tokens(self, tokens: TokenPair) -> None: ...

    def clear_tokens(self) -> None: ...

    def signed_in(self) -> bool: ...


class MappingSessionStore:
    """Store backed by any mutable mapping, e.g. ``flask.session``."""

    def __init__(self, data: MutableMapping[str, Any]) -> None:
        self._data = data

    def _get(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        return value if isinstance(value, str) and value else None

    def get_state(self) -> Optional[str]:
        return self._get(STATE_KEY)

    def set_state(self, state: str) -> None:
        self._data[STATE_KEY] = state

    def clear_state(self) -> None:
        self._data.pop(STATE_KEY, None)

    def get_access_token(self) -> Optional[str]:
        return self._get(ACCESS_TOKEN_KEY)

    def get_refresh_token(self) -> Optional[str]:
        return self._get(REFRESH_TOKEN_KEY)

    def store_tokens(self, tokens: TokenPair) -> None:
        self._data[ACCESS_TOKEN_KEY] = tokens.access_token
        if tokens.refresh_token:
            self._data[REFRESH_TOKEN_KEY] = tokens.refresh_token
        else:
            self._data.pop(REFRESH_TOKEN_KEY, None)

    def clear_tokens(self) -> None:
        self._data.pop(ACCESS_TOKEN_KEY, None)
        self._data.pop(REFRESH_TOKEN_KEY, None)

    def signed_in(self) -> bool:
        return self.get_access_token() is not None


class FlaskSessionStore(MappingSessionStore):
    def __init__(self) -> None:
        super().__init__(session)


class MemorySessionStore(MappingSessionStore):
    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = dict(initial or {})
        super().__init__(self.data)
