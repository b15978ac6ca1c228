from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import OAuthClientError, ProviderDeniedError, TokenExchangeError, TokenRefreshError
from .health import record_event
from .models import TokenResult
from .oauth import AuthorizationClient
from .session import SessionTokenStore
from .state import generate_state, is_blank, state_matches

LOGGER = logging.getLogger(__name__)

HOME = "/"


class FlowState(str, enum.Enum):
    SIGNED_OUT = "signed_out"
    PENDING_CALLBACK = "pending_callback"
    SIGNED_IN = "signed_in"


@dataclass(frozen=True)
class FlowOutcome:
    kind: str
    location: Optional[str] = None
    error: Optional[OAuthClientError] = None

    @classmethod
    def redirect(cls, location: str = HOME) -> "FlowOutcome":
        return cls(kind="redirect", location=location)

    @classmethod
    def failure(cls, error: OAuthClientError) -> "FlowOutcome":
        return cls(kind="error", error=error)

    @property
    def is_redirect(self) -> bool:
        return self.kind == "redirect"


class FlowController:
    """Drives sign-in, callback, refresh and sign-out for one user session.

    Every token endpoint failure is converted into an error outcome here; only
    unexpected faults propagate to the caller.
    """

    def __init__(
        self,
        client: AuthorizationClient,
        store: SessionTokenStore,
        state_factory: Callable[[], str] = generate_state,
    ) -> None:
        self.client = client
        self.store = store
        self.state_factory = state_factory

    def status(self) -> FlowState:
        if self.store.signed_in():
            return FlowState.SIGNED_IN
        if self.store.get_state() is not None:
            return FlowState.PENDING_CALLBACK
        return FlowState.SIGNED_OUT

    def sign_in(self) -> FlowOutcome:
        state = self.state_factory()
        self.store.set_state(state)
        record_event("sign_in")
        return FlowOutcome.redirect(self.client.build_authorization_uri(state))

    def callback(
        self,
        code: str | None,
        state: str | None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> FlowOutcome:
        if error is not None:
            self.store.clear_state()
            record_event("provider_denied")
            LOGGER.info("Authorization server returned error=%s", error)
            return FlowOutcome.failure(
                ProviderDeniedError(code=error, description=error_description or None)
            )

        if not state_matches(self.store.get_state(), state):
            record_event("csrf_rejected")
            LOGGER.warning("Callback state did not match the session nonce; ignoring")
            return FlowOutcome.redirect(HOME)

        # single use: a replayed callback carrying the same state must fail the check above
        self.store.clear_state()

        if is_blank(code):
            record_event("exchange_failed")
            return FlowOutcome.failure(TokenExchangeError("Callback did not include an authorization code"))

        result = self._attempt(lambda: self.client.exchange_code(code))
        if not result.ok:
            record_event("exchange_failed")
            return FlowOutcome.failure(result.error)

        self.store.store_tokens(result.tokens)
        record_event("exchange_succeeded")
        return FlowOutcome.redirect(HOME)

    def refresh(self) -> FlowOutcome:
        refresh_token = self.store.get_refresh_token()
        if refresh_token is None:
            record_event("refresh_failed")
            return FlowOutcome.failure(TokenRefreshError("No refresh token in this session"))

        result = self._attempt(lambda: self.client.refresh(refresh_token))
        if not result.ok:
            record_event("refresh_failed")
            return FlowOutcome.failure(result.error)

        self.store.store_tokens(result.tokens)
        record_event("refresh_succeeded")
        return FlowOutcome.redirect(HOME)

    def sign_out(self) -> FlowOutcome:
        self.store.clear_tokens()
        self.store.clear_state()
        record_event("sign_out")
        return FlowOutcome.redirect(HOME)

    @staticmethod
    def _attempt(call: Callable[[], object]) -> TokenResult:
        try:
            return TokenResult(tokens=call())
        except OAuthClientError as exc:
            return TokenResult(error=exc)
