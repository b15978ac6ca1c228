from __future__ import annotations

import hmac
import secrets

STATE_BYTES = 16


def generate_state() -> str:
    """Return a fresh CSRF nonce: 32 hex characters, 128 bits from the OS CSPRNG."""
    return secrets.token_hex(STATE_BYTES)


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def state_matches(expected: str | None, received: str | None) -> bool:
    if is_blank(expected) or is_blank(received):
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
