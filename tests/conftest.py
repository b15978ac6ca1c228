# Shared fixtures: client configuration, a scripted token endpoint and the Flask app.

import pytest

from doorkeeper_client.app import create_app
from doorkeeper_client.config import ClientConfiguration
from doorkeeper_client.health import reset_metrics
from doorkeeper_client.oauth import AuthorizationClient

TOKEN_URL = "https://doorkeeper.example/oauth/token"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeTokenEndpoint:
    """Stands in for requests.Session; replies with queued responses or raises queued exceptions."""

    def __init__(self):
        self.calls = []
        self._replies = []

    def reply(self, status_code=200, payload=None):
        self._replies.append(FakeResponse(status_code, payload))
        return self

    def fail(self, exc):
        self._replies.append(exc)
        return self

    def post(self, url, data=None, headers=None, timeout=None, allow_redirects=True):
        self.calls.append(
            {
                "url": url,
                "data": dict(data or {}),
                "headers": headers,
                "timeout": timeout,
                "allow_redirects": allow_redirects,
            }
        )
        if not self._replies:
            raise AssertionError("unexpected token endpoint call")
        item = self._replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture(autouse=True)
def _fresh_metrics():
    reset_metrics()
    yield


@pytest.fixture
def config():
    return ClientConfiguration(
        authorization_url="https://doorkeeper.example/oauth/authorize",
        token_url=TOKEN_URL,
        client_id="client-123",
        client_secret="s3cret-value",
        redirect_uri="http://localhost:8000/callback",
    )


@pytest.fixture
def endpoint():
    return FakeTokenEndpoint()


@pytest.fixture
def oauth_client(config, endpoint):
    return AuthorizationClient(config, http=endpoint)


@pytest.fixture
def app(config, endpoint):
    app = create_app(config, secret_key="test-secret", http=endpoint)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
