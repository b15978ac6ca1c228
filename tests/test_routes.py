# End-to-end tests for the HTTP surface using Flask's test client.

import urllib.parse

import dotenv
import pytest
import requests

from doorkeeper_client.app import create_app
from doorkeeper_client.errors import ConfigurationError


def _session(client):
    with client.session_transaction() as sess:
        return dict(sess)


def _sign_in(client):
    resp = client.get("/sign_in")
    query = dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(resp.headers["Location"]).query))
    return resp, query["state"]


class TestSignIn:
    def test_redirects_to_authorization_server(self, client):
        resp, state = _sign_in(client)
        assert resp.status_code == 302
        location = resp.headers["Location"]
        assert location.startswith("https://doorkeeper.example/oauth/authorize?")
        assert "response_type=code" in location
        assert "scope=search" in location
        assert _session(client)["state"] == state
        assert len(state) == 32


class TestCallback:
    def test_success_stores_tokens(self, client, endpoint):
        endpoint.reply(200, {"access_token": "a1", "refresh_token": "r1"})
        _, state = _sign_in(client)

        resp = client.get("/callback", query_string={"code": "xyz", "state": state})

        assert resp.status_code == 302
        assert resp.headers["Location"] == "/"
        assert endpoint.calls[0]["data"]["code"] == "xyz"
        sess = _session(client)
        assert sess["access_token"] == "a1"
        assert sess["refresh_token"] == "r1"
        assert "state" not in sess

    def test_state_mismatch_redirects_home(self, client, endpoint):
        with client.session_transaction() as sess:
            sess["state"] = "abc123"

        resp = client.get("/callback", query_string={"code": "xyz", "state": "wrong"})

        assert resp.status_code == 302
        assert resp.headers["Location"] == "/"
        assert endpoint.calls == []
        assert "access_token" not in _session(client)

    def test_provider_error_renders_error_view(self, client, endpoint):
        resp = client.get("/callback", query_string={"error": "access_denied", "state": "whatever"})
        assert resp.status_code == 400
        assert b"access_denied" in resp.data
        assert b"<html" in resp.data
        assert endpoint.calls == []

    def test_provider_error_partial_for_xhr(self, client):
        resp = client.get(
            "/callback",
            query_string={"error": "access_denied"},
            headers={"X-Requested-With": "XMLHttpRequest"},
        )
        assert resp.status_code == 400
        assert b"access_denied" in resp.data
        assert b"<html" not in resp.data

    def test_provider_error_as_json(self, client):
        resp = client.get(
            "/callback",
            query_string={"error": "access_denied", "error_description": "User said no"},
            headers={"Accept": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "access_denied"
        assert resp.get_json()["error"]["description"] == "User said no"

    def test_error_view_escapes_provider_text(self, client):
        resp = client.get("/callback", query_string={"error": "<script>alert(1)</script>"})
        assert b"<script>" not in resp.data

    def test_exchange_failure_renders_error_view(self, client, endpoint):
        endpoint.reply(401, {"error": "invalid_client"})
        _, state = _sign_in(client)
        resp = client.get("/callback", query_string={"code": "xyz", "state": state})
        assert resp.status_code == 502
        assert b"invalid_client" in resp.data
        assert "access_token" not in _session(client)

    def test_replayed_callback_rejected(self, client, endpoint):
        endpoint.reply(200, {"access_token": "a1", "refresh_token": "r1"})
        _, state = _sign_in(client)
        client.get("/callback", query_string={"code": "xyz", "state": state})

        resp = client.get("/callback", query_string={"code": "fresh", "state": state})

        assert resp.status_code == 302
        assert len(endpoint.calls) == 1


class TestRefresh:
    def test_refresh_keeps_old_refresh_token(self, client, endpoint):
        with client.session_transaction() as sess:
            sess.update(access_token="a1", refresh_token="r1")
        endpoint.reply(200, {"access_token": "a2"})

        resp = client.get("/refresh")

        assert resp.status_code == 302
        assert resp.headers["Location"] == "/"
        sess = _session(client)
        assert sess["access_token"] == "a2"
        assert sess["refresh_token"] == "r1"

    def test_refresh_timeout_renders_error(self, client, endpoint):
        with client.session_transaction() as sess:
            sess.update(access_token="a1", refresh_token="r1")
        endpoint.fail(requests.Timeout("read timed out"))

        resp = client.get("/refresh")

        assert resp.status_code == 502
        sess = _session(client)
        assert sess["access_token"] == "a1"
        assert sess["refresh_token"] == "r1"

    def test_refresh_signed_out(self, client, endpoint):
        resp = client.get("/refresh")
        assert resp.status_code == 400
        assert endpoint.calls == []


class TestSignOut:
    def test_twice(self, client):
        with client.session_transaction() as sess:
            sess.update(access_token="a1", refresh_token="r1")
        for _ in range(2):
            resp = client.get("/sign_out")
            assert resp.status_code == 302
            assert resp.headers["Location"] == "/"
            sess = _session(client)
            assert "access_token" not in sess
            assert "refresh_token" not in sess


class TestHomeAndHealth:
    def test_home_signed_out(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"/sign_in" in resp.data
        assert b"doorkeeper.example" in resp.data

    def test_home_signed_in_masks_token(self, client):
        with client.session_transaction() as sess:
            sess.update(access_token="abcdefgh-very-long-token", refresh_token="r1")
        resp = client.get("/")
        assert b"/sign_out" in resp.data
        assert b"/refresh" in resp.data
        assert b"very-long-token" not in resp.data

    def test_health_counts_flow_events(self, client):
        _sign_in(client)
        client.get("/callback", query_string={"code": "xyz", "state": "wrong"})
        data = client.get("/health").get_json()
        assert data["status"] == "healthy"
        assert data["authorization_server"] == "doorkeeper.example"
        assert data["metrics"]["events"]["sign_in"] == 1
        assert data["metrics"]["events"]["csrf_rejected"] == 1


def test_app_refuses_to_start_without_config(monkeypatch):
    for var in (
        "AUTHORIZATION_URL",
        "TOKEN_URL",
        "CONFIDENTIAL_CLIENT_ID",
        "CONFIDENTIAL_CLIENT_SECRET",
        "CONFIDENTIAL_CLIENT_REDIRECT_URI",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *a, **k: False)
    with pytest.raises(ConfigurationError):
        create_app(secret_key="x")
