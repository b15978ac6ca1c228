from __future__ import annotations

from flask import Blueprint, Response, current_app, redirect, render_template_string, request

from .flow import FlowController, FlowOutcome
from .http import error_response
from .session import FlaskSessionStore


oauth_bp = Blueprint("oauth", __name__)

EXTENSION_KEY = "doorkeeper_client"


HOME_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>OAuth client</title>
  </head>
  <body>
    <div style="max-width: 640px; margin: 80px auto; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif;">
      <h1>OAuth client for {{ site_host }}</h1>
      {% if signed_in %}
      <p>Signed in. Access token: <code>{{ access_token }}</code></p>
      <p>
        {% if can_refresh %}<a href="{{ url_for('oauth.refresh') }}">Refresh token</a> |{% endif %}
        <a href="{{ url_for('oauth.sign_out') }}">Sign out</a>
      </p>
      {% else %}
      <p><a href="{{ url_for('oauth.sign_in') }}">Sign in</a></p>
      {% endif %}
    </div>
  </body>
</html>
"""


def _controller() -> FlowController:
    client = current_app.extensions[EXTENSION_KEY]
    return FlowController(client, FlaskSessionStore())


def _respond(outcome: FlowOutcome) -> Response:
    if outcome.is_redirect:
        return redirect(outcome.location, code=302)
    return error_response(outcome.error)


def _mask(token: str | None) -> str:
    if not token:
        return ""
    return token[:8] + "…" if len(token) > 12 else "…"


@oauth_bp.get("/")
def home() -> str:
    store = FlaskSessionStore()
    client = current_app.extensions[EXTENSION_KEY]
    return render_template_string(
        HOME_HTML,
        site_host=client.config.site_host,
        signed_in=store.signed_in(),
        access_token=_mask(store.get_access_token()),
        can_refresh=store.get_refresh_token() is not None,
    )


@oauth_bp.get("/sign_in")
def sign_in() -> Response:
    return _respond(_controller().sign_in())


@oauth_bp.get("/callback")
def callback() -> Response:
    args = request.args
    outcome = _controller().callback(
        code=args.get("code"),
        state=args.get("state"),
        error=args.get("error"),
        error_description=args.get("error_description"),
    )
    return _respond(outcome)


@oauth_bp.get("/refresh")
def refresh() -> Response:
    return _respond(_controller().refresh())


@oauth_bp.get("/sign_out")
def sign_out() -> Response:
    return _respond(_controller().sign_out())
