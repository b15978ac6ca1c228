from __future__ import annotations

import json
from typing import Any

from flask import Response, jsonify, make_response, render_template_string, request

from .errors import NetworkError, OAuthClientError, ProviderDeniedError


ERROR_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{{ title }}</title>
  </head>
  <body>
    <div style="max-width: 640px; margin: 80px auto; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif;">
      {{ fragment|safe }}
      <p><a href="/">Back</a></p>
    </div>
  </body>
</html>
"""

ERROR_FRAGMENT = """<h1>{{ title }}</h1>
<p>{{ error.message }}</p>
{% if error.code %}<p><code>{{ error.code }}</code>{% if error.description %}: {{ error.description }}{% endif %}</p>{% endif %}
{% if payload %}<pre>{{ payload }}</pre>{% endif %}
"""


def wants_partial() -> bool:
    return request.headers.get("X-Requested-With", "").lower() == "xmlhttprequest"


def wants_json() -> bool:
    return request.accept_mimetypes.best_match(["text/html", "application/json"]) == "application/json"


def pretty_json(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True)


def status_for(error: OAuthClientError) -> int:
    if isinstance(error, ProviderDeniedError):
        return 400
    if isinstance(error, NetworkError) or error.status is not None:
        return 502
    # rejected before any request was made
    return 400


def error_response(error: OAuthClientError, status: int | None = None) -> Response:
    status = status if status is not None else status_for(error)
    if wants_json():
        return make_response(jsonify({"error": error.to_dict()}), status)

    title = "Authorization failed" if isinstance(error, ProviderDeniedError) else "Token request failed"
    payload = pretty_json(error.payload) if error.payload else None
    fragment = render_template_string(ERROR_FRAGMENT, title=title, error=error, payload=payload)
    body = fragment if wants_partial() else render_template_string(ERROR_HTML, title=title, fragment=fragment)

    resp = make_response(body, status)
    resp.headers["Content-Type"] = "text/html; charset=utf-8"
    resp.headers["Cache-Control"] = "no-store"
    return resp
