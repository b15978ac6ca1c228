from __future__ import annotations

import logging
import os
import secrets
from typing import Any

import rollbar
import rollbar.contrib.flask
from flask import Flask, got_request_exception

from .config import ClientConfiguration, load_config
from .health import create_health_response
from .oauth import AuthorizationClient
from .routes import EXTENSION_KEY, oauth_bp

LOGGER = logging.getLogger(__name__)


def create_app(
    config: ClientConfiguration | None = None,
    verbose: bool = False,
    secret_key: str | None = None,
    http: Any | None = None,
) -> Flask:
    """Build the Flask app. Raises ConfigurationError when the client configuration is incomplete."""
    if config is None:
        config = load_config()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)

    secret_key = secret_key or os.getenv("SESSION_SECRET")
    if not secret_key:
        LOGGER.warning("SESSION_SECRET is not set; sessions will not survive a restart or span workers")
        secret_key = secrets.token_hex(32)

    app.config.update(
        VERBOSE=bool(verbose),
        SECRET_KEY=secret_key,
        SESSION_COOKIE_HTTPONLY=True,
        # the callback arrives as a top-level cross-site GET
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=config.redirect_uri.startswith("https://"),
        OAUTH_CLIENT_CONFIG=config,
    )
    app.extensions[EXTENSION_KEY] = AuthorizationClient(config, http=http)

    @app.get("/health")
    def health():
        return create_health_response(config.site_host)

    app.register_blueprint(oauth_bp)
    init_error_reporting(app)

    LOGGER.info("OAuth client ready for %s (client_id=%s)", config.site_host, config.client_id)
    return app


def init_error_reporting(app: Flask, access_token: str | None = None) -> bool:
    """Report unhandled request exceptions to Rollbar when ROLLBAR_ACCESS_TOKEN is set."""
    access_token = access_token or os.getenv("ROLLBAR_ACCESS_TOKEN")
    if not access_token:
        return False

    rollbar.init(
        access_token,
        environment=os.getenv("ROLLBAR_ENV", "production"),
        root=os.path.dirname(os.path.realpath(__file__)),
        allow_logging_basic_config=False,
    )
    got_request_exception.connect(rollbar.contrib.flask.report_exception, app)
    LOGGER.info("Rollbar error reporting enabled")
    return True
