from __future__ import annotations

import argparse
import json
import os
import sys
import webbrowser

from .app import create_app
from .config import env_flag, load_config
from .errors import ConfigurationError
from .oauth import AuthorizationClient
from .state import generate_state


def eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def cmd_serve(host: str, port: int, verbose: bool) -> int:
    try:
        app = create_app(verbose=verbose)
    except ConfigurationError as e:
        eprint(f"ERROR: {e}")
        return 2

    app.run(host=host, debug=False, use_reloader=False, port=port, threaded=True)
    return 0


def cmd_config(as_json: bool) -> int:
    try:
        config = load_config()
    except ConfigurationError as e:
        eprint(f"ERROR: {e}")
        return 2

    redacted = config.redacted()
    if as_json:
        print(json.dumps(redacted, indent=2))
        return 0
    print("🔑 OAuth client")
    for key, value in redacted.items():
        print(f"  • {key}: {value}")
    return 0


def cmd_authorize_url(open_browser: bool) -> int:
    try:
        client = AuthorizationClient(load_config())
    except ConfigurationError as e:
        eprint(f"ERROR: {e}")
        return 2

    request = client.authorization_request(generate_state())
    print(request.url)
    eprint(f"state: {request.state}")
    if open_browser:
        try:
            webbrowser.open(request.url, new=1, autoraise=True)
        except webbrowser.Error as e:
            eprint(f"Failed to open browser: {e}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="OAuth2 Authorization Code client")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the sign-in web app")
    p_serve.add_argument("--host", default=os.getenv("DOORKEEPER_CLIENT_HOST", "127.0.0.1"))
    p_serve.add_argument("--port", type=int, default=int(os.getenv("DOORKEEPER_CLIENT_PORT", "8000")))
    p_serve.add_argument(
        "--verbose",
        action="store_true",
        default=env_flag(os.getenv("DOORKEEPER_CLIENT_VERBOSE")),
        help="Enable verbose logging",
    )

    p_config = sub.add_parser("config", help="Validate and print the client configuration (secret redacted)")
    p_config.add_argument("--json", action="store_true", help="Output as JSON")

    p_url = sub.add_parser("authorize-url", help="Print an authorization URL with a fresh state nonce")
    p_url.add_argument("--open", action="store_true", help="Also open the URL in a browser")

    args = parser.parse_args()

    if args.command == "serve":
        sys.exit(cmd_serve(host=args.host, port=args.port, verbose=args.verbose))
    elif args.command == "config":
        sys.exit(cmd_config(as_json=args.json))
    elif args.command == "authorize-url":
        sys.exit(cmd_authorize_url(open_browser=args.open))
    else:
        parser.error("Unknown command")


if __name__ == "__main__":
    main()
