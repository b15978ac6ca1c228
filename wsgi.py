"""
WSGI entry point for production deployment with gunicorn.
Usage: gunicorn -c gunicorn_config.py wsgi:app
"""
import os

from doorkeeper_client.app import create_app
from doorkeeper_client.config import env_flag

verbose = env_flag(os.getenv("DOORKEEPER_CLIENT_VERBOSE"))

# Configuration comes from the environment (and .env); a missing value stops the workers from booting.
app = create_app(verbose=verbose)

if __name__ == "__main__":
    # For development only - use gunicorn for production
    app.run(host="127.0.0.1", port=8000, debug=False, threaded=True)
