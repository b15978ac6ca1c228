"""
Gunicorn configuration for the OAuth client web app.
"""
import multiprocessing
import os

# Server socket
bind = os.getenv("DOORKEEPER_CLIENT_BIND", "0.0.0.0:8000")
backlog = 2048

# Workers block on the token endpoint; gevent keeps that cheap
workers = multiprocessing.cpu_count() * 2 + 1
worker_class = "gevent"
worker_connections = 1000
max_requests = 10000
max_requests_jitter = 1000
timeout = 60  # above OAUTH_REQUEST_TIMEOUT
graceful_timeout = 30
keepalive = 5

# Sessions are signed cookies; every worker must share SESSION_SECRET
preload_app = False

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
# no query string: /callback carries the authorization code
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(m)s %(U)s" %(s)s %(b)s "%(a)s" %(D)s'

proc_name = "doorkeeper-client"


def on_starting(server):
    """Called just before the master process is initialized."""
    if not os.getenv("SESSION_SECRET"):
        server.log.warning("SESSION_SECRET is not set; sign-in will break across workers")
    server.log.info("Starting doorkeeper-client with %s workers (gevent)", workers)


def worker_abort(worker):
    """Called when a worker times out."""
    worker.log.warning("Worker %s timed out - will be restarted", worker.pid)


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("doorkeeper-client ready on %s", bind)
