"""
Health check and flow counters for the OAuth client.
"""
from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta
from typing import Any, Dict

from flask import Response, jsonify

FLOW_EVENTS = (
    "sign_in",
    "provider_denied",
    "csrf_rejected",
    "exchange_succeeded",
    "exchange_failed",
    "refresh_succeeded",
    "refresh_failed",
    "sign_out",
)

_lock = threading.Lock()
_metrics: Dict[str, Any] = {
    'start_time': time.time(),
    'events': {name: 0 for name in FLOW_EVENTS},
    'last_event_time': None,
}


def record_event(name: str) -> None:
    """Count one flow event."""
    with _lock:
        events = _metrics['events']
        events[name] = events.get(name, 0) + 1
        _metrics['last_event_time'] = datetime.now().isoformat()


def reset_metrics() -> None:
    with _lock:
        _metrics['start_time'] = time.time()
        _metrics['events'] = {name: 0 for name in FLOW_EVENTS}
        _metrics['last_event_time'] = None


def get_metrics() -> Dict[str, Any]:
    """Snapshot of the counters plus uptime."""
    with _lock:
        uptime = time.time() - _metrics['start_time']
        events = dict(_metrics['events'])
        last = _metrics['last_event_time']

    return {
        'uptime_seconds': int(uptime),
        'uptime_human': str(timedelta(seconds=int(uptime))),
        'events': events,
        'last_event': last,
    }


def create_health_response(site_host: str | None = None) -> Response:
    health_data = {
        'status': 'healthy',
        'timestamp': datetime.now().isoformat(),
        'authorization_server': site_host,
        'metrics': get_metrics(),
    }
    return jsonify(health_data)
