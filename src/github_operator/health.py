"""Health check endpoints for the operator."""

import json
import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Response

# Set once the startup hook has finished, cleared on shutdown
_ready = threading.Event()


def set_ready(ready: bool = True) -> None:
    """Flip the readiness reported on /readyz."""
    if ready:
        _ready.set()
    else:
        _ready.clear()


def _json_response(payload: dict[str, str], status: int) -> Response:
    return Response(json.dumps(payload, separators=(",", ":")), mimetype="application/json", status=status)


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    /healthz answers as long as the process serves requests. /readyz answers
    503 until the operator has finished starting up. Every other path goes
    to the prometheus exporter.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            return _json_response({"status": "ok"}, 200)(environ, start_response)
        if path == "/readyz":
            if _ready.is_set():
                return _json_response({"status": "ready"}, 200)(environ, start_response)
            return _json_response({"status": "starting"}, 503)(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int) -> threading.Thread:
    """Serve metrics and health endpoints from a background thread.

    Args:
        port: Port number to listen on

    Returns:
        The daemon thread running the server
    """
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
