"""Web server for the garden planner.

Serves the single-page frontend and exposes JSON APIs for:
  - State          (plant library, beds, frost dates)
  - Actions        (assign / clear / notes, bed and plant-library edits)
  - Calendar       (derived planting and indoor-start events)
  - .garden I/O    (export/import ZIP archive)

Configuration comes from the environment:
  PORT              listen port (default 8000)
  GARDEN_DATA_DIR   where the JSON store lives (default ./data)
  GARDEN_LOG_LEVEL  logging level name (default INFO)

Run:
    python3 web_server.py

Then open http://localhost:8000
"""

from __future__ import annotations

import base64
import json
import logging
import os
import sys
import threading
import zipfile
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlparse

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _PROJECT_ROOT)

from garden import (
    ACTION_TYPES,
    GardenState,
    JsonFileStore,
    calendar_entries,
    dispatch,
    export_garden,
    import_garden,
    load_state,
    reset_state,
    save_state,
)

logger = logging.getLogger("garden.web")

_WEB_DIR = os.path.join(_PROJECT_ROOT, "web")
_DEFAULT_DATA_DIR = os.path.join(_PROJECT_ROOT, "data")


# -------------------------------------------------------------------
# Garden session  (thread-safe, one state per server)
# -------------------------------------------------------------------

class GardenSession:
    """Holds the current ``GardenState`` and snapshots it after each change."""

    def __init__(self, data_dir: str) -> None:
        self._lock = threading.Lock()
        self.store = JsonFileStore(data_dir)
        self._state: GardenState = load_state(self.store)

    @property
    def state(self) -> GardenState:
        with self._lock:
            return self._state

    def snapshot(self, error: str | None = None) -> dict:
        state = self.state
        payload = {
            "state": state.to_dict(),
            "calendar": calendar_entries(state.calendar()),
            "actions": list(ACTION_TYPES),
        }
        if error is not None:
            payload["error"] = error
        return payload

    def apply(self, action: dict) -> dict:
        with self._lock:
            result = dispatch(self._state, action)
            if result.ok:
                self._state = result.state
                save_state(self.store, self._state)
        return self.snapshot(result.error)

    def replace(self, state: GardenState) -> dict:
        with self._lock:
            self._state = state
            save_state(self.store, state)
        return self.snapshot()

    def reset(self) -> dict:
        with self._lock:
            self._state = reset_state(self.store)
        return self.snapshot()


# -------------------------------------------------------------------
# HTTP handler
# -------------------------------------------------------------------

class Handler(SimpleHTTPRequestHandler):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, directory=_WEB_DIR, **kwargs)

    @property
    def session(self) -> GardenSession:
        return self.server.session

    # ---- GET ----

    def do_GET(self):
        path = urlparse(self.path).path
        if path == "/api/state":
            return self._json(self.session.snapshot())
        if path == "/api/calendar":
            state = self.session.state
            return self._json({"calendar": calendar_entries(state.calendar())})
        return super().do_GET()

    # ---- POST ----

    def do_POST(self):
        path = urlparse(self.path).path
        if not path.startswith("/api/"):
            return self.send_error(404)
        try:
            body = self._body()

            # Export returns binary, not JSON
            if path == "/api/export":
                data = export_garden(self.session.state)
                return self._binary(data, "application/zip", "garden.garden")

            result = self._route(path, body)
            self._json(result)
        except FileNotFoundError as e:
            logger.error("%s: %s", path, e)
            self._json({"error": str(e)}, 404)
        except (ValueError, TypeError, zipfile.BadZipFile) as e:
            logger.error("%s: %s", path, e)
            self._json({"error": str(e)}, 400)

    def _route(self, path: str, body: dict) -> dict:
        if path == "/api/action":
            return self.session.apply(body)
        if path == "/api/reset":
            return self.session.reset()
        if path == "/api/import":
            raw = base64.b64decode(body.get("data", ""), validate=True)
            return self.session.replace(import_garden(raw))
        raise FileNotFoundError(f"Unknown endpoint: {path}")

    # ---- helpers ----

    def _body(self) -> dict:
        length = int(self.headers.get("Content-Length", 0))
        if length == 0:
            return {}
        body = json.loads(self.rfile.read(length).decode())
        if not isinstance(body, dict):
            raise ValueError("request body must be a JSON object")
        return body

    def _json(self, payload: dict, status: int = 200):
        raw = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    def _binary(self, data: bytes, content_type: str, filename: str):
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Disposition",
                         f'attachment; filename="{filename}"')
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, fmt, *args):
        logger.debug("%s - %s", self.address_string(), fmt % args)


def make_server(host: str, port: int, data_dir: str) -> ThreadingHTTPServer:
    """Build (but don't start) a server bound to *host*:*port*."""
    server = ThreadingHTTPServer((host, port), Handler)
    server.session = GardenSession(data_dir)
    return server


# -------------------------------------------------------------------
# Entry point
# -------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(
        level=os.environ.get("GARDEN_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORT", "8000"))
    data_dir = os.environ.get("GARDEN_DATA_DIR", _DEFAULT_DATA_DIR)
    server = make_server("0.0.0.0", port, data_dir)
    logger.info("Garden planner running on http://localhost:%d (data in %s)",
                port, data_dir)
    server.serve_forever()


if __name__ == "__main__":
    main()
