"""Terminal rendition of the demo page.

Polls /api/hello and /db-check, keeps one panel per endpoint and prints the
panels after every state change. Each refresh moves a panel to ``loading``
and then always lands in ``success`` or ``error``.
"""

import argparse
import json
import sys
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, TextIO

import requests
from apscheduler.schedulers.blocking import BlockingScheduler

from dockerdemo.clients.base_http_client import BaseHTTPClient, sanitize_error
from dockerdemo.config.settings import settings
from dockerdemo.core.exceptions.exceptions import ExternalAPIError
from dockerdemo.utils.log import app_logger


class PanelState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Panel:
    """One output box: a title, the endpoint feeding it, its state and text."""

    def __init__(self, title: str, endpoint: str):
        self.title = title
        self.endpoint = endpoint
        self.state = PanelState.IDLE
        self.text = ""

    def set_status(self, state: PanelState, text: str) -> None:
        self.state = state
        self.text = text


_MARKERS = {
    PanelState.IDLE: ("-", ""),
    PanelState.LOADING: ("...", "\033[33m"),
    PanelState.SUCCESS: ("OK", "\033[32m"),
    PanelState.ERROR: ("ERROR", "\033[31m"),
}


def render(panels: List[Panel], stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    color = hasattr(stream, "isatty") and stream.isatty()
    for panel in panels:
        marker, ansi = _MARKERS[panel.state]
        header = f"[{marker}] {panel.title} ({panel.endpoint})"
        if color and ansi:
            header = f"{ansi}{header}\033[0m"
        stream.write(header + "\n")
        for line in panel.text.splitlines():
            stream.write(f"    {line}\n")
    stream.write("\n")
    stream.flush()


class StatusClient(BaseHTTPClient):
    """Drives the demo endpoints and renders the replies into panels."""

    def __init__(self, base_url: str, timeout: float = 10,
                 on_change: Optional[Callable[[Panel], None]] = None):
        super().__init__(base_url, timeout=timeout)
        self.on_change = on_change
        self.panels = [
            Panel("Hello endpoint", "/api/hello"),
            Panel("Database check", "/db-check"),
        ]

    def _set(self, panel: Panel, state: PanelState, text: str) -> None:
        panel.set_status(state, text)
        if self.on_change is not None:
            self.on_change(panel)

    def fetch_json(self, panel: Panel) -> bool:
        """Refresh one panel. Returns True when it ended in ``success``."""
        self._set(panel, PanelState.LOADING, "Loading…")
        try:
            response = self.get(panel.endpoint)
            if not response.ok:
                raise ExternalAPIError(self.base_url, self._describe_failure(response))
            payload = response.json()
        except ExternalAPIError as e:
            app_logger.error("client.fetch.failed", endpoint=panel.endpoint, error=e.detail)
            self._set(panel, PanelState.ERROR, e.detail)
            return False
        except (requests.RequestException, ValueError) as e:
            message = sanitize_error(e) or type(e).__name__
            app_logger.error("client.fetch.failed", endpoint=panel.endpoint,
                             exc_type=type(e).__name__, error=message)
            self._set(panel, PanelState.ERROR, message)
            return False

        self._set(panel, PanelState.SUCCESS, json.dumps(payload, indent=2))
        return True

    @staticmethod
    def _describe_failure(response: requests.Response) -> str:
        detail = f"{response.status_code} {response.reason}"
        try:
            body = response.json()
        except ValueError:
            return detail
        if isinstance(body, dict) and body.get("message"):
            return f"{detail}: {body['message']}"
        return detail

    def refresh_all(self) -> bool:
        results = [self.fetch_json(panel) for panel in self.panels]
        return all(results)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Poll the Docker demo API and show the results")
    parser.add_argument("--base-url", default=f"http://localhost:{settings.PORT}",
                        help="API root (default: http://localhost:PORT)")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    parser.add_argument("--watch", type=float, metavar="SECONDS",
                        help="Keep polling every SECONDS instead of exiting after one round")
    args = parser.parse_args(argv)

    client = StatusClient(args.base_url, timeout=args.timeout)
    client.on_change = lambda _panel: render(client.panels)

    if not args.watch:
        try:
            return 0 if client.refresh_all() else 1
        finally:
            client.close()

    scheduler = BlockingScheduler()
    scheduler.add_job(client.refresh_all, 'interval', seconds=args.watch,
                      next_run_time=datetime.now(), id="refresh_all", max_instances=1)
    app_logger.info("client.watch.started", base_url=args.base_url, interval=args.watch)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        app_logger.info("client.watch.stopped")
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
