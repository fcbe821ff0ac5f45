"""Helpers to launch the local JSON API."""

from __future__ import annotations

import logging
import threading
import time
import webbrowser
from typing import Optional

import uvicorn

from .config import AppSettings
from .webapp import create_app

logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.0


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    settings: Optional[AppSettings] = None,
    open_browser: bool = True,
    log_level: str = "info",
) -> None:
    """Serve the worklog API with uvicorn, optionally opening the docs page."""
    resolved = settings or AppSettings.from_env()
    app = create_app(settings=resolved)
    logger.info(
        "Serving worklog at http://%s:%d (database %s, assistant %s).",
        host,
        port,
        resolved.resolved_db_path(),
        "enabled" if resolved.assistant_enabled else "disabled",
    )

    if open_browser:
        threading.Thread(
            target=_open_docs, args=(f"http://{host}:{port}/docs",), daemon=True
        ).start()

    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _open_docs(url: str) -> None:
    time.sleep(BROWSER_DELAY_SECONDS)
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        logger.exception("Failed to launch browser for %s", url)
