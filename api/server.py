# Path: api/server.py
# Purpose: Run the FastAPI app under uvicorn with ordered shutdown hooks.
# Layer: api.
# Details: Hooks run when a stop signal arrives, before uvicorn stops accepting connections.

from __future__ import annotations

import logging
from types import FrameType
from typing import Callable, List, Optional

import uvicorn

logger = logging.getLogger(__name__)


class AlbumServer(uvicorn.Server):
    """uvicorn server that runs registered hooks once on the first stop signal.

    Hooks run in registration order. A failing hook is logged and does not
    prevent the remaining hooks or the HTTP shutdown.
    """

    def __init__(self, config: uvicorn.Config) -> None:
        super().__init__(config)
        self._shutdown_hooks: List[Callable[[], None]] = []
        self._hooks_ran = False

    def add_shutdown_hook(self, hook: Callable[[], None]) -> None:
        self._shutdown_hooks.append(hook)

    def run_shutdown_hooks(self) -> None:
        if self._hooks_ran:
            return
        self._hooks_ran = True
        for hook in self._shutdown_hooks:
            try:
                hook()
            except Exception:
                logger.exception("shutdown hook %r failed", hook)

    def handle_exit(self, sig: int, frame: Optional[FrameType]) -> None:
        self.run_shutdown_hooks()
        super().handle_exit(sig, frame)


def build_server(app, host: str, port: int, grace_period: int) -> AlbumServer:
    """Create an AlbumServer for ``app`` bounded by ``grace_period`` seconds on shutdown."""

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        timeout_graceful_shutdown=grace_period,
        log_config=None,
    )
    return AlbumServer(config)
