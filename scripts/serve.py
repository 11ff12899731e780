# Path: scripts/serve.py
# Purpose: CLI entry point that loads the config, builds the index, and serves the album over HTTP.
# Layer: scripts.
# Details: Startup errors exit non-zero; watcher failures only disable live reloading.

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api import build_server, create_app
from config import AppSettings
from core.errors import CleanupError, FotodeckError, WatchInitError
from core.indexing import ChangeWatcher, ImageLoader, IndexHandle

logger = logging.getLogger("fotodeck")


def cleanup_derivatives(handle: IndexHandle) -> None:
    """Delete the derivatives of every entry in the current generation."""

    for entry in handle.snapshot().entries.values():
        try:
            entry.cleanup()
        except CleanupError as exc:
            logger.error("error cleaning up %s: %s", entry.name, exc)


def build_index(settings: AppSettings, loader: ImageLoader) -> IndexHandle:
    """Scan the home folder and publish the first generation.

    With background optimisation only the originals are published here;
    see ``schedule_background_optimise``.
    """

    home = settings.home.path
    entries = loader.load_originals(home)
    if not settings.image_resizing.background:
        entries = loader.optimise(entries)
    handle = IndexHandle(entries)
    logger.info("Found %d photos in %s", len(handle), home)
    return handle


def schedule_background_optimise(
    settings: AppSettings, loader: ImageLoader, handle: IndexHandle, watcher: Optional[ChangeWatcher]
) -> None:
    """Replace the originals-only generation with an optimised one without blocking startup.

    The watcher performs it on its next tick so it stays the only writer.
    Without a watcher a one-off thread does the work.
    """

    if watcher is not None:
        watcher.request_reload()
        return

    def _optimise() -> None:
        try:
            handle.publish(loader.reload(settings.home.path))
        except Exception:
            logger.exception("background optimisation of %s failed", settings.home.path)
            return
        logger.info("background optimisation of %s completed", settings.home.path)

    threading.Thread(target=_optimise, name="initial-optimise", daemon=True).start()


def start_watcher(settings: AppSettings, loader: ImageLoader, handle: IndexHandle) -> Optional[ChangeWatcher]:
    watcher = ChangeWatcher(
        home=settings.home.path,
        loader=loader,
        handle=handle,
        interval=settings.home.min_refresh_interval,
    )
    try:
        watcher.start()
    except WatchInitError as exc:
        logger.error("failed to initialise file watcher, file watch will be disabled: %s", exc)
        return None
    return watcher


def main(argv: Optional[List[str]] = None) -> int:
    """Serve the album described by the given config file."""

    parser = argparse.ArgumentParser(prog="fotodeck", description="Serve a folder of photos over HTTP")
    parser.add_argument("config", type=Path, help="Path to the TOML config file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        settings = AppSettings.load(args.config)
    except FotodeckError as exc:
        logger.error("failed to load application config %s: %s", args.config, exc)
        return 1
    logging.getLogger().setLevel(settings.log_level.upper())

    loader = ImageLoader.from_settings(settings)
    try:
        handle = build_index(settings, loader)
    except FotodeckError as exc:
        logger.error("failed to load photos from %s: %s", settings.home.path, exc)
        return 1

    watcher = start_watcher(settings, loader, handle)
    if settings.image_resizing.background:
        schedule_background_optimise(settings, loader, handle, watcher)

    app = create_app(handle, title=settings.server.title)
    server = build_server(
        app,
        host=settings.server.host,
        port=settings.server.port,
        grace_period=settings.server.shutdown_grace_period,
    )
    if watcher is not None:
        server.add_shutdown_hook(watcher.close)
    if settings.image_resizing.cleanup_on_shutdown:
        server.add_shutdown_hook(lambda: cleanup_derivatives(handle))

    logger.info("starting server on %s", settings.server.listen_addr)
    server.run()
    # Covers exits that did not come through a signal.
    server.run_shutdown_hooks()
    logger.info("Graceful shutdown complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
