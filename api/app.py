# Path: api/app.py
# Purpose: Expose a FastAPI application serving the album page and photo files.
# Layer: api.
# Details: Every route reads through the injected IndexHandle; unknown names map to 404.

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from core.indexing.handle import IndexHandle

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


def create_app(handle: IndexHandle, title: str = "My Album"):
    """Create a FastAPI app instance serving the photos published through ``handle``."""

    from fastapi import FastAPI, HTTPException, Request
    from fastapi.responses import FileResponse, HTMLResponse
    from fastapi.staticfiles import StaticFiles
    from fastapi.templating import Jinja2Templates

    app = FastAPI(title="fotodeck", version="0.1.0")
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    app.mount("/public", StaticFiles(directory=str(STATIC_DIR)), name="public")

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        client = f"{request.client.host}:{request.client.port}" if request.client else "-"
        logger.info("HttpServer remoteAddr=%s method=%s url=%s", client, request.method, request.url)
        return await call_next(request)

    def _serve(name: str, path: Optional[str], route: str) -> FileResponse:
        if path is None or not os.path.isfile(path):
            raise HTTPException(status_code=404)
        logger.debug("requestFile=%s responseFile=%s", f"{route}{name}", path)
        return FileResponse(path)

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request):
        """Render the album page with the current photos in random order."""

        return templates.TemplateResponse(
            request,
            "index.html",
            {"title": title, "photos": handle.shuffled_names()},
        )

    @app.get("/api/photos")
    def photos() -> Dict[str, Any]:
        """Return the names in the current index generation."""

        generation = handle.snapshot()
        return {"generation": generation.number, "photos": list(generation.names)}

    @app.get("/img/preview/{name}")
    def preview(name: str) -> FileResponse:
        entry = handle.lookup(name)
        return _serve(name, entry.get_preview() if entry else None, "/img/preview/")

    @app.get("/img/{name}")
    def full_size(name: str) -> FileResponse:
        entry = handle.lookup(name)
        return _serve(name, entry.get_full_size() if entry else None, "/img/")

    return app
