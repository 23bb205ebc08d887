"""Chronicle backend server.

Mounts the changelog router under a FastAPI application. The router
edits one in-memory Changelog; when the server is started with a file
path, that file is loaded first and ``/api/changelog/save`` writes it
back.

Usage::

    # Development (auto-reload)
    uvicorn chronicle.app:app --reload --port 8430

    # Or through the CLI
    chronicle serve CHANGELOG.md
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from chronicle import __version__
from chronicle.changelog.document import Changelog
from chronicle.config import ChangelogConfig
from chronicle.server import configure, get_changelog, router

logger = logging.getLogger("chronicle")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8430

_ALLOWED_ORIGINS = [
    "http://localhost:5173",   # Vite dev server
    "http://localhost:8430",   # Self (for Swagger UI)
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8430",
]

_app_state: dict[str, Any] = {
    "path": None,
}


def create_app(
    path: Path | None = None,
    config: ChangelogConfig | None = None,
) -> FastAPI:
    """Build the application and configure the changelog router.

    Args:
        path: Changelog file to load. A missing file starts an
            initialised empty document that is written on save.
        config: Settings for new documents and text rendering.

    Raises:
        LoaderError: If the file exists but cannot be read.
        ChangelogError: If the file exists but is not a valid changelog.
    """
    if path is not None and path.exists():
        changelog = Changelog.load(path, config=config)
    else:
        changelog = Changelog(config=config)
    changelog.init()
    configure(changelog)
    _app_state["path"] = path

    app = FastAPI(
        title="Chronicle API",
        description="Parse, query and edit Keep a Changelog documents.",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def unified_health() -> dict[str, Any]:
        """Return server status and the file being edited."""
        current = _app_state["path"]
        return {
            "status": "ok",
            "version": __version__,
            "path": str(current) if current is not None else None,
        }

    @app.post("/api/changelog/save")
    async def save() -> dict[str, Any]:
        """Write the document back to the file the server was started with."""
        current = _app_state["path"]
        if current is None:
            raise HTTPException(status_code=409, detail="Server has no changelog file")
        try:
            get_changelog().save(current)
        except OSError as exc:
            logger.exception("Failed to save %s", current)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"path": str(current)}

    app.include_router(router, prefix="/api/changelog", tags=["changelog"])
    logger.info("Changelog router mounted at /api/changelog/")
    return app


def run_server(
    path: Path | None = None,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Start the server via uvicorn.

    Args:
        path: Changelog file to edit.
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8430.
    """
    import uvicorn

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    uvicorn.run(create_app(path), host=host, port=port)


app = create_app()
