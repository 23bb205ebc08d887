"""FastAPI router for changelog editing.

Exposes REST endpoints to parse a changelog, query its versions, add
versions and changes, and render the result. Designed to be mounted at
``/api/changelog/`` by the parent application.

Example::

    from fastapi import FastAPI
    from chronicle import Changelog
    from chronicle.server import configure, router

    app = FastAPI()
    configure(Changelog())
    app.include_router(router, prefix="/api/changelog")
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from chronicle import __version__
from chronicle.changelog.change import ChangeSet
from chronicle.changelog.document import Changelog
from chronicle.core.exceptions import (
    ChangelogError,
    DuplicateVersionError,
    VersionNotFoundError,
)

logger = logging.getLogger(__name__)

# ===================================================================
# Pydantic request models
# ===================================================================


class ParseRequest(BaseModel):
    """Request body for replacing the document with parsed markdown."""

    text: str = Field(..., max_length=2_000_000)


class AddVersionRequest(BaseModel):
    """Request body for adding a version on top of the list."""

    version: str = Field(..., min_length=1, max_length=100)
    date: str | None = Field(default=None, max_length=40)


class AddChangeRequest(BaseModel):
    """Request body for routing categorized changes to a version."""

    version: str = Field(..., min_length=1, max_length=100)
    date: str | None = Field(default=None, max_length=40)
    added: list[str] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)
    deprecated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    fixed: list[str] = Field(default_factory=list)
    security: list[str] = Field(default_factory=list)


# ===================================================================
# Shared state and factory
# ===================================================================

_state: dict[str, Any] = {
    "changelog": None,
}


def get_changelog() -> Changelog:
    """Return the configured Changelog, raising 503 if not initialised.

    Raises:
        HTTPException: 503 if ``configure()`` has not been called.
    """
    changelog = _state.get("changelog")
    if changelog is None:
        raise HTTPException(
            status_code=503,
            detail="Changelog not initialised. Call configure() first.",
        )
    return changelog


def configure(changelog: Changelog) -> None:
    """Inject the document the router edits.

    Must be called before the router handles any requests.
    """
    _state["changelog"] = changelog


def _to_http(exc: ChangelogError) -> HTTPException:
    """Map a changelog error to an HTTP error with a structured detail."""
    if isinstance(exc, VersionNotFoundError):
        status = 404
    elif isinstance(exc, DuplicateVersionError):
        status = 409
    else:
        status = 422
    return HTTPException(status_code=status, detail=exc.to_dict())


# ===================================================================
# Router
# ===================================================================

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    """Return service health status."""
    changelog = _state.get("changelog")
    return {
        "status": "ok" if changelog is not None else "not_configured",
        "version": __version__,
        "versions": len(changelog.versions) if changelog is not None else 0,
    }


@router.post("/parse")
async def parse(request: ParseRequest) -> dict[str, Any]:
    """Replace the document with the parsed markdown text.

    Returns:
        Dictionary with the parsed version strings in file order.
    """
    try:
        changelog = get_changelog()
        changelog.parse(request.text)
        return {"versions": changelog.get_versions()}
    except ChangelogError as exc:
        raise _to_http(exc) from exc
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Failed to parse changelog")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.get("/versions")
async def list_versions() -> dict[str, Any]:
    """List version strings in file order (newest first by convention)."""
    return {"versions": get_changelog().get_versions()}


@router.get("/versions/recent")
async def recent_version() -> dict[str, Any]:
    """Return the first version in the file."""
    block = get_changelog().get_recent_version()
    if block is None:
        raise HTTPException(status_code=404, detail="Changelog has no versions")
    return block.to_dict()


@router.get("/versions/latest")
async def latest_version() -> dict[str, Any]:
    """Return the last version in the file."""
    block = get_changelog().get_latest_version()
    if block is None:
        raise HTTPException(status_code=404, detail="Changelog has no versions")
    return block.to_dict()


@router.get("/versions/{version}")
async def get_version(version: str) -> dict[str, Any]:
    """Return one version with its changes grouped by category."""
    try:
        return get_changelog().require_version(version).to_dict()
    except ChangelogError as exc:
        raise _to_http(exc) from exc


@router.post("/versions", status_code=201)
async def add_version(request: AddVersionRequest) -> dict[str, Any]:
    """Add an empty version above the existing ones."""
    try:
        block = get_changelog().add_version(request.version, date=request.date)
        return block.to_dict()
    except ChangelogError as exc:
        raise _to_http(exc) from exc
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Failed to add version %s", request.version)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.delete("/versions/{version}")
async def remove_version(version: str) -> dict[str, Any]:
    """Remove a version and its separator."""
    try:
        block = get_changelog().remove_version(version)
        return {"removed": block.ver}
    except ChangelogError as exc:
        raise _to_http(exc) from exc


@router.post("/changes")
async def add_change(request: AddChangeRequest) -> dict[str, Any]:
    """Route categorized changes to a version, creating it if needed."""
    try:
        change_set = ChangeSet.from_dict(request.model_dump())
        block = get_changelog().add_change(change_set)
        return block.to_dict()
    except ChangelogError as exc:
        raise _to_http(exc) from exc
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Failed to add changes to %s", request.version)
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.get("/render")
async def render(
    format: str = Query(default="markdown", pattern="^(markdown|text)$"),
) -> dict[str, Any]:
    """Render the document as markdown or as a plain listing."""
    changelog = get_changelog()
    content = changelog.render() if format == "markdown" else changelog.to_text()
    return {"format": format, "content": content}
