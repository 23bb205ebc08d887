"""
Loader interface and registry.

A loader is the changelog's markdown collaborator: it tokenizes source
text into the flat Block list the structuring pass folds over, and turns
single Blocks back into source text. Loader classes register by file
extension so ``Changelog.load`` can pick one for a path.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from chronicle.core.document import Block

logger = logging.getLogger(__name__)


class LoaderError(Exception):
    """A changelog file could not be located, matched to a loader or read."""

    def __init__(self, message: str, source_path: Path | None = None, details: str | None = None):
        self.message = message
        self.source_path = source_path
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "source_path": None if self.source_path is None else str(self.source_path),
            "details": self.details,
        }


class BaseLoader(ABC):
    """
    Tokenizer/renderer pair for one source format.

    Subclasses declare the extensions they read and implement ``parse``
    and ``render``. Non-fatal oddities found while tokenizing (token
    kinds the loader does not model) are collected in ``warnings``.
    """

    SUPPORTED_EXTENSIONS: ClassVar[list[str]] = []
    LOADER_NAME: ClassVar[str] = "base"

    def __init__(self) -> None:
        self._warnings: list[str] = []

    @classmethod
    def can_load(cls, path: Path) -> bool:
        return path.suffix.lower() in cls.SUPPORTED_EXTENSIONS

    @abstractmethod
    def parse(self, text: str) -> list[Block]:
        """Tokenize source text into Blocks in document order."""

    @abstractmethod
    def render(self, block: Block, indent: int = 0) -> str:
        """Source text for one Block, including its trailing blank line."""

    def read_text(self, path: Path) -> str:
        """
        Read a UTF-8 changelog file this loader understands.

        Raises:
            LoaderError: If the file is missing, has another extension or
                cannot be decoded
        """
        if not path.is_file():
            raise LoaderError(f"File not found: {path}", source_path=path)
        if not self.can_load(path):
            raise LoaderError(
                f"{self.LOADER_NAME} loader cannot read {path.suffix or 'extensionless'} files",
                source_path=path,
                details=f"Expected one of: {', '.join(self.SUPPORTED_EXTENSIONS)}",
            )

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(f"Cannot read {path.name}", source_path=path, details=str(e)) from e

    def load(self, path: Path) -> list[Block]:
        blocks = self.parse(self.read_text(path))
        logger.debug("%s: %d blocks from %s", self.LOADER_NAME, len(blocks), path)
        return blocks

    @property
    def warnings(self) -> list[str]:
        """Warnings from the most recent ``parse`` call."""
        return list(self._warnings)

    def _warn(self, message: str) -> None:
        logger.debug("%s loader: %s", self.LOADER_NAME, message)
        self._warnings.append(message)

    def _clear_warnings(self) -> None:
        self._warnings = []


class LoaderRegistry:
    """
    Loader classes by name, matched to files by extension.

    Registration order decides ties between loaders that claim the same
    extension.
    """

    _loaders: ClassVar[dict[str, type[BaseLoader]]] = {}

    @classmethod
    def register(cls, loader_class: type[BaseLoader]) -> type[BaseLoader]:
        """Class decorator adding a loader under its ``LOADER_NAME``."""
        cls._loaders.setdefault(loader_class.LOADER_NAME, loader_class)
        return loader_class

    @classmethod
    def get_loader(cls, path: Path) -> BaseLoader | None:
        """A fresh loader instance for the path, or None."""
        match = next((lc for lc in cls._loaders.values() if lc.can_load(path)), None)
        return match() if match is not None else None

    @classmethod
    def supported_extensions(cls) -> list[str]:
        return sorted({ext for lc in cls._loaders.values() for ext in lc.SUPPORTED_EXTENSIONS})

    @classmethod
    def require_loader(cls, path: Path) -> BaseLoader:
        """
        Like ``get_loader`` but fails for unknown extensions.

        Raises:
            LoaderError: If no registered loader reads the file's extension
        """
        loader = cls.get_loader(path)
        if loader is None:
            raise LoaderError(
                f"No changelog loader for {path.name}",
                source_path=path,
                details=f"Known extensions: {', '.join(cls.supported_extensions())}",
            )
        return loader
