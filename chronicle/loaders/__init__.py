"""Block loaders for chronicle."""

from chronicle.loaders.base import BaseLoader, LoaderError, LoaderRegistry
from chronicle.loaders.markdown import MarkdownLoader

__all__ = [
    "BaseLoader",
    "LoaderError",
    "LoaderRegistry",
    "MarkdownLoader",
]
