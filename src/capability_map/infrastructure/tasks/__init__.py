"""Task sources."""

from .json_file import JsonFileTaskSource

__all__ = ["JsonFileTaskSource"]
