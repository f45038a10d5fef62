"""repoloader: load a git repository's history into an in-memory index."""

from .config import Settings, get_settings
from .git import GitBase
from .ingestion import RepositoryIndex, RepositoryLoader

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "GitBase",
    "RepositoryIndex",
    "RepositoryLoader",
]
