"""Ingestion module for repository history loading.

This module turns the output of a handful of git commands into an in-memory
index: the commit log, branches and tags, local branch divergence and the
uncommitted working-copy state.

Example:
    >>> from repoloader.git import GitBase
    >>> from repoloader.ingestion import RepositoryLoader
    >>> loader = RepositoryLoader(GitBase("/path/to/repo"))
    >>> outcome = await loader.load(show_all=True)
    >>> print(f"Loaded {loader.index.commit_count()} commits")
"""

from .commit_format import LOG_FORMAT, parse_commit
from .divergence import BranchDivergenceProbe, parse_comparison
from .index import RepositoryIndex
from .loader import LoadListener, RepositoryLoader
from .log_stream import LogStreamParser
from .models import (
    PENDING_CHANGES_SHA,
    CommitRecord,
    Comparison,
    LoadConfigurationError,
    LoadEvent,
    LoadFinished,
    LoadOutcome,
    LoadStarted,
    LoadState,
    LoadStep,
    LocalBranchDistances,
    PendingChangesRecord,
    Reference,
    ReferenceType,
    Signature,
    StreamParseResult,
)
from .references import classify_reference
from .working_copy import WorkingCopyStateBuilder

__all__ = [
    # Orchestration
    "RepositoryLoader",
    "LoadListener",
    "RepositoryIndex",
    # Models
    "PENDING_CHANGES_SHA",
    "Signature",
    "CommitRecord",
    "PendingChangesRecord",
    "Reference",
    "ReferenceType",
    "LocalBranchDistances",
    "Comparison",
    "StreamParseResult",
    "LoadState",
    "LoadOutcome",
    # Events
    "LoadEvent",
    "LoadStarted",
    "LoadStep",
    "LoadFinished",
    "LoadConfigurationError",
    # Components
    "LOG_FORMAT",
    "parse_commit",
    "LogStreamParser",
    "classify_reference",
    "BranchDivergenceProbe",
    "parse_comparison",
    "WorkingCopyStateBuilder",
]
