"""Git process layer.

Provides typed command descriptors, synchronous execution through GitPython
and asynchronous cancelable streaming through asyncio subprocesses.
"""

from .base import CommandResult, GitBase
from .commands import CommandKind, GitCommand
from .errors import ConfigurationError, GitProcessError, LoaderError, ReentrantLoadError
from .requestor import GitRequestor

__all__ = [
    # Commands
    "CommandKind",
    "GitCommand",
    # Execution
    "CommandResult",
    "GitBase",
    "GitRequestor",
    # Errors
    "LoaderError",
    "ConfigurationError",
    "ReentrantLoadError",
    "GitProcessError",
]
