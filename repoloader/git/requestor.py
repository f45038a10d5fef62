"""Asynchronous, cancelable git execution.

The requestor streams standard output of a long-running git command (the
commit log) in chunks without blocking the event loop, and can kill the
process at any point when a load is cancelled.
"""

import asyncio
import contextlib
from pathlib import Path

import structlog

from repoloader.config import Settings, get_settings

from .commands import GitCommand
from .errors import GitProcessError

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 64 * 1024


class GitRequestor:
    """Streams the output of a git command running in its own process.

    Attributes:
        working_dir: Directory the command runs in.
        settings: Loader settings.
    """

    def __init__(
        self,
        working_dir: str | Path,
        settings: Settings | None = None,
    ) -> None:
        self.working_dir = str(working_dir)
        self.settings = settings or get_settings()
        self._process: asyncio.subprocess.Process | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def run(self, command: GitCommand) -> bytes:
        """Run a command and collect its complete standard output.

        Args:
            command: Command descriptor to execute.

        Returns:
            The raw bytes written to standard output.

        Raises:
            GitProcessError: If the process cannot be spawned, exits with a
                non-zero status, or was cancelled.
        """
        argv = command.argv(self.settings.git_executable)
        logger.debug("Requesting git output", command=command.kind.value, cwd=self.working_dir)

        try:
            self._process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=self.working_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitProcessError(
                f"Failed to start git: {e}", repo_path=self.working_dir
            ) from e

        process = self._process
        assert process.stdout is not None
        assert process.stderr is not None

        stderr_task = asyncio.ensure_future(process.stderr.read())
        chunks: list[bytes] = []

        try:
            while True:
                chunk = await process.stdout.read(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)

            stderr = await stderr_task
            returncode = await process.wait()
        except asyncio.CancelledError:
            stderr_task.cancel()
            self._terminate()
            raise

        if self._cancelled:
            raise GitProcessError("Git command was cancelled", repo_path=self.working_dir)

        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise GitProcessError(
                f"Git command failed with status {returncode}: {message}",
                repo_path=self.working_dir,
                returncode=returncode,
                stderr=message,
            )

        output = b"".join(chunks)
        logger.debug("Git output received", command=command.kind.value, size=len(output))
        return output

    def cancel(self) -> None:
        """Kill the running process, if any."""
        self._cancelled = True
        self._terminate()

    def _terminate(self) -> None:
        if self._process is not None and self._process.returncode is None:
            logger.debug("Killing git process", pid=self._process.pid)
            with contextlib.suppress(ProcessLookupError):
                self._process.kill()
