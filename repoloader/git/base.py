"""Synchronous git execution bound to a working directory.

Uses GitPython's command wrapper for run-to-completion invocations. Failures
are reported through ``CommandResult.success`` rather than raised, since most
callers degrade to empty data when a command fails.
"""

from pathlib import Path

import structlog
from git import Git
from git.exc import GitError
from pydantic import BaseModel, Field

from repoloader.config import Settings, get_settings

from .commands import GitCommand

logger = structlog.get_logger(__name__)


class CommandResult(BaseModel):
    """Outcome of a synchronous git command.

    Attributes:
        success: True when the command exited with status 0.
        output: Standard output with the trailing newline stripped.
        stderr: Standard error output.
    """

    success: bool = Field(..., description="Whether the command succeeded")
    output: str = Field("", description="Standard output")
    stderr: str = Field("", description="Standard error")


class GitBase:
    """Runs git commands in a repository working directory.

    Holds the working directory and the cached name of the current branch,
    both of which are rewritten while a load resolves the repository.

    Attributes:
        working_dir: Directory every command runs in, empty if unset.
        current_branch: Last known current branch name.
        settings: Loader settings.
    """

    def __init__(self, working_dir: str | Path = "", settings: Settings | None = None) -> None:
        self.working_dir = str(working_dir) if working_dir else ""
        self.current_branch = ""
        self.settings = settings or get_settings()

    def run(self, command: GitCommand) -> CommandResult:
        """Run a command to completion.

        Args:
            command: Command descriptor to execute.

        Returns:
            CommandResult with the exit verdict and captured output.
        """
        argv = command.argv(self.settings.git_executable)
        logger.debug("Running git command", command=command.kind.value, cwd=self.working_dir)

        try:
            status, stdout, stderr = Git(self.working_dir or None).execute(
                argv,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=self.settings.command_timeout,
            )
        except GitError as e:
            logger.warning("Git command could not be executed", command=str(command), error=str(e))
            return CommandResult(success=False, output="", stderr=str(e))

        if status != 0:
            logger.debug(
                "Git command failed",
                command=command.kind.value,
                status=status,
                stderr=stderr,
            )

        return CommandResult(success=status == 0, output=stdout, stderr=stderr)

    def update_current_branch(self) -> str:
        """Refresh the cached current branch name.

        Returns:
            The current branch name, empty if it cannot be resolved.
        """
        ret = self.run(GitCommand.current_branch())
        self.current_branch = ret.output.strip() if ret.success else ""
        return self.current_branch

    def get_last_commit(self) -> CommandResult:
        """Resolve the SHA of HEAD."""
        ret = self.run(GitCommand.head_sha())
        if ret.success:
            ret.output = ret.output.strip()
        return ret
