"""Pytest configuration and shared fixtures for repoloader tests.

This module provides helpers to build raw log records, a scripted git runner
that answers commands without spawning processes, a controllable streaming
requestor, and a real temporary git repository for integration tests.
"""

import asyncio
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from repoloader.config import Settings
from repoloader.git import CommandKind, CommandResult, GitBase, GitCommand

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40
SHA_D = "d" * 40
SHA_TAG = "e" * 40


def make_raw_commit(
    sha: str,
    parents: tuple[str, ...] = (),
    subject: str = "Commit subject",
    body: str = "",
    marker: str = ">",
    author: tuple[str, str, int] = ("Ann Author", "ann@example.com", 1700000000),
    committer: tuple[str, str, int] = ("Carl Committer", "carl@example.com", 1700000100),
) -> bytes:
    """Render one commit exactly as the fixed log format emits it."""
    fields = [
        marker,
        sha,
        " ".join(parents),
        committer[0],
        committer[1],
        str(committer[2]),
        author[0],
        author[1],
        str(author[2]),
        subject,
        body,
    ]
    return "\x1f".join(fields).encode("utf-8")


def make_log_stream(*records: bytes) -> bytes:
    return b"\x00".join(records)


@pytest.fixture
def sample_log() -> bytes:
    """Three linear commits, newest first."""
    return make_log_stream(
        make_raw_commit(SHA_C, (SHA_B,), subject="Third", body="Body of third\n"),
        make_raw_commit(SHA_B, (SHA_A,), subject="Second"),
        make_raw_commit(SHA_A, (), subject="Initial commit"),
    )


# ---------------------------------------------------------------------------
# Scripted git runner
# ---------------------------------------------------------------------------

Response = CommandResult | Callable[[GitCommand], CommandResult]


def ok(output: str = "") -> CommandResult:
    return CommandResult(success=True, output=output)


def fail(stderr: str = "fatal: error") -> CommandResult:
    return CommandResult(success=False, output="", stderr=stderr)


class ScriptedGit(GitBase):
    """GitBase answering commands from a table instead of running git.

    Attributes:
        responses: Response per command kind; callables receive the command.
        calls: Every command run, in order.
    """

    def __init__(self, working_dir: str | Path, responses: dict[CommandKind, Response]) -> None:
        super().__init__(working_dir, settings=Settings(_env_file=None))
        self.responses = responses
        self.calls: list[GitCommand] = []

    def run(self, command: GitCommand) -> CommandResult:
        self.calls.append(command)
        response = self.responses.get(command.kind, fail())
        if callable(response):
            return response(command)
        return response.model_copy()

    def kinds(self) -> list[CommandKind]:
        return [call.kind for call in self.calls]


@pytest.fixture
def clean_responses() -> dict[CommandKind, Response]:
    """Responses for a clean repository on master with no refs beyond master."""
    return {
        CommandKind.SHOW_CDUP: ok(""),
        CommandKind.CURRENT_BRANCH: ok("master"),
        CommandKind.HEAD_SHA: ok(SHA_C),
        CommandKind.UNTRACKED_FILES: ok(""),
        CommandKind.DIFF_INDEX: ok(""),
        CommandKind.SHOW_REFS: ok(f"{SHA_C} refs/heads/master"),
        CommandKind.BRANCH_DISTANCE: ok("0\t0"),
    }


@pytest.fixture
def scripted_git(tmp_path, clean_responses) -> ScriptedGit:
    return ScriptedGit(tmp_path, clean_responses)


# ---------------------------------------------------------------------------
# Controllable requestor
# ---------------------------------------------------------------------------


class FakeRequestor:
    """Stands in for GitRequestor, optionally holding the output back.

    Attributes:
        output: Bytes returned by run().
        error: Exception raised by run() instead of returning output.
        block: Wait for release() before returning.
        cancelled: Whether cancel() was called.
        commands: Commands passed to run().
    """

    def __init__(self, output: bytes = b"", error: Exception | None = None, block: bool = False):
        self.output = output
        self.error = error
        self.block = block
        self.cancelled = False
        self.commands: list[GitCommand] = []
        self._gate = asyncio.Event()

    async def run(self, command: GitCommand) -> bytes:
        self.commands.append(command)
        if self.block:
            await self._gate.wait()
        if self.error is not None:
            raise self.error
        return self.output

    def release(self) -> None:
        self._gate.set()

    def cancel(self) -> None:
        self.cancelled = True


# ---------------------------------------------------------------------------
# Real repository
# ---------------------------------------------------------------------------

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def run_git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        check=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def temp_git_repo() -> Generator[Path, None, None]:
    """Create a temporary git repository on master with two commits."""
    tmpdir = tempfile.mkdtemp()
    repo_path = Path(tmpdir) / "test_repo"
    repo_path.mkdir()

    run_git(repo_path, "init")
    run_git(repo_path, "symbolic-ref", "HEAD", "refs/heads/master")
    run_git(repo_path, "config", "user.email", "test@example.com")
    run_git(repo_path, "config", "user.name", "Test User")
    run_git(repo_path, "config", "commit.gpgsign", "false")
    run_git(repo_path, "config", "tag.gpgsign", "false")

    (repo_path / ".gitignore").write_text("*.pyc\n")
    (repo_path / "README.md").write_text("# Test repository\n")
    run_git(repo_path, "add", ".")
    run_git(repo_path, "commit", "-m", "Initial commit")

    (repo_path / "main.py").write_text("print('hello')\n")
    run_git(repo_path, "add", "main.py")
    run_git(repo_path, "commit", "-m", "Add main module", "-m", "Longer description.")

    yield repo_path

    shutil.rmtree(tmpdir, ignore_errors=True)
