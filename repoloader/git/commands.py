"""Typed descriptors for the git commands issued by the loader.

Each command is described by a ``CommandKind`` plus the few parameters it
needs, and rendered to an argv list only at execution time. Nothing here goes
through a shell, so paths and ref names never need quoting.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CommandKind(str, Enum):
    """Kinds of git invocations issued while loading a repository."""

    SHOW_CDUP = "show_cdup"
    CURRENT_BRANCH = "current_branch"
    HEAD_SHA = "head_sha"
    LOG = "log"
    SHOW_REFS = "show_refs"
    BRANCH_DISTANCE = "branch_distance"
    DIFF_INDEX = "diff_index"
    UNTRACKED_FILES = "untracked_files"


class GitCommand(BaseModel):
    """A git invocation described by its kind and typed parameters.

    Attributes:
        kind: What the command does.
        revision: Revision argument (HEAD SHA for diffs, branch for log scope).
        baseline: Baseline ref for divergence comparisons.
        pretty_format: Pretty format string for log commands.
        show_all: Whether a log command walks every ref.
        cached: Whether a diff compares the index instead of the working tree.
        exclude_file: Extra exclude file for untracked-file listings.
    """

    model_config = ConfigDict(frozen=True)

    kind: CommandKind = Field(..., description="Command kind")
    revision: str | None = Field(None, description="Revision argument")
    baseline: str | None = Field(None, description="Baseline ref")
    pretty_format: str | None = Field(None, description="Log pretty format")
    show_all: bool = Field(False, description="Walk all refs")
    cached: bool = Field(False, description="Diff the index")
    exclude_file: str | None = Field(None, description="Additional exclude file")

    @classmethod
    def show_cdup(cls) -> "GitCommand":
        return cls(kind=CommandKind.SHOW_CDUP)

    @classmethod
    def current_branch(cls) -> "GitCommand":
        return cls(kind=CommandKind.CURRENT_BRANCH)

    @classmethod
    def head_sha(cls) -> "GitCommand":
        return cls(kind=CommandKind.HEAD_SHA)

    @classmethod
    def log(
        cls,
        pretty_format: str,
        show_all: bool,
        branch: str | None = None,
    ) -> "GitCommand":
        """Build the date-ordered, NUL-separated log command.

        Args:
            pretty_format: Format string describing one commit record.
            show_all: Walk every ref instead of the current branch only.
            branch: Branch to walk when ``show_all`` is False.

        Returns:
            The log command descriptor.
        """
        return cls(
            kind=CommandKind.LOG,
            pretty_format=pretty_format,
            show_all=show_all,
            revision=None if show_all else branch,
        )

    @classmethod
    def show_refs(cls) -> "GitCommand":
        return cls(kind=CommandKind.SHOW_REFS)

    @classmethod
    def branch_distance(cls, baseline: str, branch: str) -> "GitCommand":
        """Build an ahead/behind count between ``baseline`` and ``branch``."""
        return cls(kind=CommandKind.BRANCH_DISTANCE, baseline=baseline, revision=branch)

    @classmethod
    def diff_index(cls, sha: str, cached: bool = False) -> "GitCommand":
        return cls(kind=CommandKind.DIFF_INDEX, revision=sha, cached=cached)

    @classmethod
    def untracked_files(cls, exclude_file: str | None = None) -> "GitCommand":
        return cls(kind=CommandKind.UNTRACKED_FILES, exclude_file=exclude_file)

    def argv(self, executable: str = "git") -> list[str]:
        """Render the command as an argument vector.

        Args:
            executable: Git binary to put in front of the arguments.

        Returns:
            The argv list, ready for a subprocess call.
        """
        return [executable, *_RENDERERS[self.kind](self)]

    def __str__(self) -> str:
        return " ".join(self.argv())


def _render_log(cmd: GitCommand) -> list[str]:
    args = [
        "log",
        "--date-order",
        "--no-color",
        "--parents",
        "--boundary",
        "-z",
        f"--pretty=format:{cmd.pretty_format or ''}",
    ]
    if cmd.show_all:
        args.append("--all")
    elif cmd.revision:
        args.append(cmd.revision)
    # Separates revisions from paths
    args.append("--")
    return args


def _render_diff_index(cmd: GitCommand) -> list[str]:
    args = ["diff-index"]
    if cmd.cached:
        args.append("--cached")
    args.append(cmd.revision or "HEAD")
    return args


def _render_untracked(cmd: GitCommand) -> list[str]:
    args = ["ls-files", "-z", "--others"]
    if cmd.exclude_file:
        args.append(f"--exclude-from={cmd.exclude_file}")
    args.append("--exclude-per-directory=.gitignore")
    return args


_RENDERERS: dict[CommandKind, Callable[[GitCommand], list[str]]] = {
    CommandKind.SHOW_CDUP: lambda cmd: ["rev-parse", "--show-cdup"],
    CommandKind.CURRENT_BRANCH: lambda cmd: ["rev-parse", "--abbrev-ref", "HEAD"],
    CommandKind.HEAD_SHA: lambda cmd: ["rev-parse", "--revs-only", "HEAD"],
    CommandKind.LOG: _render_log,
    CommandKind.SHOW_REFS: lambda cmd: ["show-ref", "-d"],
    CommandKind.BRANCH_DISTANCE: lambda cmd: [
        "rev-list",
        "--left-right",
        "--count",
        f"{cmd.baseline}...{cmd.revision}",
        "--",
    ],
    CommandKind.DIFF_INDEX: _render_diff_index,
    CommandKind.UNTRACKED_FILES: _render_untracked,
}
