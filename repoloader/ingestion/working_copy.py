"""Synthesis of the pending-changes record from the working copy."""

from pathlib import Path

import structlog

from repoloader.git import GitBase, GitCommand

from .index import RepositoryIndex
from .models import PendingChangesRecord

logger = structlog.get_logger(__name__)

EXCLUDE_FILE = Path(".git") / "info" / "exclude"


class WorkingCopyStateBuilder:
    """Collects untracked files and uncommitted diffs relative to HEAD.

    Attributes:
        git: Git runner bound to the repository root.
        index: Index receiving the untracked list and pending record.
    """

    def __init__(self, git: GitBase, index: RepositoryIndex) -> None:
        self.git = git
        self.index = index

    def get_untracked_files(self) -> list[str]:
        """List untracked files honouring ``.gitignore`` and the local exclude file.

        Returns:
            Untracked paths relative to the repository root, empty on failure.
        """
        exclude_path = Path(self.git.working_dir) / EXCLUDE_FILE
        exclude_file = str(exclude_path) if exclude_path.is_file() else None

        ret = self.git.run(GitCommand.untracked_files(exclude_file))
        if not ret.success:
            return []

        return [path for path in ret.output.split("\0") if path]

    def _diff(self, sha: str, cached: bool) -> str:
        ret = self.git.run(GitCommand.diff_index(sha, cached=cached))
        return ret.output if ret.success else ""

    def build(self) -> PendingChangesRecord | None:
        """Store the untracked list and, if the tree is dirty, the pending record.

        Returns:
            The pending-changes record stored in the index, or None if the
            working copy is clean or HEAD cannot be resolved.
        """
        untracked = self.get_untracked_files()
        self.index.set_untracked_files(untracked)

        head = self.git.get_last_commit()
        if not head.success or not head.output:
            logger.debug("HEAD cannot be resolved, no pending changes")
            return None

        unstaged = self._diff(head.output, cached=False)
        staged = self._diff(head.output, cached=True)

        if not (untracked or unstaged or staged):
            logger.debug("Working copy is clean")
            return None

        logger.debug(
            "Pending changes found",
            untracked=len(untracked),
            unstaged=bool(unstaged),
            staged=bool(staged),
        )
        return self.index.set_pending_changes(head.output, untracked, unstaged, staged)
