"""In-memory index of a loaded repository.

The index accumulates everything a load produces: commits in stream order,
references keyed by target SHA, local branch distances, the pending-changes
record and the untracked-file list. It is cleared and rebuilt on every load.
"""

from collections import defaultdict

import structlog

from .models import (
    CommitRecord,
    LocalBranchDistances,
    PendingChangesRecord,
    Reference,
    ReferenceType,
)

logger = structlog.get_logger(__name__)


class RepositoryIndex:
    """Accumulates the records of one repository load.

    Mutated only by the loader and its delegated steps; everything else should
    treat it as read-only and incomplete while a load is in progress.
    """

    def __init__(self) -> None:
        self._commits: list[CommitRecord] = []
        self._by_sha: dict[str, CommitRecord] = {}
        self._references: defaultdict[str, set[Reference]] = defaultdict(set)
        self._distances: dict[str, LocalBranchDistances] = {}
        self._pending: PendingChangesRecord | None = None
        self._untracked: list[str] = []
        self._expected = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop every record of the previous load."""
        self._commits.clear()
        self._by_sha.clear()
        self._references.clear()
        self._distances.clear()
        self._pending = None
        self._untracked = []
        self._expected = 0

    def configure(self, expected_count: int) -> None:
        """Record how many commit records the current load expects."""
        self._expected = expected_count

    def insert_commit(self, record: CommitRecord, sequence: int) -> None:
        """Insert a commit at the given stream position.

        Args:
            record: Parsed commit record.
            sequence: 1-based position in the log stream.

        Raises:
            ValueError: If the sequence does not follow the previous insertion.
        """
        last = self._commits[-1].sequence if self._commits else 0
        if sequence != last + 1:
            raise ValueError(f"Commit sequence {sequence} does not follow {last}")

        record.sequence = sequence
        self._commits.append(record)
        self._by_sha[record.sha] = record

    def insert_reference(self, sha: str, type: ReferenceType, name: str) -> None:
        self._references[sha].add(Reference(sha=sha, type=type, name=name))

    def insert_branch_distances(self, name: str, distances: LocalBranchDistances) -> None:
        self._distances[name] = distances

    def set_pending_changes(
        self,
        sha: str,
        untracked_files: list[str],
        unstaged_diff: str,
        staged_diff: str,
    ) -> PendingChangesRecord:
        """Store the pending-changes record on top of ``sha``.

        Args:
            sha: SHA of HEAD, the sole parent of the record.
            untracked_files: Untracked file paths.
            unstaged_diff: Working tree vs HEAD diff.
            staged_diff: Index vs HEAD diff.

        Returns:
            The stored record.
        """
        self._pending = PendingChangesRecord(
            parents=[sha],
            untracked_files=list(untracked_files),
            unstaged_diff=unstaged_diff,
            staged_diff=staged_diff,
            sequence=0,
        )
        return self._pending

    def set_untracked_files(self, files: list[str]) -> None:
        self._untracked = list(files)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def expected_count(self) -> int:
        return self._expected

    @property
    def pending_changes(self) -> PendingChangesRecord | None:
        return self._pending

    @property
    def untracked_files(self) -> list[str]:
        return list(self._untracked)

    def commits(self) -> list[CommitRecord]:
        """Return the commits in stream order, pending changes first if present."""
        if self._pending is not None:
            return [self._pending, *self._commits]
        return list(self._commits)

    def commit_count(self) -> int:
        """Number of real commits, excluding the pending-changes record."""
        return len(self._commits)

    def get_commit(self, sha: str) -> CommitRecord | None:
        if self._pending is not None and sha == self._pending.sha:
            return self._pending
        return self._by_sha.get(sha)

    def get_references(self, sha: str) -> set[Reference]:
        return set(self._references.get(sha, ()))

    def references(self, type: ReferenceType | None = None) -> list[Reference]:
        """Return every reference, optionally filtered by type, sorted by name."""
        refs = [ref for refs in self._references.values() for ref in refs]
        if type is not None:
            refs = [ref for ref in refs if ref.type == type]
        return sorted(refs, key=lambda ref: (ref.type.value, ref.name))

    def get_branch_distances(self, name: str) -> LocalBranchDistances | None:
        return self._distances.get(name)

    def branch_distances(self) -> dict[str, LocalBranchDistances]:
        return dict(self._distances)

    def is_empty(self) -> bool:
        return not (self._commits or self._references or self._distances or self._pending)
