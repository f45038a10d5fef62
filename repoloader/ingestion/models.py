"""Pydantic models for the ingestion module.

This module defines the records produced while loading a repository (commits,
the pending-changes entry, references, branch distances) together with the
loader state and the events it emits.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Reserved identifier of the pending-changes record
PENDING_CHANGES_SHA = "0" * 40


class Signature(BaseModel):
    """Identity and time of an author or committer.

    Attributes:
        name: Person name.
        email: Person email.
        timestamp: UNIX timestamp in seconds.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field("", description="Name")
    email: str = Field("", description="Email address")
    timestamp: int = Field(0, description="UNIX timestamp in seconds")


class CommitRecord(BaseModel):
    """A commit parsed from the log stream.

    Attributes:
        sha: 40-character commit SHA.
        parents: Parent SHAs in order.
        author: Author identity.
        committer: Committer identity.
        subject: First line of the message.
        body: Remainder of the message.
        boundary: True if the commit lies outside the requested range.
        sequence: 1-based position in the emitted stream, 0 for pending changes.
    """

    sha: str = Field(..., min_length=40, max_length=40, description="Commit SHA")
    parents: list[str] = Field(default_factory=list, description="Parent SHAs")
    author: Signature = Field(default_factory=Signature, description="Author")
    committer: Signature = Field(default_factory=Signature, description="Committer")
    subject: str = Field("", description="Subject line")
    body: str = Field("", description="Message body")
    boundary: bool = Field(False, description="Boundary commit")
    sequence: int = Field(0, ge=0, description="Position in the log stream")

    class Config:
        """Pydantic model configuration."""

        frozen = False
        extra = "forbid"

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short_sha(self) -> str:
        return self.sha[:8]


class PendingChangesRecord(CommitRecord):
    """Virtual commit describing uncommitted working-copy state.

    Attributes:
        untracked_files: Paths of untracked files.
        unstaged_diff: Raw ``diff-index`` output, working tree vs HEAD.
        staged_diff: Raw ``diff-index --cached`` output, index vs HEAD.
    """

    sha: str = Field(PENDING_CHANGES_SHA, min_length=40, max_length=40)
    subject: str = Field("Local changes", description="Subject line")
    untracked_files: list[str] = Field(default_factory=list, description="Untracked paths")
    unstaged_diff: str = Field("", description="Unstaged diff")
    staged_diff: str = Field("", description="Staged diff")

    @property
    def head_sha(self) -> str:
        return self.parents[0] if self.parents else ""

    @property
    def is_empty(self) -> bool:
        """True when there is nothing uncommitted to show."""
        return not (self.untracked_files or self.unstaged_diff or self.staged_diff)


class ReferenceType(str, Enum):
    """Kind of a git reference."""

    TAG = "tag"
    LOCAL_BRANCH = "local_branch"
    REMOTE_BRANCH = "remote_branch"


class Reference(BaseModel):
    """A branch or tag pointing at a commit.

    Attributes:
        sha: Target commit SHA.
        type: Reference kind.
        name: Short name, e.g. ``main``, ``origin/main`` or ``v1.0``.
    """

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Target commit SHA")
    type: ReferenceType = Field(..., description="Reference type")
    name: str = Field(..., description="Short reference name")


class LocalBranchDistances(BaseModel):
    """Ahead/behind counts of a local branch against both baselines."""

    behind_master: int = Field(0, ge=0)
    ahead_master: int = Field(0, ge=0)
    behind_origin: int = Field(0, ge=0)
    ahead_origin: int = Field(0, ge=0)


class Comparison(BaseModel):
    """Result of one ahead/behind query.

    An unavailable comparison means the baseline could not be compared,
    typically because the baseline ref does not exist.

    Attributes:
        available: Whether the comparison produced data.
        behind: Commits in the baseline missing from the branch.
        ahead: Commits in the branch missing from the baseline.
    """

    model_config = ConfigDict(frozen=True)

    available: bool = Field(True, description="Whether data is available")
    behind: int = Field(0, ge=0, description="Commits behind the baseline")
    ahead: int = Field(0, ge=0, description="Commits ahead of the baseline")

    @classmethod
    def unavailable(cls) -> "Comparison":
        return cls(available=False)


class StreamParseResult(BaseModel):
    """Summary of one pass of the log stream parser.

    Attributes:
        total: Number of NUL-separated candidates in the stream.
        accepted: Number of records inserted into the index.
        truncated: True if parsing stopped at an invalid record.
    """

    total: int = Field(..., ge=0)
    accepted: int = Field(..., ge=0)
    truncated: bool = Field(False)

    @property
    def discarded(self) -> int:
        return self.total - self.accepted


class LoadState(str, Enum):
    """State of the repository loader."""

    IDLE = "idle"
    LOADING = "loading"


class LoadOutcome(str, Enum):
    """How a load ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class LoadEvent(BaseModel):
    """Base class for loader events."""

    model_config = ConfigDict(frozen=True)

    kind: str


class LoadStarted(LoadEvent):
    """Emitted once the number of log records to process is known."""

    kind: Literal["load_started"] = "load_started"
    total: int = Field(..., ge=0, description="Expected number of records")


class LoadStep(LoadEvent):
    """Emitted once per commit record inserted into the index."""

    kind: Literal["load_step"] = "load_step"
    processed: int = Field(..., ge=1, description="Records processed so far")


class LoadFinished(LoadEvent):
    """Emitted when a load has completed and the index is final."""

    kind: Literal["load_finished"] = "load_finished"


class LoadConfigurationError(LoadEvent):
    """Emitted when a load cannot start or is aborted by a critical failure."""

    kind: Literal["configuration_error"] = "configuration_error"
    reason: str = Field(..., description="Human-readable reason")
