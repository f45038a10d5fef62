"""Repository load orchestrator.

This module provides the RepositoryLoader class which sequences a complete
load: resolve the repository root, refresh the current branch, build the
pending-changes record, stream the commit log, parse it into the index and
finally load references and branch distances. Progress and completion are
published through an event channel and an awaitable outcome.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import structlog

from repoloader.git import (
    ConfigurationError,
    GitBase,
    GitCommand,
    GitProcessError,
    GitRequestor,
    LoaderError,
    ReentrantLoadError,
)

from .commit_format import LOG_FORMAT
from .divergence import BranchDivergenceProbe
from .index import RepositoryIndex
from .log_stream import LogStreamParser
from .models import (
    LoadConfigurationError,
    LoadEvent,
    LoadFinished,
    LoadOutcome,
    LoadStarted,
    LoadState,
    LoadStep,
    ReferenceType,
    StreamParseResult,
)
from .references import classify_reference
from .working_copy import WorkingCopyStateBuilder

logger = structlog.get_logger(__name__)


# Type for event listeners
LoadListener = Callable[[LoadEvent], None]

# Type for requestor construction, called with the resolved working directory
RequestorFactory = Callable[[str], GitRequestor]


class _LoadInterrupted(Exception):
    """Raised inside a load when a listener cancelled it."""


class RepositoryLoader:
    """Loads a repository's history, references and working-copy state.

    The loader is either IDLE or LOADING. A load leaves LOADING only by
    completing, by being cancelled, or by a failure of one of the two
    load-critical steps (root resolution and the log request).

    Attributes:
        git: Git runner bound to the repository.
        index: Index rebuilt on every load.
        show_all: Whether the last load walked every ref.
    """

    def __init__(
        self,
        git: GitBase,
        index: RepositoryIndex | None = None,
        requestor_factory: RequestorFactory | None = None,
    ) -> None:
        """Initialize the RepositoryLoader.

        Args:
            git: Git runner with the working directory configured.
            index: Index to populate. Creates a new one if not provided.
            requestor_factory: Builds the streaming requestor for the log
                command. Defaults to a GitRequestor sharing ``git``'s settings.
        """
        self.git = git
        self.index = index or RepositoryIndex()
        self.show_all = False
        self._requestor_factory = requestor_factory or self._default_requestor
        self._listeners: list[LoadListener] = []
        self._state = LoadState.IDLE
        self._load_id = 0
        self._requestor: GitRequestor | None = None
        self._task: asyncio.Task[None] | None = None
        self._outcome: asyncio.Future[LoadOutcome] | None = None

    def _default_requestor(self, working_dir: str) -> GitRequestor:
        return GitRequestor(working_dir, settings=self.git.settings)

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is LoadState.LOADING

    # ------------------------------------------------------------------
    # Event channel
    # ------------------------------------------------------------------

    def subscribe(self, listener: LoadListener) -> None:
        """Register a listener called with every LoadEvent."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: LoadListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: LoadEvent) -> None:
        # Listener failures are logged, never propagated
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Load listener failed", event_kind=event.kind)

    # ------------------------------------------------------------------
    # Load lifecycle
    # ------------------------------------------------------------------

    def start_load(self, show_all: bool = False) -> bool:
        """Start loading the repository.

        Must be called from a running event loop; the log request is
        dispatched as a task on that loop.

        Args:
            show_all: Walk every ref instead of the current branch only.

        Returns:
            True once the log request has been dispatched, False if the load
            could not start.
        """
        loop = asyncio.get_running_loop()

        try:
            self._check_can_start()
        except ReentrantLoadError as e:
            logger.warning(e.message)
            return False
        except ConfigurationError as e:
            logger.error(e.message)
            self._emit(LoadConfigurationError(reason=e.message))
            return False

        logger.info("Initializing repository load", path=self.git.working_dir, show_all=show_all)

        self.index.clear()
        self._state = LoadState.LOADING
        self._load_id += 1
        self._outcome = loop.create_future()
        self.show_all = show_all

        try:
            self._configure_repo_directory()
        except ConfigurationError as e:
            self._abort(e.message)
            return False

        self.git.update_current_branch()

        WorkingCopyStateBuilder(self.git, self.index).build()

        command = GitCommand.log(LOG_FORMAT, show_all, self.git.current_branch)
        self._requestor = self._requestor_factory(self.git.working_dir)
        self._task = loop.create_task(
            self._request_revisions(self._requestor, command, self._load_id)
        )

        logger.info("Log request dispatched", branch=self.git.current_branch)
        return True

    async def load(self, show_all: bool = False) -> LoadOutcome:
        """Start a load and wait for it to end.

        Returns:
            The outcome, FAILED if the load could not start.
        """
        if not self.start_load(show_all):
            return LoadOutcome.FAILED
        return await self.wait_finished()

    async def wait_finished(self) -> LoadOutcome:
        """Wait for the current (or last) load to end.

        Returns:
            How the load ended.

        Raises:
            LoaderError: If no load has been started.
        """
        if self._outcome is None:
            raise LoaderError("No load has been started", repo_path=self.git.working_dir)
        return await asyncio.shield(self._outcome)

    def cancel(self) -> bool:
        """Cancel the load in progress.

        Kills the log subprocess, discards everything loaded so far and
        returns to IDLE so that the next load starts from scratch.

        Returns:
            True if a load was cancelled, False if none was in progress.
        """
        if self._state is not LoadState.LOADING:
            return False

        logger.info("Cancelling repository load", path=self.git.working_dir)

        if self._requestor is not None:
            self._requestor.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self.index.clear()
        self._finish(LoadOutcome.CANCELLED)
        return True

    def handle_log_output(self, raw: bytes) -> StreamParseResult | None:
        """Process the complete log output of the current load.

        Parses the stream into the index, loads references and branch
        distances, then returns to IDLE and emits LoadFinished.

        Args:
            raw: Raw NUL-delimited log output.

        Returns:
            The parse summary, or None if no load is in progress.
        """
        if self._state is not LoadState.LOADING:
            logger.warning("Ignoring log output, no load in progress")
            return None

        logger.debug("Processing revisions")

        parser = LogStreamParser(self.index)
        candidates = parser.split(raw)
        total = len(candidates)

        logger.debug("Commits to process", total=total)

        load_id = self._load_id

        def _publish(event: LoadEvent) -> None:
            self._emit(event)
            if not self._is_current(load_id):
                raise _LoadInterrupted

        try:
            self.index.configure(total)
            _publish(LoadStarted(total=total))

            result = parser.parse(
                candidates,
                on_step=lambda processed: _publish(LoadStep(processed=processed)),
            )

            self.load_references()
        except _LoadInterrupted:
            logger.debug("Load cancelled while processing revisions")
            return None
        except Exception as e:
            logger.exception("Repository load failed while processing revisions")
            self._abort(f"Failed to process revisions: {e}")
            return None

        logger.info(
            "Repository load complete",
            commits=result.accepted,
            references=len(self.index.references()),
            pending_changes=self.index.pending_changes is not None,
        )

        self._finish(LoadOutcome.COMPLETED)
        self._emit(LoadFinished())
        return result

    def load_references(self) -> None:
        """Insert references and local branch distances into the index."""
        logger.debug("Loading references")

        ret = self.git.run(GitCommand.show_refs())
        if not ret.success:
            logger.warning("References unavailable", stderr=ret.stderr)
            return

        probe = BranchDivergenceProbe(self.git)

        for line in ret.output.split("\n"):
            reference = classify_reference(line)
            if reference is None:
                continue

            self.index.insert_reference(reference.sha, reference.type, reference.name)

            if reference.type is ReferenceType.LOCAL_BRANCH:
                self.index.insert_branch_distances(reference.name, probe.probe(reference.name))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_can_start(self) -> None:
        if self._state is LoadState.LOADING:
            raise ReentrantLoadError(
                "Git is currently loading data", repo_path=self.git.working_dir
            )
        if not self.git.working_dir:
            raise ConfigurationError("No working directory set")

    def _configure_repo_directory(self) -> None:
        """Rewrite the working directory to the repository root.

        Raises:
            ConfigurationError: If the working directory is not a repository.
        """
        logger.debug("Configuring repository directory")

        ret = self.git.run(GitCommand.show_cdup())
        if not ret.success:
            raise ConfigurationError(
                "The working directory is not a Git repository",
                repo_path=self.git.working_dir,
            )

        root = (Path(self.git.working_dir) / ret.output.strip()).resolve()
        self.git.working_dir = str(root)

    async def _request_revisions(
        self,
        requestor: GitRequestor,
        command: GitCommand,
        load_id: int,
    ) -> None:
        logger.debug("Loading revisions")

        try:
            raw = await requestor.run(command)
        except GitProcessError as e:
            if self._is_current(load_id):
                self._abort(f"Log request failed: {e.message}")
            return

        if self._is_current(load_id):
            self.handle_log_output(raw)

    def _is_current(self, load_id: int) -> bool:
        return load_id == self._load_id and self._state is LoadState.LOADING

    def _abort(self, reason: str) -> None:
        logger.error("Repository load aborted", reason=reason, path=self.git.working_dir)
        self.index.clear()
        self._finish(LoadOutcome.FAILED)
        self._emit(LoadConfigurationError(reason=reason))

    def _finish(self, outcome: LoadOutcome) -> None:
        self._state = LoadState.IDLE
        self._requestor = None
        self._task = None
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(outcome)
