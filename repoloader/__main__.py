"""Command-line entry point: load a repository once and print a summary."""

import argparse
import asyncio
import sys

import structlog

from .config import Settings, get_settings
from .git import GitBase
from .ingestion import LoadEvent, LoadOutcome, ReferenceType, RepositoryLoader
from .log_config import configure_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoloader",
        description="Load the history of a git repository and print a summary.",
    )
    parser.add_argument("path", nargs="?", default=".", help="Path inside the repository")
    parser.add_argument(
        "--all", action="store_true", dest="show_all", help="Walk every ref, not just HEAD"
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser


async def _run(path: str, show_all: bool, settings: Settings) -> int:
    loader = RepositoryLoader(GitBase(path, settings=settings))

    def _on_event(event: LoadEvent) -> None:
        logger.debug("Load event", **event.model_dump())

    loader.subscribe(_on_event)
    outcome = await loader.load(show_all=show_all)

    if outcome is not LoadOutcome.COMPLETED:
        print(f"Load {outcome.value}: {path}", file=sys.stderr)
        return 1

    index = loader.index
    print(f"Repository: {loader.git.working_dir}")
    print(f"Branch:     {loader.git.current_branch}")
    print(f"Commits:    {index.commit_count()}")

    head = loader.git.get_last_commit()
    tip = index.get_commit(head.output) if head.success else None
    if tip is not None:
        print(f"Head:       {tip.short_sha} {tip.subject}")

    print(f"Tags:       {len(index.references(ReferenceType.TAG))}")
    print(f"Branches:   {len(index.references(ReferenceType.LOCAL_BRANCH))} local, "
          f"{len(index.references(ReferenceType.REMOTE_BRANCH))} remote")

    for name, distances in sorted(index.branch_distances().items()):
        print(
            f"  {name}: {distances.ahead_master} ahead / {distances.behind_master} behind master, "
            f"{distances.ahead_origin} ahead / {distances.behind_origin} behind origin"
        )

    pending = index.pending_changes
    if pending is not None:
        print(
            f"Pending:    {len(pending.untracked_files)} untracked, "
            f"unstaged={'yes' if pending.unstaged_diff else 'no'}, "
            f"staged={'yes' if pending.staged_diff else 'no'}"
        )

    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level})
    configure_logging(settings)

    return asyncio.run(_run(args.path, args.show_all, settings))


if __name__ == "__main__":
    sys.exit(main())
