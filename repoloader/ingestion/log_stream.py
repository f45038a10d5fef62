"""Parsing of the NUL-delimited log stream into the index."""

from collections.abc import Callable

import structlog

from .commit_format import RECORD_SEPARATOR, parse_commit
from .index import RepositoryIndex
from .models import StreamParseResult

logger = structlog.get_logger(__name__)

# Type for per-record progress callback, called with records processed so far
StepCallback = Callable[[int], None]


class LogStreamParser:
    """Splits raw log output into commit records and inserts them in order.

    Parsing stops at the first invalid record. ``git log -z`` output may end
    with an empty or partial entry, so everything from that point on is
    discarded for the current load.

    Attributes:
        index: Index receiving the commit records.
    """

    def __init__(self, index: RepositoryIndex) -> None:
        self.index = index

    @staticmethod
    def split(raw: bytes) -> list[bytes]:
        return raw.split(RECORD_SEPARATOR)

    def parse(
        self,
        candidates: list[bytes],
        on_step: StepCallback | None = None,
    ) -> StreamParseResult:
        """Parse candidate records and insert the valid prefix.

        Args:
            candidates: Records already split on the NUL separator.
            on_step: Optional callback invoked after every insertion.

        Returns:
            StreamParseResult describing how much of the stream was accepted.
        """
        accepted = 0
        truncated = False

        for sequence, candidate in enumerate(candidates, start=1):
            record = parse_commit(candidate, sequence=sequence)
            if record is None:
                truncated = True
                break

            self.index.insert_commit(record, sequence)
            accepted = sequence

            if on_step:
                on_step(accepted)

        result = StreamParseResult(total=len(candidates), accepted=accepted, truncated=truncated)

        if truncated:
            logger.debug(
                "Log stream truncated at first invalid record",
                position=accepted + 1,
                discarded=result.discarded,
            )

        return result
