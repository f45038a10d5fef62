"""Record schema of the fixed ``git log`` format.

Each commit is rendered as a fixed sequence of fields separated by the ASCII
unit separator (``0x1f``); commits are separated by NUL bytes (``git log -z``).
The body is always the last field, so a body that happens to contain the
separator is still parsed intact.
"""

import re

from .models import CommitRecord, Signature

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = b"\x00"

BOUNDARY_MARKER = "-"

# Field name -> git placeholder, in emission order
LOG_FIELDS: tuple[tuple[str, str], ...] = (
    ("marker", "%m"),
    ("sha", "%H"),
    ("parents", "%P"),
    ("committer_name", "%cn"),
    ("committer_email", "%ce"),
    ("committer_time", "%ct"),
    ("author_name", "%an"),
    ("author_email", "%ae"),
    ("author_time", "%at"),
    ("subject", "%s"),
    ("body", "%b"),
)

LOG_FORMAT = "%x1f".join(placeholder for _, placeholder in LOG_FIELDS)

_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


def is_sha(value: str) -> bool:
    """Check whether a string is a full 40-character hex SHA."""
    return bool(_SHA_RE.match(value))


def parse_commit(raw: bytes, sequence: int = 0) -> CommitRecord | None:
    """Parse one NUL-delimited record of the log stream.

    Args:
        raw: Bytes of a single record, without the NUL separator.
        sequence: Position to assign to the record.

    Returns:
        The parsed CommitRecord, or None if the record is invalid.
    """
    text = raw.decode("utf-8", errors="replace")

    # Leading newlines can precede records when git pads the separator
    text = text.lstrip("\n")
    if not text:
        return None

    values = text.split(FIELD_SEPARATOR, len(LOG_FIELDS) - 1)
    if len(values) != len(LOG_FIELDS):
        return None

    fields = dict(zip((name for name, _ in LOG_FIELDS), values, strict=True))

    sha = fields["sha"].strip()
    if not is_sha(sha):
        return None

    parents = fields["parents"].split()
    if not all(is_sha(parent) for parent in parents):
        return None

    try:
        committer_time = int(fields["committer_time"])
        author_time = int(fields["author_time"])
    except ValueError:
        return None

    return CommitRecord(
        sha=sha,
        parents=parents,
        author=Signature(
            name=fields["author_name"],
            email=fields["author_email"],
            timestamp=author_time,
        ),
        committer=Signature(
            name=fields["committer_name"],
            email=fields["committer_email"],
            timestamp=committer_time,
        ),
        subject=fields["subject"],
        body=fields["body"].rstrip("\n"),
        boundary=fields["marker"].strip() == BOUNDARY_MARKER,
        sequence=sequence,
    )
