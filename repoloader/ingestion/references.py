"""Classification of ``git show-ref -d`` output lines."""

from .commit_format import is_sha
from .models import Reference, ReferenceType

PEEL_SUFFIX = "^{}"

TAGS_PREFIX = "refs/tags/"
HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"


def classify_reference(line: str) -> Reference | None:
    """Classify one ``<sha> <ref-path>`` line.

    Tags are accepted both as plain and as peeled (``^{}``) entries, with the
    peel suffix stripped from the name. Non-tag paths carrying the peel
    suffix, remote ``HEAD`` pointers and any other namespace are dropped.

    Args:
        line: A line of ``git show-ref -d`` output.

    Returns:
        The classified Reference, or None if the line is not accepted.
    """
    sha, _, ref_path = line.strip().partition(" ")
    if not is_sha(sha) or not ref_path:
        return None

    if ref_path.startswith(TAGS_PREFIX):
        name = ref_path[len(TAGS_PREFIX) :]
        if name.endswith(PEEL_SUFFIX):
            name = name[: -len(PEEL_SUFFIX)]
        return Reference(sha=sha, type=ReferenceType.TAG, name=name) if name else None

    if ref_path.endswith(PEEL_SUFFIX):
        return None

    if ref_path.startswith(HEADS_PREFIX):
        name = ref_path[len(HEADS_PREFIX) :]
        return Reference(sha=sha, type=ReferenceType.LOCAL_BRANCH, name=name) if name else None

    if ref_path.startswith(REMOTES_PREFIX):
        name = ref_path[len(REMOTES_PREFIX) :]
        if not name or name == "HEAD" or name.endswith("/HEAD"):
            return None
        return Reference(sha=sha, type=ReferenceType.REMOTE_BRANCH, name=name)

    return None
