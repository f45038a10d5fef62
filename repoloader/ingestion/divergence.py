"""Ahead/behind metrics of local branches.

Each local branch is compared against two baselines, the local default branch
and its remote-tracking counterpart. A baseline that does not exist yields an
unavailable comparison and leaves the matching distances at zero.
"""

import structlog

from repoloader.git import GitBase, GitCommand

from .models import Comparison, LocalBranchDistances

logger = structlog.get_logger(__name__)


def parse_comparison(output: str) -> Comparison:
    """Parse ``rev-list --left-right --count`` output.

    Args:
        output: Raw output, expected as ``"<behind>\\t<ahead>"``.

    Returns:
        The comparison, unavailable if the output is not two integers.
    """
    values = output.replace("\n", "").split("\t")
    if len(values) != 2:
        return Comparison.unavailable()

    try:
        behind, ahead = int(values[0]), int(values[1])
    except ValueError:
        return Comparison.unavailable()

    if behind < 0 or ahead < 0:
        return Comparison.unavailable()

    return Comparison(behind=behind, ahead=ahead)


class BranchDivergenceProbe:
    """Computes LocalBranchDistances for local branches.

    Attributes:
        git: Git runner bound to the repository.
    """

    def __init__(self, git: GitBase) -> None:
        self.git = git

    def compare(self, baseline: str, branch: str) -> Comparison:
        """Compare ``branch`` against ``baseline``.

        Args:
            baseline: Baseline ref, e.g. ``master`` or ``origin/master``.
            branch: Local branch name.

        Returns:
            The comparison, unavailable if the command failed.
        """
        ret = self.git.run(GitCommand.branch_distance(baseline, branch))
        if not ret.success:
            logger.debug("Comparison unavailable", baseline=baseline, branch=branch)
            return Comparison.unavailable()
        return parse_comparison(ret.output)

    def probe(self, branch: str) -> LocalBranchDistances:
        """Compute distances of ``branch`` against both baselines."""
        settings = self.git.settings
        distances = LocalBranchDistances()

        to_master = self.compare(settings.default_branch, branch)
        if to_master.available:
            distances.behind_master = to_master.behind
            distances.ahead_master = to_master.ahead

        to_origin = self.compare(settings.remote_default_branch, branch)
        if to_origin.available:
            distances.behind_origin = to_origin.behind
            distances.ahead_origin = to_origin.ahead

        return distances
