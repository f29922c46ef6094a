"""Cherry-pick a merge commit onto a branch and push the result."""

import enum
import logging
from dataclasses import dataclass, field

from releaser.git import CherryPickOutcome, Git

logger = logging.getLogger(__name__)


class MergeOutcome(enum.Enum):
    ALREADY_MERGED = "already-merged"
    CONFLICT = "conflict"
    APPLIED = "applied"
    APPLIED_DRY_RUN = "applied-dry-run"
    FATAL = "fatal"


@dataclass(frozen=True)
class BranchResult:
    branch: str
    outcome: MergeOutcome
    detail: str = ""
    # True when found by the commit message check rather than by cherry-pick
    via_message_check: bool = False
    conflicted_files: list[tuple[str, str]] = field(default_factory=list)
    # Set when the workspace can no longer be used for the remaining branches
    stops_release: bool = False

    @property
    def is_fatal(self) -> bool:
        return self.outcome is MergeOutcome.FATAL


def cherry_pick(git: Git, sha: str, branch: str, *, dry_run: bool) -> BranchResult:
    """
    Apply sha to the checked-out branch and push it unless dry_run.

    A conflict leaves the working tree as git left it.
    """
    mainline = 1 if git.parent_count(sha) > 1 else None
    result = git.cherry_pick(sha, mainline=mainline)

    if result.outcome is CherryPickOutcome.EMPTY_DIFF:
        return BranchResult(branch, MergeOutcome.ALREADY_MERGED)
    if result.outcome is CherryPickOutcome.APPLY_CONFLICT:
        return BranchResult(branch, MergeOutcome.CONFLICT, result.diagnostic, conflicted_files=result.conflicted)
    if result.outcome is CherryPickOutcome.OTHER_FAILURE:
        return BranchResult(branch, MergeOutcome.FATAL, result.diagnostic, stops_release=True)

    if dry_run:
        logger.debug("Dry run, not pushing %s", branch)
        return BranchResult(branch, MergeOutcome.APPLIED_DRY_RUN)

    push = git.push(branch)
    if not push.ok:
        detail = f"Can't push changes to origin: {push.diagnostic}"
        return BranchResult(branch, MergeOutcome.FATAL, detail, stops_release=True)
    return BranchResult(branch, MergeOutcome.APPLIED)
