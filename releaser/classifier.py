"""Decide whether a merge commit is already present on a branch."""

import logging
from dataclasses import dataclass

from releaser.errors import WorkspaceError
from releaser.git import Git

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitFingerprint:
    author_email: str
    message_lines: tuple[str, ...]


def fingerprint(git: Git, sha: str) -> CommitFingerprint:
    """Read the author email and non-blank message lines of sha."""
    try:
        body = git.commit_message(sha)
        email = git.author_email(sha)
    except RuntimeError as e:
        raise WorkspaceError(f"Unknown commit SHA {sha}: {e}") from e
    lines = tuple(line.strip() for line in body.splitlines() if line.strip())
    return CommitFingerprint(author_email=email, message_lines=lines)


def checkout_branch(git: Git, branch: str) -> str | None:
    """
    Replace any local copy of branch with a fresh one from origin.

    Returns None on success, or git's error output.
    """
    git.reset_hard()
    git.delete_branch(branch)
    result = git.checkout_fresh(branch)
    if result.returncode != 0:
        return result.stderr.strip() or f"git checkout {branch} failed"
    return None


def find_applied_commit(git: Git, branch: str, fp: CommitFingerprint) -> str | None:
    """
    Return the id of a commit on branch carrying the same author and every
    message line of fp, or None.

    A fingerprint without message lines never matches: an author-only search
    would match any commit by that person.
    """
    if not fp.author_email or not fp.message_lines:
        logger.debug("Empty fingerprint, skipping commit message check on %s", branch)
        return None
    matches = git.search_log(branch, fp.author_email, list(fp.message_lines))
    return matches[0] if matches else None
