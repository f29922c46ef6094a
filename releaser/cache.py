"""Local mirrors of remote repositories, one per (org, repo)."""

import contextlib
import fcntl
import logging
import os
from collections.abc import Iterator

from releaser.errors import WorkspaceError
from releaser.git import Git

logger = logging.getLogger(__name__)

DEFAULT_CACHE_ROOT = "/tmp/git_cache"


def _refresh(path: str) -> None:
    git = Git(path)
    if not git.fetch():
        logger.warning("Could not fetch origin in %s", path)
    if not git.reset_hard():
        logger.warning("Could not reset working tree in %s", path)


def ensure(url: str, path: str) -> Git:
    """
    Make sure path holds a clone of url, fetched from origin and hard-reset.

    Clone failure raises WorkspaceError. Fetch and reset are best effort.
    """
    if not os.path.exists(path):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        logger.info("Cloning %s into %s", url, path)
        result = Git.clone(url, path)
        if result.returncode != 0:
            raise WorkspaceError(f"Error during cloning repo {url}: {result.stderr.strip()}")
    _refresh(path)
    return Git(path)


class RepositoryCache:
    """Working copies under <root>/<org>/<repo>, kept between runs."""

    def __init__(self, root: str = DEFAULT_CACHE_ROOT) -> None:
        self.root = root

    def path_for(self, org: str, repo: str) -> str:
        return os.path.join(self.root, org, repo)

    @contextlib.contextmanager
    def locked(self, org: str, repo: str) -> Iterator[str]:
        """Hold an exclusive lock on the working copy of org/repo."""
        path = self.path_for(org, repo)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(f"{path}.lock", "w") as lock_fd:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX)
            try:
                yield path
            finally:
                fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)

    @contextlib.contextmanager
    def workspace(self, org: str, repo: str, url: str) -> Iterator[Git]:
        """
        Lock, clone or refresh the working copy and yield a Git bound to it.

        The copy is refreshed again on exit unless a cherry-pick was left in
        progress for manual conflict resolution.
        """
        with self.locked(org, repo) as path:
            git = ensure(url, path)
            yield git
            if not git.is_cherry_pick_in_progress():
                _refresh(path)
