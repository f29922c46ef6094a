"""Release merged GitHub PRs to other branches."""

from releaser.cli import main
from releaser.release import release_project, release_pull_request

__all__ = ["main", "release_project", "release_pull_request"]
