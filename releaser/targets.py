"""Resolve --to branch specs for one repository."""

from releaser.errors import NoTargetBranchError


def resolve_branches(specs: list[str], repo: str) -> list[str]:
    """
    Return the branch names that apply to repo, in the order given.

    `branch` applies everywhere, `repo:branch` only to that repo. Duplicates
    are kept.
    """
    branches: list[str] = []
    for spec in specs:
        if ":" in spec:
            scope, _, branch = spec.partition(":")
            if scope != repo:
                continue
            spec = branch
        branches.append(spec)
    return branches


def require_branches(specs: list[str], repo: str) -> list[str]:
    """Like resolve_branches, but raise when nothing applies to repo."""
    branches = resolve_branches(specs, repo)
    if not branches:
        raise NoTargetBranchError(f"Can't find merge destination for `{repo}` repo")
    return branches
