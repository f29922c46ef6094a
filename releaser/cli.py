"""
Release (backport) merged GitHub PRs to maintenance branches.

Usage:
    releaser release https://github.com/org/repo/pull/123 --to release-1.0 --to repo:release-2.0
    releaser --org org release repo/123 --to release-1.0 --dry-run
    releaser project-release https://github.com/orgs/org/projects/1 "Ready to release" --to release-1.0

For each target branch the tool will:
1. Check whether the PR merge commit is already in the branch history
2. Cherry-pick the merge commit otherwise, and push the branch to origin
3. Comment on the issues linked from the PR description
"""

import argparse
import logging
import sys

from releaser.cache import RepositoryCache
from releaser.config import DEFAULT_CLONE_URL, env_default, load_settings
from releaser.errors import ReleaserError
from releaser.github_client import GitHubClient
from releaser.output import Reporter
from releaser.references import parse_release_target
from releaser.release import release_project, release_pull_request


def _add_branch_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--to", "--merge-to",
        dest="to",
        action="append",
        default=[],
        metavar="BRANCH",
        help="Branch the pull request should be merged to; repeatable; `repo:branch` limits it to one repo",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="See what is going to be merged, but do not push changes or comment on issues",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="releaser",
        description="Release merged GitHub pull requests to other branches.",
        epilog="Example: releaser release https://github.com/org/repo/pull/42 --to release-1.0",
    )
    parser.add_argument(
        "--token", "--auth",
        default=env_default("GITHUB_TOKEN"),
        help="GitHub personal auth token (default: GITHUB_TOKEN env var)",
    )
    parser.add_argument(
        "--org",
        default=env_default("GITHUB_ORG"),
        help="GitHub organisation or user name, for repo/number targets (default: GITHUB_ORG env var)",
    )
    parser.add_argument(
        "--cache-dir",
        default=env_default("RELEASER_CACHE_DIR"),
        help="Where repository clones are kept (default: RELEASER_CACHE_DIR or /tmp/git_cache)",
    )
    parser.add_argument(
        "--clone-url",
        default=env_default("RELEASER_CLONE_URL", DEFAULT_CLONE_URL),
        help="Clone URL template with {org} and {repo} placeholders",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log git commands and API calls")

    commands = parser.add_subparsers(dest="command", required=True)

    release = commands.add_parser("release", help="Release a pull request to specified branches")
    release.add_argument("target", help="Pull request URL or <repo>/<pr-num>")
    _add_branch_options(release)

    project = commands.add_parser(
        "project-release",
        help="Release pull requests linked to the issues of a project column",
    )
    project.add_argument("project_url", help="e.g. https://github.com/orgs/org/projects/1")
    project.add_argument("column", help="Name of the project column")
    _add_branch_options(project)
    project.add_argument(
        "--only-missing",
        action="store_true",
        help="List only missing commits that either can be merged or have issues with merging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.token, args.org, args.cache_dir, args.clone_url)
        client = GitHubClient.from_token(settings.token)
        cache = RepositoryCache(settings.cache_dir)

        if args.command == "release":
            ref = parse_release_target(args.target, settings.org)
            report = release_pull_request(
                client,
                cache,
                ref,
                args.to,
                dry_run=args.dry_run,
                reporter=Reporter(),
                clone_url=settings.clone_url,
            )
            ok = not report.failed
        else:
            ok = release_project(
                client,
                cache,
                args.project_url,
                args.column,
                args.to,
                dry_run=args.dry_run,
                reporter=Reporter(only_missing=args.only_missing),
                clone_url=settings.clone_url,
            )
    except ReleaserError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not ok:
        sys.exit(1)
