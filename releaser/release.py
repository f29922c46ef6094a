"""
Release (backport) merged pull requests onto other branches.

For each target branch the merge commit is looked up in the branch history by
author and message. If it is missing it is cherry-picked and pushed. Issues
linked from the pull request description get a comment per branch afterwards.
"""

import logging
from dataclasses import dataclass, field

from releaser.cache import RepositoryCache
from releaser.classifier import CommitFingerprint, checkout_branch, find_applied_commit, fingerprint
from releaser.config import DEFAULT_CLONE_URL
from releaser.errors import FatalBranchError, HostingError, NoTargetBranchError, ReleaserError, StateError
from releaser.executor import BranchResult, MergeOutcome, cherry_pick
from releaser.git import Git
from releaser.github_client import GitHubClient, PullRequestRef
from releaser.notifier import notify_linked_issues
from releaser.output import Reporter
from releaser.references import Reference, parse_api_reference, parse_project_url, parse_reference
from releaser.targets import require_branches

logger = logging.getLogger(__name__)


@dataclass
class ReleaseReport:
    pull_request: PullRequestRef
    results: list[BranchResult] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(r.is_fatal for r in self.results)

    @property
    def notify_branches(self) -> list[str]:
        """Branches that now contain the change."""
        done = (MergeOutcome.APPLIED, MergeOutcome.ALREADY_MERGED)
        return [r.branch for r in self.results if r.outcome in done]

    def outcome_for(self, branch: str) -> MergeOutcome | None:
        for result in self.results:
            if result.branch == branch:
                return result.outcome
        return None


def check_releasable(pr: PullRequestRef) -> None:
    if pr.state != "closed":
        raise StateError("Can't release unmerged PR")
    if not pr.merged or not pr.merge_commit_id:
        raise StateError(f"PR #{pr.number} was closed without being merged")


def process_branch(git: Git, sha: str, fp: CommitFingerprint, branch: str, *, dry_run: bool) -> BranchResult:
    """Bring one branch up to date with sha, or say why it can't be."""
    error = checkout_branch(git, branch)
    if error is not None:
        return BranchResult(branch, MergeOutcome.FATAL, f"Checkout error for `{branch}` branch: {error}")

    commit = find_applied_commit(git, branch, fp)
    if commit is not None:
        return BranchResult(branch, MergeOutcome.ALREADY_MERGED, commit, via_message_check=True)

    return cherry_pick(git, sha, branch, dry_run=dry_run)


def release_pull_request(
    client: GitHubClient,
    cache: RepositoryCache,
    ref: Reference,
    specs: list[str],
    *,
    dry_run: bool = False,
    reporter: Reporter | None = None,
    clone_url: str = DEFAULT_CLONE_URL,
) -> ReleaseReport:
    """
    Backport the pull request ref to every branch in specs that applies to
    its repository.

    Branches are processed in order. A conflict moves on to the next branch;
    an unrecoverable cherry-pick or push failure stops the loop and raises
    FatalBranchError once linked issues have been told about the branches that
    did succeed.
    """
    reporter = reporter or Reporter()
    pr = client.get_pull_request(ref.org, ref.repo, ref.number)
    reporter.pull_request(pr)
    check_releasable(pr)
    branches = require_branches(specs, pr.repo)

    report = ReleaseReport(pr)
    stopped: BranchResult | None = None
    url = clone_url.format(org=pr.org, repo=pr.repo)
    with cache.workspace(pr.org, pr.repo, url) as git:
        fp = fingerprint(git, pr.merge_commit_id)
        for branch in branches:
            result = process_branch(git, pr.merge_commit_id, fp, branch, dry_run=dry_run)
            report.results.append(result)
            reporter.branch(result, sha=pr.merge_commit_id, cache_path=git.cwd)
            if result.stops_release:
                stopped = result
                break

    if not dry_run:
        posted = notify_linked_issues(client, pr, report.notify_branches)
        logger.info("Posted %d comment(s) for %s", posted, pr.url)

    if stopped is not None:
        raise FatalBranchError(f"{pr.url} -> {stopped.branch}: {stopped.detail}")
    return report


def release_project(
    client: GitHubClient,
    cache: RepositoryCache,
    project_url: str,
    column_name: str,
    specs: list[str],
    *,
    dry_run: bool = False,
    reporter: Reporter | None = None,
    clone_url: str = DEFAULT_CLONE_URL,
) -> bool:
    """
    Release every pull request linked from the cards of a project column.

    Failures are reported per pull request and do not stop the batch. Returns
    True when nothing failed.
    """
    reporter = reporter or Reporter()
    embedded = reporter.nested(embedded=True)
    project = parse_project_url(project_url)
    project_id = client.find_project_id(project.org, project.number)
    column_id = client.find_column_id(project_id, column_name)

    ok = True

    def _release(pr_ref: Reference) -> None:
        nonlocal ok
        try:
            report = release_pull_request(
                client, cache, pr_ref, specs, dry_run=dry_run, reporter=embedded, clone_url=clone_url
            )
        except NoTargetBranchError as e:
            # Boards span repositories that --to may not cover
            reporter.line(f"{reporter.caution} {e}")
            return
        except ReleaserError as e:
            reporter.error(str(e))
            ok = False
            return
        if report.failed:
            ok = False

    for content_url in client.list_card_content_urls(column_id):
        card = parse_api_reference(content_url)
        if card is None:
            # Note cards have no content
            continue

        if card.is_pull:
            _release(card)
            continue

        issue = client.get_issue(card.org, card.repo, card.number)
        if issue is None:
            reporter.error(f"Can't access {content_url}")
            ok = False
            continue
        reporter.heading(card.number, issue.title, issue.html_url)

        try:
            pull_requests = client.linked_pull_requests(card.org, card.repo, card.number)
        except HostingError as e:
            reporter.error(str(e))
            ok = False
            continue
        if not pull_requests:
            reporter.error(f"Can't find PR for Issue {card.url}")
            continue
        reporter.line(f"{reporter.success} Found {len(pull_requests)} PRs for Issue {card.url}")
        for pr_url in pull_requests:
            pr_ref = parse_reference(pr_url)
            if pr_ref is None:
                logger.warning("Skipping unrecognised pull request URL %s", pr_url)
                continue
            _release(pr_ref)

    return ok
