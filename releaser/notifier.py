"""Comment on issues linked from a released pull request."""

import logging

from releaser.errors import NotificationError
from releaser.github_client import GitHubClient, PullRequestRef
from releaser.references import find_references

logger = logging.getLogger(__name__)


def comment_body(pr_url: str, branch: str) -> str:
    return f"{pr_url} was merged to `{branch}` branch\n<details><summary></summary>Created via API</details>"


def notify_linked_issues(client: GitHubClient, pr: PullRequestRef, branches: list[str]) -> int:
    """
    Post a "merged to <branch>" comment on each issue the PR body links to.

    Comments that already exist on the issue are not posted again. Issues that
    can't be accessed and failed posts are skipped. Returns the number of
    comments posted.
    """
    posted = 0
    if not branches:
        return posted

    for ref in find_references(pr.body, org=pr.org):
        issue = client.get_issue(ref.org, ref.repo, ref.number)
        if issue is None:
            # Broken link?
            continue
        try:
            existing = client.list_comment_bodies(issue)
        except NotificationError as e:
            logger.warning("Can't list comments on %s: %s", ref.url, e)
            continue

        for branch in branches:
            body = comment_body(pr.url, branch)
            if any(body in comment for comment in existing):
                logger.debug("%s already notified about %s", ref.url, branch)
                continue
            try:
                client.create_comment(issue, body)
            except NotificationError as e:
                logger.warning("Can't comment on %s: %s", ref.url, e)
                continue
            existing.append(body)
            posted += 1
    return posted
