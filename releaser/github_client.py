"""GitHub API access used by releaser, built on PyGithub."""

import logging
from dataclasses import dataclass

from github import Auth, Github, GithubException

from releaser.errors import ConfigError, HostingError, NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequestRef:
    org: str
    repo: str
    number: int
    merge_commit_id: str | None
    state: str
    title: str
    url: str
    body: str
    merged: bool = True


class GitHubClient:
    """Wraps a PyGithub client; built once and passed to whoever needs it."""

    def __init__(self, gh: Github) -> None:
        self.gh = gh

    @classmethod
    def from_token(cls, token: str) -> "GitHubClient":
        return cls(Github(auth=Auth.Token(token)))

    def _repo(self, org: str, repo: str):
        return self.gh.get_repo(f"{org}/{repo}")

    def get_pull_request(self, org: str, repo: str, number: int) -> PullRequestRef:
        try:
            pr = self._repo(org, repo).get_pull(number)
        except GithubException as e:
            message = f"Error during getting info about pull request {org}/{repo}#{number}: {e}"
            raise HostingError(message) from e
        return PullRequestRef(
            org=org,
            repo=repo,
            number=number,
            merge_commit_id=pr.merge_commit_sha,
            state=pr.state,
            title=pr.title,
            url=pr.html_url,
            body=pr.body or "",
            merged=bool(pr.merged),
        )

    def get_issue(self, org: str, repo: str, number: int):
        """Return the issue, or None if it cannot be accessed."""
        try:
            return self._repo(org, repo).get_issue(number)
        except GithubException as e:
            logger.debug("Can't access %s/%s#%d: %s", org, repo, number, e)
            return None

    def list_comment_bodies(self, issue) -> list[str]:
        try:
            return [comment.body or "" for comment in issue.get_comments()]
        except GithubException as e:
            raise NotificationError(f"Can't list comments: {e}") from e

    def create_comment(self, issue, body: str) -> None:
        try:
            issue.create_comment(body)
        except GithubException as e:
            raise NotificationError(f"Can't create comment: {e}") from e

    def linked_pull_requests(self, org: str, repo: str, number: int) -> list[str]:
        """URLs of pull requests that cross-reference the issue."""
        urls: list[str] = []
        try:
            issue = self._repo(org, repo).get_issue(number)
            for event in issue.get_timeline():
                if event.event != "cross-referenced" or event.source is None:
                    continue
                source_issue = event.source.issue
                if source_issue is not None and "/pull/" in source_issue.html_url:
                    urls.append(source_issue.html_url)
        except GithubException as e:
            raise HostingError(f"Can't read timeline of {org}/{repo}#{number}: {e}") from e
        return urls

    def find_project_id(self, org: str, number: int) -> int:
        # Project URLs carry the number; the API wants the id
        for project in self.gh.get_organization(org).get_projects(state="all"):
            if project.number == number:
                return project.id
        raise ConfigError("Project not found")

    def find_column_id(self, project_id: int, column_name: str) -> int:
        for column in self.gh.get_project(project_id).get_columns():
            if column.name == column_name:
                return column.id
        raise ConfigError(f"Can't find column `{column_name}` in project")

    def list_card_content_urls(self, column_id: int) -> list[str]:
        column = self.gh.get_project_column(column_id)
        return [card.content_url or "" for card in column.get_cards()]
