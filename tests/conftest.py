"""Shared fixtures: throwaway git repositories and a fake GitHub client."""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from releaser.cache import RepositoryCache
from releaser.errors import HostingError, NotificationError
from releaser.github_client import PullRequestRef

AUTHOR = "dev@example.com"


def git(cwd: Path | str, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout


def commit(repo: Path, message: str, files: dict[str, str] | None = None, email: str = AUTHOR) -> str:
    """Write files, commit them as email and return the new commit id."""
    for name, content in (files or {}).items():
        (repo / name).write_text(content)
        git(repo, "add", name)
    git(
        repo,
        "commit", "--allow-empty", "--allow-empty-message",
        f"--author=Dev <{email}>", "-m", message,
    )
    return git(repo, "rev-parse", "HEAD").strip()


@pytest.fixture(autouse=True)
def git_env(tmp_path, monkeypatch):
    """Keep git away from the user's configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Dev")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", AUTHOR)
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Releaser")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "releaser@example.com")
    monkeypatch.delenv("GIT_DIR", raising=False)


@dataclass
class Remote:
    """A bare origin plus a working clone used to prepare history."""

    origin: Path
    work: Path

    def push(self, *branches: str) -> None:
        git(self.work, "push", "origin", *branches)

    def checkout(self, branch: str) -> None:
        git(self.work, "checkout", branch)

    def log(self, branch: str, fmt: str = "%B") -> str:
        return git(self.origin, "log", branch, f"--format={fmt}")

    def head(self, branch: str) -> str:
        return git(self.origin, "rev-parse", branch).strip()


@pytest.fixture
def remote(tmp_path) -> Remote:
    """
    origin with main, release-1.0 and release-2.0 all at the same base
    commit. app.txt holds three lines.
    """
    origin = tmp_path / "origin.git"
    work = tmp_path / "work"
    git(tmp_path, "init", "--bare", "-b", "main", str(origin))
    git(tmp_path, "clone", str(origin), str(work))
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    commit(work, "Initial commit", {"app.txt": "line1\nline2\nline3\n"})
    git(work, "branch", "release-1.0")
    git(work, "branch", "release-2.0")
    git(work, "push", "origin", "main", "release-1.0", "release-2.0")
    return Remote(origin=origin, work=work)


@pytest.fixture
def cache(tmp_path) -> RepositoryCache:
    return RepositoryCache(str(tmp_path / "cache"))


@dataclass
class FakeIssue:
    title: str
    html_url: str
    comments: list[str] = field(default_factory=list)


class FakeGitHubClient:
    """In-memory stand-in for releaser.github_client.GitHubClient."""

    def __init__(self) -> None:
        self.pulls: dict[tuple[str, str, int], PullRequestRef] = {}
        self.issues: dict[tuple[str, str, int], FakeIssue] = {}
        self.timelines: dict[tuple[str, str, int], list[str]] = {}
        self.projects: dict[tuple[str, int], int] = {}
        self.columns: dict[tuple[int, str], int] = {}
        self.cards: dict[int, list[str]] = {}
        self.failing_posts: set[str] = set()
        self.failing_timelines: set[tuple[str, str, int]] = set()
        self.posted: list[tuple[str, str]] = []

    def add_pull(self, pr: PullRequestRef) -> PullRequestRef:
        self.pulls[(pr.org, pr.repo, pr.number)] = pr
        return pr

    def add_issue(self, org: str, repo: str, number: int, title: str = "Issue") -> FakeIssue:
        issue = FakeIssue(title=title, html_url=f"https://github.com/{org}/{repo}/issues/{number}")
        self.issues[(org, repo, number)] = issue
        return issue

    def get_pull_request(self, org, repo, number):
        try:
            return self.pulls[(org, repo, number)]
        except KeyError:
            message = f"Error during getting info about pull request {org}/{repo}#{number}: 404"
            raise HostingError(message) from None

    def get_issue(self, org, repo, number):
        return self.issues.get((org, repo, number))

    def list_comment_bodies(self, issue):
        return list(issue.comments)

    def create_comment(self, issue, body):
        if issue.html_url in self.failing_posts:
            raise NotificationError("Can't create comment: 403")
        issue.comments.append(body)
        self.posted.append((issue.html_url, body))

    def linked_pull_requests(self, org, repo, number):
        if (org, repo, number) in self.failing_timelines:
            raise HostingError(f"Can't read timeline of {org}/{repo}#{number}: 403")
        return self.timelines.get((org, repo, number), [])

    def find_project_id(self, org, number):
        return self.projects[(org, number)]

    def find_column_id(self, project_id, column_name):
        return self.columns[(project_id, column_name)]

    def list_card_content_urls(self, column_id):
        return self.cards.get(column_id, [])


@pytest.fixture
def client() -> FakeGitHubClient:
    return FakeGitHubClient()


def make_pull(
    sha: str | None,
    *,
    number: int = 7,
    body: str = "",
    state: str = "closed",
    merged: bool = True,
    org: str = "acme",
    repo: str = "service",
) -> PullRequestRef:
    return PullRequestRef(
        org=org,
        repo=repo,
        number=number,
        merge_commit_id=sha,
        state=state,
        title="Fix bug A",
        url=f"https://github.com/{org}/{repo}/pull/{number}",
        body=body,
        merged=merged,
    )
