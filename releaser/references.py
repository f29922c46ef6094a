"""
Parse GitHub references (issue/PR URLs, repo/number targets, project URLs).
"""

import re
from dataclasses import dataclass

from releaser.errors import ConfigError

# Match: https://github.com/org/repo/pull/123 or .../issues/123
_WEB_PATTERN = re.compile(
    r"https://github\.com/([^/\s]+)/([^/\s]+)/(issues|pull)/(\d+)"
)
# Project cards point at the REST API, not the web UI
_API_PATTERN = re.compile(
    r"https://api\.github\.com/repos/([^/\s]+)/([^/\s]+)/(issues|pull)/(\d+)"
)
_PROJECT_PATTERN = re.compile(r"https://github\.com/orgs/([^/\s]+)/projects/(\d+)")
_SHORT_TARGET_PATTERN = re.compile(r"^([^/\s]+)/(\d+)$")


@dataclass(frozen=True)
class Reference:
    """A single issue or pull request on GitHub."""

    org: str
    repo: str
    kind: str  # "issues" or "pull"
    number: int

    @property
    def is_pull(self) -> bool:
        return self.kind == "pull"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.org}/{self.repo}/{self.kind}/{self.number}"


@dataclass(frozen=True)
class ProjectRef:
    org: str
    number: int


def _from_match(match: re.Match) -> Reference:
    org, repo, kind, number = match.groups()
    return Reference(org=org, repo=repo, kind=kind, number=int(number))


def parse_reference(url: str) -> Reference | None:
    """Return the first web reference found in url, or None."""
    match = _WEB_PATTERN.search(url or "")
    return _from_match(match) if match else None


def parse_api_reference(content_url: str) -> Reference | None:
    """Parse a project card content URL (api.github.com/repos/...)."""
    match = _API_PATTERN.search(content_url or "")
    return _from_match(match) if match else None


def find_references(text: str | None, org: str | None = None) -> list[Reference]:
    """
    Return every issue/PR URL in text, in order of appearance and without
    duplicates. When org is given, references to other organizations are
    dropped.
    """
    if not text:
        return []
    found: list[Reference] = []
    for match in _WEB_PATTERN.finditer(text):
        ref = _from_match(match)
        if org is not None and ref.org != org:
            continue
        if ref not in found:
            found.append(ref)
    return found


def parse_release_target(target: str, default_org: str | None) -> Reference:
    """
    Parse the `release` command target.

    Accepts a pull request URL, or `repo/number` combined with default_org.
    """
    target = (target or "").strip()
    if target.startswith("http"):
        ref = parse_reference(target)
        if ref is None:
            raise ConfigError(f"Not a GitHub issue or pull request URL: {target}")
        return Reference(org=ref.org, repo=ref.repo, kind="pull", number=ref.number)

    match = _SHORT_TARGET_PATTERN.match(target)
    if not match:
        raise ConfigError("Target should have <repo>/<pr-num> format or be URL to pull request")
    if not default_org:
        raise ConfigError("Organisation is required for <repo>/<pr-num> targets (use --org or GITHUB_ORG)")
    repo, number = match.groups()
    return Reference(org=default_org, repo=repo, kind="pull", number=int(number))


def parse_project_url(url: str) -> ProjectRef:
    match = _PROJECT_PATTERN.search(url or "")
    if not match:
        raise ConfigError(f"Project url not found: {url}")
    org, number = match.groups()
    return ProjectRef(org=org, number=int(number))
