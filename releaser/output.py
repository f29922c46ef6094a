"""User-facing report lines."""

import sys
from typing import TextIO

from releaser.executor import BranchResult, MergeOutcome
from releaser.github_client import PullRequestRef

_COLORS = {
    "green": "\033[92m",
    "yellow": "\033[93m",
    "red": "\033[91m",
    "bold": "\033[1m",
    "reset": "\033[0m",
}


class Reporter:
    """
    Prints progress for one run.

    embedded is used for pull requests found through a project board: lines
    are indented and the conflict help is shortened. only_missing hides
    branches that need no attention.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        *,
        embedded: bool = False,
        only_missing: bool = False,
        color: bool | None = None,
    ) -> None:
        self.out = out if out is not None else sys.stdout
        self.embedded = embedded
        self.only_missing = only_missing
        self.color = color if color is not None else self.out.isatty()

    def _style(self, text: str, *styles: str) -> str:
        if not self.color:
            return text
        prefix = "".join(_COLORS[s] for s in styles)
        return f"{prefix}{text}{_COLORS['reset']}"

    @property
    def success(self) -> str:
        return self._style("✔", "bold", "green")

    @property
    def caution(self) -> str:
        return self._style("✔", "bold", "yellow")

    @property
    def failure(self) -> str:
        return self._style("✘", "bold", "red")

    @property
    def prefix(self) -> str:
        return "\t" if self.embedded else ""

    def line(self, text: str = "") -> None:
        print(text, file=self.out)

    def nested(self, embedded: bool) -> "Reporter":
        return Reporter(self.out, embedded=embedded, only_missing=self.only_missing, color=self.color)

    def heading(self, number: int, title: str, url: str) -> None:
        self.line(f"{self._style(f'[{number}] {title}', 'bold')}\n{url}")

    def pull_request(self, pr: PullRequestRef) -> None:
        title = self._style(f"[{pr.number}] {pr.title}", "bold")
        if self.embedded:
            self.line(f"{self.prefix}{title}\n\t{pr.url}")
        else:
            self.line(f"\n{title}\n{pr.url}\nState: {pr.state}\nMerge SHA: {pr.merge_commit_id}\n")

    def error(self, message: str) -> None:
        self.line(f"{self.prefix}{self.failure} {message}")

    def branch(self, result: BranchResult, *, sha: str = "", cache_path: str = "") -> None:
        p = self.prefix
        if result.outcome is MergeOutcome.ALREADY_MERGED:
            if self.only_missing:
                return
            suffix = " [commit message check]" if result.via_message_check else ""
            self.line(f"{p}{self.success} Already merged to {result.branch}{suffix}")
        elif result.outcome is MergeOutcome.APPLIED:
            if self.only_missing:
                return
            self.line(f"{p}{self.success} Successfully merged to {result.branch}")
        elif result.outcome is MergeOutcome.APPLIED_DRY_RUN:
            self.line(f"{p}{self.caution} Can be merged to {result.branch}")
            if not self.embedded:
                self.line("Not pushing changes because of --dry-run")
        elif result.outcome is MergeOutcome.CONFLICT:
            self._conflict(result, sha, cache_path)
        else:
            self.line(f"{p}{self.failure} Failed to merge to {result.branch}: {result.detail}")

    def _conflict(self, result: BranchResult, sha: str, cache_path: str) -> None:
        if self.embedded:
            self.line(f"{self.prefix}{self.failure} Conflict during cherry-picking `{sha}` to `{result.branch}`")
            return
        self.line(f"{self.failure} Conflict during cherry-picking to `{result.branch}`")
        for path, kind in result.conflicted_files:
            self.line(f"  {path}  ({kind})")
        self.line(
            f"\nTo resolve: `cd {cache_path}`, fix conflict, run `git cherry-pick --continue`, "
            f"and push to origin `git push origin {result.branch}`\n"
            "Tip: Use `cd -` to go back into previous directory"
        )
