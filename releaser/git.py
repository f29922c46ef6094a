"""Thin wrapper around the git command line."""

import enum
import logging
import subprocess
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


def run(cmd: list[str], cwd: str | None = None, check: bool = True) -> subprocess.CompletedProcess:
    """Run a command and return the result."""
    logger.debug("$ %s (cwd=%s)", " ".join(cmd), cwd)
    result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    if result.returncode != 0:
        logger.debug("exit %d: %s", result.returncode, result.stderr.strip())
    if check and result.returncode != 0:
        raise RuntimeError(f"Command failed: {' '.join(cmd)}: {result.stderr.strip()}")
    return result


def run_no_check(cmd: list[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run a command and return the result without raising on non-zero exit."""
    return run(cmd, cwd=cwd, check=False)


# Git status --porcelain: first two chars = index + work tree; unmerged codes
_CONFLICT_TYPE_LABELS = {
    "UU": "both modified",
    "AA": "both added",
    "DD": "both deleted",
    "DU": "modify/delete (deleted by us, changed by them)",
    "UD": "modify/delete (changed by us, deleted by them)",
    "AU": "added by us",
    "UA": "added by them",
}


class CherryPickOutcome(enum.Enum):
    CLEAN = "clean"
    EMPTY_DIFF = "empty-diff"
    APPLY_CONFLICT = "apply-conflict"
    OTHER_FAILURE = "other-failure"


@dataclass(frozen=True)
class CherryPickResult:
    outcome: CherryPickOutcome
    diagnostic: str = ""
    conflicted: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class PushResult:
    ok: bool
    diagnostic: str = ""


def classify_cherry_pick(returncode: int, stdout: str, stderr: str) -> CherryPickOutcome:
    """Map the exit status and output of `git cherry-pick` to an outcome."""
    if returncode == 0:
        return CherryPickOutcome.CLEAN
    text = f"{stdout}\n{stderr}"
    # git suggests `git commit --allow-empty` when the pick changes nothing
    if "allow-empty" in text:
        return CherryPickOutcome.EMPTY_DIFF
    if "could not apply" in text:
        return CherryPickOutcome.APPLY_CONFLICT
    return CherryPickOutcome.OTHER_FAILURE


class Git:
    """Git commands bound to one working copy."""

    def __init__(self, cwd: str) -> None:
        self.cwd = cwd

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        return run(["git", *args], cwd=self.cwd, check=check)

    @staticmethod
    def clone(url: str, path: str) -> subprocess.CompletedProcess:
        return run_no_check(["git", "clone", url, path])

    def fetch(self) -> bool:
        return self._git("fetch", "origin", check=False).returncode == 0

    def reset_hard(self) -> bool:
        return self._git("reset", "--hard", check=False).returncode == 0

    def delete_branch(self, branch: str) -> bool:
        return self._git("branch", "-D", branch, check=False).returncode == 0

    def checkout_fresh(self, branch: str) -> subprocess.CompletedProcess:
        """Check out branch so that it points exactly at origin/branch."""
        return self._git("checkout", "-B", branch, "--track", f"origin/{branch}", check=False)

    def commit_message(self, sha: str) -> str:
        return self._git("log", "-1", sha, "--pretty=format:%B").stdout

    def author_email(self, sha: str) -> str:
        return self._git("log", "-1", sha, "--pretty=format:%aE").stdout.strip()

    def parent_count(self, sha: str) -> int:
        parents = self._git("log", "-1", sha, "--pretty=format:%P").stdout.split()
        return len(parents)

    def search_log(self, branch: str, author: str, lines: list[str]) -> list[str]:
        """
        Return ids of commits reachable from branch that were authored by
        author and whose message contains every one of lines.
        """
        cmd = ["log", branch, "--all-match", "--fixed-strings", "--format=%H", f"--author=<{author}>"]
        cmd += [f"--grep={line}" for line in lines]
        cmd.append("--")
        result = self._git(*cmd, check=False)
        if result.returncode != 0:
            return []
        return result.stdout.split()

    def cherry_pick(self, sha: str, mainline: int | None = None) -> CherryPickResult:
        cmd = ["cherry-pick", "-x"]
        if mainline is not None:
            cmd += ["-m", str(mainline)]
        result = self._git(*cmd, sha, check=False)
        outcome = classify_cherry_pick(result.returncode, result.stdout, result.stderr)
        diagnostic = (result.stderr or result.stdout).strip()
        if outcome is CherryPickOutcome.APPLY_CONFLICT:
            return CherryPickResult(outcome, diagnostic, self.conflicted_entries())
        if outcome is CherryPickOutcome.EMPTY_DIFF:
            self._git("cherry-pick", "--abort", check=False)
        return CherryPickResult(outcome, diagnostic)

    def push(self, branch: str) -> PushResult:
        result = self._git("push", "origin", branch, check=False)
        return PushResult(ok=result.returncode == 0, diagnostic=(result.stderr or result.stdout).strip())

    def is_cherry_pick_in_progress(self) -> bool:
        """Return True if a cherry-pick is in progress (e.g. after a conflict)."""
        return self._git("rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD", check=False).returncode == 0

    def conflicted_entries(self) -> list[tuple[str, str]]:
        """Return list of (path, conflict_type_label) for unmerged paths."""
        result = self._git("status", "--porcelain", "-u", check=False)
        if result.returncode != 0:
            return []
        entries: list[tuple[str, str]] = []
        for line in result.stdout.splitlines():
            if len(line) < 4:
                continue
            code = line[:2]
            rest = line[3:].strip()
            # Handle "old -> new" renames
            path = rest.split(" -> ")[-1].strip() if " -> " in rest else rest
            if code in _CONFLICT_TYPE_LABELS:
                entries.append((path, _CONFLICT_TYPE_LABELS[code]))
        return entries
