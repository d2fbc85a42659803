"""
Git Layer - the version-control collaborator.

Everything that touches the repository goes through the ``VCS`` protocol.
``GitCLI`` is the one real implementation; it shells out to the ``git``
binary and turns non-zero exits into ``GitError``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .util import CmdResult, run, split_lines


class GitError(Exception):
    """Exception raised for Git operation failures."""

    def __init__(self, message: str, args: list[str] | None = None):
        super().__init__(message)
        self.git_args = list(args or [])


class GitRepositoryError(GitError):
    """Exception raised for Git repository state issues."""


class GitBranchError(GitError):
    """Exception raised for Git branch operation failures."""


class GitCommitError(GitError):
    """Exception raised for Git commit operation failures."""


@runtime_checkable
class VCS(Protocol):
    """Operations the commands need from version control."""

    def in_repo(self) -> bool: ...

    def current_branch(self) -> str: ...

    def list_branches(self) -> list[str]: ...

    def status_porcelain(self) -> str: ...

    def add_all(self) -> None: ...

    def staged_name_status(self) -> str: ...

    def commit(
        self,
        subject: str,
        body: str,
        no_verify: bool = False,
        amend: bool = False,
        signoff: bool = False,
    ) -> None: ...

    def delete_branch(self, name: str, force: bool = False) -> None: ...

    def checkout(self, ref: str) -> None: ...

    def create_branch(self, name: str) -> None: ...

    def branch_exists(self, name: str) -> bool: ...

    def remote_url(self, remote: str) -> str | None: ...

    def upstream(self) -> str | None: ...

    def ahead_count(self, upstream: str) -> int: ...

    def log_oneline(self, rev: str, limit: int) -> str: ...

    def push(
        self,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None: ...


def _classify(args: list[str], res: CmdResult) -> GitError:
    error_msg = res.stderr or res.stdout or f"git {' '.join(args)} failed"
    lowered = error_msg.lower()

    if "not a git repository" in lowered:
        return GitRepositoryError(error_msg, args)
    if args and args[0] == "branch":
        return GitBranchError(error_msg, args)
    if args and args[0] == "commit":
        return GitCommitError(error_msg, args)
    return GitError(error_msg, args)


class GitCLI:
    """``VCS`` backed by the git command line, rooted at ``repo_root``."""

    def __init__(self, repo_root: str, binary: str = "git"):
        self.repo_root = repo_root
        self.binary = binary

    def _run(self, args: list[str]) -> CmdResult:
        try:
            return run([self.binary] + args, cwd=self.repo_root)
        except FileNotFoundError as exc:
            raise GitError("git is not installed or not found in PATH", args) from exc

    def _git(self, args: list[str]) -> str:
        res = self._run(args)
        if res.code != 0:
            raise _classify(args, res)
        return res.stdout

    def _try_git(self, args: list[str]) -> str | None:
        res = self._run(args)
        if res.code != 0:
            return None
        return res.stdout

    def in_repo(self) -> bool:
        out = self._try_git(["rev-parse", "--is-inside-work-tree"])
        return (out or "").strip() == "true"

    def current_branch(self) -> str:
        return self._git(["branch", "--show-current"]).strip()

    def list_branches(self) -> list[str]:
        return split_lines(self._git(["branch", "--format=%(refname:short)"]))

    def status_porcelain(self) -> str:
        return self._git(["status", "--porcelain"])

    def add_all(self) -> None:
        self._git(["add", "--all"])

    def staged_name_status(self) -> str:
        return self._git(["diff", "--cached", "--name-status"])

    def commit(
        self,
        subject: str,
        body: str,
        no_verify: bool = False,
        amend: bool = False,
        signoff: bool = False,
    ) -> None:
        args = ["commit", "-m", subject, "-m", body]
        if no_verify:
            args.append("--no-verify")
        if amend:
            args.append("--amend")
        if signoff:
            args.append("--signoff")
        self._git(args)

    def delete_branch(self, name: str, force: bool = False) -> None:
        self._git(["branch", "-D" if force else "-d", name])

    def checkout(self, ref: str) -> None:
        self._git(["checkout", ref])

    def create_branch(self, name: str) -> None:
        self._git(["checkout", "-b", name])

    def branch_exists(self, name: str) -> bool:
        res = self._run(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])
        return res.code == 0

    def remote_url(self, remote: str) -> str | None:
        out = self._try_git(["remote", "get-url", remote])
        if out is None or not out.strip():
            return None
        return out.strip()

    def upstream(self) -> str | None:
        out = self._try_git(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        if out is None or not out.strip():
            return None
        return out.strip()

    def ahead_count(self, upstream: str) -> int:
        out = self._git(["rev-list", "--count", f"{upstream}..HEAD"]).strip()
        return int(out or "0")

    def log_oneline(self, rev: str, limit: int) -> str:
        return self._git(["log", "--oneline", f"--max-count={limit}", rev]).strip()

    def push(
        self,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        if remote:
            args.append(remote)
        if branch:
            args.append(branch)
        self._git(args)
