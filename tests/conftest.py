"""Shared test doubles for the VCS and the interactive UI."""

from typing import Dict, List, Optional, Sequence

import pytest

from gu.cli import Context
from gu.core.config import ConfigStore
from gu.core.git import GitBranchError


class FakeVCS:
    """In-memory stand-in for GitCLI that records every mutating call."""

    def __init__(
        self,
        branches: Optional[List[str]] = None,
        current: str = "",
        in_repo: bool = True,
        porcelain: str = "",
        name_status: str = "",
        remotes: Optional[Dict[str, str]] = None,
        upstream: Optional[str] = None,
        ahead: int = 0,
        log: str = "",
        unmerged: Sequence[str] = (),
        undeletable: Sequence[str] = (),
    ):
        self.branches = list(branches or [])
        self.current = current
        self._in_repo = in_repo
        self.porcelain = porcelain
        self.name_status = name_status
        self.remotes = dict(remotes or {})
        self._upstream = upstream
        self.ahead = ahead
        self.log = log
        self.unmerged = set(unmerged)
        self.undeletable = set(undeletable)
        self.calls: List[tuple] = []

    def in_repo(self) -> bool:
        return self._in_repo

    def current_branch(self) -> str:
        return self.current

    def list_branches(self) -> List[str]:
        return list(self.branches)

    def status_porcelain(self) -> str:
        return self.porcelain

    def add_all(self) -> None:
        self.calls.append(("add_all",))

    def staged_name_status(self) -> str:
        return self.name_status

    def commit(self, subject, body, no_verify=False, amend=False, signoff=False) -> None:
        self.calls.append(("commit", subject, body, no_verify, amend, signoff))

    def delete_branch(self, name: str, force: bool = False) -> None:
        self.calls.append(("delete_branch", name, force))
        if name in self.undeletable or (name in self.unmerged and not force):
            raise GitBranchError(f"error: the branch '{name}' is not fully merged")
        self.branches.remove(name)

    def checkout(self, ref: str) -> None:
        self.calls.append(("checkout", ref))
        self.current = ref

    def create_branch(self, name: str) -> None:
        self.calls.append(("create_branch", name))
        self.branches.append(name)
        self.current = name

    def branch_exists(self, name: str) -> bool:
        return name in self.branches

    def remote_url(self, remote: str) -> Optional[str]:
        return self.remotes.get(remote)

    def upstream(self) -> Optional[str]:
        return self._upstream

    def ahead_count(self, upstream: str) -> int:
        return self.ahead

    def log_oneline(self, rev: str, limit: int) -> str:
        return self.log

    def push(self, remote=None, branch=None, set_upstream=False) -> None:
        self.calls.append(("push", remote, branch, set_upstream))


class FakeUI:
    """Scripted answers for selection, confirmation and text prompts."""

    def __init__(self, selections=None, confirms=None, answers=None, secrets=None):
        self.selections = list(selections or [])
        self.confirms = list(confirms or [])
        self.answers = list(answers or [])
        self.secrets = list(secrets or [])
        self.shown: List[tuple] = []
        self.confirm_messages: List[str] = []

    def select_many(self, message, options):
        self.shown.append((message, list(options)))
        return self.selections.pop(0) if self.selections else []

    def select_one(self, message, options):
        self.shown.append((message, list(options)))
        return self.selections.pop(0) if self.selections else None

    def confirm(self, message, default=False):
        self.confirm_messages.append(message)
        return self.confirms.pop(0) if self.confirms else default

    def ask(self, message, default="", validate=None):
        answer = self.answers.pop(0) if self.answers else ""
        return answer or default

    def ask_secret(self, message):
        return self.secrets.pop(0) if self.secrets else ""


class FakeGitHub:
    def __init__(self, pulls=None, created=None, error=None):
        self.pulls = list(pulls or [])
        self.created = created
        self.error = error
        self.tokens: List[str] = []
        self.requests: List[tuple] = []
        self.closed = 0

    def __call__(self, token):
        self.tokens.append(token)
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed += 1

    def list_open_pulls(self, repo):
        self.requests.append(("list", repo))
        return list(self.pulls)

    def create_pull(self, repo, title, body, head, base, draft=False):
        self.requests.append(("create", repo, title, body, head, base, draft))
        if self.error:
            raise self.error
        return self.created


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config" / "config.json")


@pytest.fixture
def make_context(tmp_path, config_path):
    def _make(vcs=None, ui=None, github=None, env=None, token=None):
        env = env or {}
        store = ConfigStore(config_path, env)
        if token:
            store.set_token(token)
        return Context(
            repo_root=str(tmp_path),
            env=env,
            vcs=vcs or FakeVCS(),
            store=store,
            ui=ui or FakeUI(),
            github=github or FakeGitHub(),
        )

    return _make
