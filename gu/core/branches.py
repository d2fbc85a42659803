"""
Branch Layer - decide which local branches may be offered for deletion.

Protected and current branches never become candidates. Candidates whose
name matches the head ref of an open pull request are shown but disabled
unless the caller opts in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .git import GitError, VCS
from .github import PullRequest


DEFAULT_PROTECTED = frozenset({"main", "master", "integration", "develop"})
PROTECTED_PREFIXES = ("release/",)


@dataclass(frozen=True)
class LocalBranch:
    name: str
    is_current: bool
    is_protected: bool

    @property
    def deletable(self) -> bool:
        return not (self.is_current or self.is_protected)


@dataclass(frozen=True)
class BranchOption:
    name: str
    pull: Optional[PullRequest] = None
    disabled: bool = False


@dataclass
class BranchPRMatch:
    """Case-folded branch name -> the first open PR built from it."""

    by_name: dict[str, PullRequest] = field(default_factory=dict)

    def get(self, branch: str) -> Optional[PullRequest]:
        return self.by_name.get(branch.casefold())

    def __contains__(self, branch: str) -> bool:
        return branch.casefold() in self.by_name

    def __len__(self) -> int:
        return len(self.by_name)


@dataclass
class DeletionReport:
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def parse_protected(text: Optional[str]) -> frozenset[str]:
    if text is None:
        return DEFAULT_PROTECTED
    return frozenset(name.strip() for name in text.split(",") if name.strip())


def is_protected(name: str, protected: Iterable[str] = DEFAULT_PROTECTED) -> bool:
    if name in protected:
        return True
    return name.startswith(PROTECTED_PREFIXES)


def local_branches(
    names: Iterable[str],
    current: str,
    protected: Iterable[str] = DEFAULT_PROTECTED,
) -> list[LocalBranch]:
    protected = frozenset(protected)
    return [
        LocalBranch(
            name=name,
            is_current=bool(current) and name == current,
            is_protected=is_protected(name, protected),
        )
        for name in names
    ]


def deletion_candidates(
    names: Iterable[str],
    current: str,
    protected: Iterable[str] = DEFAULT_PROTECTED,
) -> list[str]:
    return [b.name for b in local_branches(names, current, protected) if b.deletable]


def correlate(candidates: Iterable[str], pulls: Iterable[PullRequest]) -> BranchPRMatch:
    index = {name.casefold() for name in candidates}
    match = BranchPRMatch()
    for pull in pulls:
        key = str(pull.head_ref).casefold()
        # duplicate head refs: keep the first one the API returned
        if key in index and key not in match.by_name:
            match.by_name[key] = pull
    return match


def build_options(
    candidates: Iterable[str],
    matches: BranchPRMatch,
    allow_pr: bool = False,
) -> list[BranchOption]:
    options = []
    for name in candidates:
        pull = matches.get(name)
        options.append(BranchOption(name=name, pull=pull, disabled=pull is not None and not allow_pr))
    return options


def delete_branches(vcs: VCS, names: Iterable[str], force: bool = False) -> DeletionReport:
    """Delete each branch in order; a failure never stops the batch."""
    report = DeletionReport()
    for name in names:
        try:
            vcs.delete_branch(name, force=force)
        except GitError as exc:
            report.failed.append(name)
            report.errors[name] = str(exc)
            continue
        report.deleted.append(name)
    return report
