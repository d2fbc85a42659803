"""
Output formatting for the gu CLI.
Colored status listing, branch labels and previews.
"""

from typing import Iterable, List, Mapping, Optional

from .core.branches import BranchOption
from .core.github import PullRequest
from .core.summary import CommitMessage, StatusRow
from .tui import Option


ANSI = {
    "reset": "\x1b[0m",
    "dim": "\x1b[2m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "gray": "\x1b[90m",
}

_CODE_COLORS = {"A": "green", "M": "blue", "D": "red", "R": "yellow", "C": "yellow"}


def use_color(env: Mapping[str, str], isatty: bool) -> bool:
    return isatty and "NO_COLOR" not in env


def _paint(text: str, color: str, color_on: bool) -> str:
    if not color_on:
        return text
    return f"{ANSI[color]}{text}{ANSI['reset']}"


def format_status(rows: List[StatusRow], color: bool = False) -> str:
    lines = [f"Changes (to be committed): {len(rows)}"]
    for row in rows:
        tag = _paint(f"[{row.code}]", _CODE_COLORS.get(row.code, "gray"), color)
        extra = " " + _paint("(also unstaged)", "dim", color) if row.also_unstaged else ""
        lines.append(f"  {tag} {row.label}{extra}")
    return "\n".join(lines)


def format_commit_preview(message: CommitMessage) -> str:
    return "\n".join(["--- Commit message preview ---", "", message.subject.strip(), "", message.body])


def pull_badge(pull: Optional[PullRequest]) -> str:
    if pull is None:
        return "  "
    return "📝" if pull.is_draft else "🔗"


def branch_option(opt: BranchOption) -> Option:
    hint = f"#{opt.pull.number} {opt.pull.title}" if opt.pull else ""
    return Option(
        label=f"{pull_badge(opt.pull)} {opt.name}",
        value=opt.name,
        hint=hint,
        disabled="open PR" if opt.disabled else None,
    )


def bullet_list(title: str, items: Iterable[str]) -> str:
    return "\n".join([title] + [f"- {item}" for item in items])


def format_pr_preview(repo: str, base: str, head: str, title: str, body: str) -> str:
    lines = [
        "--- PR preview ---",
        "",
        f"Repo:  {repo}",
        f"Base:  {base}",
        f"Head:  {head}",
        f"Title: {title}",
    ]
    if body:
        lines += ["", "Body:", body]
    else:
        lines += ["", "Body: (empty)"]
    return "\n".join(lines)
