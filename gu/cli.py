from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from gu import display
from gu.core import paths
from gu.core.branches import (
    BranchPRMatch,
    build_options,
    correlate,
    delete_branches,
    deletion_candidates,
    parse_protected,
)
from gu.core.config import ConfigError, ConfigStore
from gu.core.git import VCS, GitCLI, GitError
from gu.core.github import (
    GitHubClient,
    GitHubError,
    PullRequest,
    RepoRef,
    parse_github_remote,
    parse_owner_repo,
)
from gu.core.naming import (
    BASE_BRANCH_DEFAULTS,
    BRANCH_TYPES,
    branch_name,
    derive_pr_title,
    is_protected_push_target,
    normalize_bullet,
    order_for_checkout,
    parse_tickets,
    parse_upstream,
    pick_base_branch,
)
from gu.core.summary import (
    CommitMessage,
    bucketize,
    build_body,
    build_subject,
    parse_name_status,
    status_rows,
    unstaged_paths,
)
from gu.core.util import mask_secret
from gu.prompt import TerminalUI
from gu.tui import Option


SUBJECT_SOFT_LIMIT = 72
PUSH_LOG_LIMIT = 30

MENU = (
    ("configure", "Set the GitHub token"),
    ("clean-branches", "Interactively delete local branches (PR-aware)"),
    ("branches", "Pick a local branch to checkout"),
    ("new", "Create a new branch (guided)"),
    ("commit", "Stage all + create a commit with a generated body"),
    ("push", "Show commits that will be pushed, then push"),
    ("pr", "Create a GitHub PR for current branch"),
)


@dataclass
class Context:
    repo_root: str
    env: Mapping[str, str]
    vcs: VCS
    store: ConfigStore
    ui: Any
    github: Callable[[str], GitHubClient] = GitHubClient
    color: bool = False


def build_context(cwd: str, env: Mapping[str, str]) -> Context:
    root = paths.git_root(cwd) or cwd
    return Context(
        repo_root=root,
        env=env,
        vcs=GitCLI(root),
        store=ConfigStore(paths.config_path(env), env),
        ui=TerminalUI(),
        color=display.use_color(env, sys.stdout.isatty()),
    )


def _die(msg: str) -> None:
    print(msg, file=sys.stderr)
    sys.exit(1)


def _require_repo(ctx: Context) -> None:
    if not ctx.vcs.in_repo():
        _die("Not inside a git repo.")


def _cancelled() -> None:
    print("Cancelled.")


def cmd_configure(args: argparse.Namespace, ctx: Context) -> None:
    store = ctx.store
    if args.path:
        print(store.path)
        return

    current = store.stored_token()
    if args.show:
        print(f"Config: {store.path}")
        print(f"GitHub token: {'set' if current else 'not set'}")
        return

    print(f"Config: {store.path}")
    print(f"GitHub token: {f'set ({mask_secret(current)})' if current else 'not set'}")
    print("Tip: press Enter on an empty value to clear it.\n")

    value = ctx.ui.ask_secret("Enter GitHub token")
    if not value:
        if not current:
            print("GitHub token already not set.")
            return
        if not ctx.ui.confirm("Clear GitHub token?", default=False):
            _cancelled()
            return
        store.clear_token()
        print("GitHub token cleared.")
        return

    if not ctx.ui.confirm("Save GitHub token?", default=True):
        _cancelled()
        return
    store.set_token(value)
    print("GitHub token saved.")


def _lookup_repo(ctx: Context, override: Optional[str]) -> Optional[RepoRef]:
    if override:
        return parse_owner_repo(override)
    url = ctx.vcs.remote_url("origin")
    return parse_github_remote(url) if url else None


def _fetch_open_pulls(ctx: Context, override: Optional[str]) -> list[PullRequest]:
    token = ctx.store.get_token()
    repo = _lookup_repo(ctx, override)
    if not token or not repo:
        return []
    with ctx.github(token) as gh:
        return gh.list_open_pulls(repo)


def cmd_clean_branches(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs, ui = ctx.vcs, ctx.ui

    protected = parse_protected(args.protected)
    current = vcs.current_branch()
    candidates = deletion_candidates(vcs.list_branches(), current, protected)
    if not candidates:
        print("No deletable local branches found.")
        return

    matches = BranchPRMatch()
    if args.prs:
        matches = correlate(candidates, _fetch_open_pulls(ctx, args.repo))

    options = build_options(candidates, matches, allow_pr=args.allow_pr)
    allowed = {opt.name for opt in options if not opt.disabled}
    picked = ui.select_many(
        "Select local branches to delete",
        [display.branch_option(opt) for opt in options],
    )
    selections = [name for name in picked if name in allowed]
    if not selections:
        print("No branches selected. Exiting.")
        return

    print(display.bullet_list("\nSelected branches:", selections))
    if not ui.confirm("Delete these branches locally?", default=False):
        _cancelled()
        return

    report = delete_branches(vcs, selections)
    for name in report.deleted:
        print(f"Deleted: {name}")
    if report.ok:
        print("\nDone.")
        return

    print(display.bullet_list("\nNot deleted (likely not fully merged):", report.failed))
    if not ui.confirm("Force delete these with -D?", default=False):
        print("Left remaining branches untouched.")
        return

    forced = delete_branches(vcs, report.failed, force=True)
    for name in forced.deleted:
        print(f"Force deleted: {name}")
    for name in forced.failed:
        print(f"Failed to force delete {name}: {forced.errors[name]}", file=sys.stderr)
    print("\nDone.")


def cmd_branches(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs = ctx.vcs

    current = vcs.current_branch()
    branches = vcs.list_branches()
    if not branches:
        print("No local branches found.")
        return

    options = [
        Option(label=f"* {b}" if b == current else f"  {b}", value=b)
        for b in order_for_checkout(branches, current)
    ]
    picked = ctx.ui.select_one("Checkout which branch?", options)
    if not picked:
        return
    if picked == current:
        print(f"Already on '{current}'.")
        return
    vcs.checkout(picked)
    print(f"Checked out '{picked}'.")


def _validate_tickets(value: str) -> Optional[str]:
    return None if parse_tickets(value) else "Enter at least one ticket like HLTH-123."


def _validate_description(value: str) -> Optional[str]:
    return None if value.strip() else "Enter a short description."


def cmd_new(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs, ui = ctx.vcs, ctx.ui

    current = vcs.current_branch()
    local = vcs.list_branches()

    base_options = []
    if current:
        base_options.append(Option(label=f"current ({current})", value=current))
    for b in BASE_BRANCH_DEFAULTS:
        if b in local and b != current:
            base_options.append(Option(label=b, value=b))
    if not base_options:
        _die("No base branch available. Check out a branch first.")

    base = ui.select_one("Base branch", base_options)
    if not base:
        _cancelled()
        return
    kind = ui.select_one("Branch type", [Option(label=t, value=t) for t in BRANCH_TYPES])
    if not kind:
        _cancelled()
        return

    tickets = parse_tickets(
        ui.ask(
            "Tickets (space/comma-separated, e.g. HLTH-123 HLTH-456 SWELL-1000)",
            validate=_validate_tickets,
        )
    )
    description = ui.ask("Short description (one line)", validate=_validate_description)
    try:
        branch = branch_name(kind, tickets, description)
    except ValueError as exc:
        _die(str(exc))

    print(f"\nBase branch:     {base}")
    print(f"Proposed branch: {branch}")

    if vcs.branch_exists(branch):
        if not ui.confirm("Branch already exists locally. Checkout it instead?", default=True):
            _cancelled()
            return
        vcs.checkout(branch)
        print(f"Checked out '{branch}'.")
        return

    if not ui.confirm("Create and checkout this branch?", default=True):
        _cancelled()
        return
    if base != current:
        vcs.checkout(base)
    vcs.create_branch(branch)
    print(f"Created and checked out '{branch}'.")


def cmd_commit(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs, ui = ctx.vcs, ctx.ui

    branch = vcs.current_branch() or "(detached)"
    porcelain = vcs.status_porcelain()
    if not porcelain.strip():
        print("No changes detected. Nothing to commit.")
        return

    print(f"\nOn branch: {branch}")
    unstaged = unstaged_paths(porcelain)

    vcs.add_all()
    entries = parse_name_status(vcs.staged_name_status())
    if not entries:
        print("No staged changes after git add --all. Nothing to commit.")
        return

    print()
    print(display.format_status(status_rows(entries, unstaged), color=ctx.color))
    print()

    buckets = bucketize(entries)
    suggested = build_subject(buckets)
    body = build_body(buckets)

    subject = ui.ask("Commit summary (one line)", default=suggested).strip() or suggested
    if len(subject) > SUBJECT_SOFT_LIMIT:
        print(f"Note: subject is {len(subject)} characters; try to keep it under ~{SUBJECT_SOFT_LIMIT}.")

    print()
    print(display.format_commit_preview(CommitMessage(subject=subject, body=body)))
    print()
    if not ui.confirm("Create commit with this message?", default=True):
        _cancelled()
        return

    vcs.commit(subject, body, no_verify=args.no_verify, amend=args.amend, signoff=args.signoff)
    print("\nDone.")


def cmd_push(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs, ui = ctx.vcs, ctx.ui

    branch = vcs.current_branch()
    if not branch:
        _die("Detached HEAD. Not sure what to push.")

    upstream = vcs.upstream()
    parsed = parse_upstream(upstream) if upstream else None
    remote, target_branch = parsed if parsed else ("origin", branch)
    target = f"{remote}/{target_branch}"

    print(f"\nCurrent branch: {branch}")
    print(f"Push target:    {target}" + (f" (upstream: {upstream})" if upstream else " (no upstream set)"))

    if is_protected_push_target(target_branch):
        print("\nWarning: You are pushing to a protected branch:")
        print(f"   {target_branch}")
        print("   Make sure this is what you intended.\n")

    if not upstream:
        recent = vcs.log_oneline("HEAD", 20)
        print("\nRecent commits on this branch:\n")
        print(recent or "(none)")
        if not ui.confirm(f"Push with upstream (-u {remote} {branch})?", default=True):
            _cancelled()
            return
        vcs.push(remote, branch, set_upstream=True)
        print("Done.")
        return

    ahead = vcs.ahead_count(upstream)
    if not ahead:
        print(f"\nNothing to push. '{branch}' is up to date with {upstream}.")
        return

    listing = vcs.log_oneline(f"{upstream}..HEAD", PUSH_LOG_LIMIT)
    print(f"\nCommits to be pushed ({ahead}):\n")
    print(listing or "(none)")
    if ahead > PUSH_LOG_LIMIT:
        print(f"\n…showing latest {PUSH_LOG_LIMIT} of {ahead} commits")

    if not ui.confirm(f"Push to {target}?", default=True):
        _cancelled()
        return
    vcs.push()
    print("Done.")


def _remote_repo(vcs: VCS, *remotes: str) -> Optional[tuple[str, RepoRef]]:
    for remote in remotes:
        url = vcs.remote_url(remote)
        repo = parse_github_remote(url) if url else None
        if repo:
            return remote, repo
    return None


def _ask_bullets(ui: Any) -> str:
    print("\nPR description bullets (press Enter on empty line to finish):\n")
    items: list[str] = []
    while True:
        line = normalize_bullet(ui.ask("•" if not items else "• (next)"))
        if not line:
            break
        items.append(line)
    return "\n".join(f"- {item}" for item in items)


def cmd_pr(args: argparse.Namespace, ctx: Context) -> None:
    _require_repo(ctx)
    vcs, ui = ctx.vcs, ctx.ui

    token = ctx.store.get_token()
    if not token:
        _die("No GitHub token configured.\nRun: gu configure")

    branch = vcs.current_branch()
    if not branch:
        _die("Detached HEAD. Switch to a branch first.")

    # forks: the PR targets upstream, the branch lives on origin
    base_info = _remote_repo(vcs, "upstream", "origin")
    head_info = _remote_repo(vcs, "origin", "upstream")
    if not base_info or not head_info:
        _die("Could not determine GitHub repo from remotes (origin/upstream).")
    _, base_repo = base_info
    head_remote, head_repo = head_info

    if args.push and not vcs.upstream():
        if not ui.confirm(f"No upstream set for '{branch}'. Push it first to {head_remote}?", default=True):
            _cancelled()
            return
        vcs.push(head_remote, branch, set_upstream=True)

    base_branch = args.base
    if not base_branch:
        local = vcs.list_branches()
        base_branch = pick_base_branch(local) or ui.select_one(
            "Base branch for the PR",
            [Option(label=b, value=b) for b in local],
        )
    if not base_branch:
        _cancelled()
        return

    suggested = derive_pr_title(branch)
    title = ui.ask("PR title", default=suggested).strip() or suggested
    bullets = _ask_bullets(ui)
    body = f"{bullets}\n" if bullets else ""
    head = f"{head_repo.owner}:{branch}"

    print()
    print(display.format_pr_preview(base_repo.slug, base_branch, head, title, body))
    print()
    if not ui.confirm("Create PR?", default=True):
        _cancelled()
        return

    try:
        with ctx.github(token) as gh:
            created = gh.create_pull(
                base_repo, title, body, head=head, base=base_branch, draft=args.draft
            )
    except GitHubError as exc:
        if exc.status:
            print(f"GitHub API error ({exc.status}) creating PR.", file=sys.stderr)
        else:
            print("Could not reach GitHub to create the PR.", file=sys.stderr)
        if exc.text:
            print(exc.text[:800], file=sys.stderr)
        sys.exit(1)

    print(f"\nPR created: #{created.number}")
    print(created.url)


def cmd_menu(args: argparse.Namespace, ctx: Context) -> None:
    options = [Option(label=f"{name} - {desc}", value=name) for name, desc in MENU]
    options += [
        Option(label="help - show CLI help", value="__help__"),
        Option(label="exit", value="__exit__"),
    ]
    picked = ctx.ui.select_one("What do you want to do?", options)
    if not picked or picked == "__exit__":
        return
    if picked == "__help__":
        build_parser().print_help()
        return
    run_command([picked], ctx)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gu", description="Git utilities")
    sub = parser.add_subparsers(dest="command")

    menu = sub.add_parser("menu", help="interactive menu")
    menu.set_defaults(func=cmd_menu)

    configure = sub.add_parser("configure", help="store the GitHub token locally")
    configure.add_argument("--path", action="store_true", help="print the config file path and exit")
    configure.add_argument("--show", action="store_true", help="show whether a token is set")
    configure.set_defaults(func=cmd_configure)

    clean = sub.add_parser("clean-branches", help="interactively delete local branches")
    clean.add_argument("--allow-pr", action="store_true", help="allow selecting branches with an open PR")
    clean.add_argument("--no-prs", dest="prs", action="store_false", help="skip PR lookup (no network)")
    clean.add_argument("--repo", help="override repo for PR lookup (owner/repo)")
    clean.add_argument("--protected", help="comma-separated protected branches")
    clean.set_defaults(func=cmd_clean_branches)

    branches = sub.add_parser("branches", help="pick a local branch to checkout")
    branches.set_defaults(func=cmd_branches)

    new = sub.add_parser("new", help="create a new branch (guided)")
    new.set_defaults(func=cmd_new)

    commit = sub.add_parser("commit", help="stage all and commit with a generated message")
    commit.add_argument("--no-verify", action="store_true")
    commit.add_argument("--amend", action="store_true")
    commit.add_argument("--signoff", action="store_true")
    commit.set_defaults(func=cmd_commit)

    push = sub.add_parser("push", help="show outgoing commits, then push")
    push.set_defaults(func=cmd_push)

    pr = sub.add_parser("pr", help="create a GitHub PR for the current branch")
    pr.add_argument("--base", help="base branch for the PR")
    pr.add_argument("--draft", action="store_true")
    pr.add_argument("--no-push", dest="push", action="store_false", help="do not offer to push first")
    pr.set_defaults(func=cmd_pr)

    return parser


def run_command(argv: list[str], ctx: Context) -> None:
    parser = build_parser()
    args = parser.parse_args(argv or ["menu"])
    if not hasattr(args, "func"):
        parser.print_help()
        return
    try:
        args.func(args, ctx)
    except (GitError, GitHubError, ConfigError) as exc:
        _die(str(exc))
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        sys.exit(130)


def main(
    argv: Optional[list[str]] = None,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> None:
    try:
        ctx = build_context(cwd or os.getcwd(), os.environ if env is None else env)
    except RuntimeError as exc:
        _die(str(exc))
    run_command(sys.argv[1:] if argv is None else argv, ctx)


if __name__ == "__main__":
    main()
