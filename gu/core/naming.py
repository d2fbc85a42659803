from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from .util import slugify


BRANCH_TYPES = ("feature", "hotfix")
BASE_BRANCH_DEFAULTS = ("develop", "main", "master", "integration")
PROTECTED_PUSH_TARGETS = frozenset({"main", "master", "develop", "integration", "release"})

TICKET_RE = re.compile(r"^[A-Z]+-\d+$")


def parse_tickets(text: str) -> list[str]:
    tokens = [t for t in re.split(r"[\s,]+", text) if t]
    return [t for t in tokens if TICKET_RE.match(t)]


def compress_tickets(tickets: Iterable[str]) -> str:
    """Collapse ``HLTH-123 HLTH-456 SWELL-888`` into ``HLTH-123-456-SWELL-888``."""
    uniq = list(dict.fromkeys(t.strip() for t in tickets if t.strip()))
    groups: dict[str, set[int]] = {}
    for ticket in uniq:
        prefix, _, num = ticket.partition("-")
        if not prefix or not num.isdigit():
            continue
        groups.setdefault(prefix, set()).add(int(num))

    pieces = []
    for prefix in sorted(groups):
        nums = sorted(groups[prefix])
        pieces.append(f"{prefix}-" + "-".join(str(n) for n in nums))
    return "-".join(pieces) if pieces else "-".join(uniq)


def branch_name(kind: str, tickets: Iterable[str], description: str) -> str:
    slug = slugify(description)
    if not slug:
        raise ValueError("Could not create a slug from that description.")
    return f"{kind}/{compress_tickets(tickets)}/{slug}"


def title_case_from_slug(slug: str) -> str:
    words = re.sub(r"[-_]+", " ", slug.strip()).split()
    return " ".join(w[0].upper() + w[1:] for w in words)


def derive_pr_title(branch: str) -> str:
    # <type>/<tickets>/<desc-slug>
    parts = [p for p in branch.split("/") if p]
    if len(parts) >= 3:
        ticket_part = parts[1]
        desc = title_case_from_slug("/".join(parts[2:]))
        if desc:
            return f"{ticket_part}: {desc}"
        return ticket_part
    return branch


def pick_base_branch(
    local: Sequence[str],
    defaults: Sequence[str] = BASE_BRANCH_DEFAULTS,
) -> Optional[str]:
    for name in defaults:
        if name in local:
            return name
    return None


def parse_upstream(upstream: str) -> Optional[tuple[str, str]]:
    m = re.match(r"^([^/]+)/(.+)$", upstream.strip())
    if not m:
        return None
    return m.group(1), m.group(2)


def is_protected_push_target(branch: str) -> bool:
    b = branch.strip()
    if not b:
        return False
    return b in PROTECTED_PUSH_TARGETS or b.startswith("release/")


def order_for_checkout(branches: Sequence[str], current: str) -> list[str]:
    if not current:
        return list(branches)
    return [current] + [b for b in branches if b != current]


def normalize_bullet(line: str) -> str:
    return re.sub(r"^\s*[-*•]\s*", "", line).strip()
