"""
Summary Layer - Generate mechanical commit messages from staged changes.

Parses ``git diff --cached --name-status`` records into typed entries,
buckets them by kind and renders a deterministic subject line and body.
Nothing here does I/O and nothing raises on malformed input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Union


ARROW = "→"
ELLIPSIS = "…"


class ChangeKind(str, Enum):
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNMERGED = "U"
    UNKNOWN = "?"


_KIND_BY_CODE = {kind.value: kind for kind in ChangeKind if kind is not ChangeKind.UNKNOWN}
_PAIR_KINDS = (ChangeKind.RENAMED, ChangeKind.COPIED)

_BUCKET_NAMES = ("added", "modified", "deleted", "renamed", "copied", "other")
_BUCKET_BY_KIND = {
    ChangeKind.ADDED: "added",
    ChangeKind.MODIFIED: "modified",
    ChangeKind.DELETED: "deleted",
    ChangeKind.RENAMED: "renamed",
    ChangeKind.COPIED: "copied",
}


@dataclass(frozen=True)
class ChangeEntry:
    kind: ChangeKind
    path: Optional[str] = None
    from_path: Optional[str] = None
    to_path: Optional[str] = None
    similarity: Optional[int] = None

    @property
    def is_pair(self) -> bool:
        return self.kind in _PAIR_KINDS

    @property
    def display(self) -> str:
        if self.is_pair:
            return f"{self.from_path} {ARROW} {self.to_path}"
        return self.path or ""

    @property
    def primary_path(self) -> str:
        """Path the change lands on (the destination for renames/copies)."""
        if self.is_pair:
            return self.to_path or ""
        return self.path or ""


@dataclass
class ChangeBuckets:
    added: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    other: list[str] = field(default_factory=list)
    duplicates: int = 0

    @property
    def total(self) -> int:
        return (
            len(self.added)
            + len(self.modified)
            + len(self.deleted)
            + len(self.renamed)
            + len(self.copied)
            + len(self.other)
        )


@dataclass(frozen=True)
class CommitMessage:
    subject: str
    body: str

    def __str__(self) -> str:
        return f"{self.subject}\n\n{self.body}"


@dataclass(frozen=True)
class StatusRow:
    code: str
    path: str
    detail: Optional[str] = None
    also_unstaged: bool = False

    @property
    def label(self) -> str:
        return self.detail or self.path


Record = Sequence[str]


def _similarity(raw: str) -> Optional[int]:
    digits = raw[1:]
    if not digits.isdigit():
        return None
    return int(digits)


def parse_record(fields: Record) -> Optional[ChangeEntry]:
    parts = [f.strip() for f in fields if f and f.strip()]
    if not parts:
        return None

    code = parts[0]
    kind = _KIND_BY_CODE.get(code[:1], ChangeKind.UNKNOWN)

    if kind in _PAIR_KINDS:
        if len(parts) >= 3:
            return ChangeEntry(
                kind=kind,
                from_path=parts[1],
                to_path=parts[2],
                similarity=_similarity(code),
            )
        # a rename without its destination is not a rename
        kind = ChangeKind.UNKNOWN

    path = parts[1] if len(parts) > 1 else parts[0]
    return ChangeEntry(kind=kind, path=path)


def parse_records(records: Iterable[Record]) -> list[ChangeEntry]:
    out: list[ChangeEntry] = []
    for record in records:
        entry = parse_record(record)
        if entry is not None:
            out.append(entry)
    return out


def parse_name_status(text: str) -> list[ChangeEntry]:
    records = (re.split(r"\t+", line.strip()) for line in text.splitlines())
    return parse_records(records)


def bucketize(entries: Iterable[ChangeEntry]) -> ChangeBuckets:
    grouped: dict[str, dict[str, None]] = {name: {} for name in _BUCKET_NAMES}
    duplicates = 0
    for entry in entries:
        bucket = grouped[_BUCKET_BY_KIND.get(entry.kind, "other")]
        key = entry.display
        if key in bucket:
            duplicates += 1
            continue
        bucket[key] = None

    return ChangeBuckets(
        **{name: sorted(items) for name, items in grouped.items()},
        duplicates=duplicates,
    )


def shorten_path(path: str, max_len: int = 26) -> str:
    s = path.strip()
    if len(s) <= max_len:
        return s

    parts = [p for p in s.split("/") if p]
    last_two = "/".join(parts[-2:])
    if len(last_two) <= max_len:
        return last_two

    base = parts[-1] if parts else s
    if len(base) <= max_len:
        return base
    return base[: max(1, max_len - 1)] + ELLIPSIS


def _unique(items: Iterable[str]) -> list[str]:
    return [item for item in dict.fromkeys(items) if item]


def join_nice(items: Iterable[str], max_show: int) -> tuple[str, int]:
    """Join up to ``max_show`` items as English prose.

    Returns the joined text and how many items were left out; the caller
    decides how to mention the remainder.
    """
    uniq = _unique(items)
    shown = uniq[: max(0, max_show)]
    remaining = len(uniq) - len(shown)

    if not shown:
        return "", remaining
    if len(shown) == 1:
        return shown[0], remaining
    if len(shown) == 2:
        return f"{shown[0]} and {shown[1]}", remaining
    return f"{', '.join(shown[:-1])}, and {shown[-1]}", remaining


def action_phrase(verb: str, items: Iterable[str], max_show: int) -> Optional[str]:
    shortened = [shorten_path(item) for item in _unique(items)]
    text, remaining = join_nice(shortened, max_show)
    if not text:
        return None
    if remaining > 0:
        return f"{verb} {text} (+{remaining} more)"
    return f"{verb} {text}"


def build_subject(buckets: ChangeBuckets) -> str:
    total = buckets.total
    small = total <= 3
    max_show = 3 if small else 2

    only_renames = total > 0 and len(buckets.renamed) == total
    only_copies = total > 0 and len(buckets.copied) == total

    phrases = [
        action_phrase("Added", buckets.added, max_show),
        action_phrase("Updated", buckets.modified, max_show),
        action_phrase("Deleted", buckets.deleted, max_show),
        action_phrase("Renamed", buckets.renamed, max_show) if small or only_renames else None,
        action_phrase("Copied", buckets.copied, max_show) if small or only_copies else None,
    ]
    parts = [p for p in phrases if p]

    if not parts:
        return "Updated 1 file" if total == 1 else f"Updated {total} files"

    subject = "; ".join(parts)
    if not small and total > 6:
        subject = f"{subject} ({total} files)"
    return subject


DEFAULT_LIMITS = {
    "Added": 12,
    "Modified": 14,
    "Deleted": 8,
    "Renamed": 6,
    "Copied": 6,
    "Other": 6,
}

NO_FILES_BODY = "Files:\n- (no file list available)"


def format_section(title: str, items: Sequence[str], limit: int) -> list[str]:
    if not items:
        return []
    shown = list(items[:limit])
    remaining = len(items) - len(shown)
    lines = [f"{title}:"] + [f"- {item}" for item in shown]
    if remaining > 0:
        lines.append(f"- {ELLIPSIS}and {remaining} more")
    return lines


def build_body(buckets: ChangeBuckets, limits: Optional[dict[str, int]] = None) -> str:
    caps = dict(DEFAULT_LIMITS)
    if limits:
        caps.update(limits)

    sections = (
        ("Added", buckets.added),
        ("Modified", buckets.modified),
        ("Deleted", buckets.deleted),
        ("Renamed", buckets.renamed),
        ("Copied", buckets.copied),
        ("Other", buckets.other),
    )
    lines: list[str] = []
    for title, items in sections:
        lines.extend(format_section(title, items, caps[title]))

    if not lines:
        return NO_FILES_BODY
    return "\n".join(lines)


def summarize(changes: Union[str, Iterable[Record]]) -> CommitMessage:
    if isinstance(changes, str):
        entries = parse_name_status(changes)
    else:
        entries = parse_records(changes)
    buckets = bucketize(entries)
    return CommitMessage(subject=build_subject(buckets), body=build_body(buckets))


# Status listing shown before the commit prompt.

_ROW_ORDER = {"A": 0, "M": 1, "D": 2, "R": 3, "C": 4, "U": 5, "?": 6}


def unstaged_paths(porcelain: str) -> set[str]:
    paths: set[str] = set()
    for line in porcelain.splitlines():
        line = line.rstrip()
        if not line:
            continue
        x = line[0]
        y = line[1] if len(line) > 1 else " "
        rest = line[2:].strip()
        if (x == "?" and y == "?") or y != " ":
            paths.add(rest)
    return paths


def status_rows(entries: Iterable[ChangeEntry], unstaged: Iterable[str] = ()) -> list[StatusRow]:
    dirty = set(unstaged)
    rows = []
    for entry in entries:
        path = entry.primary_path
        detail = entry.display if entry.is_pair else None
        rows.append(StatusRow(entry.kind.value, path, detail, path in dirty))
    return sorted(rows, key=lambda r: (_ROW_ORDER.get(r.code, 99), r.label))
