"""Unit tests for the commit message generator."""

import pytest

from gu.core.summary import (
    NO_FILES_BODY,
    ChangeBuckets,
    ChangeEntry,
    ChangeKind,
    CommitMessage,
    action_phrase,
    bucketize,
    build_body,
    build_subject,
    join_nice,
    parse_name_status,
    parse_record,
    parse_records,
    shorten_path,
    status_rows,
    summarize,
    unstaged_paths,
)


class TestParsing:
    """Turning raw name-status records into entries."""

    @pytest.mark.parametrize(
        "code,kind",
        [
            ("A", ChangeKind.ADDED),
            ("M", ChangeKind.MODIFIED),
            ("D", ChangeKind.DELETED),
            ("U", ChangeKind.UNMERGED),
            ("T", ChangeKind.UNKNOWN),
            ("X", ChangeKind.UNKNOWN),
        ],
    )
    def test_single_path_kinds(self, code, kind):
        """First letter of the status selects the kind."""
        entry = parse_record((code, "src/app.py"))
        assert entry == ChangeEntry(kind=kind, path="src/app.py")

    def test_rename_with_score(self):
        """Renames carry both paths and the similarity score."""
        entry = parse_record(("R100", "old/name.py", "new/name.py"))
        assert entry.kind is ChangeKind.RENAMED
        assert entry.from_path == "old/name.py"
        assert entry.to_path == "new/name.py"
        assert entry.similarity == 100
        assert entry.path is None

    def test_copy_with_partial_score(self):
        """Copies parse the same way as renames."""
        entry = parse_record(("C75", "a.txt", "b.txt"))
        assert entry.kind is ChangeKind.COPIED
        assert entry.similarity == 75
        assert entry.display == "a.txt → b.txt"

    def test_rename_without_destination_degrades_to_unknown(self):
        """A rename missing its second path never becomes a half-rename."""
        entry = parse_record(("R090", "lonely.txt"))
        assert entry == ChangeEntry(kind=ChangeKind.UNKNOWN, path="lonely.txt")

    def test_single_field_falls_back_to_first_field(self):
        """With no path field the status field itself is used as the path."""
        entry = parse_record(("weird-line",))
        assert entry == ChangeEntry(kind=ChangeKind.UNKNOWN, path="weird-line")

    def test_empty_records_are_skipped(self):
        """Blank or whitespace-only records produce nothing."""
        assert parse_record(()) is None
        assert parse_record(("", "  ")) is None
        assert parse_records([(), ("A", "x")]) == [ChangeEntry(ChangeKind.ADDED, "x")]

    def test_parse_name_status_text(self):
        """Tab separated git output, including blank lines and tab runs."""
        text = "A\tx/new.txt\n\n   \nR087\told.py\t\tnew.py\nM\tx/old.txt\n"
        entries = parse_name_status(text)
        assert [e.kind for e in entries] == [
            ChangeKind.ADDED,
            ChangeKind.RENAMED,
            ChangeKind.MODIFIED,
        ]
        assert entries[1].to_path == "new.py"

    def test_parse_never_raises_on_garbage(self):
        """Malformed text degrades instead of failing."""
        entries = parse_name_status("\t\t\n???\n\tM\n")
        assert all(e.kind is ChangeKind.UNKNOWN or e.kind is ChangeKind.MODIFIED for e in entries)


class TestBucketize:
    """Grouping entries by kind."""

    def test_partition_covers_every_entry(self):
        """Every entry lands in exactly one bucket."""
        entries = parse_records(
            [
                ("A", "b.txt"),
                ("A", "a.txt"),
                ("M", "m.txt"),
                ("D", "d.txt"),
                ("R100", "r1", "r2"),
                ("C50", "c1", "c2"),
                ("U", "conflict.txt"),
                ("Z", "mystery.txt"),
            ]
        )
        buckets = bucketize(entries)
        assert buckets.added == ["a.txt", "b.txt"]
        assert buckets.modified == ["m.txt"]
        assert buckets.deleted == ["d.txt"]
        assert buckets.renamed == ["r1 → r2"]
        assert buckets.copied == ["c1 → c2"]
        assert buckets.other == ["conflict.txt", "mystery.txt"]
        assert buckets.total + buckets.duplicates == len(entries)

    def test_duplicates_are_counted_separately(self):
        """Repeated records collapse, and the drop is recorded."""
        entries = parse_records([("M", "x"), ("M", "x"), ("A", "x")])
        buckets = bucketize(entries)
        assert buckets.modified == ["x"]
        assert buckets.added == ["x"]
        assert buckets.duplicates == 1
        assert buckets.total + buckets.duplicates == 3

    def test_sort_is_code_point_order(self):
        """Uppercase sorts before lowercase; no locale collation."""
        buckets = bucketize(parse_records([("A", "b"), ("A", "B"), ("A", "a")]))
        assert buckets.added == ["B", "a", "b"]


class TestNiceJoin:
    """English list joining used in subjects."""

    def test_empty(self):
        assert join_nice([], 3) == ("", 0)

    def test_one(self):
        assert join_nice(["a"], 3) == ("a", 0)

    def test_two(self):
        assert join_nice(["a", "b"], 3) == ("a and b", 0)

    def test_three_uses_oxford_comma(self):
        assert join_nice(["a", "b", "c"], 3) == ("a, b, and c", 0)

    def test_truncation_reports_remainder(self):
        """The remainder is returned, not appended."""
        assert join_nice(["a", "b", "c", "d"], 2) == ("a and b", 2)

    def test_dedupes_before_counting(self):
        assert join_nice(["a", "a", "b"], 1) == ("a", 1)


class TestShortenPath:
    """Display shortening for long paths."""

    def test_short_path_unchanged(self):
        """Paths at or under the limit come back as-is."""
        p = "x" * 26
        assert shorten_path(p) == p
        assert shorten_path("src/a.py") == "src/a.py"

    def test_last_two_segments(self):
        assert shorten_path("very/deep/nested/package/mod.py") == "package/mod.py"

    def test_basename_when_two_segments_too_long(self):
        path = "root/" + "d" * 20 + "/module_file.py"
        assert shorten_path(path) == "module_file.py"

    def test_hard_truncate_with_ellipsis(self):
        path = "dir/" + "n" * 40 + ".py"
        short = shorten_path(path)
        assert short == "n" * 25 + "…"
        assert len(short) == 26

    def test_custom_limit(self):
        assert shorten_path("abc/def", max_len=3) == "def"


class TestSubject:
    """Subject line synthesis."""

    def test_end_to_end_example(self):
        """Added, modified and deleted in one small change."""
        records = [("A", "x/new.txt"), ("M", "x/old.txt"), ("D", "y/gone.txt")]
        buckets = bucketize(parse_records(records))
        assert buckets.added == ["x/new.txt"]
        assert buckets.modified == ["x/old.txt"]
        assert buckets.deleted == ["y/gone.txt"]
        assert build_subject(buckets) == "Added x/new.txt; Updated x/old.txt; Deleted y/gone.txt"

    def test_deterministic(self):
        records = [("M", f"f{i}.py") for i in range(9)]
        first = summarize(records)
        second = summarize(list(records))
        assert first == second

    def test_small_change_lists_three(self):
        buckets = bucketize(parse_records([("M", "a"), ("M", "b"), ("M", "c")]))
        assert build_subject(buckets) == "Updated a, b, and c"

    def test_larger_change_shows_two_with_more_suffix(self):
        buckets = bucketize(parse_records([("M", n) for n in "abcde"]))
        assert build_subject(buckets) == "Updated a and b (+3 more)"

    def test_total_suffix_above_six_files(self):
        buckets = bucketize(parse_records([("A", n) for n in "abcdefg"]))
        assert build_subject(buckets) == "Added a and b (+5 more) (7 files)"

    def test_renames_hidden_in_mixed_large_change(self):
        records = [("M", "a"), ("M", "b"), ("M", "c"), ("R100", "x", "y")]
        buckets = bucketize(parse_records(records))
        assert build_subject(buckets) == "Updated a and b (+1 more)"

    def test_renames_shown_when_only_renames(self):
        records = [("R100", f"old{i}", f"new{i}") for i in range(4)]
        buckets = bucketize(parse_records(records))
        assert build_subject(buckets) == "Renamed old0 → new0 and old1 → new1 (+2 more)"

    def test_copies_shown_in_small_change(self):
        buckets = bucketize(parse_records([("C90", "a", "b"), ("A", "c")]))
        assert build_subject(buckets) == "Added c; Copied a → b"

    def test_fallback_when_only_other(self):
        assert build_subject(bucketize(parse_records([("U", "x")]))) == "Updated 1 file"
        buckets = bucketize(parse_records([("U", "x"), ("T", "y")]))
        assert build_subject(buckets) == "Updated 2 files"

    def test_fallback_for_empty_input(self):
        assert build_subject(ChangeBuckets()) == "Updated 0 files"

    def test_action_phrase_shortens_paths(self):
        phrase = action_phrase("Added", ["deeply/nested/folder/for/file.py"], 3)
        assert phrase == "Added for/file.py"

    def test_action_phrase_empty(self):
        assert action_phrase("Added", [], 3) is None


class TestBody:
    """Body synthesis."""

    def test_sections_in_order(self):
        records = [("D", "gone"), ("A", "new"), ("R100", "a", "b"), ("U", "c"), ("M", "m")]
        body = build_body(bucketize(parse_records(records)))
        assert body == "\n".join(
            [
                "Added:",
                "- new",
                "Modified:",
                "- m",
                "Deleted:",
                "- gone",
                "Renamed:",
                "- a → b",
                "Other:",
                "- c",
            ]
        )

    def test_section_overflow_marker(self):
        records = [("D", f"f{i:02d}") for i in range(10)]
        lines = build_body(bucketize(parse_records(records))).splitlines()
        assert lines[0] == "Deleted:"
        assert len(lines) == 1 + 8 + 1
        assert lines[-1] == "- …and 2 more"

    def test_custom_limits(self):
        buckets = bucketize(parse_records([("A", "a"), ("A", "b")]))
        assert build_body(buckets, {"Added": 1}) == "Added:\n- a\n- …and 1 more"

    def test_never_empty(self):
        assert build_body(ChangeBuckets()) == NO_FILES_BODY
        assert summarize("").body == NO_FILES_BODY

    def test_summarize_accepts_text(self):
        message = summarize("A\tx/new.txt\n")
        assert message == CommitMessage(subject="Added x/new.txt", body="Added:\n- x/new.txt")
        assert str(message) == "Added x/new.txt\n\nAdded:\n- x/new.txt"


class TestStatusRows:
    """The colored listing shown before committing."""

    def test_unstaged_paths(self):
        porcelain = "M  staged.py\nMM both.py\n?? new.txt\nA  added.txt\n M dirty.py\n"
        assert unstaged_paths(porcelain) == {"both.py", "new.txt", "dirty.py"}

    def test_rows_sorted_by_kind_then_label(self):
        entries = parse_records(
            [("M", "z.py"), ("A", "b.py"), ("R100", "old", "new"), ("A", "a.py"), ("Q", "q")]
        )
        rows = status_rows(entries, unstaged={"z.py"})
        assert [(r.code, r.label, r.also_unstaged) for r in rows] == [
            ("A", "a.py", False),
            ("A", "b.py", False),
            ("M", "z.py", True),
            ("R", "old → new", False),
            ("?", "q", False),
        ]
        assert rows[3].path == "new"
