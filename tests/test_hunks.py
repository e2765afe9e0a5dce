"""Tests for line classification and hunk grouping."""

import pytest

from diffpaint.errors import EncodingError
from diffpaint.hunks import (
    CONTEXT,
    HEADER,
    MINUS,
    NO_NEWLINE,
    OTHER,
    PLUS,
    ChangeBlock,
    decode_line,
    decode_text,
    filename_from_header,
    parse_hunks,
)

GIT_DIFF = b"""commit 0123456789abcdef
Author: A U Thor <author@example.com>

    Fix the frobnicator

diff --git a/src/frob.py b/src/frob.py
index 1111111..2222222 100644
--- a/src/frob.py
+++ b/src/frob.py
@@ -1,4 +1,4 @@ def frob():
 import os
-x = compute(a, b)
+x = compute(a, c)
 print(x)
-return x
+return y
""".splitlines(True)


def hunks_of(lines):
    return [hunk for hunk in parse_hunks(lines) if hunk.header is not None]


class TestParseHunks:

    def test_kinds(self):
        kinds = []

        for hunk in parse_hunks(GIT_DIFF):

            if hunk.header is not None:
                kinds.append(hunk.header.kind)

            kinds.extend([line.kind for line in hunk.lines()])

        assert kinds == [
            HEADER, HEADER, OTHER, OTHER, OTHER,
            HEADER, HEADER, HEADER, HEADER,
            HEADER, CONTEXT, MINUS, PLUS, CONTEXT, MINUS, PLUS,
        ]

    def test_markers_are_stripped(self):
        (hunk,) = hunks_of(GIT_DIFF)

        assert [line.text for line in hunk.lines()] == [
            "import os",
            "x = compute(a, b)",
            "x = compute(a, c)",
            "print(x)",
            "return x",
            "return y",
        ]

    def test_raw_is_kept(self):
        (hunk,) = hunks_of(GIT_DIFF)
        assert [line.raw for line in hunk.lines()][1] == b"-x = compute(a, b)"

    def test_header_fields(self):
        (hunk,) = hunks_of(GIT_DIFF)

        assert (hunk.old_start, hunk.new_start) == (1, 1)
        assert hunk.filename == "src/frob.py"
        assert hunk.header.is_hunk_header

    def test_commit_header(self):
        first = next(parse_hunks(GIT_DIFF))
        assert first.segments[0].is_commit_header

    def test_change_blocks(self):
        (hunk,) = hunks_of(GIT_DIFF)
        blocks = [segment for segment in hunk.segments if isinstance(segment, ChangeBlock)]

        assert len(blocks) == 2
        assert [line.text for line in blocks[0].minus] == ["x = compute(a, b)"]
        assert [line.text for line in blocks[0].plus] == ["x = compute(a, c)"]

    def test_alternating_lines_start_new_blocks(self):
        lines = [b"@@ -1,2 +1,2 @@", b"-a", b"+b", b"-c", b"+d"]
        (hunk,) = hunks_of(lines)

        assert len(hunk.segments) == 2
        assert [[line.text for line in block.minus + block.plus] for block in hunk.segments] == [["a", "b"], ["c", "d"]]

    def test_no_newline_note_attaches_to_block_line(self):
        lines = [b"@@ -1 +1 @@", b"-old", NO_NEWLINE.encode("utf-8"), b"+new", NO_NEWLINE.encode("utf-8")]
        (hunk,) = hunks_of(lines)
        (block,) = hunk.segments

        assert [line.text for line in block.notes_after(MINUS, 0)] == [NO_NEWLINE]
        assert [line.text for line in block.notes_after(PLUS, 0)] == [NO_NEWLINE]
        assert [line.text for line in hunk.lines()] == ["old", NO_NEWLINE, "new", NO_NEWLINE]

    def test_no_newline_after_counts_are_exhausted(self):
        lines = [b"@@ -1 +1 @@", b"-old", b"+new", NO_NEWLINE.encode("utf-8"), b"trailing"]
        hunks = list(parse_hunks(lines))

        assert len(hunks) == 2
        assert [line.text for line in hunks[0].lines()] == ["old", "new", NO_NEWLINE]
        assert hunks[1].segments[0].kind == OTHER

    def test_malformed_line_inside_hunk(self):
        lines = [b"@@ -1,2 +1,2 @@", b" a", b"?? garbage", b" b"]
        (hunk,) = hunks_of(lines)

        assert [line.kind for line in hunk.lines()] == [CONTEXT, OTHER, CONTEXT]
        assert list(hunk.lines())[1].text == "?? garbage"

    def test_empty_line_counts_as_context(self):
        (hunk,) = hunks_of([b"@@ -1,2 +1,2 @@", b"", b" a"])
        assert [line.kind for line in hunk.lines()] == [CONTEXT, CONTEXT]

    def test_new_header_closes_hunk(self):
        lines = [b"@@ -1,5 +1,5 @@", b" a", b"@@ -10 +10 @@", b" b"]
        hunks = hunks_of(lines)

        assert [hunk.old_start for hunk in hunks] == [1, 10]

    def test_invalid_utf8_is_opaque(self):
        raw = b"-caf\xe9"
        (hunk,) = hunks_of([b"@@ -1 +0,0 @@", raw + b"\n"])
        (line,) = list(hunk.lines())

        assert line.opaque
        assert line.kind == MINUS
        assert line.raw == raw
        assert line.text.encode("utf-8", "surrogateescape") == b"caf\xe9"

    def test_outside_lines_are_yielded_lazily(self):
        consumed = []

        def lines():
            for line in GIT_DIFF:
                consumed.append(line)
                yield line

        first = next(parse_hunks(lines()))

        assert first.header is None
        assert len(consumed) == 1

    def test_line_numbers(self):
        numbers = [line.number for hunk in parse_hunks(GIT_DIFF) for line in hunk.lines()]
        assert numbers[:3] == [1, 2, 3]


class TestDecoding:

    def test_decode_line(self):
        assert decode_line(b"caf\xc3\xa9") == "café"

    def test_decode_line_rejects_invalid_utf8(self):
        with pytest.raises(EncodingError) as e:
            decode_line(b"\xff\xfe")

        assert e.value.raw == b"\xff\xfe"

    def test_decode_text_falls_back(self):
        assert decode_text(b"ok") == ("ok", False)
        assert decode_text(b"\xff")[1]


class TestFilename:

    def test_strips_prefix_and_timestamp(self):
        assert filename_from_header("+++ b/src/a.py\t2020-01-01 00:00:00") == "src/a.py"

    def test_dev_null(self):
        assert filename_from_header("--- /dev/null") is None

    def test_new_file_keeps_plus_name(self):
        lines = [b"--- /dev/null", b"+++ b/new.rs", b"@@ -0,0 +1 @@", b"+fn main() {}"]
        (hunk,) = hunks_of(lines)

        assert hunk.filename == "new.rs"

    def test_deleted_file_keeps_minus_name(self):
        lines = [b"--- a/old.c", b"+++ /dev/null", b"@@ -1 +0,0 @@", b"-int x;"]
        (hunk,) = hunks_of(lines)

        assert hunk.filename == "old.c"
