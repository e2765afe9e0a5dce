"""Tests for the painting pipeline, end to end over byte streams."""

import io
import logging

import pytest

from diffpaint.config import Config
from diffpaint.delta import DiffPainter
from diffpaint.errors import OutputClosed
from diffpaint.highlight import SyntaxHighlighter
from diffpaint.wrap import strip_ansi

DIFF = b"""diff --git a/src/frob.py b/src/frob.py
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
"""


def paint(data, highlighter=None, **options):
    options.setdefault("syntax", False)
    painter = DiffPainter(Config(**options), highlighter)
    out = io.BytesIO()

    painter.run(data.splitlines(True), out)

    return out.getvalue()


class BrokenSink(object):

    def write(self, data):
        raise BrokenPipeError()

    def flush(self):
        pass


class ExplodingHighlighter(object):
    """Fails on lines containing "boom".
    """

    def spans(self, text, filename=None, language=None):

        if "boom" in text:
            raise ValueError("lexer blew up")

        return []


class TestDiffPainter:

    def test_text_survives_painting(self):
        output = paint(DIFF)

        assert b"\033[" in output
        assert strip_ansi(output.decode("utf-8")) == DIFF.decode("utf-8")

    def test_text_survives_syntax_highlighting(self):
        output = paint(DIFF, syntax=True)

        assert b"38;2;" in output
        assert strip_ansi(output.decode("utf-8")) == DIFF.decode("utf-8")

    def test_no_color_passes_bytes_through(self):
        data = DIFF + b"-caf\xe9\r\n"
        assert paint(data, color=False) == data

    def test_paired_changes_are_emphasized(self):
        output = paint(DIFF).decode("utf-8")
        minus_line = [line for line in output.splitlines() if "x = compute(a, b)" in strip_ansi(line)][0]

        # The dark theme's minus-emph background, #901011.
        assert "48;2;144;16;17m" + "b" in minus_line

    def test_unpaired_line_is_uniform(self):
        data = b"@@ -1 +1,2 @@\n-old\n+old\n+completely new stuff here\n"
        output = paint(data).decode("utf-8")
        plus_line = output.splitlines()[-1]

        # The dark theme's plus background, #002800, and nothing emphasized.
        assert "48;2;0;40;0" in plus_line
        assert "48;2;0;96;0" not in plus_line

    def test_opaque_line_is_written_raw(self):
        data = b"@@ -1 +1 @@\n-caf\xe9\n+cafe\n"
        output = paint(data)

        assert b"\n-caf\xe9\n" in output
        assert strip_ansi(output.decode("utf-8", "surrogateescape")).endswith("+cafe\n")

    def test_painting_failure_falls_back_to_raw_line(self, caplog):
        data = b"@@ -1,2 +1,2 @@\n boom\n-x\n+y\n"

        with caplog.at_level(logging.WARNING, logger="diffpaint.delta"):
            output = paint(data, highlighter=ExplodingHighlighter())

        lines = output.split(b"\n")

        assert lines[1] == b" boom"
        assert b"\033[" in lines[2]
        assert b"\033[" in lines[3]
        assert "input line 2" in caplog.text

    def test_line_numbers(self):
        output = strip_ansi(paint(DIFF, line_numbers=True).decode("utf-8")).splitlines()

        assert "   1 ⋮   1 │ import os" in output
        assert "   2 ⋮     │-x = compute(a, b)" in output
        assert "     ⋮   2 │+x = compute(a, c)" in output
        assert "   4 ⋮     │-return x" in output

    def test_no_markers(self):
        output = strip_ansi(paint(DIFF, keep_markers=False).decode("utf-8")).splitlines()
        assert "x = compute(a, c)" in output

    def test_wrapping(self):
        data = b"@@ -1 +1 @@\n-" + b"a" * 25 + b"\n+" + b"b" * 25 + b"\n"
        output = strip_ansi(paint(data, width=12).decode("utf-8")).splitlines()

        assert output[1:4] == ["-" + "a" * 11, "a" * 12, "a" * 2]

    def test_tabs_are_expanded(self):
        output = strip_ansi(paint(b"@@ -1 +1 @@\n-\tx\n+\ty\n", tab_width=2).decode("utf-8"))
        assert "-  x\n" in output

    def test_closed_output_stops_reading(self):
        consumed = []

        def lines():
            for line in DIFF.splitlines(True):
                consumed.append(line)
                yield line

        painter = DiffPainter(Config(syntax=False))

        with pytest.raises(OutputClosed):
            painter.run(lines(), BrokenSink())

        assert len(consumed) == 1

    def test_unknown_syntax_theme_disables_highlighting(self, caplog):
        with caplog.at_level(logging.WARNING, logger="diffpaint.delta"):
            painter = DiffPainter(Config(syntax_theme="no-such-style"))

        assert painter.highlighter is None
        assert "no-such-style" in caplog.text


class TestSyntaxHighlighter:

    def test_python_keyword(self):
        spans = SyntaxHighlighter("monokai").spans("import os", "frob.py")

        assert spans
        assert spans[0][:2] == (0, 6)
        assert spans[0][2].foreground is not None

    def test_unknown_language(self):
        assert SyntaxHighlighter().spans("whatever", "notes.unknownext") == []

    def test_spans_stay_in_line(self):
        text = "def f(x): return x  # comment"

        for (start, end, _) in SyntaxHighlighter().spans(text, language="python"):
            assert 0 <= start < end <= len(text)
