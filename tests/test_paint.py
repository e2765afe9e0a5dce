"""Tests for composing syntax and diff styles."""

from hypothesis import given, strategies as st

from diffpaint.paint import StyledSpan, coalesce_spans, paint_line, spans_to_runs
from diffpaint.style import DEFAULT_STYLE, parse_style

KEYWORD = parse_style("bold fg:#ff0000")
NAME = parse_style("fg:#00ff00")
MINUS = parse_style("bg:#3f0001")
MINUS_EMPH = parse_style("bg:#901011")


class TestPaintLine:

    def test_plain_line_is_one_span(self):
        assert paint_line("hello") == [StyledSpan(0, 5, DEFAULT_STYLE)]

    def test_empty_line(self):
        assert paint_line("") == []

    def test_syntax_foreground_survives_diff_background(self):
        spans = paint_line("def f", syntax_spans=[(0, 3, KEYWORD), (4, 5, NAME)], line_style=MINUS)

        assert spans == [
            StyledSpan(0, 3, parse_style("bold fg:#ff0000 bg:#3f0001")),
            StyledSpan(3, 4, MINUS),
            StyledSpan(4, 5, parse_style("fg:#00ff00 bg:#3f0001")),
        ]

    def test_unpaired_line_is_uniform(self):
        spans = paint_line("removed", line_style=MINUS, emph_style=MINUS_EMPH)
        assert spans == [StyledSpan(0, 7, MINUS)]

    def test_changed_ranges_are_emphasized(self):
        spans = paint_line("x = foo(a)", line_style=MINUS, emph_style=MINUS_EMPH, non_emph_style=MINUS,
                           changed_ranges=[(4, 7)])

        assert spans == [
            StyledSpan(0, 4, MINUS),
            StyledSpan(4, 7, MINUS_EMPH),
            StyledSpan(7, 10, MINUS),
        ]

    def test_non_emph_defaults_to_line_style(self):
        spans = paint_line("ab", line_style=MINUS, emph_style=MINUS_EMPH, changed_ranges=[])
        assert spans == [StyledSpan(0, 2, MINUS)]

    def test_runs(self):
        spans = paint_line("ab", changed_ranges=[(1, 2)], emph_style=MINUS_EMPH)
        assert spans_to_runs("ab", spans) == [("a", DEFAULT_STYLE), ("b", MINUS_EMPH)]

    @given(text=st.text(alphabet="ab (),", max_size=30),
           cuts=st.lists(st.integers(min_value=0, max_value=30), max_size=6),
           paired=st.booleans())
    def test_spans_cover_line_minimally(self, text, cuts, paired):
        points = sorted(set([min(cut, len(text)) for cut in cuts]))
        changed = list(zip(points[::2], points[1::2])) if paired else None
        syntax = [(i, i + 1, KEYWORD) for i in range(0, len(text), 3)]

        spans = paint_line(text, syntax, MINUS, MINUS_EMPH, MINUS, changed)

        assert "".join([text[span.start:span.end] for span in spans]) == text
        assert all(span.start < span.end for span in spans)

        for (left, right) in zip(spans, spans[1:]):
            assert left.end == right.start
            assert left.style != right.style


class TestCoalesceSpans:

    def test_merges_equal_neighbours(self):
        spans = [StyledSpan(0, 1, MINUS), StyledSpan(1, 3, MINUS), StyledSpan(3, 3, NAME), StyledSpan(3, 4, NAME)]
        assert coalesce_spans(spans) == [StyledSpan(0, 3, MINUS), StyledSpan(3, 4, NAME)]
