"""Tests for pairing minus and plus lines."""

import pytest
from hypothesis import given, settings, strategies as st

from diffpaint.align import (
    LinePair,
    align_lines,
    distance_lower_bound,
    line_distance,
    pair_block,
)
from diffpaint.errors import AlignmentOverflow

lines = st.lists(
    st.sampled_from([
        "return x",
        "return y",
        "x = compute(a, b)",
        "x = compute(a, c)",
        "print(x)",
        "",
        "}",
        "completely different text here",
    ]),
    max_size=8,
)


class TestLineDistance:

    def test_identical_lines(self):
        assert line_distance("foo(bar)", "foo(bar)") == 0.0

    def test_both_empty(self):
        assert line_distance("", "") == 0.0

    def test_one_empty(self):
        assert line_distance("abc", "") == 1.0

    def test_small_change_is_close(self):
        assert line_distance("print(foo)", "print(foo, bar)") == pytest.approx(5.0 / 25)

    def test_lower_bound_short_circuits(self):
        assert line_distance("aaaa", "bbbb", threshold=0.6) == 1.0

    @given(text1=st.text(alphabet="ab c(),", max_size=20), text2=st.text(alphabet="ab c(),", max_size=20))
    def test_lower_bound_is_a_bound(self, text1, text2):
        distance = line_distance(text1, text2)

        assert 0.0 <= distance <= 1.0
        assert distance_lower_bound(text1, text2) <= distance + 1e-9


class TestAlignLines:

    def test_unrelated_lines_stay_unpaired(self):
        alignment = align_lines(["completely unrelated text", "nothing in common"], ["xyz123"], threshold=0.6)

        assert alignment.pairs == []
        assert alignment.unpaired_minus == [0, 1]
        assert alignment.unpaired_plus == [0]

    def test_pairs_similar_line_out_of_position(self):
        alignment = align_lines(["x = 1", "print(foo)"], ["print(foo, bar)"])

        assert [(pair.minus_index, pair.plus_index) for pair in alignment.pairs] == [(1, 0)]
        assert alignment.unpaired_minus == [0]
        assert alignment.unpaired_plus == []

    def test_one_to_one(self):
        alignment = align_lines(["a = 1", "b = 2"], ["a = 10", "b = 20"])

        assert [(pair.minus_index, pair.plus_index) for pair in alignment.pairs] == [(0, 0), (1, 1)]

    def test_identical_line_pairs_with_zero_distance(self):
        alignment = align_lines(["same"], ["same"])
        assert alignment.pairs == [LinePair(0, 0, 0.0)]

    def test_overflow_raises(self):
        with pytest.raises(AlignmentOverflow):
            align_lines(["a"] * 3, ["a"] * 3, max_lines=5)

    @given(minus=lines, plus=lines, threshold=st.floats(min_value=0.05, max_value=1.0))
    @settings(max_examples=200)
    def test_pairs_never_cross(self, minus, plus, threshold):
        alignment = align_lines(minus, plus, threshold=threshold)
        pairs = alignment.pairs

        for (first, second) in zip(pairs, pairs[1:]):
            assert first.minus_index < second.minus_index
            assert first.plus_index < second.plus_index

        assert all(pair.distance < threshold for pair in pairs)

        paired_minus = [pair.minus_index for pair in pairs]
        paired_plus = [pair.plus_index for pair in pairs]

        assert sorted(paired_minus + alignment.unpaired_minus) == list(range(len(minus)))
        assert sorted(paired_plus + alignment.unpaired_plus) == list(range(len(plus)))


class TestPairBlock:

    @given(nminus=st.integers(min_value=1, max_value=12), nplus=st.integers(min_value=1, max_value=12),
           max_lines=st.integers(min_value=1, max_value=23))
    def test_oversized_blocks_degrade_to_unpaired(self, nminus, nplus, max_lines):
        minus = ["line {0}".format(i) for i in range(nminus)]
        plus = ["line {0}".format(i) for i in range(nplus)]

        alignment = pair_block(minus, plus, max_lines=max_lines)

        if nminus + nplus > max_lines:
            assert alignment.pairs == []
            assert alignment.unpaired_minus == list(range(nminus))
            assert alignment.unpaired_plus == list(range(nplus))
        else:
            assert alignment.pairs

    def test_one_sided_blocks(self):
        alignment = pair_block(["a", "b"], [])

        assert alignment.pairs == []
        assert alignment.unpaired_minus == [0, 1]
