# -*- coding: utf-8 -*-
#
# Copyright (c) 2011 Roy Liu
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#   * Redistributions of source code must retain the above copyright notice,
#     this list of conditions and the following disclaimer.
#   * Redistributions in binary form must reproduce the above copyright notice,
#     this list of conditions and the following disclaimer in the documentation
#     and/or other materials provided with the distribution.
#   * Neither the name of the author nor the names of any contributors may be
#     used to endorse or promote products derived from this software without
#     specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDERS OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

"""Pairing of the minus and plus lines of a change block.

Lines are paired by a global alignment in the style of Needleman-Wunsch: matching minus line i with plus line j costs
their normalized token edit distance, while leaving a line unpaired costs half the dissimilarity threshold G. Leaving
both lines of a would-be pair unpaired therefore costs exactly G, and a pair is only ever accepted when its distance is
strictly below G. The optimal alignment is order preserving, so pairs never cross.
"""

import logging
from collections import Counter
from collections import namedtuple

from .edits import changed_length
from .edits import myers_diff
from .edits import token_texts
from .edits import tokenize
from .errors import AlignmentOverflow

logger = logging.getLogger(__name__)

# Traceback moves.
MATCH = 0
SKIP_MINUS = 1
SKIP_PLUS = 2


class LinePair(namedtuple("LinePair", ["minus_index", "plus_index", "distance"])):
    """An association between one minus line and one plus line of a change block.
    """

    __slots__ = ()


class Alignment(namedtuple("Alignment", ["pairs", "unpaired_minus", "unpaired_plus"])):
    """The pairs of a change block together with the indices of the lines left unpaired.
    """

    __slots__ = ()


def distance_lower_bound(text1, text2):
    """Bounds the normalized edit distance of two lines from below by comparing their character multisets. Every
    character that one line has more of than the other must lie in a difference region.

    Args:
        text1: The first line.
        text2: The second line.

    Returns:
        A lower bound in [0, 1].
    """

    total = len(text1) + len(text2)

    if total == 0:
        return 0.0

    (counts1, counts2) = (Counter(text1), Counter(text2))
    surplus = sum(((counts1 - counts2) + (counts2 - counts1)).values())

    return float(surplus) / total


def line_distance(text1, text2, mode="word", threshold=None):
    """Computes the normalized token-level edit distance of two lines: the number of characters in difference regions
    on either side, divided by the total number of characters.

    Args:
        text1: The minus line.
        text2: The plus line.
        mode: The tokenization mode.
        threshold: If given, a lower bound that already reaches it is returned without running the full edit distance.

    Returns:
        The distance in [0, 1]; 0 for identical lines.
    """

    total = len(text1) + len(text2)

    if total == 0:
        return 0.0

    if threshold is not None:

        bound = distance_lower_bound(text1, text2)

        if bound >= threshold:
            return bound

    seq1 = token_texts(text1, tokenize(text1, mode))
    seq2 = token_texts(text2, tokenize(text2, mode))

    return float(changed_length(myers_diff(seq1, seq2), seq1, seq2)) / total


def align_lines(minus, plus, threshold=0.6, max_lines=256, mode="word"):
    """Computes an order-preserving optimal pairing of minus and plus lines.

    Args:
        minus: The texts of the minus lines.
        plus: The texts of the plus lines.
        threshold: The dissimilarity threshold G; only pairs with a distance strictly below it are accepted.
        max_lines: The ceiling on the number of lines in the block.
        mode: The tokenization mode used by the line distance.

    Returns:
        An Alignment.

    Raises:
        AlignmentOverflow: If the block has more than max_lines lines.
    """

    (m, n) = (len(minus), len(plus))

    if m + n > max_lines:
        raise AlignmentOverflow(m, n, max_lines)

    gap = threshold / 2.0

    distances = [[line_distance(minus[i], plus[j], mode, threshold) for j in range(n)] for i in range(m)]

    # The (m + 1) x (n + 1) cost table and its traceback moves, filled in increasing index order.

    costs = [[0.0] * (n + 1) for _ in range(m + 1)]
    moves = [[MATCH] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        costs[i][0] = i * gap
        moves[i][0] = SKIP_MINUS

    for j in range(1, n + 1):
        costs[0][j] = j * gap
        moves[0][j] = SKIP_PLUS

    for i in range(1, m + 1):

        (row, previous_row) = (costs[i], costs[i - 1])

        for j in range(1, n + 1):

            # Ties prefer gaps, so that a pair is only taken when strictly cheaper.
            (cost, move) = (previous_row[j] + gap, SKIP_MINUS)

            if row[j - 1] + gap < cost:
                (cost, move) = (row[j - 1] + gap, SKIP_PLUS)

            if previous_row[j - 1] + distances[i - 1][j - 1] < cost:
                (cost, move) = (previous_row[j - 1] + distances[i - 1][j - 1], MATCH)

            row[j] = cost
            moves[i][j] = move

    # Trace the optimal path back from the bottom right corner.

    pairs = []
    (i, j) = (m, n)

    while i > 0 or j > 0:

        move = moves[i][j]

        if move == MATCH:

            distance = distances[i - 1][j - 1]

            # Never pair lines more dissimilar than an unrelated deletion and insertion.
            if distance < threshold:
                pairs.append(LinePair(i - 1, j - 1, distance))

            i -= 1
            j -= 1

        elif move == SKIP_MINUS:
            i -= 1
        elif move == SKIP_PLUS:
            j -= 1
        else:
            assert False, "Invalid traceback move."

    pairs.reverse()

    paired_minus = set([pair.minus_index for pair in pairs])
    paired_plus = set([pair.plus_index for pair in pairs])

    return Alignment(pairs,
                     [i for i in range(m) if i not in paired_minus],
                     [j for j in range(n) if j not in paired_plus])


def unpaired(m, n):
    """Creates an Alignment with every line unpaired.
    """
    return Alignment([], list(range(m)), list(range(n)))


def pair_block(minus, plus, threshold=0.6, max_lines=256, mode="word"):
    """Pairs the lines of a change block, degrading to an all-unpaired alignment for oversized blocks.

    Args:
        minus: The texts of the minus lines.
        plus: The texts of the plus lines.
        threshold: The dissimilarity threshold G.
        max_lines: The ceiling on the number of lines in the block.
        mode: The tokenization mode.

    Returns:
        An Alignment.
    """

    if not minus or not plus:
        return unpaired(len(minus), len(plus))

    try:
        return align_lines(minus, plus, threshold, max_lines, mode)
    except AlignmentOverflow as e:
        logger.debug("Not pairing lines: %s", e)
        return unpaired(len(minus), len(plus))
