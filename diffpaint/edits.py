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

"""Intraline edit scripts: tokenization, Myers' difference algorithm over token sequences, and opcode post-processing
filters.

Opcodes are styled after those of the difflib library: 5-tuples (tag, start1, end1, start2, end2) where the tag is one
of {"equal", "insert", "delete", "replace"} and the ranges index into the first and second token sequences.
"""

import re
from abc import ABCMeta
from abc import abstractmethod
from collections import namedtuple

TAGS = ("equal", "insert", "delete", "replace")

TOKENIZATION_MODES = ("word", "char")

word_pattern = re.compile(r"\w+|\s+|[^\w\s]")


class Opcode(namedtuple("Opcode", ["tag", "start1", "end1", "start2", "end2"])):
    """An edit script opcode.
    """

    __slots__ = ()


#----------------------------------------------------------------------------------------------------------------------#
# Tokenization.                                                                                                        #
#----------------------------------------------------------------------------------------------------------------------#

def tokenize(text, mode="word"):
    """Splits a line into tokens that partition it exactly.

    Args:
        text: The line.
        mode: "word" for runs of word characters, runs of whitespace and single punctuation characters; "char" for one
            token per character.

    Returns:
        A list of (start, end) character offsets.
    """

    if mode == "word":
        return [(m.start(0), m.end(0)) for m in word_pattern.finditer(text)]
    elif mode == "char":
        return [(i, i + 1) for i in range(len(text))]
    else:
        raise ValueError("Invalid tokenization mode \"{0}\".".format(mode))


def token_texts(text, tokens):
    """Gets the substrings covered by the given tokens.
    """
    return [text[start:end] for (start, end) in tokens]

#----------------------------------------------------------------------------------------------------------------------#
# Opcode post-processing filters.                                                                                      #
#----------------------------------------------------------------------------------------------------------------------#

class OpcodeFilter(metaclass=ABCMeta):
    """An abstract base class for implementing edit script opcode post-processing filters.
    """

    @abstractmethod
    def __call__(self, opcodes, seq1, seq2):
        """Post-processes the given edit script opcodes arising from the difference of two token sequences.

        Args:
            opcodes: The opcodes.
            seq1: The first token sequence.
            seq2: The second token sequence.

        Returns:
            The post-processed opcodes.
        """


class MergeFilter(OpcodeFilter):
    """An implementation of OpcodeFilter for merging consecutive opcodes. Opcodes with equal tags are concatenated, and
    any run of adjacent "delete", "insert" and "replace" opcodes becomes a single "replace" covering both ranges.
    """

    def __call__(self, opcodes, seq1, seq2):

        merged = []

        for opcode in opcodes:

            # Drop empty opcodes; they cover nothing on either side.
            if opcode.start1 == opcode.end1 and opcode.start2 == opcode.end2:
                continue

            if merged:

                previous = merged[-1]

                assert previous.end1 == opcode.start1 and previous.end2 == opcode.start2, \
                    "The opcode boundary invariant does not hold."

                tag = MergeFilter.merged_tag(previous.tag, opcode.tag)

                if tag:
                    merged[-1] = Opcode(tag, previous.start1, opcode.end1, previous.start2, opcode.end2)
                    continue

            merged.append(opcode)

        return merged

    @staticmethod
    def merged_tag(tag1, tag2):
        """Gets the tag of two adjacent opcodes if they merge.

        Args:
            tag1: The left tag.
            tag2: The right tag.

        Returns:
            The merged tag, or None if the opcodes stay separate.
        """

        if tag1 == tag2:
            return tag1
        elif tag1 != "equal" and tag2 != "equal":
            return "replace"
        else:
            return None


class CoalesceFilter(MergeFilter):
    """An implementation of OpcodeFilter for absorbing short equality regions into the difference regions around them.
    An "equal" opcode flanked on both sides by difference opcodes and covering fewer than a minimum number of characters
    is reassigned as "replace" and merged with its neighbors, so that a changed word is not fragmented around an
    incidental shared character. Running the filter twice gives the same result as running it once.
    """

    def __init__(self, min_length=2):
        """Default constructor.

        Args:
            min_length: The minimum number of characters an interior equality region needs to survive.
        """
        self.min_length = min_length

    def __call__(self, opcodes, seq1, seq2):

        opcodes = super(CoalesceFilter, self).__call__(opcodes, seq1, seq2)

        for i in range(1, len(opcodes) - 1):

            (oc_left, oc_middle, oc_right) = opcodes[(i - 1):(i + 2)]

            if not (oc_left.tag != "equal" and oc_middle.tag == "equal" and oc_right.tag != "equal"):
                continue

            if sum([len(token) for token in seq1[oc_middle.start1:oc_middle.end1]]) < self.min_length:
                opcodes[i] = oc_middle._replace(tag="replace")

        return super(CoalesceFilter, self).__call__(opcodes, seq1, seq2)


merge_filter = MergeFilter()

#----------------------------------------------------------------------------------------------------------------------#
# Myers' diff algorithm.                                                                                               #
#----------------------------------------------------------------------------------------------------------------------#

def myers_diff(seq1, seq2):
    """Computes a shortest edit script between two sequences by recursively bisecting them with the middle snake of
    myers_bisect(). The recursion is unrolled onto an explicit stack of index ranges.

    Args:
        seq1: The first sequence.
        seq2: The second sequence.

    Returns:
        A list of merged opcodes partitioning both sequences.
    """

    opcodes = []

    # Stack entries are either pending (start1, end1, start2, end2) ranges or finished opcodes.
    stack = [(0, len(seq1), 0, len(seq2))]

    while stack:

        entry = stack.pop()

        if isinstance(entry, Opcode):
            opcodes.append(entry)
            continue

        (start1, end1, start2, end2) = entry

        # Trim common prefixes and suffixes for speed and to ensure a nontrivial bisection.

        (lo1, lo2) = (start1, start2)

        while lo1 < end1 and lo2 < end2 and seq1[lo1] == seq2[lo2]:
            lo1 += 1
            lo2 += 1

        if lo1 > start1:
            opcodes.append(Opcode("equal", start1, lo1, start2, lo2))

        (hi1, hi2) = (end1, end2)

        while hi1 > lo1 and hi2 > lo2 and seq1[hi1 - 1] == seq2[hi2 - 1]:
            hi1 -= 1
            hi2 -= 1

        if hi1 < end1:
            stack.append(Opcode("equal", hi1, end1, hi2, end2))

        if lo1 == hi1 and lo2 == hi2:
            continue
        elif lo1 == hi1:
            opcodes.append(Opcode("insert", lo1, hi1, lo2, hi2))
        elif lo2 == hi2:
            opcodes.append(Opcode("delete", lo1, hi1, lo2, hi2))
        else:

            split = myers_bisect(seq1, seq2, lo1, hi1, lo2, hi2)

            # Insert a "replace" opcode if the bisection is trivial.
            if split is None or split == (lo1, lo2) or split == (hi1, hi2):
                opcodes.append(Opcode("replace", lo1, hi1, lo2, hi2))
            # Perform the bisection; the left half is popped first.
            else:
                (x, y) = split
                stack.append((x, hi1, y, hi2))
                stack.append((lo1, x, lo2, y))

    return merge_filter(opcodes, seq1, seq2)


def myers_bisect(seq1, seq2, start1, end1, start2, end2):
    """Finds the middle snake of two subsequences with the linear space refinement of Myers' algorithm, which is
    described in the 1986 paper "An O(ND) Difference Algorithm and its Variations". Frontiers are kept in flat arrays
    indexed by diagonal.

    Args:
        seq1: The first sequence.
        seq2: The second sequence.
        start1: The start of the first subsequence.
        end1: The end of the first subsequence.
        start2: The start of the second subsequence.
        end2: The end of the second subsequence.

    Returns:
        The absolute (index1, index2) bisection point, or None if the subsequences have nothing in common.
    """

    l1 = end1 - start1
    l2 = end2 - start2

    max_d = (l1 + l2 + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d + 2

    # Furthest reaching x coordinate per diagonal; -1 marks diagonals not reached yet.
    frontier_forward = [-1] * v_length
    frontier_forward[v_offset + 1] = 0
    frontier_backward = frontier_forward[:]

    delta = l1 - l2

    # First overlap will occur in the forward direction if delta is odd, and in the backward direction otherwise.
    front = delta % 2 != 0

    (k1_start, k1_end, k2_start, k2_end) = (0, 0, 0, 0)

    for d in range(max_d):

        # Build D-paths from (D - 1)-paths in the forward direction.
        for k1 in range(-d + k1_start, d + 1 - k1_end, 2):

            k1_offset = v_offset + k1

            if k1 == -d or (k1 != d and frontier_forward[k1_offset - 1] < frontier_forward[k1_offset + 1]):
                x1 = frontier_forward[k1_offset + 1]
            else:
                x1 = frontier_forward[k1_offset - 1] + 1

            y1 = x1 - k1

            # Move the frontier forward for each match.
            while x1 < l1 and y1 < l2 and seq1[start1 + x1] == seq2[start2 + y1]:
                x1 += 1
                y1 += 1

            frontier_forward[k1_offset] = x1

            # Prune the search range if falling out of bounds.
            if x1 > l1:
                k1_end += 2
            elif y1 > l2:
                k1_start += 2
            elif front:

                k2_offset = v_offset + delta - k1

                if 0 <= k2_offset < v_length and frontier_backward[k2_offset] != -1:

                    # Translate backward coordinates to forward coordinates and check for overlap.
                    if x1 >= l1 - frontier_backward[k2_offset]:
                        return (start1 + x1, start2 + y1)

        # Build D-paths from (D - 1)-paths in the backward direction.
        for k2 in range(-d + k2_start, d + 1 - k2_end, 2):

            k2_offset = v_offset + k2

            if k2 == -d or (k2 != d and frontier_backward[k2_offset - 1] < frontier_backward[k2_offset + 1]):
                x2 = frontier_backward[k2_offset + 1]
            else:
                x2 = frontier_backward[k2_offset - 1] + 1

            y2 = x2 - k2

            # Move the frontier backward for each match.
            while x2 < l1 and y2 < l2 and seq1[end1 - x2 - 1] == seq2[end2 - y2 - 1]:
                x2 += 1
                y2 += 1

            frontier_backward[k2_offset] = x2

            if x2 > l1:
                k2_end += 2
            elif y2 > l2:
                k2_start += 2
            elif not front:

                k1_offset = v_offset + delta - k2

                if 0 <= k1_offset < v_length and frontier_forward[k1_offset] != -1:

                    x1 = frontier_forward[k1_offset]
                    y1 = v_offset + x1 - k1_offset

                    if x1 >= l1 - x2:
                        return (start1 + x1, start2 + y1)

    return None

#----------------------------------------------------------------------------------------------------------------------#
# Edit scripts over lines.                                                                                             #
#----------------------------------------------------------------------------------------------------------------------#

def compute_opcodes(seq1, seq2, min_length=0):
    """Computes the post-processed edit script between two token sequences.

    Args:
        seq1: The minus line's token texts.
        seq2: The plus line's token texts.
        min_length: The minimum size of an interior equality region in characters; 0 disables coalescing.

    Returns:
        The opcodes.
    """

    opcodes = myers_diff(seq1, seq2)

    if min_length > 0:
        opcodes = CoalesceFilter(min_length)(opcodes, seq1, seq2)

    return opcodes


def check_partition(opcodes, n1, n2):
    """Checks that opcodes partition both token sequences exactly: contiguous, in order, with no gaps or overlap.

    Args:
        opcodes: The opcodes.
        n1: The length of the first sequence.
        n2: The length of the second sequence.

    Returns:
        Whether the partition invariant holds.
    """

    (pos1, pos2) = (0, 0)

    for (tag, start1, end1, start2, end2) in opcodes:

        if tag not in TAGS or start1 != pos1 or start2 != pos2 or end1 < start1 or end2 < start2:
            return False

        if (tag == "insert" and start1 != end1) or (tag == "delete" and start2 != end2):
            return False

        if tag == "equal" and end1 - start1 != end2 - start2:
            return False

        (pos1, pos2) = (end1, end2)

    return pos1 == n1 and pos2 == n2


def opcode_char_ranges(opcodes, tokens, side):
    """Maps the difference regions of an edit script from token ranges back to character ranges over one line.

    Args:
        opcodes: The opcodes.
        tokens: The (start, end) character offsets of that line's tokens.
        side: 1 for the minus line, 2 for the plus line.

    Returns:
        A list of disjoint, ascending (start, end) character ranges.
    """

    ranges = []

    for opcode in opcodes:

        if opcode.tag == "equal":
            continue

        if side == 1:
            (start, end) = (opcode.start1, opcode.end1)
        elif side == 2:
            (start, end) = (opcode.start2, opcode.end2)
        else:
            assert False, "Invalid side."

        if start == end:
            continue

        (char_start, char_end) = (tokens[start][0], tokens[end - 1][1])

        if ranges and ranges[-1][1] == char_start:
            ranges[-1] = (ranges[-1][0], char_end)
        else:
            ranges.append((char_start, char_end))

    return ranges


def changed_length(opcodes, seq1, seq2):
    """Counts the characters covered by difference regions on both sides.
    """

    total = 0

    for opcode in opcodes:

        if opcode.tag != "equal":
            total += sum([len(token) for token in seq1[opcode.start1:opcode.end1]])
            total += sum([len(token) for token in seq2[opcode.start2:opcode.end2]])

    return total
