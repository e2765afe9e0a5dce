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

"""Composition of the syntax and diff style layers into styled spans.

Every character starts from its syntax style. The diff layer is then overlaid, contributing only the fields it sets
explicitly (usually the background), so that syntax foregrounds survive underneath diff backgrounds.
"""

from collections import namedtuple

from .style import DEFAULT_STYLE
from .style import merge_styles


class StyledSpan(namedtuple("StyledSpan", ["start", "end", "style"])):
    """A styled character range over one line.
    """

    __slots__ = ()


def syntax_layer(length, syntax_spans):
    """Expands syntax spans into one Style per character.

    Args:
        length: The length of the line.
        syntax_spans: The (start, end, Style) ranges of the syntax highlighter; later ranges win where they overlap.

    Returns:
        A list of Styles.
    """

    styles = [DEFAULT_STYLE] * length

    for (start, end, style) in syntax_spans:

        (start, end) = (max(start, 0), min(end, length))

        if start < end:
            styles[start:end] = [style] * (end - start)

    return styles


def diff_layer(length, line_style, emph_style=None, non_emph_style=None, changed_ranges=None):
    """Computes the diff style of every character.

    Args:
        length: The length of the line.
        line_style: The uniform style of a line without a partner.
        emph_style: The style of changed characters in a paired line.
        non_emph_style: The style of unchanged characters in a paired line.
        changed_ranges: The (start, end) ranges that changed with respect to the partner line, or None if the line has no
            partner.

    Returns:
        A list of Styles.
    """

    if changed_ranges is None:
        return [line_style] * length

    styles = [non_emph_style if non_emph_style is not None else line_style] * length

    for (start, end) in changed_ranges:

        (start, end) = (max(start, 0), min(end, length))

        if start < end:
            styles[start:end] = [emph_style] * (end - start)

    return styles


def coalesce_spans(spans):
    """Merges adjacent spans with identical styles and drops empty ones.

    Args:
        spans: StyledSpans, ascending and non-overlapping.

    Returns:
        The minimal list of StyledSpans covering the same characters with the same styles.
    """

    coalesced = []

    for span in spans:

        if span.start >= span.end:
            continue

        if coalesced and coalesced[-1].end == span.start and coalesced[-1].style == span.style:
            coalesced[-1] = coalesced[-1]._replace(end=span.end)
        else:
            coalesced.append(span)

    return coalesced


def paint_line(text, syntax_spans=(), line_style=DEFAULT_STYLE, emph_style=None, non_emph_style=None,
               changed_ranges=None):
    """Paints one line.

    Args:
        text: The line.
        syntax_spans: The syntax highlighter's (start, end, Style) ranges.
        line_style: The diff style of the whole line.
        emph_style: The diff style of changed characters, for a paired line.
        non_emph_style: The diff style of unchanged characters, for a paired line.
        changed_ranges: The changed character ranges, or None for a line without a partner.

    Returns:
        The minimal list of StyledSpans covering the line.
    """

    length = len(text)

    syntax = syntax_layer(length, syntax_spans)
    overlay = diff_layer(length, line_style, emph_style, non_emph_style, changed_ranges)

    merged = {}
    spans = []

    for i in range(length):

        key = (syntax[i], overlay[i])
        style = merged.get(key)

        if style is None:
            style = merged[key] = merge_styles(*key)

        spans.append(StyledSpan(i, i + 1, style))

    return coalesce_spans(spans)


def spans_to_runs(text, spans):
    """Converts spans into (text, Style) runs for the wrapper.
    """
    return [(text[span.start:span.end], span.style) for span in spans]
