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

"""Width-aware wrapping of styled lines into physical terminal lines.

Text is walked one display cluster at a time: a base character together with the combining marks, joiners, variation
selectors and modifiers that render with it. Clusters are never split, and a cluster that does not fit in what is left of
a physical line moves to the next one in full, even if that leaves a column unfilled. Where a line wraps, the active
style is reset before the break and reopened after it, so that no color bleeds into the terminal margin or the pager.
"""

import re
import unicodedata

import wcwidth

from .style import DEFAULT_STYLE
from .style import RESET

ZWJ = "\u200d"

ansi_pattern = re.compile("\033\\[[0-9;]*m")


def is_regional_indicator(ch):
    return "\U0001f1e6" <= ch <= "\U0001f1ff"


def is_extender(ch):
    """Whether a character extends the display cluster before it.
    """

    category = unicodedata.category(ch)

    if category in ("Mn", "Me", "Mc"):
        return True

    # Variation selectors, emoji modifiers and tag characters.
    if "\ufe00" <= ch <= "\ufe0f" or "\U0001f3fb" <= ch <= "\U0001f3ff" or "\U000e0020" <= ch <= "\U000e007f":
        return True

    return category not in ("Cc", "Cs") and wcwidth.wcwidth(ch) == 0


def iter_clusters(text):
    """Splits text into display clusters.

    Args:
        text: The text.

    Returns:
        A generator of non-empty substrings that concatenate to the text.
    """

    (i, n) = (0, len(text))

    while i < n:

        ch = text[i]
        j = i + 1

        if ch == "\r" and j < n and text[j] == "\n":
            j += 1
        elif is_regional_indicator(ch) and j < n and is_regional_indicator(text[j]):
            j += 1

        while j < n:

            if text[j] == ZWJ:

                # A joiner glues the following character onto the cluster.
                j += 1

                if j < n:
                    j += 1

            elif is_extender(text[j]):
                j += 1
            else:
                break

        yield text[i:j]

        i = j


def cluster_width(cluster):
    """Gets the number of terminal columns a display cluster occupies.

    Returns:
        0 for zero-width and control clusters, 2 for wide clusters, 1 otherwise.
    """

    base = cluster[0]
    category = unicodedata.category(base)

    # Undecodable input bytes, carried as surrogate escapes.
    if category == "Cs":
        return 1

    if is_regional_indicator(base):
        return 2 if len(cluster) > 1 and is_regional_indicator(cluster[1]) else 1

    width = wcwidth.wcwidth(base)

    if width <= 0:
        return 0

    # An emoji presentation selector makes a narrow symbol wide.
    if width == 1 and "\ufe0f" in cluster:
        return 2

    return min(width, 2)


def display_width(text):
    """Gets the number of terminal columns a string occupies.
    """
    return sum([cluster_width(cluster) for cluster in iter_clusters(text)])


def strip_ansi(text):
    """Removes SGR escape sequences.
    """
    return ansi_pattern.sub("", text)


def transition(current, target):
    """Renders the escape sequence switching from one style to another.

    Args:
        current: The active style.
        target: The style to switch to.

    Returns:
        The escape sequence, possibly empty.
    """

    if current == target:
        return ""

    target_codes = target.codes()

    if not current.codes():
        return target.sgr()
    elif not target_codes:
        return RESET
    else:
        return "\033[0;" + ";".join(target_codes) + "m"

#----------------------------------------------------------------------------------------------------------------------#
# Wrapping.                                                                                                            #
#----------------------------------------------------------------------------------------------------------------------#

class WrapState(object):
    """The layout state of the physical line being filled.
    """

    def __init__(self):
        """Default constructor.
        """

        self.column = 0
        self.style = DEFAULT_STYLE


def layout(runs, width):
    """Distributes the clusters of a styled line over physical lines. The break points depend on the text alone.

    Args:
        runs: The (text, Style) runs of the line.
        width: The number of columns per physical line; 0 or None disables wrapping.

    Returns:
        A list of physical lines, each a list of (text, Style) pieces. There is always at least one physical line.
    """

    text = "".join([run_text for (run_text, _) in runs])
    styles = [style for (run_text, style) in runs for _ in run_text]

    lines = [[]]
    state = WrapState()
    start = 0

    # Clusters come from the whole line, since a style boundary may fall inside one.
    for cluster in iter_clusters(text):

        end = start + len(cluster)
        w = cluster_width(cluster)

        # A cluster too wide for an empty line is emitted on its own rather than never.
        if width and state.column > 0 and state.column + w > width:
            lines.append([])
            state.column = 0

        piece_start = start

        for i in range(start + 1, end + 1):

            if i == end or styles[i] != styles[piece_start]:
                lines[-1].append((text[piece_start:i], styles[piece_start]))
                piece_start = i

        state.column += w
        start = end

    return lines


def render(physical_line):
    """Renders a physical line, opening styles as they change and closing the active one at the end.

    Args:
        physical_line: A list of (text, Style) pieces.

    Returns:
        The text with SGR escapes.
    """

    state = WrapState()
    parts = []

    for (piece, style) in physical_line:

        parts.append(transition(state.style, style))
        parts.append(piece)
        state.style = style

    parts.append(transition(state.style, DEFAULT_STYLE))

    return "".join(parts)


def wrap_runs(runs, width):
    """Wraps a styled line.

    Args:
        runs: The (text, Style) runs of the line.
        width: The number of columns per physical line; 0 or None disables wrapping.

    Returns:
        A generator of physical lines with SGR escapes and without line terminators.
    """

    for physical_line in layout(runs, width):
        yield render(physical_line)


def break_offsets(runs, width):
    """Gets the character offsets, into the concatenated text of the runs, at which physical lines after the first
    start.
    """

    (offsets, offset) = ([], 0)

    for (i, physical_line) in enumerate(layout(runs, width)):

        if i > 0:
            offsets.append(offset)

        offset += sum([len(piece) for (piece, _) in physical_line])

    return offsets
