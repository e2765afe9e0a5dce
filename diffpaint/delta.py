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

"""The pipeline driver: parses hunks, pairs lines, computes intraline edits, paints and wraps, and writes the result.
"""

import logging

from .align import pair_block
from .edits import compute_opcodes
from .edits import opcode_char_ranges
from .edits import token_texts
from .edits import tokenize
from .errors import OutputClosed
from .errors import StyleParseError
from .highlight import SyntaxHighlighter
from .hunks import CONTEXT
from .hunks import HEADER
from .hunks import MINUS
from .hunks import OTHER
from .hunks import PLUS
from .hunks import ChangeBlock
from .hunks import hunk_header_pattern
from .hunks import parse_hunks
from .paint import paint_line
from .paint import spans_to_runs
from .process import calling_process
from .style import DEFAULT_STYLE
from .wrap import wrap_runs

logger = logging.getLogger(__name__)

MARKERS = {
    CONTEXT: " ",
    MINUS: "-",
    PLUS: "+",
}


class DiffPainter(object):
    """Paints a diff from a stream of byte lines onto a binary sink.
    """

    def __init__(self, config, highlighter=None):
        """Default constructor.

        Args:
            config: The Config.
            highlighter: The syntax highlighter; by default a SyntaxHighlighter for the configured theme, or none if
                syntax highlighting is off.
        """

        self.config = config
        self.styles = config.resolved_styles()

        if highlighter is None and config.syntax and config.color:

            try:
                highlighter = SyntaxHighlighter(config.effective_syntax_theme)
            except StyleParseError as e:
                logger.warning("Disabling syntax highlighting: %s", e)

        self.highlighter = highlighter

        # Line number counters, reset by every hunk header.
        self.old_number = 0
        self.new_number = 0

        self.out = None

    def run(self, lines, out):
        """Paints a whole diff. Each hunk is flushed as soon as it has been written.

        Args:
            lines: An iterable of byte lines.
            out: A binary file-like sink.

        Raises:
            OutputClosed: If the sink was closed; no further input is read.
        """

        self.out = out

        try:

            for hunk in parse_hunks(lines):

                if self.config.color:
                    self.write_hunk(hunk)
                else:
                    self.pass_through(hunk)

                out.flush()

        except BrokenPipeError:
            raise OutputClosed()

        logger.debug("Done painting for %s", calling_process.get() or "an unknown calling process")

    #------------------------------------------------------------------------------------------------------------------#
    # Output.                                                                                                          #
    #------------------------------------------------------------------------------------------------------------------#

    def write_text(self, text):
        self.out.write(text.encode("utf-8", "surrogateescape") + b"\n")

    def write_raw(self, line):
        self.out.write(line.raw + b"\n")

    def write_runs(self, runs):
        """Wraps and writes one logical line.
        """

        for physical_line in wrap_runs(runs, self.config.width):
            self.write_text(physical_line)

    def pass_through(self, hunk):
        """Writes a hunk unmodified.
        """

        if hunk.header is not None:
            self.write_raw(hunk.header)

        for line in hunk.lines():
            self.write_raw(line)

    #------------------------------------------------------------------------------------------------------------------#
    # Painting.                                                                                                        #
    #------------------------------------------------------------------------------------------------------------------#

    def write_hunk(self, hunk):
        """Paints and writes a hunk.
        """

        if hunk.header is not None:
            self.old_number = hunk.old_start
            self.new_number = hunk.new_start
            self.write_line(hunk.header, lambda: self.hunk_header_runs(hunk))

        for segment in hunk.segments:

            if isinstance(segment, ChangeBlock):
                self.write_block(segment, hunk.filename)
            elif segment.kind == CONTEXT:
                self.write_line(segment, lambda: self.code_runs(segment, hunk.filename, self.styles["zero"]))
                self.old_number += 1
                self.new_number += 1
            elif segment.kind == HEADER:
                self.write_line(segment, lambda: self.header_runs(segment))
            elif segment.kind == OTHER:
                self.write_raw(segment)
            else:
                assert False, "Invalid segment kind."

    def write_block(self, block, filename):
        """Paints and writes a change block: its minus lines, then its plus lines.
        """

        mode = self.config.tokenization
        minus_texts = [self.expand(line.text) for line in block.minus]
        plus_texts = [self.expand(line.text) for line in block.plus]

        alignment = pair_block(minus_texts, plus_texts,
                               self.config.max_line_distance, self.config.max_block_lines, mode)

        # Changed character ranges of paired lines, keyed by (kind, index).
        changed = {}

        for pair in alignment.pairs:

            (minus_text, plus_text) = (minus_texts[pair.minus_index], plus_texts[pair.plus_index])
            (minus_tokens, plus_tokens) = (tokenize(minus_text, mode), tokenize(plus_text, mode))

            opcodes = compute_opcodes(token_texts(minus_text, minus_tokens), token_texts(plus_text, plus_tokens),
                                      self.config.min_equal_length)

            changed[(MINUS, pair.minus_index)] = opcode_char_ranges(opcodes, minus_tokens, 1)
            changed[(PLUS, pair.plus_index)] = opcode_char_ranges(opcodes, plus_tokens, 2)

        for (kind, lines) in ((MINUS, block.minus), (PLUS, block.plus)):

            (line_style, emph, non_emph) = (self.styles[kind],
                                            self.styles[kind + "-emph"],
                                            self.styles[kind + "-non-emph"])

            for (index, line) in enumerate(lines):

                ranges = changed.get((kind, index))

                self.write_line(line, lambda: self.code_runs(line, filename, line_style, emph, non_emph, ranges))

                if kind == MINUS:
                    self.old_number += 1
                else:
                    self.new_number += 1

                for note in block.notes_after(kind, index):
                    self.write_raw(note)

    def write_line(self, line, make_runs):
        """Writes one painted line, falling back to the unmodified line if painting fails.

        Args:
            line: The DiffLine.
            make_runs: A function computing the line's (text, Style) runs.
        """

        if line.opaque:
            self.write_raw(line)
            return

        try:
            runs = make_runs()
        except Exception:
            logger.warning("Failed to paint input line %d; writing it unmodified", line.number, exc_info=True)
            self.write_raw(line)
            return

        self.write_runs(runs)

    def expand(self, text):
        return text.expandtabs(self.config.tab_width) if self.config.tab_width else text

    def code_runs(self, line, filename, line_style, emph=None, non_emph=None, changed_ranges=None):
        """Computes the runs of a context, minus or plus line.

        Args:
            line: The DiffLine.
            filename: The file name used for language detection.
            line_style: The diff style of the whole line.
            emph: The diff style of changed characters.
            non_emph: The diff style of unchanged characters.
            changed_ranges: The changed character ranges, or None for a line without a partner.

        Returns:
            A list of (text, Style) runs.
        """

        text = self.expand(line.text)

        if self.highlighter is not None:
            syntax_spans = self.highlighter.spans(text, filename)
        else:
            syntax_spans = []

        spans = paint_line(text, syntax_spans, line_style, emph, non_emph, changed_ranges)

        runs = self.gutter_runs(line.kind)

        if self.config.keep_markers:
            runs.append((MARKERS[line.kind], line_style))

        return runs + spans_to_runs(text, spans)

    def gutter_runs(self, kind):
        """Computes the line number gutter, e.g. "  12 ⋮  13 │".
        """

        if not self.config.line_numbers:
            return []

        if kind == CONTEXT:
            (old, new) = (self.old_number, self.new_number)
        elif kind == MINUS:
            (old, new) = (self.old_number, None)
        elif kind == PLUS:
            (old, new) = (None, self.new_number)
        else:
            assert False, "Invalid line kind."

        gutter = "{0:>4} ⋮{1:>4} │".format("" if old is None else old, "" if new is None else new)

        return [(gutter, self.styles["line-number"])]

    def hunk_header_runs(self, hunk):
        """Computes the runs of a hunk header: the "@@ ... @@" part in the hunk header style, followed by the
        syntax-highlighted context the diff tool appended to it.
        """

        m = hunk_header_pattern.search(hunk.header.text)
        (head, tail) = m.group("head", "tail")

        runs = [(head, self.styles["hunk-header"])]

        if tail:

            if self.highlighter is not None:
                spans = paint_line(tail, self.highlighter.spans(tail, hunk.filename), DEFAULT_STYLE)
            else:
                spans = paint_line(tail)

            runs.extend(spans_to_runs(tail, spans))

        return runs

    def header_runs(self, line):
        """Computes the runs of a file or commit header line.
        """

        if line.is_commit_header:
            style = self.styles["commit"]
        else:
            style = self.styles["file"]

        return [(self.expand(line.text), style)]
