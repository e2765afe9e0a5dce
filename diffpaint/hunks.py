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

"""Classification of unified diff lines and their grouping into hunks and change blocks.

Input is consumed once, forward only, as a sequence of byte lines. Hunks are yielded as soon as they complete, and every
line outside a hunk is yielded right away, so that only the lines of the hunk being read are ever buffered.
"""

import re
from collections import namedtuple

from .errors import EncodingError

CONTEXT = "context"
MINUS = "minus"
PLUS = "plus"
HEADER = "header"
OTHER = "other"

NO_NEWLINE = "\\ No newline at end of file"

hunk_header_pattern = re.compile("^(?P<head>@@"
                                 " -(?P<start1>[0-9]+)(?:,(?P<nlines1>[0-9]+))?"
                                 " \\+(?P<start2>[0-9]+)(?:,(?P<nlines2>[0-9]+))?"
                                 " @@)(?P<tail>.*)$")

file_header_prefixes = (
    "diff ",
    "index ",
    "--- ",
    "+++ ",
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
    "Binary files ",
)

commit_header_prefixes = (
    "commit ",
    "Merge: ",
    "Author: ",
    "AuthorDate: ",
    "Commit: ",
    "CommitDate: ",
    "Date: ",
)


class DiffLine(namedtuple("DiffLine", ["kind", "raw", "text", "number", "opaque"])):
    """One classified input line. The text is decoded and, for context, minus and plus lines, stripped of its marker.
    Opaque lines failed to decode as UTF-8 and carry their bytes as surrogate escapes.
    """

    __slots__ = ()

    @property
    def is_hunk_header(self):
        return self.kind == HEADER and self.text.startswith("@@")

    @property
    def is_commit_header(self):
        return self.kind == HEADER and self.text.startswith(commit_header_prefixes)


class ChangeBlock(object):
    """A run of minus lines followed by a run of plus lines.
    """

    def __init__(self):
        """Default constructor.
        """

        self.minus = []
        self.plus = []

        # Lines such as NO_NEWLINE, as (kind, index, line) to emit right after minus[index] or plus[index].
        self.notes = []

    def notes_after(self, kind, index):
        """Gets the notes attached after the given line.
        """
        return [line for (note_kind, note_index, line) in self.notes if note_kind == kind and note_index == index]


class Hunk(object):
    """A hunk of a diff, or a line outside of any hunk when the header is None.
    """

    def __init__(self, header=None, old_start=0, new_start=0, filename=None):
        """Default constructor.

        Args:
            header: The hunk header line.
            old_start: The first line number of the old side.
            new_start: The first line number of the new side.
            filename: The name of the file the hunk belongs to, for language detection.
        """

        self.header = header
        self.old_start = old_start
        self.new_start = new_start
        self.filename = filename

        # DiffLines and ChangeBlocks, in input order.
        self.segments = []

        self._block = None
        self._last = None

    def add(self, line):
        """Adds a line, grouping minus and plus lines into change blocks.

        Args:
            line: The DiffLine.
        """

        if line.kind == MINUS:

            if self._block is None or self._block.plus:
                self._block = ChangeBlock()
                self.segments.append(self._block)

            self._block.minus.append(line)
            self._last = (MINUS, len(self._block.minus) - 1)

        elif line.kind == PLUS:

            if self._block is None:
                self._block = ChangeBlock()
                self.segments.append(self._block)

            self._block.plus.append(line)
            self._last = (PLUS, len(self._block.plus) - 1)

        elif line.kind == OTHER and self._block is not None and line.text.startswith("\\"):
            self._block.notes.append(self._last + (line,))
        elif line.kind in (CONTEXT, HEADER, OTHER):
            self._block = None
            self.segments.append(line)
        else:
            assert False, "Invalid line kind."

    def lines(self):
        """Iterates over the lines of the hunk in input order, header excluded.
        """

        for segment in self.segments:

            if isinstance(segment, ChangeBlock):

                for (kind, block_lines) in ((MINUS, segment.minus), (PLUS, segment.plus)):

                    for (index, line) in enumerate(block_lines):

                        yield line

                        for note in segment.notes_after(kind, index):
                            yield note

            else:
                yield segment

#----------------------------------------------------------------------------------------------------------------------#
# Parsing.                                                                                                             #
#----------------------------------------------------------------------------------------------------------------------#

def decode_line(raw):
    """Decodes an input line as UTF-8.

    Args:
        raw: The line's bytes.

    Returns:
        The text.

    Raises:
        EncodingError: If the bytes are not valid UTF-8.
    """

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(raw, e)


def decode_text(raw):
    """Decodes an input line, falling back to a lossless surrogate escape decoding for invalid UTF-8.

    Args:
        raw: The line's bytes.

    Returns:
        A 2-tuple containing the text and whether the line is opaque.
    """

    try:
        return (decode_line(raw), False)
    except EncodingError:
        return (raw.decode("utf-8", "surrogateescape"), True)


def classify_outside(raw, text, number, opaque):
    """Classifies a line that is not part of a hunk.
    """

    if text.startswith(file_header_prefixes) or text.startswith(commit_header_prefixes):
        kind = HEADER
    else:
        kind = OTHER

    return DiffLine(kind, raw, text, number, opaque)


def filename_from_header(text):
    """Extracts the path from a "--- a/path" or "+++ b/path" line.

    Returns:
        The path, or None for /dev/null.
    """

    path = text[4:].split("\t")[0].strip()

    if path == "/dev/null":
        return None

    if path.startswith(("a/", "b/")):
        path = path[2:]

    return path


def parse_hunks(lines):
    """Parses a stream of diff lines into hunks.

    Args:
        lines: An iterable of byte lines, with or without their line terminators.

    Returns:
        A generator of Hunks. A Hunk with a None header wraps a single line found outside of any hunk.
    """

    (hunk, filename, minus_filename) = (None, None, None)
    (nlines1, nlines2) = (0, 0)
    number = 0

    for raw in lines:

        number += 1

        if raw.endswith(b"\n"):
            raw = raw[:-1]

        (text, opaque) = decode_text(raw)

        m = hunk_header_pattern.search(text)

        if hunk is not None and not m and not text.startswith("diff "):

            if nlines1 > 0 or nlines2 > 0:

                marker = text[:1]

                if marker == "-":
                    (kind, nlines1) = (MINUS, nlines1 - 1)
                elif marker == "+":
                    (kind, nlines2) = (PLUS, nlines2 - 1)
                elif marker == " " or text == "":
                    (kind, nlines1, nlines2) = (CONTEXT, nlines1 - 1, nlines2 - 1)
                else:
                    kind = OTHER

                if kind == OTHER:
                    hunk.add(DiffLine(kind, raw, text, number, opaque))
                else:
                    hunk.add(DiffLine(kind, raw, text[1:], number, opaque))

                continue

            # The hunk is complete, but a trailing NO_NEWLINE still belongs to it.
            if text.startswith("\\"):
                hunk.add(DiffLine(OTHER, raw, text, number, opaque))
                continue

        if hunk is not None:
            yield hunk
            hunk = None

        if m:

            (nlines1, nlines2) = m.group("nlines1", "nlines2")

            nlines1 = 1 if nlines1 is None else int(nlines1)
            nlines2 = 1 if nlines2 is None else int(nlines2)

            hunk = Hunk(DiffLine(HEADER, raw, text, number, opaque),
                        int(m.group("start1")), int(m.group("start2")),
                        filename)

            continue

        line = classify_outside(raw, text, number, opaque)

        if text.startswith("diff "):
            (filename, minus_filename) = (None, None)
        elif text.startswith("--- "):
            minus_filename = filename_from_header(text)
            filename = minus_filename
        elif text.startswith("+++ "):
            filename = filename_from_header(text) or minus_filename

        outside = Hunk(filename=filename)
        outside.add(line)

        yield outside

    if hunk is not None:
        yield hunk
