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

"""Exceptions raised while painting a diff.

Everything except a plain output I/O failure is recoverable: the caller logs it and degrades the affected line, block
or style to an unhighlighted rendition.
"""


class DiffPaintError(Exception):
    """The base class of all diffpaint errors.
    """


class StyleParseError(DiffPaintError, ValueError):
    """Raised for a malformed style specification or theme entry.
    """

    def __init__(self, spec, reason):
        """Default constructor.

        Args:
            spec: The offending specification string.
            reason: A short description of what is wrong with it.
        """
        super(StyleParseError, self).__init__("Invalid style \"{0}\": {1}.".format(spec, reason))

        self.spec = spec
        self.reason = reason


class AlignmentOverflow(DiffPaintError):
    """Raised when a change block has more lines than the alignment is allowed to consider.
    """

    def __init__(self, nminus, nplus, max_lines):
        """Default constructor.

        Args:
            nminus: The number of minus lines in the block.
            nplus: The number of plus lines in the block.
            max_lines: The configured ceiling.
        """
        super(AlignmentOverflow, self).__init__("Change block of {0} minus and {1} plus lines exceeds {2} lines."
                                                .format(nminus, nplus, max_lines))

        self.nminus = nminus
        self.nplus = nplus
        self.max_lines = max_lines


class EncodingError(DiffPaintError):
    """Raised when an input line is not valid UTF-8.
    """

    def __init__(self, raw, cause):
        super(EncodingError, self).__init__("Undecodable input line: {0}".format(cause))

        self.raw = raw
        self.cause = cause


class OutputClosed(DiffPaintError):
    """Raised when the output sink goes away (e.g. the pager quit). This ends the run successfully.
    """
